from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
import sys
import textwrap
from typing import IO, Any

import pytest

from texrunner.core import jobs as jobs_module
from texrunner.core.config import BuildConfig


@dataclass
class ScriptedRun:
    """Output, exit status and duration (in polls) of one fake engine run."""

    output: str = ""
    returncode: int = 0
    polls: int = 0


@dataclass
class FakeEngine:
    """Stand-in for ``subprocess.Popen`` driven by per-job scripts."""

    scripts: dict[str, list[ScriptedRun]] = field(default_factory=dict)
    processes: list[FakeProcess] = field(default_factory=list)
    failing: set[str] = field(default_factory=set)
    max_running: int = 0

    def script(self, jobname: str, *runs: ScriptedRun) -> None:
        self.scripts[jobname] = list(runs)

    @property
    def running(self) -> list[FakeProcess]:
        return [process for process in self.processes if process.running]

    def spawned(self, jobname: str) -> list[FakeProcess]:
        return [process for process in self.processes if process.jobname == jobname]

    def __call__(self, argv: list[str], *, stdout: IO[str], **_kwargs: Any) -> FakeProcess:
        jobname = Path(argv[-1]).stem
        if jobname in self.failing:
            raise FileNotFoundError(2, "No such file or directory", argv[0])
        runs = self.scripts.get(jobname) or [ScriptedRun()]
        index = min(len(self.spawned(jobname)), len(runs) - 1)
        process = FakeProcess(jobname=jobname, argv=list(argv), run=runs[index], stdout=stdout)
        self.processes.append(process)
        self.max_running = max(self.max_running, len(self.running))
        return process


@dataclass
class FakeProcess:
    jobname: str
    argv: list[str]
    run: ScriptedRun
    stdout: IO[str]
    pid: int = 4242
    killed: bool = False
    returncode: int | None = None
    _remaining: int = 0

    def __post_init__(self) -> None:
        self._remaining = self.run.polls
        self.stdout.write(self.run.output)
        self.stdout.flush()

    @property
    def running(self) -> bool:
        return self.returncode is None

    def poll(self) -> int | None:
        if self.returncode is not None:
            return self.returncode
        if self._remaining > 0:
            self._remaining -= 1
            return None
        self.returncode = self.run.returncode
        return self.returncode

    def kill(self) -> None:
        self.killed = True
        if self.returncode is None:
            self.returncode = -9

    def wait(self) -> int:
        if self.returncode is None:
            self.returncode = self.run.returncode
        return self.returncode


@pytest.fixture
def fake_engine(monkeypatch: pytest.MonkeyPatch) -> FakeEngine:
    engine = FakeEngine()
    monkeypatch.setattr(jobs_module.subprocess, "Popen", engine)
    return engine


@pytest.fixture
def make_source(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str = "main.tex", body: str = "\\documentclass{article}\n") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(body, encoding="utf-8")
        return path

    return _make


_ENGINE_SCRIPT = textwrap.dedent(
    '''
    """Tiny engine replaying the output written inside the source file."""
    from pathlib import Path
    import sys
    import time

    args = sys.argv[1:]
    source = Path(args[-1])
    outdir = Path(".")
    for arg in args:
        if arg.startswith("-output-directory="):
            outdir = Path(arg.split("=", 1)[1])
    outdir.mkdir(parents=True, exist_ok=True)

    counter = outdir / f"{source.stem}.runs"
    run = int(counter.read_text()) + 1 if counter.exists() else 1
    counter.write_text(str(run))

    sections = source.read_text(encoding="utf-8").split("%% run 2\\n")
    exit_code = 0
    for line in sections[min(run, len(sections)) - 1].splitlines():
        if line.startswith("%% exit "):
            exit_code = int(line.split()[-1])
        elif line.startswith("%% sleep "):
            time.sleep(float(line.split()[-1]))
        else:
            print(line)

    for suffix in (".aux", ".log", ".pdf"):
        (outdir / f"{source.stem}{suffix}").write_text("stub", encoding="utf-8")
    sys.exit(exit_code)
    '''
)


@pytest.fixture
def engine_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Callable[..., BuildConfig]:
    """Return a factory of configs running a Python stand-in for pdflatex."""
    if sys.platform == "win32":
        pytest.skip("the stand-in engine relies on a shebang line")
    script = tmp_path / "bin" / "pdflatex"
    script.parent.mkdir()
    script.write_text(f"#!{sys.executable}\n{_ENGINE_SCRIPT}", encoding="utf-8")
    script.chmod(0o755)
    monkeypatch.chdir(tmp_path)

    def _make(**overrides: Any) -> BuildConfig:
        values: dict[str, Any] = {"engine": str(script)}
        values.update(overrides)
        return BuildConfig(**values)

    return _make
