from __future__ import annotations

from pathlib import Path

import pytest

from texrunner.adapters.latex import engines
from texrunner.core.config import BuildConfig, load_config
from texrunner.core.exceptions import ConfigError, UnknownEngineError


def test_defaults() -> None:
    config = BuildConfig()

    assert config.engine == "pdflatex"
    assert config.max_concurrency == 1
    assert config.output_directory == Path(".")
    assert config.build_command(Path("main.tex")) == [
        "pdflatex",
        "-interaction=nonstopmode",
        "main.tex",
    ]


def test_nonstop_mode_can_be_disabled() -> None:
    config = BuildConfig(nonstop_mode=False, flags=["-synctex=1"])

    assert config.build_command(Path("a.tex")) == ["pdflatex", "-synctex=1", "a.tex"]


def test_max_concurrency_must_be_positive() -> None:
    with pytest.raises(ValueError):
        BuildConfig(max_concurrency=0)


def test_load_config_reads_yaml(tmp_path: Path) -> None:
    path = tmp_path / "texrunner.yml"
    path.write_text(
        "engine: xelatex\n"
        "flags: [-shell-escape]\n"
        "build_directory: out\n"
        "max_concurrency: 4\n"
        "clean_build: true\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.engine == "xelatex"
    assert config.flags == ["-shell-escape"]
    assert config.build_directory == Path("out")
    assert config.max_concurrency == 4
    assert config.clean_build is True


def test_load_config_accepts_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")

    assert load_config(path) == BuildConfig()


@pytest.mark.parametrize(
    ("content", "match"),
    [
        ("engine: [unterminated\n", "not valid YAML"),
        ("- just\n- a list\n", "must contain a mapping"),
        ("unknown_key: 1\n", "Invalid configuration"),
        ("max_concurrency: 0\n", "Invalid configuration"),
    ],
)
def test_load_config_rejects_bad_files(tmp_path: Path, content: str, match: str) -> None:
    path = tmp_path / "bad.yml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError, match=match):
        load_config(path)


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Unable to read"):
        load_config(tmp_path / "nope.yml")


def test_merged_ignores_unset_overrides() -> None:
    base = BuildConfig(engine="lualatex", max_concurrency=3)

    merged = base.merged(engine=None, max_concurrency=None, clean_build=True)

    assert merged.engine == "lualatex"
    assert merged.max_concurrency == 3
    assert merged.clean_build is True
    assert base.merged() is base


def test_merged_validates_overrides() -> None:
    with pytest.raises(ConfigError):
        BuildConfig().merged(max_concurrency=0)


@pytest.mark.parametrize(
    ("engine", "suffix"),
    [
        ("pdflatex", ".pdf"),
        ("/usr/local/texlive/bin/lualatex", ".pdf"),
        ("xelatex.exe", ".pdf"),
        ("latex", ".dvi"),
    ],
)
def test_artifact_extension(engine: str, suffix: str) -> None:
    assert engines.artifact_extension(engine) == suffix


def test_artifact_extension_unknown_engine() -> None:
    with pytest.raises(UnknownEngineError):
        engines.artifact_extension("tectonic")
