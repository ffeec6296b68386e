"""Utilities for parsing diagnostics out of LaTeX engine output."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
import re


DEFAULT_CONTEXT_LINES = 2


class MessageKind(Enum):
    """Classification of a diagnostic extracted from LaTeX output."""

    ERROR = "error"
    WARNING = "warning"
    BADBOX = "badbox"
    INFO = "info"


_COMPONENT_KEYS = ("component", "package", "class")


@dataclass(slots=True)
class LatexMessage:
    """Structured diagnostic extracted from the build log."""

    kind: MessageKind
    full: str
    details: dict[str, str] = field(default_factory=dict)
    context_lines: list[str] = field(default_factory=list)

    @property
    def component(self) -> str | None:
        """Name of the emitting package, class or engine component, if any."""
        if self.kind is MessageKind.BADBOX:
            return None
        for key in _COMPONENT_KEYS:
            value = self.details.get(key)
            if value:
                return value
        return None

    @property
    def message(self) -> str | None:
        return self.details.get("message")

    def extend_message(self, text: str, raw: str) -> None:
        """Append a continuation line.

        ``text`` is the line without its ``(<component>)`` prefix; it is joined
        to ``message`` with a single space rather than concatenated as-is.
        ``full`` receives the unmodified ``raw`` line, prefix included, after
        a newline, so it reproduces the log excerpt.
        """
        if self.kind is MessageKind.BADBOX:
            return
        if text:
            current = self.details.get("message")
            self.details["message"] = f"{current} {text}" if current else text
        self.full = f"{self.full}\n{raw}"


_COUNTER_FOR_KIND = {
    MessageKind.ERROR: "errors",
    MessageKind.WARNING: "warnings",
    MessageKind.BADBOX: "badboxes",
    MessageKind.INFO: "info",
}

# Lower-cased fragments announcing that another pass would resolve references.
_RERUN_TOKENS = (
    "rerun to get cross-references right",
    "rerun to get cross references right",
    "rerun to get citations correct",
    "label(s) may have changed",
    "there were undefined references",
    "there were undefined citations",
    "please rerun",
)
_UNDEFINED_LABEL_PATTERN = re.compile(
    r"\b(?P<kind>Reference|Citation) [`'](?P<label>[^']+)' on page \S+ undefined"
)


@dataclass(slots=True)
class BuildReport:
    """Diagnostics collected from a single engine run."""

    errors: int = 0
    warnings: int = 0
    badboxes: int = 0
    info: int = 0
    messages: list[LatexMessage] = field(default_factory=list)

    def __str__(self) -> str:
        return f"Errors: {self.errors}, Warnings: {self.warnings}, Badboxes: {self.badboxes}"

    def add(self, message: LatexMessage) -> int:
        """Record ``message`` and return its index in :attr:`messages`."""
        counter = _COUNTER_FOR_KIND[message.kind]
        setattr(self, counter, getattr(self, counter) + 1)
        self.messages.append(message)
        return len(self.messages) - 1

    def messages_of(self, kind: MessageKind) -> list[LatexMessage]:
        return [message for message in self.messages if message.kind is kind]

    @property
    def needs_rerun(self) -> bool:
        """Whether a warning reports references only another pass can resolve."""
        for message in self.messages_of(MessageKind.WARNING):
            if _UNDEFINED_LABEL_PATTERN.search(message.full):
                return True
            lower = message.full.lower()
            if any(token in lower for token in _RERUN_TOKENS):
                return True
        return False

    @property
    def missing_references(self) -> list[str]:
        return self._undefined_labels("Reference")

    @property
    def missing_citations(self) -> list[str]:
        return self._undefined_labels("Citation")

    def _undefined_labels(self, kind: str) -> list[str]:
        labels: list[str] = []
        for message in self.messages_of(MessageKind.WARNING):
            for match in _UNDEFINED_LABEL_PATTERN.finditer(message.full):
                label = match.group("label")
                if match.group("kind") == kind and label not in labels:
                    labels.append(label)
        return labels


_TYPE_TAG = r"(?P<type>LaTeX|pdfTeX|LuaTeX|XeTeX|Package|Class)"


def _typed_pattern(level: str, *, prefix: str = "") -> re.Pattern[str]:
    return re.compile(
        rf"^{prefix}{_TYPE_TAG}(?: (?P<name>\S+?))? (?:{level})"
        r"(?: \((?P<extra>[^)]*)\))?:\s*(?P<message>.*)$"
    )


_INFO_PATTERN = _typed_pattern("Info")
_WARNING_PATTERN = _typed_pattern("[Ww]arning")
_TYPED_ERROR_PATTERN = _typed_pattern("[Ee]rror", prefix="! ")
_BARE_ERROR_PATTERN = re.compile(r"^! (?P<message>.+)$")
_BADBOX_PATTERN = re.compile(
    r"^(?P<fill>Over|Under)full \\(?P<direction>[hv])box \((?P<amount>[^)]*)\)(?P<location>.*)$"
)
_BADNESS_PATTERN = re.compile(r"badness (?P<badness>\d+)")
_LINE_RANGE_PATTERN = re.compile(r"\blines (?P<start>\d+)--(?P<end>\d+)")
_SINGLE_LINE_PATTERN = re.compile(r"\bline (?P<line>\d+)")

_NAME_KEY_FOR_TYPE = {"Package": "package", "Class": "class"}


def _typed_details(match: re.Match[str]) -> dict[str, str]:
    type_tag = match.group("type")
    details = {"type": type_tag}
    name = match.group("name")
    if name:
        details[_NAME_KEY_FOR_TYPE.get(type_tag, "component")] = name
    extra = match.group("extra")
    if extra is not None:
        details["extra"] = extra
    details["message"] = match.group("message").strip()
    return details


def _match_typed(pattern: re.Pattern[str]) -> Callable[[str], dict[str, str] | None]:
    def matcher(line: str) -> dict[str, str] | None:
        match = pattern.match(line)
        return _typed_details(match) if match else None

    return matcher


def _match_badbox(line: str) -> dict[str, str] | None:
    match = _BADBOX_PATTERN.match(line)
    if not match:
        return None
    amount = match.group("amount").strip()
    details = {"direction": match.group("direction")}
    if match.group("fill") == "Under":
        badness = _BADNESS_PATTERN.search(amount)
        details["by"] = badness.group("badness") if badness else amount
    else:
        details["by"] = amount

    location = match.group("location")
    line_range = _LINE_RANGE_PATTERN.search(location)
    if line_range:
        details["start_line"] = line_range.group("start")
        details["end_line"] = line_range.group("end")
    else:
        single = _SINGLE_LINE_PATTERN.search(location)
        if single:
            details["line"] = single.group("line")
    return details


def _match_error(line: str) -> dict[str, str] | None:
    match = _TYPED_ERROR_PATTERN.match(line)
    if match:
        return _typed_details(match)
    bare = _BARE_ERROR_PATTERN.match(line)
    if bare:
        return {"message": bare.group("message").strip()}
    return None


# Evaluated in order; the first classifier that matches wins.
_CLASSIFIERS: tuple[tuple[MessageKind, Callable[[str], dict[str, str] | None]], ...] = (
    (MessageKind.INFO, _match_typed(_INFO_PATTERN)),
    (MessageKind.BADBOX, _match_badbox),
    (MessageKind.WARNING, _match_typed(_WARNING_PATTERN)),
    (MessageKind.ERROR, _match_error),
)

_CONTEXT_KINDS = frozenset({MessageKind.ERROR, MessageKind.BADBOX})


class LatexLogParser:
    """Incrementally parse LaTeX output into a :class:`BuildReport`.

    Lines are processed strictly in order. Each line is first offered as a
    continuation of the latest message (``(<component>) ...`` echoes), then as
    trailing context of the latest error or badbox, and only then classified.
    Lines matching none of these are dropped.
    """

    def __init__(self, *, context_lines: int = DEFAULT_CONTEXT_LINES) -> None:
        self._report = BuildReport()
        self._context_size = max(0, context_lines)
        self._last_index: int | None = None
        self._context_budget = 0

    @property
    def report(self) -> BuildReport:
        """Return the report accumulated so far."""
        return self._report

    def feed(self, lines: Iterable[str]) -> BuildReport:
        """Process every line of ``lines`` and return the report."""
        for line in lines:
            self.process_line(line)
        return self._report

    def process_line(self, line: str) -> LatexMessage | None:
        """Process a log line and return the message it started, if any."""
        raw = line.rstrip("\r\n")
        last = self._last_message()

        if last is not None and self._merge_continuation(last, raw):
            return None

        if last is not None and self._context_budget > 0:
            last.context_lines.append(raw)
            self._context_budget -= 1
            return None

        for kind, matcher in _CLASSIFIERS:
            details = matcher(raw)
            if details is not None:
                return self._record(kind, raw, details)
        return None

    def _last_message(self) -> LatexMessage | None:
        if self._last_index is None:
            return None
        return self._report.messages[self._last_index]

    @staticmethod
    def _merge_continuation(last: LatexMessage, raw: str) -> bool:
        component = last.component
        if component is None:
            return False
        prefix = f"({component}) "
        if not raw.startswith(prefix):
            return False
        last.extend_message(raw[len(prefix) :].lstrip(), raw)
        return True

    def _record(self, kind: MessageKind, raw: str, details: dict[str, str]) -> LatexMessage:
        message = LatexMessage(kind=kind, full=raw, details=details)
        self._last_index = self._report.add(message)
        self._context_budget = self._context_size if kind in _CONTEXT_KINDS else 0
        return message


def parse_latex_log(
    lines: Iterable[str],
    *,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> BuildReport:
    """Parse a stream of engine output lines into a report."""
    return LatexLogParser(context_lines=context_lines).feed(lines)


def parse_latex_log_file(
    log_path: Path,
    *,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> BuildReport:
    """Parse a LaTeX log file into a report."""
    if not log_path.exists():
        return BuildReport()
    with log_path.open("r", encoding="utf-8", errors="replace") as handle:
        return parse_latex_log(handle, context_lines=context_lines)


__all__ = [
    "DEFAULT_CONTEXT_LINES",
    "BuildReport",
    "LatexLogParser",
    "LatexMessage",
    "MessageKind",
    "parse_latex_log",
    "parse_latex_log_file",
]
