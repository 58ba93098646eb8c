# mermaid_normalizer/validate.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterator, Literal, Optional

from .config import NormalizeConfig
from .constants import CANONICAL_SHAPE_MARKER

Severity = Literal["error", "warning", "info"]

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}

# `label: "..."` inside a shape descriptor; escaped quotes stay inside the label.
DESCRIPTOR_LABEL_RE = re.compile(r'label: "((?:[^"\\]|\\.)*)"')


@dataclass(frozen=True)
class NormalizeIssue:
    """Structured diagnostic produced while normalizing a diagram."""

    severity: Severity
    code: str
    message: str
    line: Optional[int] = None

    def format(self) -> str:
        where = f"line {self.line}: " if self.line is not None else ""
        return f"{self.severity}: {self.code}: {where}{self.message}"


IssueSink = Callable[[NormalizeIssue], None]
Emit = Callable[..., None]


def make_emitter(
    cfg: NormalizeConfig,
    collected: list[NormalizeIssue],
    report: Optional[IssueSink] = None,
) -> Emit:
    """Return an `emit(severity, code, message, line=None)` callable.

    Issues are filtered/escalated per config, appended to `collected` and
    forwarded to the optional `report` sink.
    """

    def emit(
        severity: Severity, code: str, message: str, line: Optional[int] = None
    ) -> None:
        if code in cfg.ignore:
            return
        final_severity: Severity = (
            "error" if (severity == "warning" and code in cfg.escalate) else severity
        )
        issue = NormalizeIssue(
            severity=final_severity, code=code, message=message, line=line
        )
        collected.append(issue)
        if report is not None:
            report(issue)

    return emit


def noop_emit(
    severity: Severity, code: str, message: str, line: Optional[int] = None
) -> None:
    return None


def check_label_bracket_balance(label: str) -> bool:
    """Return True when `()[]{}` in `label` nest properly.

    Brackets inside single- or double-quoted spans are ignored, and a
    backslash makes the following character literal. A `'` inside a
    double-quoted span is literal, and vice versa.
    """
    stack: list[str] = []
    in_single = False
    in_double = False
    escaped = False

    for ch in label:
        if escaped:
            escaped = False
            continue
        if ch == "\\":
            escaped = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            continue
        if ch == '"' and not in_single:
            in_double = not in_double
            continue
        if in_single or in_double:
            continue

        if ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            if not stack or stack.pop() != ch:
                return False

    return not stack


def iter_descriptor_labels(text: str) -> Iterator[tuple[int, str]]:
    """Yield (line_number, label) for every descriptor label in `text`."""
    for line_no, line in enumerate(text.split("\n"), start=1):
        if "label:" not in line:
            continue
        for m in DESCRIPTOR_LABEL_RE.finditer(line):
            yield line_no, m.group(1)


def find_unbalanced_labels(text: str, emit: Emit = noop_emit) -> list[int]:
    """Return line numbers (1-based, ascending, unique) with unbalanced labels."""
    bad_lines: list[int] = []
    for line_no, label in iter_descriptor_labels(text):
        # Text of an already-converted descriptor nested in another label.
        if CANONICAL_SHAPE_MARKER in label:
            continue
        if check_label_bracket_balance(label):
            continue

        emit(
            "warning",
            "W_UNBALANCED_LABEL",
            f"unbalanced brackets in label {label!r}",
            line=line_no,
        )
        if line_no not in bad_lines:
            bad_lines.append(line_no)

    return bad_lines
