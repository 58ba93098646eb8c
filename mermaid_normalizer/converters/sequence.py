from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Optional

from ..classify import is_header_line
from ..config import NormalizeConfig
from ..constants import SEQUENCE_SEPARATOR, SEQUENCE_STRUCTURAL_KEYWORDS
from ..mermaid_fmt import mm_comment, mm_message_text
from ..validate import Emit, noop_emit

ActivationKind = Literal["activate", "deactivate"]

# Longest arrows first so `-->>` is never read as `-->` plus a stray `>`.
SEQUENCE_ARROWS: tuple[str, ...] = (
    "<<-->>",
    "<<->>",
    "-->>",
    "->>",
    "--x",
    "-x",
    "--)",
    "-)",
    "-->",
    "->",
)

_MESSAGE_RE = re.compile(
    r"^(?P<indent>\s*)(?P<sender>\w+)\s*"
    r"(?P<arrow>" + "|".join(re.escape(a) for a in SEQUENCE_ARROWS) + r")"
    r"(?P<marker>[+-]?)\s*"
    r"(?P<receiver>\w+)\s*"
    r"(?::(?P<text>.*))?$"
)

_ACTIVATION_STMT_RE = re.compile(
    r"^(?P<indent>\s*)(?P<kind>activate|deactivate)\s+(?P<participant>\w+)\s*$",
    re.IGNORECASE,
)

_LEADING_KEYWORD_RE = re.compile(r"^\s*(\w+)(?:\s|$)")

_STRUCTURAL = frozenset(SEQUENCE_STRUCTURAL_KEYWORDS)


@dataclass(frozen=True)
class SequenceMessage:
    """A parsed `sender<arrow><marker>receiver: text` line."""

    indent: str
    sender: str
    arrow: str
    marker: str  # "+", "-" or ""
    receiver: str
    text: Optional[str]
    marker_span: tuple[int, int]
    text_start: Optional[int]


@dataclass(frozen=True)
class ActivationEvent:
    participant: str
    line_index: int
    kind: ActivationKind


def _is_structural(line: str) -> bool:
    stripped = line.strip()
    if not stripped or stripped.startswith("%%") or is_header_line(stripped):
        return True
    m = _LEADING_KEYWORD_RE.match(stripped)
    return bool(m and m.group(1).lower() in _STRUCTURAL)


def parse_message(line: str) -> Optional[SequenceMessage]:
    """Parse a sequence message line, or return None for any other statement."""
    if _is_structural(line):
        return None
    m = _MESSAGE_RE.match(line)
    if not m:
        return None
    return SequenceMessage(
        indent=m.group("indent"),
        sender=m.group("sender"),
        arrow=m.group("arrow"),
        marker=m.group("marker"),
        receiver=m.group("receiver"),
        text=m.group("text"),
        marker_span=m.span("marker"),
        text_start=m.start("text") if m.group("text") is not None else None,
    )


def _activation_event(line: str, index: int) -> Optional[ActivationEvent]:
    msg = parse_message(line)
    if msg is not None:
        if msg.marker == "+":
            return ActivationEvent(msg.receiver, index, "activate")
        if msg.marker == "-":
            # The sender of a `-` message is the participant being deactivated.
            return ActivationEvent(msg.sender, index, "deactivate")
        return None

    m = _ACTIVATION_STMT_RE.match(line)
    if m:
        kind: ActivationKind = "activate" if m.group("kind").lower() == "activate" else "deactivate"
        return ActivationEvent(m.group("participant"), index, kind)
    return None


def repair_activations(lines: list[str], emit: Emit = noop_emit) -> set[int]:
    """Return indices of lines whose activation marker must be removed.

    First pass (left to right): activations are pushed on a per-participant
    stack; a deactivation pops it, or is marked for removal when the stack is
    empty. Second pass: activations still on a stack are marked for removal.
    """
    stacks: dict[str, list[int]] = {}
    strip: set[int] = set()

    for index, line in enumerate(lines):
        event = _activation_event(line, index)
        if event is None:
            continue

        if event.kind == "activate":
            stacks.setdefault(event.participant, []).append(index)
            continue

        stack = stacks.get(event.participant)
        if stack:
            stack.pop()
        else:
            strip.add(index)
            emit(
                "info",
                "I_ORPHAN_DEACTIVATION",
                f"{event.participant!r} is deactivated without a prior activation",
                line=index + 1,
            )

    for participant, stack in stacks.items():
        for index in stack:
            strip.add(index)
            emit(
                "info",
                "I_UNPAIRED_ACTIVATION",
                f"{participant!r} is activated but never deactivated",
                line=index + 1,
            )

    return strip


def escape_message_text(text: str) -> str:
    return mm_message_text(text)


def _render_message(
    line: str, msg: SequenceMessage, *, strip_marker: bool, escape_text: bool
) -> str:
    head_end = msg.text_start if msg.text_start is not None else len(line)
    head = line[:head_end]
    if strip_marker and msg.marker:
        start, end = msg.marker_span
        head = head[:start] + head[end:]

    tail = line[head_end:]
    if escape_text and SEQUENCE_SEPARATOR in tail:
        tail = escape_message_text(tail)
    return head + tail


def convert_sequence(
    source: str, config: Optional[NormalizeConfig] = None, emit: Emit = noop_emit
) -> str:
    """Escape message separators and repair activation pairing.

    Non-message statements pass through unchanged; unpaired explicit
    `activate`/`deactivate` statements are commented out so line numbers
    are preserved.
    """
    cfg = config or NormalizeConfig()
    lines = source.split("\n")
    strip = repair_activations(lines, emit) if cfg.repair_activations else set()

    out: list[str] = []
    for index, line in enumerate(lines):
        msg = parse_message(line)
        if msg is not None:
            out.append(
                _render_message(
                    line,
                    msg,
                    strip_marker=index in strip,
                    escape_text=cfg.escape_message_separators,
                )
            )
            continue

        if index in strip:
            m = _ACTIVATION_STMT_RE.match(line)
            if m:
                out.append(m.group("indent") + mm_comment(line.strip()))
                continue

        out.append(line)

    return "\n".join(out)
