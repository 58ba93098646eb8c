from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..classify import is_header_line
from ..config import NormalizeConfig
from ..constants import CANONICAL_MARKER, FLOW_STRUCTURAL_KEYWORDS
from ..mermaid_fmt import mm_edge_label, mm_shape_node
from ..shapes import is_unclosed, match_shape
from ..validate import Emit, noop_emit

# `id@{` anywhere on the line: already canonical.
_CANONICAL_TOKEN_RE = re.compile(r"\w" + re.escape(CANONICAL_MARKER))

# Identifier at a token boundary.
_IDENT_RE = re.compile(r"(?<!\w)\w+")

# Pipe-delimited edge label right after a link: -->|x|, ---|x|, -.->|x|, ==>|x|
_EDGE_LABEL_RE = re.compile(r"(?:--|==|-\.|~~)[-.=>ox]*\s*(\|([^|\n]+)\|)")

_LEADING_WORD_RE = re.compile(r"\s*([A-Za-z]+)\b")

_STRUCTURAL = frozenset(k.lower() for k in FLOW_STRUCTURAL_KEYWORDS)


@dataclass(frozen=True)
class NodeConversion:
    node_id: str
    shape: str
    label: str

    def render(self, *, escape_url_colons: bool = True) -> str:
        return mm_shape_node(
            self.node_id, self.shape, self.label, escape_url_colons=escape_url_colons
        )


@dataclass(frozen=True)
class _Reservation:
    start: int
    end: int
    replacement: str


class PlaceholderArena:
    """Pending replacements for one line, indexed by position.

    Reserved spans are never rescanned; `resolve()` substitutes all of them
    in a single pass once scanning is complete.
    """

    def __init__(self) -> None:
        self._spans: list[_Reservation] = []

    def __len__(self) -> int:
        return len(self._spans)

    def reserved_end(self, pos: int) -> Optional[int]:
        for span in self._spans:
            if span.start <= pos < span.end:
                return span.end
        return None

    def crosses(self, start: int, end: int) -> bool:
        """True if [start, end) partially overlaps an existing reservation."""
        for span in self._spans:
            overlaps = span.start < end and start < span.end
            contained = start <= span.start and span.end <= end
            if overlaps and not contained:
                return True
        return False

    def reserve(self, start: int, end: int, replacement: str) -> None:
        # A new span swallows reservations it fully contains.
        self._spans = [
            s for s in self._spans if not (start <= s.start and s.end <= end)
        ]
        self._spans.append(_Reservation(start, end, replacement))

    def resolve(self, line: str) -> str:
        parts: list[str] = []
        cursor = 0
        for span in sorted(self._spans, key=lambda s: s.start):
            parts.append(line[cursor : span.start])
            parts.append(span.replacement)
            cursor = span.end
        parts.append(line[cursor:])
        return "".join(parts)


def _is_passthrough(line: str) -> bool:
    stripped = line.strip()
    if not stripped or stripped.startswith("%%") or is_header_line(stripped):
        return True
    m = _LEADING_WORD_RE.match(stripped)
    return bool(m and m.group(1).lower() in _STRUCTURAL)


def _reserve_edge_labels(
    line: str, arena: PlaceholderArena, cfg: NormalizeConfig
) -> None:
    for m in _EDGE_LABEL_RE.finditer(line):
        start, end = m.span(1)
        replacement = f"|{mm_edge_label(m.group(2))}|" if cfg.quote_edge_labels else m.group(1)
        arena.reserve(start, end, replacement)


def convert_flow_line(
    line: str,
    config: Optional[NormalizeConfig] = None,
    emit: Emit = noop_emit,
    line_no: Optional[int] = None,
) -> str:
    """Convert legacy node shapes and bare edge labels on one line."""
    cfg = config or NormalizeConfig()

    if _is_passthrough(line):
        return line
    # Canonical lines are left alone: their labels may contain text that
    # looks like legacy shapes (e.g. `generateMetadata()`).
    if _CANONICAL_TOKEN_RE.search(line):
        return line

    arena = PlaceholderArena()
    _reserve_edge_labels(line, arena, cfg)

    pos = 0
    while pos < len(line):
        m = _IDENT_RE.search(line, pos)
        if not m:
            break

        reserved_end = arena.reserved_end(m.start())
        if reserved_end is not None:
            pos = reserved_end
            continue

        ident_end = m.end()
        match = match_shape(line, ident_end)
        if match is not None and not arena.crosses(m.start(), match.end):
            node = NodeConversion(m.group(0), match.rule.shape, match.label.strip())
            arena.reserve(
                m.start(),
                match.end,
                node.render(escape_url_colons=cfg.escape_url_colons),
            )
            pos = match.end
            continue

        if is_unclosed(line, ident_end):
            emit(
                "warning",
                "W_UNCLOSED_DELIMITER",
                f"node {m.group(0)!r} opens {line[ident_end]!r} without a matching close",
                line=line_no,
            )
            break

        pos = ident_end

    if not len(arena):
        return line
    return arena.resolve(line)


def convert_flow(
    source: str, config: Optional[NormalizeConfig] = None, emit: Emit = noop_emit
) -> str:
    """Rewrite legacy flowchart syntax into canonical shape descriptors.

    Line structure is preserved: output line N corresponds to input line N.
    """
    cfg = config or NormalizeConfig()
    lines = source.split("\n")
    out = [
        convert_flow_line(line, cfg, emit, line_no=i)
        for i, line in enumerate(lines, start=1)
    ]
    return "\n".join(out)
