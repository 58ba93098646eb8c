from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Outer delimiter pairs for the depth scanner. `>` opens the asymmetric
# "odd" shape, which closes with `]`.
_OUTER_CLOSE = {"(": ")", "[": "]", "{": "}", ">": "]"}


@dataclass(frozen=True)
class ShapeRule:
    """A legacy delimiter pair and the canonical shape it converts to."""

    shape: str
    open: str
    close: str

    @property
    def outer(self) -> str:
        return self.open[0]


# Ordered by specificity: multi-character delimiters precede single-character
# delimiters sharing a prefix; rect and rounded come last.
SHAPE_RULES: tuple[ShapeRule, ...] = (
    ShapeRule("dbl-circ", "(((", ")))"),
    ShapeRule("subroutine", "[[", "]]"),
    ShapeRule("hex", "{{", "}}"),
    ShapeRule("stadium", "([", "])"),
    ShapeRule("cylinder", "[(", ")]"),
    ShapeRule("circle", "((", "))"),
    ShapeRule("lean-r", "[/", "/]"),
    ShapeRule("lean-l", "[\\", "\\]"),
    ShapeRule("trap-b", "[/", "\\]"),
    ShapeRule("trap-t", "[\\", "/]"),
    ShapeRule("odd", ">", "]"),
    ShapeRule("diam", "{", "}"),
    ShapeRule("rect", "[", "]"),
    ShapeRule("rounded", "(", ")"),
)

SHAPE_OPENERS = frozenset(_OUTER_CLOSE)


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


@dataclass(frozen=True)
class ShapeMatch:
    rule: ShapeRule
    start: int  # index of the opening delimiter
    end: int  # index one past the closing delimiter
    label: str


def find_matching(
    text: str,
    start: int,
    open_char: str,
    close_char: str,
    *,
    depth: int = 0,
    quote_aware: bool = True,
) -> int:
    """Return the index of the close that brings depth back to zero, or -1.

    Scanning begins at `start` with the given initial depth. With
    `quote_aware`, delimiters inside double-quoted spans are not counted;
    a closing quote followed by a word character means the quotes pair up
    across labels, and the scan gives up (-1).
    """
    in_quote = False
    for i in range(start, len(text)):
        ch = text[i]
        if quote_aware and ch == '"':
            if in_quote and i + 1 < len(text) and _is_word_char(text[i + 1]):
                return -1
            in_quote = not in_quote
            continue
        if in_quote:
            continue
        if ch == open_char:
            depth += 1
        elif ch == close_char:
            depth -= 1
            if depth == 0:
                return i
    return -1


def _outer_span_end(text: str, pos: int) -> int:
    """Index one past the balanced outer delimiter opened at `pos`, or -1."""
    outer = text[pos]
    close_char = _OUTER_CLOSE[outer]
    if outer == ">":
        scan_args = (pos + 1, "[", close_char)
        depth = 1
    else:
        scan_args = (pos, outer, close_char)
        depth = 0

    end = find_matching(text, *scan_args, depth=depth)
    if end == -1:
        # Unbalanced quotes inside the label; retry counting every delimiter.
        end = find_matching(text, *scan_args, depth=depth, quote_aware=False)
    return -1 if end == -1 else end + 1


def match_shape(text: str, pos: int) -> Optional[ShapeMatch]:
    """Match the most specific shape rule whose delimiter opens at `pos`.

    Returns None when no rule matches. Raises nothing; an unclosed outer
    delimiter also yields None (see `is_unclosed`).
    """
    if pos >= len(text) or text[pos] not in SHAPE_OPENERS:
        return None

    end = _outer_span_end(text, pos)
    if end == -1:
        return None
    span = text[pos:end]

    for rule in SHAPE_RULES:
        if rule.outer != text[pos]:
            continue
        if len(span) <= len(rule.open) + len(rule.close):
            continue
        if span.startswith(rule.open) and span.endswith(rule.close):
            label = span[len(rule.open) : len(span) - len(rule.close)]
            return ShapeMatch(rule=rule, start=pos, end=end, label=label)

    return None


def is_unclosed(text: str, pos: int) -> bool:
    """Return True if a shape delimiter opens at `pos` and never closes."""
    return (
        pos < len(text)
        and text[pos] in SHAPE_OPENERS
        and text[pos] != ">"
        and _outer_span_end(text, pos) == -1
    )
