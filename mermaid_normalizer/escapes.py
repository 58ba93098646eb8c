from __future__ import annotations

import re

from .classify import is_header_line
from .constants import ESCAPE_SEQUENCES

# id[\[text\]]  ->  id["[text]"]
_ESCAPED_BRACKET_LABEL_RE = re.compile(r"(\w+)\[\\\[(.+?)\\\]\]")
# id\{text\}    ->  id["{text}"]
_ESCAPED_BRACE_LABEL_RE = re.compile(r"(\w+)\\\{(.+?)\\\}")
# id[\text\] (lean-l) and id[/text\] (trap-b) close with a literal `\]`.
_BACKSLASH_CLOSED_SHAPE_RE = re.compile(r"\w\[[\\/][^\]\n]*\\\]")


def has_escapes(source: str) -> bool:
    return any(seq in source for seq in ESCAPE_SEQUENCES)


def _unescape(text: str) -> str:
    for seq in ESCAPE_SEQUENCES:
        text = text.replace(seq, seq[1])
    return text


def resolve_escape_line(line: str) -> str:
    """Resolve legacy backslash-escaped delimiters on a single line."""
    if not line.strip() or is_header_line(line):
        return line

    out = _ESCAPED_BRACKET_LABEL_RE.sub(lambda m: f'{m.group(1)}["[{m.group(2)}]"]', line)
    out = _ESCAPED_BRACE_LABEL_RE.sub(lambda m: f'{m.group(1)}["{{{m.group(2)}}}"]', out)

    # Stray escapes outside node definitions become the literal character;
    # shape delimiters that end in `\]` are kept.
    parts: list[str] = []
    cursor = 0
    for m in _BACKSLASH_CLOSED_SHAPE_RE.finditer(out):
        parts.append(_unescape(out[cursor : m.start()]))
        parts.append(m.group(0))
        cursor = m.end()
    parts.append(_unescape(out[cursor:]))
    return "".join(parts)


def resolve_escapes(source: str) -> str:
    """Convert escaped bracket/brace literals into quoted literal text.

    Identity for sources without escape sequences, so it is safe to apply
    unconditionally.
    """
    if not has_escapes(source):
        return source
    return "\n".join(resolve_escape_line(line) for line in source.split("\n"))
