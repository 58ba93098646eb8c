from __future__ import annotations

import re
from typing import Literal

from .constants import FLOW_HEADERS, SEQUENCE_HEADERS

DiagramType = Literal["flow", "sequence", "other"]

_SEQUENCE_HEADER_RE = re.compile(
    r"^(?:" + "|".join(SEQUENCE_HEADERS) + r")\b", re.IGNORECASE
)
_FLOW_HEADER_RE = re.compile(r"^(?:" + "|".join(FLOW_HEADERS) + r")\b", re.IGNORECASE)


def is_header_line(line: str) -> bool:
    """Return True if `line` is a flowchart or sequence diagram header."""
    stripped = line.strip()
    return bool(_SEQUENCE_HEADER_RE.match(stripped) or _FLOW_HEADER_RE.match(stripped))


def classify_diagram(source: str) -> DiagramType:
    """Classify a diagram from its first non-blank line.

    Unknown headers classify as "other", which callers dispatch like "flow"
    (legacy documents often omit the header).
    """
    for line in source.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if _SEQUENCE_HEADER_RE.match(stripped):
            return "sequence"
        if _FLOW_HEADER_RE.match(stripped):
            return "flow"
        return "other"

    return "other"
