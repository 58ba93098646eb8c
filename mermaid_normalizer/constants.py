# mermaid_normalizer/constants.py
from __future__ import annotations

# Diagram header keywords (matched case-insensitively on the first non-blank line).
SEQUENCE_HEADERS: tuple[str, ...] = ("sequencediagram",)
FLOW_HEADERS: tuple[str, ...] = ("flowchart", "graph")

# Canonical shape descriptor markers.
CANONICAL_MARKER = "@{"
CANONICAL_SHAPE_MARKER = "@{ shape:"

# Legacy backslash escapes resolved by the pre-pass.
ESCAPE_SEQUENCES: tuple[str, ...] = ("\\[", "\\]", "\\{", "\\}")

# Mermaid sequence diagrams treat ';' as a statement separator.
SEQUENCE_SEPARATOR = ";"
SEQUENCE_SEPARATOR_ENTITY = "#59;"

# Flowchart statements that never carry node shapes.
FLOW_STRUCTURAL_KEYWORDS: tuple[str, ...] = (
    "subgraph",
    "end",
    "direction",
    "classDef",
    "class",
    "style",
    "linkStyle",
    "click",
)

# Sequence statements that are never messages.
SEQUENCE_STRUCTURAL_KEYWORDS: tuple[str, ...] = (
    "participant",
    "actor",
    "note",
    "alt",
    "else",
    "opt",
    "loop",
    "par",
    "and",
    "critical",
    "option",
    "break",
    "rect",
    "end",
    "box",
    "create",
    "destroy",
    "autonumber",
    "title",
    "links",
    "link",
    "activate",
    "deactivate",
)

FALLBACK_SCOPES: tuple[str, ...] = ("document", "line")
FALLBACK_SCOPE_DEFAULT = "document"
