from __future__ import annotations

import re

from .constants import SEQUENCE_SEPARATOR_ENTITY

# Mermaid node IDs accepted by the legacy shape scanner.
MERMAID_ID_RE = re.compile(r"^\w+$")

# Entities already present in text (`#59;`, `#quot;`, `&amp;`, `&#58;`).
_ENTITY_OR_SEPARATOR_RE = re.compile(r"(&#?\w+;|#\w+;)|;")


def mermaid_block(code: str) -> str:
    """Wrap Mermaid source in a Markdown Mermaid code fence."""
    return "```mermaid\n" + code.rstrip() + "\n```\n"


def mm_quote(text: str) -> str:
    """Escape double quotes for a double-quoted Mermaid string."""
    return str(text).replace('"', '\\"')


def mm_label(text: str, *, escape_url_colons: bool = True) -> str:
    """Escape text for a shape descriptor `label: "..."` value.

    Mermaid treats `:` inside URLs as a separator in descriptor labels, so
    labels carrying a `://` get their colons HTML-encoded.
    """
    escaped = mm_quote(text)
    if escape_url_colons and "://" in escaped:
        escaped = escaped.replace(":", "&#58;")
    return escaped


def mm_shape_node(
    node_id: str, shape: str, label: str, *, escape_url_colons: bool = True
) -> str:
    if not MERMAID_ID_RE.match(node_id):
        raise ValueError(f"Not Mermaid-safe id: {node_id!r}")
    body = mm_label(label.strip(), escape_url_colons=escape_url_colons)
    return f'{node_id}@{{ shape: {shape}, label: "{body}" }}'


def mm_edge_label(text: str) -> str:
    """Format an edge label (the text inside `-->|...|`) as a quoted label.

    Labels that are already wrapped in double quotes are returned unchanged.
    """
    stripped = str(text).strip()
    if len(stripped) >= 2 and stripped.startswith('"') and stripped.endswith('"'):
        return stripped
    return f'"{mm_quote(stripped)}"'


def mm_message_text(text: str) -> str:
    """Escape statement separators inside sequence message text.

    Existing entities are kept so the escape can be applied repeatedly.
    """
    return _ENTITY_OR_SEPARATOR_RE.sub(
        lambda m: m.group(1) or SEQUENCE_SEPARATOR_ENTITY, str(text)
    )


def mm_comment(text: str) -> str:
    # Ensure it won't be parsed as a directive.
    t = str(text).replace("\n", " ").strip()
    if t.startswith("{"):
        t = " " + t
    return f"%% {t}"
