from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional


def write_text(path: Optional[Path], text: str) -> None:
    """Write normalized text to `path`, or to stdout for None / `-`."""
    if path is None or str(path) == "-":
        sys.stdout.write(text)
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
