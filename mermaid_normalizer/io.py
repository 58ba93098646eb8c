# mermaid_normalizer/io.py
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional

import yaml

from .config import NormalizeConfig, config_from_mapping

MARKDOWN_SUFFIXES: tuple[str, ...] = (".md", ".markdown")


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    raw = path.read_text(encoding="utf-8")

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML {path}: {e}") from e

    # An empty file means "all defaults".
    if data is None:
        return {}

    if not isinstance(data, dict):
        raise TypeError(
            f"Top-level YAML must be a mapping in {path}, got {type(data).__name__}"
        )

    return data


def load_config(path: Optional[Path]) -> NormalizeConfig:
    """Load normalizer settings from a YAML file (None -> defaults).

    Settings may sit at the top level or under a `normalizer:` key.
    """
    if path is None:
        return NormalizeConfig()
    if not path.exists():
        raise FileNotFoundError(str(path))

    data = _load_yaml_mapping(path)
    section = data["normalizer"] if "normalizer" in data else data
    if section is None:
        section = {}
    if not isinstance(section, dict):
        raise TypeError(f"`normalizer` in {path} must be a mapping")

    try:
        return config_from_mapping(section)
    except (TypeError, ValueError) as e:
        raise type(e)(f"{path}: {e}") from e


def read_source(path: Optional[Path]) -> str:
    """Read diagram/Markdown text from a file, or stdin for None / `-`."""
    if path is None or str(path) == "-":
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")


def is_markdown_path(path: Optional[Path]) -> bool:
    return path is not None and path.suffix.lower() in MARKDOWN_SUFFIXES
