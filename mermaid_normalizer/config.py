from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

from .constants import FALLBACK_SCOPE_DEFAULT, FALLBACK_SCOPES


@dataclass(frozen=True)
class NormalizeConfig:
    """Normalizer configuration.

    Defaults reproduce the legacy renderer behaviour. The CLI can load
    overrides from YAML via `io.load_config()`.
    """

    # "document": one unbalanced label reverts the whole diagram to the
    # pre-pass text. "line": only the offending lines revert.
    fallback_scope: str = FALLBACK_SCOPE_DEFAULT

    quote_edge_labels: bool = True
    escape_url_colons: bool = True
    escape_message_separators: bool = True
    repair_activations: bool = True

    # Issue code controls
    ignore: frozenset[str] = field(default_factory=frozenset)
    escalate: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.fallback_scope not in FALLBACK_SCOPES:
            raise ValueError(
                f"fallback_scope must be one of {FALLBACK_SCOPES}, "
                f"got {self.fallback_scope!r}"
            )


def config_keys() -> tuple[str, ...]:
    return tuple(f.name for f in fields(NormalizeConfig))


def config_from_mapping(data: dict[str, Any]) -> NormalizeConfig:
    """Build a config from a plain mapping (e.g. parsed YAML)."""
    known = set(config_keys())
    unknown = sorted(k for k in data if k not in known)
    if unknown:
        raise ValueError(f"Unknown config key(s): {', '.join(unknown)}")

    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key in ("ignore", "escalate"):
            if value is None:
                value = []
            if not isinstance(value, (list, tuple, set, frozenset)) or not all(
                isinstance(v, str) for v in value
            ):
                raise TypeError(f"config.{key} must be a list of issue codes")
            kwargs[key] = frozenset(value)
        elif key == "fallback_scope":
            if not isinstance(value, str):
                raise TypeError("config.fallback_scope must be a string")
            kwargs[key] = value
        else:
            if not isinstance(value, bool):
                raise TypeError(
                    f"config.{key} must be a boolean, got {type(value).__name__}"
                )
            kwargs[key] = value

    return NormalizeConfig(**kwargs)
