from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from .classify import DiagramType, classify_diagram
from .config import NormalizeConfig
from .converters.registry import get_converter
from .escapes import resolve_escapes
from .validate import IssueSink, NormalizeIssue, find_unbalanced_labels, make_emitter

Fallback = Literal["none", "prepass", "original"]


@dataclass(frozen=True)
class NormalizeResult:
    """Outcome of one normalization call.

    `valid` is False whenever a fallback was taken. An unbalanced label
    falls back to the escape pre-pass output; an exception in the pre-pass
    or the converter returns the source unchanged.
    """

    text: str
    diagram_type: DiagramType
    valid: bool = True
    fallback: Fallback = "none"
    issues: tuple[NormalizeIssue, ...] = ()

    @property
    def errors(self) -> list[NormalizeIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[NormalizeIssue]:
        return [i for i in self.issues if i.severity == "warning"]


def _revert_lines(converted: str, prepass: str, line_numbers: list[int]) -> str:
    out_lines = converted.split("\n")
    pre_lines = prepass.split("\n")
    if len(out_lines) != len(pre_lines):
        # Converters preserve line structure; if that ever breaks, revert all.
        return prepass
    for line_no in line_numbers:
        out_lines[line_no - 1] = pre_lines[line_no - 1]
    return "\n".join(out_lines)


def normalize(
    source: str,
    config: Optional[NormalizeConfig] = None,
    report: Optional[IssueSink] = None,
) -> NormalizeResult:
    """Normalize one Mermaid diagram source. Never raises for `str` input.

    classify -> escape pre-pass -> dialect converter -> label validation.
    Diagnostics go to the optional `report` sink and onto the result.
    """
    cfg = config or NormalizeConfig()
    issues: list[NormalizeIssue] = []
    emit = make_emitter(cfg, issues, report)

    diagram_type = classify_diagram(source)

    try:
        prepass = resolve_escapes(source)
    except Exception as exc:
        emit("error", "E_PREPASS_FAILED", f"escape pre-pass failed: {exc!r}")
        return NormalizeResult(
            text=source,
            diagram_type=diagram_type,
            valid=False,
            fallback="original",
            issues=tuple(issues),
        )

    converter = get_converter(diagram_type)
    try:
        converted = converter.convert(prepass, cfg, emit)
    except Exception as exc:
        emit(
            "error",
            "E_CONVERSION_FAILED",
            f"{converter.dialect} conversion failed: {exc!r}",
        )
        return NormalizeResult(
            text=source,
            diagram_type=diagram_type,
            valid=False,
            fallback="original",
            issues=tuple(issues),
        )

    bad_lines = find_unbalanced_labels(converted, emit)
    if not bad_lines:
        return NormalizeResult(
            text=converted, diagram_type=diagram_type, issues=tuple(issues)
        )

    if cfg.fallback_scope == "line":
        text = _revert_lines(converted, prepass, bad_lines)
    else:
        text = prepass
    return NormalizeResult(
        text=text,
        diagram_type=diagram_type,
        valid=False,
        fallback="prepass",
        issues=tuple(issues),
    )


def normalize_text(
    source: str,
    config: Optional[NormalizeConfig] = None,
    report: Optional[IssueSink] = None,
) -> str:
    return normalize(source, config, report).text
