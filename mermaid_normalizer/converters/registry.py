from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from ..classify import DiagramType
from ..config import NormalizeConfig
from ..validate import Emit
from .flow import convert_flow
from .sequence import convert_sequence

ConvertFn = Callable[[str, Optional[NormalizeConfig], Emit], str]


@dataclass(frozen=True)
class ConverterSpec:
    dialect: str
    description: str
    convert: ConvertFn


FLOW_CONVERTER = ConverterSpec(
    dialect="flow",
    description="Legacy node shapes to shape descriptors; quoted edge labels",
    convert=convert_flow,
)

SEQUENCE_CONVERTER = ConverterSpec(
    dialect="sequence",
    description="Escaped message separators; repaired activation markers",
    convert=convert_sequence,
)

# Headerless/unknown documents use the flow dialect.
CONVERTERS: dict[str, ConverterSpec] = {
    "flow": FLOW_CONVERTER,
    "sequence": SEQUENCE_CONVERTER,
    "other": FLOW_CONVERTER,
}


def get_converter(diagram_type: DiagramType) -> ConverterSpec:
    return CONVERTERS.get(diagram_type, FLOW_CONVERTER)
