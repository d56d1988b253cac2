"""FHIR Identifier type."""

from typing import TypedDict

from fhir.datatypes import CodeableConcept, Period


class Identifier(TypedDict, total=False):
    use: str
    type: CodeableConcept
    system: str
    value: str
    period: Period
