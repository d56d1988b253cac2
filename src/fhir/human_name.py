"""FHIR HumanName type."""

from typing import TypedDict

from fhir.datatypes import Period


class HumanName(TypedDict, total=False):
    use: str
    family: str
    given: list[str]
    prefix: list[str]
    period: Period
