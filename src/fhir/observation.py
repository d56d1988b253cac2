"""FHIR Observation and DiagnosticReport resources."""

from typing import TypedDict

from fhir.datatypes import CodeableConcept, Quantity, Reference
from fhir.resource import Resource


class ReferenceRange(TypedDict, total=False):
    low: Quantity
    high: Quantity
    text: str


class Observation(Resource, total=False):
    status: str
    category: list[CodeableConcept]
    code: CodeableConcept
    subject: Reference
    encounter: Reference
    effectiveDateTime: str
    issued: str
    valueQuantity: Quantity
    valueString: str
    valueCodeableConcept: CodeableConcept
    referenceRange: list[ReferenceRange]


class DiagnosticReport(Resource, total=False):
    status: str
    code: CodeableConcept
    encounter: Reference
    effectiveDateTime: str
    issued: str
    result: list[Reference]
