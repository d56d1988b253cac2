"""FHIR OperationOutcome resource, used for error responses."""

from typing import Literal, NotRequired, TypeAlias, TypedDict

from fhir.datatypes import CodeableConcept

IssueSeverity: TypeAlias = Literal["fatal", "error", "warning", "information"]


class OperationOutcomeIssue(TypedDict):
    severity: IssueSeverity
    code: str
    diagnostics: str
    details: NotRequired[CodeableConcept]
    expression: NotRequired[list[str]]


class OperationOutcome(TypedDict):
    resourceType: Literal["OperationOutcome"]
    issue: list[OperationOutcomeIssue]
