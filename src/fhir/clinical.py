"""FHIR clinical resources: Condition, Procedure, Immunization, CarePlan."""

from fhir.datatypes import CodeableConcept, Period, Reference
from fhir.resource import Resource


class Condition(Resource, total=False):
    clinicalStatus: CodeableConcept
    code: CodeableConcept
    encounter: Reference
    onsetDateTime: str
    abatementDateTime: str
    recordedDate: str
    status: str


class Procedure(Resource, total=False):
    status: str
    code: CodeableConcept
    encounter: Reference
    performedDateTime: str
    performedPeriod: Period


class Immunization(Resource, total=False):
    status: str
    vaccineCode: CodeableConcept
    encounter: Reference
    occurrenceDateTime: str


class CarePlan(Resource, total=False):
    status: str
    title: str
    period: Period
    encounter: Reference
