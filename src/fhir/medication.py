"""FHIR Medication, MedicationRequest and MedicationAdministration resources."""

from typing import TypedDict

from fhir.datatypes import CodeableConcept, Quantity, Reference
from fhir.resource import Resource


class Medication(Resource, total=False):
    code: CodeableConcept
    status: str


class MedicationRequest(Resource, total=False):
    status: str
    authoredOn: str
    medicationCodeableConcept: CodeableConcept
    medicationReference: Reference
    encounter: Reference


class Dosage(TypedDict, total=False):
    dose: Quantity
    route: CodeableConcept


class MedicationAdministration(Resource, total=False):
    status: str
    effectiveDateTime: str
    medicationReference: Reference
    dosage: Dosage
