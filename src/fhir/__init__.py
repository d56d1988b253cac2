"""FHIR R5 data types and resources."""

from fhir.bundle import Bundle, BundleEntry
from fhir.clinical import CarePlan, Condition, Immunization, Procedure
from fhir.datatypes import (
    Attachment,
    CodeableConcept,
    Coding,
    Meta,
    Period,
    Quantity,
    Reference,
)
from fhir.document_reference import DocumentReference
from fhir.encounter import Encounter
from fhir.human_name import HumanName
from fhir.identifier import Identifier
from fhir.medication import Medication, MedicationAdministration, MedicationRequest
from fhir.observation import DiagnosticReport, Observation
from fhir.operation_outcome import OperationOutcome, OperationOutcomeIssue
from fhir.patient import Patient
from fhir.provenance import Provenance, ProvenanceAgent
from fhir.resource import Resource

__all__ = [
    "Attachment",
    "Bundle",
    "BundleEntry",
    "CarePlan",
    "CodeableConcept",
    "Coding",
    "Condition",
    "DiagnosticReport",
    "DocumentReference",
    "Encounter",
    "HumanName",
    "Identifier",
    "Immunization",
    "Medication",
    "MedicationAdministration",
    "MedicationRequest",
    "Meta",
    "Observation",
    "OperationOutcome",
    "OperationOutcomeIssue",
    "Patient",
    "Period",
    "Procedure",
    "Provenance",
    "ProvenanceAgent",
    "Quantity",
    "Reference",
    "Resource",
]
