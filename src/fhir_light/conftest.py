"""Pytest configuration and shared fixtures for patient loader tests."""

from typing import Any

import pytest
import requests
from stubs.fhir_resources import (
    PATIENT_RESOURCE,
    build_bundle,
    condition,
    observation,
    provenance,
)
from stubs.stub_bundle_server import BundleServerStub

from fhir_light.patient import Patient, build_patient


@pytest.fixture
def patient_bundle() -> dict[str, Any]:
    """
    A Bundle with one Patient and a spread of related clinical resources.

    The resource order inside each type is deliberate: tests rely on it for
    stability checks.
    """
    return build_bundle(
        {"resourceType": "Organization", "id": "org-1", "name": "Clinic A"},
        PATIENT_RESOURCE,
        observation(
            "obs-hr-1",
            "vital-signs",
            "8867-4",
            "Heart rate",
            "2024-03-01T10:00:00Z",
            72,
            "beats/minute",
        ),
        observation(
            "obs-hr-2",
            "vital-signs",
            "8867-4",
            "Heart rate",
            "2024-01-15T09:30:00Z",
            80,
            "beats/minute",
        ),
        observation(
            "obs-weight",
            "vital-signs",
            "29463-7",
            "Body Weight",
            "2024-01-15T09:30:00Z",
            70,
            "kg",
        ),
        observation(
            "obs-height",
            "vital-signs",
            "8302-2",
            "Body Height",
            "2024-01-15T09:30:00Z",
            175,
            "cm",
        ),
        observation(
            "obs-creat",
            "laboratory",
            "2160-0",
            "Creatinine",
            "2024-02-01T08:00:00Z",
            1.0,
            "mg/dL",
            referenceRange=[
                {"low": {"value": 0.5}, "high": {"value": 1.1}, "text": "0.5-1.1"}
            ],
        ),
        observation(
            "obs-glucose",
            "laboratory",
            "2339-0",
            "Glucose",
            "2023-12-01T08:00:00Z",
            95,
            "mg/dL",
        ),
        observation(
            "obs-smoking",
            "social-history",
            "72166-2",
            "Tobacco smoking status",
            "2024-01-15T09:30:00Z",
            valueCodeableConcept={"text": "Never smoker"},
        ),
        {
            "resourceType": "Encounter",
            "id": "enc-1",
            "status": "finished",
            "type": [
                {
                    "coding": [{"display": "General examination"}],
                    "text": "General examination",
                }
            ],
            "reasonCode": [{"coding": [{"display": "Annual checkup"}]}],
            "period": {"start": "2024-01-15T09:00:00Z", "end": "2024-01-15T10:00:00Z"},
            "location": [{"location": {"display": "Clinic A"}}],
            "participant": [{"individual": {"display": "Dr. Who"}}],
        },
        {
            "resourceType": "Encounter",
            "id": "enc-2",
            "status": "finished",
            "type": [
                {
                    "coding": [{"display": "Emergency room admission"}],
                    "text": "Emergency",
                }
            ],
            "period": {"start": "2023-11-20T22:00:00Z", "end": "2023-11-21T02:00:00Z"},
        },
        condition(
            "cond-1",
            "active",
            "Hypertension",
            onsetDateTime="2020-05-01T00:00:00Z",
            encounter={"reference": "urn:uuid:enc-2"},
        ),
        condition(
            "cond-2",
            "resolved",
            "Acute bronchitis",
            onsetDateTime="2023-11-20T22:30:00Z",
            abatementDateTime="2023-12-05T00:00:00Z",
        ),
        condition("cond-3", "recurrence", "Migraine", recordedDate="2022-08-10"),
        condition("cond-4", "inactive", "Sprain"),
        {
            "resourceType": "Procedure",
            "id": "proc-1",
            "status": "completed",
            "code": {"text": "Blood draw"},
            "performedDateTime": "2024-02-01T08:00:00Z",
        },
        {
            "resourceType": "Immunization",
            "id": "imm-1",
            "status": "completed",
            "vaccineCode": {"text": "Influenza vaccine"},
            "occurrenceDateTime": "2023-10-01T12:00:00Z",
        },
        {
            "resourceType": "DiagnosticReport",
            "id": "dr-1",
            "status": "final",
            "code": {"text": "Renal panel"},
            "effectiveDateTime": "2024-02-01T08:00:00Z",
            "result": [{"reference": "Observation/obs-creat"}],
        },
        {
            "resourceType": "DiagnosticReport",
            "id": "dr-2",
            "status": "final",
            "code": {"text": "Lipid panel"},
            "issued": "2023-12-01T09:00:00Z",
            "result": [{"reference": "Observation/obs-missing"}],
        },
        {
            "resourceType": "DocumentReference",
            "id": "doc-1",
            "status": "current",
            "type": {"coding": [{"display": "Progress note"}]},
            "category": [{"coding": [{"code": "clinical-note"}]}],
            "date": "2024-01-15T10:00:00Z",
            "author": [{"display": "Dr. Who"}],
            "context": {"encounter": [{"reference": "Encounter/enc-1"}]},
            "content": [
                {
                    "attachment": {
                        "contentType": "text/plain",
                        "data": "UGF0aWVudCBkb2luZyB3ZWxsLg==",
                    }
                }
            ],
        },
        {
            "resourceType": "DocumentReference",
            "id": "doc-2",
            "status": "current",
            "type": {"coding": [{"display": "Discharge summary"}]},
            "category": [{"coding": [{"code": "clinical-note"}]}],
            "date": "2023-11-21T03:00:00Z",
            "content": [{"attachment": {"data": "not base64!", "title": "Discharge"}}],
        },
        {
            "resourceType": "DocumentReference",
            "id": "doc-3",
            "category": [{"coding": [{"code": "imaging-report"}]}],
            "date": "2023-01-01T00:00:00Z",
        },
        {
            "resourceType": "Medication",
            "id": "med-1",
            "code": {"text": "Lisinopril 10 MG"},
        },
        {
            "resourceType": "MedicationRequest",
            "id": "mr-1",
            "status": "active",
            "authoredOn": "2023-06-01T00:00:00Z",
            "medicationReference": {"reference": "Medication/med-1"},
        },
        {
            "resourceType": "MedicationRequest",
            "id": "mr-2",
            "status": "completed",
            "authoredOn": "2023-11-21T01:00:00Z",
            "medicationCodeableConcept": {"text": "Amoxicillin 500 MG"},
        },
        {
            "resourceType": "MedicationRequest",
            "id": "mr-3",
            "status": "on-hold",
            "medicationCodeableConcept": {"text": "Ibuprofen 200 MG"},
        },
        {
            "resourceType": "MedicationRequest",
            "id": "mr-4",
            "status": "stopped",
            "authoredOn": "2022-01-01T00:00:00Z",
            "medicationCodeableConcept": {"text": "Aspirin 81 MG"},
        },
        {
            "resourceType": "MedicationAdministration",
            "id": "ma-1",
            "status": "completed",
            "effectiveDateTime": "2024-03-10T08:00:00Z",
            "medicationReference": {"reference": "Medication/med-1"},
            "dosage": {"dose": {"value": 10, "unit": "mg"}, "route": {"text": "oral"}},
        },
        {
            "resourceType": "MedicationAdministration",
            "id": "ma-2",
            "status": "not-done",
            "effectiveDateTime": "2024-03-20T08:00:00Z",
            "medicationReference": {"reference": "Medication/med-1"},
        },
        {
            "resourceType": "MedicationAdministration",
            "id": "ma-3",
            "status": "completed",
            "effectiveDateTime": "2023-12-01T08:00:00Z",
            "medicationReference": {"reference": "Medication/med-1"},
        },
        {
            "resourceType": "MedicationAdministration",
            "id": "ma-4",
            "status": "completed",
            "effectiveDateTime": "2024-03-12T08:00:00Z",
            "medicationReference": {"reference": "Medication/med-other"},
        },
        {
            "resourceType": "CarePlan",
            "id": "cp-1",
            "status": "active",
            "title": "Hypertension management",
            "period": {"start": "2020-05-02"},
        },
        {
            "resourceType": "CarePlan",
            "id": "cp-2",
            "status": "completed",
            "period": {"start": "2023-11-21T02:00:00Z", "end": "2023-12-05T00:00:00Z"},
        },
        {"resourceType": "CarePlan", "id": "cp-3", "status": "on-hold"},
        provenance("prov-1", ["Condition/cond-1"], "2024-01-15T10:00:00Z", "author"),
        provenance(
            "prov-2",
            ["Condition/cond-1", "Encounter/enc-1"],
            "2023-06-01T00:00:00Z",
            "verifier",
        ),
        provenance("prov-3", ["CarePlan/cp-1"], "2021-01-01T00:00:00Z", "author"),
        {"resourceType": "Claim", "id": "claim-1"},
        {"resourceType": "ExplanationOfBenefit", "id": "eob-1"},
        {"resourceType": "CareTeam", "id": "ct-1"},
        {"resourceType": "Device", "id": "dev-1"},
        {"resourceType": "SupplyDelivery", "id": "sd-1"},
    )


@pytest.fixture
def patient(patient_bundle: dict[str, Any]) -> Patient:
    return build_patient(patient_bundle)


@pytest.fixture
def stub() -> BundleServerStub:
    return BundleServerStub()


@pytest.fixture
def mock_requests_get(
    monkeypatch: pytest.MonkeyPatch, stub: BundleServerStub
) -> BundleServerStub:
    """
    Patch ``requests.get`` so calls are routed into :meth:`BundleServerStub.get`.

    :return: The stub serving the requests, for inspection.
    """
    monkeypatch.setattr(requests, "get", stub.get)
    return stub
