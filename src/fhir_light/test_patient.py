"""
Unit tests for :mod:`fhir_light.patient`.
"""

import logging
from typing import Any

import pytest
from stubs.fhir_resources import PATIENT_RESOURCE, build_bundle

from fhir_light.patient import (
    RESOURCE_COLLECTIONS,
    MissingPatientResourceError,
    Patient,
    PatientLoadError,
    build_patient,
)


def test_build_patient_copies_demographics(patient: Patient) -> None:
    assert patient.id == "patient-1"
    assert patient.name == PATIENT_RESOURCE["name"][0]
    assert patient.gender == "female"
    assert patient.birth_date == "1990-06-15"
    assert patient.display_name == "Jane Q Smith"


def test_build_patient_collects_every_known_resource_type(patient: Patient) -> None:
    assert patient.resource_count == {
        "encounters": 2,
        "conditions": 4,
        "observations": 7,
        "immunizations": 1,
        "diagnostic_reports": 2,
        "document_references": 3,
        "claims": 1,
        "explanation_of_benefits": 1,
        "procedures": 1,
        "medication_requests": 4,
        "care_teams": 1,
        "care_plans": 3,
        "provenances": 3,
        "devices": 1,
        "supply_deliveries": 1,
        "medications": 1,
        "medication_administrations": 4,
    }


def test_collections_hold_only_their_resource_type(patient: Patient) -> None:
    for name, resource_type in RESOURCE_COLLECTIONS.items():
        assert all(
            resource["resourceType"] == resource_type
            for resource in getattr(patient, name)
        ), name


def test_collections_keep_bundle_order(patient: Patient) -> None:
    assert [obs["id"] for obs in patient.observations] == [
        "obs-hr-1",
        "obs-hr-2",
        "obs-weight",
        "obs-height",
        "obs-creat",
        "obs-glucose",
        "obs-smoking",
    ]
    assert [cond["id"] for cond in patient.conditions] == [
        "cond-1",
        "cond-2",
        "cond-3",
        "cond-4",
    ]


def test_collections_are_empty_not_missing_for_patient_only_bundle() -> None:
    patient = build_patient(build_bundle(PATIENT_RESOURCE))

    for name in RESOURCE_COLLECTIONS:
        assert getattr(patient, name) == ()


def test_patient_is_immutable(patient: Patient) -> None:
    with pytest.raises(AttributeError):
        patient.gender = "male"  # type: ignore[misc]


def test_first_patient_entry_is_used_when_several_are_present() -> None:
    second = {**PATIENT_RESOURCE, "id": "patient-2"}
    patient = build_patient(build_bundle(PATIENT_RESOURCE, second))

    assert patient.id == "patient-1"


@pytest.mark.parametrize(
    "bundle",
    [
        {"resourceType": "Bundle", "entry": []},
        {"resourceType": "Bundle"},
        {"resourceType": "Bundle", "entry": "not-a-list"},
        build_bundle({"resourceType": "Observation", "id": "obs-1"}),
        [],
        None,
    ],
)
def test_build_patient_raises_when_patient_missing(bundle: Any) -> None:
    with pytest.raises(MissingPatientResourceError) as exc_info:
        build_patient(bundle)

    assert isinstance(exc_info.value, PatientLoadError)
    assert str(exc_info.value) == "No Patient resource found in the Bundle"


def test_malformed_entries_and_unknown_types_are_skipped() -> None:
    bundle = {
        "entry": [
            "garbage",
            {"fullUrl": "urn:uuid:no-resource"},
            {"resource": ["not", "an", "object"]},
            {"resource": {"resourceType": ["Observation"], "id": "weird"}},
            {"resource": {"resourceType": "Organization", "id": "org-1"}},
            {"resource": PATIENT_RESOURCE},
            {"resource": {"resourceType": "Encounter", "id": "enc-1"}},
        ]
    }

    patient = build_patient(bundle)

    assert patient.id == "patient-1"
    assert [enc["id"] for enc in patient.encounters] == ["enc-1"]
    assert patient.observations == ()


def test_missing_optional_demographics_read_as_none() -> None:
    patient = build_patient(build_bundle({"resourceType": "Patient", "id": "p-9"}))

    assert patient.name is None
    assert patient.gender is None
    assert patient.birth_date is None
    assert patient.display_name == "p-9"


def test_build_patient_writes_diagnostics_to_injected_logger(
    caplog: pytest.LogCaptureFixture,
) -> None:
    sink = logging.getLogger("test.sink")

    with caplog.at_level(logging.DEBUG, logger="test.sink"):
        build_patient(build_bundle(PATIENT_RESOURCE), source="bundle.json", logger=sink)

    records = [r for r in caplog.records if r.name == "test.sink"]
    assert [r.getMessage() for r in records] == ["patient.indexed"]
    assert records[0].patient_id == "patient-1"  # type: ignore[attr-defined]
    assert records[0].source == "bundle.json"  # type: ignore[attr-defined]


def test_missing_patient_is_logged_as_warning(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with (
        caplog.at_level(logging.WARNING, logger="fhir_light.patient"),
        pytest.raises(MissingPatientResourceError),
    ):
        build_patient({"entry": []}, source="empty.json")

    assert any(r.getMessage() == "patient.missing" for r in caplog.records)
