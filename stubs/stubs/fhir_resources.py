"""
Builders for the small FHIR resources and Bundles used throughout the tests.
"""

from typing import Any

OBS_CATEGORY = "http://terminology.hl7.org/CodeSystem/observation-category"
CONDITION_CLINICAL = "http://terminology.hl7.org/CodeSystem/condition-clinical"
LOINC = "http://loinc.org"

PATIENT_RESOURCE: dict[str, Any] = {
    "resourceType": "Patient",
    "id": "patient-1",
    "identifier": [{"system": "urn:example:mrn", "value": "MRN-001"}],
    "name": [
        {"use": "official", "family": "Smith", "given": ["Jane", "Q"]},
        {"use": "nickname", "given": ["JJ"]},
    ],
    "gender": "female",
    "birthDate": "1990-06-15",
}


def observation(
    obs_id: str,
    category: str,
    loinc_code: str,
    display: str,
    effective: str | None,
    value: float | None = None,
    unit: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build an Observation resource with a single category and LOINC coding."""
    resource: dict[str, Any] = {
        "resourceType": "Observation",
        "id": obs_id,
        "status": "final",
        "category": [{"coding": [{"system": OBS_CATEGORY, "code": category}]}],
        "code": {
            "coding": [{"system": LOINC, "code": loinc_code, "display": display}],
            "text": display,
        },
    }
    if effective is not None:
        resource["effectiveDateTime"] = effective
    if value is not None:
        resource["valueQuantity"] = {"value": value, "unit": unit}
    resource.update(extra)
    return resource


def condition(cond_id: str, status: str, text: str, **extra: Any) -> dict[str, Any]:
    return {
        "resourceType": "Condition",
        "id": cond_id,
        "clinicalStatus": {"coding": [{"system": CONDITION_CLINICAL, "code": status}]},
        "code": {"text": text},
        **extra,
    }


def provenance(
    prov_id: str, targets: list[str], last_updated: str, agent_code: str
) -> dict[str, Any]:
    return {
        "resourceType": "Provenance",
        "id": prov_id,
        "meta": {"lastUpdated": last_updated},
        "target": [{"reference": target} for target in targets],
        "agent": [{"type": {"coding": [{"code": agent_code}]}}],
    }


def build_bundle(*resources: Any) -> dict[str, Any]:
    return {
        "resourceType": "Bundle",
        "type": "collection",
        "entry": [{"resource": resource} for resource in resources],
    }
