"""
Module: fhir_light.patient

Builds an immutable :class:`Patient` record from a parsed FHIR R5 Bundle.

The Bundle is decoded once, here. Entries that are not JSON objects (or that do
not wrap a ``resource`` object) are skipped, every known resource type is
collected into its own tuple in Bundle order, and unknown resource types are
ignored. Derived views over the result live in :mod:`fhir_light.views`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, cast

from fhir_light.common.common import get_list, get_str

if TYPE_CHECKING:
    from fhir import (
        CarePlan,
        Condition,
        DiagnosticReport,
        DocumentReference,
        Encounter,
        HumanName,
        Immunization,
        Medication,
        MedicationAdministration,
        MedicationRequest,
        Observation,
        Procedure,
        Provenance,
        Resource,
    )

_log = logging.getLogger(__name__)

# Collection attribute on Patient -> FHIR resourceType collected into it.
RESOURCE_COLLECTIONS: dict[str, str] = {
    "encounters": "Encounter",
    "conditions": "Condition",
    "observations": "Observation",
    "immunizations": "Immunization",
    "diagnostic_reports": "DiagnosticReport",
    "document_references": "DocumentReference",
    "claims": "Claim",
    "explanation_of_benefits": "ExplanationOfBenefit",
    "procedures": "Procedure",
    "medication_requests": "MedicationRequest",
    "care_teams": "CareTeam",
    "care_plans": "CarePlan",
    "provenances": "Provenance",
    "devices": "Device",
    "supply_deliveries": "SupplyDelivery",
    "medications": "Medication",
    "medication_administrations": "MedicationAdministration",
}


class PatientLoadError(Exception):
    """
    Base class for every error raised while turning a source into a Patient.
    """


class MissingPatientResourceError(PatientLoadError):
    """
    Raised when a Bundle contains no Patient resource.
    """

    def __init__(self, message: str = "No Patient resource found in the Bundle"):
        super().__init__(message)


@dataclass(frozen=True)
class Patient:
    """
    Patient demographics plus every related resource found in the same Bundle.

    Collections are tuples in Bundle order and are empty, never absent, when the
    Bundle holds no resource of that type.

    :param id: ``Patient.id``.
    :param name: First entry of ``Patient.name``, if any.
    :param gender: ``Patient.gender``.
    :param birth_date: ``Patient.birthDate`` as written in the Bundle.
    """

    id: str | None
    name: HumanName | None
    gender: str | None
    birth_date: str | None
    encounters: tuple[Encounter, ...] = ()
    conditions: tuple[Condition, ...] = ()
    observations: tuple[Observation, ...] = ()
    immunizations: tuple[Immunization, ...] = ()
    diagnostic_reports: tuple[DiagnosticReport, ...] = ()
    document_references: tuple[DocumentReference, ...] = ()
    claims: tuple[Resource, ...] = ()
    explanation_of_benefits: tuple[Resource, ...] = ()
    procedures: tuple[Procedure, ...] = ()
    medication_requests: tuple[MedicationRequest, ...] = ()
    care_teams: tuple[Resource, ...] = ()
    care_plans: tuple[CarePlan, ...] = ()
    provenances: tuple[Provenance, ...] = ()
    devices: tuple[Resource, ...] = ()
    supply_deliveries: tuple[Resource, ...] = ()
    medications: tuple[Medication, ...] = ()
    medication_administrations: tuple[MedicationAdministration, ...] = ()
    source: str | None = field(default=None, compare=False)

    @property
    def display_name(self) -> str:
        """
        Given names followed by family name, e.g. ``"Jane Q Smith"``.

        Falls back to the patient id, then to an empty string.
        """
        if self.name is None:
            return self.id or ""
        given = [part for part in get_list(self.name, "given") if isinstance(part, str)]
        family = get_str(self.name, "family")
        parts = [*given, family] if family else given
        display = " ".join(part.strip() for part in parts if part).strip()
        return display or self.id or ""

    @property
    def resource_count(self) -> dict[str, int]:
        """Number of resources held in each named collection."""
        return {name: len(getattr(self, name)) for name in RESOURCE_COLLECTIONS}


def _iter_resources(bundle: Any) -> list[Mapping[str, Any]]:
    resources: list[Mapping[str, Any]] = []
    for entry in get_list(bundle, "entry"):
        if not isinstance(entry, Mapping):
            continue
        resource = entry.get("resource")
        if isinstance(resource, Mapping):
            resources.append(resource)
    return resources


def build_patient(
    bundle: Any,
    *,
    source: str | None = None,
    logger: logging.Logger | None = None,
) -> Patient:
    """
    Build a :class:`Patient` from a parsed FHIR Bundle.

    :param bundle: Parsed Bundle document (``{"entry": [{"resource": ...}]}``).
    :param source: Where the Bundle came from, recorded on the Patient.
    :param logger: Diagnostics sink; defaults to this module's logger.
    :returns: The Patient and its related resource collections.
    :raises MissingPatientResourceError: If the Bundle holds no Patient resource.
    """
    log = logger or _log
    resources = _iter_resources(bundle)

    patient_resource = next(
        (r for r in resources if r.get("resourceType") == "Patient"), None
    )
    if patient_resource is None:
        log.warning("patient.missing", extra={"source": source})
        raise MissingPatientResourceError()

    collected: dict[str, list[Any]] = {name: [] for name in RESOURCE_COLLECTIONS}
    by_type = {rtype: name for name, rtype in RESOURCE_COLLECTIONS.items()}
    for resource in resources:
        resource_type = resource.get("resourceType")
        name = by_type.get(resource_type) if isinstance(resource_type, str) else None
        if name is not None:
            collected[name].append(resource)

    names = get_list(patient_resource, "name")
    first_name = names[0] if names and isinstance(names[0], Mapping) else None

    patient = Patient(
        id=get_str(patient_resource, "id"),
        name=cast("HumanName | None", first_name),
        gender=get_str(patient_resource, "gender"),
        birth_date=get_str(patient_resource, "birthDate"),
        source=source,
        **{name: tuple(items) for name, items in collected.items()},
    )

    log.debug(
        "patient.indexed",
        extra={
            "patient_id": patient.id,
            "source": source,
            "resource_count": patient.resource_count,
        },
    )
    return patient
