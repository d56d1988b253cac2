"""
Cross-resource views built from Provenance back-references.

A resource is "related" to another when some Provenance lists a target whose
reference ends in the other resource's id.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, TypedDict

from fhir_light.common.common import (
    get_list,
    get_path,
    get_str,
    has_coding,
    parse_datetime,
    references_resource,
)
from fhir_light.views.observations import sort_key_by_date

if TYPE_CHECKING:
    from fhir import CarePlan, Encounter, Provenance

    from fhir_light.patient import Patient


class TimelineEntry(TypedDict):
    type: str | None
    date: datetime | None
    id: str | None


class ResourceReference(TypedDict):
    type: str | None
    id: str | None
    reference: str | None


class ConditionHistoryEntry(TypedDict):
    type: str | None
    date: datetime | None
    status: str | None
    code: str | None


class EncounterDetails(TypedDict):
    encounter: Encounter
    relatedResources: list[TimelineEntry]


class CarePlanDetails(TypedDict):
    carePlan: CarePlan
    relatedResources: list[TimelineEntry]


def _targets(provenance: Provenance, resource_id: str) -> bool:
    return any(
        references_resource(get_str(target, "reference"), resource_id)
        for target in get_list(provenance, "target")
    )


def _has_agent_type(provenance: Provenance, relationship_type: str) -> bool:
    return any(
        has_coding(get_path(agent, "type"), relationship_type)
        for agent in get_list(provenance, "agent")
    )


def _last_updated(resource: Any) -> datetime | None:
    return parse_datetime(get_str(resource, "meta", "lastUpdated"))


def get_provenance_for_resource(
    patient: Patient, resource_id: str
) -> Provenance | None:
    """First Provenance targeting ``resource_id``, or ``None``."""
    return next(
        (prov for prov in patient.provenances if _targets(prov, resource_id)), None
    )


def get_related_resources(
    patient: Patient, resource_id: str, relationship_type: str | None = None
) -> list[Provenance]:
    """
    Provenance records that target ``resource_id``.

    :param relationship_type: When given, a Provenance only counts if one of its
        agents has a type coding with this code.
    """
    return [
        prov
        for prov in patient.provenances
        if _targets(prov, resource_id)
        and (relationship_type is None or _has_agent_type(prov, relationship_type))
    ]


def _timeline_entries(related: list[Provenance]) -> list[TimelineEntry]:
    return [
        TimelineEntry(
            type=get_str(res, "resourceType"),
            date=_last_updated(res),
            id=get_str(res, "id"),
        )
        for res in related
    ]


def get_resource_timeline(patient: Patient, resource_id: str) -> list[TimelineEntry]:
    """Related records of ``resource_id`` ordered by ``meta.lastUpdated``."""
    entries = _timeline_entries(get_related_resources(patient, resource_id))
    return sorted(entries, key=lambda entry: sort_key_by_date(entry["date"]))


def get_resource_references(
    patient: Patient, resource_id: str
) -> list[ResourceReference]:
    return [
        ResourceReference(
            type=get_str(res, "resourceType"),
            id=get_str(res, "id"),
            reference=get_str(res, "target", 0, "reference"),
        )
        for res in get_related_resources(patient, resource_id)
    ]


def get_condition_history(
    patient: Patient, condition_id: str
) -> list[ConditionHistoryEntry] | None:
    """
    History of a condition as recorded by related Provenance.

    :returns: Entries ordered by ``meta.lastUpdated``, or ``None`` when the
        patient has no condition with that id.
    """
    if not any(cond.get("id") == condition_id for cond in patient.conditions):
        return None

    entries = [
        ConditionHistoryEntry(
            type=get_str(res, "resourceType"),
            date=_last_updated(res),
            status=get_str(res, "status"),
            code=get_str(res, "code", "text"),
        )
        for res in get_related_resources(patient, condition_id)
    ]
    return sorted(entries, key=lambda entry: sort_key_by_date(entry["date"]))


def get_encounter_details(
    patient: Patient, encounter_id: str
) -> EncounterDetails | None:
    encounter = next(
        (enc for enc in patient.encounters if enc.get("id") == encounter_id), None
    )
    if encounter is None:
        return None
    return EncounterDetails(
        encounter=encounter,
        relatedResources=_timeline_entries(
            get_related_resources(patient, encounter_id)
        ),
    )


def get_care_plan_details(
    patient: Patient, care_plan_id: str
) -> CarePlanDetails | None:
    care_plan = next(
        (plan for plan in patient.care_plans if plan.get("id") == care_plan_id), None
    )
    if care_plan is None:
        return None
    return CarePlanDetails(
        carePlan=care_plan,
        relatedResources=_timeline_entries(
            get_related_resources(patient, care_plan_id)
        ),
    )
