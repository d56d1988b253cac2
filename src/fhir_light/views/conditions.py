"""
Status filters for conditions and care plans, and the encounter timeline.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, TypedDict

from fhir_light.common.common import (
    CONDITION_CLINICAL_SYSTEM,
    get_str,
    iter_codings,
    parse_datetime,
)
from fhir_light.views.observations import sort_key_by_date

if TYPE_CHECKING:
    from fhir import CarePlan, Condition

    from fhir_light.patient import Patient

ACTIVE_CLINICAL_STATUSES = frozenset({"active", "recurrence", "relapse"})
ACTIVE_REQUEST_STATUSES = frozenset({"active", "on-hold"})


class EncounterTimelineRow(TypedDict):
    id: str | None
    type: str | None
    date: datetime | None
    endDate: datetime | None
    status: str | None


def is_active_condition(condition: Condition) -> bool:
    return any(
        coding.get("system") == CONDITION_CLINICAL_SYSTEM
        and coding.get("code") in ACTIVE_CLINICAL_STATUSES
        for coding in iter_codings(condition.get("clinicalStatus"))
    )


def get_active_conditions(patient: Patient) -> list[Condition]:
    """Conditions whose clinical status is active, recurrence or relapse."""
    return [cond for cond in patient.conditions if is_active_condition(cond)]


def get_active_care_plans(patient: Patient) -> list[CarePlan]:
    return [
        plan
        for plan in patient.care_plans
        if plan.get("status") in ACTIVE_REQUEST_STATUSES
    ]


def get_encounter_timeline(patient: Patient) -> list[EncounterTimelineRow]:
    """Encounters as timeline rows, earliest start first."""
    rows = [
        EncounterTimelineRow(
            id=get_str(enc, "id"),
            type=get_str(enc, "type", 0, "text"),
            date=parse_datetime(get_str(enc, "period", "start")),
            endDate=parse_datetime(get_str(enc, "period", "end")),
            status=get_str(enc, "status"),
        )
        for enc in patient.encounters
    ]
    return sorted(rows, key=lambda row: sort_key_by_date(row["date"]))
