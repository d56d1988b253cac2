"""
Medication views: active prescriptions, administration history and adherence.
"""

from __future__ import annotations

import calendar
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, TypedDict

from fhir_light.common.common import (
    get_path,
    get_str,
    parse_datetime,
    references_resource,
)
from fhir_light.views.conditions import ACTIVE_REQUEST_STATUSES
from fhir_light.views.observations import sort_key_by_date

if TYPE_CHECKING:
    from fhir import MedicationRequest

    from fhir_light.patient import Patient

# Adherence window name -> (days, months) looked back from "now".
ADHERENCE_PERIODS: dict[str, tuple[int, int]] = {
    "1w": (7, 0),
    "1m": (0, 1),
    "3m": (0, 3),
}
DEFAULT_ADHERENCE_PERIOD = "1m"


class MedicationHistoryEntry(TypedDict):
    date: datetime | None
    dose: dict[str, Any] | None
    route: str | None
    status: str | None


class AdherencePoint(TypedDict):
    date: datetime | None
    taken: bool


def get_active_medications(patient: Patient) -> list[MedicationRequest]:
    """MedicationRequests whose status is active or on-hold."""
    return [
        request
        for request in patient.medication_requests
        if request.get("status") in ACTIVE_REQUEST_STATUSES
    ]


def get_medication_history(
    patient: Patient, medication_id: str
) -> list[MedicationHistoryEntry] | None:
    """
    Administrations of one Medication, oldest first.

    :returns: ``None`` when the patient has no Medication with that id.
    """
    if not any(med.get("id") == medication_id for med in patient.medications):
        return None

    entries = [
        MedicationHistoryEntry(
            date=parse_datetime(admin.get("effectiveDateTime")),
            dose=get_path(admin, "dosage", "dose"),
            route=get_str(admin, "dosage", "route", "text"),
            status=get_str(admin, "status"),
        )
        for admin in patient.medication_administrations
        if references_resource(
            get_str(admin, "medicationReference", "reference"), medication_id
        )
    ]
    return sorted(entries, key=lambda entry: sort_key_by_date(entry["date"]))


def months_before(moment: datetime, months: int) -> datetime:
    """
    ``moment`` moved back by whole calendar months, clamping the day to the
    length of the target month.
    """
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def adherence_window_start(period: str, now: datetime) -> datetime:
    days, months = ADHERENCE_PERIODS.get(
        period, ADHERENCE_PERIODS[DEFAULT_ADHERENCE_PERIOD]
    )
    return months_before(now - timedelta(days=days), months)


def get_medication_adherence_chart(
    patient: Patient,
    medication_id: str,
    period: str = DEFAULT_ADHERENCE_PERIOD,
    now: datetime | None = None,
) -> list[AdherencePoint] | None:
    """
    Taken/not-taken points for one Medication over a recent window.

    :param period: ``"1w"``, ``"1m"`` or ``"3m"``; anything else means ``"1m"``.
    :param now: End of the window; defaults to the current UTC time.
    :returns: Points inside the window, or ``None`` for an unknown Medication.
    """
    history = get_medication_history(patient, medication_id)
    if history is None:
        return None

    end = parse_datetime(now) or datetime.now(UTC)
    start = adherence_window_start(period, end)

    return [
        AdherencePoint(date=entry["date"], taken=entry["status"] == "completed")
        for entry in history
        if entry["date"] is not None and entry["date"] >= start
    ]
