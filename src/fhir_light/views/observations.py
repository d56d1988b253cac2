"""
Observation views: category filters, trends, latest values and chart rows.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, TypedDict, TypeVar

from fhir_light.common.common import (
    LOINC_SYSTEM,
    OBSERVATION_CATEGORY_SYSTEM,
    get_number,
    get_path,
    get_str,
    has_coding,
    parse_datetime,
)

if TYPE_CHECKING:
    from fhir import Observation

    from fhir_light.patient import Patient

VITAL_SIGNS = "vital-signs"
LABORATORY = "laboratory"


@dataclass(frozen=True)
class TrendPoint:
    """One point of a vital sign trend line."""

    date: datetime | None
    value: float | None
    unit: str | None


class LabResultRow(TypedDict):
    date: datetime | None
    code: str | None
    value: float | None
    unit: str | None
    referenceRange: dict[str, Any] | None


class ScatterPoint(TypedDict):
    x: float | None
    y: float | None
    timestamp: datetime | None


def observation_date(observation: Observation) -> datetime | None:
    return parse_datetime(observation.get("effectiveDateTime"))


def sort_key_by_date(value: datetime | None) -> tuple[bool, datetime | None]:
    """Sort key that orders dates ascending and puts missing dates last."""
    return (value is None, value)


T = TypeVar("T")


def _sorted_by_date(
    items: Iterable[T], date_of: Callable[[T], datetime | None]
) -> list[T]:
    return sorted(items, key=lambda item: sort_key_by_date(date_of(item)))


def get_observations_by_category(
    patient: Patient, category: str
) -> list[Observation]:
    """
    Return observations coded with ``category`` under the observation-category
    system. The code comparison is exact and case-sensitive.
    """
    return [
        obs
        for obs in patient.observations
        if has_coding(obs.get("category"), category, OBSERVATION_CATEGORY_SYSTEM)
    ]


def get_vitals(patient: Patient) -> list[Observation]:
    return get_observations_by_category(patient, VITAL_SIGNS)


def get_lab_results(patient: Patient) -> list[Observation]:
    return get_observations_by_category(patient, LABORATORY)


def get_vital_sign_trend(patient: Patient, vital_type: str) -> list[TrendPoint]:
    """
    Return the trend of one vital sign, oldest first.

    A vital matches when its ``code.text`` contains ``vital_type``, ignoring
    case. Points with the same date keep their Bundle order.

    :param patient: Patient to read vitals from.
    :param vital_type: Substring of the vital's display text, e.g. ``"heart rate"``.
    :returns: ``TrendPoint`` list sorted by date.
    """
    needle = vital_type.lower()
    points = [
        TrendPoint(
            date=observation_date(obs),
            value=get_number(obs, "valueQuantity", "value"),
            unit=get_str(obs, "valueQuantity", "unit"),
        )
        for obs in get_vitals(patient)
        if needle in (get_str(obs, "code", "text") or "").lower()
    ]
    return _sorted_by_date(points, lambda point: point.date)


def find_latest(observations: Iterable[Observation]) -> Observation | None:
    """
    Return the observation with the latest ``effectiveDateTime``.

    The first of several equally recent observations wins. An observation with
    no readable date only wins when nothing else has one.
    """
    latest: Observation | None = None
    latest_date: datetime | None = None
    for obs in observations:
        current = observation_date(obs)
        if latest is None:
            latest, latest_date = obs, current
        elif current is not None and (latest_date is None or current > latest_date):
            latest, latest_date = obs, current
    return latest


def find_by_loinc(patient: Patient, code: str) -> list[Observation]:
    """Return observations carrying LOINC ``code``."""
    return [
        obs
        for obs in patient.observations
        if has_coding(obs.get("code"), code, LOINC_SYSTEM)
    ]


def get_latest_observation(patient: Patient, category: str) -> Observation | None:
    """Return the most recent observation in ``category``, or ``None``."""
    return find_latest(get_observations_by_category(patient, category))


def get_observation_history(
    patient: Patient,
    category: str,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Observation]:
    """
    Return observations in ``category`` dated within ``[start, end]``, oldest
    first. Either bound may be omitted. Observations without a readable date
    only appear when no bound is given.
    """
    lower = parse_datetime(start) if start is not None else None
    upper = parse_datetime(end) if end is not None else None

    def in_window(obs: Observation) -> bool:
        when = observation_date(obs)
        if lower is None and upper is None:
            return True
        if when is None:
            return False
        return (lower is None or when >= lower) and (upper is None or when <= upper)

    matching = [
        obs for obs in get_observations_by_category(patient, category) if in_window(obs)
    ]
    return _sorted_by_date(matching, observation_date)


def get_lab_results_chart(patient: Patient) -> list[LabResultRow]:
    """Lab results as flat chart rows, oldest first."""
    rows = [
        LabResultRow(
            date=observation_date(obs),
            code=get_str(obs, "code", "text"),
            value=get_number(obs, "valueQuantity", "value"),
            unit=get_str(obs, "valueQuantity", "unit"),
            referenceRange=get_path(obs, "referenceRange", 0),
        )
        for obs in get_lab_results(patient)
    ]
    return _sorted_by_date(rows, lambda row: row["date"])


def generate_risk_factor_scatter(
    patient: Patient, x_category: str, y_category: str
) -> list[ScatterPoint]:
    """
    Pair the latest observation of two categories into a single scatter point.

    :returns: A one-point list, or ``[]`` when either category has no
        observations.
    """
    latest_x = get_latest_observation(patient, x_category)
    latest_y = get_latest_observation(patient, y_category)
    if latest_x is None or latest_y is None:
        return []

    return [
        ScatterPoint(
            x=get_number(latest_x, "valueQuantity", "value"),
            y=get_number(latest_y, "valueQuantity", "value"),
            timestamp=observation_date(latest_x),
        )
    ]
