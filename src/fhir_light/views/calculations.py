"""
Closed-form clinical calculations: age, BMI and eGFR.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from fhir_light.common.common import get_number, parse_datetime
from fhir_light.views.observations import find_by_loinc, find_latest

if TYPE_CHECKING:
    from fhir_light.patient import Patient

LOINC_BODY_WEIGHT = "29463-7"
LOINC_BODY_HEIGHT = "8302-2"
LOINC_CREATININE = "2160-0"


def age_on(birth_date: str | date | None, on: date | datetime | str | None) -> int | None:
    """
    Whole years between ``birth_date`` and ``on``.

    One year is taken off when the anniversary has not yet been reached in the
    year of ``on``.

    :returns: Age in years, or ``None`` when either date cannot be read.
    """
    born = parse_datetime(birth_date)
    when = parse_datetime(on)
    if born is None or when is None:
        return None

    age = when.year - born.year
    if (when.month, when.day) < (born.month, born.day):
        age -= 1
    return age


def get_age(patient: Patient, today: date | None = None) -> int | None:
    """
    Patient age in whole years.

    :param today: Date to measure against; defaults to today's date in UTC.
    :returns: Age, or ``None`` when the patient has no birth date.
    """
    if today is None:
        today = datetime.now(UTC).date()
    return age_on(patient.birth_date, today)


def _latest_value(patient: Patient, loinc_code: str) -> float | None:
    latest = find_latest(find_by_loinc(patient, loinc_code))
    return get_number(latest, "valueQuantity", "value")


def calculate_bmi(patient: Patient) -> float | None:
    """
    Body mass index from the most recent weight (kg) and height (cm).

    :returns: ``weight / height_m ** 2``, or ``None`` when either measurement is
        missing or zero.
    """
    weight = _latest_value(patient, LOINC_BODY_WEIGHT)
    height = _latest_value(patient, LOINC_BODY_HEIGHT)
    if not weight or not height:
        return None
    return weight / (height / 100) ** 2


def calculate_egfr(patient: Patient, today: date | None = None) -> float:
    """
    Estimated GFR using the CKD-EPI 2009 equation without the race coefficient.

    Returns ``0`` rather than ``None`` when creatinine, age or gender is missing,
    or creatinine is not positive; callers rely on the result always being numeric.

    :param today: Date the age is measured against; defaults to today in UTC.
    :returns: eGFR in mL/min/1.73m², rounded to one decimal place.
    """
    creatinine = _latest_value(patient, LOINC_CREATININE)
    age = get_age(patient, today)
    gender = patient.gender
    if creatinine is None or creatinine <= 0 or not age or not gender:
        return 0

    female = gender == "female"
    k = 0.7 if female else 0.9
    a = -0.329 if female else -0.411
    min_ratio = min(creatinine / k, 1)
    max_ratio = max(creatinine / k, 1)

    egfr = 141 * min_ratio**a * max_ratio**-1.209 * 0.993**age
    return round(egfr, 1)
