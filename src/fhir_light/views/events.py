"""
Unified patient event history.

Encounters, procedures, diagnoses, clinical notes, tests, prescriptions,
immunizations and care plans are merged into one list of flat event records,
sorted by start time, ready for a timeline chart.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any, NotRequired, TypedDict

from fhir_light.common.common import (
    get_list,
    get_path,
    get_str,
    is_base64,
    parse_datetime,
    reference_id,
    references_resource,
    to_iso_utc,
)
from fhir_light.views.calculations import age_on
from fhir_light.views.notes import decode_note, is_clinical_note

if TYPE_CHECKING:
    from fhir import Observation

    from fhir_light.patient import Patient

TEST_CATEGORIES = ("laboratory", "imaging", "vital-signs")
_LABEL_PREFIXES = {
    "vital-signs": "Vital",
    "imaging": "Imaging",
    "laboratory": "Lab",
}


class PatientEvent(TypedDict):
    start: str
    end: str | None
    type: str
    label: str
    resourceType: str | None
    id: str | None
    metadata: NotRequired[dict[str, Any]]


def summarize_observation(observation: Observation | None) -> str | None:
    """
    Short text form of an observation's value: ``"<value> <unit>"`` for
    quantities, else the string value, else the coded value's text.
    """
    if observation is None:
        return None
    quantity = observation.get("valueQuantity")
    if isinstance(quantity, Mapping):
        value = quantity.get("value")
        unit = get_str(quantity, "unit") or ""
        return f"{'' if value is None else value} {unit}".strip()
    return get_str(observation, "valueString") or get_str(
        observation, "valueCodeableConcept", "text"
    )


def observation_label(observation: Observation) -> str:
    category = get_str(observation, "category", 0, "coding", 0, "code")
    prefix = _LABEL_PREFIXES.get(category or "", "Test")
    name = (
        get_str(observation, "code", "coding", 0, "display")
        or get_str(observation, "code", "text")
        or "Observation"
    )
    return f"{prefix} - {name}"


def _encounter_id(resource: Any) -> str | None:
    found = reference_id(
        get_str(resource, "context", "encounter", 0, "reference")
    ) or reference_id(get_str(resource, "encounter", "reference"))
    if found is None:
        return None
    return found.removeprefix("urn:uuid:") or None


class _EventCollector:
    """Accumulates events for one patient; records without a start are skipped."""

    def __init__(self, patient: Patient) -> None:
        self.patient = patient
        self._events: list[tuple[datetime, PatientEvent]] = []

    def add(
        self,
        resource: Any,
        start: Any,
        end: Any,
        event_type: str,
        label: str,
        **extra: Any,
    ) -> None:
        started = parse_datetime(start)
        if started is None:
            return
        ended = parse_datetime(end)

        metadata = {
            "encounterId": _encounter_id(resource),
            "status": get_str(resource, "status"),
            "ageAtEvent": age_on(self.patient.birth_date, started),
            **extra,
        }
        metadata = {key: value for key, value in metadata.items() if value is not None}

        event = PatientEvent(
            start=to_iso_utc(started),
            end=to_iso_utc(ended) if ended is not None else None,
            type=event_type,
            label=label,
            resourceType=get_str(resource, "resourceType"),
            id=get_str(resource, "id"),
        )
        if metadata:
            event["metadata"] = metadata
        self._events.append((started, event))

    def sorted_events(self) -> list[PatientEvent]:
        return [event for _, event in sorted(self._events, key=lambda pair: pair[0])]


def _add_encounters(events: _EventCollector, patient: Patient) -> None:
    for enc in patient.encounters:
        label = get_str(enc, "type", 0, "coding", 0, "display") or "Encounter"
        reason = get_str(enc, "reasonCode", 0, "coding", 0, "display")
        if reason:
            label += f" - {reason}"
        events.add(
            enc,
            get_path(enc, "period", "start"),
            get_path(enc, "period", "end"),
            "Encounter",
            label,
            location=get_str(enc, "location", 0, "location", "display"),
            provider=get_str(enc, "participant", 0, "individual", "display"),
        )


def _add_procedures(events: _EventCollector, patient: Patient) -> None:
    for proc in patient.procedures:
        performed = proc.get("performedDateTime")
        events.add(
            proc,
            get_path(proc, "performedPeriod", "start") or performed,
            get_path(proc, "performedPeriod", "end") or performed,
            "Procedure",
            get_str(proc, "code", "text") or "Procedure",
        )


def _add_conditions(events: _EventCollector, patient: Patient) -> None:
    for cond in patient.conditions:
        events.add(
            cond,
            cond.get("onsetDateTime") or cond.get("recordedDate"),
            cond.get("abatementDateTime"),
            "Diagnosis",
            get_str(cond, "code", "text") or "Diagnosis",
            clinicalStatus=get_str(cond, "clinicalStatus", "coding", 0, "code"),
        )


def _add_clinical_notes(events: _EventCollector, patient: Patient) -> None:
    for doc in patient.document_references:
        if not is_clinical_note(doc):
            continue
        data = get_str(doc, "content", 0, "attachment", "data")
        if data and is_base64(data):
            text = decode_note(data)
        else:
            text = get_str(doc, "content", 0, "attachment", "title") or ""
        events.add(
            doc,
            doc.get("date"),
            None,
            "Clinical Note",
            get_str(doc, "type", "coding", 0, "display") or "Clinical note",
            author=get_str(doc, "author", 0, "display"),
            text=text or None,
        )


def _add_diagnostic_reports(events: _EventCollector, patient: Patient) -> None:
    by_id = {get_str(obs, "id"): obs for obs in reversed(patient.observations)}
    for report in patient.diagnostic_reports:
        result_id = reference_id(get_str(report, "result", 0, "reference"))
        obs = by_id.get(result_id) if result_id else None
        if obs is not None:
            label = observation_label(obs)
        else:
            label = get_str(report, "code", "text") or "Diagnostic Report"
        events.add(
            report,
            report.get("effectiveDateTime") or report.get("issued"),
            None,
            "Test",
            label,
            result=summarize_observation(obs),
        )


def _add_observations(events: _EventCollector, patient: Patient) -> None:
    for obs in patient.observations:
        first_codes = {
            get_str(category, "coding", 0, "code")
            for category in get_list(obs, "category")
        }
        if not first_codes.intersection(TEST_CATEGORIES):
            continue
        events.add(
            obs,
            obs.get("effectiveDateTime"),
            None,
            "Test",
            observation_label(obs),
            result=summarize_observation(obs),
        )


def _medication_name(patient: Patient, request: Any) -> str:
    name = get_str(request, "medicationCodeableConcept", "text")
    if name:
        return name
    reference = get_str(request, "medicationReference", "reference")
    if reference:
        medication = next(
            (
                med
                for med in patient.medications
                if references_resource(reference, get_str(med, "id") or "")
            ),
            None,
        )
        name = get_str(medication, "code", "text")
    return name or "Medication"


def _add_medication_requests(events: _EventCollector, patient: Patient) -> None:
    for request in patient.medication_requests:
        authored = request.get("authoredOn")
        events.add(
            request,
            authored,
            authored if request.get("status") == "completed" else None,
            "Medication",
            _medication_name(patient, request),
        )


def _add_immunizations(events: _EventCollector, patient: Patient) -> None:
    for imm in patient.immunizations:
        events.add(
            imm,
            imm.get("occurrenceDateTime"),
            None,
            "Immunization",
            get_str(imm, "vaccineCode", "text") or "Immunization",
        )


def _add_care_plans(events: _EventCollector, patient: Patient) -> None:
    for plan in patient.care_plans:
        events.add(
            plan,
            get_path(plan, "period", "start"),
            get_path(plan, "period", "end"),
            "CarePlan",
            get_str(plan, "title") or "Care plan",
        )


def get_patient_event_history(patient: Patient) -> list[PatientEvent]:
    """
    Every dated clinical event for ``patient`` as one list, earliest first.

    Each record carries ``start``/``end`` as UTC ISO-8601 strings, an event
    ``type`` and display ``label``, the source ``resourceType`` and ``id``, and
    ``metadata`` when any of its fields has a value. Events with the same start
    keep the order in which their resource types are merged.
    """
    events = _EventCollector(patient)
    _add_encounters(events, patient)
    _add_procedures(events, patient)
    _add_conditions(events, patient)
    _add_clinical_notes(events, patient)
    _add_diagnostic_reports(events, patient)
    _add_observations(events, patient)
    _add_medication_requests(events, patient)
    _add_immunizations(events, patient)
    _add_care_plans(events, patient)
    return events.sorted_events()

