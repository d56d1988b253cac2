"""
Flask application serving chart-ready patient views as JSON.

The Bundle source (a directory, a directory-listing URL, or a single file) is
read from ``FHIR_LIGHT_SOURCE`` and loaded on each request.
"""

import os
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from fhir import OperationOutcome, OperationOutcomeIssue
from flask import Flask, Response, request
from flask.json.provider import DefaultJSONProvider

from fhir_light.batch import BatchResult, load_patients
from fhir_light.common.common import to_iso_utc
from fhir_light.patient import Patient, PatientLoadError
from fhir_light.views import (
    NotesOptions,
    calculate_bmi,
    calculate_egfr,
    get_active_care_plans,
    get_active_conditions,
    get_active_medications,
    get_age,
    get_clinical_notes_history,
    get_encounter_timeline,
    get_lab_results,
    get_lab_results_chart,
    get_patient_event_history,
    get_vital_sign_trend,
    get_vitals,
)


class IsoJSONProvider(DefaultJSONProvider):
    """JSON provider that writes datetimes as ISO-8601 UTC strings."""

    @staticmethod
    def default(o: Any) -> Any:
        if isinstance(o, datetime):
            return to_iso_utc(o)
        if isinstance(o, date):
            return o.isoformat()
        return DefaultJSONProvider.default(o)


app = Flask(__name__)
app.json = IsoJSONProvider(app)


def get_app_host() -> str:
    host = os.getenv("FLASK_HOST")
    if host is None:
        raise RuntimeError("FLASK_HOST environment variable is not set.")
    return host


def get_app_port() -> int:
    port = os.getenv("FLASK_PORT")
    if port is None:
        raise RuntimeError("FLASK_PORT environment variable is not set.")
    return int(port)


def get_bundle_source() -> str:
    source = os.getenv("FHIR_LIGHT_SOURCE")
    if not source:
        raise RuntimeError("FHIR_LIGHT_SOURCE environment variable is not set.")
    return source


def _metrics(patient: Patient) -> dict[str, Any]:
    return {
        "age": get_age(patient),
        "bmi": calculate_bmi(patient),
        "egfr": calculate_egfr(patient),
    }


def _notes(patient: Patient) -> Any:
    decode = request.args.get("decode", "true").lower() != "false"
    return get_clinical_notes_history(patient, NotesOptions(decode=decode))


VIEWS: dict[str, Callable[[Patient], Any]] = {
    "vitals": get_vitals,
    "labs": get_lab_results,
    "lab-chart": get_lab_results_chart,
    "events": get_patient_event_history,
    "notes": _notes,
    "active-conditions": get_active_conditions,
    "active-medications": get_active_medications,
    "active-care-plans": get_active_care_plans,
    "encounters": get_encounter_timeline,
    "metrics": _metrics,
}


def _operation_outcome(message: str, status_code: int, code: str) -> Response:
    outcome = OperationOutcome(
        resourceType="OperationOutcome",
        issue=[OperationOutcomeIssue(severity="error", code=code, diagnostics=message)],
    )
    return Response(
        response=app.json.dumps(outcome),
        status=status_code,
        mimetype="application/fhir+json",
    )


class _PatientNotFound(Exception):
    pass


def _load_batch() -> BatchResult:
    return load_patients(get_bundle_source())


def _find_patient(patient_id: str) -> Patient:
    for patient in _load_batch().patients:
        if patient.id == patient_id:
            return patient
    raise _PatientNotFound(patient_id)


@app.errorhandler(PatientLoadError)
def handle_load_error(err: PatientLoadError) -> Response:
    return _operation_outcome(str(err), 502, "exception")


@app.errorhandler(_PatientNotFound)
def handle_patient_not_found(err: _PatientNotFound) -> Response:
    return _operation_outcome(f"No patient found with id {err}", 404, "not-found")


@app.route("/health", methods=["GET"])
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.route("/patients", methods=["GET"])
def list_patients() -> dict[str, Any]:
    """Demographics of every loaded patient plus the batch errors and summary."""
    result = _load_batch()
    return {
        "patients": [
            {
                "id": patient.id,
                "name": patient.display_name,
                "gender": patient.gender,
                "birthDate": patient.birth_date,
            }
            for patient in result.patients
        ],
        "errors": [
            {"file": error.source, "error": error.error} for error in result.errors
        ],
        "summary": {
            "total": result.summary.total,
            "successful": result.summary.successful,
            "failed": result.summary.failed,
        },
    }


@app.route("/patients/<patient_id>/trend/<vital_type>", methods=["GET"])
def vital_sign_trend(patient_id: str, vital_type: str) -> Response:
    """Trend points for one vital sign."""
    trend = get_vital_sign_trend(_find_patient(patient_id), vital_type)
    return app.json.response(trend)


@app.route("/patients/<patient_id>/<view>", methods=["GET"])
def patient_view(patient_id: str, view: str) -> Response:
    """One named derived view of a patient."""
    build_view = VIEWS.get(view)
    if build_view is None:
        return _operation_outcome(f"Unknown view {view}", 404, "not-found")
    return app.json.response(build_view(_find_patient(patient_id)))


if __name__ == "__main__":
    app.run(host=get_app_host(), port=get_app_port())
