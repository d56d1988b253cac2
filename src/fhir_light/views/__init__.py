"""
Derived, read-only views over a :class:`fhir_light.patient.Patient`.

Every view is a plain function of the Patient (and its parameters) and
returns freshly built structures; no view modifies the Patient.
"""

from fhir_light.views.calculations import (
    age_on,
    calculate_bmi,
    calculate_egfr,
    get_age,
)
from fhir_light.views.conditions import (
    get_active_care_plans,
    get_active_conditions,
    get_encounter_timeline,
)
from fhir_light.views.events import (
    PatientEvent,
    get_patient_event_history,
    summarize_observation,
)
from fhir_light.views.medications import (
    get_active_medications,
    get_medication_adherence_chart,
    get_medication_history,
)
from fhir_light.views.notes import (
    NotesOptions,
    decode_note,
    get_clinical_notes_history,
)
from fhir_light.views.observations import (
    TrendPoint,
    find_latest,
    generate_risk_factor_scatter,
    get_lab_results,
    get_lab_results_chart,
    get_latest_observation,
    get_observation_history,
    get_observations_by_category,
    get_vital_sign_trend,
    get_vitals,
)
from fhir_light.views.relations import (
    get_care_plan_details,
    get_condition_history,
    get_encounter_details,
    get_provenance_for_resource,
    get_related_resources,
    get_resource_references,
    get_resource_timeline,
)

__all__ = [
    "NotesOptions",
    "PatientEvent",
    "TrendPoint",
    "age_on",
    "calculate_bmi",
    "calculate_egfr",
    "decode_note",
    "find_latest",
    "generate_risk_factor_scatter",
    "get_active_care_plans",
    "get_active_conditions",
    "get_active_medications",
    "get_age",
    "get_care_plan_details",
    "get_clinical_notes_history",
    "get_condition_history",
    "get_encounter_details",
    "get_encounter_timeline",
    "get_lab_results",
    "get_lab_results_chart",
    "get_latest_observation",
    "get_medication_adherence_chart",
    "get_medication_history",
    "get_observation_history",
    "get_observations_by_category",
    "get_patient_event_history",
    "get_provenance_for_resource",
    "get_related_resources",
    "get_resource_references",
    "get_resource_timeline",
    "get_vital_sign_trend",
    "get_vitals",
    "summarize_observation",
]
