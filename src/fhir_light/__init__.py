"""
Load FHIR R5 patient Bundles and build chart-ready views over them.

    from fhir_light import load_patient, load_patients
    from fhir_light.views import get_vital_sign_trend

    patient = load_patient("bundles/patient-1.json")
    trend = get_vital_sign_trend(patient, "heart rate")
"""

from fhir_light.batch import (
    AllSourcesFailedError,
    BatchOptions,
    BatchProgress,
    BatchResult,
    BatchSummary,
    LoadError,
    NoValidSourcesError,
    load_patients,
)
from fhir_light.loader import (
    BundleParseError,
    RetrievalError,
    discover_sources,
    load_bundle,
    load_patient,
)
from fhir_light.patient import (
    MissingPatientResourceError,
    Patient,
    PatientLoadError,
    build_patient,
)

__all__ = [
    "AllSourcesFailedError",
    "BatchOptions",
    "BatchProgress",
    "BatchResult",
    "BatchSummary",
    "BundleParseError",
    "LoadError",
    "MissingPatientResourceError",
    "NoValidSourcesError",
    "Patient",
    "PatientLoadError",
    "RetrievalError",
    "build_patient",
    "discover_sources",
    "load_bundle",
    "load_patient",
    "load_patients",
]
