"""FHIR Encounter resource."""

from typing import TypedDict

from fhir.datatypes import CodeableConcept, Period, Reference
from fhir.resource import Resource


class EncounterLocation(TypedDict, total=False):
    location: Reference


class EncounterParticipant(TypedDict, total=False):
    individual: Reference


class Encounter(Resource, total=False):
    status: str
    type: list[CodeableConcept]
    reasonCode: list[CodeableConcept]
    period: Period
    location: list[EncounterLocation]
    participant: list[EncounterParticipant]
