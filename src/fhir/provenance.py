"""FHIR Provenance resource."""

from typing import TypedDict

from fhir.datatypes import CodeableConcept, Reference
from fhir.resource import Resource


class ProvenanceAgent(TypedDict, total=False):
    type: CodeableConcept
    who: Reference


class Provenance(Resource, total=False):
    target: list[Reference]
    recorded: str
    agent: list[ProvenanceAgent]
