"""FHIR Patient resource."""

from fhir.human_name import HumanName
from fhir.identifier import Identifier
from fhir.resource import Resource


class Patient(Resource, total=False):
    identifier: list[Identifier]
    name: list[HumanName]
    gender: str
    birthDate: str
