"""Base FHIR resource shape shared by every resource type."""

from typing import TypedDict

from fhir.datatypes import Meta


class Resource(TypedDict, total=False):
    resourceType: str
    id: str
    meta: Meta
