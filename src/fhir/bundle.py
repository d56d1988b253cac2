"""FHIR Bundle resource."""

from typing import TypedDict

from fhir.resource import Resource


class BundleEntry(TypedDict, total=False):
    fullUrl: str
    resource: Resource


class Bundle(TypedDict, total=False):
    resourceType: str
    id: str
    type: str
    timestamp: str
    entry: list[BundleEntry]
