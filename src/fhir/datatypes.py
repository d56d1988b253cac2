"""FHIR general-purpose data types."""

from typing import TypedDict


class Coding(TypedDict, total=False):
    system: str
    code: str
    display: str


class CodeableConcept(TypedDict, total=False):
    coding: list[Coding]
    text: str


class Reference(TypedDict, total=False):
    reference: str
    display: str


class Period(TypedDict, total=False):
    start: str
    end: str


class Quantity(TypedDict, total=False):
    value: float
    unit: str
    system: str
    code: str


class Meta(TypedDict, total=False):
    versionId: str
    lastUpdated: str


class Attachment(TypedDict, total=False):
    contentType: str
    data: str
    title: str
