"""FHIR DocumentReference resource."""

from typing import TypedDict

from fhir.datatypes import Attachment, CodeableConcept, Reference
from fhir.resource import Resource


class DocumentContent(TypedDict, total=False):
    attachment: Attachment


class DocumentContext(TypedDict, total=False):
    encounter: list[Reference]


class DocumentReference(Resource, total=False):
    status: str
    type: CodeableConcept
    category: list[CodeableConcept]
    date: str
    author: list[Reference]
    content: list[DocumentContent]
    context: DocumentContext
