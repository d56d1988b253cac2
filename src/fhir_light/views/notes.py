"""
Clinical note views over DocumentReference resources.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, TypedDict

from fhir_light.common.common import (
    get_str,
    has_coding,
    is_base64,
    parse_datetime,
    reference_id,
)
from fhir_light.views.observations import sort_key_by_date

if TYPE_CHECKING:
    from fhir import DocumentReference

    from fhir_light.patient import Patient

CLINICAL_NOTE = "clinical-note"

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotesOptions:
    """
    :param decode: Decode base64-shaped note payloads into text.
    """

    decode: bool = True


class ClinicalNote(TypedDict):
    id: str | None
    date: datetime | None
    author: str | None
    encounterId: str | None
    noteType: str | None
    rawData: str
    text: str


def decode_note(payload: str) -> str:
    """
    Decode a base64 note payload into text.

    Bytes that are not valid UTF-8 are replaced. A payload that fails to decode
    is returned unchanged.
    """
    try:
        raw = base64.b64decode(payload.strip(), validate=True)
    except (binascii.Error, ValueError):
        _log.debug("note.decode_failed")
        return payload
    return raw.decode("utf-8", errors="replace")


def is_clinical_note(document: DocumentReference) -> bool:
    return has_coding(document.get("category"), CLINICAL_NOTE)


def note_text(payload: str, decode: bool = True) -> str:
    if decode and is_base64(payload):
        return decode_note(payload)
    return payload


def get_clinical_notes_history(
    patient: Patient, options: NotesOptions | None = None
) -> list[ClinicalNote]:
    """
    Clinical notes, oldest first.

    A note is a DocumentReference with a category coding of ``clinical-note``.
    Its text comes from the first attachment's ``data``, decoded when it looks
    like base64 and ``options.decode`` is set.
    """
    options = options or NotesOptions()
    notes: list[ClinicalNote] = []
    for doc in patient.document_references:
        if not is_clinical_note(doc):
            continue
        payload = get_str(doc, "content", 0, "attachment", "data") or ""
        notes.append(
            ClinicalNote(
                id=get_str(doc, "id"),
                date=parse_datetime(doc.get("date")),
                author=get_str(doc, "author", 0, "display"),
                encounterId=reference_id(
                    get_str(doc, "context", "encounter", 0, "reference")
                ),
                noteType=get_str(doc, "type", "coding", 0, "display"),
                rawData=payload,
                text=note_text(payload, options.decode),
            )
        )
    return sorted(notes, key=lambda note: sort_key_by_date(note["date"]))
