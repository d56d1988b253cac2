"""
Shared lightweight types and helpers used across the patient loader.

FHIR resources are read as plain JSON objects. These helpers walk them without
raising, so a missing or malformed optional field reads as ``None``.
"""

import re
from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime, time
from typing import Any, TypeAlias

# Recursive JSON-like structure typing for parsed bundle documents.
ResultStructure: TypeAlias = (
    str
    | int
    | float
    | bool
    | None
    | dict[str, "ResultStructure"]
    | list["ResultStructure"]
)
ResultStructureDict: TypeAlias = dict[str, ResultStructure]

OBSERVATION_CATEGORY_SYSTEM = (
    "http://terminology.hl7.org/CodeSystem/observation-category"
)
CONDITION_CLINICAL_SYSTEM = "http://terminology.hl7.org/CodeSystem/condition-clinical"
LOINC_SYSTEM = "http://loinc.org"

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]+={0,2}$")


def get_path(value: Any, *path: str | int) -> Any:
    """
    Walk ``value`` along ``path`` and return whatever is found there.

    String steps index into mappings, integer steps index into lists. Any step
    that does not fit the shape of the data ends the walk with ``None``.

    :param value: Parsed JSON value to walk.
    :param path: Keys and list indexes to follow.
    :returns: The value at the end of the path, or ``None``.
    """
    current = value
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return None
            current = current[step]
        else:
            if not isinstance(current, Mapping):
                return None
            current = current.get(step)
        if current is None:
            return None
    return current


def get_str(value: Any, *path: str | int) -> str | None:
    """Like :func:`get_path` but only returns non-empty strings."""
    found = get_path(value, *path)
    return found if isinstance(found, str) and found else None


def get_number(value: Any, *path: str | int) -> float | None:
    """Like :func:`get_path` but only returns ints and floats (never bools)."""
    found = get_path(value, *path)
    if isinstance(found, bool) or not isinstance(found, int | float):
        return None
    return found


def get_list(value: Any, *path: str | int) -> list[Any]:
    """Like :func:`get_path` but always returns a list, empty when absent."""
    found = get_path(value, *path)
    return found if isinstance(found, list) else []


def iter_codings(concepts: Any) -> Iterable[Mapping[str, Any]]:
    """
    Yield every coding from a CodeableConcept or a list of them.

    :param concepts: A CodeableConcept mapping, a list of them, or anything else.
    """
    if isinstance(concepts, Mapping):
        concepts = [concepts]
    if not isinstance(concepts, list):
        return
    for concept in concepts:
        for coding in get_list(concept, "coding"):
            if isinstance(coding, Mapping):
                yield coding


def has_coding(concepts: Any, code: str | None, system: str | None = None) -> bool:
    """
    Return ``True`` if any coding matches ``code`` (and ``system`` when given).

    The match is exact and case-sensitive.
    """
    return any(
        coding.get("code") == code
        and (system is None or coding.get("system") == system)
        for coding in iter_codings(concepts)
    )


def reference_id(reference: str | None) -> str | None:
    """
    Return the last path segment of a FHIR reference (``"Patient/123"`` -> ``"123"``).
    """
    if not reference:
        return None
    return reference.rsplit("/", 1)[-1] or None


def references_resource(reference: Any, resource_id: str) -> bool:
    """Return ``True`` when ``reference`` is a string ending in ``resource_id``."""
    return isinstance(reference, str) and bool(resource_id) and (
        reference.endswith(resource_id)
    )


def parse_datetime(value: Any) -> datetime | None:
    """
    Parse a FHIR date or dateTime into an aware UTC datetime.

    Partial dates (``YYYY`` and ``YYYY-MM``) are widened to the first day.
    Values with no offset are read as UTC.

    :param value: FHIR date/dateTime string.
    :returns: Aware UTC datetime, or ``None`` if the value cannot be parsed.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if re.fullmatch(r"\d{4}", text):
            text += "-01-01"
        elif re.fullmatch(r"\d{4}-\d{2}", text):
            text += "-01"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def to_iso_utc(value: datetime) -> str:
    """Format a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def is_base64(text: str | None) -> bool:
    """
    Return ``True`` if ``text`` looks like base64-encoded content.

    The check is shape-only: non-empty after stripping, a multiple of four in
    length, and made only of the base64 alphabet with up to two ``=`` pads.
    """
    clean = (text or "").strip()
    return len(clean) > 0 and len(clean) % 4 == 0 and bool(_BASE64_RE.match(clean))
