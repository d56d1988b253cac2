"""
Module: fhir_light.loader

Fetches FHIR Bundle JSON documents and turns them into Patients.

Locations are either HTTP(S) URLs, fetched with ``requests``, or filesystem
paths (plain or ``file://``). Every failure is raised as a
:class:`~fhir_light.patient.PatientLoadError` subclass so callers are not
coupled to ``requests`` or ``json`` exception types.

Usage:

    patient = load_patient("https://example.test/fhir/patient-1.json")
    print(patient.display_name, len(patient.observations))
"""

from __future__ import annotations

import json
import logging
from html.parser import HTMLParser
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urljoin, urlparse
from urllib.request import url2pathname

import requests

from fhir_light.patient import Patient, PatientLoadError, build_patient

_log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
ACCEPT_HEADER = "application/fhir+json, application/json;q=0.9"


class RetrievalError(PatientLoadError):
    """
    Raised when a source cannot be retrieved: a non-2xx response, a transport
    failure, or a file that cannot be read.
    """


class BundleParseError(PatientLoadError):
    """
    Raised when retrieved content is not valid JSON.
    """


def is_http_location(location: str) -> bool:
    return urlparse(location).scheme in ("http", "https")


def _to_path(location: str) -> Path:
    parsed = urlparse(location)
    if parsed.scheme == "file":
        return Path(url2pathname(unquote(parsed.path)))
    return Path(location)


def _fetch_content(location: str, timeout: int) -> str | bytes:
    if is_http_location(location):
        try:
            response = requests.get(
                location,
                headers={"Accept": ACCEPT_HEADER},
                timeout=timeout,
            )
        except requests.RequestException as err:
            raise RetrievalError(f"Request for {location} failed: {err}") from err

        try:
            response.raise_for_status()
        except requests.HTTPError as err:
            raise RetrievalError(
                f"HTTP error! status: {response.status_code}"
            ) from err
        return response.text

    path = _to_path(location)
    try:
        return path.read_bytes()
    except OSError as err:
        raise RetrievalError(f"Cannot read {path}: {err.strerror or err}") from err


def load_bundle(location: str, *, timeout: int = DEFAULT_TIMEOUT) -> Any:
    """
    Retrieve and parse one Bundle document.

    :param location: HTTP(S) URL, ``file://`` URL or filesystem path.
    :param timeout: Timeout in seconds for HTTP requests.
    :returns: The parsed JSON document.
    :raises RetrievalError: If the location cannot be retrieved.
    :raises BundleParseError: If the content is not valid JSON, is not valid
        Unicode, or nests too deeply to parse.
    """
    content = _fetch_content(location, timeout)
    try:
        return json.loads(content)
    except (ValueError, RecursionError) as err:
        raise BundleParseError(f"Invalid JSON in {location}: {err}") from err


def load_patient(
    location: str,
    *,
    timeout: int = DEFAULT_TIMEOUT,
    logger: logging.Logger | None = None,
) -> Patient:
    """
    Load a single Bundle and build its Patient.

    :param location: HTTP(S) URL, ``file://`` URL or filesystem path.
    :param timeout: Timeout in seconds for HTTP requests.
    :param logger: Diagnostics sink; defaults to this module's logger.
    :returns: The Patient built from the Bundle.
    :raises RetrievalError: If the location cannot be retrieved.
    :raises BundleParseError: If the content is not valid JSON.
    :raises MissingPatientResourceError: If the Bundle holds no Patient.
    """
    log = logger or _log
    log.debug("bundle.load", extra={"source": location})
    bundle = load_bundle(location, timeout=timeout)
    return build_patient(bundle, source=location, logger=log)


class _LinkCollector(HTMLParser):
    """Collects ``href`` values of ``<a>`` tags."""

    def __init__(self) -> None:
        super().__init__()
        self.hrefs: list[str] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag != "a":
            return
        for name, value in attrs:
            if name == "href" and value:
                self.hrefs.append(value)


def json_links(markup: str) -> list[str]:
    """
    File names of every ``<a href>`` in ``markup`` that ends in ``.json``.

    Only the last path segment of each link is kept, in document order.
    """
    collector = _LinkCollector()
    collector.feed(markup)
    collector.close()
    names = [
        href.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]
        for href in collector.hrefs
    ]
    return [name for name in names if name.endswith(".json")]


def discover_sources(location: str, *, timeout: int = DEFAULT_TIMEOUT) -> list[str]:
    """
    Best-effort listing of the Bundle files under a directory-like location.

    A local directory lists its ``*.json`` files. An HTTP location is fetched
    and its hyperlink listing is scanned for ``.json`` names. When nothing is
    found, or the listing cannot be retrieved, the location itself is returned
    as the only source.

    :param location: Directory path or URL of a directory listing.
    :param timeout: Timeout in seconds for the listing request.
    :returns: Full locations of the discovered sources.
    """
    if is_http_location(location):
        try:
            response = requests.get(location, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as err:
            _log.info(
                "sources.listing_failed", extra={"source": location, "error": str(err)}
            )
            return [location]
        base = location if location.endswith("/") else f"{location}/"
        found = [urljoin(base, name) for name in json_links(response.text)]
        return found or [location]

    path = _to_path(location)
    if path.is_dir():
        found = [str(child) for child in sorted(path.glob("*.json")) if child.is_file()]
        return found or [location]
    return [location]
