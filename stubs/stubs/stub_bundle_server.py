"""
In-memory stub of a static file server hosting FHIR Bundle JSON files.

The stub stands in for ``requests.get`` in tests: it serves registered Bundles,
an HTML directory listing of them, and configurable failures.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import requests


@dataclass
class StubResponse:
    """
    Minimal substitute for :class:`requests.Response`.

    :param status_code: HTTP status code for the response.
    :param text: Response body.
    :param headers: HTTP-like response headers.
    """

    status_code: int
    text: str
    headers: dict[str, str] = field(default_factory=dict)

    def json(self) -> Any:
        return json.loads(self.text)

    def raise_for_status(self) -> None:
        """
        Emulate :meth:`requests.Response.raise_for_status`.

        :raises requests.HTTPError: If the status is not 2xx.
        """
        if not 200 <= self.status_code < 300:
            raise requests.HTTPError(f"{self.status_code} Error", response=None)


def make_patient_bundle(
    patient_id: str,
    family: str = "Smith",
    given: list[str] | None = None,
    gender: str = "female",
    birth_date: str = "1970-01-01",
    resources: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """
    Build a small Bundle holding one Patient and any extra resources.

    :param patient_id: ``Patient.id``.
    :param resources: Extra resources appended after the Patient, in order.
    :return: Bundle dictionary.
    """
    patient = {
        "resourceType": "Patient",
        "id": patient_id,
        "name": [{"use": "official", "family": family, "given": given or ["Jane"]}],
        "gender": gender,
        "birthDate": birth_date,
    }
    return {
        "resourceType": "Bundle",
        "type": "collection",
        "entry": [
            {"fullUrl": f"urn:uuid:{resource.get('id')}", "resource": resource}
            for resource in [patient, *(resources or [])]
        ],
    }


class BundleServerStub:
    """
    Serves Bundles from ``{base_url}/{name}`` and a listing at ``{base_url}/``.

    Registered names keep insertion order, and so does the listing.
    """

    def __init__(self, base_url: str = "https://bundles.example.test/fhir") -> None:
        self.base_url = base_url.rstrip("/")
        self._files: dict[str, StubResponse] = {}
        self.requested: list[str] = []

    # ---------------------------
    # Public API for tests
    # ---------------------------

    def url_for(self, name: str) -> str:
        return f"{self.base_url}/{name}"

    def add_bundle(self, name: str, bundle: Any) -> str:
        """
        Serve ``bundle`` as JSON under ``name``.

        :return: Full URL of the file.
        """
        self._files[name] = StubResponse(
            status_code=200,
            text=json.dumps(bundle),
            headers={"Content-Type": "application/fhir+json"},
        )
        return self.url_for(name)

    def add_raw(self, name: str, body: str, status_code: int = 200) -> str:
        """Serve ``body`` verbatim with ``status_code`` under ``name``."""
        self._files[name] = StubResponse(status_code=status_code, text=body)
        return self.url_for(name)

    def listing_html(self) -> str:
        links = "\n".join(
            f'<li><a href="{name}">{name}</a></li>' for name in self._files
        )
        return (
            "<html><head><title>Index of /fhir</title></head><body>"
            f'<ul><li><a href="../">Parent Directory</a></li>\n{links}</ul>'
            "</body></html>"
        )

    # ---------------------------
    # requests.get replacement
    # ---------------------------

    def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: Any = None,
        timeout: Any = None,
    ) -> StubResponse:
        """
        Answer a GET request.

        :param url: Requested URL.
        :return: The registered file, the directory listing, or a 404.
        """
        self.requested.append(url)
        if url.rstrip("/") == self.base_url:
            return StubResponse(
                status_code=200,
                text=self.listing_html(),
                headers={"Content-Type": "text/html"},
            )

        prefix = f"{self.base_url}/"
        if url.startswith(prefix) and url[len(prefix) :] in self._files:
            return self._files[url[len(prefix) :]]

        return StubResponse(status_code=404, text="Not Found")
