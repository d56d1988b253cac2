"""Pytest configuration and shared fixtures for end-to-end patient loader tests."""

import json
import socket
import threading
import time
from collections.abc import Generator
from pathlib import Path

import pytest
import requests
from fhir_light.app import app as api_app
from flask import Flask, Response, abort, send_from_directory
from stubs.stub_bundle_server import make_patient_bundle

PATIENT_IDS = ["patient-a", "patient-b", "patient-c", "patient-d"]


def _free_port() -> int:
    # Use port 0 to let the OS assign a free port
    sock = socket.socket()
    sock.bind(("", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def _serve(app: Flask, ready_path: str) -> str:
    """
    Start ``app`` in a daemon thread and return its base URL once it answers.

    Daemon threads end with the test process, so no explicit cleanup is needed.
    """
    port = _free_port()

    def run_app() -> None:
        app.run(port=port, debug=False, use_reloader=False)

    thread = threading.Thread(target=run_app, daemon=True)
    thread.start()

    url = f"http://localhost:{port}"
    max_retries = 10
    retry_delay = 0.1

    for _ in range(max_retries):
        try:
            response = requests.get(f"{url}{ready_path}", timeout=1)
            if response.status_code == 200:
                break
        except requests.exceptions.RequestException:
            time.sleep(retry_delay)
    else:
        raise RuntimeError(f"Flask server failed to start on {url}")

    return url


def _file_server(directory: Path) -> Flask:
    """A static file server with an autoindex-style HTML listing at ``/fhir/``."""
    files = Flask("bundle_file_server")

    @files.route("/fhir/")
    def listing() -> str:
        links = "".join(
            f'<li><a href="{path.name}">{path.name}</a></li>'
            for path in sorted(directory.iterdir())
        )
        return f'<html><body><ul><li><a href="../">../</a></li>{links}</ul></body></html>'

    @files.route("/fhir/<path:name>")
    def bundle(name: str) -> Response:
        if not (directory / name).is_file():
            abort(404)
        return send_from_directory(directory, name, mimetype="application/fhir+json")

    return files


@pytest.fixture(scope="session")
def bundle_directory(tmp_path_factory: pytest.TempPathFactory) -> Path:
    directory = tmp_path_factory.mktemp("bundles")
    for patient_id in PATIENT_IDS:
        (directory / f"{patient_id}.json").write_text(
            json.dumps(make_patient_bundle(patient_id)), encoding="utf-8"
        )
    (directory / "broken.json").write_text("{", encoding="utf-8")
    (directory / "README.txt").write_text("not a bundle", encoding="utf-8")
    return directory


@pytest.fixture(scope="session")
def bundle_server_url(bundle_directory: Path) -> str:
    """Base URL of the directory listing served over real HTTP."""
    return f"{_serve(_file_server(bundle_directory), '/fhir/')}/fhir/"


@pytest.fixture(scope="session")
def api_url(bundle_server_url: str) -> Generator[str, None, None]:
    """Start the patient view API, reading Bundles from the file server."""
    with pytest.MonkeyPatch.context() as mp:
        mp.setenv("FHIR_LIGHT_SOURCE", bundle_server_url)
        yield _serve(api_app, "/health")
