"""
Module: fhir_light.batch

Loads many Bundles in fixed-size chunks.

Chunks run one after another. Inside a chunk every source is loaded on its own
worker thread, so one slow source only holds up its own chunk. Results are
kept in input order regardless of which source finishes first.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field

from fhir_light.loader import DEFAULT_TIMEOUT, discover_sources, load_patient
from fhir_light.patient import Patient, PatientLoadError

_log = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 5


class NoValidSourcesError(PatientLoadError):
    """
    Raised when a batch contains no source that looks like a FHIR JSON file.
    """

    def __init__(self, message: str = "No valid FHIR JSON files found"):
        super().__init__(message)


class AllSourcesFailedError(PatientLoadError):
    """
    Raised when every source in a batch failed to load.

    :param errors: The per-source errors, in input order.
    """

    def __init__(self, errors: list[LoadError]):
        self.errors = errors
        super().__init__(
            f"Failed to load any patients. First error: {errors[0].error}"
        )


@dataclass(frozen=True)
class BatchProgress:
    """
    Cumulative counts reported after each chunk.

    :param processed: Sources attempted so far.
    :param total: Sources in the whole batch.
    :param success_count: Patients loaded so far.
    :param error_count: Sources that failed so far.
    """

    processed: int
    total: int
    success_count: int
    error_count: int


@dataclass(frozen=True)
class BatchOptions:
    """
    Settings for :func:`load_patients`.

    :param chunk_size: Sources loaded concurrently per chunk.
    :param continue_on_error: Record per-source failures and keep going. When
        ``False`` the first failure is raised straight away.
    :param on_progress: Called with a :class:`BatchProgress` after each chunk.
    :param timeout: Per-source timeout in seconds for HTTP requests.
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    continue_on_error: bool = True
    on_progress: Callable[[BatchProgress], None] | None = None
    timeout: int = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")


@dataclass(frozen=True)
class LoadError:
    """
    One source that failed to load.

    :param source: The source location as given.
    :param error: The error message.
    """

    source: str
    error: str


@dataclass(frozen=True)
class BatchSummary:
    total: int
    successful: int
    failed: int


@dataclass
class BatchResult:
    """
    Outcome of a batch load.

    :param patients: Successfully loaded Patients, in input order.
    :param errors: Failed sources, in input order; empty when all succeeded.
    :param summary: Total, successful and failed counts.
    """

    patients: list[Patient]
    summary: BatchSummary
    errors: list[LoadError] = field(default_factory=list)


def is_candidate_source(source: object) -> bool:
    """A source is a candidate when it is a string naming a JSON or FHIR file."""
    return isinstance(source, str) and (
        source.endswith(".json") or "fhir" in source
    )


def _chunks(items: Sequence[str], size: int) -> list[Sequence[str]]:
    return [items[start : start + size] for start in range(0, len(items), size)]


def resolve_sources(
    sources: str | Sequence[str], timeout: int = DEFAULT_TIMEOUT
) -> list[str]:
    """
    Turn the ``sources`` argument of :func:`load_patients` into candidate
    locations. A single string is treated as a directory to list.

    :raises NoValidSourcesError: If no candidate remains.
    """
    if isinstance(sources, str):
        listed: Sequence[object] = discover_sources(sources, timeout=timeout)
    else:
        listed = sources
    candidates = [source for source in listed if is_candidate_source(source)]
    if not candidates:
        raise NoValidSourcesError()
    return [str(source) for source in candidates]


def load_patients(
    sources: str | Sequence[str],
    options: BatchOptions | None = None,
    *,
    logger: logging.Logger | None = None,
) -> BatchResult:
    """
    Load a batch of Bundles.

    :param sources: Sequence of locations, or a single directory-like location
        whose ``.json`` files are discovered with
        :func:`~fhir_light.loader.discover_sources`.
    :param options: Batch settings; defaults to :class:`BatchOptions()`.
    :param logger: Diagnostics sink; defaults to this module's logger.
    :returns: Loaded patients, per-source errors and a summary.
    :raises NoValidSourcesError: If there is nothing to load.
    :raises AllSourcesFailedError: If no source loaded and at least one failed.
    :raises PatientLoadError: The first per-source error, when
        ``continue_on_error`` is ``False``.
    """
    options = options or BatchOptions()
    log = logger or _log
    locations = resolve_sources(sources, timeout=options.timeout)
    total = len(locations)

    patients: list[Patient] = []
    errors: list[LoadError] = []
    processed = 0

    def load(location: str) -> Patient:
        return load_patient(location, timeout=options.timeout, logger=log)

    for chunk in _chunks(locations, options.chunk_size):
        with ThreadPoolExecutor(max_workers=len(chunk)) as executor:
            futures: list[Future[Patient]] = [
                executor.submit(load, location) for location in chunk
            ]

        for location, future in zip(chunk, futures, strict=True):
            try:
                patients.append(future.result())
            except PatientLoadError as err:
                if not options.continue_on_error:
                    raise
                log.warning(
                    "batch.source_failed",
                    extra={"source": location, "error": str(err)},
                )
                errors.append(LoadError(source=location, error=str(err)))

        processed += len(chunk)
        if options.on_progress is not None:
            options.on_progress(
                BatchProgress(
                    processed=processed,
                    total=total,
                    success_count=len(patients),
                    error_count=len(errors),
                )
            )

    if not patients and errors:
        raise AllSourcesFailedError(errors)

    summary = BatchSummary(total=total, successful=len(patients), failed=len(errors))
    log.info(
        "batch.complete",
        extra={
            "total": summary.total,
            "successful": summary.successful,
            "failed": summary.failed,
        },
    )
    return BatchResult(patients=patients, errors=errors, summary=summary)
