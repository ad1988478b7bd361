"""Detach release distributions from the build and stage their SHA-512s.

The workflow runs once per distribution module:

1. every attached artefact is hashed and the assemblies (see
   :data:`~release_detach.artefacts.ARTEFACT_TYPES_TO_DETACH`) are selected,
2. the assemblies are removed from the attached artefact list so the build
   does not publish them to the binary repository,
3. ``sha512.properties`` is written to the working directory,
4. the assemblies are copied to the working directory,
5. a ``.sha512`` sidecar is written for each copy that is not a signature.

Failures are not rolled back: artefacts removed in step 2 stay removed.
"""

from __future__ import annotations

import dataclasses
import enum
import sys
import typing as typ
from pathlib import Path

from .artefacts import Artefact, should_detach
from .digests import needs_sidecar, sha512_hex, write_digest_properties, write_sidecar
from .errors import DetachError
from .fs_utils import copy_artefact, initialize_working_directory

if typ.TYPE_CHECKING:
    from .config import DetachConfig

__all__ = ["DetachResult", "DetachStatus", "SkipReason", "detach_distributions"]


class DetachStatus(enum.Enum):
    """Terminal state of a workflow run."""

    DETACHED = "detached"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(enum.Enum):
    """Why a run finished without doing any work."""

    NOT_DIST_MODULE = "not-dist-module"
    NO_STAGING_URL = "no-staging-url"
    NO_DISTRIBUTIONS = "no-distributions"


@dataclasses.dataclass(slots=True)
class DetachResult:
    """Outcome of :func:`detach_distributions`.

    The collections record the progress made, including on failure, where
    they describe the steps completed before ``error`` was raised.
    """

    status: DetachStatus
    working_directory: Path
    skip_reason: SkipReason | None = None
    error: DetachError | None = None
    detached: list[Artefact] = dataclasses.field(default_factory=list)
    digests: dict[str, str] = dataclasses.field(default_factory=dict)
    digest_file: Path | None = None
    staged_files: list[Path] = dataclasses.field(default_factory=list)
    sidecar_files: list[Path] = dataclasses.field(default_factory=list)

    @property
    def ok(self) -> bool:
        """``True`` unless the run failed."""
        return self.status is not DetachStatus.FAILED

    def raise_for_status(self) -> None:
        """Re-raise the stored :class:`DetachError` of a failed run."""
        if self.error is not None:
            raise self.error


def detach_distributions(
    attached_artefacts: list[Artefact], config: DetachConfig
) -> DetachResult:
    """Detach assemblies from ``attached_artefacts`` and stage them.

    Parameters
    ----------
    attached_artefacts : list[Artefact]
        The build's attached artefact list. Detached entries are removed from
        it in place; the remaining entries keep their order.
    config : DetachConfig
        Working directory, staging URL and distribution module flag.

    Returns
    -------
    DetachResult
        ``SKIPPED`` when a guard stops the run, ``DETACHED`` on success and
        ``FAILED`` carrying the :class:`DetachError` on any I/O failure.

    Examples
    --------
    >>> from release_detach.config import DetachConfig
    >>> result = detach_distributions([], DetachConfig(Path("/tmp/unused")))
    This module is marked as a non distribution or assembly module, and the release detachment will not run.
    >>> result.skip_reason
    <SkipReason.NOT_DIST_MODULE: 'not-dist-module'>
    """

    result = DetachResult(
        status=DetachStatus.DETACHED, working_directory=config.working_directory
    )
    if not config.is_dist_module:
        print(
            "This module is marked as a non distribution or assembly module, "
            "and the release detachment will not run."
        )
        return _skip(result, SkipReason.NOT_DIST_MODULE)
    if not config.dist_staging_url:
        print(
            "::warning title=Detachment Skipped::dist_svn_staging_url is not set, "
            "the release detachment will not run.",
            file=sys.stderr,
        )
        return _skip(result, SkipReason.NO_STAGING_URL)

    try:
        _run(attached_artefacts, config, result)
    except DetachError as exc:
        result.status = DetachStatus.FAILED
        result.error = exc
    return result


def _skip(result: DetachResult, reason: SkipReason) -> DetachResult:
    result.status = DetachStatus.SKIPPED
    result.skip_reason = reason
    return result


def _run(
    attached_artefacts: list[Artefact], config: DetachConfig, result: DetachResult
) -> None:
    print("Detaching distributions")
    for artefact in attached_artefacts:
        _record_digest(artefact, result.digests)
        if should_detach(artefact):
            result.detached.append(artefact)

    if not result.detached:
        print("Current project contains no distributions. Not executing.")
        _skip(result, SkipReason.NO_DISTRIBUTIONS)
        return

    for artefact in result.detached:
        attached_artefacts.remove(artefact)

    working_directory = config.working_directory
    initialize_working_directory(working_directory)
    result.digest_file = _write_manifest(config.digest_properties_path(), result.digests)

    print(
        f"Copying {len(result.detached)} detached artefact(s) to working "
        f"directory {working_directory.absolute()}"
    )
    for artefact in result.detached:
        print(f"Copying: {artefact.file.name}")
        try:
            staged = copy_artefact(artefact.file, working_directory)
        except DetachError as exc:
            raise DetachError(str(exc), artefact) from exc.__cause__
        result.staged_files.append(staged)

    for sidecar in _iter_sidecars(result.detached, result.digests, working_directory):
        result.sidecar_files.append(sidecar)


def _record_digest(artefact: Artefact, digests: dict[str, str]) -> None:
    """Store the SHA-512 of ``artefact`` in ``digests`` under its key."""

    try:
        digests[artefact.key] = sha512_hex(artefact.file)
    except OSError as exc:
        message = f"Could not compute the SHA-512 for: {artefact.describe()}"
        raise DetachError(message, artefact) from exc


def _write_manifest(path: Path, digests: dict[str, str]) -> Path:
    print(f"Writing {path}")
    try:
        return write_digest_properties(path, digests)
    except OSError as exc:
        message = f"Failure to write SHA-512s to {path}"
        raise DetachError(message) from exc


def _iter_sidecars(
    detached: list[Artefact], digests: dict[str, str], working_directory: Path
) -> typ.Iterator[Path]:
    """Yield the sidecars written for non-signature artefacts."""

    for artefact in detached:
        name = artefact.file.name
        if not needs_sidecar(name):
            continue
        digest = digests[artefact.key]
        print(f"{name} sha512: {digest}")
        try:
            yield write_sidecar(working_directory, name, digest)
        except OSError as exc:
            message = f"Could not write the SHA-512 file for: {name}"
            raise DetachError(message, artefact) from exc
