"""Filesystem helpers for the working directory."""

from __future__ import annotations

import shutil
from pathlib import Path

from .errors import DetachError

__all__ = ["copy_artefact", "initialize_working_directory"]


def initialize_working_directory(working_directory: Path) -> None:
    """Create ``working_directory`` and its parents when absent.

    Existing contents are kept: the directory may already hold artefacts
    from other modules of the same release.

    Parameters
    ----------
    working_directory : Path
        Directory that receives the digest manifest and artefact copies.

    Raises
    ------
    DetachError
        Raised when the directory cannot be created, for example because a
        regular file occupies the path.
    """

    if working_directory.is_dir():
        return
    print(f"Creating working directory '{working_directory}'")
    try:
        working_directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        message = f"Could not create working directory {working_directory}: {exc}"
        raise DetachError(message) from exc


def copy_artefact(source: Path, directory: Path) -> Path:
    """Copy ``source`` into ``directory`` keeping its file name.

    Parameters
    ----------
    source : Path
        Backing file of a detached artefact.
    directory : Path
        Working directory receiving the copy.

    Returns
    -------
    Path
        Location of the copy.

    Raises
    ------
    DetachError
        Raised when the copy fails.
    """

    destination = directory / source.name
    try:
        if destination.exists() and not destination.samefile(source):
            destination.unlink()
        shutil.copy2(source, destination)
    except OSError as exc:
        message = f"Could not copy {source} to {destination}: {exc}"
        raise DetachError(message) from exc
    return destination
