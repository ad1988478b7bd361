"""Utilities for exporting the detachment results as workflow outputs."""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path

if typ.TYPE_CHECKING:
    from .artefacts import Artefact
    from .workflow import DetachResult

__all__ = ["prepare_output_data", "write_github_output"]


def prepare_output_data(
    result: DetachResult, remaining: typ.Sequence[Artefact]
) -> dict[str, str | list[str]]:
    """Assemble workflow outputs describing the working directory.

    Parameters
    ----------
    result : DetachResult
        Outcome of a successful detachment run.
    remaining : Sequence[Artefact]
        Artefacts still attached to the build after detachment.

    Returns
    -------
    dict[str, str | list[str]]
        Output values ready for :func:`write_github_output`. List values are
        written as multi-line records.
    """

    detached_names = sorted(artefact.file.name for artefact in result.detached)
    return {
        "working_directory": result.working_directory.as_posix(),
        "digest_file": result.digest_file.as_posix() if result.digest_file else "",
        "detached_files": detached_names,
        "attached_files": [artefact.file.as_posix() for artefact in remaining],
        "checksum_map": json.dumps(dict(sorted(result.digests.items()))),
    }


def write_github_output(file: Path, values: dict[str, str | list[str]]) -> None:
    """Append ``values`` to the GitHub Actions output ``file``.

    Scalars are written as ``name=value`` with ``%``, CR and LF
    percent-encoded. Lists become multi-line records terminated by a
    ``DETACH_<NAME>_EOF`` delimiter line.

    Parameters
    ----------
    file : Path
        Target ``GITHUB_OUTPUT`` file. Earlier records are preserved.
    values : dict[str, str | list[str]]
        Output names mapped to their values, usually from
        :func:`prepare_output_data`.
    """

    file.parent.mkdir(parents=True, exist_ok=True)
    with file.open("a", encoding="utf-8") as handle:
        handle.writelines(_format_record(key, value) for key, value in values.items())


def _format_record(key: str, value: str | list[str]) -> str:
    if isinstance(value, list):
        delimiter = f"DETACH_{key.upper()}_EOF"
        body = "".join(f"{line}\n" for line in value)
        return f"{key}<<{delimiter}\n{body}{delimiter}\n"
    encoded = value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    return f"{key}={encoded}\n"
