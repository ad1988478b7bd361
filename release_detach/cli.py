"""Command-line entry point for the detachment workflow.

Examples
--------
Detach the assemblies of a distribution module and stage their digests::

    release-detach release-detach.toml \
        --staging-url https://dist.apache.org/repos/dist/dev/commons/text

When ``GITHUB_OUTPUT`` is set, the working directory, the detached and
remaining files, and the digest map are exported for later workflow steps.
"""

from __future__ import annotations

import dataclasses
import sys
import typing as typ
from pathlib import Path

import cyclopts

from .config import load_config, load_project
from .environment import env_path
from .errors import DetachError
from .output import prepare_output_data, write_github_output
from .workflow import DetachStatus, detach_distributions

__all__ = ["app", "main"]

app = cyclopts.App(
    name="release-detach",
    help="Detach release distributions from a build and stage their SHA-512s.",
)


@app.default
def main(
    config_file: Path,
    *,
    working_directory: Path | None = None,
    staging_url: str | None = None,
    dist_module: bool | None = None,
) -> None:
    """Detach the distributions described by ``config_file``.

    Parameters
    ----------
    config_file:
        TOML file describing the project, its attached artefacts and the
        ``[commons]`` release parameters.
    working_directory:
        Overrides ``commons.output_directory``.
    staging_url:
        Overrides ``commons.dist_svn_staging_url``.
    dist_module:
        Overrides ``commons.is_dist_module``.
    """
    try:
        project = load_project(config_file)
        config = load_config(config_file, project)
    except (FileNotFoundError, DetachError) as exc:
        _fail(exc)

    overrides: dict[str, typ.Any] = {}
    if working_directory is not None:
        overrides["working_directory"] = working_directory
    if staging_url is not None:
        overrides["dist_staging_url"] = staging_url
    if dist_module is not None:
        overrides["is_dist_module"] = dist_module
    config = dataclasses.replace(config, **overrides)

    result = detach_distributions(project.attached_artefacts, config)
    if result.error is not None:
        _fail(result.error)

    if result.status is DetachStatus.DETACHED:
        if (github_output := env_path("GITHUB_OUTPUT")) is not None:
            write_github_output(
                github_output, prepare_output_data(result, project.attached_artefacts)
            )
        print(
            f"Detached {len(result.detached)} artefact(s) into "
            f"'{result.working_directory}'; "
            f"{len(project.attached_artefacts)} artefact(s) remain attached.",
            file=sys.stderr,
        )


def _fail(exc: BaseException) -> typ.NoReturn:
    print(f"::error title=Detachment Failure::{exc}", file=sys.stderr)
    raise SystemExit(1) from exc


if __name__ == "__main__":
    app()
