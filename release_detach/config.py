"""Configuration models and loaders for the detachment workflow.

A single TOML file describes both the build project, with its attached
artefacts, and the release parameters.

Usage
-----
Load the project and configuration used by a distribution module::

    from pathlib import Path
    from release_detach.config import load_config, load_project

    config_file = Path("release-detach.toml")
    project = load_project(config_file)
    config = load_config(config_file, project)
    print(f"Working directory: {config.working_directory}")

Schema
------
.. code-block:: toml

    [project]
    group_id = "org.apache.commons"
    artifact_id = "commons-text"
    version = "1.4"
    build_directory = "target"
    attached = [
      { file = "target/commons-text-1.4-src.zip", classifier = "src" },
      { file = "target/commons-text-1.4-src.zip.asc", type = "zip.asc" },
    ]

    [commons]
    output_directory = "target/commons-release-plugin"
    dist_svn_staging_url = "https://dist.apache.org/repos/dist/dev/commons/text"
    is_dist_module = true
"""

from __future__ import annotations

import dataclasses
import typing as typ
from pathlib import Path

import tomllib

from .artefacts import Artefact, Project, artefact_type_for
from .digests import DIGEST_PROPERTIES_NAME
from .errors import DetachError

__all__ = [
    "DEFAULT_BUILD_DIRECTORY",
    "WORKING_DIRECTORY_NAME",
    "DetachConfig",
    "load_config",
    "load_project",
]

DEFAULT_BUILD_DIRECTORY = "target"
WORKING_DIRECTORY_NAME = "commons-release-plugin"


@dataclasses.dataclass(slots=True)
class DetachConfig:
    """Release parameters consumed by the detachment workflow.

    Parameters
    ----------
    working_directory : Path
        Sandbox receiving the digest manifest, artefact copies and sidecars.
    dist_staging_url : str, default=""
        Distribution staging location the working directory is later
        uploaded to. The workflow does nothing while it is empty.
    is_dist_module : bool, default=False
        Only modules explicitly flagged as producing release distributions
        are processed.

    Examples
    --------
    >>> config = DetachConfig(Path("target/commons-release-plugin"))
    >>> config.is_dist_module
    False
    >>> config.digest_properties_path().name
    'sha512.properties'
    """

    working_directory: Path
    dist_staging_url: str = ""
    is_dist_module: bool = False

    @classmethod
    def for_project(cls, project: Project, **overrides: typ.Any) -> DetachConfig:
        """Return the default configuration for ``project`` with ``overrides``."""
        defaults: dict[str, typ.Any] = {
            "working_directory": project.build_directory / WORKING_DIRECTORY_NAME,
        }
        return cls(**(defaults | overrides))

    def digest_properties_path(self) -> Path:
        """Return the location of the SHA-512 manifest."""
        return self.working_directory / DIGEST_PROPERTIES_NAME


def load_project(config_file: Path) -> Project:
    """Load the build project described by ``config_file``.

    Parameters
    ----------
    config_file : Path
        TOML file containing a ``[project]`` table.

    Returns
    -------
    Project
        Project with its attached artefacts in declaration order. Relative
        paths are resolved against the directory holding ``config_file``.

    Raises
    ------
    FileNotFoundError
        Raised when ``config_file`` does not exist.
    DetachError
        Raised when required keys are missing or hold invalid values.
    """

    config_file = Path(config_file)
    data = _load_toml(config_file)
    try:
        section = data["project"]
    except KeyError as exc:
        message = f"Missing configuration key in {config_file}: {exc}"
        raise DetachError(message) from exc
    _require_keys(section, {"group_id", "artifact_id", "version"}, "project", config_file)

    base_dir = config_file.parent
    build_directory = _resolve_path(
        base_dir,
        _optional_str(section, "build_directory", "project", config_file)
        or DEFAULT_BUILD_DIRECTORY,
    )
    project = Project(
        group_id=_require_str(section, "group_id", "project", config_file),
        artifact_id=_require_str(section, "artifact_id", "project", config_file),
        version=_require_str(section, "version", "project", config_file),
        build_directory=build_directory,
    )
    project.attached_artefacts.extend(
        _make_artefacts(section.get("attached", []), project, base_dir, config_file)
    )
    return project


def load_config(config_file: Path, project: Project) -> DetachConfig:
    """Load the release parameters for ``project`` from ``config_file``.

    The ``[commons]`` table is optional; absent keys keep the defaults of
    :class:`DetachConfig` and :meth:`DetachConfig.for_project`.

    Raises
    ------
    FileNotFoundError
        Raised when ``config_file`` does not exist.
    DetachError
        Raised when a key holds a value of the wrong type.
    """

    config_file = Path(config_file)
    data = _load_toml(config_file)
    section = data.get("commons", {})
    if not isinstance(section, dict):
        message = f"[commons] must be a table in {config_file}"
        raise DetachError(message)

    overrides: dict[str, typ.Any] = {}
    if output_directory := _optional_str(
        section, "output_directory", "commons", config_file
    ):
        overrides["working_directory"] = _resolve_path(
            config_file.parent, output_directory
        )
    if (url := _optional_str(section, "dist_svn_staging_url", "commons", config_file)) is not None:
        overrides["dist_staging_url"] = url
    if "is_dist_module" in section:
        flag = section["is_dist_module"]
        if not isinstance(flag, bool):
            message = f"'is_dist_module' must be a boolean in [commons] section of {config_file}"
            raise DetachError(message)
        overrides["is_dist_module"] = flag
    return DetachConfig.for_project(project, **overrides)


def _load_toml(path: Path) -> dict[str, typ.Any]:
    if not path.is_file():
        message = f"Configuration file not found at {path}"
        raise FileNotFoundError(message)
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        message = f"Invalid TOML in {path}: {exc}"
        raise DetachError(message) from exc


def _make_artefacts(
    entries: object, project: Project, base_dir: Path, config_path: Path
) -> list[Artefact]:
    if not isinstance(entries, list):
        message = f"'attached' must be an array of tables in {config_path}"
        raise DetachError(message)
    artefacts: list[Artefact] = []
    for index, entry in enumerate(entries, start=1):
        label = f"project.attached entry #{index}"
        if not isinstance(entry, dict):
            message = (
                "Attached artefact entries must be tables of key/value pairs "
                f"({label} in {config_path})"
            )
            raise DetachError(message)
        _require_keys(entry, {"file"}, label, config_path)
        file = _resolve_path(base_dir, _require_str(entry, "file", label, config_path))
        artefact_type = _optional_str(entry, "type", label, config_path) or artefact_type_for(
            file.name
        )
        if not artefact_type:
            message = (
                f"Cannot derive an artefact type from '{file.name}'; "
                f"set 'type' in {label} of {config_path}"
            )
            raise DetachError(message)
        artefacts.append(
            Artefact(
                group_id=_optional_str(entry, "group_id", label, config_path)
                or project.group_id,
                artifact_id=_optional_str(entry, "artifact_id", label, config_path)
                or project.artifact_id,
                version=_optional_str(entry, "version", label, config_path)
                or project.version,
                type=artefact_type,
                file=file,
                classifier=_optional_str(entry, "classifier", label, config_path),
            )
        )
    return artefacts


def _resolve_path(base_dir: Path, value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else base_dir / path


def _require_keys(
    section: dict[str, typ.Any], keys: set[str], label: str, config_path: Path
) -> None:
    """Ensure ``section`` defines ``keys``.

    Examples
    --------
    >>> _require_keys(  # doctest: +SKIP
    ...     {'version': '1.0'},
    ...     {'version'},
    ...     'project',
    ...     Path('cfg'),
    ... )
    """
    if missing := sorted(key for key in keys if key not in section):
        joined = ", ".join(missing)
        message = (
            "Missing required key(s) "
            f"{joined} in [{label}] section of {config_path}"
        )
        raise DetachError(message)


def _require_str(
    section: dict[str, typ.Any], key: str, label: str, config_path: Path
) -> str:
    value = section[key]
    if not isinstance(value, str) or not value:
        message = f"'{key}' must be a non-empty string in [{label}] section of {config_path}"
        raise DetachError(message)
    return value


def _optional_str(
    section: dict[str, typ.Any], key: str, label: str, config_path: Path
) -> str | None:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        message = f"'{key}' must be a string in [{label}] section of {config_path}"
        raise DetachError(message)
    return value
