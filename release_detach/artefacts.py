"""Artefact records handed over by the build and the detachment allow-list.

Usage
-----
Decide whether an assembly should leave the published artefact list::

    from pathlib import Path
    from release_detach.artefacts import Artefact, should_detach

    archive = Artefact(
        group_id="org.apache.commons",
        artifact_id="commons-text",
        version="1.4",
        type="tar.gz",
        file=Path("target/commons-text-1.4-src.tar.gz"),
        classifier="src",
    )
    assert should_detach(archive)
"""

from __future__ import annotations

import dataclasses
from pathlib import Path, PurePath

__all__ = [
    "ARTEFACT_TYPES_TO_DETACH",
    "Artefact",
    "Project",
    "artefact_type_for",
    "should_detach",
]

# Assemblies and their PGP signatures never go to the binary repository.
ARTEFACT_TYPES_TO_DETACH: frozenset[str] = frozenset(
    {"zip", "tar.gz", "zip.asc", "tar.gz.asc"}
)

_SIGNATURE_SUFFIX = ".asc"
_COMPOUND_TYPES = ("tar.gz", "tar.bz2", "tar.xz")


@dataclasses.dataclass(slots=True, frozen=True)
class Artefact:
    """Describe a single file the build attached for publication.

    Parameters
    ----------
    group_id : str
        Group coordinate of the owning project.
    artifact_id : str
        Artifact coordinate of the owning project.
    version : str
        Version coordinate of the owning project.
    type : str
        Extension family of the file, for example ``"zip"`` or
        ``"tar.gz.asc"``.
    file : Path
        Location of the backing file on disk.
    classifier : str | None, optional
        Classifier distinguishing secondary artefacts such as ``"src"``.

    Examples
    --------
    >>> artefact = Artefact(
    ...     "org.example", "lib", "1.0", "zip", Path("lib-1.0-src.zip"), "src"
    ... )
    >>> artefact.key
    'lib-1.0-src.zip'
    >>> artefact.coordinates
    'org.example:lib:1.0:src:zip'
    """

    group_id: str
    artifact_id: str
    version: str
    type: str
    file: Path
    classifier: str | None = None

    @property
    def key(self) -> str:
        """Identifier used in the digest map: the backing file name."""
        return self.file.name

    @property
    def coordinates(self) -> str:
        """Return ``group:artifact:version[:classifier]:type``."""
        parts = [self.group_id, self.artifact_id, self.version]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.type)
        return ":".join(parts)

    def describe(self) -> str:
        """Return the identity quoted in error messages."""
        return f"{self.artifact_id}-{self.classifier}-{self.version} type: {self.type}"


@dataclasses.dataclass(slots=True)
class Project:
    """Build project owning the attached artefact list.

    ``attached_artefacts`` is the collection the host publishes after the
    build. :func:`release_detach.workflow.detach_distributions` removes
    entries from it in place.
    """

    group_id: str
    artifact_id: str
    version: str
    build_directory: Path
    attached_artefacts: list[Artefact] = dataclasses.field(default_factory=list)


def should_detach(artefact: Artefact) -> bool:
    """Return ``True`` when ``artefact`` must not be published by the build."""
    return artefact.type in ARTEFACT_TYPES_TO_DETACH


def artefact_type_for(file_name: str) -> str:
    """Derive the extension family type tag from ``file_name``.

    Examples
    --------
    >>> artefact_type_for("lib-1.0-src.tar.gz.asc")
    'tar.gz.asc'
    >>> artefact_type_for("lib-1.0.jar")
    'jar'
    >>> artefact_type_for("LICENSE")
    ''
    """

    signature = ""
    base = file_name
    if base.endswith(_SIGNATURE_SUFFIX):
        base = base.removesuffix(_SIGNATURE_SUFFIX)
        signature = _SIGNATURE_SUFFIX
    for compound in _COMPOUND_TYPES:
        if base.endswith(f".{compound}"):
            return f"{compound}{signature}"
    suffix = PurePath(base).suffix.removeprefix(".")
    if not suffix:
        return ""
    return f"{suffix}{signature}"
