"""Shared helpers for the detachment test suites."""

from __future__ import annotations

import hashlib
from pathlib import Path

__all__ = [
    "PROJECT_TOML",
    "decode_output_file",
    "read_properties",
    "sha512_of",
    "write_artefact_files",
]

PROJECT_TOML = """\
[project]
group_id = "org.example"
artifact_id = "lib"
version = "1.0"
attached = [
  { file = "target/lib-1.0-src.zip", classifier = "src" },
  { file = "target/lib-1.0-src.zip.asc", classifier = "src" },
  { file = "target/lib-1.0.jar" },
]

[commons]
dist_svn_staging_url = "https://dist.example.org/repos/dist/dev/lib"
is_dist_module = true
"""


def write_artefact_files(root: Path, names: list[str]) -> dict[str, Path]:
    """Create one file per name in ``root / "target"`` with distinct content.

    Parameters
    ----------
    root : Path
        Project directory containing the ``target`` build directory.
    names : list[str]
        File names to create.

    Returns
    -------
    dict[str, Path]
        Mapping of file names to the created paths.
    """

    target = root / "target"
    target.mkdir(parents=True, exist_ok=True)
    created: dict[str, Path] = {}
    for name in names:
        path = target / name
        path.write_bytes(f"payload for {name}\n".encode())
        created[name] = path
    return created


def sha512_of(path: Path) -> str:
    """Return the reference SHA-512 hex digest of ``path``."""

    return hashlib.sha512(path.read_bytes()).hexdigest()


def read_properties(path: Path) -> tuple[list[str], list[tuple[str, str]]]:
    """Split a properties file into comment lines and ``key=value`` pairs.

    Only the escapes produced for plain file names and hex digests are
    supported.
    """

    comments: list[str] = []
    entries: list[tuple[str, str]] = []
    for line in path.read_text(encoding="iso-8859-1").splitlines():
        if line.startswith("#"):
            comments.append(line)
            continue
        key, value = line.split("=", 1)
        entries.append((key, value))
    return comments, entries


def decode_output_file(path: Path) -> dict[str, str]:
    """Decode the records appended by ``write_github_output``.

    Multi-line records (``name<<DELIMITER``) are joined with ``\\n``; scalar
    records have their percent-encoding reversed.
    """

    values: dict[str, str] = {}
    lines = iter(path.read_text(encoding="utf-8").splitlines())
    for line in lines:
        if "<<" in line:
            key, delimiter = line.split("<<", 1)
            body: list[str] = []
            for body_line in lines:
                if body_line == delimiter:
                    break
                body.append(body_line)
            values[key] = "\n".join(body)
        elif "=" in line:
            key, encoded = line.split("=", 1)
            values[key] = (
                encoded.replace("%0A", "\n").replace("%0D", "\r").replace("%25", "%")
            )
    return values
