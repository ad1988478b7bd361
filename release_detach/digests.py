"""SHA-512 helpers: streaming digests, the properties manifest and sidecars."""

from __future__ import annotations

import hashlib
import typing as typ
from pathlib import Path

__all__ = [
    "DIGEST_PROPERTIES_COMMENT",
    "DIGEST_PROPERTIES_NAME",
    "SHA512_SUFFIX",
    "needs_sidecar",
    "sha512_hex",
    "write_digest_properties",
    "write_sidecar",
]

SHA512_SUFFIX = "sha512"
DIGEST_PROPERTIES_NAME = "sha512.properties"
DIGEST_PROPERTIES_COMMENT = "Release SHA-512s"

_CHUNK_SIZE = 8192
_SIGNATURE_MARKER = "asc"
_SPECIAL_ESCAPES = {"\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f"}
_RESERVED_CHARACTERS = frozenset("=:#!\\")


def sha512_hex(path: Path) -> str:
    """Return the lowercase hex SHA-512 digest of ``path``.

    Parameters
    ----------
    path : Path
        File to hash. It is read in fixed-size chunks.

    Returns
    -------
    str
        128 character hexadecimal digest.

    Raises
    ------
    OSError
        Raised when ``path`` cannot be opened or read.
    """

    hasher = hashlib.sha512()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def write_digest_properties(
    path: Path,
    digests: typ.Mapping[str, str],
    comment: str = DIGEST_PROPERTIES_COMMENT,
) -> Path:
    """Write ``digests`` to ``path`` as a Java properties file.

    Keys are written in sorted order below the ``#comment`` header so the
    file is identical for identical inputs. An existing file is replaced.

    Parameters
    ----------
    path : Path
        Destination of the properties file.
    digests : Mapping[str, str]
        Mapping of artefact keys to hex digests.
    comment : str, default="Release SHA-512s"
        Header comment. Line breaks start further ``#`` comment lines.

    Returns
    -------
    Path
        ``path``, for convenience.

    Raises
    ------
    OSError
        Raised when the file cannot be written.

    Examples
    --------
    >>> target = Path("/tmp/sha512.properties")
    >>> _ = write_digest_properties(target, {"b.zip": "bb", "a.zip": "aa"})
    >>> target.read_text(encoding="iso-8859-1").splitlines()
    ['#Release SHA-512s', 'a.zip=aa', 'b.zip=bb']
    """

    lines = [f"#{_escape_comment(comment)}"]
    lines.extend(
        f"{_escape(key, is_key=True)}={_escape(value, is_key=False)}"
        for key, value in sorted(digests.items())
    )
    with path.open("w", encoding="iso-8859-1", newline="\n") as handle:
        handle.write("\n".join(lines))
        handle.write("\n")
    return path


def needs_sidecar(file_name: str) -> bool:
    """Return ``False`` for signature files, which are not digested separately.

    Examples
    --------
    >>> needs_sidecar("lib-1.0-src.zip")
    True
    >>> needs_sidecar("lib-1.0-src.zip.asc")
    False
    """
    return _SIGNATURE_MARKER not in file_name


def write_sidecar(directory: Path, file_name: str, digest: str) -> Path:
    """Write ``<directory>/<file_name>.sha512`` containing ``digest``.

    The sidecar holds the digest followed by a single ``\\n``.

    Raises
    ------
    OSError
        Raised when the sidecar cannot be written.
    """

    sidecar = directory / f"{file_name}.{SHA512_SUFFIX}"
    sidecar.write_bytes(f"{digest}\n".encode("ascii"))
    return sidecar


def _escape(text: str, *, is_key: bool) -> str:
    escaped: list[str] = []
    for index, char in enumerate(text):
        if char == " ":
            escaped.append("\\ " if is_key or index == 0 else " ")
        elif char in _SPECIAL_ESCAPES:
            escaped.append(_SPECIAL_ESCAPES[char])
        elif char in _RESERVED_CHARACTERS:
            escaped.append(f"\\{char}")
        elif " " < char <= "~":
            escaped.append(char)
        else:
            escaped.extend(_unicode_escapes(char))
    return "".join(escaped)


def _escape_comment(comment: str) -> str:
    """Escape ``comment`` the way ``java.util.Properties.store`` does.

    Latin-1 characters are kept as they are. Anything above U+00FF becomes
    ``\\uXXXX``. Each line break starts a new comment line, and ``#`` is
    added unless the next line already begins with ``#`` or ``!``.

    Examples
    --------
    >>> _escape_comment("Release\\nSHA-512s")
    'Release\\n#SHA-512s'
    >>> _escape_comment("caf\\u00e9 \\u20ac")
    'café \\\\u20AC'
    """

    lines = comment.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    escaped_lines = [
        "".join(
            char if char <= "\u00ff" else "".join(_unicode_escapes(char))
            for char in line
        )
        for line in lines
    ]
    rendered = escaped_lines[0]
    for line in escaped_lines[1:]:
        rendered += "\n" if line.startswith(("#", "!")) else "\n#"
        rendered += line
    return rendered


def _unicode_escapes(char: str) -> list[str]:
    """Return ``\\uXXXX`` escapes for ``char``, split into UTF-16 units."""
    encoded = char.encode("utf-16-be")
    return [
        f"\\u{int.from_bytes(encoded[offset:offset + 2], 'big'):04X}"
        for offset in range(0, len(encoded), 2)
    ]
