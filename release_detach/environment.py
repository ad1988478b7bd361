"""Environment helpers used by the command-line entry point."""

from __future__ import annotations

import os
from pathlib import Path

__all__ = ["env_path"]


def env_path(name: str) -> Path | None:
    """Return the ``Path`` stored in ``name`` or ``None`` when unset or empty.

    Parameters
    ----------
    name:
        Name of the environment variable to fetch.
    """
    value = os.environ.get(name)
    if not value:
        return None
    return Path(value)
