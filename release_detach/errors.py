"""Exception types raised by the detachment workflow."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from .artefacts import Artefact

__all__ = ["DetachError"]


class DetachError(RuntimeError):
    """Raised when the detachment workflow cannot continue.

    Parameters
    ----------
    message : str
        Description of the failure, naming the offending artefact or path.
    artefact : Artefact | None, optional
        Artefact being processed when the failure occurred.
    """

    def __init__(self, message: str, artefact: Artefact | None = None) -> None:
        super().__init__(message)
        self.artefact = artefact
