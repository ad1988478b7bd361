"""Public interface for the release detachment package."""

from .artefacts import (
    ARTEFACT_TYPES_TO_DETACH,
    Artefact,
    Project,
    artefact_type_for,
    should_detach,
)
from .config import DetachConfig, load_config, load_project
from .digests import DIGEST_PROPERTIES_NAME, sha512_hex, write_digest_properties
from .errors import DetachError
from .workflow import DetachResult, DetachStatus, SkipReason, detach_distributions

__all__ = [
    "ARTEFACT_TYPES_TO_DETACH",
    "Artefact",
    "artefact_type_for",
    "detach_distributions",
    "DetachConfig",
    "DetachError",
    "DetachResult",
    "DetachStatus",
    "DIGEST_PROPERTIES_NAME",
    "load_config",
    "load_project",
    "Project",
    "sha512_hex",
    "should_detach",
    "SkipReason",
    "write_digest_properties",
]
