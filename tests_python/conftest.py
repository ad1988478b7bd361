"""Shared fixtures for the release detachment test suite."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture(scope="session")
def release_detach() -> object:
    """Load the detachment package once for reuse across tests."""
    sys_path = str(REPO_ROOT)

    sys.path.insert(0, sys_path)
    try:
        return importlib.import_module("release_detach")
    finally:
        sys.path.remove(sys_path)


@pytest.fixture
def detach_workflow(release_detach: object) -> object:
    """Expose the workflow module for unit-level assertions."""

    return importlib.import_module("release_detach.workflow")


@pytest.fixture
def detach_digests(release_detach: object) -> object:
    """Expose the digest helpers for direct testing."""

    return importlib.import_module("release_detach.digests")


@pytest.fixture
def detach_fs_utils(release_detach: object) -> object:
    """Expose the filesystem helpers for direct testing."""

    return importlib.import_module("release_detach.fs_utils")


@pytest.fixture
def detach_output(release_detach: object) -> object:
    """Expose the workflow output helpers for direct testing."""

    return importlib.import_module("release_detach.output")


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create an isolated project directory with an empty build directory."""
    root = tmp_path / "workspace"
    (root / "target").mkdir(parents=True)
    return root
