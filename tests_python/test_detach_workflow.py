"""Behavioural tests for the detachment workflow."""

from __future__ import annotations

from pathlib import Path

import pytest

from detach_test_helpers import read_properties, sha512_of, write_artefact_files

STAGING_URL = "https://dist.example.org/repos/dist/dev/lib"


def make_artefact(release_detach: object, path: Path, artefact_type: str) -> object:
    """Return an artefact of the ``org.example:lib:1.0`` project."""

    return release_detach.Artefact(
        group_id="org.example",
        artifact_id="lib",
        version="1.0",
        type=artefact_type,
        file=path,
        classifier="src" if "src" in path.name else None,
    )


def make_config(
    release_detach: object,
    workspace: Path,
    *,
    staging_url: str = STAGING_URL,
    is_dist_module: bool = True,
) -> object:
    """Return a configuration using the default working directory."""

    return release_detach.DetachConfig(
        working_directory=workspace / "target" / "commons-release-plugin",
        dist_staging_url=staging_url,
        is_dist_module=is_dist_module,
    )


@pytest.fixture
def example_artefacts(release_detach: object, workspace: Path) -> list[object]:
    """Attach a source zip, its signature and a jar."""

    files = write_artefact_files(
        workspace, ["lib-1.0-src.zip", "lib-1.0-src.zip.asc", "lib-1.0.jar"]
    )
    return [
        make_artefact(release_detach, files["lib-1.0-src.zip"], "zip"),
        make_artefact(release_detach, files["lib-1.0-src.zip.asc"], "zip.asc"),
        make_artefact(release_detach, files["lib-1.0.jar"], "jar"),
    ]


def test_detaches_assemblies_and_stages_digests(
    release_detach: object, workspace: Path, example_artefacts: list[object]
) -> None:
    """Assemblies leave the attached list and land in the working directory."""

    attached = list(example_artefacts)
    jar = example_artefacts[2]
    config = make_config(release_detach, workspace)

    result = release_detach.detach_distributions(attached, config)

    assert result.status is release_detach.DetachStatus.DETACHED
    assert result.error is None
    assert attached == [jar], "Only the jar should remain attached"

    working_dir = config.working_directory
    staged = sorted(path.name for path in working_dir.iterdir())
    assert staged == [
        "lib-1.0-src.zip",
        "lib-1.0-src.zip.asc",
        "lib-1.0-src.zip.sha512",
        "sha512.properties",
    ], "Unexpected working directory contents"

    for artefact in example_artefacts[:2]:
        copy = working_dir / artefact.file.name
        assert copy.read_bytes() == artefact.file.read_bytes(), (
            f"{copy.name} should be a byte-for-byte copy"
        )

    zip_digest = sha512_of(example_artefacts[0].file)
    sidecar = working_dir / "lib-1.0-src.zip.sha512"
    assert sidecar.read_bytes() == f"{zip_digest}\n".encode("ascii")
    assert result.sidecar_files == [sidecar]


def test_manifest_records_every_attached_artefact(
    release_detach: object, workspace: Path, example_artefacts: list[object]
) -> None:
    """The manifest holds one sorted entry per attached artefact."""

    config = make_config(release_detach, workspace)

    result = release_detach.detach_distributions(list(example_artefacts), config)

    comments, entries = read_properties(config.working_directory / "sha512.properties")
    assert comments == ["#Release SHA-512s"]
    expected = sorted(
        (artefact.file.name, sha512_of(artefact.file))
        for artefact in example_artefacts
    )
    assert entries == expected, "Manifest should list every artefact, sorted by key"
    assert result.digest_file == config.working_directory / "sha512.properties"
    assert result.digests == dict(expected)


def test_manifest_is_independent_of_attachment_order(
    release_detach: object, workspace: Path, example_artefacts: list[object]
) -> None:
    """Reversing the attached list must not change the manifest bytes."""

    config = make_config(release_detach, workspace)
    manifest = config.working_directory / "sha512.properties"

    release_detach.detach_distributions(list(example_artefacts), config)
    first = manifest.read_bytes()
    release_detach.detach_distributions(list(reversed(example_artefacts)), config)

    assert manifest.read_bytes() == first


def test_remaining_artefacts_keep_their_order(
    release_detach: object, workspace: Path
) -> None:
    """Non-assembly artefacts stay attached in their original order."""

    names = [
        "lib-1.0.pom",
        "lib-1.0-bin.tar.gz",
        "lib-1.0.jar",
        "lib-1.0-bin.tar.gz.asc",
        "lib-1.0-sources.jar",
    ]
    files = write_artefact_files(workspace, names)
    attached = [
        make_artefact(
            release_detach, files[name], release_detach.artefact_type_for(name)
        )
        for name in names
    ]
    expected_remaining = [attached[0], attached[2], attached[4]]

    result = release_detach.detach_distributions(
        attached, make_config(release_detach, workspace)
    )

    assert attached == expected_remaining
    assert [artefact.file.name for artefact in result.detached] == [
        "lib-1.0-bin.tar.gz",
        "lib-1.0-bin.tar.gz.asc",
    ]
    assert not (
        result.working_directory / "lib-1.0-bin.tar.gz.asc.sha512"
    ).exists(), "Signature files must not receive a sidecar"


def test_skips_non_distribution_module(
    release_detach: object,
    workspace: Path,
    example_artefacts: list[object],
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Modules not flagged as distributions are left untouched."""

    attached = list(example_artefacts)
    config = make_config(release_detach, workspace, is_dist_module=False)

    result = release_detach.detach_distributions(attached, config)

    assert result.status is release_detach.DetachStatus.SKIPPED
    assert result.skip_reason is release_detach.SkipReason.NOT_DIST_MODULE
    assert attached == example_artefacts
    assert not config.working_directory.exists(), "No files should be written"
    assert "non distribution" in capsys.readouterr().out


def test_warns_when_staging_url_unset(
    release_detach: object,
    workspace: Path,
    example_artefacts: list[object],
    capsys: pytest.CaptureFixture[str],
) -> None:
    """An empty staging URL stops the workflow with a warning."""

    attached = list(example_artefacts)
    config = make_config(release_detach, workspace, staging_url="")

    result = release_detach.detach_distributions(attached, config)

    assert result.skip_reason is release_detach.SkipReason.NO_STAGING_URL
    assert result.ok
    assert attached == example_artefacts
    assert not config.working_directory.exists()
    assert "::warning title=Detachment Skipped::" in capsys.readouterr().err


def test_skips_when_nothing_matches(release_detach: object, workspace: Path) -> None:
    """Without assemblies the working directory is never created."""

    files = write_artefact_files(workspace, ["lib-1.0.jar", "lib-1.0.pom"])
    attached = [
        make_artefact(release_detach, files["lib-1.0.jar"], "jar"),
        make_artefact(release_detach, files["lib-1.0.pom"], "pom"),
    ]
    config = make_config(release_detach, workspace)

    result = release_detach.detach_distributions(attached, config)

    assert result.status is release_detach.DetachStatus.SKIPPED
    assert result.skip_reason is release_detach.SkipReason.NO_DISTRIBUTIONS
    assert len(attached) == 2
    assert not config.working_directory.exists()


def test_unreadable_artefact_fails_with_identity(
    release_detach: object, workspace: Path
) -> None:
    """A missing backing file fails the run and names the artefact."""

    missing = make_artefact(
        release_detach, workspace / "target" / "lib-1.0-src.zip", "zip"
    )
    config = make_config(release_detach, workspace)

    result = release_detach.detach_distributions([missing], config)

    assert result.status is release_detach.DetachStatus.FAILED
    assert not result.ok
    assert isinstance(result.error, release_detach.DetachError)
    assert "lib-src-1.0 type: zip" in str(result.error)
    assert isinstance(result.error.__cause__, FileNotFoundError)
    assert result.error.artefact == missing
    with pytest.raises(release_detach.DetachError):
        result.raise_for_status()


def test_failure_after_detachment_is_not_rolled_back(
    release_detach: object, workspace: Path, example_artefacts: list[object]
) -> None:
    """Artefacts detached before a failure stay detached."""

    attached = list(example_artefacts)
    blocker = workspace / "blocked"
    blocker.write_text("not a directory", encoding="utf-8")
    config = release_detach.DetachConfig(
        working_directory=blocker / "commons-release-plugin",
        dist_staging_url=STAGING_URL,
        is_dist_module=True,
    )

    result = release_detach.detach_distributions(attached, config)

    assert result.status is release_detach.DetachStatus.FAILED
    assert "Could not create working directory" in str(result.error)
    assert attached == [example_artefacts[2]], "Detachment must not be rolled back"
    assert len(result.detached) == 2
    assert result.staged_files == []


def test_existing_working_directory_is_reused(
    release_detach: object, workspace: Path, example_artefacts: list[object]
) -> None:
    """Files already present in the working directory are preserved."""

    config = make_config(release_detach, workspace)
    config.working_directory.mkdir(parents=True)
    keep = config.working_directory / "other-module.zip"
    keep.write_text("keep", encoding="utf-8")

    result = release_detach.detach_distributions(list(example_artefacts), config)

    assert result.ok
    assert keep.read_text(encoding="utf-8") == "keep"


@pytest.fixture
def release_artefacts(release_detach: object, workspace: Path) -> list[object]:
    """Attach a source zip, its signature, a binary tarball and a jar."""

    names = [
        "lib-1.0-src.zip",
        "lib-1.0-src.zip.asc",
        "lib-1.0-bin.tar.gz",
        "lib-1.0.jar",
    ]
    files = write_artefact_files(workspace, names)
    return [
        make_artefact(
            release_detach, files[name], release_detach.artefact_type_for(name)
        )
        for name in names
    ]


def run_with_blocked_path(
    release_detach: object,
    workspace: Path,
    artefacts: list[object],
    blocked_name: str,
) -> tuple[object, list[object]]:
    """Run the workflow with a directory occupying ``blocked_name``."""

    config = make_config(release_detach, workspace)
    (config.working_directory / blocked_name).mkdir(parents=True)
    attached = list(artefacts)
    return release_detach.detach_distributions(attached, config), attached


def test_unwritable_manifest_fails_the_run(
    release_detach: object, workspace: Path, release_artefacts: list[object]
) -> None:
    """A manifest that cannot be written stops the run before any copy."""

    result, attached = run_with_blocked_path(
        release_detach, workspace, release_artefacts, "sha512.properties"
    )

    assert result.status is release_detach.DetachStatus.FAILED
    assert "Failure to write SHA-512s" in str(result.error)
    assert isinstance(result.error.__cause__, OSError)
    assert attached == [release_artefacts[3]], "Detachment must not be rolled back"
    assert result.digest_file is None
    assert result.staged_files == []
    assert result.sidecar_files == []


def test_copy_failure_names_the_artefact(
    release_detach: object, workspace: Path, release_artefacts: list[object]
) -> None:
    """A failed copy reports the artefact and keeps earlier copies recorded."""

    signature = release_artefacts[1]
    result, attached = run_with_blocked_path(
        release_detach, workspace, release_artefacts, signature.file.name
    )

    assert result.status is release_detach.DetachStatus.FAILED
    assert "Could not copy" in str(result.error)
    assert isinstance(result.error.__cause__, OSError)
    assert result.error.artefact == signature, "Copy failures must carry the artefact"
    assert attached == [release_artefacts[3]], "Detachment must not be rolled back"
    assert result.staged_files == [result.working_directory / "lib-1.0-src.zip"]
    assert result.sidecar_files == []


def test_sidecar_failure_names_the_artefact(
    release_detach: object, workspace: Path, release_artefacts: list[object]
) -> None:
    """A failed sidecar write reports the artefact after all copies are made."""

    tarball = release_artefacts[2]
    result, attached = run_with_blocked_path(
        release_detach, workspace, release_artefacts, f"{tarball.file.name}.sha512"
    )

    working_dir = result.working_directory
    assert result.status is release_detach.DetachStatus.FAILED
    assert "Could not write the SHA-512 file for: lib-1.0-bin.tar.gz" in str(
        result.error
    )
    assert isinstance(result.error.__cause__, OSError)
    assert result.error.artefact == tarball
    assert attached == [release_artefacts[3]], "Detachment must not be rolled back"
    assert result.staged_files == [
        working_dir / "lib-1.0-src.zip",
        working_dir / "lib-1.0-src.zip.asc",
        working_dir / "lib-1.0-bin.tar.gz",
    ]
    assert result.sidecar_files == [working_dir / "lib-1.0-src.zip.sha512"]
