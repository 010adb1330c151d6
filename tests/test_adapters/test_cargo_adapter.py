"""Test the cargo metadata adapter."""

import json
from pathlib import Path

import pytest

from kiln.adapters.cargo_adapter import CargoMetadataAdapter, parse_cargo_metadata
from kiln.core.errors import MetadataError


METADATA = {
    "packages": [
        {
            "id": "embedded-runner 1.5.0 (path+file:///src/runners/embedded)",
            "name": "embedded-runner",
            "version": "1.5.0",
            "license": "Apache-2.0 OR MIT",
        },
        {
            "id": "heapless 0.8.0 (registry+https://github.com/rust-lang/crates.io-index)",
            "name": "heapless",
            "version": "0.8.0",
            "license": "MIT OR Apache-2.0",
            "repository": "https://github.com/rust-embedded/heapless",
        },
        {
            "id": "ring 0.17.5 (registry+https://github.com/rust-lang/crates.io-index)",
            "name": "ring",
            "version": "0.17.5",
            "license": None,
            "license_file": "LICENSE",
        },
    ],
    "workspace_members": [
        "embedded-runner 1.5.0 (path+file:///src/runners/embedded)"
    ],
}


def test_parse_excludes_workspace_members():
    graph = parse_cargo_metadata(METADATA)

    assert [d.name for d in graph.dependencies] == ["heapless", "ring"]
    assert graph.dependencies[1].declared_license == "see LICENSE"


def test_parse_tolerates_missing_sections():
    assert parse_cargo_metadata({}).dependencies == []


def test_load_dependency_graph_runs_cargo(fake_runner, tmp_path):
    manifest = Path("runners/embedded/Cargo.toml")
    cmd = [
        "cargo",
        "metadata",
        "--format-version",
        "1",
        "--manifest-path",
        str(manifest),
    ]
    fake_runner.stdout[tuple(cmd)] = [json.dumps(METADATA)]
    adapter = CargoMetadataAdapter(runner=fake_runner)

    graph = adapter.load_dependency_graph(manifest, cwd=tmp_path)

    assert fake_runner.commands == [cmd]
    assert len(graph.dependencies) == 2


def test_cargo_failure_raises_metadata_error(fake_runner):
    fake_runner.fail(["cargo", "metadata"], "error: failed to parse manifest")
    adapter = CargoMetadataAdapter(runner=fake_runner)

    with pytest.raises(MetadataError) as exc_info:
        adapter.load_dependency_graph(Path("Cargo.toml"))

    assert exc_info.value.generator == "license"
    assert exc_info.value.context["diagnostic"] == "error: failed to parse manifest"


def test_invalid_json_raises_metadata_error(fake_runner):
    adapter = CargoMetadataAdapter(runner=fake_runner)

    with pytest.raises(MetadataError, match="invalid JSON"):
        adapter.load_dependency_graph(Path("Cargo.toml"))


def test_missing_cargo_raises_metadata_error():
    def missing(cmd, middleware=None, cwd=None, env=None):
        raise FileNotFoundError(cmd[0])

    adapter = CargoMetadataAdapter(cargo_executable="cargo-nope", runner=missing)

    with pytest.raises(MetadataError, match="cargo-nope"):
        adapter.load_dependency_graph(Path("Cargo.toml"))


def test_cargo_that_cannot_start_raises_metadata_error():
    def denied(cmd, middleware=None, cwd=None, env=None):
        raise PermissionError(13, "Permission denied", cmd[0])

    adapter = CargoMetadataAdapter(runner=denied)

    with pytest.raises(MetadataError, match="Permission denied"):
        adapter.load_dependency_graph(Path("Cargo.toml"))


@pytest.mark.parametrize(
    "data",
    [
        {"packages": [{"id": "x", "version": "1.0"}]},
        {"packages": [{"id": "x", "name": "heapless"}]},
        {"packages": ["heapless 0.8.0"]},
        {"packages": [{"id": "x", "name": "heapless", "version": ["1.0"]}]},
        {"workspace_members": 3},
        ["not", "an", "object"],
    ],
)
def test_malformed_metadata_raises_metadata_error(data):
    with pytest.raises(MetadataError) as exc_info:
        parse_cargo_metadata(data)

    assert exc_info.value.generator == "license"


def test_malformed_cargo_output_raises_metadata_error(fake_runner):
    fake_runner.stdout[
        ("cargo", "metadata", "--format-version", "1", "--manifest-path", "Cargo.toml")
    ] = [json.dumps({"packages": [{"id": "x", "version": "1.0"}]})]
    adapter = CargoMetadataAdapter(runner=fake_runner)

    with pytest.raises(MetadataError, match="Malformed package"):
        adapter.load_dependency_graph(Path("Cargo.toml"))
