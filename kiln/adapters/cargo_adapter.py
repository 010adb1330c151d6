"""Cargo adapter for reading the dependency graph."""

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from kiln.core.errors import MetadataError
from kiln.core.structlog_logger import get_struct_logger
from kiln.metadata.models import Dependency, DependencyGraph
from kiln.protocols import CommandRunnerProtocol
from kiln.utils.stream_process import format_diagnostic, run_command


logger = get_struct_logger(__name__)


class CargoMetadataAdapter:
    """Query ``cargo metadata`` for the transitive dependency graph."""

    def __init__(
        self,
        cargo_executable: str = "cargo",
        runner: CommandRunnerProtocol | None = None,
    ) -> None:
        self.cargo_executable = cargo_executable
        self.runner = runner or run_command

    def load_dependency_graph(
        self, manifest_path: Path, cwd: Path | None = None
    ) -> DependencyGraph:
        """Load the dependency graph for a Cargo manifest.

        Workspace members are the product itself and are left out.

        Raises:
            MetadataError: If cargo fails or prints malformed metadata
        """
        cmd = [
            self.cargo_executable,
            "metadata",
            "--format-version",
            "1",
            "--manifest-path",
            str(manifest_path),
        ]
        logger.debug("cargo_metadata", command=cmd)
        try:
            return_code, stdout, stderr = self.runner(cmd, cwd=cwd)
        except OSError as e:
            raise MetadataError(
                "license", f"Cannot run {self.cargo_executable}: {e}"
            ) from e

        if return_code != 0:
            raise MetadataError(
                "license",
                "cargo metadata failed",
                {
                    "return_code": return_code,
                    "diagnostic": format_diagnostic(stdout, stderr),
                },
            )

        try:
            data = json.loads("\n".join(stdout))
        except json.JSONDecodeError as e:
            raise MetadataError(
                "license", f"cargo metadata printed invalid JSON: {e}"
            ) from e

        return parse_cargo_metadata(data)


def parse_cargo_metadata(data: dict[str, Any]) -> DependencyGraph:
    """Build a DependencyGraph from ``cargo metadata`` JSON output.

    Raises:
        MetadataError: If the output does not have the expected shape
    """
    if not isinstance(data, dict):
        raise MetadataError("license", "cargo metadata output is not a JSON object")

    try:
        members = set(data.get("workspace_members") or [])
        dependencies = [
            Dependency(
                name=package["name"],
                version=package["version"],
                license=package.get("license"),
                license_file=package.get("license_file"),
                repository=package.get("repository"),
            )
            for package in data.get("packages") or []
            if package.get("id") not in members
        ]
    except (AttributeError, KeyError, TypeError, ValidationError) as e:
        raise MetadataError(
            "license", f"Malformed package in cargo metadata: {e!r}"
        ) from e
    return DependencyGraph(dependencies=dependencies)


def create_cargo_adapter(cargo_executable: str = "cargo") -> CargoMetadataAdapter:
    """Create a cargo metadata adapter."""
    return CargoMetadataAdapter(cargo_executable=cargo_executable)
