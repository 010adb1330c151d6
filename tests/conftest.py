"""Core test fixtures for the kiln project."""

import copy
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from kiln.config.loader import parse_project_config
from kiln.config.models import ProjectConfig
from kiln.config.settings import KilnSettings
from kiln.orchestration.context import RunContext


BASE_CONFIG: dict[str, Any] = {
    "product": "Test Product",
    "toolchains": {
        "arm": {
            "command": [
                "cc-build",
                "--target",
                "{target}",
                "--variant",
                "{variant}",
                "--features",
                "{features}",
            ],
            "output": "out/{target}-{variant}.bin",
        }
    },
    "targets": [
        {"id": "nk3xn", "toolchain": "arm", "format": "bin", "features": ["board-nk3xn"]},
        {"id": "nk3am", "toolchain": "arm", "format": "ihex", "features": ["board-nk3am"]},
        {
            "id": "nkpk",
            "toolchain": "arm",
            "format": "ihex",
            "features": ["board-nkpk"],
            "variants": ["release", "provisioner"],
        },
    ],
    "variants": [
        {"id": "release"},
        {"id": "test", "features": ["test"], "suffix": "-test"},
        {"id": "provisioner", "features": ["provisioner"], "kind": "provisioner"},
        {"id": "debug", "features": ["log-semihosting"], "suffix": "-debug"},
    ],
    "phases": {"binaries": {"metadata": False}},
    "workspace": {"lint": [["cargo", "fmt", "--", "--check"]]},
    "subsystems": [
        {
            "name": "embedded",
            "path": "runners/embedded",
            "check": [["make", "check-all"]],
            "lint": [["make", "lint-all"]],
            "doc": [["make", "doc-nk3am"]],
        },
        {
            "name": "nkpk",
            "path": "runners/nkpk",
            "check": [["make", "check"]],
            "lint": [["make", "lint"]],
        },
    ],
}


@dataclass
class RecordedCall:
    cmd: list[str]
    cwd: Path | None = None
    env: dict[str, str] = field(default_factory=dict)


class FakeRunner:
    """Stand-in for run_command.

    ``cc-build`` invocations write their output file the way the real
    toolchain would; commands listed in ``failures`` exit non-zero.
    """

    def __init__(self) -> None:
        self.calls: list[RecordedCall] = []
        self.failures: dict[tuple[str, ...], tuple[int, list[str], list[str]]] = {}
        self.stdout: dict[tuple[str, ...], list[str]] = {}
        self.side_effect: Callable[[list[str]], None] | None = None

    def fail(self, cmd: list[str], stderr: str, return_code: int = 101) -> None:
        self.failures[tuple(cmd)] = (return_code, [], stderr.splitlines())

    def __call__(
        self,
        cmd: str | list[str],
        middleware: Any = None,
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> tuple[int, list[str], list[str]]:
        cmd = list(cmd)
        self.calls.append(RecordedCall(cmd=cmd, cwd=cwd, env=dict(env or {})))
        if self.side_effect is not None:
            self.side_effect(cmd)

        for prefix, result in self.failures.items():
            if tuple(cmd[: len(prefix)]) == prefix:
                return result

        if cmd and cmd[0] == "cc-build" and cwd is not None:
            target, variant, features = cmd[2], cmd[4], cmd[6]
            output = cwd / "out" / f"{target}-{variant}.bin"
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(f"{target}:{variant}:{features}\n")

        return 0, self.stdout.get(tuple(cmd), []), []

    @property
    def commands(self) -> list[list[str]]:
        return [call.cmd for call in self.calls]


def make_config(**overrides: Any) -> ProjectConfig:
    """Build a validated config from BASE_CONFIG with top-level overrides."""
    data = {**BASE_CONFIG, **overrides}
    return parse_project_config(data)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def project_config() -> ProjectConfig:
    return make_config()


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def run_context(tmp_path: Path, project_config: ProjectConfig) -> RunContext:
    return RunContext(
        project_root=tmp_path, config=project_config, settings=KilnSettings()
    )


@pytest.fixture
def config_factory() -> Callable[..., ProjectConfig]:
    """Return a factory building configs from BASE_CONFIG with overrides."""
    return make_config


@pytest.fixture
def base_config_data() -> dict[str, Any]:
    """A deep copy of the raw configuration mapping."""
    return copy.deepcopy(BASE_CONFIG)
