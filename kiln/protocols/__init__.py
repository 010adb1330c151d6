"""Protocol definitions for Kiln adapters and collaborators.

These protocols use typing.Protocol with @runtime_checkable so that both
static type checking and runtime isinstance() checks work for test doubles.
"""

from .command_runner_protocol import CommandRunnerProtocol
from .file_adapter_protocol import FileAdapterProtocol
from .subsystem_protocol import Capability, SubsystemProtocol
from .version_provider_protocol import VersionProviderProtocol


__all__ = [
    "Capability",
    "CommandRunnerProtocol",
    "FileAdapterProtocol",
    "SubsystemProtocol",
    "VersionProviderProtocol",
]
