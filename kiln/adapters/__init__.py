"""Adapters around the file system and external programs."""

from kiln.adapters.cargo_adapter import CargoMetadataAdapter, create_cargo_adapter
from kiln.adapters.file_adapter import FileSystemAdapter, create_file_adapter
from kiln.adapters.git_adapter import (
    GitVersionProvider,
    StaticVersionProvider,
    create_version_provider,
)


__all__ = [
    "CargoMetadataAdapter",
    "FileSystemAdapter",
    "GitVersionProvider",
    "StaticVersionProvider",
    "create_cargo_adapter",
    "create_file_adapter",
    "create_version_provider",
]
