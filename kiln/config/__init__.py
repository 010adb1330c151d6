"""Configuration for Kiln projects and runtime settings."""

from kiln.config.loader import find_config_file, load_project_config
from kiln.config.models import (
    ArtifactFormat,
    ArtifactKind,
    CacheStrategy,
    ProjectConfig,
    SubsystemConfig,
    TargetConfig,
    ToolchainProfile,
    VariantConfig,
)
from kiln.config.settings import KilnSettings


__all__ = [
    "ArtifactFormat",
    "ArtifactKind",
    "CacheStrategy",
    "KilnSettings",
    "ProjectConfig",
    "SubsystemConfig",
    "TargetConfig",
    "ToolchainProfile",
    "VariantConfig",
    "find_config_file",
    "load_project_config",
]
