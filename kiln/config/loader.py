"""Load and validate the project configuration file."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from kiln.config.models import ProjectConfig
from kiln.core.errors import ConfigurationError
from kiln.core.structlog_logger import get_struct_logger


logger = get_struct_logger(__name__)

CONFIG_FILE_NAMES = ("kiln.yaml", "kiln.yml", ".kiln.yaml")


def find_config_file(start: Path | None = None) -> Path | None:
    """Search ``start`` and its parents for a project configuration file."""
    directory = (start or Path.cwd()).resolve()
    for candidate_dir in [directory, *directory.parents]:
        for name in CONFIG_FILE_NAMES:
            candidate = candidate_dir / name
            if candidate.is_file():
                return candidate
    return None


def load_project_config(path: Path) -> ProjectConfig:
    """Parse and validate a project configuration file.

    Args:
        path: Path to the YAML configuration

    Returns:
        ProjectConfig: Validated configuration

    Raises:
        ConfigurationError: If the file is missing, malformed or inconsistent
    """
    logger.debug("loading_project_config", path=str(path))
    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Configuration file not found: {path}", {"path": str(path)}
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in configuration file: {e}", {"path": str(path)}
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            "Configuration file must contain a mapping", {"path": str(path)}
        )

    return parse_project_config(data, source=str(path))


def parse_project_config(
    data: dict[str, Any], source: str | None = None
) -> ProjectConfig:
    """Validate already-parsed configuration data."""
    try:
        config = ProjectConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid project configuration: {e}", {"path": source}
        ) from e

    logger.info(
        "project_config_loaded",
        source=source,
        targets=len(config.targets),
        variants=len(config.variants),
        subsystems=len(config.subsystems),
    )
    return config
