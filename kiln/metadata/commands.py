"""Command documentation generation."""

import json
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment, StrictUndefined
from pydantic import ValidationError

from kiln.core.errors import MetadataError
from kiln.core.structlog_logger import get_struct_logger
from kiln.metadata.models import CommandDoc, CommandSurface
from kiln.protocols import CommandRunnerProtocol
from kiln.utils.stream_process import format_diagnostic, run_command


logger = get_struct_logger(__name__)

COMMANDS_TEMPLATE = """\
# Firmware commands

{% for command in commands %}
## {{ command.name }} ({{ "0x%02X" | format(command.opcode) }})

{% if command.description %}
{{ command.description }}

{% endif %}
{% if command.arguments %}
| Argument | Type | Description |
|---|---|---|
{% for argument in command.arguments %}
| {{ argument.name }} | {{ argument.type or "-" }} | {{ argument.description }} |
{% endfor %}
{% else %}
No arguments.
{% endif %}

{% else %}
No commands defined.
{% endfor %}
"""


class CommandDocGenerator:
    """Render documentation for every firmware command.

    Output depends only on the command surface: commands are ordered by
    opcode, then name.
    """

    def __init__(self, template: str = COMMANDS_TEMPLATE) -> None:
        self.env = Environment(
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self.template = self.env.from_string(template)

    def generate(self, surface: CommandSurface) -> CommandDoc:
        opcodes = [c.opcode for c in surface.commands]
        duplicates = sorted({op for op in opcodes if opcodes.count(op) > 1})
        if duplicates:
            raise MetadataError(
                "commands",
                "Duplicate command opcodes: "
                + ", ".join(f"0x{op:02X}" for op in duplicates),
            )

        commands = sorted(surface.commands, key=lambda c: (c.opcode, c.name))
        content = self.template.render(commands=commands)
        logger.info("command_doc_generated", commands=len(commands))
        return CommandDoc(command_count=len(commands), content=content)


def load_command_surface(path: Path) -> CommandSurface:
    """Load command definitions from a YAML or JSON file.

    The file holds either a list of commands or a mapping with a
    ``commands`` key.
    """
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise MetadataError(
            "commands", f"Command definitions not found: {path}"
        ) from e
    except yaml.YAMLError as e:
        raise MetadataError(
            "commands", f"Invalid command definitions in {path}: {e}"
        ) from e
    return parse_command_surface(data)


def extract_command_surface(
    command: list[str],
    cwd: Path | None = None,
    runner: CommandRunnerProtocol | None = None,
) -> CommandSurface:
    """Run an extractor program that prints command definitions as JSON."""
    runner = runner or run_command
    try:
        return_code, stdout, stderr = runner(command, cwd=cwd)
    except OSError as e:
        raise MetadataError(
            "commands", f"Cannot run command extractor {command[0]}: {e}"
        ) from e

    if return_code != 0:
        raise MetadataError(
            "commands",
            "Command extractor failed",
            {
                "command": " ".join(command),
                "return_code": return_code,
                "diagnostic": format_diagnostic(stdout, stderr),
            },
        )
    try:
        data = json.loads("\n".join(stdout))
    except json.JSONDecodeError as e:
        raise MetadataError(
            "commands", f"Command extractor printed invalid JSON: {e}"
        ) from e
    return parse_command_surface(data)


def parse_command_surface(data: Any) -> CommandSurface:
    if data is None:
        data = []
    if isinstance(data, list):
        data = {"commands": data}
    try:
        return CommandSurface.model_validate(data)
    except ValidationError as e:
        raise MetadataError("commands", f"Malformed command definitions: {e}") from e
