"""Test command surface loading and CommandDocGenerator."""

import json

import pytest

from kiln.core.errors import MetadataError
from kiln.metadata.commands import (
    CommandDocGenerator,
    extract_command_surface,
    load_command_surface,
    parse_command_surface,
)
from kiln.metadata.models import CommandSurface


COMMANDS = [
    {
        "opcode": "0x61",
        "name": "Wink",
        "description": "Blink the LED.",
    },
    {
        "opcode": 0x60,
        "name": "UpdateFirmware",
        "arguments": [
            {"name": "slot", "type": "u8", "description": "Target slot"},
        ],
    },
]


def test_generate_orders_commands_by_opcode():
    doc = CommandDocGenerator().generate(parse_command_surface(COMMANDS))

    assert doc.command_count == 2
    assert doc.content.index("## UpdateFirmware (0x60)") < doc.content.index(
        "## Wink (0x61)"
    )
    assert "| slot | u8 | Target slot |" in doc.content
    assert "Blink the LED." in doc.content
    assert "No arguments." in doc.content


def test_generate_is_deterministic():
    generator = CommandDocGenerator()

    first = generator.generate(parse_command_surface(COMMANDS))
    second = generator.generate(parse_command_surface(list(reversed(COMMANDS))))

    assert first.content == second.content


def test_empty_surface_is_documented():
    doc = CommandDocGenerator().generate(CommandSurface())

    assert doc.content == "# Firmware commands\n\nNo commands defined.\n"
    assert doc.command_count == 0


def test_duplicate_opcodes_rejected():
    surface = parse_command_surface(
        [{"opcode": 1, "name": "a"}, {"opcode": "0x01", "name": "b"}]
    )

    with pytest.raises(MetadataError, match="0x01"):
        CommandDocGenerator().generate(surface)


def test_parse_accepts_mapping_with_commands_key():
    surface = parse_command_surface({"commands": COMMANDS})

    assert [c.opcode for c in surface.commands] == [0x61, 0x60]


def test_parse_rejects_malformed_definitions():
    with pytest.raises(MetadataError, match="Malformed"):
        parse_command_surface([{"name": "no opcode"}])


def test_load_command_surface_from_yaml(tmp_path):
    path = tmp_path / "commands.yaml"
    path.write_text(
        "commands:\n"
        "  - opcode: 0x51\n"
        "    name: Reboot\n"
    )

    surface = load_command_surface(path)

    assert surface.commands[0].name == "Reboot"
    assert surface.commands[0].opcode == 0x51


def test_load_command_surface_missing_file(tmp_path):
    with pytest.raises(MetadataError, match="not found"):
        load_command_surface(tmp_path / "missing.yaml")


def test_extract_command_surface_parses_json(fake_runner, tmp_path):
    cmd = ["cargo", "run", "--bin", "commands"]
    fake_runner.stdout[tuple(cmd)] = json.dumps(COMMANDS, indent=2).splitlines()

    surface = extract_command_surface(cmd, cwd=tmp_path, runner=fake_runner)

    assert len(surface.commands) == 2
    assert fake_runner.calls[0].cwd == tmp_path


def test_extract_command_surface_failure(fake_runner):
    fake_runner.fail(["cargo"], "error: could not compile")

    with pytest.raises(MetadataError) as exc_info:
        extract_command_surface(["cargo", "run"], runner=fake_runner)

    assert exc_info.value.context["diagnostic"] == "error: could not compile"


def test_extract_command_surface_invalid_json(fake_runner):
    fake_runner.stdout[("extract",)] = ["not json"]

    with pytest.raises(MetadataError, match="invalid JSON"):
        extract_command_surface(["extract"], runner=fake_runner)


def test_extract_command_surface_cannot_start():
    def denied(cmd, middleware=None, cwd=None, env=None):
        raise PermissionError(13, "Permission denied", cmd[0])

    with pytest.raises(MetadataError, match="Permission denied") as exc_info:
        extract_command_surface(["./extract-commands"], runner=denied)

    assert exc_info.value.generator == "commands"
