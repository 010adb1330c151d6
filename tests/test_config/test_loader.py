"""Test configuration loading and cross-reference validation."""

import pytest
import yaml

from kiln.config.loader import find_config_file, load_project_config
from kiln.config.models import ArtifactFormat, ArtifactKind
from kiln.core.errors import ConfigurationError


def test_load_valid_config(tmp_path, base_config_data):
    path = tmp_path / "kiln.yaml"
    path.write_text(yaml.safe_dump(base_config_data))

    config = load_project_config(path)

    assert config.product == "Test Product"
    assert [t.id for t in config.targets] == ["nk3xn", "nk3am", "nkpk"]
    assert ArtifactFormat(config.get_target("nk3am").format) == ArtifactFormat.IHEX
    assert (
        ArtifactKind(config.get_variant("provisioner").kind)
        == ArtifactKind.PROVISIONER
    )
    assert config.phases.binaries.variants == ["release", "test", "provisioner"]


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_project_config(tmp_path / "kiln.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "kiln.yaml"
    path.write_text("targets: [unclosed\n")

    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        load_project_config(path)


def test_non_mapping(tmp_path):
    path = tmp_path / "kiln.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ConfigurationError, match="mapping"):
        load_project_config(path)


@pytest.mark.parametrize(
    ("section", "mutate", "message"),
    [
        (
            "targets",
            lambda d: d["targets"].append(dict(d["targets"][0])),
            "Duplicate target",
        ),
        (
            "targets",
            lambda d: d["targets"][0].update(toolchain="riscv"),
            "unknown toolchain",
        ),
        (
            "targets",
            lambda d: d["targets"][2].update(variants=["release", "nightly"]),
            "unknown variant",
        ),
        (
            "phases",
            lambda d: d["phases"]["binaries"].update(variants=["release", "nightly"]),
            "Phase 'binaries' references unknown variant",
        ),
        (
            "variants",
            lambda d: d["variants"].append({"id": "release2"}),
            "same artifact names",
        ),
    ],
)
def test_reference_validation(tmp_path, base_config_data, section, mutate, message):
    mutate(base_config_data)
    path = tmp_path / "kiln.yaml"
    path.write_text(yaml.safe_dump(base_config_data))

    with pytest.raises(ConfigurationError, match=message):
        load_project_config(path)


def test_commands_source_and_extractor_are_exclusive(config_factory):
    with pytest.raises(ConfigurationError, match="either"):
        config_factory(
            metadata={
                "commands": {"source": "c.yaml", "extract_command": ["extract"]}
            }
        )


def test_unknown_lookups_return_none(project_config):
    assert project_config.get_target("nk4") is None
    assert project_config.get_variant("nightly") is None


def test_find_config_file_searches_parents(tmp_path):
    (tmp_path / "kiln.yaml").write_text("product: X\n")
    nested = tmp_path / "runners" / "embedded"
    nested.mkdir(parents=True)

    assert find_config_file(nested) == (tmp_path / "kiln.yaml").resolve()


def test_find_config_file_none(tmp_path, monkeypatch):
    monkeypatch.setattr("kiln.config.loader.CONFIG_FILE_NAMES", ("kiln-missing.yaml",))

    assert find_config_file(tmp_path) is None


def test_toolchain_strings_are_not_stripped(config_factory, base_config_data):
    arm = base_config_data["toolchains"]["arm"]
    arm["feature_separator"] = " "
    arm["env"] = {"RUSTFLAGS": "-C link-arg=--nmagic "}
    config = config_factory(toolchains=base_config_data["toolchains"])

    assert config.toolchains["arm"].feature_separator == " "
    assert config.toolchains["arm"].env["RUSTFLAGS"] == "-C link-arg=--nmagic "


def test_empty_feature_separator_rejected(config_factory, base_config_data):
    base_config_data["toolchains"]["arm"]["feature_separator"] = ""

    with pytest.raises(ConfigurationError, match="Feature separator"):
        config_factory(toolchains=base_config_data["toolchains"])
