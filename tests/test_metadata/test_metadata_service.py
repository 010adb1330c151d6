"""Test MetadataService wiring of generators to files."""

from datetime import datetime
from unittest.mock import Mock

import pytest

from kiln.adapters.cargo_adapter import CargoMetadataAdapter
from kiln.adapters.git_adapter import StaticVersionProvider
from kiln.core.errors import MetadataError, VersionResolutionError
from kiln.metadata.models import Dependency, DependencyGraph
from kiln.metadata.service import MetadataService


@pytest.fixture
def cargo_adapter():
    adapter = Mock(spec=CargoMetadataAdapter)
    adapter.load_dependency_graph.return_value = DependencyGraph(
        dependencies=[Dependency(name="heapless", version="0.8.0", license="MIT")]
    )
    return adapter


def test_license_report_written_to_configured_output(run_context, cargo_adapter):
    service = MetadataService(cargo_adapter=cargo_adapter)

    output = service.generate_license_report(run_context)

    assert output == run_context.project_root / "license.txt"
    content = output.read_text()
    assert content.startswith("Test Product: third-party dependency licenses")
    assert "heapless 0.8.0  MIT" in content
    cargo_adapter.load_dependency_graph.assert_called_once_with(
        run_context.project_root / "Cargo.toml", cwd=run_context.project_root
    )


def test_command_doc_from_source_file(tmp_path, config_factory, run_context):
    (tmp_path / "commands.yaml").write_text("- opcode: 0x01\n  name: Ping\n")
    config = config_factory(
        metadata={"commands": {"source": "commands.yaml", "output": "docs/cmd.md"}}
    )
    context = type(run_context)(
        project_root=tmp_path, config=config, settings=run_context.settings
    )

    output = MetadataService().generate_command_doc(context)

    assert output == tmp_path / "docs" / "cmd.md"
    assert "## Ping (0x01)" in output.read_text()


def test_command_doc_without_source_is_an_error(run_context):
    with pytest.raises(MetadataError, match="No command definitions"):
        MetadataService().generate_command_doc(run_context)


def test_manifest_stamped_with_resolved_version(run_context):
    template = run_context.project_root / "utils" / "manifest.template.json"
    template.parent.mkdir(parents=True)
    template.write_text('{"version": "@VERSION@"}\n')
    service = MetadataService(version_provider=StaticVersionProvider("v1.2.3-4-gabc123"))

    output = service.stamp_manifest(run_context)

    assert output == run_context.project_root / "manifest.json"
    assert output.read_text() == '{"version": "v1.2.3-4-gabc123"}\n'


def test_unresolved_version_writes_nothing(run_context):
    template = run_context.project_root / "utils" / "manifest.template.json"
    template.parent.mkdir(parents=True)
    template.write_text('{"version": "@VERSION@"}\n')
    provider = Mock()
    provider.resolve_version.side_effect = VersionResolutionError(
        "No version-control tag could be resolved", "fatal: No names found"
    )

    with pytest.raises(VersionResolutionError):
        MetadataService(version_provider=provider).stamp_manifest(run_context)

    assert not (run_context.project_root / "manifest.json").exists()


def test_missing_manifest_template(run_context):
    service = MetadataService(version_provider=StaticVersionProvider("v1.0.0"))

    with pytest.raises(MetadataError, match="template not found"):
        service.stamp_manifest(run_context)


def test_manifest_timestamp_is_logged(run_context):
    template = run_context.project_root / "utils" / "manifest.template.json"
    template.parent.mkdir(parents=True)
    template.write_text('{"version": "@VERSION@"}\n')
    service = MetadataService(version_provider=StaticVersionProvider("v1.2.3"))
    service._logger = Mock()

    service.stamp_manifest(run_context)

    event, = [
        call
        for call in service._logger.info.call_args_list
        if call.args[0] == "manifest_written"
    ]
    assert event.kwargs["version"] == "v1.2.3"
    assert datetime.fromisoformat(event.kwargs["generated_at"])
