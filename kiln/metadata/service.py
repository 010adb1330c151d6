"""Wire metadata generators to their inputs and output files."""

from pathlib import Path

from kiln.adapters.cargo_adapter import CargoMetadataAdapter, create_cargo_adapter
from kiln.adapters.file_adapter import create_file_adapter
from kiln.adapters.git_adapter import create_version_provider
from kiln.core.errors import MetadataError
from kiln.core.structlog_logger import StructlogMixin
from kiln.metadata.commands import (
    CommandDocGenerator,
    extract_command_surface,
    load_command_surface,
)
from kiln.metadata.license import LicenseAggregator
from kiln.metadata.manifest import ManifestStamper
from kiln.metadata.models import CommandSurface
from kiln.orchestration.context import RunContext
from kiln.protocols import FileAdapterProtocol, VersionProviderProtocol


class MetadataService(StructlogMixin):
    """Produce the license report, command documentation and manifest.

    Each generator reads only project-wide inputs and writes one file.
    """

    service_name = "metadata"

    def __init__(
        self,
        cargo_adapter: CargoMetadataAdapter | None = None,
        version_provider: VersionProviderProtocol | None = None,
        file_adapter: FileAdapterProtocol | None = None,
    ) -> None:
        super().__init__()
        self.cargo_adapter = cargo_adapter
        self.version_provider = version_provider
        self.file_adapter = file_adapter or create_file_adapter()

    def generate_license_report(self, context: RunContext) -> Path:
        settings = context.config.metadata.license
        cargo = self.cargo_adapter or create_cargo_adapter(
            context.settings.cargo_executable
        )
        graph = cargo.load_dependency_graph(
            context.resolve(settings.manifest_path), cwd=context.project_root
        )
        report = LicenseAggregator(context.config.product).aggregate(graph)

        output = context.resolve(settings.output)
        self.file_adapter.write_text(output, report.content)
        self.logger.info("license_report_written", path=str(output))
        return output

    def load_commands(self, context: RunContext) -> CommandSurface:
        settings = context.config.metadata.commands
        if settings.extract_command:
            return extract_command_surface(
                settings.extract_command, cwd=context.project_root
            )
        if settings.source is not None:
            return load_command_surface(context.resolve(settings.source))
        raise MetadataError(
            "commands", "No command definitions source or extract_command configured"
        )

    def generate_command_doc(self, context: RunContext) -> Path:
        doc = CommandDocGenerator().generate(self.load_commands(context))

        output = context.resolve(context.config.metadata.commands.output)
        self.file_adapter.write_text(output, doc.content)
        self.logger.info("command_doc_written", path=str(output))
        return output

    def stamp_manifest(self, context: RunContext) -> Path:
        """Stamp the manifest template.

        Raises:
            VersionResolutionError: If no version is available; nothing is
                written in that case
        """
        settings = context.config.metadata.manifest
        provider = self.version_provider or create_version_provider(
            git_executable=context.settings.git_executable
        )
        version = provider.resolve_version(context.project_root)

        template_path = context.resolve(settings.template)
        if not self.file_adapter.exists(template_path):
            raise MetadataError(
                "manifest", f"Manifest template not found: {template_path}"
            )
        template = self.file_adapter.read_text(template_path)
        manifest = ManifestStamper(settings.placeholder).stamp(template, version)

        output = context.resolve(settings.output)
        self.file_adapter.write_text(output, manifest.content)
        self.logger.info(
            "manifest_written",
            path=str(output),
            version=manifest.version,
            generated_at=manifest.generated_at.isoformat(),
        )
        return output
