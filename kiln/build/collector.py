"""Artifact collector: copy raw build output to its canonical name."""

from pathlib import Path

from kiln.adapters.file_adapter import create_file_adapter
from kiln.config.models import (
    ArtifactFormat,
    ArtifactKind,
    TargetConfig,
    VariantConfig,
)
from kiln.core.errors import KilnError
from kiln.core.structlog_logger import get_struct_logger
from kiln.matrix.models import BuildJob, JobState
from kiln.protocols import FileAdapterProtocol


logger = get_struct_logger(__name__)


def canonical_artifact_name(target: TargetConfig, variant: VariantConfig) -> str:
    """Return ``<kind>-<target><suffix><extension>``.

    Examples: ``firmware-nk3xn.bin``, ``provisioner-nk3am.ihex``,
    ``firmware-nk3xn-test.bin``.
    """
    kind = ArtifactKind(variant.kind).value
    extension = ArtifactFormat(target.format).extension
    return f"{kind}-{target.id}{variant.suffix}{extension}"


class ArtifactCollector:
    """Copy raw build outputs into a flat output directory.

    The destination depends only on the job's target and variant, so
    collecting the same job again overwrites the same file.
    """

    def __init__(
        self, output_dir: Path, file_adapter: FileAdapterProtocol | None = None
    ) -> None:
        self.output_dir = output_dir
        self.file_adapter = file_adapter or create_file_adapter()

    def destination_for(self, job: BuildJob) -> Path:
        return self.output_dir / canonical_artifact_name(job.target, job.variant)

    def collect(self, job: BuildJob, raw_path: Path) -> Path:
        """Copy ``raw_path`` to the job's canonical destination.

        Raises:
            KilnError: If the job did not succeed or the copy fails
        """
        if job.state != JobState.SUCCEEDED:
            raise KilnError(
                f"Cannot collect artifact of job in state {job.state.value}",
                {"target": job.target.id, "variant": job.variant.id},
            )

        destination = self.destination_for(job)
        self.file_adapter.copy_file(raw_path, destination)
        logger.info(
            "artifact_collected",
            target=job.target.id,
            variant=job.variant.id,
            source=str(raw_path),
            destination=str(destination),
        )
        return destination
