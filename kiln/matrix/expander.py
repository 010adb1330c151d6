"""Expand the target/variant matrix into ordered build jobs."""

from collections.abc import Sequence

from kiln.config.models import ProjectConfig
from kiln.core.errors import ConfigurationError
from kiln.core.structlog_logger import get_struct_logger
from kiln.matrix.models import BuildJob


logger = get_struct_logger(__name__)


class MatrixExpander:
    """Turn project configuration into build jobs.

    Jobs are ordered variant by variant in the phase's declared order and,
    within a variant, target by target in declared order, so that a failure
    always occurs at the same position.
    """

    def __init__(self, config: ProjectConfig) -> None:
        self.config = config

    def variants_for_phase(self, phase: str) -> list[str]:
        if phase == "binaries":
            return list(self.config.phases.binaries.variants)
        raise ConfigurationError(
            f"Phase '{phase}' has no build matrix", {"phase": phase}
        )

    def expand(self, phase: str = "binaries") -> list[BuildJob]:
        """Expand the matrix for a phase."""
        return self.expand_selection(variants=self.variants_for_phase(phase))

    def expand_selection(
        self,
        targets: Sequence[str] | None = None,
        variants: Sequence[str] | None = None,
    ) -> list[BuildJob]:
        """Expand an explicit selection of targets and variants.

        Targets that do not support a selected variant are skipped.

        Raises:
            ConfigurationError: If a selected id is not configured
        """
        target_ids = list(targets) if targets is not None else [
            t.id for t in self.config.targets
        ]
        variant_ids = list(variants) if variants is not None else [
            v.id for v in self.config.variants
        ]

        selected_targets = []
        for target_id in target_ids:
            target = self.config.get_target(target_id)
            if target is None:
                raise ConfigurationError(
                    f"Unknown target '{target_id}'", {"target": target_id}
                )
            selected_targets.append(target)

        selected_variants = []
        for variant_id in variant_ids:
            variant = self.config.get_variant(variant_id)
            if variant is None:
                raise ConfigurationError(
                    f"Unknown variant '{variant_id}'", {"variant": variant_id}
                )
            selected_variants.append(variant)

        jobs: list[BuildJob] = []
        seen: set[tuple[str, str]] = set()
        for variant in selected_variants:
            for target in selected_targets:
                if not target.supports(variant.id):
                    logger.debug(
                        "variant_not_supported", target=target.id, variant=variant.id
                    )
                    continue
                job = BuildJob(target=target, variant=variant)
                if job.key in seen:
                    continue
                seen.add(job.key)
                jobs.append(job)

        logger.debug("matrix_expanded", jobs=[job.name for job in jobs])
        return jobs
