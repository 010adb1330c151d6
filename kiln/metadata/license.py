"""License report aggregation."""

from kiln.core.errors import MetadataError
from kiln.core.structlog_logger import get_struct_logger
from kiln.metadata.models import DependencyGraph, LicenseReport


logger = get_struct_logger(__name__)


class LicenseAggregator:
    """Render a dependency license report for a product."""

    def __init__(self, product: str) -> None:
        self.product = product

    def header(self) -> str:
        title = f"{self.product}: third-party dependency licenses"
        return f"{title}\n{'=' * len(title)}\n"

    def aggregate(self, graph: DependencyGraph) -> LicenseReport:
        """Build the report.

        An empty graph yields a report with only the header.

        Raises:
            MetadataError: If any dependency declares no license
        """
        dependencies = graph.sorted_dependencies()

        missing = [d for d in dependencies if d.declared_license is None]
        if missing:
            names = ", ".join(f"{d.name} {d.version}" for d in missing)
            raise MetadataError(
                "license",
                f"Dependencies without license metadata: {names}",
                {"missing": [d.name for d in missing]},
            )

        lines = [self.header()]
        if dependencies:
            name_width = max(len(f"{d.name} {d.version}") for d in dependencies)
            for dependency in dependencies:
                label = f"{dependency.name} {dependency.version}"
                lines.append(f"{label:<{name_width}}  {dependency.declared_license}")

        content = "\n".join(lines) + "\n"
        logger.info(
            "license_report_generated",
            product=self.product,
            dependencies=len(dependencies),
        )
        return LicenseReport(
            product=self.product, dependency_count=len(dependencies), content=content
        )
