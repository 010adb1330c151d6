"""Release metadata generators: license report, command docs, manifest."""

from kiln.metadata.commands import CommandDocGenerator
from kiln.metadata.license import LicenseAggregator
from kiln.metadata.manifest import ManifestStamper


__all__ = ["CommandDocGenerator", "LicenseAggregator", "ManifestStamper"]
