"""Toolchain invocation and artifact collection."""

from kiln.build.collector import ArtifactCollector, canonical_artifact_name
from kiln.build.driver import BuildDriver


__all__ = ["ArtifactCollector", "BuildDriver", "canonical_artifact_name"]
