"""Target/variant matrix expansion."""

from kiln.matrix.expander import MatrixExpander
from kiln.matrix.models import BuildJob, FeatureSet, JobState


__all__ = ["BuildJob", "FeatureSet", "JobState", "MatrixExpander"]
