"""Shared model types for Kiln."""

from kiln.models.base import KilnBaseModel
from kiln.models.results import BaseResult, PhaseResult, StepResult


__all__ = ["BaseResult", "KilnBaseModel", "PhaseResult", "StepResult"]
