"""Base model for all Kiln Pydantic models.

This module provides a base model class that enforces consistent validation
and serialization behavior across all Kiln models.
"""

from pydantic import BaseModel, ConfigDict


class KilnBaseModel(BaseModel):
    """Base model class for all Kiln Pydantic models."""

    model_config = ConfigDict(
        extra="ignore",
        str_strip_whitespace=True,
        use_enum_values=True,
        validate_assignment=True,
    )
