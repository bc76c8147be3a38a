"""
Base Pydantic models for the PASIM tracking core.

This module provides the foundational Pydantic model class with physics-specific
configuration and helpers for numpy-aware serialization.
"""

from pydantic import BaseModel, ConfigDict
from enum import Enum
from typing import Dict, Any
import numpy as np


class PhysicsBaseModel(BaseModel):
    """
    Base Pydantic model for all physics-related data structures in PASIM.

    This model provides:
    - Strict validation with assignment checking
    - Numpy array support for vector-valued fields
    - Dictionary and YAML-friendly export

    Example:
        >>> class BeamSettings(PhysicsBaseModel):
        ...     energy: float = Field(gt=0, description="Beam energy in eV")
        ...     particles: int = Field(gt=0, description="Number of particles")

        >>> settings = BeamSettings(energy=1e9, particles=1000)
        >>> settings.energy
        1000000000.0
    """

    model_config = ConfigDict(
        # Validation settings
        validate_assignment=True,        # Validate on attribute assignment
        extra="forbid",                  # Reject unknown fields

        # Type handling
        arbitrary_types_allowed=True,    # Allow numpy arrays
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        """
        Create instance from a plain dictionary.

        Args:
            data: Dictionary with model field values

        Returns:
            Instance of the model
        """
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to a dictionary (numpy values are left as-is)."""
        return self.model_dump()

    def to_yaml_dict(self) -> Dict[str, Any]:
        """
        Convert to a YAML/JSON-compatible dictionary.

        Numpy arrays and scalars are converted to plain Python lists and numbers,
        enums to their values.

        Returns:
            Dictionary suitable for YAML or JSON serialization
        """
        return to_builtin(self.model_dump(mode="python"))


def to_builtin(obj):
    """Recursively convert numpy containers and scalars to builtin Python types."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, dict):
        return {k: to_builtin(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [to_builtin(item) for item in obj]
    elif isinstance(obj, Enum):
        return obj.value
    return obj


def as_vector3(value) -> np.ndarray:
    """Coerce a 3-sequence to a fresh float64 numpy vector."""
    vec = np.array(value, dtype=np.float64)
    if vec.shape != (3,):
        raise ValueError(f"Expected a 3-vector, got shape {vec.shape}")
    return vec
