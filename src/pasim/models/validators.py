"""
Custom validators for physics-specific constraints in PASIM.

This module provides validation functions for accelerator physics parameters.
Hard violations raise ``ValueError`` (which pydantic turns into a
``ValidationError``); physically unusual but legal values only warn.
"""

import math
import warnings
from typing import Sequence

MAX_DIPOLE_FIELD = 20.0          # T, beyond any superconducting magnet in service
MAX_QUAD_GRADIENT = 1000.0       # T/m


def validate_component_name(name: str) -> str:
    """
    Validate a beamline component name.

    Args:
        name: Component name

    Returns:
        Validated name

    Raises:
        ValueError: If the name is empty or only whitespace
    """
    if not name or not name.strip():
        raise ValueError("Component name must be a non-empty string")
    return name


def validate_magnetic_field(field: float) -> float:
    """Warn for dipole fields beyond practical magnet technology."""
    if abs(field) > MAX_DIPOLE_FIELD:
        warnings.warn(f"Dipole field {field} T exceeds {MAX_DIPOLE_FIELD} T")
    return field


def validate_gradient(gradient: float) -> float:
    """Warn for quadrupole gradients beyond practical magnet technology."""
    if abs(gradient) > MAX_QUAD_GRADIENT:
        warnings.warn(f"Quadrupole gradient {gradient} T/m exceeds {MAX_QUAD_GRADIENT} T/m")
    return gradient


def validate_rf_frequency(frequency: float) -> float:
    """
    Validate RF frequency.

    Args:
        frequency: RF frequency in Hz

    Returns:
        Validated frequency

    Raises:
        ValueError: If frequency is negative or not finite
    """
    if not math.isfinite(frequency) or frequency < 0:
        raise ValueError(f"RF frequency {frequency} Hz must be finite and non-negative")
    if frequency > 0 and not (1e6 <= frequency <= 1e12):
        warnings.warn(f"RF frequency {frequency} Hz outside typical range (1 MHz - 1 THz)")
    return frequency


def validate_unit_quaternion(q: Sequence[float], tolerance: float = 1e-6) -> tuple:
    """
    Validate a rotation quaternion given as (w, x, y, z).

    Args:
        q: Quaternion components
        tolerance: Allowed deviation of the norm from one

    Returns:
        Quaternion as a tuple of floats

    Raises:
        ValueError: If q does not have four components or is not unit length
    """
    q = tuple(float(v) for v in q)
    if len(q) != 4:
        raise ValueError(f"Rotation quaternion must have 4 components, got {len(q)}")
    norm = math.sqrt(sum(v * v for v in q))
    if abs(norm - 1.0) > tolerance:
        raise ValueError(f"Rotation quaternion must be unit length (norm={norm})")
    return q


def validate_time_step(dt: float) -> float:
    if not math.isfinite(dt) or dt <= 0:
        raise ValueError(f"Time step must be positive, got {dt}")
    return dt
