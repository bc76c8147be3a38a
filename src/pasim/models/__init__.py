"""
PASIM Pydantic Models Package

Base model and shared validators used across the tracking core.
"""

from .base import PhysicsBaseModel, as_vector3, to_builtin

__all__ = [
    'PhysicsBaseModel',
    'as_vector3',
    'to_builtin',
]
