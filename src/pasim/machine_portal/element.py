# Beamline components of the PASIM machine portal.
# Every component has a name, a type tag, an effective length, an aperture and a
# rigid placement (translation + unit quaternion). Its s-position is assigned by
# the lattice. Components that produce a field build it lazily and drop the
# cached source whenever one of their parameters is reassigned.
## BeamPipe   : field-free drift section
## Dipole     : uniform vertical B, bends in the horizontal plane
## Quadrupole : linear gradient, focusing in one plane
## RFCavity   : longitudinal time-varying E
## Detector   : thin element recording particle hits
## Custom     : user-defined component without a built-in field

from enum import Enum
from typing import Optional, Tuple

import numpy as np
from pydantic import ConfigDict, Field, PrivateAttr, field_validator

from pasim.models.base import PhysicsBaseModel, as_vector3
from pasim.models.validators import validate_component_name, validate_unit_quaternion
from pasim.physics.fields import FieldSource


class ApertureShape(str, Enum):
    CIRCULAR = "circular"
    ELLIPTICAL = "elliptical"
    RECTANGULAR = "rectangular"


class Aperture(PhysicsBaseModel):
    """Transverse acceptance of a component, tested in local (x, y).

    For circular apertures only ``radius_x`` is used; for rectangular apertures
    the radii are the half-widths.
    """
    model_config = ConfigDict(frozen=True)

    shape: ApertureShape = Field(default=ApertureShape.CIRCULAR, description="Aperture shape")
    radius_x: float = Field(default=0.05, gt=0.0, description="Horizontal radius or half-width [m]")
    radius_y: float = Field(default=0.05, gt=0.0, description="Vertical radius or half-width [m]")

    @classmethod
    def circular(cls, radius: float) -> "Aperture":
        return cls(shape=ApertureShape.CIRCULAR, radius_x=radius, radius_y=radius)

    @classmethod
    def elliptical(cls, radius_x: float, radius_y: float) -> "Aperture":
        return cls(shape=ApertureShape.ELLIPTICAL, radius_x=radius_x, radius_y=radius_y)

    @classmethod
    def rectangular(cls, half_width: float, half_height: float) -> "Aperture":
        return cls(shape=ApertureShape.RECTANGULAR, radius_x=half_width, radius_y=half_height)

    def contains(self, x: float, y: float) -> bool:
        if self.shape == ApertureShape.CIRCULAR:
            return x * x + y * y <= self.radius_x * self.radius_x
        if self.shape == ApertureShape.ELLIPTICAL:
            nx = x / self.radius_x
            ny = y / self.radius_y
            return nx * nx + ny * ny <= 1.0
        return abs(x) <= self.radius_x and abs(y) <= self.radius_y


class ComponentType(str, Enum):
    BEAM_PIPE = "BeamPipe"
    DIPOLE = "Dipole"
    QUADRUPOLE = "Quadrupole"
    RF_CAVITY = "RFCavity"
    DETECTOR = "Detector"
    CUSTOM = "Custom"


def _rotate(q: Tuple[float, float, float, float], v: np.ndarray) -> np.ndarray:
    """Rotate ``v`` by the unit quaternion ``q = (w, x, y, z)``."""
    w = q[0]
    axis = np.array(q[1:])
    uv = np.cross(axis, v)
    uuv = np.cross(axis, uv)
    return v + 2.0 * (w * uv + uuv)


class Component(PhysicsBaseModel):
    """Base class for beamline components."""

    name: str = Field(..., min_length=1, description="Component name")
    type: ComponentType = Field(default=ComponentType.CUSTOM, description="Component type tag")
    length: float = Field(default=0.0, ge=0.0, description="Effective length [m]")
    aperture: Aperture = Field(default_factory=Aperture, description="Transverse aperture")
    s_position: float = Field(default=0.0, description="Arc length of the entrance [m]")
    position: np.ndarray = Field(default_factory=lambda: np.zeros(3), description="Entrance position [m]")
    rotation: Tuple[float, float, float, float] = Field(default=(1.0, 0.0, 0.0, 0.0),
                                                        description="Orientation quaternion (w, x, y, z)")
    plot_color: str = Field(default='C7', description="Color for plotting")
    plot_height: float = Field(default=0.3, ge=0.0, le=2.0, description="Height in beamline plot")

    _field_cache: Optional[FieldSource] = PrivateAttr(default=None)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return validate_component_name(v)

    @field_validator('position', mode='before')
    @classmethod
    def validate_position(cls, v):
        return as_vector3(v)

    @field_validator('rotation', mode='before')
    @classmethod
    def validate_rotation(cls, v):
        return validate_unit_quaternion(v)

    def __setattr__(self, name, value):
        super().__setattr__(name, value)
        if name in type(self).model_fields and name != 's_position':
            self._field_cache = None

    # === Placement ===

    @property
    def exit_s_position(self) -> float:
        return self.s_position + self.length

    def contains_s(self, s: float) -> bool:
        """True when ``s`` lies in the half-open interval [entrance, exit)."""
        return self.s_position <= s < self.s_position + self.length

    def to_local(self, point) -> np.ndarray:
        """Global point to the component frame: R^-1 (r - t)."""
        w, x, y, z = self.rotation
        return _rotate((w, -x, -y, -z), np.asarray(point, dtype=np.float64) - self.position)

    def to_global(self, point) -> np.ndarray:
        """Component-frame point to global coordinates: R r + t."""
        return _rotate(self.rotation, np.asarray(point, dtype=np.float64)) + self.position

    def is_inside_aperture(self, point) -> bool:
        """True when a global point lies within the length and aperture of the component."""
        local = self.to_local(point)
        if local[2] < 0.0 or local[2] > self.length:
            return False
        return self.aperture.contains(local[0], local[1])

    def field_center(self) -> np.ndarray:
        """Global position of the component midpoint."""
        return self.to_global((0.0, 0.0, self.length / 2.0))

    # === Field provider ===

    def field_source(self) -> Optional[FieldSource]:
        """Field source of this component, built on first use; None if field-free."""
        if self._field_cache is None:
            self._field_cache = self._build_field_source()
        return self._field_cache

    def invalidate_field_source(self) -> None:
        self._field_cache = None

    def _build_field_source(self) -> Optional[FieldSource]:
        return None

    # === Plotting ===

    def plot_in_beamline(self, ax, s_start, normalized_strength=None):
        """Plot the component in a 1D beamline view.

        Args:
            ax: Matplotlib axes object
            s_start: Starting s-coordinate
            normalized_strength: Optional normalization factor

        Returns:
            float: End s-coordinate
        """
        return s_start + self.length
