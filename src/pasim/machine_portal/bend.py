# Dipole component for the PASIM machine portal.
import math

from pasim import constants as const
from pasim.machine_portal.element import Component, ComponentType
from pasim.models.validators import validate_magnetic_field
from pasim.physics.fields import BoundingBox, UniformBField
from pydantic import Field, field_validator

from matplotlib.patches import Rectangle


class Dipole(Component):
    """Dipole magnet with a uniform vertical field.

    The field region is the axis-aligned box around the magnet midpoint, with
    half-widths equal to the horizontal aperture radius and half-length L/2.
    """

    type: ComponentType = Field(default=ComponentType.DIPOLE, description="Component type")
    field: float = Field(default=0.0, description="Vertical magnetic field [T]")
    plot_color: str = Field(default='C0', description="Color for plotting")

    @field_validator('field')
    @classmethod
    def validate_field(cls, v):
        return validate_magnetic_field(v)

    @field_validator('type')
    @classmethod
    def validate_type(cls, v):
        if v != ComponentType.DIPOLE:
            raise ValueError("Type of a dipole component must be 'Dipole'.")
        return v

    def _build_field_source(self):
        r = self.aperture.radius_x
        bounds = BoundingBox.around(self.field_center(), (r, r, self.length / 2.0))
        return UniformBField((0.0, self.field, 0.0), bounds)

    def bending_angle(self, momentum: float) -> float:
        """Bending angle e |B| L / p in rad for a singly charged particle of momentum ``momentum``."""
        return const.e * abs(self.field) * self.length / momentum

    def bending_radius(self, momentum: float) -> float:
        """Bending radius p / (e |B|) in m; infinite for a negligible field."""
        if abs(self.field) < 1e-10:
            return math.inf
        return momentum / (const.e * abs(self.field))

    def plot_in_beamline(self, ax, s_start, normalized_strength=None):
        '''Plot the dipole as a box centered on the axis.'''
        if normalized_strength is None:
            height = self.plot_height
        else:
            height = self.plot_height * abs(self.field) / normalized_strength
        ax.add_patch(
            Rectangle((s_start, -height), self.length, 2 * height, angle=0.0, ec=self.plot_color,
                      fc=self.plot_color, alpha=0.5, lw=2)
        )
        return s_start + self.length
