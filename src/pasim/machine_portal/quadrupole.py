# Quadrupole component for the PASIM machine portal.
from pasim import constants as const
from pasim.machine_portal.element import Component, ComponentType
from pasim.models.validators import validate_gradient
from pasim.physics.fields import QuadrupoleField
from pydantic import Field, field_validator

from matplotlib.patches import Rectangle


class Quadrupole(Component):
    """Quadrupole magnet.

    A positive gradient focuses horizontally and defocuses vertically for a
    positively charged particle moving along +z.
    """

    type: ComponentType = Field(default=ComponentType.QUADRUPOLE, description="Component type")
    length: float = Field(default=1.0, description="Effective length [m]")
    gradient: float = Field(default=0.0, description="Field gradient [T/m]")
    plot_color: str = Field(default='C1', description="Color for plotting")
    plot_height: float = Field(default=0.6, ge=0.0, le=2.0, description="Height in beamline plot")

    @field_validator('gradient')
    @classmethod
    def check_gradient(cls, v):
        return validate_gradient(v)

    @field_validator('length')
    @classmethod
    def validate_length(cls, v):
        """Validate quadrupole length is positive."""
        if v <= 0:
            raise ValueError("Length of a quadrupole component must be positive.")
        return v

    @field_validator('type')
    @classmethod
    def validate_type(cls, v):
        if v != ComponentType.QUADRUPOLE:
            raise ValueError("Type of a quadrupole component must be 'Quadrupole'.")
        return v

    @property
    def is_focusing(self) -> bool:
        return self.gradient > 0

    def k1(self, momentum: float) -> float:
        """Normalized strength e G / p in m^-2."""
        return const.e * self.gradient / momentum

    def _build_field_source(self):
        return QuadrupoleField(self.gradient, self.field_center(), self.length, self.aperture.radius_x)

    def plot_in_beamline(self, ax, s_start, normalized_strength=None):
        """Plot the quadrupole in the beamline.

        Focusing quadrupoles are drawn above the axis, defocusing ones below.

        Args:
            ax: Matplotlib axes object
            s_start: Starting s-coordinate
            normalized_strength: Optional normalization factor

        Returns:
            float: End s-coordinate
        """
        height = self.plot_height
        if normalized_strength:
            height = self.plot_height * abs(self.gradient) / normalized_strength
        bottom = 0.0 if self.gradient >= 0 else -height
        ax.add_patch(
            Rectangle((s_start, bottom), self.length, height, angle=0.0,
                      ec=self.plot_color, fc=self.plot_color, alpha=0.8, lw=1)
        )
        return s_start + self.length
