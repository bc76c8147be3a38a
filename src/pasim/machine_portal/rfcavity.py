# RF cavity component for the PASIM machine portal.
import math

from pasim import constants as const
from pasim.machine_portal.element import Component, ComponentType
from pasim.models.validators import validate_rf_frequency
from pasim.physics.fields import RFField
from pydantic import Field, field_validator

from matplotlib.patches import Ellipse


class RFCavity(Component):
    """Accelerating cavity with a longitudinal field (V/L) cos(2 pi f t + phase)."""

    type: ComponentType = Field(default=ComponentType.RF_CAVITY, description="Component type")
    length: float = Field(default=0.5, description="Effective length [m]")
    voltage: float = Field(default=0.0, description="Peak voltage [V]")
    frequency: float = Field(default=0.0, description="RF frequency [Hz]")
    phase: float = Field(default=0.0, description="RF phase [rad]")
    plot_color: str = Field(default='C3', description="Color for plotting")
    plot_height: float = Field(default=0.5, ge=0.0, le=2.0, description="Height in beamline plot")

    @field_validator('length')
    @classmethod
    def validate_length(cls, v):
        """Validate cavity length is positive."""
        if v <= 0:
            raise ValueError("Length of an RF cavity must be positive.")
        return v

    @field_validator('frequency')
    @classmethod
    def validate_frequency(cls, v):
        return validate_rf_frequency(v)

    def energy_gain(self, phase: float) -> float:
        """Energy gain e V cos(phase) in J for a singly charged particle."""
        return const.e * self.voltage * math.cos(phase)

    def _build_field_source(self):
        return RFField(self.voltage, self.frequency, self.phase,
                       self.field_center(), self.length, self.aperture.radius_x)

    def plot_in_beamline(self, ax, s_start, normalized_strength=None):
        '''Plot the RF cavity as an ellipse.'''
        center_x = s_start + self.length / 2
        ellipse = Ellipse((center_x, 0), width=self.length, height=self.plot_height,
                          edgecolor=self.plot_color, facecolor=self.plot_color, alpha=0.8, lw=1)
        ax.add_patch(ellipse)
        return s_start + self.length
