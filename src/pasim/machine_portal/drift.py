# Beam pipe (drift) component for the PASIM machine portal.
from pasim.machine_portal.element import Component, ComponentType
from pydantic import Field


class BeamPipe(Component):
    """Field-free drift section."""

    type: ComponentType = Field(default=ComponentType.BEAM_PIPE, description="Component type (always 'BeamPipe')")
    plot_color: str = Field(default='k', description="Color for plotting")

    def plot_in_beamline(self, ax, s_start, normalized_strength=None):
        '''Plot the beam pipe as a thin line on the axis.'''
        ax.plot([s_start, s_start + self.length], [0.0, 0.0], color=self.plot_color, lw=1)
        return s_start + self.length
