# Detector component for the PASIM machine portal.
from typing import List, Optional

import numpy as np
from pasim.machine_portal.element import Component, ComponentType
from pasim.models.base import PhysicsBaseModel, as_vector3
from pydantic import Field, PrivateAttr, field_validator


class DetectorHit(PhysicsBaseModel):
    """One particle crossing recorded by a detector."""
    time: float = Field(description="Simulation time [s]")
    position: np.ndarray = Field(description="Global position [m]")
    momentum: np.ndarray = Field(description="Momentum [kg m/s]")
    particle_id: Optional[int] = Field(default=None, description="Particle id")

    @field_validator('position', 'momentum', mode='before')
    @classmethod
    def validate_vector(cls, v):
        return as_vector3(v)


class Detector(Component):
    """Thin diagnostic element that accumulates hits until cleared."""

    type: ComponentType = Field(default=ComponentType.DETECTOR, description="Component type")
    length: float = Field(default=0.001, ge=0.0, description="Effective length [m]")
    plot_color: str = Field(default='k', description="Color for plotting")

    _hits: List[DetectorHit] = PrivateAttr(default_factory=list)

    def record_hit(self, time: float, position, momentum, particle_id: Optional[int] = None) -> DetectorHit:
        hit = DetectorHit(time=time, position=position, momentum=momentum, particle_id=particle_id)
        self._hits.append(hit)
        return hit

    @property
    def hits(self) -> List[DetectorHit]:
        return list(self._hits)

    @property
    def hit_count(self) -> int:
        return len(self._hits)

    def clear_hits(self) -> None:
        self._hits.clear()

    def plot_in_beamline(self, ax, s_start, normalized_strength=None):
        '''Plot the detector as a short vertical line.'''
        s_mid = s_start + self.length / 2.0
        ax.plot([s_mid, s_mid], [-self.plot_height / 2, self.plot_height / 2], color=self.plot_color, lw=1)
        return s_start + self.length
