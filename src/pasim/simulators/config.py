"""
Application configuration for PASIM.

Settings are grouped in three sections. ``simulation`` drives the engine;
``window`` and ``render`` belong to front ends and are only carried through
load/save unchanged. Files use camelCase keys (``timeStep``, ``showGrid``), which
map onto the snake_case attributes of the models below.
"""

import logging
from pathlib import Path
from typing import Union

from pydantic import ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .. import constants as const
from ..models.base import PhysicsBaseModel
from ..physics.integrators import IntegratorFactory, IntegratorType
from ..utilities.files import read_document, write_document
from .types import ConfigurationError

logger = logging.getLogger(__name__)


class _ConfigSection(PhysicsBaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class SimulationConfig(_ConfigSection):
    """Engine settings."""
    time_step: float = Field(default=1e-11, gt=0.0, description="Integration step [s]")
    time_scale: float = Field(default=1e6, ge=0.0, description="Simulated seconds per real second")
    integrator_type: IntegratorType = Field(default=IntegratorType.BORIS,
                                            description="0=Euler, 1=VelocityVerlet, 2=Boris, 3=RK4")
    particle_count: int = Field(default=1000, ge=0, description="Particles in a generated beam")
    beam_energy: float = Field(default=1e9, gt=0.0, description="Beam kinetic energy [eV]")

    @field_validator('integrator_type', mode='before')
    @classmethod
    def validate_integrator_type(cls, v):
        # Unknown codes and names fall back to Boris
        return IntegratorFactory.resolve(v)

    @property
    def beam_energy_joules(self) -> float:
        return const.ev_to_joules(self.beam_energy)


class WindowConfig(_ConfigSection):
    width: int = Field(default=1600, gt=0)
    height: int = Field(default=900, gt=0)
    vsync: bool = True
    fullscreen: bool = False


class RenderConfig(_ConfigSection):
    wireframe: bool = False
    show_grid: bool = True
    show_axes: bool = True
    particle_size: float = Field(default=2.0, gt=0.0)
    color_scheme: int = Field(default=0, ge=0)


class Config(_ConfigSection):
    """
    Complete application configuration.

    Example:
        >>> config = Config.load("settings.json")
        >>> config.simulation.time_step
        1e-11
        >>> config.apply_to_engine(engine)
    """
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    window: WindowConfig = Field(default_factory=WindowConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Config":
        """Load a configuration file; missing sections and keys take defaults.

        Raises:
            ConfigurationError: If the file is unreadable, malformed or holds invalid values
        """
        data = read_document(path)
        try:
            config = cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration in {path}: {exc}") from exc
        logger.info(f"Loaded configuration from {path}")
        return config

    def save(self, path: Union[str, Path]) -> None:
        write_document(path, self.to_document())
        logger.info(f"Saved configuration to {path}")

    def to_document(self) -> dict:
        """camelCase mapping as written to disk."""
        return self.model_dump(mode="json", by_alias=True)

    def apply_to_engine(self, engine) -> None:
        """Push time step, time scale and integrator into a :class:`PhysicsEngine`."""
        engine.set_time_step(self.simulation.time_step)
        engine.set_time_scale(self.simulation.time_scale)
        engine.set_integrator(self.simulation.integrator_type)
