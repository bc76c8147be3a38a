"""
Type definitions for the PASIM simulation engine.

This module provides the engine state enum, the statistics snapshot model and
the exception hierarchy shared by the engine, the configuration layer and the
lattice loaders.
"""

from enum import Enum

from pydantic import Field

from ..models.base import PhysicsBaseModel


class SimulationState(str, Enum):
    """Run state of the physics engine."""
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


class SimulationStats(PhysicsBaseModel):
    """Snapshot of engine progress and beam energy figures."""
    simulation_time: float = Field(default=0.0, ge=0.0, description="Simulated time [s]")
    step_count: int = Field(default=0, ge=0, description="Integration steps taken")
    particle_count: int = Field(default=0, ge=0, description="Active particles")
    lost_particle_count: int = Field(default=0, ge=0, description="Particles lost on apertures")
    average_energy: float = Field(default=0.0, description="Mean kinetic energy of active particles [J]")
    energy_spread: float = Field(default=0.0, ge=0.0, description="RMS kinetic energy spread [J]")
    steps_per_second: float = Field(default=0.0, ge=0.0, description="Integration steps per real second")


class SimulationError(Exception):
    """Base exception class for simulation errors."""
    pass


class IntegratorError(SimulationError):
    """Exception raised for invalid integration settings."""
    pass


class ConfigurationError(SimulationError):
    """Exception raised for invalid configuration or lattice files."""
    pass
