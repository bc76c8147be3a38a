"""
PASIM Simulation Package.

Fixed-step physics engine, its run-state and statistics types, and the
exception hierarchy. Application configuration lives in
:mod:`pasim.simulators.config`.

Example Usage:
    from pasim.simulators import PhysicsEngine
    from pasim.machine_portal import Lattice, FODOCellParams

    lattice = Lattice("fodo")
    lattice.build_fodo_lattice(FODOCellParams(), 8)

    engine = PhysicsEngine(time_step=1e-11)
    engine.set_lattice(lattice)
    engine.initialize_default_beam()
    for _ in range(100):
        engine.step()
"""

import logging

from .types import (
    # Enums
    SimulationState,

    # Data models
    SimulationStats,

    # Exceptions
    SimulationError,
    IntegratorError,
    ConfigurationError
)

from .engine import PhysicsEngine, FALLBACK_LOSS_RADIUS

__all__ = [
    'SimulationState',
    'SimulationStats',
    'SimulationError',
    'IntegratorError',
    'ConfigurationError',
    'PhysicsEngine',
    'FALLBACK_LOSS_RADIUS',
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
