"""
PASIM - Particle Accelerator Simulator

Relativistic charged-particle tracking through beamlines of localized
electromagnetic field regions.
"""

import logging

from .physics import (
    Particle, EMFieldManager, IntegratorFactory, IntegratorType,
    BeamParameters, BeamStatistics, ParticleSystem, ParticleType, DistributionType
)
from .machine_portal import Lattice, LatticeType, FODOCellParams
from .simulators import PhysicsEngine, SimulationState, SimulationStats
from .simulators.config import Config
from .utilities.lattice_io import load_lattice, save_lattice

__version__ = "0.1.0"

__all__ = [
    'Particle',
    'EMFieldManager',
    'IntegratorFactory',
    'IntegratorType',
    'BeamParameters',
    'BeamStatistics',
    'ParticleSystem',
    'ParticleType',
    'DistributionType',
    'Lattice',
    'LatticeType',
    'FODOCellParams',
    'PhysicsEngine',
    'SimulationState',
    'SimulationStats',
    'Config',
    'load_lattice',
    'save_lattice',
]

logging.getLogger(__name__).addHandler(logging.NullHandler())


def main() -> None:
    from .cli import main as cli_main
    cli_main()
