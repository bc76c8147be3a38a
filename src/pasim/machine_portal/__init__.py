"""
PASIM Machine Portal - beamline components and lattice modeling
"""

from pasim.machine_portal.element import Aperture, ApertureShape, Component, ComponentType
from pasim.machine_portal.drift import BeamPipe
from pasim.machine_portal.bend import Dipole
from pasim.machine_portal.quadrupole import Quadrupole
from pasim.machine_portal.rfcavity import RFCavity
from pasim.machine_portal.monitor import Detector, DetectorHit
from pasim.machine_portal.lattice import (
    FODOCellParams,
    Lattice,
    LatticeType,
    create_component_by_type
)

__all__ = [
    'Aperture',
    'ApertureShape',
    'Component',
    'ComponentType',
    'BeamPipe',
    'Dipole',
    'Quadrupole',
    'RFCavity',
    'Detector',
    'DetectorHit',
    'FODOCellParams',
    'Lattice',
    'LatticeType',
    'create_component_by_type',
]
