"""Shared fixtures for the PASIM test suite."""

import matplotlib
matplotlib.use("Agg")

import pytest

from pasim import constants as const
from pasim.machine_portal.lattice import FODOCellParams, Lattice
from pasim.physics.fields import EMFieldManager
from pasim.physics.particle import Particle


@pytest.fixture
def empty_fields():
    return EMFieldManager()


@pytest.fixture
def mev_proton():
    """1 MeV proton moving along +z from the origin."""
    p = Particle.proton()
    p.set_kinetic_energy(1.0 * const.MeV)
    return p


@pytest.fixture
def fodo_lattice():
    lattice = Lattice(name="fodo")
    lattice.build_fodo_cell(FODOCellParams(cell_length=10.0, quad_length=0.5, quad_gradient=50.0))
    return lattice
