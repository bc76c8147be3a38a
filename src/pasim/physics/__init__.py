"""
Physics core of PASIM: particles, field sources, integrators and beams.
"""

import logging

from .particle import Particle
from .fields import (
    FieldValue, BoundingBox, FieldSource, UniformBField, QuadrupoleField,
    RFField, EMFieldManager
)
from .integrators import (
    Integrator, IntegratorType, IntegratorFactory, EulerIntegrator,
    VelocityVerletIntegrator, BorisIntegrator, RK4Integrator
)
from .particle_system import (
    ParticleType, DistributionType, BeamParameters, BeamStatistics, ParticleSystem
)

__all__ = [
    'Particle',
    'FieldValue',
    'BoundingBox',
    'FieldSource',
    'UniformBField',
    'QuadrupoleField',
    'RFField',
    'EMFieldManager',
    'Integrator',
    'IntegratorType',
    'IntegratorFactory',
    'EulerIntegrator',
    'VelocityVerletIntegrator',
    'BorisIntegrator',
    'RK4Integrator',
    'ParticleType',
    'DistributionType',
    'BeamParameters',
    'BeamStatistics',
    'ParticleSystem',
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
