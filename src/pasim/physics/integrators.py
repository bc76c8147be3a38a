"""
Time integrators for the relativistic Lorentz force.

Each integrator advances one particle by one time step given the field manager
and the current simulation time. Inactive particles are left untouched.
Integrators hold no per-particle state, so one instance can serve a whole
ensemble.
"""

import logging
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Dict, Type, Union

import numpy as np

from .. import constants as const
from .fields import EMFieldManager
from .particle import Particle

logger = logging.getLogger(__name__)


def _velocity(momentum: np.ndarray, mass: float) -> np.ndarray:
    pmc = np.linalg.norm(momentum) / (mass * const.c)
    gamma = np.sqrt(1.0 + pmc * pmc)
    return momentum / (gamma * mass)


class IntegratorType(IntEnum):
    """Integrator selection codes as used in configuration files."""
    EULER = 0
    VELOCITY_VERLET = 1
    BORIS = 2
    RK4 = 3


class Integrator(ABC):
    """Base class for single-particle time steppers."""

    name: str = ""
    order: int = 0

    @abstractmethod
    def step(self, particle: Particle, fields: EMFieldManager, time: float, dt: float) -> None:
        """Advance ``particle`` from ``time`` to ``time + dt`` in place."""

    @staticmethod
    def lorentz_force(charge: float, velocity: np.ndarray, E: np.ndarray, B: np.ndarray) -> np.ndarray:
        return charge * (E + np.cross(velocity, B))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(order={self.order})"


class EulerIntegrator(Integrator):
    """First-order explicit Euler."""

    name = "Euler"
    order = 1

    def step(self, particle, fields, time, dt):
        if not particle.active:
            return
        fv = fields.evaluate(particle.position, time)
        force = self.lorentz_force(particle.charge, particle.velocity, fv.E, fv.B)
        particle.momentum = particle.momentum + force * dt
        particle.position = particle.position + particle.velocity * dt


class VelocityVerletIntegrator(Integrator):
    """Velocity Verlet with a single force evaluation per step.

    The momentum kick uses the force at the start of the step for the whole
    step, so the scheme is only second order for velocity-independent fields.
    """

    name = "Velocity Verlet"
    order = 2

    def step(self, particle, fields, time, dt):
        if not particle.active:
            return
        fv = fields.evaluate(particle.position, time)
        v = particle.velocity
        force = self.lorentz_force(particle.charge, v, fv.E, fv.B)

        half_position = particle.position + v * (0.5 * dt)
        particle.momentum = particle.momentum + force * dt
        particle.position = half_position + particle.velocity * (0.5 * dt)


class BorisIntegrator(Integrator):
    """Relativistic Boris pusher: half electric kick, magnetic rotation, half electric kick."""

    name = "Boris"
    order = 2

    def step(self, particle, fields, time, dt):
        if not particle.active:
            return
        q = particle.charge
        m = particle.mass
        fv = fields.evaluate(particle.position, time)

        half_kick = q * fv.E * (0.5 * dt)
        p_minus = particle.momentum + half_kick

        pmc = np.linalg.norm(p_minus) / (m * const.c)
        gamma = np.sqrt(1.0 + pmc * pmc)

        t_vec = (q * fv.B * dt) / (2.0 * gamma * m)
        s_vec = 2.0 * t_vec / (1.0 + np.dot(t_vec, t_vec))

        u_minus = p_minus / (gamma * m)
        u_prime = u_minus + np.cross(u_minus, t_vec)
        u_plus = u_minus + np.cross(u_prime, s_vec)

        p_plus = u_plus * gamma * m
        particle.momentum = p_plus + half_kick
        particle.position = particle.position + particle.velocity * dt


class RK4Integrator(Integrator):
    """Classical fourth-order Runge-Kutta on (r, p)."""

    name = "RK4"
    order = 4

    @staticmethod
    def _derivative(fields, charge, mass, r, p, t):
        v = _velocity(p, mass)
        fv = fields.evaluate(r, t)
        return v, charge * (fv.E + np.cross(v, fv.B))

    def step(self, particle, fields, time, dt):
        if not particle.active:
            return
        q = particle.charge
        m = particle.mass
        r = particle.position.copy()
        p = particle.momentum.copy()
        half = 0.5 * dt

        k1_r, k1_p = self._derivative(fields, q, m, r, p, time)
        k2_r, k2_p = self._derivative(fields, q, m, r + k1_r * half, p + k1_p * half, time + half)
        k3_r, k3_p = self._derivative(fields, q, m, r + k2_r * half, p + k2_p * half, time + half)
        k4_r, k4_p = self._derivative(fields, q, m, r + k3_r * dt, p + k3_p * dt, time + dt)

        particle.position = r + (k1_r + 2.0 * k2_r + 2.0 * k3_r + k4_r) * (dt / 6.0)
        particle.momentum = p + (k1_p + 2.0 * k2_p + 2.0 * k3_p + k4_p) * (dt / 6.0)


class IntegratorFactory:
    """
    Factory for integrator instances.

    Integrators can be requested by :class:`IntegratorType` (or its integer code)
    or by case-sensitive name. Anything unrecognized resolves to Boris.
    """

    _by_type: Dict[IntegratorType, Type[Integrator]] = {
        IntegratorType.EULER: EulerIntegrator,
        IntegratorType.VELOCITY_VERLET: VelocityVerletIntegrator,
        IntegratorType.BORIS: BorisIntegrator,
        IntegratorType.RK4: RK4Integrator,
    }

    _by_name: Dict[str, IntegratorType] = {
        "Euler": IntegratorType.EULER,
        "Verlet": IntegratorType.VELOCITY_VERLET,
        "VelocityVerlet": IntegratorType.VELOCITY_VERLET,
        "Boris": IntegratorType.BORIS,
        "RK4": IntegratorType.RK4,
    }

    @classmethod
    def resolve(cls, kind: Union[IntegratorType, int, str]) -> IntegratorType:
        """Map a type, integer code or name to an :class:`IntegratorType`."""
        if isinstance(kind, str):
            if kind not in cls._by_name:
                logger.warning(f"Unknown integrator name '{kind}', using Boris")
                return IntegratorType.BORIS
            return cls._by_name[kind]
        try:
            return IntegratorType(kind)
        except ValueError:
            logger.warning(f"Unknown integrator code {kind!r}, using Boris")
            return IntegratorType.BORIS

    @classmethod
    def create(cls, kind: Union[IntegratorType, int, str]) -> Integrator:
        integrator = cls._by_type[cls.resolve(kind)]()
        logger.debug(f"Created integrator: {integrator.name}")
        return integrator

    @classmethod
    def list_names(cls):
        return list(cls._by_name)
