"""
Relativistic point charge.

A :class:`Particle` keeps position and momentum as float64 numpy vectors and
caches the Lorentz factor and speed derived from the momentum. Every mutator
that touches momentum refreshes the cache, so derived quantities never go stale.
"""

import math
from typing import Optional

import numpy as np

from .. import constants as const

# |v| >= c is clamped to this fraction of c
MAX_BETA = 0.999999


def _read_only(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.flags.writeable = False
    return view


class Particle:
    """A single charged particle in 6D phase space.

    Args:
        mass: Rest mass in kg (must be positive)
        charge: Signed charge in C
        position: Initial position in m
        momentum: Initial momentum in kg m/s
    """

    __slots__ = ("_mass", "_charge", "_position", "_momentum",
                 "_gamma", "_beta", "active", "id")

    def __init__(self, mass: float, charge: float, position=(0.0, 0.0, 0.0),
                 momentum=(0.0, 0.0, 0.0)):
        if mass <= 0:
            raise ValueError(f"Particle mass must be positive, got {mass}")
        self._mass = float(mass)
        self._charge = float(charge)
        self._position = np.array(position, dtype=np.float64)
        self._momentum = np.array(momentum, dtype=np.float64)
        self._gamma = 1.0
        self._beta = 0.0
        self.active = True
        self.id: Optional[int] = None
        self._update_derived()

    # === Species factories ===

    @classmethod
    def electron(cls) -> "Particle":
        return cls(const.m_e, -const.e)

    @classmethod
    def positron(cls) -> "Particle":
        return cls(const.m_e, const.e)

    @classmethod
    def proton(cls) -> "Particle":
        return cls(const.m_p, const.e)

    @classmethod
    def antiproton(cls) -> "Particle":
        return cls(const.m_p, -const.e)

    # === Phase-space state ===

    @property
    def mass(self) -> float:
        return self._mass

    @property
    def charge(self) -> float:
        return self._charge

    @property
    def position(self) -> np.ndarray:
        """Read-only view of the position; assign a new vector to change it."""
        return _read_only(self._position)

    @position.setter
    def position(self, value):
        self._position = np.array(value, dtype=np.float64)

    @property
    def momentum(self) -> np.ndarray:
        """Read-only view of the momentum; assign a new vector to change it."""
        return _read_only(self._momentum)

    @momentum.setter
    def momentum(self, value):
        self._momentum = np.array(value, dtype=np.float64)
        self._update_derived()

    @property
    def x(self) -> float:
        return float(self._position[0])

    @property
    def y(self) -> float:
        return float(self._position[1])

    @property
    def z(self) -> float:
        return float(self._position[2])

    @property
    def px(self) -> float:
        return float(self._momentum[0])

    @property
    def py(self) -> float:
        return float(self._momentum[1])

    @property
    def pz(self) -> float:
        return float(self._momentum[2])

    @property
    def momentum_magnitude(self) -> float:
        return float(np.linalg.norm(self._momentum))

    # === Derived relativistic quantities ===

    @property
    def gamma(self) -> float:
        return self._gamma

    @property
    def beta(self) -> float:
        return self._beta

    @property
    def velocity(self) -> np.ndarray:
        """Velocity p / (gamma m) in m/s."""
        return self._momentum / (self._gamma * self._mass)

    @velocity.setter
    def velocity(self, value):
        v = np.array(value, dtype=np.float64)
        speed = float(np.linalg.norm(v))
        if speed >= const.c:
            v = v * (MAX_BETA * const.c / speed)
            speed = MAX_BETA * const.c
        beta = speed / const.c
        gamma = 1.0 / math.sqrt(1.0 - beta * beta)
        self._momentum = gamma * self._mass * v
        self._update_derived()

    @property
    def speed(self) -> float:
        return self._beta * const.c

    @property
    def total_energy(self) -> float:
        return self._gamma * self._mass * const.c_squared

    @property
    def kinetic_energy(self) -> float:
        return (self._gamma - 1.0) * self._mass * const.c_squared

    def set_kinetic_energy(self, kinetic_energy: float, direction=None) -> None:
        """
        Set the kinetic energy, keeping or choosing a direction of motion.

        Args:
            kinetic_energy: Kinetic energy in J
            direction: Optional direction of motion. When omitted (or of
                negligible length) the current momentum direction is kept,
                falling back to +z for a particle at rest.
        """
        gamma = 1.0 + kinetic_energy / (self._mass * const.c_squared)
        beta = const.beta_from_gamma(gamma)
        p_mag = gamma * beta * self._mass * const.c

        unit = None
        if direction is not None:
            d = np.array(direction, dtype=np.float64)
            norm = float(np.linalg.norm(d))
            if norm > 1e-10:
                unit = d / norm
        if unit is None:
            current = float(np.linalg.norm(self._momentum))
            if current > 1e-30:
                unit = self._momentum / current
            else:
                unit = np.array([0.0, 0.0, 1.0])

        self._momentum = unit * p_mag
        self._update_derived()

    def momentum_deviation(self, reference_momentum: float) -> float:
        """Relative momentum offset delta = (|p| - p_ref) / p_ref."""
        return (self.momentum_magnitude - reference_momentum) / reference_momentum

    def _update_derived(self) -> None:
        pmc = float(np.linalg.norm(self._momentum)) / (self._mass * const.c)
        self._gamma = math.sqrt(1.0 + pmc * pmc)
        self._beta = math.sqrt(1.0 - 1.0 / (self._gamma * self._gamma))

    def copy(self) -> "Particle":
        clone = Particle(self._mass, self._charge, self._position, self._momentum)
        clone.active = self.active
        clone.id = self.id
        return clone

    def __repr__(self) -> str:
        return (f"Particle(id={self.id}, m={self._mass:.6e}, q={self._charge:.6e}, "
                f"r={self._position.tolist()}, p={self._momentum.tolist()}, active={self.active})")
