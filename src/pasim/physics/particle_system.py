"""
Beam ensemble: generation, statistics and aperture cuts.

The :class:`ParticleSystem` owns its particles, assigns their ids from a
per-system counter, and draws beam distributions from an explicitly seeded
numpy ``Generator`` so that equal seeds give bit-identical beams.
"""

import itertools
import logging
import math
from enum import Enum
from typing import Iterator, List, Optional

import numpy as np
from pydantic import Field, field_validator

from .. import constants as const
from ..models.base import PhysicsBaseModel, as_vector3
from .particle import Particle

logger = logging.getLogger(__name__)


class ParticleType(str, Enum):
    """Particle species available for beam generation."""
    ELECTRON = "electron"
    POSITRON = "positron"
    PROTON = "proton"
    ANTIPROTON = "antiproton"


class DistributionType(str, Enum):
    """Types of initial particle distributions."""
    GAUSSIAN = "gaussian"
    UNIFORM = "uniform"
    WATERBAG = "waterbag"


_SPECIES = {
    ParticleType.ELECTRON: Particle.electron,
    ParticleType.POSITRON: Particle.positron,
    ParticleType.PROTON: Particle.proton,
    ParticleType.ANTIPROTON: Particle.antiproton,
}


def _vector_field(default):
    return Field(default_factory=lambda: np.array(default, dtype=np.float64))


class BeamParameters(PhysicsBaseModel):
    """
    Parameters of a generated beam.

    Transverse momentum sigmas are relative to the reference momentum; all
    spatial sigmas are in meters. The kinetic energy is in joules.
    """
    particle_type: ParticleType = Field(default=ParticleType.PROTON, description="Particle species")
    num_particles: int = Field(default=1000, ge=0, description="Number of particles")
    kinetic_energy: float = Field(default=1.0 * const.GeV, gt=0, description="Kinetic energy [J]")

    sigma_x: float = Field(default=1e-3, ge=0, description="RMS horizontal size [m]")
    sigma_y: float = Field(default=1e-3, ge=0, description="RMS vertical size [m]")
    sigma_z: float = Field(default=1e-2, ge=0, description="RMS bunch length [m]")
    sigma_px: float = Field(default=1e-4, ge=0, description="RMS relative horizontal momentum")
    sigma_py: float = Field(default=1e-4, ge=0, description="RMS relative vertical momentum")
    sigma_delta: float = Field(default=1e-3, ge=0, description="RMS relative momentum deviation")

    position_offset: np.ndarray = _vector_field([0.0, 0.0, 0.0])
    direction: np.ndarray = _vector_field([0.0, 0.0, 1.0])

    distribution: DistributionType = Field(default=DistributionType.GAUSSIAN, description="Distribution shape")
    seed: int = Field(default=42, ge=0, lt=2 ** 64, description="Random seed")

    @field_validator('position_offset', 'direction', mode='before')
    @classmethod
    def validate_vector(cls, v):
        return as_vector3(v)

    @field_validator('direction')
    @classmethod
    def validate_direction(cls, v):
        norm = float(np.linalg.norm(v))
        if norm < 1e-12:
            raise ValueError("Beam direction must be a non-zero vector")
        return v / norm


class BeamStatistics(PhysicsBaseModel):
    """Summary statistics over the active particles of a beam."""
    total_particles: int = 0
    active_particles: int = 0
    lost_particles: int = 0

    mean_position: np.ndarray = _vector_field([0.0, 0.0, 0.0])
    rms_position: np.ndarray = _vector_field([0.0, 0.0, 0.0])
    mean_momentum: np.ndarray = _vector_field([0.0, 0.0, 0.0])
    rms_momentum: np.ndarray = _vector_field([0.0, 0.0, 0.0])

    mean_energy: float = 0.0
    rms_energy: float = 0.0
    min_energy: float = 0.0
    max_energy: float = 0.0

    emittance_x: float = 0.0
    emittance_y: float = 0.0
    normalized_emittance_x: float = 0.0
    normalized_emittance_y: float = 0.0


def _transverse_basis(direction: np.ndarray):
    """Deterministic orthonormal pair perpendicular to ``direction``."""
    if abs(direction[1]) < 0.9:
        perp_x = np.cross(direction, np.array([0.0, 1.0, 0.0]))
    else:
        perp_x = np.cross(direction, np.array([1.0, 0.0, 0.0]))
    perp_x = perp_x / np.linalg.norm(perp_x)
    perp_y = np.cross(direction, perp_x)
    return perp_x, perp_y


def _geometric_emittance(u: np.ndarray, angle: np.ndarray) -> float:
    if len(u) == 0:
        return 0.0
    du = u - u.mean()
    da = angle - angle.mean()
    u2 = np.mean(du * du)
    a2 = np.mean(da * da)
    ua = np.mean(du * da)
    return math.sqrt(max(0.0, u2 * a2 - ua * ua))


class ParticleSystem:
    """Owns a particle ensemble and its reference momentum."""

    def __init__(self):
        self._particles: List[Particle] = []
        self._reference_momentum = 0.0
        self._ids = itertools.count()
        self._rng = np.random.default_rng(42)

    # === Ensemble management ===

    @property
    def particles(self) -> List[Particle]:
        return self._particles

    def __len__(self) -> int:
        return len(self._particles)

    def __iter__(self) -> Iterator[Particle]:
        return iter(self._particles)

    @property
    def reference_momentum(self) -> float:
        return self._reference_momentum

    @reference_momentum.setter
    def reference_momentum(self, value: float):
        self._reference_momentum = float(value)

    def add_particle(self, particle: Particle) -> Particle:
        """Take ownership of ``particle`` and assign it the next id."""
        particle.id = next(self._ids)
        self._particles.append(particle)
        return particle

    def clear(self) -> None:
        self._particles.clear()

    def remove_inactive_particles(self) -> int:
        """Drop lost particles; returns how many were removed."""
        before = len(self._particles)
        self._particles = [p for p in self._particles if p.active]
        return before - len(self._particles)

    def active_count(self) -> int:
        return sum(1 for p in self._particles if p.active)

    def active_particles(self) -> List[Particle]:
        return [p for p in self._particles if p.active]

    # === Beam generation ===

    def generate_beam(self, params: Optional[BeamParameters] = None) -> None:
        """
        Replace the ensemble with a freshly sampled beam.

        Args:
            params: Beam parameters; defaults to :class:`BeamParameters` defaults

        Example:
            >>> system = ParticleSystem()
            >>> system.generate_beam(BeamParameters(num_particles=100, seed=7))
            >>> len(system)
            100
        """
        if params is None:
            params = BeamParameters()
        species = ParticleType(params.particle_type)
        distribution = DistributionType(params.distribution)

        self.clear()
        self._rng = np.random.default_rng(params.seed)

        template = _SPECIES[species]()
        gamma = const.gamma_from_kinetic_energy(params.kinetic_energy, template.mass)
        self._reference_momentum = const.momentum_from_gamma(gamma, template.mass)

        n = params.num_particles
        sigma_pos = np.array([params.sigma_x, params.sigma_y, params.sigma_z])
        sigma_mom = np.array([params.sigma_px, params.sigma_py, params.sigma_delta])

        if distribution == DistributionType.GAUSSIAN:
            offsets = self._rng.normal(0.0, 1.0, size=(n, 3)) * sigma_pos
            deviations = self._rng.normal(0.0, 1.0, size=(n, 3)) * sigma_mom
        elif distribution == DistributionType.UNIFORM:
            offsets = self._uniform_deviates(n, sigma_pos)
            deviations = self._uniform_deviates(n, sigma_mom)
        else:
            offsets = self._waterbag_positions(n, sigma_pos)
            deviations = self._uniform_deviates(n, sigma_mom)

        direction = params.direction
        perp_x, perp_y = _transverse_basis(direction)
        p_ref = self._reference_momentum
        positions = params.position_offset + offsets
        momenta = (np.outer(p_ref * (1.0 + deviations[:, 2]), direction)
                   + np.outer(p_ref * deviations[:, 0], perp_x)
                   + np.outer(p_ref * deviations[:, 1], perp_y))

        for position, momentum in zip(positions, momenta):
            particle = _SPECIES[species]()
            particle.position = position
            particle.momentum = momentum
            self.add_particle(particle)

        logger.info(f"Generated {n} {species.value} particles ({distribution.value}, seed={params.seed})")

    def _uniform_deviates(self, n: int, sigma: np.ndarray) -> np.ndarray:
        return self._rng.uniform(-1.0, 1.0, size=(n, 3)) * sigma * math.sqrt(3.0)

    def _waterbag_positions(self, n: int, sigma: np.ndarray) -> np.ndarray:
        # phi spans [-pi, pi] from a symmetric draw
        r = np.cbrt(np.abs(self._rng.uniform(-1.0, 1.0, size=n)))
        theta = np.arccos(self._rng.uniform(-1.0, 1.0, size=n))
        phi = self._rng.uniform(-1.0, 1.0, size=n) * const.pi
        unit = np.column_stack((np.sin(theta) * np.cos(phi),
                                np.sin(theta) * np.sin(phi),
                                np.cos(theta)))
        return unit * r[:, None] * sigma

    # === Statistics ===

    def compute_statistics(self) -> BeamStatistics:
        """Compute centroids, spreads and emittances over active particles."""
        total = len(self._particles)
        active = self.active_particles()
        stats = BeamStatistics(total_particles=total, active_particles=len(active),
                               lost_particles=total - len(active))
        if not active:
            return stats

        positions = np.array([p.position for p in active])
        momenta = np.array([p.momentum for p in active])
        energies = np.array([p.kinetic_energy for p in active])

        mean_pos = positions.mean(axis=0)
        mean_mom = momenta.mean(axis=0)
        mean_energy = float(energies.mean())
        stats.mean_position = mean_pos
        stats.mean_momentum = mean_mom
        stats.rms_position = np.sqrt(np.mean((positions - mean_pos) ** 2, axis=0))
        stats.rms_momentum = np.sqrt(np.mean((momenta - mean_mom) ** 2, axis=0))
        stats.mean_energy = mean_energy
        stats.rms_energy = float(np.sqrt(np.mean((energies - mean_energy) ** 2)))
        stats.min_energy = float(energies.min())
        stats.max_energy = float(energies.max())

        pz = momenta[:, 2]
        mask = np.abs(pz) >= 1e-30
        x_prime = momenta[mask, 0] / pz[mask]
        y_prime = momenta[mask, 1] / pz[mask]
        stats.emittance_x = _geometric_emittance(positions[mask, 0], x_prime)
        stats.emittance_y = _geometric_emittance(positions[mask, 1], y_prime)

        if self._reference_momentum > 0:
            mass = active[0].mass
            gamma = const.gamma_from_momentum(self._reference_momentum, mass)
            beta_gamma = const.beta_from_gamma(gamma) * gamma
            stats.normalized_emittance_x = beta_gamma * stats.emittance_x
            stats.normalized_emittance_y = beta_gamma * stats.emittance_y

        return stats

    # === Aperture ===

    @staticmethod
    def is_within_aperture(particle: Particle, radius: float) -> bool:
        return math.hypot(particle.x, particle.y) <= radius

    def apply_aperture(self, radius: float) -> int:
        """Deactivate active particles outside a circular aperture; returns the number lost."""
        lost = 0
        for particle in self._particles:
            if particle.active and not self.is_within_aperture(particle, radius):
                particle.active = False
                lost += 1
        if lost:
            logger.debug(f"Aperture r={radius} m removed {lost} particles")
        return lost
