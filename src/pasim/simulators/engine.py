"""
Fixed-step physics engine for PASIM.

The engine owns the particle ensemble and the field manager, advances the beam
with the selected integrator in fixed time steps, detects aperture losses
against the installed lattice and keeps running statistics. It is driven
cooperatively: the caller hands real elapsed time to :meth:`PhysicsEngine.update`
once per frame, or calls :meth:`PhysicsEngine.step` directly.
"""

import logging
import math
from typing import Callable, Optional, Union

from .. import constants as const
from ..machine_portal.lattice import Lattice
from ..models.validators import validate_time_step
from ..physics.fields import EMFieldManager
from ..physics.integrators import Integrator, IntegratorFactory, IntegratorType
from ..physics.particle import Particle
from ..physics.particle_system import BeamParameters, ParticleSystem, ParticleType
from .types import IntegratorError, SimulationState, SimulationStats

logger = logging.getLogger(__name__)

# Radial distance beyond which a particle outside every component is lost
FALLBACK_LOSS_RADIUS = 0.1


class PhysicsEngine:
    """
    Fixed-step scheduler with a run-state machine and loss detection.

    Example:
        >>> engine = PhysicsEngine()
        >>> engine.start()          # resets first, since the engine was stopped
        >>> engine.initialize_default_beam()
        >>> steps = engine.update(1e-10)   # drained in steps of 1e-11 s
    """

    def __init__(self, time_step: float = 1e-11, time_scale: float = 1.0,
                 integrator: Union[IntegratorType, int, str] = IntegratorType.BORIS,
                 max_steps_per_frame: int = 10000):
        self._state = SimulationState.STOPPED
        self._time_step = 1e-11
        self._time_scale = 1.0
        self._max_steps_per_frame = max_steps_per_frame

        self._particle_system = ParticleSystem()
        self._field_manager = EMFieldManager()
        self._lattice: Optional[Lattice] = None
        self._loss_callback: Optional[Callable[[Particle], None]] = None

        self._integrator_type = IntegratorType.BORIS
        self._integrator: Integrator = IntegratorFactory.create(IntegratorType.BORIS)

        self._stats = SimulationStats()
        self._current_time = 0.0
        self._accumulated_time = 0.0
        self._steps_this_second = 0
        self._stats_window = 0.0

        self.set_time_step(time_step)
        self.set_time_scale(time_scale)
        self.set_integrator(integrator)

    # === Configuration ===

    @property
    def time_step(self) -> float:
        return self._time_step

    def set_time_step(self, dt: float) -> None:
        """Set the fixed integration step in seconds.

        Raises:
            IntegratorError: If dt is not a positive finite number
        """
        try:
            self._time_step = validate_time_step(dt)
        except ValueError as exc:
            raise IntegratorError(str(exc)) from exc

    @property
    def time_scale(self) -> float:
        return self._time_scale

    def set_time_scale(self, scale: float) -> None:
        """Simulated seconds per real second; negative values clamp to zero."""
        self._time_scale = max(0.0, float(scale))

    @property
    def max_steps_per_frame(self) -> int:
        return self._max_steps_per_frame

    def set_max_steps_per_frame(self, max_steps: int) -> None:
        self._max_steps_per_frame = max(1, int(max_steps))

    @property
    def integrator(self) -> Integrator:
        return self._integrator

    @property
    def integrator_type(self) -> IntegratorType:
        return self._integrator_type

    def set_integrator(self, kind: Union[IntegratorType, int, str]) -> None:
        self._integrator_type = IntegratorFactory.resolve(kind)
        self._integrator = IntegratorFactory.create(self._integrator_type)
        logger.debug(f"Engine integrator set to {self._integrator.name}")

    @property
    def lattice(self) -> Optional[Lattice]:
        return self._lattice

    def set_lattice(self, lattice: Optional[Lattice]) -> None:
        """Install a lattice and rebuild the field manager from its components."""
        self._lattice = lattice
        self._field_manager.clear()
        if lattice is not None:
            count = lattice.populate_field_manager(self._field_manager)
            logger.info(f"Installed lattice '{lattice.name}' with {len(lattice)} components "
                        f"({count} field sources)")

    def refresh_fields(self) -> None:
        """Rebuild the field manager after lattice components were modified."""
        self.set_lattice(self._lattice)

    @property
    def field_manager(self) -> EMFieldManager:
        return self._field_manager

    @property
    def particle_system(self) -> ParticleSystem:
        return self._particle_system

    def set_particle_lost_callback(self, callback: Optional[Callable[[Particle], None]]) -> None:
        self._loss_callback = callback

    # === State machine ===

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == SimulationState.RUNNING

    @property
    def simulation_time(self) -> float:
        return self._current_time

    @property
    def stats(self) -> SimulationStats:
        """Copy of the current statistics."""
        return self._stats.model_copy()

    def start(self) -> None:
        if self._state == SimulationState.STOPPED:
            self.reset()
        self._state = SimulationState.RUNNING
        logger.info("Simulation started")

    def stop(self) -> None:
        self._state = SimulationState.STOPPED
        logger.info(f"Simulation stopped (time: {self._current_time:.6e} s, "
                    f"steps: {self._stats.step_count})")

    def pause(self) -> None:
        if self._state == SimulationState.RUNNING:
            self._state = SimulationState.PAUSED
            logger.info("Simulation paused")

    def resume(self) -> None:
        if self._state == SimulationState.PAUSED:
            self._state = SimulationState.RUNNING
            logger.info("Simulation resumed")

    def reset(self) -> None:
        """Zero statistics and clocks and clear the ensemble; settings are kept."""
        self._stats = SimulationStats()
        self._current_time = 0.0
        self._accumulated_time = 0.0
        self._steps_this_second = 0
        self._stats_window = 0.0
        self._particle_system.clear()
        logger.info("Simulation reset")

    # === Stepping ===

    def update(self, real_dt: float) -> int:
        """
        Advance the simulation by a frame of real time.

        Scaled time is banked and drained in fixed steps, at most
        ``max_steps_per_frame`` per call. When the cap is reached with more than
        one step left in the bank, the residual is dropped.

        Args:
            real_dt: Real elapsed time since the previous frame [s]

        Returns:
            Number of steps performed
        """
        if self._state != SimulationState.RUNNING:
            return 0

        self._accumulated_time += real_dt * self._time_scale

        steps = 0
        while self._accumulated_time >= self._time_step and steps < self._max_steps_per_frame:
            self.step()
            self._accumulated_time -= self._time_step
            steps += 1

        if steps >= self._max_steps_per_frame and self._accumulated_time > self._time_step:
            logger.debug(f"Step cap reached, dropping {self._accumulated_time:.3e} s of banked time")
            self._accumulated_time = 0.0

        self._update_stats(real_dt)
        return steps

    def step(self) -> None:
        """Advance every active particle by one time step, then check losses."""
        t = self._current_time
        dt = self._time_step
        for particle in self._particle_system.particles:
            if particle.active:
                self._integrator.step(particle, self._field_manager, t, dt)

        self._record_detector_hits(t + dt)
        self._check_particle_losses()

        self._current_time = t + dt
        self._stats.simulation_time = self._current_time
        self._stats.step_count += 1
        self._steps_this_second += 1

    def _record_detector_hits(self, time: float) -> None:
        if self._lattice is None:
            return
        detectors = self._lattice.detectors()
        if not detectors:
            return
        for particle in self._particle_system.particles:
            if not particle.active:
                continue
            for detector in detectors:
                if detector.is_inside_aperture(particle.position):
                    detector.record_hit(time, particle.position, particle.momentum, particle.id)

    def _check_particle_losses(self) -> None:
        # Particles between components are only lost beyond the fallback radius
        if self._lattice is None or len(self._lattice) == 0:
            return
        components = self._lattice.components
        for particle in self._particle_system.particles:
            if not particle.active:
                continue
            position = particle.position
            if any(component.is_inside_aperture(position) for component in components):
                continue
            if math.hypot(position[0], position[1]) > FALLBACK_LOSS_RADIUS:
                particle.active = False
                self._stats.lost_particle_count += 1
                if self._loss_callback is not None:
                    self._loss_callback(particle)

    def _update_stats(self, real_dt: float) -> None:
        self._stats_window += real_dt
        if self._stats_window >= 1.0:
            self._stats.steps_per_second = self._steps_this_second / self._stats_window
            self._steps_this_second = 0
            self._stats_window = 0.0

        beam = self._particle_system.compute_statistics()
        self._stats.particle_count = beam.active_particles
        self._stats.average_energy = beam.mean_energy
        self._stats.energy_spread = beam.rms_energy

    # === Beam setup ===

    def initialize_default_beam(self) -> None:
        """Replace the ensemble with a 1 GeV proton beam of 1000 particles."""
        params = BeamParameters(
            particle_type=ParticleType.PROTON,
            num_particles=1000,
            kinetic_energy=1.0 * const.GeV,
            sigma_x=1e-3,
            sigma_y=1e-3,
            sigma_z=1e-2,
            sigma_px=1e-4,
            sigma_py=1e-4,
            sigma_delta=1e-3,
        )
        self._particle_system.generate_beam(params)
        logger.info(f"Initialized default beam with {params.num_particles} particles at "
                    f"{params.kinetic_energy / const.GeV:.3f} GeV")
