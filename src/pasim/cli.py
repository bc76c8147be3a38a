#!/usr/bin/env python3
"""
Command-line runner for PASIM.

Usage:
    python -m pasim.cli [--lattice LATTICE_FILE] [--steps N] [--plot FIGURE]

Or from command line after installation:
    pasim [--config CONFIG_FILE] [--fodo-cells 8] [--integrator RK4]
"""

import argparse
import logging
import sys

from pasim import constants as const
from pasim.machine_portal.lattice import FODOCellParams, Lattice
from pasim.physics.particle_system import BeamParameters, ParticleType
from pasim.simulators.config import Config
from pasim.simulators.engine import PhysicsEngine
from pasim.simulators.types import SimulationError
from pasim.utilities.lattice_io import load_lattice

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="PASIM - relativistic particle tracking through a beamline"
    )
    parser.add_argument('--config', type=str, help='Path to a JSON/YAML configuration file')
    parser.add_argument('--lattice', type=str, help='Path to a JSON/YAML lattice file')
    parser.add_argument('--fodo-cells', type=int, default=4,
                        help='FODO cells to build when no lattice file is given (default: 4)')
    parser.add_argument('--particles', type=int, help='Number of particles (overrides config)')
    parser.add_argument('--energy-gev', type=float, help='Proton kinetic energy in GeV (overrides config)')
    parser.add_argument('--integrator', type=str,
                        help='Integrator name: Euler, Verlet, Boris or RK4 (overrides config)')
    parser.add_argument('--steps', type=int, default=1000, help='Number of time steps (default: 1000)')
    parser.add_argument('--plot', type=str, help='Save a beamline and phase-space figure to this path')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    return parser


def run(args) -> int:
    config = Config.load(args.config) if args.config else Config()

    if args.lattice:
        lattice = load_lattice(args.lattice)
    else:
        lattice = Lattice(name="fodo")
        lattice.build_fodo_lattice(FODOCellParams(), args.fodo_cells)
    lattice.align_components()

    engine = PhysicsEngine()
    config.apply_to_engine(engine)
    if args.integrator:
        engine.set_integrator(args.integrator)
    engine.set_lattice(lattice)
    engine.set_particle_lost_callback(
        lambda p: logger.debug(f"Particle {p.id} lost at {p.position.tolist()}")
    )

    energy_ev = args.energy_gev * 1e9 if args.energy_gev else config.simulation.beam_energy
    params = BeamParameters(
        particle_type=ParticleType.PROTON,
        num_particles=args.particles if args.particles is not None else config.simulation.particle_count,
        kinetic_energy=const.ev_to_joules(energy_ev),
    )
    engine.particle_system.generate_beam(params)

    logger.info(f"Tracking {params.num_particles} protons at {energy_ev / 1e9:.3f} GeV through "
                f"{len(lattice)} components ({lattice.total_length:.2f} m) with {engine.integrator.name}")
    for _ in range(args.steps):
        engine.step()

    stats = engine.stats
    beam = engine.particle_system.compute_statistics()
    logger.info(f"Simulated {stats.simulation_time:.3e} s in {stats.step_count} steps")
    logger.info(f"Active particles: {beam.active_particles}/{beam.total_particles} "
                f"(lost {stats.lost_particle_count})")
    logger.info(f"Mean kinetic energy: {const.joules_to_ev(beam.mean_energy) / 1e9:.6f} GeV, "
                f"RMS spread {const.joules_to_ev(beam.rms_energy) / 1e6:.6f} MeV")
    logger.info(f"Emittance x/y: {beam.emittance_x:.3e} / {beam.emittance_y:.3e} m rad")

    if args.plot:
        import matplotlib
        matplotlib.use('Agg')
        from pasim.visualization.beam_plots import plot_lattice_overview
        fig = plot_lattice_overview(lattice, engine.particle_system)
        fig.savefig(args.plot)
        logger.info(f"Saved figure to {args.plot}")
    return 0


def main(argv=None):
    """Main entry point for the command-line runner."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    try:
        return run(args)
    except SimulationError as exc:
        logger.error(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
