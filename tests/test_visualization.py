"""
Test suite for beam and lattice plotting.
"""

import matplotlib.pyplot as plt
import pytest
from matplotlib.figure import Figure

from pasim.physics.particle_system import BeamParameters, ParticleSystem
from pasim.visualization.beam_plots import (
    BeamlinePlotter, PhaseSpacePlotter, plot_beam_profile, plot_lattice_overview
)


@pytest.fixture
def beam():
    system = ParticleSystem()
    system.generate_beam(BeamParameters(num_particles=200))
    return system


class TestBeamlinePlotter:
    """Test the beamline layout plotter."""

    def test_creates_own_figure(self, fodo_lattice):
        plotter = BeamlinePlotter()
        assert plotter.plot(fodo_lattice, normalized_strength=50.0) == pytest.approx(10.0)
        assert plotter.fig is not None
        plt.close(plotter.fig)

    def test_draws_into_given_axes(self, fodo_lattice):
        fig, ax = plt.subplots()
        plotter = BeamlinePlotter()
        plotter.plot(fodo_lattice, ax=ax)
        assert plotter.fig is None
        assert plotter.ax is ax
        assert len(ax.patches) == 2
        plt.close(fig)


class TestPhaseSpacePlotter:
    """Test the phase space scatter plotter."""

    def test_planes(self, beam):
        fig, ax = plt.subplots()
        plotter = PhaseSpacePlotter()
        plotter.plot(beam, "y", ax=ax)
        assert ax.get_xlabel() == "y (mm)"
        assert len(ax.collections) == 1
        assert len(ax.collections[0].get_offsets()) == 200
        plt.close(fig)

    def test_max_points_and_lost_particles(self, beam):
        for particle in beam.particles[:50]:
            particle.active = False
        plotter = PhaseSpacePlotter()
        plotter.plot(beam, max_points=100)
        assert len(plotter.ax.collections[0].get_offsets()) == 100
        plt.close(plotter.fig)

    def test_unknown_plane(self, beam):
        with pytest.raises(ValueError):
            PhaseSpacePlotter().plot(beam, "z")


class TestOverview:
    """Test combined figures."""

    def test_beam_profile(self, beam):
        fig, ax = plt.subplots()
        plot_beam_profile(beam, ax, bins=20)
        assert len(ax.patches) == 40
        plt.close(fig)

    def test_empty_beam_profile(self):
        fig, ax = plt.subplots()
        plot_beam_profile(ParticleSystem(), ax)
        assert len(ax.patches) == 0
        plt.close(fig)

    def test_overview(self, fodo_lattice, beam):
        fig = plot_lattice_overview(fodo_lattice, beam)
        assert isinstance(fig, Figure)
        assert len(fig.axes) == 4
        plt.close(fig)
