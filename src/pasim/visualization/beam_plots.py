"""
Beam and lattice plotting components for PASIM.

Reusable matplotlib plotters for the beamline layout, transverse phase space
and beam profiles. Each plotter creates its own figure on first use, or draws
into an axes handed to it.
"""

import logging
from typing import Any, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

logger = logging.getLogger(__name__)

_PLANES = {"x": (0, "x (mm)", "x' (mrad)"), "y": (1, "y (mm)", "y' (mrad)")}


class BeamlinePlotter:
    """Reusable component for plotting the beamline layout."""

    def __init__(self, figsize: Tuple[float, float] = (14, 2)):
        self.figsize = figsize
        self.fig = None
        self.ax = None

    def create_figure(self) -> Tuple[Figure, Any]:
        """Create matplotlib figure and axis."""
        self.fig, self.ax = plt.subplots(figsize=self.figsize)
        return self.fig, self.ax

    def plot(self, lattice, ax=None, normalized_strength: Optional[float] = None) -> float:
        """
        Plot the beamline layout.

        Args:
            lattice: PASIM Lattice object
            ax: Optional axes to draw into
            normalized_strength: Normalization factor for component heights

        Returns:
            End s-coordinate of the drawing
        """
        if ax is not None:
            self.ax = ax
        elif self.ax is None:
            self.create_figure()
        self.ax.clear()
        s_end = lattice.plot_beamline(self.ax, normalized_strength=normalized_strength)
        self.ax.set_yticks([])
        return s_end


class PhaseSpacePlotter:
    """Scatter plot of position against angle p_t / p_z in one transverse plane."""

    def __init__(self, figsize: Tuple[float, float] = (6, 5)):
        self.figsize = figsize
        self.fig = None
        self.ax = None

    def create_figure(self) -> Tuple[Figure, Any]:
        self.fig, self.ax = plt.subplots(figsize=self.figsize)
        return self.fig, self.ax

    def plot(self, system, plane: str = "x", ax=None, max_points: int = 5000):
        """
        Plot the phase space of the active particles.

        Args:
            system: ParticleSystem to draw
            plane: 'x' or 'y'
            ax: Optional axes to draw into
            max_points: Upper bound on plotted particles

        Raises:
            ValueError: If plane is not 'x' or 'y'
        """
        if plane not in _PLANES:
            raise ValueError(f"Unknown plane '{plane}', expected 'x' or 'y'")
        index, xlabel, ylabel = _PLANES[plane]
        if ax is not None:
            self.ax = ax
        elif self.ax is None:
            self.create_figure()
        self.ax.clear()

        particles = [p for p in system.active_particles() if abs(p.pz) >= 1e-30][:max_points]
        if particles:
            positions = np.array([p.position[index] for p in particles])
            angles = np.array([p.momentum[index] / p.pz for p in particles])
            self.ax.scatter(positions * 1e3, angles * 1e3, s=2, alpha=0.5)
        else:
            logger.debug("No active particles to plot")

        self.ax.set_xlabel(xlabel)
        self.ax.set_ylabel(ylabel)
        self.ax.set_title(f"Phase space ({plane})")
        self.ax.grid(True, alpha=0.3)


def plot_beam_profile(system, ax, bins: int = 50) -> None:
    """Histogram of the transverse x and y distributions of active particles, in mm."""
    particles = system.active_particles()
    if particles:
        positions = np.array([p.position for p in particles])
        ax.hist(positions[:, 0] * 1e3, bins=bins, alpha=0.6, label='x')
        ax.hist(positions[:, 1] * 1e3, bins=bins, alpha=0.6, label='y')
        ax.legend()
    ax.set_xlabel('Position (mm)')
    ax.set_ylabel('Particles')
    ax.grid(True, alpha=0.3)


def plot_lattice_overview(lattice, system) -> Figure:
    """Figure with the beamline on top and phase space and profile below."""
    fig = plt.figure(figsize=(14, 8))
    grid = fig.add_gridspec(2, 3, height_ratios=[1, 3])
    BeamlinePlotter().plot(lattice, ax=fig.add_subplot(grid[0, :]))
    PhaseSpacePlotter().plot(system, "x", ax=fig.add_subplot(grid[1, 0]))
    PhaseSpacePlotter().plot(system, "y", ax=fig.add_subplot(grid[1, 1]))
    plot_beam_profile(system, fig.add_subplot(grid[1, 2]))
    fig.tight_layout()
    return fig
