"""
PASIM Visualization Package

Matplotlib plotters for beamline layouts and beam phase space.
"""

from .beam_plots import (
    BeamlinePlotter,
    PhaseSpacePlotter,
    plot_beam_profile,
    plot_lattice_overview
)

__all__ = [
    'BeamlinePlotter',
    'PhaseSpacePlotter',
    'plot_beam_profile',
    'plot_lattice_overview',
]
