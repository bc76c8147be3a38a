"""
File helpers and lattice serialization for PASIM.
"""

from .files import read_document, write_document
from .lattice_io import load_lattice, save_lattice, lattice_from_dict, lattice_to_dict

__all__ = [
    'read_document',
    'write_document',
    'load_lattice',
    'save_lattice',
    'lattice_from_dict',
    'lattice_to_dict',
]
