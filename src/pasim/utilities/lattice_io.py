# Lattice file format for PASIM.
# A lattice document holds "latticeType" ("linear" or "circular"), an output-only
# "totalLength", and a "components" list. Each entry carries "name", "type",
# "length", "aperture" (circular radius) and the keys of its type:
## beampipe / drift : -
## dipole           : field [T]
## quadrupole       : gradient [T/m]
## rfcavity         : voltage [V], frequency [Hz], phase [rad]
# Entries of any other type are skipped when loading.

import logging
from pathlib import Path
from typing import Any, Dict, Union

from pydantic import ConfigDict, Field, ValidationError

from pasim.machine_portal.bend import Dipole
from pasim.machine_portal.drift import BeamPipe
from pasim.machine_portal.element import Aperture, Component, ComponentType
from pasim.machine_portal.lattice import Lattice, LatticeType
from pasim.machine_portal.quadrupole import Quadrupole
from pasim.machine_portal.rfcavity import RFCavity
from pasim.models.base import PhysicsBaseModel
from pasim.simulators.types import ConfigurationError
from pasim.utilities.files import read_document, write_document

logger = logging.getLogger(__name__)

_FILE_TYPES = {
    "beampipe": ComponentType.BEAM_PIPE,
    "drift": ComponentType.BEAM_PIPE,
    "dipole": ComponentType.DIPOLE,
    "quadrupole": ComponentType.QUADRUPOLE,
    "rfcavity": ComponentType.RF_CAVITY,
}

_TYPE_NAMES = {
    ComponentType.BEAM_PIPE: "beampipe",
    ComponentType.DIPOLE: "dipole",
    ComponentType.QUADRUPOLE: "quadrupole",
    ComponentType.RF_CAVITY: "rfcavity",
}


class ComponentEntry(PhysicsBaseModel):
    """One component entry of a lattice document, with file defaults applied."""
    model_config = ConfigDict(extra="ignore")

    name: str = Field(default="unnamed", min_length=1)
    type: str
    length: float = Field(default=1.0, ge=0.0)
    aperture: float = Field(default=0.05, gt=0.0)
    field: float = 1.0
    gradient: float = 10.0
    voltage: float = 1e6
    frequency: float = 5e8
    phase: float = 0.0

    def build(self) -> Component:
        aperture = Aperture.circular(self.aperture)
        component_type = _FILE_TYPES[self.type]
        if component_type == ComponentType.DIPOLE:
            return Dipole(name=self.name, length=self.length, field=self.field, aperture=aperture)
        if component_type == ComponentType.QUADRUPOLE:
            return Quadrupole(name=self.name, length=self.length, gradient=self.gradient, aperture=aperture)
        if component_type == ComponentType.RF_CAVITY:
            return RFCavity(name=self.name, length=self.length, voltage=self.voltage,
                            frequency=self.frequency, phase=self.phase, aperture=aperture)
        return BeamPipe(name=self.name, length=self.length, aperture=aperture)


def lattice_from_dict(data: Dict[str, Any], name: str = "lattice") -> Lattice:
    """
    Build a lattice from a parsed lattice document.

    Args:
        data: Document mapping
        name: Name given to the lattice

    Returns:
        Lattice with s-positions computed

    Raises:
        ConfigurationError: If a known component entry is invalid
    """
    lattice_type = LatticeType.CIRCULAR if data.get("latticeType") == "circular" else LatticeType.LINEAR
    lattice = Lattice(name=name, lattice_type=lattice_type)

    entries = data.get("components", [])
    if not isinstance(entries, list):
        raise ConfigurationError("'components' must be a list")

    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Component entry {index} is not a mapping")
        entry_type = entry.get("type", "")
        if not isinstance(entry_type, str) or entry_type not in _FILE_TYPES:
            logger.warning(f"Skipping component {entry.get('name', index)!r} of unknown type {entry_type!r}")
            continue
        try:
            component = ComponentEntry(**entry).build()
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid component entry {index}: {exc}") from exc
        lattice.components.append(component)

    lattice.compute_lattice()
    return lattice


def lattice_to_dict(lattice: Lattice) -> Dict[str, Any]:
    """Convert a lattice to its document mapping."""
    components = []
    for component in lattice.components:
        entry = {
            "name": component.name,
            "length": component.length,
            "aperture": component.aperture.radius_x,
            "sPosition": component.s_position,
            "type": _TYPE_NAMES.get(component.type, "unknown"),
        }
        if component.type == ComponentType.DIPOLE:
            entry["field"] = component.field
        elif component.type == ComponentType.QUADRUPOLE:
            entry["gradient"] = component.gradient
        elif component.type == ComponentType.RF_CAVITY:
            entry["voltage"] = component.voltage
            entry["frequency"] = component.frequency
            entry["phase"] = component.phase
        components.append(entry)

    return {
        "latticeType": LatticeType(lattice.lattice_type).value,
        "totalLength": lattice.total_length,
        "components": components,
    }


def load_lattice(path: Union[str, Path]) -> Lattice:
    """Load a lattice from a JSON or YAML file (chosen by suffix).

    Raises:
        ConfigurationError: If the file is unreadable, malformed or holds invalid components
    """
    path = Path(path)
    lattice = lattice_from_dict(read_document(path), name=path.stem)
    logger.info(f"Loaded lattice from {path} with {len(lattice)} components")
    return lattice


def save_lattice(lattice: Lattice, path: Union[str, Path]) -> None:
    write_document(path, lattice_to_dict(lattice))
    logger.info(f"Saved lattice '{lattice.name}' to {path}")
