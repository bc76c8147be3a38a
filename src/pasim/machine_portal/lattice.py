# Lattice class of the PASIM machine portal.
# A lattice is an ordered list of components laid out along the arc length s.
# The entrance s-position of every component is the cumulative length of the
# components before it and is refreshed after every structural change.
# Circular lattices reduce query positions modulo the total length.

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Union

import numpy as np
from pydantic import Field

from pasim.machine_portal.element import Aperture, Component, ComponentType
from pasim.machine_portal.drift import BeamPipe
from pasim.machine_portal.bend import Dipole
from pasim.machine_portal.quadrupole import Quadrupole
from pasim.machine_portal.rfcavity import RFCavity
from pasim.machine_portal.monitor import Detector
from pasim.models.base import PhysicsBaseModel
from pasim.physics.fields import EMFieldManager

logger = logging.getLogger(__name__)


def create_component_by_type(component_type: Union[str, ComponentType], name: str,
                             length: Optional[float] = None, **kwargs) -> Component:
    """Factory function to create the correct component class for a type tag.

    When ``length`` is omitted the component class default applies.
    """
    component_classes = {
        ComponentType.BEAM_PIPE: BeamPipe,
        ComponentType.DIPOLE: Dipole,
        ComponentType.QUADRUPOLE: Quadrupole,
        ComponentType.RF_CAVITY: RFCavity,
        ComponentType.DETECTOR: Detector,
    }
    component_type = ComponentType(component_type)
    if length is not None:
        kwargs["length"] = length
    component_class = component_classes.get(component_type, Component)
    if component_class is Component:
        return Component(name=name, type=component_type, **kwargs)
    return component_class(name=name, **kwargs)


class LatticeType(str, Enum):
    LINEAR = "linear"
    CIRCULAR = "circular"


class FODOCellParams(PhysicsBaseModel):
    """Parameters of a focusing-drift-defocusing-drift cell."""
    cell_length: float = Field(default=10.0, gt=0.0, description="Cell length [m]")
    quad_length: float = Field(default=0.5, gt=0.0, description="Quadrupole length [m]")
    quad_gradient: float = Field(default=50.0, description="Quadrupole gradient magnitude [T/m]")
    drift_length: float = Field(default=0.0, description="Drift length [m]; <= 0 derives it from the cell length")
    aperture: float = Field(default=0.05, gt=0.0, description="Circular aperture radius [m]")

    def effective_drift_length(self) -> float:
        if self.drift_length > 0:
            return self.drift_length
        return (self.cell_length - 2.0 * self.quad_length) / 2.0


@dataclass
class Lattice:
    """Ordered beamline of components with s-coordinates.

    Example:
        >>> lattice = Lattice("ring")
        >>> lattice.build_fodo_lattice(FODOCellParams(), 4)
        >>> lattice.close_ring()
        >>> lattice.component_at_s(41.0).name
        'FODO_1_D1'
    """
    name: str = "lattice"
    lattice_type: LatticeType = LatticeType.LINEAR
    components: List[Component] = field(default_factory=list)
    total_length: float = field(default=0.0, init=False)
    _drift_counter: int = field(default=0, init=False, repr=False)

    def __post_init__(self):
        if not self.name:
            raise ValueError("Lattice must have a name.")
        self.lattice_type = LatticeType(self.lattice_type)
        for component in self.components:
            if not isinstance(component, Component):
                raise TypeError("All lattice entries must be Component instances.")
        self.compute_lattice()

    # === Structure ===

    def __len__(self) -> int:
        return len(self.components)

    def __iter__(self) -> Iterator[Component]:
        return iter(self.components)

    @property
    def size(self) -> int:
        return len(self.components)

    @property
    def is_circular(self) -> bool:
        return self.lattice_type == LatticeType.CIRCULAR

    def add_component(self, component: Component) -> Component:
        """Append a component at the end of the beamline."""
        if not isinstance(component, Component):
            raise TypeError("Component must be an instance of Component.")
        self.components.append(component)
        self.compute_lattice()
        return component

    def insert_component(self, index: int, component: Component) -> Component:
        """Insert a component before position ``index`` (``index == len`` appends).

        Raises:
            IndexError: If index is negative or beyond the end of the lattice
        """
        if not isinstance(component, Component):
            raise TypeError("Component must be an instance of Component.")
        if index < 0 or index > len(self.components):
            raise IndexError(f"Insert index {index} out of range for lattice of size {len(self.components)}")
        self.components.insert(index, component)
        self.compute_lattice()
        return component

    def remove_component(self, key: Union[int, str]) -> int:
        """Remove by index, or every component with a matching name.

        Returns:
            Number of components removed

        Raises:
            IndexError: If an integer index is out of range
        """
        if isinstance(key, str):
            before = len(self.components)
            self.components = [c for c in self.components if c.name != key]
            removed = before - len(self.components)
        else:
            if key < 0 or key >= len(self.components):
                raise IndexError(f"Component index {key} out of range for lattice of size {len(self.components)}")
            del self.components[key]
            removed = 1
        self.compute_lattice()
        return removed

    def clear(self) -> None:
        self.components.clear()
        self.total_length = 0.0
        self._drift_counter = 0

    def get(self, key: Union[int, str]) -> Optional[Component]:
        """Component by index or by (first matching) name; None on a miss."""
        if isinstance(key, str):
            return next((c for c in self.components if c.name == key), None)
        if 0 <= key < len(self.components):
            return self.components[key]
        return None

    def component_at_s(self, s: float) -> Optional[Component]:
        """Component whose [entrance, exit) interval contains ``s``, or None."""
        if self.is_circular and self.total_length > 0:
            s = math.fmod(s, self.total_length)
            if s < 0:
                s += self.total_length
        for component in self.components:
            if component.contains_s(s):
                return component
        return None

    def compute_lattice(self) -> float:
        """Reassign cumulative s-positions and return the total length."""
        s = 0.0
        for component in self.components:
            component.s_position = s
            s += component.length
        self.total_length = s
        return s

    def close_ring(self) -> None:
        self.lattice_type = LatticeType.CIRCULAR
        self.compute_lattice()
        logger.debug(f"Closed ring '{self.name}' with circumference {self.total_length} m")

    def align_components(self, origin=(0.0, 0.0, 0.0), direction=(0.0, 0.0, 1.0)) -> None:
        """Place every component entrance on a straight line at ``origin + s * direction``."""
        origin = np.asarray(origin, dtype=np.float64)
        direction = np.asarray(direction, dtype=np.float64)
        direction = direction / np.linalg.norm(direction)
        for component in self.components:
            component.position = origin + component.s_position * direction

    # === Fields ===

    def populate_field_manager(self, manager: EMFieldManager) -> int:
        """Push every non-null component field source into ``manager``, in order."""
        count = 0
        for component in self.components:
            source = component.field_source()
            if source is not None:
                manager.add_source(source)
                count += 1
        return count

    # === Queries by type ===

    def components_of_type(self, component_type: Union[str, ComponentType]) -> List[Component]:
        component_type = ComponentType(component_type)
        return [c for c in self.components if c.type == component_type]

    def dipoles(self) -> List[Dipole]:
        return self.components_of_type(ComponentType.DIPOLE)

    def quadrupoles(self) -> List[Quadrupole]:
        return self.components_of_type(ComponentType.QUADRUPOLE)

    def rf_cavities(self) -> List[RFCavity]:
        return self.components_of_type(ComponentType.RF_CAVITY)

    def detectors(self) -> List[Detector]:
        return self.components_of_type(ComponentType.DETECTOR)

    @property
    def dipole_count(self) -> int:
        return len(self.dipoles())

    @property
    def quadrupole_count(self) -> int:
        return len(self.quadrupoles())

    def total_bending_angle(self, momentum: float) -> float:
        return sum(d.bending_angle(momentum) for d in self.dipoles())

    # === Builders ===

    def add_drift(self, length: float, name: str = "") -> BeamPipe:
        """Append a beam pipe; unnamed drifts are numbered Drift_1, Drift_2, ..."""
        if not name:
            self._drift_counter += 1
            name = f"Drift_{self._drift_counter}"
        return self.add_component(BeamPipe(name=name, length=length))

    def build_fodo_cell(self, params: Optional[FODOCellParams] = None, cell_name: str = "FODO") -> None:
        """Append QF, drift, QD, drift. Positive gradient is horizontally focusing."""
        if params is None:
            params = FODOCellParams()
        drift_length = params.effective_drift_length()
        if drift_length <= 0:
            logger.warning(f"FODO cell '{cell_name}' has non-positive drift length {drift_length} m")
        aperture = Aperture.circular(params.aperture)

        self.add_component(Quadrupole(name=f"{cell_name}_QF", length=params.quad_length,
                                      gradient=params.quad_gradient, aperture=aperture))
        self.add_drift(max(drift_length, 0.0), f"{cell_name}_D1")
        self.add_component(Quadrupole(name=f"{cell_name}_QD", length=params.quad_length,
                                      gradient=-params.quad_gradient, aperture=aperture))
        self.add_drift(max(drift_length, 0.0), f"{cell_name}_D2")

    def build_fodo_lattice(self, params: Optional[FODOCellParams] = None, num_cells: int = 1) -> None:
        for i in range(num_cells):
            self.build_fodo_cell(params, f"FODO_{i + 1}")
        logger.debug(f"Built {num_cells} FODO cells, total length {self.total_length} m")

    # === Plotting ===

    def plot_beamline(self, ax, s_start: float = 0.0, normalized_strength=None):
        """Plot the lattice in 1D beamline view using component plotting methods."""
        s_current = s_start
        for component in self.components:
            s_current = component.plot_in_beamline(ax, s_current, normalized_strength)

        ax.set_xlabel('S coordinate (m)')
        ax.set_xlim(s_start, max(s_current, s_start + 1e-9))
        ax.set_ylim(-1, 1)
        ax.set_title(f'Beamline view: {self.name}')
        ax.grid(True, alpha=0.3)
        return s_current
