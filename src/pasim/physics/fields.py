"""
Electromagnetic field sources and their composition.

Each :class:`FieldSource` produces an (E, B) pair at a point and time and
advertises an axis-aligned bounding box. :class:`EMFieldManager` sums the
contributions of every enabled source whose box contains the query point;
sources outside are never evaluated.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

import numpy as np

from .. import constants as const


def _zero3() -> np.ndarray:
    return np.zeros(3)


@dataclass
class FieldValue:
    """Electric field E [V/m] and magnetic field B [T] at a point."""
    E: np.ndarray = field(default_factory=_zero3)
    B: np.ndarray = field(default_factory=_zero3)

    def __add__(self, other: "FieldValue") -> "FieldValue":
        return FieldValue(self.E + other.E, self.B + other.B)

    def __iadd__(self, other: "FieldValue") -> "FieldValue":
        self.E = self.E + other.E
        self.B = self.B + other.B
        return self


@dataclass
class BoundingBox:
    """Axis-aligned box; the default box is infinite in every direction."""
    min: np.ndarray = field(default_factory=lambda: np.full(3, -np.inf))
    max: np.ndarray = field(default_factory=lambda: np.full(3, np.inf))

    def __post_init__(self):
        self.min = np.asarray(self.min, dtype=np.float64)
        self.max = np.asarray(self.max, dtype=np.float64)

    @property
    def is_infinite(self) -> bool:
        return bool(np.isinf(self.min[0]) or np.isinf(self.max[0]))

    def contains(self, point) -> bool:
        p = np.asarray(point)
        return bool(np.all(p >= self.min) and np.all(p <= self.max))

    @classmethod
    def around(cls, center, half_extent) -> "BoundingBox":
        center = np.asarray(center, dtype=np.float64)
        half_extent = np.asarray(half_extent, dtype=np.float64)
        return cls(center - half_extent, center + half_extent)


class FieldSource(ABC):
    """Base class for localized electromagnetic field producers."""

    def __init__(self, bounds: BoundingBox = None):
        self.enabled = True
        self._bounds = bounds if bounds is not None else BoundingBox()

    @abstractmethod
    def evaluate(self, position: np.ndarray, time: float) -> FieldValue:
        """Return the field at ``position`` [m] and ``time`` [s]."""

    def bounding_box(self) -> BoundingBox:
        return self._bounds

    def contains(self, position) -> bool:
        if self._bounds.is_infinite:
            return True
        return self._bounds.contains(position)


class UniformBField(FieldSource):
    """Constant magnetic field, everywhere or inside a finite box."""

    def __init__(self, field_vector, bounds: BoundingBox = None):
        super().__init__(bounds)
        self.field = np.array(field_vector, dtype=np.float64)

    def evaluate(self, position, time):
        if not self._bounds.is_infinite and not self._bounds.contains(position):
            return FieldValue()
        return FieldValue(np.zeros(3), self.field.copy())


class _CylindricalSource(FieldSource):
    """Source confined to a cylinder of radius ``aperture`` and length ``length`` along z."""

    def __init__(self, center, length: float, aperture: float):
        if length <= 0:
            raise ValueError(f"Field region length must be positive, got {length}")
        if aperture <= 0:
            raise ValueError(f"Field region aperture must be positive, got {aperture}")
        self.center = np.array(center, dtype=np.float64)
        self.length = float(length)
        self.aperture = float(aperture)
        super().__init__(BoundingBox.around(self.center, (aperture, aperture, length / 2.0)))

    def _local_offset(self, position):
        """Offset from the center, or None when outside the cylinder."""
        d = np.asarray(position, dtype=np.float64) - self.center
        if math.hypot(d[0], d[1]) > self.aperture or abs(d[2]) > self.length / 2.0:
            return None
        return d


class QuadrupoleField(_CylindricalSource):
    """Linear quadrupole field B = (G y', G x', 0) inside its cylinder."""

    def __init__(self, gradient: float, center=(0.0, 0.0, 0.0), length: float = 1.0,
                 aperture: float = 0.1):
        super().__init__(center, length, aperture)
        self.gradient = float(gradient)

    def evaluate(self, position, time):
        d = self._local_offset(position)
        if d is None:
            return FieldValue()
        return FieldValue(np.zeros(3), np.array([self.gradient * d[1], self.gradient * d[0], 0.0]))


class RFField(_CylindricalSource):
    """Longitudinal RF field Ez = (V/L) cos(omega t + phase) inside its cylinder."""

    def __init__(self, voltage: float, frequency: float, phase: float = 0.0,
                 center=(0.0, 0.0, 0.0), length: float = 0.5, aperture: float = 0.1):
        super().__init__(center, length, aperture)
        self.voltage = float(voltage)
        self.phase = float(phase)
        self._frequency = float(frequency)
        self._omega = const.two_pi * self._frequency

    @property
    def frequency(self) -> float:
        return self._frequency

    @property
    def angular_frequency(self) -> float:
        return self._omega

    def set_frequency(self, frequency: float) -> None:
        self._frequency = float(frequency)
        self._omega = const.two_pi * self._frequency

    def evaluate(self, position, time):
        if self._local_offset(position) is None:
            return FieldValue()
        ez = (self.voltage / self.length) * math.cos(self._omega * time + self.phase)
        return FieldValue(np.array([0.0, 0.0, ez]), np.zeros(3))


class EMFieldManager:
    """Sums enabled, in-range field sources at a query point."""

    def __init__(self):
        self._sources: List[FieldSource] = []

    def add_source(self, source: FieldSource) -> None:
        self._sources.append(source)

    def remove_source(self, source: FieldSource) -> None:
        """Remove every reference to ``source`` (identity match)."""
        self._sources = [s for s in self._sources if s is not source]

    def clear(self) -> None:
        self._sources.clear()

    @property
    def sources(self) -> List[FieldSource]:
        return list(self._sources)

    @property
    def source_count(self) -> int:
        return len(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def evaluate(self, position, time: float) -> FieldValue:
        E = np.zeros(3)
        B = np.zeros(3)
        for source in self._sources:
            if source.enabled and source.contains(position):
                value = source.evaluate(position, time)
                E += value.E
                B += value.B
        return FieldValue(E, B)
