"""
Test suite for the lattice: layout, lookup, mutation and builders.
"""

import logging

import matplotlib.pyplot as plt
import numpy as np
import pytest

from pasim import constants as const
from pasim.machine_portal.bend import Dipole
from pasim.machine_portal.drift import BeamPipe
from pasim.machine_portal.element import Component, ComponentType
from pasim.machine_portal.lattice import (
    FODOCellParams, Lattice, LatticeType, create_component_by_type
)
from pasim.machine_portal.monitor import Detector
from pasim.machine_portal.quadrupole import Quadrupole
from pasim.physics.fields import EMFieldManager


def assert_contiguous(lattice):
    s = 0.0
    for component in lattice.components:
        assert component.s_position == pytest.approx(s)
        s += component.length
    assert lattice.total_length == pytest.approx(s)


class TestFactory:
    """Test component creation from type tags."""

    def test_known_types(self):
        dipole = create_component_by_type("Dipole", "B1", 1.0, field=0.5)
        assert isinstance(dipole, Dipole)
        assert dipole.field == 0.5
        detector = create_component_by_type(ComponentType.DETECTOR, "M1")
        assert isinstance(detector, Detector)
        assert detector.length == 0.001
        assert create_component_by_type("Quadrupole", "Q1").length == 1.0

    def test_custom_type(self):
        custom = create_component_by_type("Custom", "C1", 2.0)
        assert type(custom) is Component
        assert custom.type == ComponentType.CUSTOM
        assert custom.field_source() is None

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            create_component_by_type("Wiggler", "W1", 1.0)


class TestFODOCell:
    """Test the FODO cell builder."""

    def test_single_cell_layout(self, fodo_lattice):
        assert [c.name for c in fodo_lattice] == ["FODO_QF", "FODO_D1", "FODO_QD", "FODO_D2"]
        assert fodo_lattice.total_length == pytest.approx(10.0)
        qf, d1, qd, d2 = fodo_lattice.components
        assert qf.is_focusing and not qd.is_focusing
        assert qf.gradient == 50.0 and qd.gradient == -50.0
        assert d1.length == pytest.approx(4.5)
        assert [c.s_position for c in fodo_lattice] == pytest.approx([0.0, 0.5, 5.0, 5.5])
        assert fodo_lattice.quadrupole_count == 2
        assert fodo_lattice.dipole_count == 0

    def test_effective_drift_length(self):
        assert FODOCellParams().effective_drift_length() == pytest.approx(4.5)
        assert FODOCellParams(drift_length=3.0).effective_drift_length() == 3.0

    def test_non_positive_drift_warns(self, caplog):
        lattice = Lattice(name="short")
        with caplog.at_level(logging.WARNING, logger="pasim.machine_portal.lattice"):
            lattice.build_fodo_cell(FODOCellParams(cell_length=1.0, quad_length=0.5))
        assert "non-positive drift" in caplog.text
        assert lattice.total_length == pytest.approx(1.0)

    def test_multi_cell_names(self):
        lattice = Lattice(name="fodo")
        lattice.build_fodo_lattice(FODOCellParams(), 3)
        assert len(lattice) == 12
        assert lattice.total_length == pytest.approx(30.0)
        assert lattice.get(4).name == "FODO_2_QF"
        assert lattice.components[-1].name == "FODO_3_D2"
        assert_contiguous(lattice)


class TestLookup:
    """Test component lookup along s."""

    def test_component_at_s(self, fodo_lattice):
        assert fodo_lattice.component_at_s(0.0).name == "FODO_QF"
        assert fodo_lattice.component_at_s(0.5).name == "FODO_D1"
        assert fodo_lattice.component_at_s(5.2).name == "FODO_QD"
        assert fodo_lattice.component_at_s(9.99).name == "FODO_D2"

    def test_lookup_round_trip(self, fodo_lattice):
        for component in fodo_lattice:
            assert fodo_lattice.component_at_s(component.s_position) is component

    def test_linear_out_of_range(self, fodo_lattice):
        assert fodo_lattice.component_at_s(10.0) is None
        assert fodo_lattice.component_at_s(-0.1) is None

    def test_circular_wraps(self, fodo_lattice):
        fodo_lattice.close_ring()
        assert fodo_lattice.is_circular
        assert fodo_lattice.component_at_s(10.0).name == "FODO_QF"
        assert fodo_lattice.component_at_s(12.0).name == "FODO_D1"
        assert fodo_lattice.component_at_s(-1.0).name == "FODO_D2"
        assert fodo_lattice.component_at_s(-14.8).name == "FODO_QD"

    def test_empty_lattice(self):
        lattice = Lattice(name="empty", lattice_type="circular")
        assert lattice.lattice_type == LatticeType.CIRCULAR
        assert lattice.total_length == 0.0
        assert lattice.component_at_s(1.0) is None

    def test_get(self, fodo_lattice):
        assert fodo_lattice.get("FODO_QD") is fodo_lattice.components[2]
        assert fodo_lattice.get("missing") is None
        assert fodo_lattice.get(7) is None


class TestMutation:
    """Test insertion and removal keep the layout contiguous."""

    def test_construct_with_components(self):
        lattice = Lattice("line", components=[BeamPipe(name="D1", length=2.0),
                                              Quadrupole(name="Q1", length=0.5, gradient=1.0)])
        assert lattice.components[1].s_position == pytest.approx(2.0)
        assert lattice.total_length == pytest.approx(2.5)

    def test_invalid_construction(self):
        with pytest.raises(ValueError):
            Lattice(name="")
        with pytest.raises(TypeError):
            Lattice("line", components=["not a component"])

    def test_insert(self, fodo_lattice):
        fodo_lattice.insert_component(1, Detector(name="BPM"))
        assert fodo_lattice.components[1].name == "BPM"
        assert fodo_lattice.total_length == pytest.approx(10.001)
        assert_contiguous(fodo_lattice)
        fodo_lattice.insert_component(len(fodo_lattice), BeamPipe(name="END", length=1.0))
        assert fodo_lattice.components[-1].name == "END"

    def test_insert_out_of_range(self, fodo_lattice):
        with pytest.raises(IndexError):
            fodo_lattice.insert_component(5, BeamPipe(name="X", length=1.0))
        with pytest.raises(IndexError):
            fodo_lattice.insert_component(-1, BeamPipe(name="X", length=1.0))
        assert len(fodo_lattice) == 4

    def test_remove_by_index(self, fodo_lattice):
        assert fodo_lattice.remove_component(0) == 1
        assert fodo_lattice.components[0].name == "FODO_D1"
        assert fodo_lattice.total_length == pytest.approx(9.5)
        assert_contiguous(fodo_lattice)
        with pytest.raises(IndexError):
            fodo_lattice.remove_component(3)

    def test_remove_by_name_removes_all_matches(self, fodo_lattice):
        fodo_lattice.add_component(Quadrupole(name="FODO_QF", length=0.5, gradient=50.0))
        assert fodo_lattice.remove_component("FODO_QF") == 2
        assert [c.name for c in fodo_lattice] == ["FODO_D1", "FODO_QD", "FODO_D2"]
        assert fodo_lattice.remove_component("missing") == 0
        assert_contiguous(fodo_lattice)

    def test_clear_resets_drift_numbering(self):
        lattice = Lattice(name="line")
        assert lattice.add_drift(1.0).name == "Drift_1"
        assert lattice.add_drift(2.0).name == "Drift_2"
        assert lattice.add_drift(1.0, "named").name == "named"
        lattice.clear()
        assert len(lattice) == 0 and lattice.total_length == 0.0
        assert lattice.add_drift(1.0).name == "Drift_1"

    def test_add_rejects_non_component(self, fodo_lattice):
        with pytest.raises(TypeError):
            fodo_lattice.add_component("QF")


class TestFieldsAndOptics:
    """Test field population and optics summaries."""

    def test_populate_field_manager(self, fodo_lattice):
        fodo_lattice.add_component(Dipole(name="B1", length=1.0, field=1.0))
        fodo_lattice.add_component(Detector(name="BPM"))
        manager = EMFieldManager()
        assert fodo_lattice.populate_field_manager(manager) == 3
        assert manager.source_count == 3
        assert manager.sources[0] is fodo_lattice.components[0].field_source()

    def test_total_bending_angle(self):
        lattice = Lattice(name="arc")
        lattice.add_component(Dipole(name="B1", length=2.0, field=1.0))
        lattice.add_drift(1.0)
        lattice.add_component(Dipole(name="B2", length=2.0, field=-1.0))
        p = 1e-18
        assert lattice.total_bending_angle(p) == pytest.approx(2 * const.e * 2.0 / p)

    def test_align_components(self, fodo_lattice):
        fodo_lattice.align_components(origin=(1.0, 0.0, 0.0))
        for component in fodo_lattice:
            np.testing.assert_allclose(component.position, [1.0, 0.0, component.s_position])
        quad_center = fodo_lattice.components[2].field_source().center
        np.testing.assert_allclose(quad_center, [1.0, 0.0, 5.25])

    def test_components_of_type(self, fodo_lattice):
        assert [c.name for c in fodo_lattice.components_of_type("BeamPipe")] == ["FODO_D1", "FODO_D2"]
        assert fodo_lattice.rf_cavities() == []
        assert fodo_lattice.detectors() == []


class TestPlotting:
    """Test beamline plotting."""

    def test_plot_beamline(self, fodo_lattice):
        fig, ax = plt.subplots()
        s_end = fodo_lattice.plot_beamline(ax, normalized_strength=50.0)
        assert s_end == pytest.approx(10.0)
        assert ax.get_title() == "Beamline view: fodo"
        assert len(ax.patches) == 2
        plt.close(fig)
