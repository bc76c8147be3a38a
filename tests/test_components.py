"""
Test suite for beamline components: apertures, transforms and field providers.
"""

import math

import matplotlib.pyplot as plt
import numpy as np
import pytest
from pydantic import ValidationError

from pasim import constants as const
from pasim.machine_portal.bend import Dipole
from pasim.machine_portal.drift import BeamPipe
from pasim.machine_portal.element import Aperture, ApertureShape, Component, ComponentType
from pasim.machine_portal.monitor import Detector
from pasim.machine_portal.quadrupole import Quadrupole
from pasim.machine_portal.rfcavity import RFCavity
from pasim.physics.fields import QuadrupoleField, RFField, UniformBField

# 90 degree rotation about +y, (w, x, y, z)
ROT_Y_90 = (math.cos(math.pi / 4), 0.0, math.sin(math.pi / 4), 0.0)


class TestAperture:
    """Test aperture membership."""

    def test_default_is_circular(self):
        ap = Aperture()
        assert ap.shape == ApertureShape.CIRCULAR
        assert ap.radius_x == 0.05 and ap.radius_y == 0.05

    def test_circular(self):
        ap = Aperture.circular(0.05)
        assert ap.contains(0.03, 0.04)
        assert not ap.contains(0.04, 0.04)

    def test_elliptical(self):
        ap = Aperture.elliptical(0.1, 0.02)
        assert ap.contains(0.09, 0.0)
        assert not ap.contains(0.0, 0.03)

    def test_rectangular(self):
        ap = Aperture.rectangular(0.1, 0.02)
        assert ap.contains(0.1, 0.02)
        assert not ap.contains(0.1, 0.021)

    def test_non_positive_radius_rejected(self):
        with pytest.raises(ValidationError):
            Aperture.circular(-0.01)
        with pytest.raises(ValidationError):
            Aperture(radius_x=0.0)


class TestComponentBase:
    """Test common component behaviour."""

    def test_validation(self):
        with pytest.raises(ValidationError):
            BeamPipe(name="", length=1.0)
        with pytest.raises(ValidationError):
            BeamPipe(name="pipe", length=-1.0)
        with pytest.raises(ValidationError):
            BeamPipe(name="pipe", length=1.0, rotation=(2.0, 0.0, 0.0, 0.0))

    def test_type_tags(self):
        assert BeamPipe(name="a", length=1).type == ComponentType.BEAM_PIPE
        assert Dipole(name="b", length=1).type == ComponentType.DIPOLE
        assert Quadrupole(name="q", length=1).type == ComponentType.QUADRUPOLE
        assert RFCavity(name="rf", length=1).type == ComponentType.RF_CAVITY
        assert Detector(name="d").type == ComponentType.DETECTOR
        assert Component(name="c").type == ComponentType.CUSTOM
        with pytest.raises(ValidationError):
            Dipole(name="b", length=1, type=ComponentType.QUADRUPOLE)

    def test_contains_s_half_open(self):
        pipe = BeamPipe(name="pipe", length=2.0, s_position=3.0)
        assert pipe.contains_s(3.0)
        assert pipe.contains_s(4.999)
        assert not pipe.contains_s(5.0)
        assert pipe.exit_s_position == 5.0

    def test_identity_transform(self):
        pipe = BeamPipe(name="pipe", length=1.0, position=[1.0, 2.0, 3.0])
        np.testing.assert_allclose(pipe.to_local([1.5, 2.0, 3.5]), [0.5, 0.0, 0.5])
        np.testing.assert_allclose(pipe.to_global([0.5, 0.0, 0.5]), [1.5, 2.0, 3.5])

    def test_rotated_transform_round_trip(self):
        pipe = BeamPipe(name="pipe", length=1.0, position=[0.0, 0.0, 1.0], rotation=ROT_Y_90)
        # local +z maps to global +x
        np.testing.assert_allclose(pipe.to_global([0.0, 0.0, 1.0]), [1.0, 0.0, 1.0], atol=1e-12)
        point = np.array([0.3, -0.2, 0.7])
        np.testing.assert_allclose(pipe.to_global(pipe.to_local(point)), point, atol=1e-12)

    def test_is_inside_aperture(self):
        pipe = BeamPipe(name="pipe", length=2.0, aperture=Aperture.circular(0.05))
        assert pipe.is_inside_aperture([0.0, 0.0, 0.0])
        assert pipe.is_inside_aperture([0.03, 0.04, 2.0])
        assert not pipe.is_inside_aperture([0.0, 0.0, 2.01])
        assert not pipe.is_inside_aperture([0.0, 0.0, -0.01])
        assert not pipe.is_inside_aperture([0.06, 0.0, 1.0])

    def test_is_inside_aperture_rotated(self):
        pipe = BeamPipe(name="pipe", length=2.0, rotation=ROT_Y_90)
        assert pipe.is_inside_aperture([1.0, 0.0, 0.0])
        assert not pipe.is_inside_aperture([0.0, 0.0, 1.0])

    def test_field_free_components(self):
        assert BeamPipe(name="pipe", length=1.0).field_source() is None
        assert Detector(name="det").field_source() is None


class TestDipole:
    """Test the dipole field provider and optics helpers."""

    def test_field_source(self):
        dipole = Dipole(name="B1", length=2.0, field=1.5, aperture=Aperture.circular(0.04))
        src = dipole.field_source()
        assert isinstance(src, UniformBField)
        np.testing.assert_array_equal(src.field, [0.0, 1.5, 0.0])
        box = src.bounding_box()
        np.testing.assert_allclose(box.min, [-0.04, -0.04, 0.0])
        np.testing.assert_allclose(box.max, [0.04, 0.04, 2.0])
        assert dipole.field_source() is src

    def test_field_change_invalidates_cache(self):
        dipole = Dipole(name="B1", length=2.0, field=1.0)
        first = dipole.field_source()
        dipole.field = 2.0
        second = dipole.field_source()
        assert second is not first
        assert second.field[1] == 2.0

    def test_s_position_does_not_invalidate_cache(self):
        dipole = Dipole(name="B1", length=2.0, field=1.0)
        src = dipole.field_source()
        dipole.s_position = 10.0
        assert dipole.field_source() is src

    def test_bending(self):
        dipole = Dipole(name="B1", length=3.0, field=-2.0)
        p = 1e-18
        assert dipole.bending_angle(p) == pytest.approx(const.e * 2.0 * 3.0 / p)
        assert dipole.bending_radius(p) == pytest.approx(p / (const.e * 2.0))
        assert Dipole(name="B0", length=1.0).bending_radius(p) == math.inf

    def test_strong_field_warns(self):
        with pytest.warns(UserWarning):
            Dipole(name="B1", length=1.0, field=25.0)


class TestQuadrupole:
    """Test quadrupole strength and field provider."""

    def test_focusing_and_k1(self):
        qf = Quadrupole(name="QF", length=0.5, gradient=50.0)
        qd = Quadrupole(name="QD", length=0.5, gradient=-50.0)
        assert qf.is_focusing and not qd.is_focusing
        assert qf.k1(1e-18) == pytest.approx(const.e * 50.0 / 1e-18)

    def test_field_source_centered_on_midpoint(self):
        quad = Quadrupole(name="Q", length=0.5, gradient=10.0, position=[0.0, 0.0, 4.0],
                          aperture=Aperture.circular(0.03))
        src = quad.field_source()
        assert isinstance(src, QuadrupoleField)
        np.testing.assert_allclose(src.center, [0.0, 0.0, 4.25])
        assert src.aperture == 0.03
        quad.gradient = 20.0
        assert quad.field_source().gradient == 20.0

    def test_length_must_be_positive(self):
        with pytest.raises(ValidationError):
            Quadrupole(name="Q", length=0.0, gradient=1.0)
        quad = Quadrupole(name="Q", gradient=5.0)
        assert quad.length == 1.0
        assert quad.field_source().length == 1.0
        with pytest.raises(ValidationError):
            quad.length = -0.5


class TestRFCavity:
    """Test RF cavity parameters and field provider."""

    def test_energy_gain(self):
        rf = RFCavity(name="RF", length=0.5, voltage=2e6, frequency=5e8)
        assert rf.energy_gain(0.0) == pytest.approx(const.e * 2e6)
        assert rf.energy_gain(math.pi / 2) == pytest.approx(0.0, abs=1e-25)

    def test_field_source_tracks_parameters(self):
        rf = RFCavity(name="RF", length=0.5, voltage=2e6, frequency=5e8, phase=0.1)
        src = rf.field_source()
        assert isinstance(src, RFField)
        assert src.angular_frequency == pytest.approx(2 * math.pi * 5e8)
        rf.frequency = 1e9
        assert rf.field_source().frequency == 1e9
        rf.voltage = 1e6
        assert rf.field_source().voltage == 1e6

    def test_negative_frequency_rejected(self):
        with pytest.raises(ValidationError):
            RFCavity(name="RF", length=0.5, frequency=-1.0)

    def test_length_must_be_positive(self):
        with pytest.raises(ValidationError):
            RFCavity(name="RF", length=0.0, voltage=1e6)
        assert RFCavity(name="RF", voltage=1e6, frequency=5e8).field_source().length == 0.5


class TestDetector:
    """Test detector hit recording."""

    def test_hits(self):
        det = Detector(name="BPM1")
        assert det.length == 0.001
        hit = det.record_hit(1e-9, [0.0, 0.001, 5.0], [0.0, 0.0, 1e-18], particle_id=7)
        assert hit.particle_id == 7
        assert det.hit_count == 1
        np.testing.assert_array_equal(det.hits[0].position, [0.0, 0.001, 5.0])
        det.clear_hits()
        assert det.hit_count == 0
        assert det.hits == []


class TestPlotting:
    """Test beamline plotting of components."""

    def test_plot_in_beamline_returns_end(self):
        fig, ax = plt.subplots()
        s = 0.0
        for component in (Quadrupole(name="Q", length=0.5, gradient=-1.0), BeamPipe(name="D", length=2.0),
                          Dipole(name="B", length=1.0, field=1.0), RFCavity(name="RF", length=0.5),
                          Detector(name="M")):
            s = component.plot_in_beamline(ax, s)
        assert s == pytest.approx(4.001)
        plt.close(fig)
