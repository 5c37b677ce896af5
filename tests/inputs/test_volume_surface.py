from MotorTransportTools.inputs.volume_surface import VolumeSurface, SurfaceKind

import numpy as np
import pytest


@pytest.fixture
def barrier():
    return VolumeSurface([0, 0, 0], 10)


@pytest.fixture
def meter():
    return VolumeSurface([0, 0, 0], 10, kind='flux_meter')


def test_constructor(barrier, meter):
    assert barrier.kind is SurfaceKind.REFLECTIVE_BARRIER
    assert meter.kind is SurfaceKind.FLUX_METER
    assert barrier.contains([0, 0, 10])
    assert not barrier.contains([0, 0, 10.01])

    with pytest.raises(ValueError):
        VolumeSurface([0, 0, 0], 0)
    with pytest.raises(ValueError):
        VolumeSurface([0, 0, 0], 1, kind='sink')


def test_sphere_intersections(barrier):
    # passes through the centre
    points = barrier.sphere_intersections([-20, 0, 0, 20, 0, 0])
    assert len(points) == 2
    assert np.allclose(points[0], [-10, 0, 0])
    assert np.allclose(points[1], [10, 0, 0])

    # leaves the sphere once
    points = barrier.sphere_intersections([0, 0, 0, 0, 20, 0])
    assert len(points) == 1
    assert np.allclose(points[0], [0, 10, 0])

    # tangent
    points = barrier.sphere_intersections([-20, 10, 0, 20, 10, 0])
    assert len(points) == 1
    assert np.allclose(points[0], [0, 10, 0])

    # misses, stays inside, or stops short
    assert barrier.sphere_intersections([-20, 11, 0, 20, 11, 0]) == []
    assert barrier.sphere_intersections([0, 0, 0, 1, 1, 1]) == []
    assert barrier.sphere_intersections([-20, 0, 0, -15, 0, 0]) == []
    assert barrier.sphere_intersections([20, 0, 0, 20, 0, 0]) == []


def test_reflect(barrier):
    # a step straight out along x bounces straight back
    new_position = barrier.reflect([8, 0, 0], [12, 0, 0])
    assert np.allclose(new_position, [8, 0, 0])

    # an oblique step keeps its tangential motion
    new_position = barrier.reflect([0, 9, 0], [2, 11, 0])
    assert barrier.contains(new_position)
    assert new_position[0] > 0

    # steps that stay inside, or start outside, are unchanged
    assert np.allclose(barrier.reflect([0, 0, 0], [1, 2, 3]), [1, 2, 3])
    assert np.allclose(barrier.reflect([20, 0, 0], [30, 0, 0]), [30, 0, 0])


def test_reflect_long_step(barrier):
    # a step far longer than the sphere is still brought back inside
    new_position = barrier.reflect([0, 0, 0], [0, 0, 95])
    assert barrier.contains(new_position)
    assert np.linalg.norm(new_position) <= 10 + 1e-9


def test_reflect_keeps_random_steps_inside(barrier):
    rng = np.random.default_rng(0)
    position = np.zeros(3)
    for _ in range(500):
        position = barrier.reflect(position, position + rng.normal(0, 3, 3))
        assert np.linalg.norm(position) <= 10 + 1e-9


def test_flux_meter_ignores_reflection(meter):
    assert np.allclose(meter.reflect([8, 0, 0], [12, 0, 0]), [12, 0, 0])


def test_record_crossing(meter):
    assert meter.record_crossing([0, 0, 0], [0, 0, 11])
    assert meter.record_crossing([0, 0, 11], [0, 0, 9])
    assert not meter.record_crossing([0, 0, 9], [0, 0, 8])
    assert meter.crossings_out == 1
    assert meter.crossings_in == 1

    new_position = meter.apply([0, 0, 0], [0, 0, 20])
    assert np.allclose(new_position, [0, 0, 20])
    assert meter.crossings_out == 2


def test_vector_angle(barrier):
    assert barrier.vector_angle([0, 0, 0, 1, 0, 0],
                                [1, 0, 0]) == pytest.approx(0)
    assert barrier.vector_angle([0, 0, 0, 0, 1, 0],
                                [1, 0, 0]) == pytest.approx(np.pi / 2)
    assert barrier.vector_angle([0, 0, 0, -1, 0, 0],
                                [1, 0, 0]) == pytest.approx(np.pi)


def test_flux_meter(meter):
    # a radial tube leaving the sphere, and one passing straight through
    network = np.array([[[0, 0, 0], [0, 0, 20]], [[-20, 0, 0], [20, 0, 0]]])
    assert meter.crossing_count(network) == 3

    # the through tube enters and leaves, contributing -1 + 1
    assert meter.flux_meter(network) == pytest.approx(1)

    inward = np.array([[[0, 0, 20], [0, 0, 0]]])
    assert meter.flux_meter(inward) == pytest.approx(-1)

    # a tangent crossing contributes nothing
    tangent = np.array([[[-20, 10, 0], [20, 10, 0]]])
    assert meter.flux_meter(tangent) == pytest.approx(0, abs=1e-9)


def test_as_dict(meter):
    meter.record_crossing([0, 0, 0], [0, 0, 11])
    _d = meter.as_dict()
    assert _d['kind'] == 'flux_meter'

    new_meter = VolumeSurface.from_dict(_d)
    assert new_meter.kind is SurfaceKind.FLUX_METER
    assert new_meter.crossings_out == 1
    assert np.allclose(new_meter.center, [0, 0, 0])


def test_exit_point(barrier):
    assert np.allclose(barrier.exit_point([0, 0, 0], [0, 0, 20]), [0, 0, 10])
    assert barrier.contains(barrier.exit_point([0, 0, 5], [0, 0, 20]))

    # moves that stay inside, or start outside, do not exit
    assert barrier.exit_point([0, 0, 0], [0, 0, 5]) is None
    assert barrier.exit_point([0, 0, 20], [0, 0, 30]) is None
