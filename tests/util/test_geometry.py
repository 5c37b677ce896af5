from MotorTransportTools.util.geometry import (
    InvalidArgumentError, point, segment, as_segment, get_segment, distance,
    cross_product, bounding_box, in_bounding_box, interpolate,
    segment_length, spherical_offset, vector_angle, line_distances)

import numpy as np
import pytest


def test_point_and_segment():
    p = point(1, 2, 3)
    assert p.shape == (3, )
    assert np.allclose(p, [1, 2, 3])

    s = segment([0, 0, 0], [1, 1, 1])
    assert s.shape == (2, 3)
    assert np.allclose(s[1], [1, 1, 1])

    with pytest.raises(InvalidArgumentError):
        segment([0, 0], [1, 1, 1])


def test_get_segment():
    segments = np.arange(12, dtype=float).reshape(2, 6)
    assert np.allclose(get_segment(segments, 1), [[6, 7, 8], [9, 10, 11]])

    with pytest.raises(IndexError):
        get_segment(segments, 2)


def test_point_distance():
    assert distance([0, 0, 0], [3, 4, 0]) == pytest.approx(5)
    assert distance([1, 1, 1], [1, 1, 1]) == pytest.approx(0)


def test_line_distance():
    # the origin lies on the line through (-1, -1, -1) and (2, 2, 2)
    assert distance([0, 0, 0], [-1, -1, -1, 2, 2, 2]) == pytest.approx(0)

    # distance is measured to the infinite line, not the segment
    assert distance([0, 5, 0], [1, 0, 0, 2, 0, 0]) == pytest.approx(5)
    assert distance([0, 3, 4], segment([0, 0, 0],
                                       [1, 0, 0])) == pytest.approx(5)

    # a zero length segment behaves like a point
    assert distance([0, 3, 4], [0, 0, 0, 0, 0, 0]) == pytest.approx(5)


def test_points_on_segment_have_zero_distance():
    rng = np.random.default_rng(4)
    for _ in range(20):
        s = rng.normal(0, 10, size=(2, 3))
        for t in np.linspace(0, 1, 5):
            assert distance(interpolate(s, t), s) == pytest.approx(0,
                                                                   abs=1e-9)


def test_distance_invalid_argument():
    with pytest.raises(InvalidArgumentError):
        distance([0, 0, 0], [1, 2])

    with pytest.raises(InvalidArgumentError):
        distance([0, 0, 0], [1, 2, 3, 4])

    with pytest.raises(InvalidArgumentError):
        distance([0, 0], [1, 2, 3])

    # it is still a ValueError
    with pytest.raises(ValueError):
        distance([0, 0, 0], np.zeros(9))

    # six components laid out as three pairs are not a segment
    with pytest.raises(InvalidArgumentError):
        distance([0, 0, 0], np.arange(6).reshape(3, 2))
    with pytest.raises(InvalidArgumentError):
        as_segment(np.zeros((1, 6)))


def test_line_distances_matches_distance():
    rng = np.random.default_rng(0)
    segments = rng.normal(0, 5, size=(10, 2, 3))
    segments[3, 1] = segments[3, 0]
    pt = rng.normal(0, 5, size=3)

    expected = [distance(pt, s) for s in segments]
    assert np.allclose(line_distances(pt, segments), expected)


def test_cross_product():
    assert np.allclose(cross_product([1, 0, 0], [0, 1, 0]), [0, 0, 1])
    assert np.allclose(cross_product([0, 1, 0], [1, 0, 0]), [0, 0, -1])

    with pytest.raises(InvalidArgumentError):
        cross_product([1, 0], [0, 1])


def test_bounding_box():
    s = segment([2, -1, 0], [0, 3, 0])
    lower, upper = bounding_box(s)
    assert np.allclose(lower, [0, -1, 0])
    assert np.allclose(upper, [2, 3, 0])

    assert in_bounding_box([1, 1, 0], s)
    assert in_bounding_box([0, 3, 0], s)
    assert not in_bounding_box([1, 1, 0.1], s)


def test_segment_helpers():
    s = segment([0, 0, 0], [3, 4, 0])
    assert segment_length(s) == pytest.approx(5)
    assert np.allclose(interpolate(s, 0.5), [1.5, 2, 0])

    assert np.allclose(spherical_offset(2, 0, 0), [0, 0, 2])
    assert np.allclose(spherical_offset(1, np.pi / 2, np.pi / 2), [0, 1, 0])


def test_vector_angle():
    assert vector_angle([1, 0, 0], [0, 1, 0]) == pytest.approx(np.pi / 2)
    assert vector_angle([1, 0, 0], [1, 0, 0]) == pytest.approx(0)
    assert vector_angle([1, 0, 0], [-2, 0, 0]) == pytest.approx(np.pi)
