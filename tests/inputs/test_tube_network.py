from MotorTransportTools.inputs.network_characteristics import (
    NetworkCharacteristics)
from MotorTransportTools.inputs.tube_network import (TubeNetwork,
                                                     generate_tube_network,
                                                     structural_entropy,
                                                     wrap_angles, draw_tube)

import numpy as np
import pytest


@pytest.fixture
def network():
    characteristics = NetworkCharacteristics()
    return generate_tube_network(characteristics, np.random.default_rng(0))


def test_generate_shape(network):
    assert len(network) == 250
    assert network.segments.shape == (250, 2, 3)
    assert network.num_tubes == 25
    assert network.seg_per_tube == 10
    assert len(network.tube_entropies) == 25


def test_tubes_are_connected(network):
    for tube in network.tubes():
        for i in range(network.seg_per_tube - 1):
            assert np.array_equal(tube[i + 1, 0], tube[i, 1])


def test_segment_length(network):
    lengths = np.linalg.norm(network.segments[:, 1] - network.segments[:, 0],
                             axis=1)
    assert np.allclose(lengths, network.characteristics.seg_length)


def test_generation_is_reproducible():
    characteristics = NetworkCharacteristics(volume=5)
    network_1 = generate_tube_network(characteristics,
                                      np.random.default_rng(12))
    network_2 = generate_tube_network(characteristics,
                                      np.random.default_rng(12))
    network_3 = generate_tube_network(characteristics,
                                      np.random.default_rng(13))
    assert np.array_equal(network_1.segments, network_2.segments)
    assert not np.array_equal(network_1.segments, network_3.segments)


def test_start_point_spread():
    characteristics = NetworkCharacteristics(volume=1000,
                                             mean_tube_density=1,
                                             seg_per_tube=1)
    network = generate_tube_network(characteristics, np.random.default_rng(3))
    starts = network.segments[:, 0]
    assert network.num_tubes == 1000
    # the start points are spread by volume^(1/3) along each axis
    assert 8 < np.std(starts) < 12
    assert np.abs(np.mean(starts)) < 1.5


def test_tube_accessors(network):
    assert network.tube_of(0) == 0
    assert network.tube_of(19) == 1
    assert list(network.tube_segment_indices(2)) == list(range(20, 30))
    assert network.last_segment_of_tube(23) == 29
    assert np.array_equal(network.segment(21), network.segments[21])
    assert np.array_equal(network.tube(2)[1], network.segments[21])

    with pytest.raises(ValueError):
        # tube views are read-only
        network.tube(0)[0, 0, 0] = 1.0
    with pytest.raises(IndexError):
        network.tube(25)
    with pytest.raises(IndexError):
        network.segment(250)


def test_structural_entropy_is_stored(network):
    assert network.structural_entropy == pytest.approx(
        np.sum(network.tube_entropies))
    assert network.characteristics.structural_entropy == pytest.approx(
        network.structural_entropy)
    assert np.all(network.tube_entropies >= 0)


def test_structural_entropy():
    assert structural_entropy([0.3] * 20) == 0
    assert structural_entropy([1.0]) == 0

    # two equally populated bins
    assert structural_entropy([0, 0, 1, 1]) == pytest.approx(np.log(2))

    # every sample in its own bin
    angles = np.linspace(-1, 1, 100)
    assert structural_entropy(angles) == pytest.approx(np.log(100))

    rng = np.random.default_rng(1)
    for _ in range(10):
        assert structural_entropy(rng.normal(0, 1, 50)) >= 0

    with pytest.raises(ValueError):
        structural_entropy([])


def test_structural_entropy_fixed_range():
    # with a fixed range, a tighter sample lands in fewer bins
    rng = np.random.default_rng(2)
    z = rng.normal(0, 1, 200)
    narrow = structural_entropy(0.01 * z, value_range=(-np.pi, np.pi))
    wide = structural_entropy(0.5 * z, value_range=(-np.pi, np.pi))
    assert wide > narrow

    # with the observed range, scaling the sample makes no difference
    assert structural_entropy(0.01 * z) == pytest.approx(
        structural_entropy(0.5 * z))


def test_wrap_angles():
    wrapped = wrap_angles(
        np.array([0, np.pi / 2, 3 * np.pi / 2, -3 * np.pi / 2]))
    assert np.allclose(wrapped, [0, np.pi / 2, -np.pi / 2, np.pi / 2])
    assert np.all(wrapped >= -np.pi)
    assert np.all(wrapped < np.pi)


def test_draw_tube():
    segments = draw_tube(np.zeros(3), np.zeros(3), np.zeros(3), 2.0)
    assert segments.shape == (3, 2, 3)
    assert np.allclose(segments[:, 1, 2], [2, 4, 6])
    assert np.allclose(segments[:, 0, 2], [0, 2, 4])


def test_regenerate(network):
    old_segments = network.segments.copy()
    network.regenerate(np.random.default_rng(5), persistence_length=500)
    assert network.characteristics.persistence_length == 500
    assert network.segments.shape == old_segments.shape
    assert not np.array_equal(network.segments, old_segments)
    assert network.characteristics.structural_entropy == pytest.approx(
        network.structural_entropy)

    with pytest.raises(RuntimeError):
        TubeNetwork(old_segments, 10).regenerate(np.random.default_rng(0))


def test_invalid_network():
    with pytest.raises(ValueError):
        TubeNetwork(np.zeros((7, 2, 3)), 2)


def test_empty_network():
    characteristics = NetworkCharacteristics(mean_tube_density=0)
    network = generate_tube_network(characteristics, np.random.default_rng(0))
    assert len(network) == 0
    assert network.num_tubes == 0
    assert network.structural_entropy == 0


def test_as_dict(network):
    _d = network.as_dict()
    new_network = TubeNetwork.from_dict(_d)
    assert np.allclose(new_network.segments, network.segments)
    assert new_network.seg_per_tube == network.seg_per_tube
    assert isinstance(new_network.characteristics, NetworkCharacteristics)
    assert new_network.structural_entropy == pytest.approx(
        network.structural_entropy)
