from typing import Iterator, Sequence, Tuple
import logging

import numpy as np
from monty.json import MSONable

from MotorTransportTools.inputs.network_characteristics import (
    NetworkCharacteristics)
from MotorTransportTools.util.constants import ANGLE_RANGE, ENTROPY_BINS
from MotorTransportTools.util.geometry import as_segment_array

logger = logging.getLogger(__name__)


def structural_entropy(angles: Sequence[float] | np.ndarray,
                       bins: int = ENTROPY_BINS,
                       value_range: Tuple[float, float] | None = None
                       ) -> float:
    """
    Shannon entropy (in nats) of the histogram of a sample of angles.

    The probability of each bin is its count divided by the total count and
    the entropy is -sum(p * ln(p)) over the non-empty bins.

    Args:
        angles (Sequence[float], np.ndarray): The sample
        bins (int): The number of equal width bins. Defaults to 100.
        value_range (Tuple[float, float], None): The interval spanned by the
            bins. If None, the bins span the observed range of the sample.

    Returns:
        float: The entropy, which is always >= 0. A sample in which every
            value is identical has entropy 0.
    """
    angles = np.asarray(angles, dtype=float).ravel()
    if angles.size == 0:
        raise ValueError('Cannot compute the entropy of an empty sample')

    if value_range is None:
        lower, upper = angles.min(), angles.max()
        if lower == upper:
            return 0.0
        value_range = (lower, upper)

    counts, _ = np.histogram(angles, bins=bins, range=value_range)
    total = counts.sum()
    if total == 0:
        return 0.0
    p = counts[counts > 0] / total
    return float(max(-np.sum(p * np.log(p)), 0.0))


def wrap_angles(angles: np.ndarray) -> np.ndarray:
    """
    Map angles (radians) onto the interval [-pi, pi).
    """
    return np.mod(np.asarray(angles) + np.pi, 2 * np.pi) - np.pi


def tube_entropy(theta: np.ndarray, psi: np.ndarray) -> float:
    """
    Structural entropy of a single tube, the sum of the entropies of its
    polar and azimuthal bend angles.

    Angles are wrapped onto [-pi, pi) and binned over that fixed interval,
    so that a wider spread of bend angles yields a larger entropy.
    """
    return (structural_entropy(wrap_angles(theta), value_range=ANGLE_RANGE) +
            structural_entropy(wrap_angles(psi), value_range=ANGLE_RANGE))


def draw_tube(start: np.ndarray, theta: np.ndarray, psi: np.ndarray,
              seg_length: float) -> np.ndarray:
    """
    Lay out a chain of segments from a start point and per-segment angles.

    Args:
        start (np.ndarray): The start point of the first segment
        theta (np.ndarray): Polar angle of each segment, in radians
        psi (np.ndarray): Azimuthal angle of each segment, in radians
        seg_length (float): Length of every segment

    Returns:
        np.ndarray: The segments, with shape (len(theta), 2, 3)
    """
    offsets = seg_length * np.stack([
        np.sin(theta) * np.cos(psi),
        np.sin(theta) * np.sin(psi),
        np.cos(theta)
    ], axis=-1)
    ends = start + np.cumsum(offsets, axis=0)
    # each segment starts exactly where the previous one ends
    starts = np.vstack([start[None, :], ends[:-1]])
    return np.stack([starts, ends], axis=1)


class TubeNetwork(MSONable):
    """
    A network of tubes, each made of seg_per_tube connected segments.

    Segments are stored tube by tube, so segment i belongs to tube
    i // seg_per_tube.

    Args:
        segments (np.ndarray): Array of segments with shape (n, 2, 3), or any
            array that can be reshaped to it
        seg_per_tube (int): Number of segments in each tube
        characteristics (NetworkCharacteristics, None): The characteristics
            the network was generated from
        tube_entropies (Sequence[float], None): Structural entropy of each
            tube
    """

    def __init__(self,
                 segments: np.ndarray | list,
                 seg_per_tube: int,
                 characteristics: NetworkCharacteristics | None = None,
                 tube_entropies: Sequence[float] | None = None):
        segments = as_segment_array(segments)
        if len(segments) % seg_per_tube != 0:
            raise ValueError(
                f'{len(segments)} segments cannot be split into tubes of '
                f'{seg_per_tube} segments')
        self.segments = segments
        self.seg_per_tube = seg_per_tube
        self.characteristics = characteristics
        if tube_entropies is None:
            tube_entropies = np.zeros(self.num_tubes)
        self.tube_entropies = np.asarray(tube_entropies, dtype=float)

    @classmethod
    def generate(cls, characteristics: NetworkCharacteristics,
                 rng: np.random.Generator) -> 'TubeNetwork':
        segments, entropies = _draw_network(characteristics, rng)
        network = cls(segments, characteristics.seg_per_tube, characteristics,
                      entropies)
        characteristics.structural_entropy = network.structural_entropy
        return network

    def regenerate(self,
                   rng: np.random.Generator,
                   persistence_length: float | None = None) -> None:
        """
        Redraw every tube in place, optionally with a new persistence length.

        Args:
            rng (np.random.Generator): The random number generator
            persistence_length (float, None): The new persistence length. If
                None, the current persistence length is kept.
        """
        if self.characteristics is None:
            raise RuntimeError(
                'Cannot regenerate a network without its characteristics')
        if persistence_length is not None:
            self.characteristics.persistence_length = persistence_length

        segments, entropies = _draw_network(self.characteristics, rng)
        self.segments = segments
        self.seg_per_tube = self.characteristics.seg_per_tube
        self.tube_entropies = entropies
        self.characteristics.structural_entropy = self.structural_entropy

    @property
    def num_tubes(self) -> int:
        return len(self.segments) // self.seg_per_tube

    @property
    def structural_entropy(self) -> float:
        return float(np.sum(self.tube_entropies))

    def segment(self, index: int) -> np.ndarray:
        if index < 0 or index >= len(self):
            raise IndexError(f'Segment index {index} is out of range for a '
                             f'network of {len(self)} segments')
        return self.segments[index]

    def tube(self, tube_index: int) -> np.ndarray:
        """
        Returns a read-only view of the segments of one tube, with shape
        (seg_per_tube, 2, 3).
        """
        if tube_index < 0 or tube_index >= self.num_tubes:
            raise IndexError(f'Tube index {tube_index} is out of range for a '
                             f'network of {self.num_tubes} tubes')
        view = self.segments[tube_index * self.seg_per_tube:(tube_index + 1) *
                             self.seg_per_tube]
        view.flags.writeable = False
        return view

    def tube_of(self, index: int) -> int:
        return index // self.seg_per_tube

    def tube_segment_indices(self, tube_index: int) -> range:
        start = tube_index * self.seg_per_tube
        return range(start, start + self.seg_per_tube)

    def last_segment_of_tube(self, index: int) -> int:
        """
        Index of the final segment of the tube containing segment index.
        """
        return (self.tube_of(index) + 1) * self.seg_per_tube - 1

    def tubes(self) -> Iterator[np.ndarray]:
        for tube_index in range(self.num_tubes):
            yield self.tube(tube_index)

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self.segments)

    def as_dict(self) -> dict:
        return {
            '@module': self.__class__.__module__,
            '@class': self.__class__.__name__,
            'segments': self.segments.tolist(),
            'seg_per_tube': self.seg_per_tube,
            'characteristics': (None if self.characteristics is None else
                                self.characteristics.as_dict()),
            'tube_entropies': self.tube_entropies.tolist()
        }

    def __str__(self) -> str:
        return (f'TubeNetwork(num_tubes={self.num_tubes}, '
                f'seg_per_tube={self.seg_per_tube})')

    def __repr__(self) -> str:
        return self.__str__()


def _draw_network(characteristics: NetworkCharacteristics,
                  rng: np.random.Generator) -> Tuple[np.ndarray, np.ndarray]:
    num_tubes = characteristics.num_tubes
    seg_per_tube = characteristics.seg_per_tube
    seg_length = characteristics.seg_length
    sigma = np.sqrt(2 * seg_length / characteristics.persistence_length)
    spread = characteristics.volume**(1 / 3)

    segments = np.empty((num_tubes * seg_per_tube, 2, 3))
    entropies = np.zeros(num_tubes)
    for i in range(num_tubes):
        start = rng.normal(0, spread, size=3)
        theta = rng.normal(0, sigma, size=seg_per_tube)
        psi = rng.normal(0, sigma, size=seg_per_tube)

        segments[i * seg_per_tube:(i + 1) * seg_per_tube] = draw_tube(
            start, theta, psi, seg_length)
        entropies[i] = tube_entropy(theta, psi)

    logger.debug(f'Generated {num_tubes} tubes of {seg_per_tube} segments '
                  f'(segment length {seg_length}, angle sigma {sigma:.4f})')
    return segments, entropies


def generate_tube_network(characteristics: NetworkCharacteristics,
                          rng: np.random.Generator) -> TubeNetwork:
    """
    Generate a random network of tubes.

    Each tube starts at a point drawn from a Gaussian with a standard
    deviation of volume^(1/3) along each axis. Every segment then continues
    from the end of the previous one in the direction given by a polar and an
    azimuthal angle, both drawn from N(0, sqrt(2 * seg_length /
    persistence_length)).

    Args:
        characteristics (NetworkCharacteristics): Parameters of the network.
            Its structural_entropy is updated with the new network's entropy.
        rng (np.random.Generator): The random number generator

    Returns:
        TubeNetwork: The generated network
    """
    return TubeNetwork.generate(characteristics, rng)
