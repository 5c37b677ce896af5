import logging

from monty.json import MSONable

from MotorTransportTools.util.constants import (
    DEFAULT_VOLUME, DEFAULT_TUBE_LENGTH, DEFAULT_INTRA_TUBE_ANGLE,
    DEFAULT_INTER_TUBE_ANGLE, DEFAULT_TUBE_DENSITY,
    DEFAULT_PERSISTENCE_LENGTH, DEFAULT_SEG_PER_TUBE,
    SEGMENTS_PER_TUBE_LENGTH)

logger = logging.getLogger(__name__)


class NetworkCharacteristics(MSONable):
    """
    Parameters describing a random network of filaments.

    The segment length, number of segments and number of tubes are derived
    from the configured values and are recomputed whenever one of them
    changes, so that:

        seg_length = mean_tube_length / 5
        num_segments = floor(mean_tube_density * volume)
        num_tubes = floor(num_segments / seg_per_tube)

    Args:
        volume (float, int): Volume of the region holding the network
        mean_tube_length (float, int): Mean length of a tube, in nm
        mean_intra_tube_angle (float, int): Mean angle between the segments
            of a tube, in degrees
        mean_inter_tube_angle (float, int): Mean angle between tubes, in
            degrees
        mean_tube_density (float, int): Number of segments per unit volume
        persistence_length (float, int): Persistence length of the tubes, in
            nm. Stiffer tubes have longer persistence lengths.
        seg_per_tube (int): Number of segments in each tube
        structural_entropy (float): Entropy of the last network generated
            with these characteristics
    """

    def __init__(self,
                 volume: float | int = DEFAULT_VOLUME,
                 mean_tube_length: float | int = DEFAULT_TUBE_LENGTH,
                 mean_intra_tube_angle: float | int = DEFAULT_INTRA_TUBE_ANGLE,
                 mean_inter_tube_angle: float | int = DEFAULT_INTER_TUBE_ANGLE,
                 mean_tube_density: float | int = DEFAULT_TUBE_DENSITY,
                 persistence_length: float | int = DEFAULT_PERSISTENCE_LENGTH,
                 seg_per_tube: int = DEFAULT_SEG_PER_TUBE,
                 structural_entropy: float = 0.0):
        self.volume = volume
        self.mean_tube_length = mean_tube_length
        self.mean_intra_tube_angle = mean_intra_tube_angle
        self.mean_inter_tube_angle = mean_inter_tube_angle
        self.mean_tube_density = mean_tube_density
        self.persistence_length = persistence_length
        self.seg_per_tube = seg_per_tube
        self.structural_entropy = structural_entropy

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float | int):
        if value <= 0:
            raise ValueError(f'Volume must be positive, got {value}')
        self._volume = value

    @property
    def mean_tube_length(self) -> float:
        return self._mean_tube_length

    @mean_tube_length.setter
    def mean_tube_length(self, value: float | int):
        if value <= 0:
            raise ValueError(f'Tube length must be positive, got {value}')
        self._mean_tube_length = value

    @property
    def mean_tube_density(self) -> float:
        return self._mean_tube_density

    @mean_tube_density.setter
    def mean_tube_density(self, value: float | int):
        if value < 0:
            raise ValueError(
                f'Tube density must be non-negative, got {value}')
        self._mean_tube_density = value

    @property
    def persistence_length(self) -> float:
        return self._persistence_length

    @persistence_length.setter
    def persistence_length(self, value: float | int):
        if value <= 0:
            raise ValueError(
                f'Persistence length must be positive, got {value}')
        self._persistence_length = value

    @property
    def seg_per_tube(self) -> int:
        return self._seg_per_tube

    @seg_per_tube.setter
    def seg_per_tube(self, value: int):
        if int(value) != value or value < 1:
            raise ValueError(
                f'Segments per tube must be a positive integer, got {value}')
        self._seg_per_tube = int(value)

    @property
    def seg_length(self) -> float:
        return self.mean_tube_length / SEGMENTS_PER_TUBE_LENGTH

    @property
    def num_segments(self) -> int:
        return int(self.mean_tube_density * self.volume)

    @property
    def num_tubes(self) -> int:
        return self.num_segments // self.seg_per_tube

    def describe(self, level: int = logging.INFO) -> str:
        """
        Log a summary of these characteristics and return it.
        """
        lines = [
            f'volume: {self.volume}',
            f'mean tube length: {self.mean_tube_length}',
            f'mean intra-tube angle: {self.mean_intra_tube_angle}',
            f'mean inter-tube angle: {self.mean_inter_tube_angle}',
            f'mean tube density: {self.mean_tube_density}',
            f'persistence length: {self.persistence_length}',
            f'segments per tube: {self.seg_per_tube}',
            f'segment length: {self.seg_length}',
            f'number of segments: {self.num_segments}',
            f'number of tubes: {self.num_tubes}',
            f'structural entropy: {self.structural_entropy}',
        ]
        summary = '\n'.join(lines)
        logger.log(level, f'Network characteristics\n{summary}')
        return summary

    def as_dict(self) -> dict:
        return {
            '@module': self.__class__.__module__,
            '@class': self.__class__.__name__,
            'volume': self.volume,
            'mean_tube_length': self.mean_tube_length,
            'mean_intra_tube_angle': self.mean_intra_tube_angle,
            'mean_inter_tube_angle': self.mean_inter_tube_angle,
            'mean_tube_density': self.mean_tube_density,
            'persistence_length': self.persistence_length,
            'seg_per_tube': self.seg_per_tube,
            'structural_entropy': self.structural_entropy
        }

    def __str__(self) -> str:
        return (f'NetworkCharacteristics(num_tubes={self.num_tubes}, '
                f'seg_per_tube={self.seg_per_tube}, '
                f'seg_length={self.seg_length}, '
                f'persistence_length={self.persistence_length})')

    def __repr__(self) -> str:
        return self.__str__()
