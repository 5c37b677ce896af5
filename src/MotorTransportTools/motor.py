from enum import Enum
from typing import List, Sequence, Tuple
import logging

import numpy as np
from monty.json import MSONable

from MotorTransportTools.analysis.overlap import find_nearest_segment
from MotorTransportTools.inputs.volume_surface import (SurfaceKind,
                                                       VolumeSurface)
from MotorTransportTools.util.constants import (DIFFUSIVITY, BINDING_RADIUS,
                                                MOVEMENT_RATE, TIME_PERIOD,
                                                FLOAT_STEPS, MAX_ITERATIONS)
from MotorTransportTools.util.geometry import (as_point, as_segment_array,
                                               distance)

logger = logging.getLogger(__name__)


class MotorState(Enum):
    UNBOUND = 'unbound'
    BOUND = 'bound'
    ARRIVED = 'arrived'
    TIMED_OUT = 'timed_out'


class TransportResult(MSONable):
    """
    Outcome of a single transport run.

    Args:
        state (MotorState, str): The final state of the motor
        elapsed_time (float): Simulated time taken, in s
        positions (np.ndarray, list): Every position visited, with shape
            (n, 3)
        iterations (int): Number of float/walk cycles performed
        bound_segments (List[int]): Index of every segment the motor bound
            to, in order
        start_point (Sequence[float], None): The starting point
        destination (Sequence[Sequence[float]], None): The destination box,
            as [lower_left, upper_right]
    """

    def __init__(self,
                 state: MotorState | str,
                 elapsed_time: float,
                 positions: np.ndarray | list,
                 iterations: int = 0,
                 bound_segments: List[int] | None = None,
                 start_point: Sequence[float] | None = None,
                 destination: Sequence[Sequence[float]] | None = None):
        self.state = MotorState(state)
        self.elapsed_time = elapsed_time
        self.positions = np.asarray(positions, dtype=float).reshape(-1, 3)
        self.iterations = iterations
        self.bound_segments = [] if bound_segments is None else list(
            bound_segments)
        self.start_point = start_point
        self.destination = destination

    @property
    def arrived(self) -> bool:
        return self.state is MotorState.ARRIVED

    @property
    def final_position(self) -> np.ndarray:
        return self.positions[-1]

    def as_dict(self) -> dict:
        return {
            '@module': self.__class__.__module__,
            '@class': self.__class__.__name__,
            'state': self.state.value,
            'elapsed_time': self.elapsed_time,
            'positions': self.positions.tolist(),
            'iterations': self.iterations,
            'bound_segments': self.bound_segments,
            'start_point': (None if self.start_point is None else list(
                np.asarray(self.start_point, dtype=float).tolist())),
            'destination': (None if self.destination is None else
                            np.asarray(self.destination,
                                       dtype=float).tolist())
        }

    def __str__(self) -> str:
        return (f'TransportResult(state={self.state.value}, '
                f'elapsed_time={self.elapsed_time}, '
                f'positions={len(self.positions)})')

    def __repr__(self) -> str:
        return self.__str__()


class Motor():
    """
    A molecular motor that diffuses through the volume, binds to nearby
    filaments and walks along them towards their end.

    The motor starts unbound at its starting point. Each float phase moves it
    by Brownian motion until it comes within the binding radius of a segment,
    at which point it binds and walks to the end of that segment's tube.
    Floating and walking alternate until the motor reaches its destination
    box or runs out of iterations.

    Args:
        start_point (Sequence[float]): Where the motor starts
        destination (Tuple[Sequence[float], Sequence[float]], None): The
            destination box given by two opposite corners
        diffusivity (float): Diffusion coefficient, in nm^2/s
        binding_radius (float): Largest distance to a filament at which the
            motor can bind, in nm
        movement_rate (float): Walking speed along a filament, in nm/s
        binding_probability (float): Probability that a motor within the
            binding radius actually binds
        float_steps (int): Brownian steps in one float phase
        max_iterations (int): Float/walk cycles before the motor times out
        surfaces (List[VolumeSurface], None): Surfaces that act on the
            motor's diffusive motion
        bounding_box (Tuple[Sequence[float], Sequence[float]], None): A box
            given by two opposite corners that the motor reflects off while
            diffusing
    """

    def __init__(self,
                 start_point: Sequence[float] = (0, 0, 0),
                 destination: Tuple[Sequence[float], Sequence[float]]
                 | None = None,
                 diffusivity: float = DIFFUSIVITY,
                 binding_radius: float = BINDING_RADIUS,
                 movement_rate: float = MOVEMENT_RATE,
                 binding_probability: float = 1.0,
                 float_steps: int = FLOAT_STEPS,
                 max_iterations: int = MAX_ITERATIONS,
                 surfaces: List[VolumeSurface] | None = None,
                 bounding_box: Tuple[Sequence[float], Sequence[float]]
                 | None = None):
        if diffusivity < 0:
            raise ValueError(
                f'Diffusivity must be non-negative, got {diffusivity}')
        if movement_rate <= 0:
            raise ValueError(
                f'Movement rate must be positive, got {movement_rate}')
        if not 0 <= binding_probability <= 1:
            raise ValueError('Binding probability must be between 0 and 1, '
                             f'got {binding_probability}')

        self.diffusivity = diffusivity
        self.binding_radius = binding_radius
        self.movement_rate = movement_rate
        self.binding_probability = binding_probability
        self.float_steps = float_steps
        self.max_iterations = max_iterations
        self.surfaces = [] if surfaces is None else surfaces

        self.destination = None
        if destination is not None:
            self.set_destination_volume(*destination)
        self.bounding_box = None
        if bounding_box is not None:
            self.set_bounding_box(*bounding_box)
        self.set_starting_point(start_point)

    def set_starting_point(self, start_point: Sequence[float]) -> None:
        """
        Place the motor at a new starting point, clearing its history.
        """
        self.start_point = as_point(start_point).copy()
        self.position = self.start_point.copy()
        self._history = [self.position.copy()]
        self.elapsed_time = 0.0
        self.state = MotorState.UNBOUND
        self.iterations = 0
        self.bound_segments = []

    def reset(self) -> None:
        self.set_starting_point(self.start_point)

    def set_destination_volume(self, lower_left: Sequence[float],
                               upper_right: Sequence[float]) -> None:
        """
        Set the destination box from two opposite corners. The corners may be
        given in any order.
        """
        lower_left = as_point(lower_left)
        upper_right = as_point(upper_right)
        self.destination = (np.minimum(lower_left, upper_right),
                            np.maximum(lower_left, upper_right))

    def set_bounding_box(self, lower_left: Sequence[float],
                         upper_right: Sequence[float]) -> None:
        """
        Confine diffusion to a box given by two opposite corners. A step that
        overshoots a face is mirrored back inside along that axis.
        """
        lower_left = as_point(lower_left)
        upper_right = as_point(upper_right)
        lower = np.minimum(lower_left, upper_right)
        upper = np.maximum(lower_left, upper_right)
        if np.any(upper <= lower):
            raise ValueError('The bounding box must have a positive extent '
                             f'along every axis, got {lower} and {upper}')
        self.bounding_box = (lower, upper)

    def _reflect_into_bounding_box(self, pt: np.ndarray) -> np.ndarray:
        lower, upper = self.bounding_box
        width = upper - lower
        # repeated mirroring at both faces folds any overshoot into the box
        offset = np.mod(pt - lower, 2 * width)
        return lower + np.where(offset > width, 2 * width - offset, offset)

    def in_destination(self, pt: Sequence[float] | None = None) -> bool:
        """
        Whether a point (by default the motor's position) lies in the
        destination box, boundary included. Always False when no destination
        is set.
        """
        if self.destination is None:
            return False
        pt = self.position if pt is None else as_point(pt)
        lower, upper = self.destination
        return bool(np.all(pt >= lower) and np.all(pt <= upper))

    @property
    def position_history(self) -> np.ndarray:
        return np.array(self._history)

    def update_time(self, time_period: float) -> None:
        if time_period < 0:
            raise ValueError(
                f'Time can only move forwards, got a step of {time_period}')
        self.elapsed_time += time_period

    def _record(self, new_position: np.ndarray) -> None:
        self.position = np.array(new_position, dtype=float)
        self._history.append(self.position.copy())

    def brownian_step(self, rng: np.random.Generator,
                      time_period: float = TIME_PERIOD) -> np.ndarray:
        """
        Move the motor by one step of Brownian motion.

        Each coordinate is displaced by a draw from N(0, sqrt(2 * D * dt)).
        Surfaces are applied to the step before it is recorded. The
        bounding box, if any, is applied after the surfaces.

        Args:
            rng (np.random.Generator): The random number generator
            time_period (float): The duration of the step, in s

        Returns:
            np.ndarray: The new position
        """
        if time_period < 0:
            raise ValueError(
                f'Time can only move forwards, got a step of {time_period}')
        sigma = np.sqrt(2 * self.diffusivity * time_period)
        proposed = self.position + rng.normal(0, sigma, size=3)
        for surface in self.surfaces:
            proposed = surface.apply(self.position, proposed)
        if self.bounding_box is not None:
            proposed = self._reflect_into_bounding_box(proposed)

        self._record(proposed)
        self.update_time(time_period)
        return self.position

    def free_float(self,
                   rng: np.random.Generator,
                   n_steps: int,
                   time_period: float = TIME_PERIOD) -> np.ndarray:
        """
        Pure Brownian motion for a fixed number of steps, ignoring filaments.
        """
        for _ in range(n_steps):
            self.brownian_step(rng, time_period)
        return self.position

    def _binding_succeeds(self, rng: np.random.Generator) -> bool:
        if self.binding_probability >= 1:
            return True
        return rng.uniform() <= self.binding_probability

    def float_to_tube(self,
                      rng: np.random.Generator,
                      network,
                      time_period: float = TIME_PERIOD,
                      radius: float | None = None,
                      exclude: Sequence[int] | None = None) -> int | None:
        """
        Float by Brownian motion until the motor binds to a segment.

        The current position is tested before the first step, so a motor that
        is already within the binding radius of a segment binds without
        moving. At most float_steps steps are taken. The float also stops
        when the motor enters its destination.

        Args:
            rng (np.random.Generator): The random number generator
            network (TubeNetwork, np.ndarray): The network, or an array of
                segments
            time_period (float): The duration of each step, in s
            radius (float, None): The binding radius. Defaults to the motor's
                binding radius.
            exclude (Sequence[int], None): Segment indices the motor may not
                bind to

        Returns:
            int, None: The index of the bound segment, or None if the motor
                did not bind
        """
        if radius is None:
            radius = self.binding_radius
        self.state = MotorState.UNBOUND

        for step in range(self.float_steps + 1):
            if self.in_destination():
                return None

            index = find_nearest_segment(self.position, network, radius,
                                         exclude)
            if index is not None and self._binding_succeeds(rng):
                self.state = MotorState.BOUND
                self.bound_segments.append(index)
                logger.debug(f'Motor bound to segment {index} after {step} '
                              f'steps at t={self.elapsed_time:.4f}')
                return index

            if step < self.float_steps:
                self.brownian_step(rng, time_period)
        return None

    def motor_walk(self,
                   network,
                   segment_index: int,
                   seg_per_tube: int | None = None) -> np.ndarray:
        """
        Walk from a bound segment to the end of its tube.

        The end point of every segment from the bound one to the last one of
        the tube is appended to the history. Each move takes its length
        divided by the movement rate. A reflective barrier the motor starts
        inside cannot be walked through: the motor stops at the barrier and
        detaches from the tube.

        Args:
            network (TubeNetwork, np.ndarray): The network, or an array of
                segments
            segment_index (int): The segment the motor is bound to
            seg_per_tube (int, None): Segments per tube. Required when the
                network is given as a plain array.

        Returns:
            np.ndarray: The position at the end of the walk
        """
        segments = as_segment_array(network)
        seg_per_tube = _get_seg_per_tube(network, seg_per_tube)
        if segment_index < 0 or segment_index >= len(segments):
            raise IndexError(
                f'Segment index {segment_index} is out of range for a '
                f'network of {len(segments)} segments')

        self.state = MotorState.BOUND
        last_index = (segment_index // seg_per_tube + 1) * seg_per_tube - 1
        for index in range(segment_index, last_index + 1):
            new_position = segments[index, 1]
            barrier_stop = self._barrier_stop(new_position)
            if barrier_stop is not None:
                new_position = barrier_stop
            time_period = distance(self.position, new_position) / \
                self.movement_rate
            for surface in self.surfaces:
                if surface.kind is SurfaceKind.FLUX_METER:
                    surface.record_crossing(self.position, new_position)
            self._record(new_position)
            self.update_time(time_period)
            if barrier_stop is not None:
                logger.debug('Motor detached at a reflective barrier on '
                              f'segment {index}')
                break

        logger.debug(f'Motor walked segments {segment_index}-{index} '
                      f'to t={self.elapsed_time:.4f}')
        self.state = MotorState.UNBOUND
        return self.position

    def _barrier_stop(self, new_position: np.ndarray) -> np.ndarray | None:
        # the earliest exit through any reflective barrier
        stops = [
            surface.exit_point(self.position, new_position)
            for surface in self.surfaces
            if surface.kind is SurfaceKind.REFLECTIVE_BARRIER
        ]
        stops = [pt for pt in stops if pt is not None]
        if len(stops) == 0:
            return None
        return min(stops, key=lambda pt: np.linalg.norm(pt - self.position))

    def move_to_destination(self,
                            rng: np.random.Generator,
                            network,
                            time_period: float = TIME_PERIOD,
                            seg_per_tube: int | None = None) -> float:
        """
        Alternate floating and walking until the motor reaches its
        destination or exhausts max_iterations float/walk cycles.

        After walking off the end of a tube the motor may not bind to that
        same tube during the next float.

        Args:
            rng (np.random.Generator): The random number generator
            network (TubeNetwork, np.ndarray): The network, or an array of
                segments
            time_period (float): The duration of each Brownian step, in s
            seg_per_tube (int, None): Segments per tube. Required when the
                network is given as a plain array.

        Returns:
            float: The elapsed simulated time
        """
        seg_per_tube = _get_seg_per_tube(network, seg_per_tube)
        exclude = None
        while self.iterations < self.max_iterations:
            if self.in_destination():
                break
            self.iterations += 1

            index = self.float_to_tube(rng, network, time_period,
                                       exclude=exclude)
            if index is None:
                exclude = None
                continue

            self.motor_walk(network, index, seg_per_tube)
            first = (index // seg_per_tube) * seg_per_tube
            exclude = list(range(first, first + seg_per_tube))

        if self.in_destination():
            self.state = MotorState.ARRIVED
            logger.info(f'Motor arrived after {self.iterations} iterations '
                         f'at t={self.elapsed_time:.4f}')
        else:
            self.state = MotorState.TIMED_OUT
            logger.info(f'Motor timed out after {self.iterations} '
                         f'iterations at t={self.elapsed_time:.4f}')
        return self.elapsed_time

    def float_to_destination(self,
                             rng: np.random.Generator,
                             time_period: float = TIME_PERIOD,
                             max_steps: int | None = None) -> float:
        """
        Move by Brownian motion alone until the motor reaches its
        destination, or max_steps steps have been taken.

        Args:
            rng (np.random.Generator): The random number generator
            time_period (float): The duration of each step, in s
            max_steps (int, None): Largest number of steps. Defaults to
                float_steps * max_iterations.

        Returns:
            float: The elapsed simulated time
        """
        if max_steps is None:
            max_steps = self.float_steps * self.max_iterations

        for _ in range(max_steps):
            if self.in_destination():
                break
            self.brownian_step(rng, time_period)

        if self.in_destination():
            self.state = MotorState.ARRIVED
        else:
            self.state = MotorState.TIMED_OUT
        return self.elapsed_time

    def result(self) -> TransportResult:
        destination = None
        if self.destination is not None:
            destination = [
                self.destination[0].tolist(), self.destination[1].tolist()
            ]
        return TransportResult(state=self.state,
                               elapsed_time=self.elapsed_time,
                               positions=self.position_history,
                               iterations=self.iterations,
                               bound_segments=self.bound_segments,
                               start_point=self.start_point.tolist(),
                               destination=destination)

    def __str__(self) -> str:
        return (f'Motor(position={self.position.tolist()}, '
                f'state={self.state.value}, '
                f'elapsed_time={self.elapsed_time})')

    def __repr__(self) -> str:
        return self.__str__()


def _get_seg_per_tube(network, seg_per_tube: int | None) -> int:
    if seg_per_tube is None:
        seg_per_tube = getattr(network, 'seg_per_tube', None)
    if seg_per_tube is None:
        raise ValueError('seg_per_tube must be given when the network is a '
                         'plain array of segments')
    return seg_per_tube
