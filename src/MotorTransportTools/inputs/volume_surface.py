from enum import Enum
from typing import List, Sequence

import numpy as np
from monty.json import MSONable

from MotorTransportTools.util import geometry
from MotorTransportTools.util.geometry import (as_point, as_segment,
                                               as_segment_array)


class SurfaceKind(Enum):
    REFLECTIVE_BARRIER = 'reflective_barrier'
    FLUX_METER = 'flux_meter'


class VolumeSurface(MSONable):
    """
    A spherical surface placed in the simulation volume.

    A reflective barrier keeps a motor from leaving the sphere by mirroring
    any step that crosses the surface. A flux meter does not alter motion; it
    counts motor crossings and measures how many tubes pass through it.

    Args:
        center (Sequence[float]): Center of the sphere
        radius (float, int): Radius of the sphere
        kind (SurfaceKind, str): The kind of surface
        max_reflections (int): Number of bounces followed for a single step
            before the position is pulled back onto the surface
        crossings_in (int): Number of inward motor crossings recorded
        crossings_out (int): Number of outward motor crossings recorded
    """

    def __init__(self,
                 center: Sequence[float],
                 radius: float | int,
                 kind: SurfaceKind | str = SurfaceKind.REFLECTIVE_BARRIER,
                 max_reflections: int = 10,
                 crossings_in: int = 0,
                 crossings_out: int = 0):
        if radius <= 0:
            raise ValueError(f'Radius must be positive, got {radius}')
        self.center = as_point(center)
        self.radius = radius
        self.kind = SurfaceKind(kind)
        self.max_reflections = max_reflections
        self.crossings_in = crossings_in
        self.crossings_out = crossings_out

    def contains(self, pt: Sequence[float]) -> bool:
        return bool(np.linalg.norm(as_point(pt) - self.center) <= self.radius)

    def _line_parameters(self, start: np.ndarray,
                         end: np.ndarray) -> List[float]:
        # Solve |start + t * (end - start) - center|^2 = radius^2
        direction = end - start
        offset = start - self.center
        a = np.dot(direction, direction)
        if a == 0:
            return []
        b = 2 * np.dot(offset, direction)
        c = np.dot(offset, offset) - self.radius**2
        discriminant = b**2 - 4 * a * c
        if discriminant < 0:
            return []
        elif discriminant == 0:
            roots = [-b / (2 * a)]
        else:
            root = np.sqrt(discriminant)
            roots = [(-b - root) / (2 * a), (-b + root) / (2 * a)]
        return [float(t) for t in roots if 0 <= t <= 1]

    def sphere_intersections(self, seg: Sequence[float]) -> List[np.ndarray]:
        """
        Points where a segment crosses the sphere, ordered from the start of
        the segment to its end.

        Args:
            seg (Sequence[float]): The segment

        Returns:
            List[np.ndarray]: Zero, one (tangent or single crossing) or two
                points
        """
        start, end = as_segment(seg)
        return [
            start + t * (end - start)
            for t in self._line_parameters(start, end)
        ]

    def reflect(self, last_position: Sequence[float],
                current_position: Sequence[float]) -> np.ndarray:
        """
        Mirror a step that leaves the sphere back into it.

        The part of the step beyond the surface is reflected about the
        surface normal at the crossing point. Steps that start outside the
        sphere, or that stay inside it, are returned unchanged.

        Args:
            last_position (Sequence[float]): Position before the step
            current_position (Sequence[float]): Position after the step

        Returns:
            np.ndarray: The corrected position
        """
        start = as_point(last_position)
        end = as_point(current_position)
        if (self.kind is not SurfaceKind.REFLECTIVE_BARRIER
                or not self.contains(start) or self.contains(end)):
            return end

        for _ in range(self.max_reflections):
            parameters = self._line_parameters(start, end)
            if len(parameters) == 0:
                break
            # leaving the sphere, so the exit is the last crossing
            hit = start + max(parameters) * (end - start)
            normal = (hit - self.center) / np.linalg.norm(hit - self.center)
            remainder = end - hit
            start = hit
            end = hit + remainder - 2 * np.dot(remainder, normal) * normal
            if self.contains(end):
                return end

        return self._pull_inside(end)

    def _pull_inside(self, pt: np.ndarray) -> np.ndarray:
        # kept a hair inside so that the next step starts within the sphere
        offset = pt - self.center
        return self.center + offset / np.linalg.norm(offset) * self.radius * (
            1 - 1e-12)

    def exit_point(self, last_position: Sequence[float],
                   current_position: Sequence[float]) -> np.ndarray | None:
        """
        Where a move that starts inside the sphere first leaves it.

        Args:
            last_position (Sequence[float]): Position before the move
            current_position (Sequence[float]): Position after the move

        Returns:
            np.ndarray, None: The exit point, just inside the surface, or
                None if the move does not leave the sphere
        """
        start = as_point(last_position)
        end = as_point(current_position)
        if not self.contains(start) or self.contains(end):
            return None
        parameters = self._line_parameters(start, end)
        if len(parameters) == 0:
            return start
        hit = start + max(parameters) * (end - start)
        return self._pull_inside(hit)

    def record_crossing(self, last_position: Sequence[float],
                        current_position: Sequence[float]) -> bool:
        """
        Count a motor step that crosses the surface.

        Returns:
            bool: Whether the step crossed the surface
        """
        was_inside = self.contains(last_position)
        is_inside = self.contains(current_position)
        if was_inside == is_inside:
            return False
        if is_inside:
            self.crossings_in += 1
        else:
            self.crossings_out += 1
        return True

    def apply(self, last_position: Sequence[float],
              current_position: Sequence[float]) -> np.ndarray:
        """
        Apply this surface to a motor step, returning the position the motor
        ends up at.
        """
        if self.kind is SurfaceKind.REFLECTIVE_BARRIER:
            return self.reflect(last_position, current_position)
        self.record_crossing(last_position, current_position)
        return as_point(current_position)

    def vector_angle(self, seg: Sequence[float],
                     radius_vector: Sequence[float]) -> float:
        """
        Angle, in radians, between the direction of a segment and a radius
        vector of the sphere.
        """
        start, end = as_segment(seg)
        return geometry.vector_angle(end - start, radius_vector)

    def crossing_count(self, network) -> int:
        """
        The number of times the segments of a network cross the surface.
        """
        return sum(
            len(self.sphere_intersections(seg))
            for seg in as_segment_array(network))

    def flux_meter(self, network) -> float:
        """
        Net outward flux of tube directions through the surface.

        Each crossing of a segment contributes the cosine of the angle between
        the segment and the outward radius at the crossing point, so a tube
        leaving the sphere adds a positive amount and one entering it a
        negative amount.

        Args:
            network (TubeNetwork, np.ndarray): The network, or an array of
                segments

        Returns:
            float: The net flux
        """
        flux = 0.0
        for seg in as_segment_array(network):
            for hit in self.sphere_intersections(seg):
                angle = self.vector_angle(seg, hit - self.center)
                flux += np.cos(angle)
        return float(flux)

    def as_dict(self) -> dict:
        return {
            '@module': self.__class__.__module__,
            '@class': self.__class__.__name__,
            'center': self.center.tolist(),
            'radius': self.radius,
            'kind': self.kind.value,
            'max_reflections': self.max_reflections,
            'crossings_in': self.crossings_in,
            'crossings_out': self.crossings_out
        }

    def __str__(self) -> str:
        return (f'VolumeSurface(center={self.center.tolist()}, '
                f'radius={self.radius}, kind={self.kind.value})')

    def __repr__(self) -> str:
        return self.__str__()
