from typing import Sequence, Tuple

import numpy as np


class InvalidArgumentError(ValueError):
    """
    Raised when a geometric operand has the wrong number of components.
    """


def point(x: float, y: float, z: float) -> np.ndarray:
    return np.array([x, y, z], dtype=float)


def segment(p1: Sequence[float], p2: Sequence[float]) -> np.ndarray:
    """
    Build a segment from its start and end points.

    Args:
        p1 (Sequence[float]): The start point of the segment
        p2 (Sequence[float]): The end point of the segment

    Returns:
        np.ndarray: Array of shape (2, 3) in the form [start, end]
    """
    return np.stack([as_point(p1), as_point(p2)])


def as_point(value: Sequence[float] | np.ndarray) -> np.ndarray:
    _point = np.asarray(value, dtype=float)
    if _point.shape != (3, ):
        raise InvalidArgumentError(
            f'Expected a point with 3 components, got shape {_point.shape}')
    return _point


def as_segment(value: Sequence[float] | np.ndarray) -> np.ndarray:
    """
    Normalize a segment given either as a (2, 3) array or in the flat
    (x1, y1, z1, x2, y2, z2) form.
    """
    _segment = np.asarray(value, dtype=float)
    if _segment.shape not in ((6, ), (2, 3)):
        raise InvalidArgumentError(
            f'Expected a segment with 6 components, got shape '
            f'{_segment.shape}')
    return _segment.reshape(2, 3)


def get_segment(network, index: int) -> np.ndarray:
    """
    Fetch a single segment from a network or an array of segments.

    Args:
        network (TubeNetwork, np.ndarray): Network, or array of segments
            with shape (n, 2, 3) or (n, 6)
        index (int): The index of the segment

    Returns:
        np.ndarray: The segment as an array of shape (2, 3)
    """
    segments = as_segment_array(network)
    if index < 0 or index >= len(segments):
        raise IndexError(f'Segment index {index} is out of range for a '
                         f'network of {len(segments)} segments')
    return segments[index]


def as_segment_array(network) -> np.ndarray:
    segments = getattr(network, 'segments', network)
    segments = np.asarray(segments, dtype=float)
    if segments.size == 0:
        return segments.reshape(0, 2, 3)
    if segments.size % 6 != 0:
        raise InvalidArgumentError(
            f'Cannot interpret an array of shape {segments.shape} as '
            'segments')
    return segments.reshape(-1, 2, 3)


def cross_product(u: Sequence[float], v: Sequence[float]) -> np.ndarray:
    return np.cross(as_point(u), as_point(v))


def distance(pt: Sequence[float], other: Sequence[float]) -> float:
    """
    Distance from a point to either another point or a segment.

    When other is a segment, the distance is measured to the infinite line
    passing through both of its end points:

        |(pt - p1) x (pt - p2)| / |p2 - p1|

    A zero length segment is treated as the point p1.

    Args:
        pt (Sequence[float]): Point with 3 components
        other (Sequence[float]): Point with 3 components, or a segment with
            6 components (flat or in the (2, 3) form)

    Returns:
        float: The Euclidean distance
    """
    pt = as_point(pt)
    other = np.asarray(other, dtype=float)
    if other.size == 3 and other.ndim == 1:
        return float(np.linalg.norm(pt - other))
    elif other.shape in ((6, ), (2, 3)):
        p1, p2 = other.reshape(2, 3)
        baseline = np.linalg.norm(p2 - p1)
        if baseline == 0:
            return float(np.linalg.norm(pt - p1))
        return float(np.linalg.norm(np.cross(pt - p1, pt - p2)) / baseline)
    raise InvalidArgumentError(
        'distance expects a point (3 components) or a segment (6 components)'
        f', got shape {other.shape}')


def line_distances(pt: Sequence[float], segments: np.ndarray) -> np.ndarray:
    """
    Vectorized form of distance for an array of segments.

    Args:
        pt (Sequence[float]): Point with 3 components
        segments (np.ndarray): Array of segments with shape (n, 2, 3)

    Returns:
        np.ndarray: Array of length n with the line distance to each segment
    """
    pt = as_point(pt)
    p1 = segments[:, 0]
    p2 = segments[:, 1]
    baseline = np.linalg.norm(p2 - p1, axis=1)
    to_start = np.linalg.norm(pt - p1, axis=1)
    numerator = np.linalg.norm(np.cross(pt - p1, pt - p2), axis=1)
    with np.errstate(divide='ignore', invalid='ignore'):
        distances = numerator / baseline
    return np.where(baseline == 0, to_start, distances)


def segment_length(seg: Sequence[float]) -> float:
    p1, p2 = as_segment(seg)
    return float(np.linalg.norm(p2 - p1))


def interpolate(seg: Sequence[float], t: float) -> np.ndarray:
    p1, p2 = as_segment(seg)
    return p1 + t * (p2 - p1)


def bounding_box(seg: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Returns the axis-aligned box spanned by a segment as (lower, upper).
    """
    _segment = as_segment(seg)
    return _segment.min(axis=0), _segment.max(axis=0)


def in_bounding_box(pt: Sequence[float], seg: Sequence[float]) -> bool:
    lower, upper = bounding_box(seg)
    pt = as_point(pt)
    return bool(np.all(pt >= lower) and np.all(pt <= upper))


def spherical_offset(length: float, theta: float, psi: float) -> np.ndarray:
    """
    Offset of the given length along the direction with polar angle theta and
    azimuthal angle psi (radians).
    """
    return length * np.array([
        np.sin(theta) * np.cos(psi),
        np.sin(theta) * np.sin(psi),
        np.cos(theta)
    ])


def vector_angle(u: Sequence[float], v: Sequence[float]) -> float:
    """
    Angle between two vectors in radians, in the range [0, pi].
    """
    u = as_point(u)
    v = as_point(v)
    return float(np.arctan2(np.linalg.norm(np.cross(u, v)), np.dot(u, v)))
