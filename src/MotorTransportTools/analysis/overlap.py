from typing import List, Sequence, Tuple

import numpy as np
from scipy.linalg import LinAlgError, lstsq

from MotorTransportTools.util.geometry import (as_segment, as_segment_array,
                                               line_distances)

# slack for rounding in the solved parameters when testing box membership
BOX_TOLERANCE = 1e-9


def find_nearest_segment(pt: Sequence[float],
                         network,
                         radius: float,
                         exclude: Sequence[int] | None = None) -> int | None:
    """
    Find the segment whose line passes closest to a point, considering only
    segments within radius.

    Args:
        pt (Sequence[float]): The point
        network (TubeNetwork, np.ndarray): The network, or an array of
            segments
        radius (float): The largest accepted distance (inclusive)
        exclude (Sequence[int], None): Segment indices that may not be
            returned

    Returns:
        int, None: Index of the nearest segment. When several segments are
            equally near, the lowest index is returned. None if no segment
            lies within radius.
    """
    segments = as_segment_array(network)
    if len(segments) == 0:
        return None

    distances = line_distances(pt, segments)
    candidates = distances <= radius
    if exclude is not None and len(exclude) > 0:
        candidates[np.asarray(exclude, dtype=int)] = False
    if not np.any(candidates):
        return None

    distances = np.where(candidates, distances, np.inf)
    return int(np.argmin(distances))


def _solve_intersection(seg_a: np.ndarray,
                        seg_c: np.ndarray) -> Tuple[float, float] | None:
    a, b = seg_a
    c, d = seg_c
    lhs = np.stack([b - a, -(d - c)], axis=1)
    rhs = c - a
    if not (np.all(np.isfinite(lhs)) and np.all(np.isfinite(rhs))):
        return None
    try:
        solution, _, _, _ = lstsq(lhs, rhs, lapack_driver='gelsd')
    except (LinAlgError, ValueError):
        return None
    t, s = solution
    if np.isnan(t) or np.isnan(s):
        return None
    return float(t), float(s)


def _in_box(pt: np.ndarray, seg: np.ndarray) -> bool:
    return bool(
        np.all(pt >= seg.min(axis=0) - BOX_TOLERANCE)
        and np.all(pt <= seg.max(axis=0) + BOX_TOLERANCE))


def segment_overlap(seg: Sequence[float],
                    network,
                    tolerance: float | None = None
                    ) -> Tuple[np.ndarray, List[int]]:
    """
    Find where a segment overlaps the segments of a network.

    For every candidate segment CD, the system

        t * (B - A) - s * (D - C) = C - A

    is solved in the least-squares sense (SVD) for the probe segment AB.
    The point A + t * (B - A) is accepted if it lies within the axis-aligned
    bounding boxes of both segments. Systems that cannot be solved are
    skipped.

    Args:
        seg (Sequence[float]): The probe segment
        network (TubeNetwork, np.ndarray): The network, or an array of
            segments
        tolerance (float, None): If given, the closest approach between the
            two lines must also be no larger than tolerance. This rejects
            skew segments that pass near each other without touching.

    Returns:
        Tuple[np.ndarray, List[int]]: The accepted points, with shape (m, 3),
            and the index of the network segment each point was found on.
    """
    probe = as_segment(seg)
    points = []
    indices = []
    for i, candidate in enumerate(as_segment_array(network)):
        solution = _solve_intersection(probe, candidate)
        if solution is None:
            continue
        t, s = solution

        pt = probe[0] + t * (probe[1] - probe[0])
        if tolerance is not None:
            other = candidate[0] + s * (candidate[1] - candidate[0])
            if np.linalg.norm(pt - other) > tolerance:
                continue

        if _in_box(pt, probe) and _in_box(pt, candidate):
            points.append(pt)
            indices.append(i)

    return np.array(points).reshape(-1, 3), indices


def all_overlaps(network, tolerance: float | None = None) -> np.ndarray:
    """
    Overlap points of every segment of the network against the whole network.

    Every segment is probed against every segment, itself included, so each
    segment contributes at least one point where it meets itself and
    consecutive segments of a tube meet at their shared end point.

    Args:
        network (TubeNetwork, np.ndarray): The network, or an array of
            segments
        tolerance (float, None): See segment_overlap

    Returns:
        np.ndarray: The overlap points, with shape (m, 3), ordered by probe
            segment
    """
    points, _ = _overlaps_with_pairs(network, tolerance)
    return points


def overlap_pairs(network,
                  tolerance: float | None = None) -> List[Tuple[int, int]]:
    """
    The (probe, candidate) segment indices of every point returned by
    all_overlaps, in the same order.
    """
    _, pairs = _overlaps_with_pairs(network, tolerance)
    return pairs


def _overlaps_with_pairs(network, tolerance: float | None = None):
    segments = as_segment_array(network)
    all_points = []
    pairs = []
    for probe_index, probe in enumerate(segments):
        points, indices = segment_overlap(probe, segments, tolerance)
        all_points.append(points)
        pairs.extend((probe_index, i) for i in indices)
    if len(all_points) == 0:
        return np.empty((0, 3)), pairs
    return np.concatenate(all_points), pairs

