"""
Writers that describe networks, trajectories and vector fields as text, in
Mathematica expressions or whitespace separated columns.

Every writer returns the text and also writes it to filename when one is
given.
"""
from typing import Sequence

import numpy as np

from MotorTransportTools.analysis.vector_field import VectorField
from MotorTransportTools.util.geometry import as_segment_array


def _write(text: str, filename: str | None) -> str:
    if filename is not None:
        with open(filename, 'w') as f:
            f.write(text)
    return text


def _vertex(pt: Sequence[float]) -> str:
    return f'{{{pt[0]:f}, {pt[1]:f}, {pt[2]:f}}}'


def _graph_plot(edges: list[str], coordinates: list[str],
                style: str | None = None) -> str:
    text = (f'GraphPlot3D[{{{", ".join(edges)}}}, '
            f'VertexCoordinateRules ->{{{", ".join(coordinates)}}}')
    if style is not None:
        text += f', PlotStyle -> {style}'
    return text + ']\n'


def points_to_mma(points: np.ndarray, filename: str | None = None) -> str:
    """
    Points drawn as a cloud of large blue markers.
    """
    points = np.asarray(points, dtype=float).reshape(-1, 3)
    body = ', '.join(f'Point[{_vertex(pt)}]' for pt in points)
    return _write(f'Graphics3D[{{PointSize[Large], Blue, {body}}}]\n',
                  filename)


def connected_points_to_mma(points: np.ndarray,
                            filename: str | None = None) -> str:
    """
    A path through the points in order, for example a motor trajectory.
    Vertices are numbered from 1.
    """
    points = np.asarray(points, dtype=float).reshape(-1, 3)
    edges = [f'{i} -> {i + 1}' for i in range(1, len(points))]
    coordinates = [
        f'{i} -> {_vertex(pt)}' for i, pt in enumerate(points, start=1)
    ]
    return _write(_graph_plot(edges, coordinates, '{Dashed, Thick, Red}'),
                  filename)


def tubes_to_mma(network, filename: str | None = None) -> str:
    """
    Every tube of a network drawn as a chain of vertices. A tube of k
    segments is drawn with k + 1 vertices, numbered consecutively from 1
    across the network.

    Args:
        network (TubeNetwork): The network
        filename (str, None): The file to write to
    """
    seg_per_tube = network.seg_per_tube
    segments = as_segment_array(network)

    edges = []
    coordinates = []
    vertex = 1
    for first in range(0, len(segments), seg_per_tube):
        tube = segments[first:first + seg_per_tube]
        chain = np.vstack([tube[:1, 0], tube[:, 1]])
        for pt in chain:
            coordinates.append(f'{vertex} -> {_vertex(pt)}')
            vertex += 1
        start = vertex - len(chain)
        edges.extend(f'{i} -> {i + 1}'
                     for i in range(start, start + seg_per_tube))
    return _write(_graph_plot(edges, coordinates), filename)


def plot_to_mma(values: np.ndarray,
                xlabel: str,
                ylabel: str,
                filename: str | None = None) -> str:
    """
    A line plot of (x, y) rows, such as a persistence length versus entropy
    sweep.
    """
    values = np.asarray(values, dtype=float).reshape(-1, 2)
    body = ', '.join(f'{{{x:f}, {y:f}}}' for x, y in values)
    return _write(
        f'ListLinePlot[{{{body}}}, AxesLabel -> {{"{xlabel}", "{ylabel}"}}, '
        'GridLines -> Automatic]\n', filename)


def vector_field_to_mma(field: VectorField | np.ndarray,
                        filename: str | None = None) -> str:
    """
    A 3D vector plot of a vector field or of (x, y, z, u, v, w) mesh rows.
    """
    rows = _as_rows(field)
    body = ', '.join(f'{{{_vertex(row[:3])}, {_vertex(row[3:])}}}'
                     for row in rows)
    return _write(f'ListVectorPlot3D[{{{body}}}]\n', filename)


def vector_field_to_dat(field: VectorField | np.ndarray,
                        filename: str | None = None) -> str:
    """
    One (x, y, z, u, v, w) row per line, as read by MATLAB's load.
    """
    rows = _as_rows(field)
    lines = [' '.join(f'{value:f}' for value in row) for row in rows]
    return _write(''.join(f'{line}\n' for line in lines), filename)


def _as_rows(field: VectorField | np.ndarray) -> np.ndarray:
    if isinstance(field, VectorField):
        return np.hstack([field.anchors, field.vectors])
    return np.asarray(field, dtype=float).reshape(-1, 6)
