from typing import NamedTuple, Sequence

import numpy as np
from monty.json import MSONable

from MotorTransportTools.util.geometry import as_point, as_segment_array


class VectorFieldSample(NamedTuple):
    anchor: np.ndarray
    vector: np.ndarray


class VectorField(MSONable):
    """
    A sampled vector field, with one vector attached to each anchor point.

    Args:
        anchors (np.ndarray, list): The anchor points, with shape (n, 3)
        vectors (np.ndarray, list): The vectors, with shape (n, 3)
    """

    def __init__(self, anchors: np.ndarray | list, vectors: np.ndarray | list):
        self.anchors = np.asarray(anchors, dtype=float).reshape(-1, 3)
        self.vectors = np.asarray(vectors, dtype=float).reshape(-1, 3)
        if len(self.anchors) != len(self.vectors):
            raise ValueError('A vector field needs one vector per anchor, got'
                             f' {len(self.anchors)} anchors and '
                             f'{len(self.vectors)} vectors')

    def __len__(self) -> int:
        return len(self.anchors)

    def __getitem__(self, index: int) -> VectorFieldSample:
        return VectorFieldSample(self.anchors[index], self.vectors[index])

    def as_dict(self) -> dict:
        return {
            '@module': self.__class__.__module__,
            '@class': self.__class__.__name__,
            'anchors': self.anchors.tolist(),
            'vectors': self.vectors.tolist()
        }


def tubes_to_vector_field(network) -> VectorField:
    """
    Convert a tube network into a vector field. Each segment contributes a
    sample anchored at its start point, pointing to its end point.

    Args:
        network (TubeNetwork, np.ndarray): The network, or an array of
            segments

    Returns:
        VectorField: The vector field, in segment order
    """
    segments = as_segment_array(network)
    return VectorField(segments[:, 0], segments[:, 1] - segments[:, 0])


def nearest_sample(pt: Sequence[float],
                   field: VectorField) -> VectorFieldSample:
    """
    The sample whose anchor is closest to a point. Ties keep the earliest
    sample.
    """
    if len(field) == 0:
        raise ValueError('Cannot search an empty vector field')
    distances = np.linalg.norm(field.anchors - as_point(pt), axis=1)
    return field[int(np.argmin(distances))]


def vector_field_mesh(field: VectorField,
                      n_steps: int = 10,
                      cutoff: float = 2.0) -> np.ndarray:
    """
    Resample a vector field onto a regular mesh.

    The mesh has n_steps points along each axis, starting at the minimum of
    the anchors and spaced by (max - min) / n_steps. Each mesh point takes the
    vector of its nearest sample, or the null vector if that sample is
    farther away than cutoff times the x spacing.

    Args:
        field (VectorField): The vector field
        n_steps (int): Mesh points along each axis
        cutoff (float): Multiple of the x spacing beyond which a mesh point
            is considered empty

    Returns:
        np.ndarray: Rows of the form (x, y, z, u, v, w), with x varying
            slowest and z fastest
    """
    if len(field) == 0:
        return np.empty((0, 6))
    lower = field.anchors.min(axis=0)
    upper = field.anchors.max(axis=0)
    step = (upper - lower) / n_steps

    axes = []
    for i in range(3):
        if step[i] == 0:
            axes.append(lower[i:i + 1])
        else:
            axes.append(lower[i] + step[i] * np.arange(n_steps))

    max_distance = cutoff * step[0]
    rows = []
    for x in axes[0]:
        for y in axes[1]:
            for z in axes[2]:
                mesh_point = np.array([x, y, z])
                distances = np.linalg.norm(field.anchors - mesh_point, axis=1)
                nearest = int(np.argmin(distances))
                if distances[nearest] <= max_distance:
                    vector = field.vectors[nearest]
                else:
                    vector = np.zeros(3)
                rows.append(np.concatenate([mesh_point, vector]))
    return np.array(rows)
