from typing import List, Sequence
import logging

import numpy as np

from MotorTransportTools.inputs.network_characteristics import (
    NetworkCharacteristics)
from MotorTransportTools.inputs.tube_network import TubeNetwork

logger = logging.getLogger(__name__)


def persistence_versus_entropy(characteristics: NetworkCharacteristics,
                               persistence_lengths: Sequence[float],
                               rng: np.random.Generator) -> np.ndarray:
    """
    Structural entropy of networks generated over a range of persistence
    lengths.

    A single network is regenerated in place for every persistence length,
    drawing from the same random number generator.

    Args:
        characteristics (NetworkCharacteristics): Parameters of the network.
            Its persistence length is left at the last value swept.
        persistence_lengths (Sequence[float]): The persistence lengths to
            sweep. Each must be positive.
        rng (np.random.Generator): The random number generator

    Returns:
        np.ndarray: Array of shape (n, 2) with rows of
            (persistence length, structural entropy)
    """
    network = None
    data = []
    for persistence_length in persistence_lengths:
        if network is None:
            characteristics.persistence_length = persistence_length
            network = TubeNetwork.generate(characteristics, rng)
        else:
            network.regenerate(rng, persistence_length)
        logger.info(f'Persistence length {persistence_length}: entropy '
                     f'{network.structural_entropy:.4f}')
        data.append([persistence_length, network.structural_entropy])
    return np.array(data).reshape(-1, 2)


def path_length(positions: np.ndarray) -> float:
    """
    Total distance travelled along a trajectory.
    """
    positions = np.asarray(positions, dtype=float).reshape(-1, 3)
    if len(positions) < 2:
        return 0.0
    return float(np.sum(np.linalg.norm(np.diff(positions, axis=0), axis=1)))


def mean_squared_displacement(positions: np.ndarray) -> np.ndarray:
    """
    Mean squared displacement of a trajectory as a function of lag, averaged
    over all pairs of positions separated by that many steps.

    Args:
        positions (np.ndarray): The positions, with shape (n, 3)

    Returns:
        np.ndarray: Array of length n, where the i-th entry is the mean
            squared displacement at a lag of i steps
    """
    positions = np.asarray(positions, dtype=float).reshape(-1, 3)
    msd = np.zeros(len(positions))
    for lag in range(1, len(positions)):
        displacements = positions[lag:] - positions[:-lag]
        msd[lag] = np.mean(np.sum(displacements**2, axis=1))
    return msd


def summarize_results(results: List) -> dict:
    """
    Summary statistics of the delay over a set of transport runs.

    Only runs that arrived contribute to the delay statistics.

    Args:
        results (List[TransportResult]): The results of the runs

    Returns:
        dict: The number of runs, the fraction that arrived, and the mean and
            standard deviation of the delay of the arrived runs
    """
    if len(results) == 0:
        raise ValueError('Cannot summarize an empty list of results')
    delays = np.array([r.elapsed_time for r in results if r.arrived])
    summary = {
        'n_runs': len(results),
        'arrival_fraction': len(delays) / len(results),
        'mean_delay': float(np.mean(delays)) if len(delays) else np.nan,
        'std_delay': float(np.std(delays)) if len(delays) else np.nan
    }
    return summary
