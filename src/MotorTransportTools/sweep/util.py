from MotorTransportTools.core import TransportInput, TransportRunner
from MotorTransportTools.inputs.network_characteristics import (
    NetworkCharacteristics)
from MotorTransportTools.analysis.util import path_length

import numpy as np

from datetime import datetime
from typing import Iterator
import argparse
import json
import h5py

import logging

logger = logging.getLogger(__name__)


def get_transport_sweep_parser():
    parser = argparse.ArgumentParser()

    parser.add_argument('-n',
                        '--num_samples',
                        help='The number of transport runs to sample',
                        type=int,
                        required=True)
    parser.add_argument(
        '-l',
        '--persistence_length',
        help=('The range of persistence length in nm.'
              ' The persistence length will be sampled from a log uniform'
              ' distribution'),
        type=float,
        nargs=2,
        default=(10, 1000))
    parser.add_argument(
        '-d',
        '--tube_density',
        help=('The range of tube density in segments per unit volume.'
              ' The density will be sampled from a uniform distribution'),
        type=float,
        nargs=2,
        default=(1, 10))

    # add optional arguments
    parser.add_argument('-v',
                        '--volume',
                        help='The volume holding the tube network',
                        type=float,
                        default=25)
    parser.add_argument('-t',
                        '--tube_length',
                        help='The mean tube length in nm',
                        type=float,
                        default=100)
    parser.add_argument(
        '--destination',
        help='The destination box as x1 y1 z1 x2 y2 z2',
        type=float,
        nargs=6,
        default=(50, 50, 50, 200, 200, 200))
    parser.add_argument(
        '-i',
        '--max_iterations',
        help='The maximum number of float/walk cycles of each run',
        type=int,
        default=100)
    parser.add_argument('-s',
                        '--seed',
                        help='The seed used to sample the runs',
                        type=int,
                        default=0)
    parser.add_argument(
        '-p',
        '--include_positions',
        help='Whether to save the motor trajectory in the output',
        action='store_true')
    parser.add_argument(
        '-o',
        '--output_file',
        help='The output file to save the data to',
        type=str,
        default=f'{datetime.now().strftime("%Y%m%d_%H_%M_%S_%f")}.h5')

    parser.add_argument(
        '-g',
        '--max_data_per_group',
        help='The maximum number of data points to write to each hdf5 group',
        type=int,
        default=100000)

    return parser


def get_templates(num_samples: int = 4,
                  persistence_length: list[float] = None,
                  tube_density: list[float] = None,
                  seed: int = 0) -> Iterator[dict]:
    if persistence_length is None:
        persistence_length = [10.0, 1000.0]
    if tube_density is None:
        tube_density = [1.0, 10.0]

    rng = np.random.default_rng(seed)
    for _ in range(num_samples):
        # sample a persistence length
        limits = np.log10(persistence_length)
        _persistence_length = np.power(10, rng.uniform(*limits))

        # sample a density
        density = rng.uniform(*tube_density)

        # each run gets its own seed so that runs are independent of order
        run_seed = int(rng.integers(0, 2**31 - 1))
        yield {
            'persistence_length': float(_persistence_length),
            'tube_density': float(density),
            'seed': run_seed
        }


def run_one_transport(persistence_length: float,
                      tube_density: float,
                      seed: int,
                      volume: float = 25,
                      tube_length: float = 100,
                      destination: list[float] = None,
                      max_iterations: int = 100,
                      include_positions: bool = False) -> dict:
    if destination is None:
        destination = [50, 50, 50, 200, 200, 200]

    characteristics = NetworkCharacteristics(
        volume=volume,
        mean_tube_length=tube_length,
        mean_tube_density=tube_density,
        persistence_length=persistence_length)
    transport_input = TransportInput(
        characteristics,
        destination=(destination[:3], destination[3:]),
        motor_kwargs={'max_iterations': max_iterations},
        seed=seed)
    logger.debug(f'Transport run with persistence length '
                 f'{persistence_length:.2f} and tube density '
                 f'{tube_density:.2f} (seed {seed})')
    result = TransportRunner(transport_input).run()

    out_dict = {
        'metadata': {
            'persistence_length': persistence_length,
            'tube_density': tube_density,
            'volume': volume,
            'tube_length': tube_length,
            'seed': seed,
            'structural_entropy': characteristics.structural_entropy,
            'state': result.state.value,
            'iterations': result.iterations,
            'path_length': path_length(result.positions)
        }
    }
    out_dict['elapsed_time'] = result.elapsed_time
    out_dict['final_position'] = result.final_position

    if include_positions:
        out_dict['positions'] = result.positions

    return out_dict


def save_data_to_hdf5(file: h5py.File, group_id: int, data_i: int, data: dict):
    worker_group = file.require_group(f'group_{group_id}')
    data_group = worker_group.create_group(f'data_{data_i}')
    data_group.create_dataset('metadata', data=json.dumps(data['metadata']))
    data_group.create_dataset('elapsed_time', data=data['elapsed_time'])
    data_group.create_dataset('final_position', data=data['final_position'])

    if 'positions' in data:
        data_group.create_dataset('positions', data=data['positions'])


def load_data_from_hdf5(file: h5py.File, group_id: int, data_i: int):
    data = file[f'group_{group_id}/data_{data_i}']

    out_dict = {}
    out_dict['metadata'] = json.loads(data['metadata'][()])
    out_dict['elapsed_time'] = float(data['elapsed_time'][()])
    out_dict['final_position'] = data['final_position'][()]
    if 'positions' in data:
        out_dict['positions'] = data['positions'][()]

    return out_dict
