from typing import List, Sequence, Tuple
import logging

import numpy as np
from monty.json import MSONable
from monty.serialization import dumpfn, loadfn

from MotorTransportTools.inputs.network_characteristics import (
    NetworkCharacteristics)
from MotorTransportTools.inputs.tube_network import (TubeNetwork,
                                                     generate_tube_network)
from MotorTransportTools.inputs.volume_surface import VolumeSurface
from MotorTransportTools.motor import Motor, TransportResult
from MotorTransportTools.util.constants import TIME_PERIOD

logger = logging.getLogger(__name__)


class TransportInput(MSONable):
    """
    Everything needed to reproduce a single transport run.

    Args:
        characteristics (NetworkCharacteristics, None): Parameters of the
            tube network. Defaults to NetworkCharacteristics().
        start_point (Sequence[float]): Where the motor starts
        destination (Tuple[Sequence[float], Sequence[float]], None): The
            destination box given by two opposite corners
        motor_kwargs (dict, None): Additional keyword arguments for Motor,
            such as diffusivity, binding_radius or max_iterations
        surfaces (List[VolumeSurface], None): Surfaces acting on the motor
        time_period (float): Duration of a Brownian step, in s
        seed (int): Seed of the random number generator for the run
        use_network (bool): If False, the motor moves by Brownian motion
            alone. Useful as a baseline for the delay added by filaments.
    """

    def __init__(self,
                 characteristics: NetworkCharacteristics | None = None,
                 start_point: Sequence[float] = (0, 0, 0),
                 destination: Tuple[Sequence[float], Sequence[float]]
                 | None = None,
                 motor_kwargs: dict | None = None,
                 surfaces: List[VolumeSurface] | None = None,
                 time_period: float = TIME_PERIOD,
                 seed: int = 0,
                 use_network: bool = True):
        if characteristics is None:
            characteristics = NetworkCharacteristics()
        self.characteristics = characteristics
        self.start_point = list(start_point)
        self.destination = (None if destination is None else
                            [list(corner) for corner in destination])
        self.motor_kwargs = {} if motor_kwargs is None else motor_kwargs
        self.surfaces = [] if surfaces is None else surfaces
        self.time_period = time_period
        self.seed = seed
        self.use_network = use_network

    def get_motor(self) -> Motor:
        return Motor(start_point=self.start_point,
                     destination=self.destination,
                     surfaces=self.surfaces,
                     **self.motor_kwargs)

    def save(self, filename: str) -> None:
        dumpfn(self, filename)

    @classmethod
    def load(cls, filename: str) -> 'TransportInput':
        transport_input = loadfn(filename)
        if not isinstance(transport_input, cls):
            raise TypeError(f'{filename} does not contain a {cls.__name__}')
        return transport_input


class TransportRunner:
    """
    Runs a single transport simulation from a TransportInput.

    A fresh random number generator is seeded from the input for every run,
    so repeated runs of the same input are identical.
    """

    def __init__(self, transport_input: TransportInput):
        self.transport_input = transport_input
        self.network = None
        self.motor = None

    def run(self) -> TransportResult:
        transport_input = self.transport_input
        rng = np.random.default_rng(transport_input.seed)

        self.network = generate_tube_network(transport_input.characteristics,
                                             rng)
        self.motor = transport_input.get_motor()
        logger.info(f'Running transport with {self.network} '
                     f'(seed {transport_input.seed})')

        if transport_input.use_network:
            self.motor.move_to_destination(rng, self.network,
                                           transport_input.time_period)
        else:
            self.motor.float_to_destination(rng, transport_input.time_period)
        return self.motor.result()


def run_transport(transport_input: TransportInput
                  ) -> Tuple[TransportResult, TubeNetwork]:
    runner = TransportRunner(transport_input)
    result = runner.run()
    return result, runner.network
