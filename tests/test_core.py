from MotorTransportTools.core import (TransportInput, TransportRunner,
                                      run_transport)
from MotorTransportTools.inputs.network_characteristics import (
    NetworkCharacteristics)
from MotorTransportTools.inputs.volume_surface import VolumeSurface
from MotorTransportTools.motor import MotorState, TransportResult
from monty.serialization import dumpfn, loadfn

import numpy as np
import pytest


@pytest.fixture
def transport_input():
    characteristics = NetworkCharacteristics(volume=5)
    return TransportInput(characteristics,
                          start_point=[0, 0, 0],
                          destination=([20, 20, 20], [80, 80, 80]),
                          motor_kwargs={
                              'float_steps': 20,
                              'max_iterations': 5,
                              'diffusivity': 5
                          },
                          seed=3)


def test_transport_input_defaults():
    transport_input = TransportInput()
    assert transport_input.characteristics.num_tubes == 25
    assert transport_input.destination is None
    assert transport_input.seed == 0
    assert transport_input.use_network

    motor = transport_input.get_motor()
    assert motor.destination is None
    assert np.allclose(motor.position, [0, 0, 0])


def test_get_motor(transport_input):
    motor = transport_input.get_motor()
    assert motor.float_steps == 20
    assert motor.max_iterations == 5
    assert motor.diffusivity == 5
    assert motor.in_destination([50, 50, 50])


def test_run(transport_input):
    runner = TransportRunner(transport_input)
    result = runner.run()

    assert isinstance(result, TransportResult)
    assert result.state in (MotorState.ARRIVED, MotorState.TIMED_OUT)
    assert result.elapsed_time > 0
    assert len(runner.network) == 50
    assert transport_input.characteristics.structural_entropy == \
        pytest.approx(runner.network.structural_entropy)


def test_run_is_reproducible(transport_input):
    result_1, network_1 = run_transport(transport_input)
    result_2, network_2 = run_transport(transport_input)
    assert np.array_equal(network_1.segments, network_2.segments)
    assert np.array_equal(result_1.positions, result_2.positions)
    assert result_1.elapsed_time == result_2.elapsed_time

    transport_input.seed = 4
    result_3, _ = run_transport(transport_input)
    assert not np.array_equal(result_1.positions[:5], result_3.positions[:5])


def test_run_without_network():
    transport_input = TransportInput(destination=([-1, -1, -1], [1, 1, 1]),
                                     use_network=False)
    result = TransportRunner(transport_input).run()
    assert result.state is MotorState.ARRIVED
    assert result.elapsed_time == 0
    assert result.iterations == 0


def test_run_with_surface():
    barrier = VolumeSurface([0, 0, 0], 4)
    transport_input = TransportInput(NetworkCharacteristics(volume=1),
                                     surfaces=[barrier],
                                     motor_kwargs={
                                         'float_steps': 50,
                                         'max_iterations': 1,
                                         'diffusivity': 10,
                                         'binding_probability': 0
                                     },
                                     time_period=1.0)
    result = TransportRunner(transport_input).run()
    assert result.state is MotorState.TIMED_OUT
    assert np.all(np.linalg.norm(result.positions, axis=1) <= 4 + 1e-9)


def test_serialization(transport_input, tmp_path):
    transport_input.surfaces = [VolumeSurface([1, 2, 3], 10, 'flux_meter')]
    transport_input.save(tmp_path / 'input.json')

    new_input = TransportInput.load(tmp_path / 'input.json')
    assert isinstance(new_input.characteristics, NetworkCharacteristics)
    assert new_input.characteristics.volume == 5
    assert new_input.seed == 3
    assert new_input.motor_kwargs['max_iterations'] == 5
    assert new_input.destination == [[20, 20, 20], [80, 80, 80]]
    assert isinstance(new_input.surfaces[0], VolumeSurface)
    assert np.allclose(new_input.surfaces[0].center, [1, 2, 3])

    result, _ = run_transport(new_input)
    dumpfn(result, tmp_path / 'result.json')
    loaded_result = loadfn(tmp_path / 'result.json')
    assert isinstance(loaded_result, TransportResult)
    assert np.allclose(loaded_result.positions, result.positions)

    dumpfn({'a': 1}, tmp_path / 'other.json')
    with pytest.raises(TypeError):
        TransportInput.load(tmp_path / 'other.json')
