from MotorTransportTools.sweep.util import (get_templates,
                                            run_one_transport,
                                            save_data_to_hdf5)
from maggma.core import Builder
from h5py import File

from typing import Iterator


class TransportSweep(Builder):
    """
    Builder that runs a batch of transport simulations with sampled network
    parameters and writes them to an hdf5 file
    """

    def __init__(self,
                 num_samples: int,
                 persistence_length: list[float] = None,
                 tube_density: list[float] = None,
                 volume: float = 25,
                 tube_length: float = 100,
                 destination: list[float] = None,
                 max_iterations: int = 100,
                 seed: int = 0,
                 include_positions: bool = False,
                 output_file: str = 'out.h5',
                 max_data_per_group: int = 100000,
                 **kwargs):
        if persistence_length is None:
            persistence_length = [10.0, 1000.0]
        if tube_density is None:
            tube_density = [1.0, 10.0]
        if destination is None:
            destination = [50.0, 50.0, 50.0, 200.0, 200.0, 200.0]

        self.num_samples = num_samples
        self.persistence_length = list(persistence_length)
        self.tube_density = list(tube_density)
        self.volume = volume
        self.tube_length = tube_length
        self.destination = list(destination)
        self.max_iterations = max_iterations
        self.seed = seed
        self.include_positions = include_positions
        self.output_file = output_file
        self.max_data_per_group = max_data_per_group
        self.kwargs = kwargs
        self._file = None

        super().__init__(sources=[], targets=[], chunk_size=1000, **kwargs)

    def connect(self):
        # results go straight to the hdf5 file, there are no stores to open
        return

    @property
    def file(self):
        if self._file is None:
            self._file = File(self.output_file, 'w')
        return self._file

    def get_items(self) -> Iterator[tuple[int, dict]]:
        templates = get_templates(num_samples=self.num_samples,
                                  persistence_length=self.persistence_length,
                                  tube_density=self.tube_density,
                                  seed=self.seed)
        for sample_id, template in enumerate(templates):
            yield (sample_id, template)

    def process_item(self, item: tuple[int, dict]) -> tuple[int, int, dict]:
        sample_id, template = item
        output = run_one_transport(**template,
                                   volume=self.volume,
                                   tube_length=self.tube_length,
                                   destination=self.destination,
                                   max_iterations=self.max_iterations,
                                   include_positions=self.include_positions)

        group_id = int(sample_id // self.max_data_per_group)
        data_id = int(sample_id % self.max_data_per_group)
        return (group_id, data_id, output)

    def update_targets(self, items: list[tuple[int, int, dict]]) -> None:
        for item in items:
            group_id, data_id, output = item
            save_data_to_hdf5(self.file, group_id, data_id, output)
        self.file.flush()

    def finalize(self):
        if self._file is not None:
            self._file.close()
            self._file = None
        super().finalize()
