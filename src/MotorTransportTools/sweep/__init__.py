from MotorTransportTools.sweep.util import (get_transport_sweep_parser,
                                            get_templates, run_one_transport,
                                            save_data_to_hdf5,
                                            load_data_from_hdf5)
