from MotorTransportTools.sweep.runner import TransportSweep
from MotorTransportTools.sweep.util import get_transport_sweep_parser
from MotorTransportTools.util.log import setup_logging

import logging

if __name__ == "__main__":
    parser = get_transport_sweep_parser()
    args = parser.parse_args()

    setup_logging(logging.INFO)

    sweep = TransportSweep(**vars(args))
    sweep.run()
