from MotorTransportTools.inputs.network_characteristics import (
    NetworkCharacteristics)
from MotorTransportTools.inputs.tube_network import (TubeNetwork,
                                                     generate_tube_network,
                                                     structural_entropy)
from MotorTransportTools.inputs.volume_surface import (VolumeSurface,
                                                       SurfaceKind)
