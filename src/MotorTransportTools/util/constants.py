from math import pi

# Network generation defaults (lengths in nm, angles in degrees)
DEFAULT_VOLUME = 25
DEFAULT_TUBE_LENGTH = 100
DEFAULT_INTRA_TUBE_ANGLE = 30
DEFAULT_INTER_TUBE_ANGLE = 10
DEFAULT_TUBE_DENSITY = 10
DEFAULT_PERSISTENCE_LENGTH = 50
DEFAULT_SEG_PER_TUBE = 10

# A tube's segment length is a fixed fraction of the mean tube length
SEGMENTS_PER_TUBE_LENGTH = 5

# Histogram resolution used for structural entropy
ENTROPY_BINS = 100

# Bend angles are wrapped onto this interval before entropy binning
ANGLE_RANGE = (-pi, pi)

# Motor defaults
# diffusion coefficient, in nm^2/s
DIFFUSIVITY = 1.0

# distance within which a motor can bind to a filament, in nm
BINDING_RADIUS = 15.0

# speed of a bound motor walking along a filament, in nm/s
MOVEMENT_RATE = 1000.0

# Brownian time step, in s
TIME_PERIOD = 0.1

# Brownian steps per float attempt
FLOAT_STEPS = 200

# float/walk cycles before a transport run times out
MAX_ITERATIONS = 100
