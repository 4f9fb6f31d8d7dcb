import math

# Default engine configuration
DEFAULT_IDLE_RPM = 1000
DEFAULT_MAX_RPM = 8000
DEFAULT_CYLINDERS = 1
DEFAULT_RINGS = 3
DEFAULT_CRANK_RADIUS = 40.0
DEFAULT_ROD_LENGTH = 100.0
DEFAULT_PISTON_DIAMETER = 40.0
DEFAULT_SMOKE_DENSITY = 1.0

# Configuration domains (inclusive)
IDLE_RPM_RANGE = (500, 3000)
MAX_RPM_RANGE = (4000, 12000)
CYLINDER_RANGE = (1, 12)
RING_RANGE = (0, 5)
CRANK_RADIUS_RANGE = (1.0, 200.0)
ROD_LENGTH_RANGE = (1.0, 400.0)
PISTON_DIAMETER_RANGE = (10.0, 120.0)
SMOKE_DENSITY_RANGE = (0.0, 1.0)

# Rotational dynamics
K_APPROACH = 2.0  # 1/s, exponential approach to target speed while running
K_SPIN_DOWN = 1.5  # 1/s, friction decay toward zero when stopped
MAX_DT = 0.1  # s, largest integration step accepted per tick

# Layout geometry (screen units)
BANK_SPACING = 90.0  # inline distance between cylinder axes
V_BANK_ANGLE = 60.0  # degrees between the two banks of a V engine
BOXER_BANK_OFFSET = 160.0  # distance of each boxer bank from the crank axis

# Cycle timing
SPARK_TOLERANCE = math.radians(3.0)
VALVE_WINDOW = math.radians(30.0)
EXHAUST_PORT_HALF_WINDOW = math.radians(80.0)  # around BDC
INTAKE_PORT_HALF_WINDOW = math.radians(60.0)  # around BDC

# Particles
DEFAULT_MAX_PARTICLES = 600
AMBIENT_RATE = 10.0  # particles per second per cylinder at full throttle
BURST_SIZE = 6
INTAKE_VELOCITY = (35.0, 0.0)
EXHAUST_VELOCITY = (50.0, -10.0)
VELOCITY_JITTER = 20.0
PORT_OFFSET_X = 60.0  # horizontal distance of the ports from the cylinder axis
HEAD_CLEARANCE = 20.0  # gap between the piston at TDC and the cylinder head

# Status and diagnostics
TORQUE_PER_CYLINDER = 45.0  # Nm at the peak of the torque curve
CERAMIC_TORQUE_LIMIT = 150.0  # Nm
RPM_TOLERANCE = 1e-6
HP_CONSTANT = 5252.0

# Normalised torque curve over the fraction of max RPM
TORQUE_CURVE_RPM = [0.0, 0.15, 0.3, 0.45, 0.6, 0.75, 0.9, 1.0]
TORQUE_CURVE_VALUE = [0.55, 0.75, 0.88, 0.97, 1.0, 0.96, 0.88, 0.8]


def rpm_to_rad_per_sec(rpm):
    return rpm * 2 * math.pi / 60


def rad_per_sec_to_rpm(omega):
    return omega * 60 / (2 * math.pi)
