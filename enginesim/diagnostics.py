"""Advisory warnings and status readouts.

Everything here is recomputed from the current state each frame and never
feeds back into the simulation.
"""

from enum import Enum, auto
from typing import FrozenSet, List

import numpy as np
from scipy.interpolate import interp1d

from .config import EngineConfig, Fuel, Material
from .constants import (
    CERAMIC_TORQUE_LIMIT,
    HP_CONSTANT,
    RPM_TOLERANCE,
    TORQUE_CURVE_RPM,
    TORQUE_CURVE_VALUE,
    TORQUE_PER_CYLINDER,
    rad_per_sec_to_rpm,
)
from .dynamics import SimulationState


class DiagnosticFlag(Enum):
    OVER_RPM = auto()
    MATERIAL_FRAGILE = auto()
    FUEL_MISMATCH = auto()


WARNING_MESSAGES = {
    DiagnosticFlag.OVER_RPM: "Over-rev: RPM above the limiter",
    DiagnosticFlag.MATERIAL_FRAGILE: "Ceramic pistons under high torque",
    DiagnosticFlag.FUEL_MISMATCH: "Diesel at full throttle: no spark needed",
}

# Diesel makes more low-end torque in this model
FUEL_TORQUE_FACTOR = {
    Fuel.GASOLINE: 1.0,
    Fuel.DIESEL: 1.2,
}

# Torque curve over the fraction of max RPM
torque_curve = interp1d(TORQUE_CURVE_RPM, TORQUE_CURVE_VALUE, kind='cubic',
                        bounds_error=False,
                        fill_value=(TORQUE_CURVE_VALUE[0], TORQUE_CURVE_VALUE[-1]))


def rpm(state: SimulationState) -> float:
    return rad_per_sec_to_rpm(state.angular_velocity)


def estimate_torque(state: SimulationState, config: EngineConfig) -> float:
    """Estimated crankshaft torque in Nm; zero while the crank is at rest."""
    if state.angular_velocity <= 0:
        return 0.0

    fraction = rpm(state) / config.max_rpm
    shape = float(np.clip(torque_curve(fraction), 0.0, None))
    throttle_factor = 0.2 + 0.8 * state.throttle
    return (TORQUE_PER_CYLINDER * config.cylinder_count * shape
            * throttle_factor * FUEL_TORQUE_FACTOR[config.fuel])


def estimate_horsepower(torque: float, engine_rpm: float) -> float:
    # HP = Torque * RPM / 5252
    return torque * engine_rpm / HP_CONSTANT


def evaluate(state: SimulationState, config: EngineConfig, torque: float) -> FrozenSet[DiagnosticFlag]:
    """Derive the warning flags for the current frame."""
    flags = set()

    if rpm(state) > config.max_rpm + RPM_TOLERANCE:
        flags.add(DiagnosticFlag.OVER_RPM)

    if config.material == Material.CERAMIC and torque > CERAMIC_TORQUE_LIMIT:
        flags.add(DiagnosticFlag.MATERIAL_FRAGILE)

    if config.fuel == Fuel.DIESEL and state.throttle == 1.0:
        flags.add(DiagnosticFlag.FUEL_MISMATCH)

    return frozenset(flags)


def warning_messages(flags) -> List[str]:
    # Stable order for the status panel
    return [WARNING_MESSAGES[flag] for flag in DiagnosticFlag if flag in flags]
