"""Rotational model of the crankshaft.

A single degree of freedom: the crank angle and its angular velocity. While
the engine runs, the speed approaches the throttle's target exponentially and
is held between idle and max; once stopped it decays toward zero.
"""

import logging
import math
import numbers
from dataclasses import dataclass

from .config import EngineConfig
from .constants import K_APPROACH, K_SPIN_DOWN, MAX_DT, rpm_to_rad_per_sec

logger = logging.getLogger(__name__)


@dataclass
class SimulationState:
    crank_angle: float = 0.0  # radians, unbounded
    angular_velocity: float = 0.0  # rad/s
    throttle: float = 0.0  # 0.0 to 1.0
    running: bool = False
    previous_crank_angle: float = 0.0  # crank angle before the last update


def clamp_dt(dt) -> float:
    """Sanitise a frame time: negative or non-finite values become 0, large ones MAX_DT."""
    if isinstance(dt, bool) or not isinstance(dt, numbers.Real):
        return 0.0
    dt = float(dt)
    if not math.isfinite(dt) or dt < 0:
        return 0.0
    return min(dt, MAX_DT)


def target_angular_velocity(config: EngineConfig, throttle: float) -> float:
    target_rpm = config.idle_rpm + (config.max_rpm - config.idle_rpm) * throttle
    return rpm_to_rad_per_sec(target_rpm)


def update(state: SimulationState, config: EngineConfig, dt: float) -> SimulationState:
    """Advance the crankshaft by one time step."""
    dt = clamp_dt(dt)
    state.previous_crank_angle = state.crank_angle
    if dt == 0.0:
        return state

    omega = state.angular_velocity
    if state.running:
        target = target_angular_velocity(config, state.throttle)
        omega += (target - omega) * min(K_APPROACH * dt, 1.0)
        # Hold the engine between idle and the limiter
        omega = max(config.idle_angular_velocity, min(omega, config.max_angular_velocity))
    else:
        # Friction spin-down
        omega += (0.0 - omega) * min(K_SPIN_DOWN * dt, 1.0)
        omega = max(0.0, omega)

    state.angular_velocity = omega
    state.crank_angle += omega * dt
    return state


def start(state: SimulationState, config: EngineConfig) -> SimulationState:
    """Start the engine at idle speed."""
    if not state.running:
        state.running = True
        state.angular_velocity = config.idle_angular_velocity
        logger.info("Engine started at %.0f RPM", config.idle_rpm)
    return state


def stop(state: SimulationState) -> SimulationState:
    """Stop the engine; it spins down from the next update on."""
    if state.running:
        state.running = False
        logger.info("Engine stopped")
    return state


def set_throttle(state: SimulationState, value) -> SimulationState:
    """Set the throttle level. Booleans map to 0/1, numbers are clamped to [0, 1]."""
    if isinstance(value, bool):
        state.throttle = 1.0 if value else 0.0
        return state

    if not isinstance(value, numbers.Real) or math.isnan(float(value)):
        logger.warning("Ignoring throttle value %r", value)
        return state

    state.throttle = max(0.0, min(1.0, float(value)))
    return state
