"""The simulation context: owns configuration, state, events and particles.

Collaborators never touch the state directly. They queue commands, which are
applied at the start of the next `tick`, and read the immutable `Snapshot`
published at its end.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, FrozenSet, Optional, Tuple

import numpy as np

from . import diagnostics, dynamics
from .config import EngineConfig
from .constants import DEFAULT_MAX_PARTICLES
from .diagnostics import DiagnosticFlag
from .dynamics import SimulationState
from .events import CycleEventDetector, CylinderEvents
from .kinematics import CylinderPose, engine_poses
from .particles import Particle, ParticleSystem

logger = logging.getLogger(__name__)

# Changing these invalidates the per-cylinder firing history
_TIMING_FIELDS = {"cylinder_count", "stroke_type"}


# Commands
@dataclass(frozen=True)
class SetConfig:
    field: str
    value: Any


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class Stop:
    pass


@dataclass(frozen=True)
class SetThrottle:
    value: Any


@dataclass(frozen=True)
class Snapshot:
    config: EngineConfig
    crank_angle: float
    angular_velocity: float
    rpm: float
    throttle: float
    running: bool
    poses: Tuple[CylinderPose, ...]
    events: Tuple[CylinderEvents, ...]
    particles: Tuple[Particle, ...]
    flags: FrozenSet[DiagnosticFlag]
    torque: float
    horsepower: float
    warnings: Tuple[str, ...]
    center: Tuple[float, float]


class EngineSimulation:
    def __init__(self, config: Optional[EngineConfig] = None, center: Tuple[float, float] = (0.0, 0.0),
                 max_particles: int = DEFAULT_MAX_PARTICLES, seed: Optional[int] = None):
        self.config = config if config is not None else EngineConfig()
        self.state = SimulationState()
        self.center = center
        self.detector = CycleEventDetector()
        self.particles = ParticleSystem(max_particles, rng=np.random.default_rng(seed))
        self._pending = deque()
        self.snapshot = self._build_snapshot((), ())

    # Command interface
    def submit(self, command):
        self._pending.append(command)

    def start(self):
        self.submit(Start())

    def stop(self):
        self.submit(Stop())

    def set_throttle(self, value):
        self.submit(SetThrottle(value))

    def set_config(self, field, value):
        self.submit(SetConfig(field, value))

    def apply(self, command):
        """Apply one command immediately."""
        if isinstance(command, Start):
            dynamics.start(self.state, self.config)
        elif isinstance(command, Stop):
            dynamics.stop(self.state)
        elif isinstance(command, SetThrottle):
            dynamics.set_throttle(self.state, command.value)
        elif isinstance(command, SetConfig):
            if self.config.set_field(command.field, command.value) and command.field in _TIMING_FIELDS:
                self.detector.reset()
        else:
            logger.warning("Ignoring unknown command %r", command)

    def tick(self, dt: float) -> Snapshot:
        """Advance the whole engine by one frame and publish a new snapshot."""
        while self._pending:
            self.apply(self._pending.popleft())

        dt = dynamics.clamp_dt(dt)
        dynamics.update(self.state, self.config, dt)

        poses = engine_poses(self.state.crank_angle, self.config, self.center)
        events = self.detector.detect(self.state, self.config)

        self.particles.update(dt)
        self.particles.emit(self.state, self.config, poses, events, dt, self.center[1])

        self.snapshot = self._build_snapshot(tuple(poses), tuple(events))
        return self.snapshot

    def _build_snapshot(self, poses, events):
        torque = diagnostics.estimate_torque(self.state, self.config)
        engine_rpm = diagnostics.rpm(self.state)
        flags = diagnostics.evaluate(self.state, self.config, torque)
        return Snapshot(
            config=self.config.copy(),
            crank_angle=self.state.crank_angle,
            angular_velocity=self.state.angular_velocity,
            rpm=engine_rpm,
            throttle=self.state.throttle,
            running=self.state.running,
            poses=poses,
            events=events,
            particles=tuple(Particle(p.x, p.y, p.vx, p.vy, p.kind, p.life) for p in self.particles),
            flags=flags,
            torque=torque,
            horsepower=diagnostics.estimate_horsepower(torque, engine_rpm),
            warnings=tuple(diagnostics.warning_messages(flags)),
            center=self.center,
        )
