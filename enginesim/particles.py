from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .config import EngineConfig, ExhaustKind
from .constants import (
    AMBIENT_RATE,
    BURST_SIZE,
    DEFAULT_MAX_PARTICLES,
    EXHAUST_VELOCITY,
    HEAD_CLEARANCE,
    INTAKE_VELOCITY,
    PORT_OFFSET_X,
    VELOCITY_JITTER,
)
from .dynamics import SimulationState, clamp_dt
from .events import CycleEvent, CylinderEvents
from .kinematics import CylinderPose


class ParticleKind(Enum):
    INTAKE = "intake"
    EXHAUST = "exhaust"


@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    kind: ParticleKind
    life: float = 1.0


BASE_VELOCITY = {
    ParticleKind.INTAKE: INTAKE_VELOCITY,
    ParticleKind.EXHAUST: EXHAUST_VELOCITY,
}

# Exhaust kind -> (plume speed factor, plume rate factor)
EXHAUST_BEHAVIOUR = {
    ExhaustKind.NONE: (1.0, 1.3),
    ExhaustKind.MUFFLER: (0.7, 0.8),
    ExhaustKind.TURBO: (1.6, 1.0),
}

BURST_KINDS = {
    CycleEvent.SPARK: ParticleKind.EXHAUST,
    CycleEvent.PORT_OPEN_EXHAUST: ParticleKind.EXHAUST,
    CycleEvent.PORT_OPEN_INTAKE: ParticleKind.INTAKE,
}


def head_y(config: EngineConfig, center_y: float) -> float:
    """Height of the cylinder head above the crank axis."""
    return center_y - config.crank_radius - config.rod_length - HEAD_CLEARANCE


def port_position(pose: CylinderPose, config: EngineConfig, center_y: float,
                  kind: ParticleKind) -> Tuple[float, float]:
    side = -1.0 if kind == ParticleKind.INTAKE else 1.0
    return pose.piston_x + side * PORT_OFFSET_X, head_y(config, center_y)


class ParticleSystem:
    """Short-lived gas particles drawn at the intake and exhaust ports.

    The collection is capped at `max_particles`; once full, spawning a new
    particle drops the oldest one.
    """

    def __init__(self, max_particles: int = DEFAULT_MAX_PARTICLES,
                 rng: Optional[np.random.Generator] = None):
        self.max_particles = max(1, int(max_particles))
        self.rng = rng if rng is not None else np.random.default_rng()
        self._particles = deque(maxlen=self.max_particles)

    def __len__(self):
        return len(self._particles)

    def __iter__(self):
        return iter(self._particles)

    @property
    def particles(self) -> List[Particle]:
        return list(self._particles)

    def clear(self):
        self._particles.clear()

    def spawn(self, position: Tuple[float, float], velocity_jitter: Tuple[float, float] = (0.0, 0.0),
              kind: ParticleKind = ParticleKind.EXHAUST, speed_scale: float = 1.0) -> Particle:
        """Add one particle with full life."""
        base_vx, base_vy = BASE_VELOCITY[kind]
        particle = Particle(
            x=float(position[0]),
            y=float(position[1]),
            vx=base_vx * speed_scale + velocity_jitter[0],
            vy=base_vy * speed_scale + velocity_jitter[1],
            kind=kind,
        )
        self._particles.append(particle)
        return particle

    def update(self, dt: float):
        """Move every particle and remove the ones whose life ran out."""
        dt = clamp_dt(dt)
        if dt == 0.0:
            return

        survivors = deque(maxlen=self.max_particles)
        for p in self._particles:
            p.x += p.vx * dt
            p.y += p.vy * dt
            p.life -= dt
            if p.life > 0:
                survivors.append(p)
        self._particles = survivors

    def emit(self, state: SimulationState, config: EngineConfig, poses: Iterable[CylinderPose],
             events: Iterable[CylinderEvents], dt: float, center_y: float = 0.0):
        """Spawn the ambient flow for this frame plus bursts for fired cycle events."""
        dt = clamp_dt(dt)
        speed, rate_factor = EXHAUST_BEHAVIOUR[config.exhaust_kind]
        events_by_cylinder = {e.index: e for e in events}

        for pose in poses:
            # Continuous flow while the throttle is open
            if state.running and state.throttle > 0:
                mean = dt * AMBIENT_RATE * state.throttle
                self._spawn_many(int(self.rng.poisson(mean)), pose, config, center_y,
                                 ParticleKind.INTAKE, 1.0)
                exhaust_mean = mean * config.smoke_density * rate_factor
                self._spawn_many(int(self.rng.poisson(exhaust_mean)), pose, config, center_y,
                                 ParticleKind.EXHAUST, speed)

            # Bursts on spark and port openings
            cylinder_events = events_by_cylinder.get(pose.index)
            if cylinder_events is None:
                continue
            for event in cylinder_events.fired:
                kind = BURST_KINDS.get(event)
                if kind is None:
                    continue
                scale = speed if kind == ParticleKind.EXHAUST else 1.0
                self._spawn_many(BURST_SIZE, pose, config, center_y, kind, scale)

    def _spawn_many(self, count, pose, config, center_y, kind, speed_scale):
        position = port_position(pose, config, center_y, kind)
        for _ in range(count):
            jitter = self.rng.uniform(-VELOCITY_JITTER, VELOCITY_JITTER, size=2)
            self.spawn(position, (float(jitter[0]), float(jitter[1])), kind, speed_scale)
