"""Cycle timing: spark, valve and port events per cylinder.

A four-stroke cylinder completes its cycle in two crank revolutions (4π), a
two-stroke in one (2π). Cycle angle 0 is the top dead centre that starts the
intake stroke (four-stroke) or the power stroke (two-stroke).

Edge events (spark, port opening) are found by counting how many times the
crank has passed the event's edge angle: if the count grew since the last
frame, the edge was crossed, however large the step was.
"""

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, FrozenSet, List

from .config import EngineConfig, StrokeType
from .constants import (
    EXHAUST_PORT_HALF_WINDOW,
    INTAKE_PORT_HALF_WINDOW,
    SPARK_TOLERANCE,
    VALVE_WINDOW,
)
from .dynamics import SimulationState

TWO_PI = 2 * math.pi


class CycleEvent(Enum):
    NONE = auto()
    VALVE_OPEN = auto()
    VALVE_CLOSED = auto()
    SPARK = auto()
    PORT_OPEN_INTAKE = auto()
    PORT_OPEN_EXHAUST = auto()


class Stroke(Enum):
    INTAKE = auto()
    COMPRESSION = auto()
    POWER = auto()
    EXHAUST = auto()


FOUR_STROKE_ORDER = [Stroke.INTAKE, Stroke.COMPRESSION, Stroke.POWER, Stroke.EXHAUST]
TWO_STROKE_ORDER = [Stroke.POWER, Stroke.COMPRESSION]

# Which tag a frame reports when several edges fire at once
EVENT_PRIORITY = [CycleEvent.SPARK, CycleEvent.PORT_OPEN_EXHAUST, CycleEvent.PORT_OPEN_INTAKE]


@dataclass(frozen=True)
class CylinderEvents:
    index: int
    event: CycleEvent
    fired: FrozenSet[CycleEvent]
    cycle_angle: float
    stroke: Stroke
    valve_open: bool = False
    intake_port_open: bool = False
    exhaust_port_open: bool = False


def spark_angle(stroke_type: StrokeType) -> float:
    """Cycle angle of the firing TDC."""
    return TWO_PI if stroke_type == StrokeType.FOUR else 0.0


def edge_angles(stroke_type: StrokeType) -> Dict[CycleEvent, float]:
    """Cycle angles at which each edge event fires."""
    cycle = 2 * TWO_PI if stroke_type == StrokeType.FOUR else TWO_PI
    # Spark fires on entry into the TDC window
    edges = {CycleEvent.SPARK: (spark_angle(stroke_type) - SPARK_TOLERANCE) % cycle}
    if stroke_type == StrokeType.TWO:
        # Piston uncovers the exhaust port first, then the transfer port
        edges[CycleEvent.PORT_OPEN_EXHAUST] = math.pi - EXHAUST_PORT_HALF_WINDOW
        edges[CycleEvent.PORT_OPEN_INTAKE] = math.pi - INTAKE_PORT_HALF_WINDOW
    return edges


def cylinder_offset(index: int, cylinder_count: int) -> float:
    return index * TWO_PI / max(1, cylinder_count)


def cycle_angle(crank_angle: float, index: int, config: EngineConfig) -> float:
    return (crank_angle + cylinder_offset(index, config.cylinder_count)) % config.cycle_length


def crossing_index(angle: float, edge: float, cycle_length: float) -> int:
    """Number of times `edge` has been passed by an unbounded angle."""
    return math.floor((angle - edge) / cycle_length)


def _angular_distance(a, b, cycle_length):
    d = (a - b) % cycle_length
    return min(d, cycle_length - d)


def stroke_at(angle: float, stroke_type: StrokeType) -> Stroke:
    half_turns = int(angle // math.pi)
    if stroke_type == StrokeType.FOUR:
        return FOUR_STROKE_ORDER[half_turns % 4]
    return TWO_STROKE_ORDER[half_turns % 2]


class CycleEventDetector:
    """Classifies per-cylinder cycle events from the crank motion of the last frame."""

    def __init__(self, valve_window: float = VALVE_WINDOW):
        self.valve_window = valve_window
        # (cylinder, event) -> crossing index of the last firing
        self._last_fired = {}

    def reset(self):
        """Forget firing history, e.g. after the cylinder count or stroke type changed."""
        self._last_fired.clear()

    def detect(self, state: SimulationState, config: EngineConfig) -> List[CylinderEvents]:
        cycle = config.cycle_length
        edges = edge_angles(config.stroke_type)
        results = []

        for i in range(config.cylinder_count):
            offset = cylinder_offset(i, config.cylinder_count)
            previous = state.previous_crank_angle + offset
            current = state.crank_angle + offset

            fired = set()
            for event, edge in edges.items():
                # No ignition while the engine is switched off
                if event == CycleEvent.SPARK and not state.running:
                    continue
                if self._crossed(i, event, previous, current, edge, cycle):
                    fired.add(event)

            angle = current % cycle
            results.append(self._classify(i, angle, frozenset(fired), config))

        return results

    def _crossed(self, index, event, previous, current, edge, cycle):
        k_previous = crossing_index(previous, edge, cycle)
        k_current = crossing_index(current, edge, cycle)
        if k_current <= k_previous:
            return False

        key = (index, event)
        last = self._last_fired.get(key)
        if last is not None and k_current <= last:
            return False

        self._last_fired[key] = k_current
        return True

    def _classify(self, index, angle, fired, config):
        stroke = stroke_at(angle, config.stroke_type)
        valve_open = False
        intake_port_open = False
        exhaust_port_open = False

        if config.stroke_type == StrokeType.FOUR:
            # Valve overlap around the gas-exchange TDC
            valve_open = _angular_distance(angle, 0.0, config.cycle_length) <= self.valve_window
            default = CycleEvent.VALVE_OPEN if valve_open else CycleEvent.VALVE_CLOSED
        else:
            # Static ports, uncovered while the piston is near BDC
            from_bdc = _angular_distance(angle, math.pi, config.cycle_length)
            exhaust_port_open = from_bdc <= EXHAUST_PORT_HALF_WINDOW
            intake_port_open = from_bdc <= INTAKE_PORT_HALF_WINDOW
            default = CycleEvent.NONE

        event = next((e for e in EVENT_PRIORITY if e in fired), default)
        return CylinderEvents(
            index=index,
            event=event,
            fired=fired,
            cycle_angle=angle,
            stroke=stroke,
            valve_open=valve_open,
            intake_port_open=intake_port_open,
            exhaust_port_open=exhaust_port_open,
        )
