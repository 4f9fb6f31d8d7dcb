"""Tests for spark, valve and port event detection."""

import math

import pytest

from enginesim.config import EngineConfig, StrokeType
from enginesim.dynamics import SimulationState
from enginesim.events import (
    CycleEvent,
    CycleEventDetector,
    Stroke,
    crossing_index,
    edge_angles,
    stroke_at,
)


def sweep(detector, config, start, end, step, running=True):
    """Move the crank from `start` to `end` in steps, returning every frame's events."""
    state = SimulationState(running=running)
    frames = []
    angle = start
    while angle < end:
        state.previous_crank_angle = angle
        angle = min(angle + step, end)
        state.crank_angle = angle
        frames.append(detector.detect(state, config))
    return frames


def count_fired(frames, event, index=0):
    return sum(1 for frame in frames if event in frame[index].fired)


class TestFourStrokeSpark:

    def setup_method(self):
        self.config = EngineConfig()
        self.detector = CycleEventDetector()

    def test_once_per_two_revolutions(self):
        frames = sweep(self.detector, self.config, 0.0, 8 * math.pi, 0.05)
        assert count_fired(frames, CycleEvent.SPARK) == 2

    def test_large_step_fires_once(self):
        frames = sweep(self.detector, self.config, 0.0, 3 * math.pi, 3 * math.pi)
        assert len(frames) == 1
        assert frames[0][0].event == CycleEvent.SPARK

    def test_no_spark_before_edge(self):
        frames = sweep(self.detector, self.config, 0.0, math.pi, 0.05)
        assert count_fired(frames, CycleEvent.SPARK) == 0

    def test_recrossing_does_not_refire(self):
        state = SimulationState(running=True)
        state.previous_crank_angle, state.crank_angle = 0.0, 2 * math.pi
        assert CycleEvent.SPARK in self.detector.detect(state, self.config)[0].fired

        # Crank drifts back over the edge and forward again
        state.previous_crank_angle, state.crank_angle = 2 * math.pi, 2 * math.pi - 0.2
        assert not self.detector.detect(state, self.config)[0].fired
        state.previous_crank_angle, state.crank_angle = 2 * math.pi - 0.2, 2 * math.pi
        assert not self.detector.detect(state, self.config)[0].fired

    def test_reset_forgets_history(self):
        state = SimulationState(running=True)
        state.previous_crank_angle, state.crank_angle = 0.0, 2 * math.pi
        self.detector.detect(state, self.config)
        self.detector.reset()
        state.previous_crank_angle, state.crank_angle = 2 * math.pi - 0.2, 2 * math.pi
        assert CycleEvent.SPARK in self.detector.detect(state, self.config)[0].fired

    def test_no_spark_when_stopped(self):
        frames = sweep(self.detector, self.config, 0.0, 8 * math.pi, 0.05, running=False)
        assert count_fired(frames, CycleEvent.SPARK) == 0

    def test_every_cylinder_fires_once_per_cycle(self):
        config = EngineConfig(cylinder_count=4)
        frames = sweep(self.detector, config, 0.0, 4 * math.pi, 0.05)
        for i in range(4):
            assert count_fired(frames, CycleEvent.SPARK, i) == 1

    def test_valve_open_near_exchange_tdc(self):
        state = SimulationState(running=True)
        events = self.detector.detect(state, self.config)[0]
        assert events.valve_open
        assert events.event == CycleEvent.VALVE_OPEN

        state.previous_crank_angle = state.crank_angle = math.pi
        events = self.detector.detect(state, self.config)[0]
        assert not events.valve_open
        assert events.event == CycleEvent.VALVE_CLOSED


class TestTwoStroke:

    def setup_method(self):
        self.config = EngineConfig(stroke_type=StrokeType.TWO)
        self.detector = CycleEventDetector()

    def test_spark_every_revolution(self):
        frames = sweep(self.detector, self.config, 0.0, 8 * math.pi, 0.05)
        assert count_fired(frames, CycleEvent.SPARK) == 4

    def test_ports_open_once_per_revolution(self):
        frames = sweep(self.detector, self.config, 0.0, 2 * math.pi, 0.01)
        assert count_fired(frames, CycleEvent.PORT_OPEN_EXHAUST) == 1
        assert count_fired(frames, CycleEvent.PORT_OPEN_INTAKE) == 1

    def test_exhaust_port_opens_first(self):
        frames = sweep(self.detector, self.config, 0.0, 2 * math.pi, 0.01)
        exhaust = next(i for i, f in enumerate(frames) if CycleEvent.PORT_OPEN_EXHAUST in f[0].fired)
        intake = next(i for i, f in enumerate(frames) if CycleEvent.PORT_OPEN_INTAKE in f[0].fired)
        assert exhaust < intake

    def test_ports_fire_when_stopped(self):
        frames = sweep(self.detector, self.config, 0.0, 2 * math.pi, 0.05, running=False)
        assert count_fired(frames, CycleEvent.PORT_OPEN_EXHAUST) == 1
        assert count_fired(frames, CycleEvent.SPARK) == 0

    def test_port_state_near_bdc(self):
        state = SimulationState()
        state.previous_crank_angle = state.crank_angle = math.pi
        events = self.detector.detect(state, self.config)[0]
        assert events.exhaust_port_open
        assert events.intake_port_open
        assert events.event == CycleEvent.NONE
        assert not events.valve_open

    def test_no_valves(self):
        state = SimulationState()
        events = self.detector.detect(state, self.config)[0]
        assert not events.valve_open
        assert not events.exhaust_port_open


class TestHelpers:

    def test_four_stroke_order(self):
        assert stroke_at(0.5, StrokeType.FOUR) == Stroke.INTAKE
        assert stroke_at(math.pi + 0.5, StrokeType.FOUR) == Stroke.COMPRESSION
        assert stroke_at(2 * math.pi + 0.5, StrokeType.FOUR) == Stroke.POWER
        assert stroke_at(3 * math.pi + 0.5, StrokeType.FOUR) == Stroke.EXHAUST

    def test_two_stroke_order(self):
        assert stroke_at(0.5, StrokeType.TWO) == Stroke.POWER
        assert stroke_at(math.pi + 0.5, StrokeType.TWO) == Stroke.COMPRESSION

    def test_spark_edge_just_before_tdc(self):
        edge = edge_angles(StrokeType.FOUR)[CycleEvent.SPARK]
        assert edge == pytest.approx(2 * math.pi - math.radians(3))
        assert set(edge_angles(StrokeType.FOUR)) == {CycleEvent.SPARK}

    def test_crossing_index(self):
        cycle = 4 * math.pi
        assert crossing_index(0.0, 1.0, cycle) == -1
        assert crossing_index(1.5, 1.0, cycle) == 0
        assert crossing_index(1.5 + cycle, 1.0, cycle) == 1


class TestValveWindow:

    def at_cycle_angle(self, detector, angle):
        state = SimulationState()
        state.previous_crank_angle = state.crank_angle = angle
        return detector.detect(state, EngineConfig())[0]

    def test_default_window(self):
        detector = CycleEventDetector()
        assert detector.valve_window == pytest.approx(math.radians(30))
        assert self.at_cycle_angle(detector, math.radians(20)).valve_open
        assert not self.at_cycle_angle(detector, math.radians(40)).valve_open

    def test_narrow_window(self):
        detector = CycleEventDetector(valve_window=math.radians(10))
        assert not self.at_cycle_angle(detector, math.radians(20)).valve_open
        assert self.at_cycle_angle(detector, math.radians(5)).valve_open
        # Symmetric around the exchange TDC
        assert self.at_cycle_angle(detector, 4 * math.pi - math.radians(5)).valve_open
