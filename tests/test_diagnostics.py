"""Tests for warnings and status estimates."""

import pytest

from enginesim import diagnostics
from enginesim.config import EngineConfig, Fuel, Material
from enginesim.constants import rpm_to_rad_per_sec
from enginesim.diagnostics import DiagnosticFlag
from enginesim.dynamics import SimulationState


def running_at(rpm_value, throttle=0.0):
    return SimulationState(angular_velocity=rpm_to_rad_per_sec(rpm_value), throttle=throttle, running=True)


class TestTorque:

    def test_zero_at_rest(self):
        assert diagnostics.estimate_torque(SimulationState(), EngineConfig()) == 0.0

    def test_scales_with_cylinders(self):
        state = running_at(3000, 0.5)
        single = diagnostics.estimate_torque(state, EngineConfig(cylinder_count=1))
        quad = diagnostics.estimate_torque(state, EngineConfig(cylinder_count=4))
        assert single > 0
        assert quad == pytest.approx(4 * single)

    def test_diesel_makes_more_torque(self):
        state = running_at(3000, 0.5)
        petrol = diagnostics.estimate_torque(state, EngineConfig())
        diesel = diagnostics.estimate_torque(state, EngineConfig(fuel=Fuel.DIESEL))
        assert diesel == pytest.approx(1.2 * petrol)

    def test_peak_of_curve(self):
        # Curve peaks at 60% of max RPM
        state = running_at(4800, 1.0)
        assert diagnostics.estimate_torque(state, EngineConfig()) == pytest.approx(45.0)

    def test_horsepower(self):
        assert diagnostics.estimate_horsepower(100.0, 5252.0) == pytest.approx(100.0)
        assert diagnostics.estimate_horsepower(0.0, 3000.0) == 0.0


class TestFlags:

    def setup_method(self):
        self.config = EngineConfig()

    def test_no_flags_at_idle(self):
        state = running_at(1000)
        assert diagnostics.evaluate(state, self.config, 10.0) == frozenset()

    def test_over_rpm(self):
        state = running_at(9000)
        assert DiagnosticFlag.OVER_RPM in diagnostics.evaluate(state, self.config, 10.0)

    def test_at_limiter_is_not_over_rpm(self):
        state = running_at(8000)
        assert DiagnosticFlag.OVER_RPM not in diagnostics.evaluate(state, self.config, 10.0)

    def test_ceramic_under_high_torque(self):
        config = EngineConfig(material=Material.CERAMIC)
        state = running_at(3000)
        assert DiagnosticFlag.MATERIAL_FRAGILE in diagnostics.evaluate(state, config, 200.0)
        assert DiagnosticFlag.MATERIAL_FRAGILE not in diagnostics.evaluate(state, config, 100.0)
        assert DiagnosticFlag.MATERIAL_FRAGILE not in diagnostics.evaluate(state, self.config, 200.0)

    def test_diesel_full_throttle(self):
        config = EngineConfig(fuel=Fuel.DIESEL)
        assert DiagnosticFlag.FUEL_MISMATCH in diagnostics.evaluate(running_at(3000, 1.0), config, 10.0)
        assert DiagnosticFlag.FUEL_MISMATCH not in diagnostics.evaluate(running_at(3000, 0.9), config, 10.0)

    def test_warning_messages_in_flag_order(self):
        flags = frozenset({DiagnosticFlag.FUEL_MISMATCH, DiagnosticFlag.OVER_RPM})
        messages = diagnostics.warning_messages(flags)
        assert messages == [
            diagnostics.WARNING_MESSAGES[DiagnosticFlag.OVER_RPM],
            diagnostics.WARNING_MESSAGES[DiagnosticFlag.FUEL_MISMATCH],
        ]
