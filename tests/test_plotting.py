"""Tests for headless traces and plots."""

import importlib

import matplotlib
import numpy as np

from enginesim import plotting
from enginesim.config import EngineConfig, StrokeType
from enginesim.plotting import main, plot_trace, run_trace


class TestTrace:

    def test_shapes(self):
        trace = run_trace(EngineConfig(cylinder_count=2), ticks=120)
        assert trace["time"].shape == (120,)
        assert trace["rpm"].shape == (120,)
        assert trace["piston_y"].shape == (120, 2)
        assert trace["sparks"].shape == (120, 2)
        assert trace["sparks"].dtype == bool

    def test_rpm_rises_after_throttle(self):
        trace = run_trace(ticks=180, throttle=1.0, throttle_at=1.0)
        assert np.all(trace["rpm"] >= 1000.0 - 1e-6)
        assert trace["rpm"][-1] > trace["rpm"][50]

    def test_piston_travel_is_one_stroke(self):
        config = EngineConfig(crank_radius=40, rod_length=120)
        trace = run_trace(config, ticks=240, dt=1 / 240)
        travel = trace["piston_y"].max() - trace["piston_y"].min()
        assert 70.0 < travel <= 80.0 + 1e-9

    def test_two_stroke_sparks_more(self):
        four = run_trace(EngineConfig(), ticks=120)
        two = run_trace(EngineConfig(stroke_type=StrokeType.TWO), ticks=120)
        assert two["sparks"].sum() > four["sparks"].sum()


class TestPlot:

    def test_plot_written(self, tmp_path):
        trace = run_trace(EngineConfig(cylinder_count=3), ticks=60)
        path = plot_trace(trace, str(tmp_path / "trace.png"))
        assert (tmp_path / "trace.png").exists()
        assert path.endswith("trace.png")

    def test_cli(self, tmp_path):
        output = tmp_path / "cli.png"
        main(["--ticks", "30", "--cylinders", "2", "--stroke", "two", "--output", str(output)])
        assert output.exists()


class TestBackend:

    def test_import_keeps_backend(self):
        matplotlib.use("svg")
        try:
            importlib.reload(plotting)
            assert matplotlib.get_backend().lower() == "svg"
        finally:
            matplotlib.use("Agg")

    def test_cli_selects_file_backend(self, tmp_path):
        matplotlib.use("svg")
        plotting.main(["--ticks", "10", "--output", str(tmp_path / "agg.png")])
        assert matplotlib.get_backend().lower() == "agg"
