"""Headless engine traces.

Runs the simulation without a window over a fixed frame time and plots RPM,
piston travel and spark timing with matplotlib:

    python -m enginesim.plotting --ticks 600 --cylinders 4 --output trace.png
"""

import argparse
import logging

import matplotlib
import matplotlib.pyplot as plt
import numpy as np

from .config import EngineConfig, StrokeType
from .events import CycleEvent
from .simulation import EngineSimulation

logger = logging.getLogger(__name__)


def run_trace(config=None, ticks=600, dt=1 / 60, throttle=1.0, throttle_at=1.0, seed=0):
    """Run `ticks` frames and record the engine's state after each.

    The engine starts at idle; `throttle` is applied once `throttle_at`
    seconds have passed.

    Returns a dict of numpy arrays: time, rpm, torque, horsepower (one value
    per tick), piston_y and sparks (ticks x cylinders).
    """
    sim = EngineSimulation(config if config is not None else EngineConfig(), seed=seed)
    n = sim.config.cylinder_count
    ticks = max(0, int(ticks))

    time = np.zeros(ticks)
    engine_rpm = np.zeros(ticks)
    torque = np.zeros(ticks)
    horsepower = np.zeros(ticks)
    piston_y = np.zeros((ticks, n))
    sparks = np.zeros((ticks, n), dtype=bool)

    sim.start()
    elapsed = 0.0
    throttle_applied = False
    for i in range(ticks):
        if not throttle_applied and elapsed >= throttle_at:
            sim.set_throttle(throttle)
            throttle_applied = True

        snapshot = sim.tick(dt)
        elapsed += dt

        time[i] = elapsed
        engine_rpm[i] = snapshot.rpm
        torque[i] = snapshot.torque
        horsepower[i] = snapshot.horsepower
        for pose in snapshot.poses:
            piston_y[i, pose.index] = pose.piston_y
        for events in snapshot.events:
            sparks[i, events.index] = CycleEvent.SPARK in events.fired

    logger.info("Traced %d ticks, %d sparks", ticks, int(sparks.sum()))
    return {
        "time": time,
        "rpm": engine_rpm,
        "torque": torque,
        "horsepower": horsepower,
        "piston_y": piston_y,
        "sparks": sparks,
    }


def plot_trace(trace, output_path="engine_trace.png"):
    """Plot a trace from `run_trace` and save it to `output_path`."""
    plt.style.use('dark_background')
    fig, (ax1, ax2, ax3) = plt.subplots(3, 1, figsize=(12, 10), sharex=True,
                                        gridspec_kw={'height_ratios': [2, 2, 1]})
    time = trace["time"]

    ax1.plot(time, trace["rpm"], color="cyan", label="RPM")
    ax1.set_ylabel("RPM")
    ax1.set_title("Engine Trace")
    ax1.grid(True, alpha=0.3)
    ax1.legend(loc="lower right")

    # Piston travel; screen y grows downwards, so flip to show TDC on top
    for i in range(trace["piston_y"].shape[1]):
        ax2.plot(time, -trace["piston_y"][:, i], label=f"Cylinder {i + 1}")
    ax2.set_ylabel("Piston height")
    ax2.grid(True, alpha=0.3)
    if trace["piston_y"].shape[1] <= 6:
        ax2.legend(loc="lower right")

    for i in range(trace["sparks"].shape[1]):
        fired = time[trace["sparks"][:, i]]
        ax3.scatter(fired, np.full(len(fired), i + 1), color="gold", marker="|", s=120)
    ax3.set_ylabel("Spark")
    ax3.set_xlabel("Time (s)")
    ax3.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_path)
    plt.close(fig)

    logger.info("Saved trace plot to %s", output_path)
    return output_path


def main(argv=None):
    parser = argparse.ArgumentParser(description="Plot a headless engine trace")
    parser.add_argument("--ticks", type=int, default=600)
    parser.add_argument("--dt", type=float, default=1 / 60)
    parser.add_argument("--cylinders", type=int, default=1)
    parser.add_argument("--stroke", choices=["two", "four"], default="four")
    parser.add_argument("--output", default="engine_trace.png")
    args = parser.parse_args(argv)

    # File output only
    matplotlib.use("Agg")
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    config = EngineConfig(stroke_type=StrokeType(args.stroke), cylinder_count=args.cylinders)
    trace = run_trace(config, ticks=args.ticks, dt=args.dt)
    print(f"Trace saved to {plot_trace(trace, args.output)}")


if __name__ == "__main__":
    main()
