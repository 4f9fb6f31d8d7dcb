"""Real-time piston engine simulator."""

from .config import EngineConfig, ExhaustKind, Fuel, Layout, Material, StrokeType
from .simulation import EngineSimulation, SetConfig, SetThrottle, Snapshot, Start, Stop

__version__ = "0.2.0"

__all__ = [
    "EngineConfig",
    "EngineSimulation",
    "ExhaustKind",
    "Fuel",
    "Layout",
    "Material",
    "SetConfig",
    "SetThrottle",
    "Snapshot",
    "Start",
    "Stop",
    "StrokeType",
]
