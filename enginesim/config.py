import logging
import math
import numbers
from dataclasses import dataclass, fields, replace
from enum import Enum

from .constants import (
    CRANK_RADIUS_RANGE,
    CYLINDER_RANGE,
    DEFAULT_CRANK_RADIUS,
    DEFAULT_CYLINDERS,
    DEFAULT_IDLE_RPM,
    DEFAULT_MAX_RPM,
    DEFAULT_PISTON_DIAMETER,
    DEFAULT_RINGS,
    DEFAULT_ROD_LENGTH,
    DEFAULT_SMOKE_DENSITY,
    IDLE_RPM_RANGE,
    MAX_RPM_RANGE,
    PISTON_DIAMETER_RANGE,
    RING_RANGE,
    ROD_LENGTH_RANGE,
    SMOKE_DENSITY_RANGE,
    rpm_to_rad_per_sec,
)

logger = logging.getLogger(__name__)


# Engine Configuration Enums
class StrokeType(Enum):
    TWO = "two"
    FOUR = "four"

    @classmethod
    def _missing_(cls, value):
        # Accept the "2-stroke" / "4-stroke" labels used by the toolbox
        aliases = {"2-stroke": cls.TWO, "4-stroke": cls.FOUR}
        return aliases.get(value)


class Layout(Enum):
    INLINE = "inline"
    V = "v"
    BOXER = "boxer"

    @classmethod
    def _missing_(cls, value):
        return {"flat": cls.BOXER}.get(value)


class Material(Enum):
    STEEL = "steel"
    ALUMINUM = "aluminum"
    CERAMIC = "ceramic"


class ExhaustKind(Enum):
    NONE = "none"
    MUFFLER = "muffler"
    TURBO = "turbo"


class Fuel(Enum):
    GASOLINE = "gasoline"
    DIESEL = "diesel"


_ENUM_FIELDS = {
    "stroke_type": StrokeType,
    "layout": Layout,
    "material": Material,
    "exhaust_kind": ExhaustKind,
    "fuel": Fuel,
}

# field -> ((low, high), type)
_NUMERIC_FIELDS = {
    "cylinder_count": (CYLINDER_RANGE, int),
    "ring_count": (RING_RANGE, int),
    "idle_rpm": (IDLE_RPM_RANGE, float),
    "max_rpm": (MAX_RPM_RANGE, float),
    "crank_radius": (CRANK_RADIUS_RANGE, float),
    "rod_length": (ROD_LENGTH_RANGE, float),
    "piston_diameter": (PISTON_DIAMETER_RANGE, float),
    "smoke_density": (SMOKE_DENSITY_RANGE, float),
}


def coerce_value(name, value):
    """Return `value` converted into the domain of field `name`, or None if it is rejected.

    Numbers are clamped to the field's range (integers are rounded first).
    Enum fields accept a member or its tag string; anything else is rejected.
    """
    if name in _ENUM_FIELDS:
        enum_cls = _ENUM_FIELDS[name]
        if isinstance(value, enum_cls):
            return value
        if isinstance(value, str):
            try:
                return enum_cls(value.strip().lower())
            except ValueError:
                return None
        return None

    if name not in _NUMERIC_FIELDS:
        return None

    (low, high), cast = _NUMERIC_FIELDS[name]
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    value = float(value)
    if math.isnan(value):
        return None

    value = max(low, min(value, high))
    if cast is int:
        return int(round(value))
    return value


@dataclass
class EngineConfig:
    # Cycle and topology
    stroke_type: StrokeType = StrokeType.FOUR
    layout: Layout = Layout.INLINE
    cylinder_count: int = DEFAULT_CYLINDERS

    # Piston config
    ring_count: int = DEFAULT_RINGS
    material: Material = Material.STEEL

    # Exhaust and fuel
    exhaust_kind: ExhaustKind = ExhaustKind.MUFFLER
    fuel: Fuel = Fuel.GASOLINE
    smoke_density: float = DEFAULT_SMOKE_DENSITY

    # ECU limits
    idle_rpm: float = DEFAULT_IDLE_RPM
    max_rpm: float = DEFAULT_MAX_RPM

    # Geometry (screen units)
    crank_radius: float = DEFAULT_CRANK_RADIUS
    rod_length: float = DEFAULT_ROD_LENGTH
    piston_diameter: float = DEFAULT_PISTON_DIAMETER

    def __post_init__(self):
        # Clamp constructor values; unusable ones fall back to the field default
        for f in fields(self):
            value = getattr(self, f.name)
            coerced = coerce_value(f.name, value)
            if coerced is None:
                logger.warning("Invalid %s=%r, using default %r", f.name, value, f.default)
                coerced = f.default
            setattr(self, f.name, coerced)

    def set_field(self, name: str, value) -> bool:
        """Set a single field. Returns False (keeping the old value) when the value is rejected."""
        if name not in _ENUM_FIELDS and name not in _NUMERIC_FIELDS:
            logger.warning("Unknown configuration field %r", name)
            return False

        coerced = coerce_value(name, value)
        if coerced is None:
            logger.warning("Rejected %s=%r, keeping %r", name, value, getattr(self, name))
            return False

        setattr(self, name, coerced)
        return True

    def copy(self) -> "EngineConfig":
        return replace(self)

    @property
    def idle_angular_velocity(self) -> float:
        return rpm_to_rad_per_sec(self.idle_rpm)

    @property
    def max_angular_velocity(self) -> float:
        return rpm_to_rad_per_sec(self.max_rpm)

    @property
    def cycle_length(self) -> float:
        """Crank rotation (radians) covering one full cycle of a cylinder."""
        revolutions = 2 if self.stroke_type == StrokeType.FOUR else 1
        return revolutions * 2 * math.pi


def field_names():
    return [f.name for f in fields(EngineConfig)]
