"""Slider-crank geometry.

Phase 0 is top dead centre: the crank pin points straight up from the crank
axis and rotates clockwise on screen (y grows downwards). Each piston rides on
a vertical line through its cylinder axis.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .config import EngineConfig, Layout
from .constants import BANK_SPACING, BOXER_BANK_OFFSET, V_BANK_ANGLE

TWO_PI = 2 * math.pi


@dataclass(frozen=True)
class CylinderPose:
    index: int
    phase: float  # radians in [0, 2π)
    crank_pin_x: float
    crank_pin_y: float
    piston_x: float
    piston_y: float
    layout_offset_x: float
    y_offset: float  # vertical span of the connecting rod


def cylinder_phase(crank_angle: float, index: int, cylinder_count: int) -> float:
    """Crank angle of cylinder `index`, offset by an even share of one revolution."""
    n = max(1, cylinder_count)
    return (crank_angle + index * TWO_PI / n) % TWO_PI


def _bank_side(index):
    # Even cylinders sit on the left bank, odd ones on the right
    return -1.0 if index % 2 == 0 else 1.0


def _inline_offset(index, count, config):
    return (index - (count - 1) / 2) * BANK_SPACING


def _v_offset(index, count, config):
    return _bank_side(index) * config.rod_length * math.sin(math.radians(V_BANK_ANGLE / 2))


def _boxer_offset(index, count, config):
    return _bank_side(index) * BOXER_BANK_OFFSET


LAYOUT_OFFSETS = {
    Layout.INLINE: _inline_offset,
    Layout.V: _v_offset,
    Layout.BOXER: _boxer_offset,
}


def layout_offset_x(index: int, layout: Layout, cylinder_count: int, config: Optional[EngineConfig] = None) -> float:
    """Horizontal offset of cylinder `index` from the crank centre."""
    if config is None:
        config = EngineConfig()
    return LAYOUT_OFFSETS[layout](index, max(1, cylinder_count), config)


def rod_offset(phase: float, crank_radius: float, rod_length: float) -> float:
    """Vertical projection of the connecting rod; 0 when the rod cannot reach."""
    lateral = crank_radius * math.sin(phase)
    return math.sqrt(max(0.0, rod_length ** 2 - lateral ** 2))


def cylinder_pose(crank_angle: float, index: int, config: EngineConfig,
                  center: Tuple[float, float] = (0.0, 0.0)) -> CylinderPose:
    """Compute the crank pin and piston positions of one cylinder."""
    phase = cylinder_phase(crank_angle, index, config.cylinder_count)
    offset_x = layout_offset_x(index, config.layout, config.cylinder_count, config)

    axis_x = center[0] + offset_x
    center_y = center[1]
    r = config.crank_radius

    # Crank pin
    pin_x = axis_x + r * math.sin(phase)
    pin_y = center_y - r * math.cos(phase)

    # Piston constrained to the cylinder axis
    y_offset = rod_offset(phase, r, config.rod_length)
    piston_y = pin_y - y_offset

    return CylinderPose(
        index=index,
        phase=phase,
        crank_pin_x=pin_x,
        crank_pin_y=pin_y,
        piston_x=axis_x,
        piston_y=piston_y,
        layout_offset_x=offset_x,
        y_offset=y_offset,
    )


def engine_poses(crank_angle: float, config: EngineConfig,
                 center: Tuple[float, float] = (0.0, 0.0)) -> List[CylinderPose]:
    return [cylinder_pose(crank_angle, i, config, center) for i in range(config.cylinder_count)]
