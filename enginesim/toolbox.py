"""Toolbox panel: configuration controls grouped in sections.

Each row shows a value between two arrow buttons. Clicking an arrow produces
a `SetConfig` command; range checking is left to the configuration itself.
"""

from dataclasses import dataclass
from enum import Enum

import pygame

from .simulation import SetConfig

PANEL_WIDTH = 260
ROW_HEIGHT = 26
SECTION_GAP = 8
ARROW_SIZE = 20

PANEL_COLOR = (25, 25, 30)
SECTION_COLOR = (255, 215, 0)
TEXT_COLOR = (220, 220, 220)
BUTTON_COLOR = (90, 90, 90)
BUTTON_HOVER_COLOR = (200, 200, 200)


@dataclass(frozen=True)
class Control:
    section: str
    label: str
    field: str
    step: float = 0.0  # unused for enum fields, which cycle through their members

    def next_value(self, config, direction=1):
        current = getattr(config, self.field)
        if isinstance(current, Enum):
            members = list(type(current))
            return members[(members.index(current) + direction) % len(members)]
        return current + direction * self.step

    def display(self, config):
        value = getattr(config, self.field)
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, int):
            return str(value)
        if self.step < 1:
            return f"{value:.1f}"
        return f"{value:.0f}"


CONTROLS = [
    Control("Stroke", "Cycle", "stroke_type"),
    Control("Engine Design", "Rod length", "rod_length", 10),
    Control("Engine Design", "Crank radius", "crank_radius", 5),
    Control("Engine Design", "Piston dia", "piston_diameter", 5),
    Control("Exhaust", "Type", "exhaust_kind"),
    Control("Exhaust", "Smoke", "smoke_density", 0.1),
    Control("Piston Config", "Rings", "ring_count", 1),
    Control("Piston Config", "Material", "material"),
    Control("Fuel", "Fuel", "fuel"),
    Control("ECU", "Idle RPM", "idle_rpm", 250),
    Control("ECU", "Max RPM", "max_rpm", 500),
    Control("Layout", "Layout", "layout"),
    Control("Layout", "Cylinders", "cylinder_count", 1),
]


class Button:
    def __init__(self, x, y, width, height, text, action):
        self.rect = pygame.Rect(x, y, width, height)
        self.text = text
        self.action = action
        self.hover = False

    def update(self, mouse_pos):
        self.hover = self.rect.collidepoint(mouse_pos)

    def draw(self, screen, font):
        # Hovered buttons light up and slide left
        dx = -10 if self.hover else 0
        rect = self.rect.move(dx, 0)
        pygame.draw.rect(screen, (255, 255, 255) if self.hover else (136, 136, 136), rect)
        text_surf = font.render(self.text, True, (0, 0, 0) if self.hover else (255, 255, 255))
        screen.blit(text_surf, text_surf.get_rect(center=rect.center))

    def handle_click(self, pos):
        if self.rect.collidepoint(pos):
            self.action()
            return True
        return False


class Toolbox:
    def __init__(self, x, y, controls=CONTROLS):
        self.x = x
        self.y = y
        self.controls = list(controls)
        self.rows = []  # (control, section header y or None, row y, left arrow, right arrow)
        self.hover_pos = (-1, -1)
        self._layout()

    def _layout(self):
        y = self.y
        section = None
        for control in self.controls:
            header_y = None
            if control.section != section:
                section = control.section
                y += SECTION_GAP
                header_y = y
                y += ROW_HEIGHT
            right_x = self.x + PANEL_WIDTH - ARROW_SIZE - 10
            left = pygame.Rect(right_x - 90, y, ARROW_SIZE, ARROW_SIZE)
            right = pygame.Rect(right_x, y, ARROW_SIZE, ARROW_SIZE)
            self.rows.append((control, header_y, y, left, right))
            y += ROW_HEIGHT
        self.height = y - self.y + SECTION_GAP

    @property
    def rect(self):
        return pygame.Rect(self.x, self.y, PANEL_WIDTH, self.height)

    def update(self, mouse_pos):
        self.hover_pos = mouse_pos

    def handle_click(self, pos, config):
        """Return the configuration commands for a click at `pos` (empty if it missed)."""
        for control, _, _, left, right in self.rows:
            if left.collidepoint(pos):
                return [SetConfig(control.field, control.next_value(config, -1))]
            if right.collidepoint(pos):
                return [SetConfig(control.field, control.next_value(config, 1))]
        return []

    def draw(self, screen, font, config):
        pygame.draw.rect(screen, PANEL_COLOR, self.rect)
        pygame.draw.rect(screen, TEXT_COLOR, self.rect, 1)

        for control, header_y, y, left, right in self.rows:
            if header_y is not None:
                header = font.render(control.section, True, SECTION_COLOR)
                screen.blit(header, (self.x + 10, header_y))

            label = font.render(control.label, True, TEXT_COLOR)
            screen.blit(label, (self.x + 20, y))

            for arrow, text in ((left, "<"), (right, ">")):
                color = BUTTON_HOVER_COLOR if arrow.collidepoint(self.hover_pos) else BUTTON_COLOR
                pygame.draw.rect(screen, color, arrow, 0, 3)
                arrow_text = font.render(text, True, (0, 0, 0))
                screen.blit(arrow_text, arrow_text.get_rect(center=arrow.center))

            # Value centred between the arrows
            value = font.render(control.display(config), True, TEXT_COLOR)
            center_x = (left.right + right.left) // 2
            screen.blit(value, value.get_rect(center=(center_x, left.centery)))
