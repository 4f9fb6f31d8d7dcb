"""pygame drawing of the engine snapshot and the surrounding screens."""

import math

import pygame

from .config import Material, StrokeType
from .events import CycleEvent
from .particles import ParticleKind, head_y

# Colors
BACKGROUND_COLOR = (0, 0, 0)
GRID_COLOR = (51, 51, 51)
TEXT_COLOR = (255, 255, 255)
CRANKSHAFT_COLOR = (136, 136, 136)
COUNTERWEIGHT_COLOR = (100, 100, 100)
PIN_COLOR = (220, 220, 220)
CYLINDER_WALL_COLOR = (255, 153, 204)
CONNECTING_ROD_COLOR = (170, 170, 170)
RING_COLOR = (40, 40, 40)
INTAKE_COLOR = (0, 255, 255)
EXHAUST_COLOR = (255, 182, 193)
PORT_CLOSED_COLOR = (70, 70, 70)
SPARK_COLOR = (255, 215, 0)
WARNING_COLOR = (255, 80, 80)
INTAKE_PARTICLE_COLOR = (0, 255, 0)
EXHAUST_PARTICLE_COLOR = (100, 100, 100)

MATERIAL_COLORS = {
    Material.STEEL: (238, 238, 238),
    Material.ALUMINUM: (180, 200, 220),
    Material.CERAMIC: (245, 235, 210),
}

PARTICLE_COLORS = {
    ParticleKind.INTAKE: INTAKE_PARTICLE_COLOR,
    ParticleKind.EXHAUST: EXHAUST_PARTICLE_COLOR,
}

GRID_SPACING = 50
PISTON_HEIGHT = 30
PARTICLE_RADIUS = 5
VALVE_LIFT = 8
SPARK_FLASH_TIME = 0.08  # seconds a spark stays visible


class EngineRenderer:
    def __init__(self, screen, font, title_font):
        self.screen = screen
        self.font = font
        self.title_font = title_font
        self.spark_timers = {}
        self.overlay = pygame.Surface(screen.get_size(), pygame.SRCALPHA)

    # Shared background
    def draw_grid(self, elapsed):
        width, height = self.screen.get_size()
        offset = (elapsed * 33) % GRID_SPACING
        x = -offset
        while x < width:
            pygame.draw.line(self.screen, GRID_COLOR, (x, 0), (x, height), 1)
            x += GRID_SPACING
        y = -offset
        while y < height:
            pygame.draw.line(self.screen, GRID_COLOR, (0, y), (width, y), 1)
            y += GRID_SPACING

    # Screens
    def draw_intro(self, flow):
        width, height = self.screen.get_size()
        self._blit_centered(self.title_font, "Engine Simulator", (width // 2, height // 2),
                            alpha=flow.intro_alpha)
        if flow.show_subtitle:
            self._blit_centered(self.font, "Version 0.2 Beta", (width // 2, height // 2 + 50))

    def draw_menu(self, buttons):
        width, height = self.screen.get_size()
        self._blit_centered(self.title_font, "Engine Simulator 2", (width // 2, 100))
        for button in buttons:
            button.draw(self.screen, self.font)
        studio = self.font.render("Gin Studios", True, TEXT_COLOR)
        self.screen.blit(studio, (10, height - studio.get_height() - 10))
        version = self.font.render("Version 0.2", True, TEXT_COLOR)
        self.screen.blit(version, (width - version.get_width() - 10, height - version.get_height() - 10))

    def draw_credits(self, back_button):
        width, _ = self.screen.get_size()
        self._blit_centered(self.title_font, "Credits", (width // 2, 80))
        lines = ["Code: Gin Studios", "Idea: Loay", "Sound manager: Adam"]
        for i, line in enumerate(lines):
            self._blit_centered(self.font, line, (width // 2, 140 + i * 40))
        back_button.draw(self.screen, self.font)

    def draw_loading(self, flow):
        width, height = self.screen.get_size()
        self._blit_centered(self.title_font, "Loading" + "." * flow.loading_dots, (width // 2, height // 2))

    # Simulation
    def draw_snapshot(self, snapshot, dt):
        """Draw the engine schematic, particles and status text for one frame."""
        self._update_spark_timers(snapshot, dt)

        config = snapshot.config
        center_x, center_y = snapshot.center
        top = head_y(config, center_y)

        for pose, events in zip(snapshot.poses, snapshot.events):
            self.draw_cylinder(pose, events, config, top, center_y)

        self.draw_crankshaft(snapshot, center_x, center_y)

        # Rods and pistons over the crank web
        for pose in snapshot.poses:
            self.draw_piston(pose, config)

        self.draw_particles(snapshot.particles)
        self.draw_status(snapshot)

    def _update_spark_timers(self, snapshot, dt):
        for events in snapshot.events:
            if CycleEvent.SPARK in events.fired:
                self.spark_timers[events.index] = SPARK_FLASH_TIME
        for index in list(self.spark_timers):
            self.spark_timers[index] -= dt
            if self.spark_timers[index] <= 0:
                del self.spark_timers[index]

    def draw_crankshaft(self, snapshot, center_x, center_y):
        radius = snapshot.config.crank_radius
        angle = snapshot.crank_angle

        # Main journal
        pygame.draw.circle(self.screen, CRANKSHAFT_COLOR, (int(center_x), int(center_y)), int(radius * 0.75))

        # Counterweight opposite the first crank pin
        weight_x = center_x - radius * 0.8 * math.sin(angle)
        weight_y = center_y + radius * 0.8 * math.cos(angle)
        pygame.draw.line(self.screen, COUNTERWEIGHT_COLOR, (center_x, center_y), (weight_x, weight_y), 14)

        # Crank throw to each pin
        for pose in snapshot.poses:
            throw_center = (center_x + pose.layout_offset_x, center_y)
            pygame.draw.line(self.screen, CRANKSHAFT_COLOR, throw_center,
                             (pose.crank_pin_x, pose.crank_pin_y), 10)
            pygame.draw.circle(self.screen, PIN_COLOR, (int(pose.crank_pin_x), int(pose.crank_pin_y)), 6)

    def draw_cylinder(self, pose, events, config, top, center_y):
        half_width = config.piston_diameter / 2 + 4
        left = pose.piston_x - half_width
        right = pose.piston_x + half_width
        bottom = center_y - config.crank_radius * 0.5

        # Walls and head
        pygame.draw.line(self.screen, CYLINDER_WALL_COLOR, (left, top), (left, bottom), 3)
        pygame.draw.line(self.screen, CYLINDER_WALL_COLOR, (right, top), (right, bottom), 3)
        pygame.draw.line(self.screen, CYLINDER_WALL_COLOR, (left, top), (right, top), 3)

        if config.stroke_type == StrokeType.FOUR:
            self._draw_valves(pose, events, config, top)
        else:
            self._draw_ports(events, config, left, right, top)

        if pose.index in self.spark_timers:
            pygame.draw.circle(self.screen, SPARK_COLOR, (int(pose.piston_x), int(top + 6)), 8)

    def _draw_valves(self, pose, events, config, top):
        lift = VALVE_LIFT if events.valve_open else 0
        spacing = config.piston_diameter / 4
        for side, color in ((-1, INTAKE_COLOR), (1, EXHAUST_COLOR)):
            x = pose.piston_x + side * spacing
            pygame.draw.rect(self.screen, color, (x - 3, top - 24 + lift, 6, 20))
            pygame.draw.rect(self.screen, color, (x - 8, top - 4 + lift, 16, 4))

    def _draw_ports(self, events, config, left, right, top):
        # Ports sit low in the cylinder, uncovered by the piston near BDC
        port_y = top + 2 * config.crank_radius
        intake_color = INTAKE_COLOR if events.intake_port_open else PORT_CLOSED_COLOR
        exhaust_color = EXHAUST_COLOR if events.exhaust_port_open else PORT_CLOSED_COLOR
        pygame.draw.rect(self.screen, intake_color, (left - 12, port_y, 12, 14))
        pygame.draw.rect(self.screen, exhaust_color, (right, port_y - 6, 12, 20))

    def draw_piston(self, pose, config):
        # Connecting rod
        pygame.draw.line(self.screen, CONNECTING_ROD_COLOR, (pose.crank_pin_x, pose.crank_pin_y),
                         (pose.piston_x, pose.piston_y), 5)

        # Piston body
        width = config.piston_diameter
        body = pygame.Rect(0, 0, width, PISTON_HEIGHT)
        body.midtop = (int(pose.piston_x), int(pose.piston_y - PISTON_HEIGHT / 2))
        pygame.draw.rect(self.screen, MATERIAL_COLORS[config.material], body)

        # Rings near the crown
        for ring in range(config.ring_count):
            ring_y = body.top + 4 + ring * 4
            pygame.draw.line(self.screen, RING_COLOR, (body.left, ring_y), (body.right - 1, ring_y), 1)

        # Wrist pin
        pygame.draw.circle(self.screen, RING_COLOR, (int(pose.piston_x), int(pose.piston_y)), 4)

    def draw_particles(self, particles):
        self.overlay.fill((0, 0, 0, 0))
        for p in particles:
            alpha = int(255 * max(0.0, min(1.0, p.life)))
            color = PARTICLE_COLORS[p.kind] + (alpha,)
            pygame.draw.circle(self.overlay, color, (int(p.x), int(p.y)), PARTICLE_RADIUS)
        self.screen.blit(self.overlay, (0, 0))

    def draw_status(self, snapshot):
        lines = [
            f"RPM: {snapshot.rpm:.0f}",
            f"Torque: {snapshot.torque:.1f}",
            f"Horsepower: {snapshot.horsepower:.0f}",
            f"Throttle: {int(snapshot.throttle * 100)}%",
            f"Engine: {'RUNNING' if snapshot.running else 'OFF'}",
        ]
        y = 20
        for line in lines:
            self.screen.blit(self.font.render(line, True, TEXT_COLOR), (20, y))
            y += 20

        for warning in snapshot.warnings:
            self.screen.blit(self.font.render(warning, True, WARNING_COLOR), (20, y))
            y += 20

    def _blit_centered(self, font, text, center, alpha=1.0):
        surface = font.render(text, True, TEXT_COLOR)
        if alpha < 1.0:
            surface.set_alpha(int(255 * alpha))
        self.screen.blit(surface, surface.get_rect(center=center))
