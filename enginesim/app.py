import argparse
import logging
import sys

import pygame
from pygame.locals import *

from .audio import SAMPLE_RATE, SoundCues
from .dynamics import clamp_dt
from .render import BACKGROUND_COLOR, EngineRenderer
from .screens import AppState, ScreenFlow
from .simulation import EngineSimulation, SetThrottle
from .toolbox import PANEL_WIDTH, Button, Toolbox

# Display settings
WIDTH, HEIGHT = 1280, 800
FPS = 60


def setup_logger(level="INFO"):
    logger = logging.getLogger("enginesim")
    logger.setLevel(level)
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger


class EngineSimulatorApp:
    def __init__(self, width=WIDTH, height=HEIGHT, fps=FPS, seed=None, skip_intro=False):
        # Stereo 16-bit mixer for the numpy sound buffers
        pygame.mixer.pre_init(frequency=SAMPLE_RATE, size=-16, channels=2, buffer=512)
        pygame.init()
        self.screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption("Engine Simulator 2")
        self.clock = pygame.time.Clock()
        self.fps = fps
        self.seed = seed
        self.width = width
        self.height = height
        self.font = pygame.font.SysFont('Arial', 16)
        self.title_font = pygame.font.SysFont('Arial', 44)

        self.logger = logging.getLogger("enginesim.app")
        self.flow = ScreenFlow(skip_intro=skip_intro)
        self.renderer = EngineRenderer(self.screen, self.font, self.title_font)
        self.sound = SoundCues()
        self.toolbox = Toolbox(width - PANEL_WIDTH - 10, 70)
        self.simulation = None
        self.elapsed = 0.0
        self.running = True

        # Menu buttons on the right side
        self.menu_buttons = [
            Button(width - 210, height // 2 - 50, 200, 50, "Play", self.flow.play),
            Button(width - 210, height // 2 + 20, 200, 50, "Credits", self.flow.show_credits),
            Button(width - 210, height // 2 + 90, 200, 50, "Quit", self.quit),
        ]
        self.back_button = Button(20, 20, 30, 30, "X", self.flow.back)
        self.stop_button = Button(width - 120, 20, 100, 40, "Stop", self.leave_simulation)
        self.start_button = Button(width - 240, 20, 100, 40, "Start", self.toggle_engine)

    def new_simulation(self):
        # Engine sits left of the toolbox, slightly below the middle
        center = ((self.width - PANEL_WIDTH) // 2, self.height * 0.65)
        self.simulation = EngineSimulation(center=center, seed=self.seed)
        self.simulation.start()
        self.logger.info("Simulation created")

    def toggle_engine(self):
        if self.simulation is None:
            return
        if self.simulation.snapshot.running:
            self.simulation.stop()
        else:
            self.simulation.start()

    def leave_simulation(self):
        if self.simulation is not None:
            self.simulation.stop()
        self.sound.stop()
        self.flow.back()

    def quit(self):
        self.running = False

    def handle_events(self):
        mouse_pos = pygame.mouse.get_pos()
        for button in self._visible_buttons():
            button.update(mouse_pos)
        self.toolbox.update(mouse_pos)

        for event in pygame.event.get():
            if event.type == QUIT:
                self.quit()
            elif event.type == MOUSEBUTTONDOWN and event.button == 1:
                self._handle_click(event.pos)
            elif event.type == KEYDOWN:
                self._handle_key(event.key, True)
            elif event.type == KEYUP:
                self._handle_key(event.key, False)

    def _visible_buttons(self):
        if self.flow.state == AppState.MENU:
            return self.menu_buttons
        if self.flow.state == AppState.CREDITS:
            return [self.back_button]
        if self.flow.state == AppState.SIM:
            return [self.stop_button, self.start_button]
        return []

    def _handle_click(self, pos):
        for button in self._visible_buttons():
            if button.handle_click(pos):
                return
        if self.flow.state == AppState.SIM and self.simulation is not None:
            for command in self.toolbox.handle_click(pos, self.simulation.config):
                self.simulation.submit(command)

    def _handle_key(self, key, pressed):
        if self.flow.state != AppState.SIM or self.simulation is None:
            return
        # Throttle is held with "w"
        if key == K_w:
            self.simulation.submit(SetThrottle(pressed))
        elif pressed and key == K_SPACE:
            self.toggle_engine()
        elif pressed and key == K_ESCAPE:
            self.leave_simulation()

    def draw(self, dt):
        self.screen.fill(BACKGROUND_COLOR)
        self.renderer.draw_grid(self.elapsed)

        state = self.flow.state
        if state == AppState.INTRO:
            self.renderer.draw_intro(self.flow)
        elif state == AppState.MENU:
            self.renderer.draw_menu(self.menu_buttons)
        elif state == AppState.CREDITS:
            self.renderer.draw_credits(self.back_button)
        elif state == AppState.LOADING:
            self.renderer.draw_loading(self.flow)
        elif state == AppState.SIM and self.simulation is not None:
            self.renderer.draw_snapshot(self.simulation.snapshot, dt)
            self.toolbox.draw(self.screen, self.font, self.simulation.config)
            self.start_button.text = "Stop engine" if self.simulation.snapshot.running else "Start"
            for button in (self.stop_button, self.start_button):
                button.draw(self.screen, self.font)

    def run(self):
        """Main loop"""
        while self.running:
            self.handle_events()

            dt = clamp_dt(self.clock.tick(self.fps) / 1000.0)
            self.elapsed += dt

            self.flow.tick(dt)
            if self.flow.entered_sim:
                self.new_simulation()

            if self.flow.state == AppState.SIM and self.simulation is not None:
                snapshot = self.simulation.tick(dt)
                self.sound.update(snapshot)

            self.draw(dt)
            pygame.display.flip()

        self.sound.stop()
        pygame.quit()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Real-time piston engine simulator")
    parser.add_argument("--width", type=int, default=WIDTH)
    parser.add_argument("--height", type=int, default=HEIGHT)
    parser.add_argument("--fps", type=int, default=FPS)
    parser.add_argument("--seed", type=int, default=None, help="seed for particle randomness")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--skip-intro", action="store_true", help="start at the menu")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logger(args.log_level)
    app = EngineSimulatorApp(args.width, args.height, args.fps, args.seed, args.skip_intro)
    app.run()


if __name__ == "__main__":
    main()
