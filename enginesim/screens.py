"""Screen flow around the simulation: intro, menu, credits, loading.

Timers accumulate the frame time handed to `tick`, so the flow is driven by
the same virtual clock as the engine.
"""

import logging
from enum import Enum, auto

from .dynamics import clamp_dt

logger = logging.getLogger(__name__)

INTRO_FADE = 1.0  # seconds until the title is fully visible
SUBTITLE_DELAY = 1.5
INTRO_DURATION = 3.5
LOADING_DURATION = 5.0


class AppState(Enum):
    INTRO = auto()
    MENU = auto()
    CREDITS = auto()
    LOADING = auto()
    SIM = auto()


class ScreenFlow:
    def __init__(self, skip_intro=False, loading_duration=LOADING_DURATION):
        self.state = AppState.MENU if skip_intro else AppState.INTRO
        self.loading_duration = loading_duration
        self.intro_time = 0.0
        self.loading_time = 0.0
        self.entered_sim = False  # True only on the frame the simulation screen opens

    def tick(self, dt) -> AppState:
        dt = clamp_dt(dt)
        self.entered_sim = False

        if self.state == AppState.INTRO:
            self.intro_time += dt
            if self.intro_time > INTRO_DURATION:
                self._go(AppState.MENU)
        elif self.state == AppState.LOADING:
            self.loading_time += dt
            if self.loading_time > self.loading_duration:
                self._go(AppState.SIM)
                self.entered_sim = True

        return self.state

    @property
    def intro_alpha(self) -> float:
        return min(self.intro_time / INTRO_FADE, 1.0)

    @property
    def show_subtitle(self) -> bool:
        return self.intro_time > SUBTITLE_DELAY

    @property
    def loading_dots(self) -> int:
        return int(self.loading_time * 2) % 4

    # Menu actions
    def play(self):
        if self.state == AppState.MENU:
            self.loading_time = 0.0
            self._go(AppState.LOADING)

    def show_credits(self):
        if self.state == AppState.MENU:
            self._go(AppState.CREDITS)

    def back(self):
        if self.state in (AppState.CREDITS, AppState.SIM):
            self._go(AppState.MENU)

    def _go(self, state):
        logger.debug("Screen %s -> %s", self.state.name, state.name)
        self.state = state
