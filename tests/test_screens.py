"""Tests for the screen flow state machine."""

import pytest

from enginesim.screens import INTRO_DURATION, AppState, ScreenFlow


def run(flow, seconds, dt=0.05):
    for _ in range(int(round(seconds / dt))):
        flow.tick(dt)


class TestIntro:

    def test_starts_with_intro(self):
        assert ScreenFlow().state == AppState.INTRO

    def test_skip_intro(self):
        assert ScreenFlow(skip_intro=True).state == AppState.MENU

    def test_fade_in(self):
        flow = ScreenFlow()
        run(flow, 0.5)
        assert flow.intro_alpha == pytest.approx(0.5)
        assert not flow.show_subtitle
        run(flow, 1.5)
        assert flow.intro_alpha == 1.0
        assert flow.show_subtitle

    def test_intro_leads_to_menu(self):
        flow = ScreenFlow()
        run(flow, INTRO_DURATION + 0.5)
        assert flow.state == AppState.MENU

    def test_menu_actions_ignored_during_intro(self):
        flow = ScreenFlow()
        flow.play()
        flow.show_credits()
        assert flow.state == AppState.INTRO


class TestMenu:

    def setup_method(self):
        self.flow = ScreenFlow(skip_intro=True, loading_duration=1.0)

    def test_credits_and_back(self):
        self.flow.show_credits()
        assert self.flow.state == AppState.CREDITS
        self.flow.back()
        assert self.flow.state == AppState.MENU

    def test_back_from_menu_is_noop(self):
        self.flow.back()
        assert self.flow.state == AppState.MENU

    def test_loading_then_simulation(self):
        self.flow.play()
        assert self.flow.state == AppState.LOADING
        run(self.flow, 0.5)
        assert self.flow.state == AppState.LOADING
        assert not self.flow.entered_sim

        entered = []
        for _ in range(20):
            self.flow.tick(0.05)
            entered.append(self.flow.entered_sim)
        assert self.flow.state == AppState.SIM
        assert entered.count(True) == 1

    def test_replay_restarts_loading(self):
        self.flow.play()
        run(self.flow, 1.5)
        self.flow.back()
        self.flow.play()
        assert self.flow.loading_time == 0.0
        assert self.flow.state == AppState.LOADING

    def test_loading_dots_cycle(self):
        self.flow.play()
        dots = set()
        for _ in range(20):
            self.flow.tick(0.05)
            dots.add(self.flow.loading_dots)
        assert dots <= {0, 1, 2, 3}
        assert len(dots) > 1

    def test_bad_dt_does_not_advance(self):
        self.flow.play()
        self.flow.tick(-5.0)
        self.flow.tick(float("inf"))
        assert self.flow.loading_time == 0.0
