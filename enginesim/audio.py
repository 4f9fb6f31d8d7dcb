"""Sound cues: an ignition click per spark and an RPM-scaled hum.

Both sounds are short numpy buffers played through pygame.mixer. If the mixer
cannot be opened the cues are disabled and the simulation runs silently.
"""

import logging

import numpy as np
import pygame

from .config import ExhaustKind
from .events import CycleEvent

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100
IGNITE_CHANNELS = 8

# Exhaust kind -> loudness of the cues
EXHAUST_VOLUME = {
    ExhaustKind.NONE: 1.0,
    ExhaustKind.MUFFLER: 0.5,
    ExhaustKind.TURBO: 0.8,
}


def _to_sound(buffer, peak):
    # Normalize, convert to 16-bit PCM and duplicate into stereo
    buffer = peak * buffer / np.max(np.abs(buffer))
    pcm = (buffer * 32767).astype(np.int16)
    return pygame.mixer.Sound(np.ascontiguousarray(np.column_stack((pcm, pcm))))


def ignite_buffer(duration=0.08, base_freq=90.0):
    """Sharp noise transient over a decaying low tone."""
    t = np.linspace(0, duration, int(SAMPLE_RATE * duration), False)
    rng = np.random.default_rng(0)
    buffer = 0.6 * rng.normal(0, 1.0, len(t)) * np.exp(-t * 60)
    buffer += 0.7 * np.sin(2 * np.pi * base_freq * t) * np.exp(-t * 30)
    return buffer


def hum_buffer(duration=1.0, base_freq=55.0):
    """Loopable low hum with a few harmonics."""
    t = np.linspace(0, duration, int(SAMPLE_RATE * duration), False)
    buffer = np.zeros_like(t)
    for harm in range(1, 5):
        buffer += (0.5 / harm) * np.sin(2 * np.pi * base_freq * harm * t)
    return buffer


class SoundCues:
    def __init__(self):
        self.enabled = False
        self.hum_playing = False
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=2, buffer=512)
            pygame.mixer.set_num_channels(IGNITE_CHANNELS + 1)
            self.ignite_sound = _to_sound(ignite_buffer(), 0.8)
            self.hum_sound = _to_sound(hum_buffer(), 0.5)
            self.hum_channel = pygame.mixer.Channel(IGNITE_CHANNELS)
            self.enabled = True
        except pygame.error as e:
            logger.warning("Audio disabled: %s", e)

    def update(self, snapshot):
        """Play cues for the events in `snapshot`."""
        if not self.enabled:
            return

        if not snapshot.running:
            if self.hum_playing:
                self.hum_channel.fadeout(500)
                self.hum_playing = False
            return

        volume = EXHAUST_VOLUME[snapshot.config.exhaust_kind]

        if not self.hum_playing:
            self.hum_channel.play(self.hum_sound, loops=-1)
            self.hum_playing = True
        # Louder with RPM
        rpm_factor = min(1.0, snapshot.rpm / snapshot.config.max_rpm)
        self.hum_channel.set_volume(volume * (0.2 + 0.5 * rpm_factor))

        for events in snapshot.events:
            if CycleEvent.SPARK in events.fired:
                channel = pygame.mixer.Channel(events.index % IGNITE_CHANNELS)
                self.ignite_sound.set_volume(volume * (0.3 + 0.7 * snapshot.throttle))
                channel.play(self.ignite_sound)

    def stop(self):
        if self.enabled:
            pygame.mixer.stop()
            self.hum_playing = False
