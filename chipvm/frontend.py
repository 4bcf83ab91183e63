"""
Pygame frontend: window, keypad and beeper for a ``Machine``.

Keyboard mapping (common layout):

  CHIP-8  =>  Keyboard
  1 2 3 C =>  1 2 3 4
  4 5 6 D =>  Q W E R
  7 8 9 E =>  A S D F
  A 0 B F =>  Z X C V
"""
from __future__ import annotations

import logging
import sys
from typing import Dict, Optional, Tuple

import numpy as np

try:
    import pygame
except Exception:
    print("This emulator requires pygame. Install with: pip install pygame", file=sys.stderr)
    raise

from .constants import KEY_COUNT, SCREEN_H, SCREEN_W
from .machine import Snapshot

logger = logging.getLogger(__name__)

# Keyboard mapping: CHIP-8 key index -> pygame key
KEYMAP = {
    0x0: pygame.K_x,
    0x1: pygame.K_1,
    0x2: pygame.K_2,
    0x3: pygame.K_3,
    0x4: pygame.K_q,
    0x5: pygame.K_w,
    0x6: pygame.K_e,
    0x7: pygame.K_a,
    0x8: pygame.K_s,
    0x9: pygame.K_d,
    0xA: pygame.K_z,
    0xB: pygame.K_c,
    0xC: pygame.K_4,
    0xD: pygame.K_r,
    0xE: pygame.K_f,
    0xF: pygame.K_v,
}
_REVERSE_KEYMAP = {pgk: k_idx for k_idx, pgk in KEYMAP.items()}

SAMPLE_RATE = 44100


def key_for(pygame_key: int) -> Optional[int]:
    """CHIP-8 key code for a pygame key, or None if it isn't on the keypad."""
    return _REVERSE_KEYMAP.get(pygame_key)


def square_wave(tone_hz: int, sample_rate: int = SAMPLE_RATE, duration: float = 0.1) -> np.ndarray:
    t = np.arange(int(sample_rate * duration))
    wave = ((t * tone_hz * 2 / sample_rate) % 2 >= 1).astype('float32') * 2 - 1
    return (wave * 32767).astype('int16')


class Frontend:
    def __init__(self, scale: int = 10, tone_hz: int = 440):
        self.scale = max(1, int(scale))
        self.surface = pygame.display.set_mode(
            (SCREEN_W * self.scale, SCREEN_H * self.scale))
        pygame.display.set_caption("chipvm")
        self.clock = pygame.time.Clock()
        self.keys: Dict[int, bool] = {k: False for k in range(KEY_COUNT)}

        self.tone_hz = tone_hz
        self.sound = None
        self._tone_playing = False
        self._init_audio()

    def _init_audio(self):
        try:
            pygame.mixer.pre_init(SAMPLE_RATE, -16, 1, 256)
            pygame.mixer.init()
        except pygame.error as e:
            logger.info("Audio disabled: %s", e)
            return
        wave = square_wave(self.tone_hz)
        # mixer may already be up in stereo if pygame.init() ran first
        channels = pygame.mixer.get_init()[2]
        if channels > 1:
            wave = np.repeat(wave[:, None], channels, axis=1)
        self.sound = pygame.sndarray.make_sound(wave)
        self.sound.set_volume(0.2)

    def handle_events(self) -> Tuple[Dict[int, bool], Optional[int], bool]:
        """Poll pygame; returns (keypad state, last key pressed, still running)."""
        just_pressed = None
        running = True
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type in (pygame.KEYDOWN, pygame.KEYUP):
                is_down = event.type == pygame.KEYDOWN
                # Escape to quit
                if event.key == pygame.K_ESCAPE:
                    running = False
                    continue
                k_idx = key_for(event.key)
                if k_idx is None:
                    continue
                self.keys[k_idx] = is_down
                if is_down:
                    just_pressed = k_idx
        return self.keys, just_pressed, running

    def handle_snapshot(self, snapshot: Snapshot):
        if snapshot.display_changed:
            self.render(snapshot.display)
        self.set_tone(snapshot.sound_on)

    def render(self, display: bytes):
        # Draw pixels (monochrome)
        surf = self.surface
        surf.lock()
        surf.fill((0, 0, 0))
        pixel_size = self.scale
        for y in range(SCREEN_H):
            for x in range(SCREEN_W):
                if display[y * SCREEN_W + x]:
                    rect = pygame.Rect(x * pixel_size, y *
                                       pixel_size, pixel_size, pixel_size)
                    pygame.draw.rect(surf, (255, 255, 255), rect)
        surf.unlock()
        pygame.display.flip()

    def set_tone(self, on: bool):
        if self.sound is None or on == self._tone_playing:
            return
        if on:
            self.sound.play(loops=-1)
        else:
            self.sound.stop()
        self._tone_playing = on

    def tick(self, fps: int):
        self.clock.tick(fps)

    def close(self):
        pygame.quit()
