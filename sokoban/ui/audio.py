"""Fire-and-forget sound cues played through ``pygame.mixer``."""

from __future__ import annotations

import logging
import math
import os
from array import array
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Mapping, Optional

from ..game import CommandResult, MoveOutcome
from . import layout

logger = logging.getLogger(__name__)

# pygame is imported lazily so the mixer can be configured before SDL starts.
_PYGAME = None


def ensure_pygame():
    global _PYGAME
    if _PYGAME is None:
        os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
        _PYGAME = __import__("pygame")
    return _PYGAME


class Cue(Enum):
    BLOCKED_BY_WALL = "blocked_by_wall"
    BLOCKED_BY_BOX = "blocked_by_box"
    PUSH = "push"
    WIN = "win"

    @property
    def filename(self) -> str:
        return f"{self.value}.wav"


def cue_for(result: CommandResult) -> Optional[Cue]:
    """Pick the cue, if any, that a command result should sound."""

    if result.win is not None:
        return Cue.WIN
    if result.outcome is MoveOutcome.BLOCKED_BY_WALL:
        return Cue.BLOCKED_BY_WALL
    if result.outcome is MoveOutcome.BLOCKED_BY_BOX:
        return Cue.BLOCKED_BY_BOX
    if result.pushed:
        return Cue.PUSH
    return None


def synthesize_tone(frequency: int, duration_ms: int, sample_rate: int, channels: int) -> bytes:
    """Signed 16-bit square wave, interleaved for ``channels``."""

    amplitude = int(32767 * layout.TONE_VOLUME)
    period = max(1, sample_rate // max(1, frequency))
    total = max(1, sample_rate * duration_ms // 1000)
    samples = array("h")
    for index in range(total):
        value = amplitude if (index % period) < period // 2 else -amplitude
        # Short linear fade at both ends avoids audible clicks.
        fade = min(1.0, index / 64, (total - index) / 64)
        samples.extend([int(value * fade)] * channels)
    return samples.tobytes()


@dataclass
class SoundBoard:
    """Holds one loaded sound per cue. Any failure leaves the board silent."""

    sound_root: Optional[Path] = None
    sounds: Dict[Cue, object] = field(default_factory=dict)
    enabled: bool = False

    def load(self, tones: Mapping[str, tuple] = layout.CUE_TONES) -> "SoundBoard":
        pygame = ensure_pygame()
        try:
            pygame.mixer.init(
                frequency=layout.MIXER_FREQUENCY,
                size=layout.MIXER_SIZE,
                channels=layout.MIXER_CHANNELS,
                buffer=layout.MIXER_BUFFER,
            )
            mixer_settings = pygame.mixer.get_init()
        except pygame.error as exc:
            logger.warning("Audio unavailable, continuing silently: %s", exc)
            return self
        if not mixer_settings:
            logger.warning("Audio mixer did not initialise, continuing silently")
            return self

        sample_rate, _size, channels = mixer_settings
        for cue in Cue:
            sound = self._load_file(pygame, cue)
            if sound is None:
                frequency, duration = tones[cue.value]
                try:
                    sound = pygame.mixer.Sound(
                        buffer=synthesize_tone(frequency, duration, sample_rate, channels)
                    )
                except pygame.error as exc:
                    logger.warning("Could not build tone for %s: %s", cue.value, exc)
                    continue
            self.sounds[cue] = sound
        self.enabled = bool(self.sounds)
        return self

    def _load_file(self, pygame, cue: Cue):
        if self.sound_root is None:
            return None
        path = Path(self.sound_root) / cue.filename
        if not path.exists():
            logger.debug("No sound file for %s at %s", cue.value, path)
            return None
        try:
            return pygame.mixer.Sound(str(path))
        except (pygame.error, OSError) as exc:
            logger.warning("Could not open sound %s: %s", path, exc)
            return None

    def play(self, cue: Optional[Cue]) -> None:
        if cue is None or not self.enabled:
            return
        sound = self.sounds.get(cue)
        if sound is None:
            return
        pygame = ensure_pygame()
        try:
            sound.play()
        except pygame.error as exc:
            logger.warning("Could not play %s: %s", cue.value, exc)

    def close(self) -> None:
        if not self.enabled:
            return
        pygame = ensure_pygame()
        self.sounds.clear()
        self.enabled = False
        pygame.mixer.quit()
