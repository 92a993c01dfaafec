from __future__ import annotations

import threading
from typing import Dict, Optional, Tuple

import numpy as np
import sounddevice as sd

from .types import GameEvent


# (frequency Hz, duration s) per event
CUES: Dict[GameEvent, Tuple[float, float]] = {
    GameEvent.CAUGHT_GOOD: (880.0, 0.08),
    GameEvent.CAUGHT_BAD: (160.0, 0.25),
    GameEvent.GAME_OVER: (110.0, 0.6),
}


class CueTone:
    """
    Short sine blips for game events.

    One cue plays at a time; a new cue replaces the one still sounding.
    """

    def __init__(self, sample_rate: int = 44100, volume: float = 0.25) -> None:
        self.sample_rate = sample_rate
        self.volume = max(0.0, min(1.0, volume))

        self._stream: Optional[sd.OutputStream] = None
        self._lock = threading.Lock()
        self._freq = 0.0
        self._remaining = 0
        self._total = 0
        self._phase = 0

    def start(self) -> None:
        if self._stream is not None:
            return
        self._stream = sd.OutputStream(
            samplerate=self.sample_rate,
            channels=1,
            callback=self._audio_callback,
            blocksize=512,
        )
        self._stream.start()

    def stop(self) -> None:
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None

    def play(self, freq: float, duration_s: float) -> None:
        with self._lock:
            self._freq = freq
            self._total = max(1, int(duration_s * self.sample_rate))
            self._remaining = self._total
            self._phase = 0

    def on_event(self, event: GameEvent, session=None) -> None:
        cue = CUES.get(event)
        if cue is not None:
            self.play(*cue)

    def _audio_callback(self, outdata, frames, time_info, status) -> None:
        with self._lock:
            if self._remaining <= 0:
                outdata[:] = 0
                return

            n = min(frames, self._remaining)
            idx = np.arange(n) + self._phase
            t = idx / self.sample_rate
            # Linear decay so cues end without a click.
            env = (self._remaining - np.arange(n)) / self._total
            wave = self.volume * env * np.sin(2 * np.pi * self._freq * t)
            outdata[:n, 0] = wave.astype(np.float32)
            outdata[n:] = 0

            self._phase += n
            self._remaining -= n

    def __enter__(self) -> "CueTone":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
