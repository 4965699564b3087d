"""Sound cues for turns, wins, draws and resets.

The server only decides *which* cue to play; the page synthesises it with
Web Audio from the tone list, so no audio files ship with the package.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

Tone = Tuple[float, float]  # (frequency Hz, duration s)


@dataclass(frozen=True)
class SoundEffect:
    name: str
    volume: float
    tones: Tuple[Tone, ...]

    def to_dict(self) -> Dict[str, object]:
        return {
            "type": "sound",
            "name": self.name,
            "volume": self.volume,
            "tones": [list(t) for t in self.tones],
        }


TURN_PLAY = SoundEffect("turn_play", 0.4, ((660.0, 0.05),))
GAME_WIN = SoundEffect("game_win", 0.6, ((523.25, 0.12), (659.25, 0.12), (783.99, 0.25)))
GAME_DRAW = SoundEffect("game_draw", 0.5, ((440.0, 0.15), (392.0, 0.25)))
GAME_RESET = SoundEffect("game_reset", 0.3, ((1320.0, 0.03),))


@dataclass(frozen=True)
class SoundBoard:
    enabled: bool = True

    def cue(self, effect: SoundEffect) -> Optional[Dict[str, object]]:
        if not self.enabled:
            return None
        return effect.to_dict()
