"""Layered glow animation for the winning line.

The line is three strokes drawn back to front (outer glow, inner glow,
core) that fade in with a short stagger, after which the whole group
pulses gently until the board is reset.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Dict, List, Tuple

Point = Tuple[float, float]

GRID_FADE_ALPHA = 0.25
GRID_FADE_DURATION = 0.3
PULSE_SCALE = 1.05
PULSE_START_GAP = 0.1
KEYFRAME_STEPS = 20


@dataclass(frozen=True)
class LineLayer:
    name: str
    color: str
    width: float
    glow: float
    delay: float


@dataclass(frozen=True)
class WinningLineStyle:
    line_width: float = 8.0
    glow_width: float = 16.0
    draw_duration: float = 0.5
    pulse_duration: float = 0.8

    def layers(self) -> List[LineLayer]:
        return [
            LineLayer("outer-glow", "rgba(0, 122, 255, 0.2)", self.glow_width * 1.5, 20, 0.0),
            LineLayer("inner-glow", "rgba(0, 122, 255, 0.5)", self.glow_width, 12, 0.05),
            LineLayer("core", "#ffffff", self.line_width, 6, 0.1),
        ]

    @property
    def fade_in_duration(self) -> float:
        return self.draw_duration * 0.3

    @property
    def pulse_start(self) -> float:
        return self.draw_duration + PULSE_START_GAP

    def draw_alpha(self, elapsed: float, delay: float = 0.0) -> float:
        """Opacity of a layer ``elapsed`` seconds after the line appears."""
        if self.draw_duration <= 0:
            return 1.0
        progress = min(max((elapsed - delay) / self.draw_duration, 0.0), 1.0)
        eased = 1 - (1 - progress) ** 3
        return min(1.0, eased * 1.5)

    def fade_alpha(self, elapsed: float, delay: float = 0.0) -> float:
        """Ease-in fade that runs alongside the draw-in."""
        if self.fade_in_duration <= 0:
            return 1.0
        progress = min(max((elapsed - delay) / self.fade_in_duration, 0.0), 1.0)
        return progress * progress

    def layer_alpha(self, elapsed: float, delay: float = 0.0) -> float:
        # Both ramps drive the same opacity; the slower one wins
        return min(self.draw_alpha(elapsed, delay), self.fade_alpha(elapsed, delay))

    def layer_keyframes(self, layer: LineLayer) -> List[Dict[str, float]]:
        """Opacity samples over the draw-in, offsets relative to the layer delay."""
        frames = []
        for step in range(KEYFRAME_STEPS + 1):
            offset = step / KEYFRAME_STEPS
            elapsed = layer.delay + offset * self.draw_duration
            frames.append(
                {"offset": offset, "opacity": round(self.layer_alpha(elapsed, layer.delay), 4)}
            )
        return frames

    def pulse_keyframes(self) -> List[Dict[str, float]]:
        """Scale samples over one pulse cycle (up then down)."""
        cycle = 2 * self.pulse_duration
        frames = []
        for step in range(KEYFRAME_STEPS + 1):
            offset = step / KEYFRAME_STEPS
            # Sample just inside the cycle so the last frame is the low point
            elapsed = self.pulse_start + min(offset * cycle, cycle - 1e-9)
            frames.append({"offset": offset, "scale": round(self.pulse_scale(elapsed), 4)})
        return frames

    def pulse_scale(self, elapsed: float) -> float:
        t = elapsed - self.pulse_start
        if t <= 0 or self.pulse_duration <= 0:
            return 1.0
        cycle = 2 * self.pulse_duration
        phase = (t % cycle) / self.pulse_duration
        if phase <= 1.0:
            frac = _ease_in_out(phase)
        else:
            frac = 1.0 - _ease_in_out(phase - 1.0)
        return 1.0 + (PULSE_SCALE - 1.0) * frac

    def plan(self, start: Point, end: Point) -> Dict[str, object]:
        """Everything a renderer needs to play the animation."""
        return {
            "start": list(start),
            "end": list(end),
            "layers": [
                dict(asdict(layer), keyframes=self.layer_keyframes(layer))
                for layer in self.layers()
            ],
            "drawDuration": self.draw_duration,
            "fadeInDuration": self.fade_in_duration,
            "pulse": {
                "start": self.pulse_start,
                "duration": self.pulse_duration,
                "scale": PULSE_SCALE,
                "keyframes": self.pulse_keyframes(),
            },
            "gridFade": {"alpha": GRID_FADE_ALPHA, "duration": GRID_FADE_DURATION},
        }


def _ease_in_out(t: float) -> float:
    return 0.5 - 0.5 * math.cos(math.pi * t)
