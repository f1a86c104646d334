"""Constant-power panning and the ping-pong routing built on it."""

from __future__ import annotations

import math

_QUARTER_PI = math.pi * 0.25


class Panner:
    """Folds a stereo pair to mono and pans it with a constant-power law."""

    def __init__(self) -> None:
        self._width = 0.0
        self._pan_left = math.cos(_QUARTER_PI)
        self._pan_right = math.sin(_QUARTER_PI)

    def _update(self, width: float) -> None:
        if width == self._width:
            return
        self._width = width
        x = _QUARTER_PI * (width + 1.0)
        self._pan_left = math.cos(x)
        self._pan_right = math.sin(x)

    def process(
        self, left: float, right: float, enabled: bool, width: float
    ) -> tuple[float, float]:
        """Pan the mono sum by ``width`` in [-1, 1] when enabled, else pass through."""
        if not enabled:
            return left, right
        self._update(width)
        mono = (left + right) * 0.5
        return mono * self._pan_left, mono * self._pan_right


class PingPong:
    """Adds feedback to the input, crossing the channels when ping-pong is on."""

    def __init__(self) -> None:
        self.panner = Panner()

    def process(
        self,
        left: float,
        right: float,
        feedback_left: float,
        feedback_right: float,
        ping_pong: bool,
        width: float,
    ) -> tuple[float, float]:
        pan_l, pan_r = self.panner.process(left, right, ping_pong, width)
        if ping_pong:
            return pan_l + feedback_right, pan_r + feedback_left
        return pan_l + feedback_left, pan_r + feedback_right