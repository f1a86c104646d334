"""Parameter smoothing: a one-pole exponential smoother and a linear ramp."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class ExponentialSmoother:
    """One-pole smoother that moves ``current`` a fixed fraction towards ``target`` per step."""

    target: float = 0.0
    current: float = 0.0
    coefficient: float = 0.0

    def reset(self, sample_rate: float, time_sec: float) -> None:
        """Set the time constant of the smoother for the given sample rate."""
        self.coefficient = 1.0 - math.exp(-1.0 / (time_sec * sample_rate))

    def smoothen(self) -> float:
        """Advance one step and return the new current value."""
        self.current += (self.target - self.current) * self.coefficient
        return self.current


class LinearSmoother:
    """Ramps linearly to a new target over a fixed number of steps."""

    def __init__(self, initial: float = 0.0) -> None:
        self._current = float(initial)
        self._target = float(initial)
        self._steps_to_target = 0
        self._countdown = 0
        self._step = 0.0

    @property
    def current(self) -> float:
        return self._current

    @property
    def target(self) -> float:
        return self._target

    @property
    def is_smoothing(self) -> bool:
        return self._countdown > 0

    def reset(self, sample_rate: float, ramp_seconds: float) -> None:
        """Set the ramp length and jump straight to the current target."""
        self._steps_to_target = math.floor(ramp_seconds * sample_rate)
        self.set_current_and_target(self._target)

    def set_target(self, value: float) -> None:
        """Start a ramp towards ``value`` unless it is already the target."""
        if value == self._target:
            return
        if self._steps_to_target <= 0:
            self.set_current_and_target(value)
            return
        self._target = float(value)
        self._countdown = self._steps_to_target
        self._step = (self._target - self._current) / self._countdown

    def set_current_and_target(self, value: float) -> None:
        """Jump to ``value`` with no ramp."""
        self._current = float(value)
        self._target = float(value)
        self._countdown = 0

    def next_value(self) -> float:
        """Advance one step of the ramp and return the new value."""
        if not self.is_smoothing:
            return self._target
        self._countdown -= 1
        if self.is_smoothing:
            self._current += self._step
        else:
            self._current = self._target
        return self._current