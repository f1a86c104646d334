"""Topology-preserving state-variable filters and the feedback low/high cut pair."""

from __future__ import annotations

import math
from enum import Enum


class FilterType(Enum):
    LOWPASS = "lowpass"
    BANDPASS = "bandpass"
    HIGHPASS = "highpass"


class StateVariableFilter:
    """Two-pole TPT state-variable filter with per-channel state."""

    def __init__(
        self,
        filter_type: FilterType = FilterType.LOWPASS,
        cutoff: float = 1000.0,
        resonance: float = 1.0 / math.sqrt(2.0),
    ) -> None:
        self.filter_type = filter_type
        self.resonance = resonance
        self._sample_rate = 44100.0
        self._cutoff = cutoff
        self._s1: list[float] = []
        self._s2: list[float] = []
        self._update()

    @property
    def cutoff(self) -> float:
        return self._cutoff

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    def prepare(self, sample_rate: float, num_channels: int = 2) -> None:
        """Set the sample rate and allocate state for ``num_channels`` channels."""
        if sample_rate <= 0:
            raise ValueError(f"sample rate must be positive, got {sample_rate}")
        self._sample_rate = float(sample_rate)
        self._s1 = [0.0] * num_channels
        self._s2 = [0.0] * num_channels
        self.reset()
        self._update()

    def reset(self) -> None:
        """Clear the internal state of every channel."""
        self._s1 = [0.0] * len(self._s1)
        self._s2 = [0.0] * len(self._s2)

    def set_cutoff(self, frequency: float) -> None:
        """Set the cutoff frequency, which must lie below half the sample rate."""
        if not 0.0 <= frequency < self._sample_rate * 0.5:
            raise ValueError(
                f"cutoff {frequency} Hz outside [0, {self._sample_rate * 0.5}) Hz"
            )
        self._cutoff = float(frequency)
        self._update()

    def _update(self) -> None:
        self._g = math.tan(math.pi * self._cutoff / self._sample_rate)
        self._r2 = 1.0 / self.resonance
        self._h = 1.0 / (1.0 + self._r2 * self._g + self._g * self._g)

    def process_sample(self, channel: int, sample: float) -> float:
        """Filter one sample of ``channel``."""
        s1 = self._s1[channel]
        s2 = self._s2[channel]
        g = self._g
        y_hp = self._h * (sample - s1 * (g + self._r2) - s2)
        y_bp = y_hp * g + s1
        self._s1[channel] = y_hp * g + y_bp
        y_lp = y_bp * g + s2
        self._s2[channel] = y_bp * g + y_lp

        if self.filter_type is FilterType.LOWPASS:
            return y_lp
        if self.filter_type is FilterType.BANDPASS:
            return y_bp
        return y_hp


class FeedbackFilters:
    """Low cut (high-pass) followed by high cut (low-pass) for the feedback path."""

    def __init__(self) -> None:
        self.low_cut = StateVariableFilter(FilterType.HIGHPASS)
        self.high_cut = StateVariableFilter(FilterType.LOWPASS)

    def prepare(self, sample_rate: float, num_channels: int = 2) -> None:
        self.low_cut.prepare(sample_rate, num_channels)
        self.high_cut.prepare(sample_rate, num_channels)

    def reset(self) -> None:
        self.low_cut.reset()
        self.high_cut.reset()

    def process_low_cut(self, channel: int, sample: float, cutoff: float) -> float:
        self.low_cut.set_cutoff(cutoff)
        return self.low_cut.process_sample(channel, sample)

    def process_high_cut(self, channel: int, sample: float, cutoff: float) -> float:
        if cutoff != self.high_cut.cutoff:
            self.high_cut.set_cutoff(cutoff)
        return self.high_cut.process_sample(channel, sample)