"""Feedback path: a one-sample store per channel, scaled and filtered."""

from __future__ import annotations

from dataclasses import dataclass

from eulerdelay.filters import FeedbackFilters


@dataclass
class FeedbackSample:
    """Holds the single feedback sample of one channel."""

    value: float = 0.0

    def reset(self) -> None:
        self.value = 0.0

    def push(self, sample: float, amount: float = 1.0) -> None:
        self.value = sample * amount

    def pop(self) -> float:
        return self.value


class StereoFeedback:
    """Scales, low-cuts and high-cuts the wet signal and holds it for the next sample."""

    def __init__(self) -> None:
        self.left = FeedbackSample()
        self.right = FeedbackSample()
        self.filters = FeedbackFilters()

    def prepare(self, sample_rate: float, num_channels: int = 2) -> None:
        self.left.reset()
        self.right.reset()
        self.filters.prepare(sample_rate, num_channels)

    def reset(self) -> None:
        self.left.reset()
        self.right.reset()
        self.filters.reset()

    def push(
        self,
        left: float,
        right: float,
        amount: float,
        low_cut: float,
        high_cut: float,
    ) -> None:
        """Store the filtered, scaled feedback for both channels."""
        low_l = self.filters.process_low_cut(0, left * amount, low_cut)
        low_r = self.filters.process_low_cut(1, right * amount, low_cut)
        self.left.push(self.filters.process_high_cut(0, low_l, high_cut))
        self.right.push(self.filters.process_high_cut(1, low_r, high_cut))

    def pop(self) -> tuple[float, float]:
        """Return the stored left and right feedback samples."""
        return self.left.pop(), self.right.pop()