"""Fractional delay lines with Hermite interpolation."""

from __future__ import annotations

MAX_DELAY_MS = 2000.0


class DelayLine:
    """Single-channel circular delay line read with a fractional delay in samples."""

    def __init__(self) -> None:
        self._buffer: list[float] = []
        self._size = 0
        self._write_index = 0

    @property
    def size(self) -> int:
        return self._size

    def prepare(self, sample_rate: float) -> None:
        """Allocate room for the longest delay at ``sample_rate`` and clear it."""
        max_delay_sec = MAX_DELAY_MS * 0.001
        self._size = int(sample_rate * max_delay_sec + 1)
        self._buffer = [0.0] * self._size
        self.reset()

    def reset(self) -> None:
        """Silence the stored samples."""
        self._buffer = [0.0] * len(self._buffer)

    def process(self, sample: float, delay: float) -> float:
        """Write ``sample`` and return the sample ``delay`` samples back."""
        if self._size <= 0:
            raise RuntimeError("delay line used before prepare()")
        self._write(self._write_index, sample)
        delayed = self._pop_sample(delay)
        self._write_index += 1
        if self._write_index > self._size:
            self._write_index = 0
        return delayed

    def _write(self, index: int, sample: float) -> None:
        if index < len(self._buffer):
            self._buffer[index] = sample
        else:
            self._buffer.append(sample)

    def _at(self, index: int) -> float:
        if 0 <= index < len(self._buffer):
            return self._buffer[index]
        return 0.0

    def _pop_sample(self, delay: float) -> float:
        index = self._write_index - delay
        if index < 0.0:
            index += float(self._size)
        return self.sample_hermite(index)

    def sample_linear(self, index: float) -> float:
        """Read the buffer at a fractional index by linear interpolation."""
        i_a = int(index)
        fraction = index - i_a
        i_b = i_a + 1
        if i_b > self._size:
            i_b = 0
        a = self._at(i_a)
        return a + fraction * (self._at(i_b) - a)

    def sample_hermite(self, index: float) -> float:
        """Read the buffer at a fractional index by four-point Hermite interpolation."""
        i_b = int(index)
        i_a = i_b + 1
        if i_a >= self._size:
            i_a = 0
        i_c = i_b - 1
        i_d = i_c - 1
        if i_d < 0:
            i_d += self._size
            if i_c < 0:
                i_c += self._size

        fraction = index - i_b
        x_a, x_b, x_c, x_d = self._at(i_a), self._at(i_b), self._at(i_c), self._at(i_d)
        slope0 = (x_c - x_a) * 0.5
        slope1 = (x_d - x_b) * 0.5
        v = x_b - x_c
        w = slope0 + v
        a = w + v + slope1
        b = w + a
        stage1 = a * fraction - b
        stage2 = stage1 * fraction + slope0
        return stage2 * fraction + x_b


class StereoDelay:
    """A pair of independent delay lines for left and right."""

    def __init__(self) -> None:
        self.left = DelayLine()
        self.right = DelayLine()

    def prepare(self, sample_rate: float) -> None:
        self.left.prepare(sample_rate)
        self.right.prepare(sample_rate)

    def reset(self) -> None:
        self.left.reset()
        self.right.reset()

    def process(
        self, left: float, right: float, delay_left: float, delay_right: float
    ) -> tuple[float, float]:
        """Return the delayed left and right samples."""
        return (
            self.left.process(left, delay_left),
            self.right.process(right, delay_right),
        )