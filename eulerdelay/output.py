"""Output stage: dry/wet mix with gain, and a guard against runaway output."""

from __future__ import annotations

import logging
import math
from collections.abc import MutableSequence, Sequence

logger = logging.getLogger(__name__)


def mix_output(dry: float, wet: float, mix: float, gain: float) -> float:
    """Add the wet signal scaled by ``mix`` to the dry signal and apply ``gain``."""
    return (dry + wet * mix) * gain


def _silence(buffer: Sequence[MutableSequence[float]]) -> None:
    for channel in buffer:
        channel[:] = [0.0] * len(channel)


def protect_ears(buffer: Sequence[MutableSequence[float]]) -> bool:
    """Silence the whole buffer on NaN, infinity or a sample beyond +/-2.

    Returns True if the buffer was silenced. A sample beyond +/-1 only logs a warning,
    once per call.
    """
    warned = False
    for channel in buffer:
        for sample in channel:
            if math.isnan(sample):
                logger.warning("silencing: nan detected in audio buffer")
            elif math.isinf(sample):
                logger.warning("silencing: inf detected in audio buffer")
            elif sample < -2.0 or sample > 2.0:
                logger.warning("silencing: sample out of range (> 6dB)")
            else:
                if (sample < -1.0 or sample > 1.0) and not warned:
                    logger.warning("warning: sample out of range (> 0dB)")
                    warned = True
                continue
            _silence(buffer)
            return True
    return False