import logging
import math

import pytest

from eulerdelay.output import mix_output, protect_ears


def test_mix_zero_is_dry_times_gain():
    assert mix_output(0.4, 0.9, 0.0, 2.0) == pytest.approx(0.8)


def test_mix_adds_scaled_wet():
    assert mix_output(1.0, 0.5, 1.0, 2.0) == pytest.approx(3.0)


def test_unity_gain_and_full_mix_is_sum():
    assert mix_output(0.25, -0.5, 1.0, 1.0) == pytest.approx(0.25 - 0.5)


@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf, 2.5, -3.0])
def test_bad_samples_silence_everything(bad):
    buffer = [[0.1, 0.2, 0.3], [0.4, bad, 0.6]]
    assert protect_ears(buffer) is True
    assert buffer == [[0.0, 0.0, 0.0], [0.0, 0.0, 0.0]]


def test_clean_buffer_is_untouched():
    buffer = [[0.1, -2.0, 2.0], [1.5, -1.5, 0.0]]
    assert protect_ears(buffer) is False
    assert buffer == [[0.1, -2.0, 2.0], [1.5, -1.5, 0.0]]


def test_hot_samples_warn_once(caplog):
    buffer = [[1.5, 1.6], [-1.7]]
    with caplog.at_level(logging.WARNING, logger="eulerdelay.output"):
        protect_ears(buffer)
    warnings = [r for r in caplog.records if "0dB" in r.getMessage()]
    assert len(warnings) == 1


def test_empty_buffer_is_safe():
    buffer = [[], []]
    assert protect_ears(buffer) is False
    assert buffer == [[], []]