import pytest

from eulerdelay.feedback import FeedbackSample, StereoFeedback


def prepared():
    fb = StereoFeedback()
    fb.prepare(48000.0, 2)
    return fb


def test_sample_push_scales_and_pops():
    s = FeedbackSample()
    s.push(0.8, 0.5)
    assert s.pop() == pytest.approx(0.4)
    s.push(-0.3)
    assert s.pop() == -0.3


def test_sample_reset():
    s = FeedbackSample()
    s.push(1.0)
    s.reset()
    assert s.pop() == 0.0


def test_pop_after_prepare_is_silent():
    assert prepared().pop() == (0.0, 0.0)


def test_zero_amount_gives_silence():
    fb = prepared()
    for _ in range(10):
        fb.push(1.0, -1.0, 0.0, 20.0, 20000.0)
    assert fb.pop() == (0.0, 0.0)


def test_amount_is_linear_scaling():
    a, b = prepared(), prepared()
    for i in range(30):
        x = 1.0 if i % 4 == 0 else 0.2
        a.push(x, x, 0.5, 300.0, 8000.0)
        b.push(x * 0.5, x * 0.5, 1.0, 300.0, 8000.0)
        assert a.pop() == pytest.approx(b.pop())


def test_channels_are_independent():
    fb = prepared()
    for _ in range(10):
        fb.push(1.0, 0.0, 0.9, 20.0, 20000.0)
    left, right = fb.pop()
    assert right == 0.0
    assert left > 0.0


def test_low_cut_removes_dc():
    fb = prepared()
    for _ in range(3000):
        fb.push(1.0, 1.0, 1.0, 1000.0, 20000.0)
    left, right = fb.pop()
    assert abs(left) < 1e-6
    assert abs(right) < 1e-6


def test_high_cut_attenuates_nyquist():
    fb = prepared()
    for i in range(2000):
        x = 1.0 if i % 2 == 0 else -1.0
        fb.push(x, x, 1.0, 20.0, 100.0)
    left, _ = fb.pop()
    assert abs(left) < 0.01


def test_reset_clears_stored_sample():
    fb = prepared()
    fb.push(1.0, 1.0, 0.5, 20.0, 20000.0)
    fb.reset()
    assert fb.pop() == (0.0, 0.0)