import xml.etree.ElementTree as ET

import pytest

from eulerdelay.parameters import (
    AMOUNT,
    GAIN,
    HIGH_CUT,
    LINK,
    MIX,
    NOTE,
    NOTES,
    PING_PONG,
    STATE_TYPE,
    TEMPO,
    TIME,
    DelayParameters,
    FactoryPreset,
    ParameterKind,
    ParameterSpec,
    ParameterState,
    create_layout,
    hz_from_string,
    milliseconds_from_string,
    string_from_decibels,
    string_from_hz,
    string_from_milliseconds,
    string_from_percent,
    time_by_note,
)


def test_text_formats():
    assert string_from_decibels(-10.0) == "-10.0dB"
    assert string_from_milliseconds(1500.0) == "1.5000s"
    assert string_from_percent(33.9) == "33%"
    assert string_from_milliseconds(250.0).endswith("ms")
    assert string_from_hz(440.0).endswith("Hz")


def test_milliseconds_from_string():
    assert milliseconds_from_string("250ms") == 250.0
    assert milliseconds_from_string("250MS") == 250.0
    assert milliseconds_from_string("2s") == 2000.0
    assert milliseconds_from_string("2") == 2000.0
    assert milliseconds_from_string("12") == 12.0


@pytest.mark.parametrize("value", [250.0, 1500.0, 999.0])
def test_milliseconds_round_trip(value):
    assert milliseconds_from_string(string_from_milliseconds(value)) == pytest.approx(value)


def test_hz_from_string():
    assert hz_from_string("440") == 440.0
    assert hz_from_string("2") == 2000.0
    assert hz_from_string(string_from_hz(440.0)) == pytest.approx(440.0)


def test_time_by_note_ratios():
    quarter = time_by_note(120.0, NOTES.index("1/4"))
    assert time_by_note(120.0, NOTES.index("1/2")) == pytest.approx(quarter * 2.0)
    assert time_by_note(120.0, NOTES.index("1/4 dotted")) == pytest.approx(quarter * 1.5)
    assert time_by_note(60.0, NOTES.index("1/4")) == pytest.approx(quarter * 2.0)
    assert time_by_note(120.0, NOTES.index("1/4 triplet")) * 3.0 == pytest.approx(quarter * 2.0)


def test_time_by_note_rejects_bad_index():
    with pytest.raises(ValueError):
        time_by_note(120.0, len(NOTES))


def test_layout_defaults():
    specs = {spec.param_id: spec for spec in create_layout()}
    assert specs[GAIN].default == 0.0
    assert specs[TIME[0]].default == 1000.0
    assert specs[MIX].default == 50.0
    assert specs[AMOUNT].default == 20.0
    assert specs[HIGH_CUT].default == 20000.0
    assert specs[NOTE[1]].choices[int(specs[NOTE[1]].default)] == "1/4"
    assert specs[LINK].kind is ParameterKind.BOOL


def test_state_clamps_and_snaps():
    state = ParameterState()
    state.set(GAIN, 100.0)
    assert state.get(GAIN) == 24.0
    state.set(MIX, 49.6)
    assert state.get(MIX) == 50.0
    state.set(NOTE[0], 99)
    assert state.get(NOTE[0]) == len(NOTES) - 1


def test_state_unknown_id():
    state = ParameterState()
    with pytest.raises(KeyError):
        state.get("Nope")


def test_state_duplicate_id_rejected():
    spec = ParameterSpec("A", "A", ParameterKind.BOOL, 0.0)
    with pytest.raises(ValueError):
        ParameterState([spec, spec])


def test_listener_notified_only_on_change():
    state = ParameterState()
    calls = []

    def listener(pid, value):
        calls.append((pid, value))

    state.add_listener(TEMPO, listener)
    state.set(TEMPO, True)
    assert state.get(TEMPO) is True
    state.set(TEMPO, True)
    assert state.get(TEMPO) is True
    assert calls == [(TEMPO, 1.0)]
    state.remove_listener(TEMPO, listener)
    state.set(TEMPO, False)
    assert state.get(TEMPO) is False
    assert calls == [(TEMPO, 1.0)]


def test_state_round_trip():
    state = ParameterState()
    state.set(TIME[1], 300.0)
    state.set(PING_PONG, True)
    state.set(NOTE[0], 3)
    copied = state.copy_state()
    assert copied.tag == STATE_TYPE

    other = ParameterState()
    other.replace_state(ET.fromstring(ET.tostring(copied)))
    assert other.get(TIME[1]) == 300.0
    assert other.get(PING_PONG) is True
    assert other.get(NOTE[0]) == 3


def test_replace_state_restores_missing_defaults():
    state = ParameterState()
    state.set(MIX, 10.0)
    state.replace_state(ET.Element(STATE_TYPE))
    assert state.get(MIX) == 50.0


def test_prepare_sets_values():
    params = DelayParameters()
    params.prepare(48000.0)
    assert params.time(0) == pytest.approx(48000.0)
    assert params.gain == pytest.approx(1.0)
    assert params.mix == pytest.approx(0.5)
    assert params.high_cut == pytest.approx(20000.0)


def test_gain_decibels_symmetric():
    params = DelayParameters()
    params.prepare(1000.0)
    params.state.set(GAIN, 6.0)
    params.update()
    params.reset()
    up = params.gain
    params.state.set(GAIN, -6.0)
    params.update()
    params.reset()
    assert up * params.gain == pytest.approx(1.0)
    assert up > 1.0


def test_linear_smoothing_reaches_target():
    params = DelayParameters()
    params.prepare(1000.0)
    params.state.set(GAIN, 6.0)
    params.update()
    values = []
    for _ in range(50):
        params.smoothen()
        values.append(params.gain)
    assert values == sorted(values)
    assert values[0] < values[-1]
    params.reset()
    assert values[-1] == pytest.approx(params.gain)


def test_exponential_time_smoothing():
    params = DelayParameters()
    params.prepare(1000.0)
    start = params.time(0)
    params.state.set(TIME[0], 500.0)
    params.update()
    params.smoothen()
    first = params.time(0)
    params.smoothen()
    assert 500.0 < params.time(0) < first < start


def test_tempo_time():
    params = DelayParameters()
    params.prepare(1000.0)
    params.state.set(TEMPO, True)
    params.state.set(NOTE[0], NOTES.index("1/8"))
    params.update(90.0)
    params.reset()
    assert params.time(0) == pytest.approx(time_by_note(90.0, NOTES.index("1/8")) * 1000.0)


def test_ping_pong_uses_left_time_from_next_update():
    params = DelayParameters()
    params.prepare(1000.0)
    params.state.set(TIME[0], 100.0)
    params.state.set(TIME[1], 200.0)
    params.state.set(PING_PONG, True)
    params.update()
    params.reset()
    assert params.ping_pong is True
    assert params.time(1) == pytest.approx(200.0)
    params.update()
    params.reset()
    assert params.time(1) == pytest.approx(100.0)


def test_stereo_link_sync():
    params = DelayParameters()
    state = params.state
    state.set(LINK, True)
    assert params.linked is True

    state.set(NOTE[1], 3)
    state.set(TIME[1], 300.0)
    params.sync_link()
    assert state.get(TIME[0]) == 300.0
    assert state.get(NOTE[0]) == 3

    state.set(TIME[0], 400.0)
    params.sync_link()
    assert state.get(TIME[1]) == 400.0

    state.set(LINK, False)
    assert params.linked is False
    state.set(TIME[1], 700.0)
    params.sync_link()
    assert state.get(TIME[0]) == 400.0


def test_close_stops_link_listening():
    params = DelayParameters()
    params.close()
    params.state.set(LINK, True)
    assert params.linked is False


def test_apply_factory_preset():
    params = DelayParameters()
    params.apply_factory_preset(FactoryPreset("Preset1", (111.0, 111.0), 50.0, 35.0, -10.0))
    assert params.state.get(TIME[0]) == 111.0
    assert params.state.get(TIME[1]) == 111.0
    assert params.state.get(AMOUNT) == 50.0
    assert params.state.get(MIX) == 35.0
    assert params.state.get(GAIN) == -10.0


def test_apply_state():
    params = DelayParameters()
    assert params.apply_state(ET.Element("Other")) is False
    other = DelayParameters()
    other.state.set(MIX, 35.0)
    assert params.apply_state(other.copy_state()) is True
    assert params.state.get(MIX) == 35.0