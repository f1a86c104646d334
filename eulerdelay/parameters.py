"""Delay parameters: layout, text conversion, parameter state and smoothed values."""

from __future__ import annotations

import math
import re
import xml.etree.ElementTree as ET
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from eulerdelay.smoother import ExponentialSmoother, LinearSmoother

STATE_TYPE = "MyParameters"

TEST = "Test"
TEMPO = "Tempo"
LINK = "Link"
PING_PONG = "PingPong"
GAIN = "Gain"
MIX = "Mix"
TIME = ("TimeL", "TimeR")
NOTE = ("NoteL", "NoteR")
AMOUNT = "Amount"
LOW_CUT = "LowCut"
HIGH_CUT = "HighCut"
WIDTH = "Width"

TIME_MIN = 5.0
TIME_MAX = 2000.0
SMOOTHING_SECONDS = 0.05

NOTES = (
    "1/16 triplet",
    "1/32 dotted",
    "1/16",
    "1/8 triplet",
    "1/16 dotted",
    "1/8",
    "1/4 triplet",
    "1/8 dotted",
    "1/4",
    "1/2 triplet",
    "1/4 dotted",
    "1/2",
    "1/1 triplet",
    "1/2 dotted",
)

_NOTE_SCALARS = (
    0.25 * 2.0 / 3.0,
    0.125 * 1.5,
    0.25,
    0.5 * 2.0 / 3.0,
    0.25 * 1.5,
    0.5,
    1.0 * 2.0 / 3.0,
    0.5 * 1.5,
    1.0,
    2.0 * 2.0 / 3.0,
    1.0 * 1.5,
    2.0,
    4.0 * 2.0 / 3.0,
    2.0 * 1.5,
)

_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

Listener = Callable[[str, float], None]


@dataclass(frozen=True)
class FactoryPreset:
    """A built-in preset: delay times in ms, feedback and mix in percent, gain in dB."""

    name: str
    time: tuple[float, float]
    feedback: float
    mix: float
    gain: float


class ParameterKind(Enum):
    FLOAT = "float"
    BOOL = "bool"
    CHOICE = "choice"


@dataclass(frozen=True)
class ParameterSpec:
    """Description of one automatable parameter."""

    param_id: str
    name: str
    kind: ParameterKind
    default: float
    minimum: float = 0.0
    maximum: float = 1.0
    step: float = 0.0
    choices: tuple[str, ...] = ()
    to_text: Callable[[float], str] | None = None
    from_text: Callable[[str], float] | None = None


def _parse_leading_float(text: str) -> float:
    match = _LEADING_FLOAT.match(text)
    return float(match.group(1)) if match else 0.0


def _float_text(value: float) -> str:
    text = f"{value:.9g}"
    if re.fullmatch(r"-?\d+", text):
        text += ".0"
    return text


def string_from_decibels(value: float) -> str:
    return f"{value:.1f}dB"


def string_from_milliseconds(value: float) -> str:
    if value < 1000.0:
        return f"{value:.1f}ms"
    return f"{value * 0.001:.4f}s"


def milliseconds_from_string(text: str) -> float:
    """Parse a delay time; values below the minimum or ending in 's' are seconds."""
    value = _parse_leading_float(text)
    lowered = text.lower()
    if not lowered.endswith("ms"):
        if value < TIME_MIN or lowered.endswith("s"):
            return value * 1000.0
    return value


def string_from_percent(value: float) -> str:
    return f"{int(value)}%"


def string_from_hz(value: float) -> str:
    return _float_text(value) + "Hz"


def hz_from_string(text: str) -> float:
    """Parse a frequency; values below 20 are read as kHz."""
    value = _parse_leading_float(text)
    if value < 20:
        return value * 1000.0
    return value


def time_by_note(bpm: float, note: int) -> float:
    """Length in seconds of the note value at index ``note`` of NOTES at ``bpm``."""
    if not 0 <= note < len(_NOTE_SCALARS):
        raise ValueError(f"note index {note} outside [0, {len(_NOTE_SCALARS)})")
    seconds_per_beat = 60.0 / bpm
    return seconds_per_beat * _NOTE_SCALARS[note]


def create_layout() -> tuple[ParameterSpec, ...]:
    """Return the parameter layout of the delay, in declaration order."""
    float_kind = ParameterKind.FLOAT
    specs = [
        ParameterSpec(GAIN, "Gain", float_kind, 0.0, -24.0, 24.0, 0.1,
                      to_text=string_from_decibels),
        ParameterSpec(TEST, "Test", float_kind, 0.0, 0.0, 1.0, 0.1),
    ]
    for param_id, name in zip(TIME, ("Delay TimeL", "Delay TimeR")):
        specs.append(
            ParameterSpec(param_id, name, float_kind, 1000.0, TIME_MIN, TIME_MAX, 0.1,
                          to_text=string_from_milliseconds,
                          from_text=milliseconds_from_string)
        )
    specs += [
        ParameterSpec(MIX, "Mix", float_kind, 50.0, 0.0, 100.0, 1.0,
                      to_text=string_from_percent),
        ParameterSpec(AMOUNT, "Amount", float_kind, 20.0, -95.0, 95.0, 1.0,
                      to_text=string_from_percent),
        ParameterSpec(TEMPO, "Tempo", ParameterKind.BOOL, 0.0),
    ]
    for param_id, name in zip(NOTE, ("Delay Note L", "Delay Note R")):
        specs.append(
            ParameterSpec(param_id, name, ParameterKind.CHOICE, float(NOTES.index("1/4")),
                          0.0, float(len(NOTES) - 1), 1.0, choices=NOTES)
        )
    specs += [
        ParameterSpec(LINK, "Stereo Link", ParameterKind.BOOL, 0.0),
        ParameterSpec(WIDTH, "Width", float_kind, 0.0, -100.0, 100.0, 0.1,
                      to_text=string_from_percent),
        ParameterSpec(PING_PONG, "Ping Pong", ParameterKind.BOOL, 0.0),
        ParameterSpec(LOW_CUT, "LowCut", float_kind, 20.0, 20.0, 20000.0, 1.0,
                      to_text=string_from_hz, from_text=hz_from_string),
        ParameterSpec(HIGH_CUT, "HighCut", float_kind, 20000.0, 20.0, 20000.0, 1.0,
                      to_text=string_from_hz, from_text=hz_from_string),
    ]
    return tuple(specs)


def _constrain(spec: ParameterSpec, value: float) -> float | bool | int:
    if spec.kind is ParameterKind.BOOL:
        return bool(value >= 0.5)
    if spec.kind is ParameterKind.CHOICE:
        return min(max(int(round(value)), 0), len(spec.choices) - 1)
    clamped = min(max(float(value), spec.minimum), spec.maximum)
    if spec.step > 0.0:
        clamped = spec.minimum + spec.step * round((clamped - spec.minimum) / spec.step)
        clamped = min(max(clamped, spec.minimum), spec.maximum)
    return round(clamped, 6)


class ParameterState:
    """Current values of a parameter layout, with change listeners and XML state."""

    def __init__(
        self,
        layout: Iterable[ParameterSpec] | None = None,
        state_type: str = STATE_TYPE,
    ) -> None:
        self.state_type = state_type
        self.specs: dict[str, ParameterSpec] = {}
        for spec in create_layout() if layout is None else layout:
            if spec.param_id in self.specs:
                raise ValueError(f"duplicate parameter id {spec.param_id!r}")
            self.specs[spec.param_id] = spec
        self._values = {pid: _constrain(s, s.default) for pid, s in self.specs.items()}
        self._listeners: dict[str, list[Listener]] = {}

    def _spec(self, param_id: str) -> ParameterSpec:
        try:
            return self.specs[param_id]
        except KeyError:
            raise KeyError(f"unknown parameter {param_id!r}") from None

    def get(self, param_id: str) -> float | bool | int:
        self._spec(param_id)
        return self._values[param_id]

    def set(self, param_id: str, value: float) -> None:
        """Set a parameter, snapped to its range, and notify listeners if it changed."""
        new = _constrain(self._spec(param_id), value)
        if new == self._values[param_id]:
            return
        self._values[param_id] = new
        for listener in list(self._listeners.get(param_id, ())):
            listener(param_id, float(new))

    def add_listener(self, param_id: str, listener: Listener) -> None:
        self._spec(param_id)
        listeners = self._listeners.setdefault(param_id, [])
        if listener not in listeners:
            listeners.append(listener)

    def remove_listener(self, param_id: str, listener: Listener) -> None:
        listeners = self._listeners.get(param_id, [])
        if listener in listeners:
            listeners.remove(listener)

    def copy_state(self) -> ET.Element:
        """Return the values as an XML element of the state type."""
        root = ET.Element(self.state_type)
        for param_id, value in self._values.items():
            ET.SubElement(root, "PARAM", id=param_id, value=repr(float(value)))
        return root

    def replace_state(self, state: ET.Element) -> None:
        """Load values from ``state``; parameters it omits return to their defaults."""
        given = {
            child.get("id"): child.get("value")
            for child in state.iter("PARAM")
            if child.get("id") is not None
        }
        for param_id, spec in self.specs.items():
            text = given.get(param_id)
            self.set(param_id, spec.default if text is None else float(text))


def _decibels_to_gain(decibels: float, minus_infinity_db: float = -100.0) -> float:
    if decibels > minus_infinity_db:
        return math.pow(10.0, decibels * 0.05)
    return 0.0


class DelayParameters:
    """Smoothed per-sample values of the delay parameters, with stereo link handling."""

    def __init__(self, state: ParameterState | None = None) -> None:
        self.state = ParameterState() if state is None else state
        self.sample_rate = 44100.0

        self._gain = LinearSmoother()
        self._test = ExponentialSmoother()
        self._time = (ExponentialSmoother(), ExponentialSmoother())
        self._mix = LinearSmoother()
        self._amount = LinearSmoother()
        self._width = LinearSmoother()
        self._low_cut = LinearSmoother()
        self._high_cut = LinearSmoother()
        self._ping_pong = False

        self._master_channel = 0
        self._linking = False
        self._link_active = False

        self.state.add_listener(LINK, self.parameter_changed)

    def close(self) -> None:
        """Stop listening to the stereo link parameter."""
        self.state.remove_listener(LINK, self.parameter_changed)

    def _linear(self) -> tuple[LinearSmoother, ...]:
        return (self._gain, self._mix, self._amount, self._width,
                self._low_cut, self._high_cut)

    def _exponential(self) -> tuple[ExponentialSmoother, ...]:
        return (self._test, *self._time)

    @property
    def gain(self) -> float:
        return self._gain.current

    @property
    def test(self) -> float:
        return self._test.current

    @property
    def mix(self) -> float:
        return self._mix.current

    @property
    def amount(self) -> float:
        return self._amount.current

    @property
    def width(self) -> float:
        return self._width.current

    @property
    def ping_pong(self) -> bool:
        return self._ping_pong

    @property
    def low_cut(self) -> float:
        return self._low_cut.current

    @property
    def high_cut(self) -> float:
        return self._high_cut.current

    @property
    def linked(self) -> bool:
        return self._link_active

    def time(self, channel: int) -> float:
        """Smoothed delay time of ``channel`` in samples."""
        return float(self._time[channel].current)

    def prepare(self, sample_rate: float) -> None:
        self.sample_rate = float(sample_rate)
        for smoother in self._linear():
            smoother.reset(self.sample_rate, SMOOTHING_SECONDS)
        for smoother in self._exponential():
            smoother.reset(self.sample_rate, SMOOTHING_SECONDS)
        self.update()
        self.reset()

    def update(self, bpm: float = 120.0) -> None:
        """Read the parameters and set the smoothing targets."""
        state = self.state
        self._test.target = float(state.get(TEST))
        self._gain.set_target(_decibels_to_gain(float(state.get(GAIN))))

        tempo = bool(state.get(TEMPO))
        for channel, smoother in enumerate(self._time):
            source = 0 if self._ping_pong else channel
            if tempo:
                seconds = time_by_note(bpm, int(state.get(NOTE[source])))
            else:
                seconds = float(state.get(TIME[source])) * 0.001
            smoother.target = seconds * self.sample_rate

        self._mix.set_target(float(state.get(MIX)) * 0.01)
        self._amount.set_target(float(state.get(AMOUNT)) * 0.01)
        self._width.set_target(float(state.get(WIDTH)) * 0.01)
        self._ping_pong = bool(state.get(PING_PONG))
        self._low_cut.set_target(float(state.get(LOW_CUT)))
        self._high_cut.set_target(float(state.get(HIGH_CUT)))

    def smoothen(self) -> None:
        """Advance every smoothed value by one sample."""
        for smoother in self._linear():
            smoother.next_value()
        for smoother in self._exponential():
            smoother.smoothen()

    def reset(self) -> None:
        """Jump every smoothed value to its target."""
        for smoother in self._linear():
            smoother.set_current_and_target(smoother.target)
        for smoother in self._exponential():
            smoother.current = smoother.target

    def apply_factory_preset(self, preset: FactoryPreset) -> None:
        for param_id, value in zip(TIME, preset.time):
            self.state.set(param_id, value)
        self.state.set(AMOUNT, preset.feedback)
        self.state.set(MIX, preset.mix)
        self.state.set(GAIN, preset.gain)

    def apply_state(self, state: ET.Element) -> bool:
        """Load ``state`` if it is of this parameter set's type; report whether it was."""
        if state.tag != self.state.state_type:
            return False
        self.state.replace_state(state)
        return True

    def copy_state(self) -> ET.Element:
        return self.state.copy_state()

    def parameter_changed(self, param_id: str, value: float) -> None:
        """Track the master channel and switch stereo linking on or off."""
        if self._linking:
            return
        self._master_channel = 1 if param_id in (TIME[1], NOTE[1]) else 0

        if param_id != LINK:
            return
        watched = (*TIME, *NOTE)
        if value == 1.0:
            for watched_id in watched:
                self.state.add_listener(watched_id, self.parameter_changed)
            self._link_active = True
        else:
            self._link_active = False
            for watched_id in watched:
                self.state.remove_listener(watched_id, self.parameter_changed)

    def sync_link(self) -> None:
        """Copy the master channel's time and note to the other channel while linked."""
        if not self._link_active:
            return
        master = self._master_channel
        self._linking = True
        try:
            for channel in range(2):
                if channel != master:
                    self.state.set(TIME[channel], float(self.state.get(TIME[master])))
                    self.state.set(NOTE[channel], int(self.state.get(NOTE[master])))
        finally:
            self._linking = False