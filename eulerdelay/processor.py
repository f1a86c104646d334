"""The stereo delay processor and a command that runs it over WAV files."""

from __future__ import annotations

import argparse
import sys
import wave
import xml.etree.ElementTree as ET
from array import array
from collections.abc import MutableSequence, Sequence
from pathlib import Path

from eulerdelay.delay import StereoDelay
from eulerdelay.feedback import StereoFeedback
from eulerdelay.output import mix_output, protect_ears
from eulerdelay.panning import PingPong
from eulerdelay.parameters import (
    AMOUNT,
    GAIN,
    HIGH_CUT,
    LINK,
    LOW_CUT,
    MIX,
    NOTE,
    NOTES,
    PING_PONG,
    TEMPO,
    TIME,
    WIDTH,
    DelayParameters,
    ParameterState,
)
from eulerdelay.presets import PLUGIN_NAME, PresetManager

DEFAULT_BPM = 120.0


class DelayProcessor:
    """Stereo delay with filtered feedback, ping-pong routing and dry/wet output."""

    name = PLUGIN_NAME
    accepts_midi = False
    produces_midi = False
    is_midi_effect = False
    tail_length_seconds = 0.0
    num_programs = 1
    current_program = 0

    def __init__(self, protect: bool = False, state_file: Path | None = None) -> None:
        self.state = ParameterState()
        self.parameters = DelayParameters(self.state)
        self.delay = StereoDelay()
        self.feedback = StereoFeedback()
        self.ping_pong = PingPong()
        self.presets = PresetManager(self.parameters)
        self.protect = protect
        self.state_file = None if state_file is None else Path(state_file)
        self._prepared = False

    @staticmethod
    def supports_channels(num_output_channels: int) -> bool:
        """Only a stereo output is supported."""
        return num_output_channels == 2

    def prepare(self, sample_rate: float, block_size: int) -> None:
        self.parameters.prepare(sample_rate)
        self.delay.prepare(sample_rate)
        self.feedback.prepare(sample_rate, 2)
        self._prepared = True

    def reset(self) -> None:
        self.parameters.reset()
        self.delay.reset()
        self.feedback.reset()

    def process_block(
        self, buffer: Sequence[MutableSequence[float]], bpm: float | None = None
    ) -> Sequence[MutableSequence[float]]:
        """Process the first two channels of ``buffer`` in place and return it."""
        if not self._prepared:
            raise RuntimeError("processor used before prepare()")
        if len(buffer) < 2:
            raise ValueError(f"stereo buffer needed, got {len(buffer)} channel(s)")
        left, right = buffer[0], buffer[1]
        if len(left) != len(right):
            raise ValueError("channels of the buffer differ in length")

        params = self.parameters
        params.sync_link()
        params.update(DEFAULT_BPM if bpm is None else bpm)

        for i, (dry_l, dry_r) in enumerate(zip(list(left), list(right))):
            params.smoothen()
            feedback_l, feedback_r = self.feedback.pop()
            in_l, in_r = self.ping_pong.process(
                dry_l, dry_r, feedback_l, feedback_r, params.ping_pong, params.width
            )
            wet_l, wet_r = self.delay.process(in_l, in_r, params.time(0), params.time(1))
            left[i] = mix_output(dry_l, wet_l, params.mix, params.gain)
            right[i] = mix_output(dry_r, wet_r, params.mix, params.gain)
            self.feedback.push(wet_l, wet_r, params.amount, params.low_cut, params.high_cut)

        if self.protect:
            protect_ears(buffer)
        return buffer

    def get_state(self) -> bytes:
        """Serialise the parameters and the current preset name as XML bytes."""
        root = ET.Element(self.name)
        root.append(self.parameters.copy_state())
        root.append(self.presets.state())
        data = ET.tostring(root, encoding="utf-8", xml_declaration=True)
        if self.state_file is not None:
            self.state_file.write_bytes(data)
        return data

    def set_state(self, data: bytes) -> bool:
        """Restore state made by ``get_state``; return False if ``data`` is not one."""
        try:
            root = ET.fromstring(data)
        except ET.ParseError:
            return False
        if root.tag != self.name:
            return False
        preset = root.find(self.presets.state_id)
        if preset is not None:
            self.presets.set_by_state(preset)
        params = root.find(self.state.state_type)
        if params is not None:
            self.state.replace_state(params)
        return True


def _read_wav(path: Path) -> tuple[list[list[float]], int]:
    with wave.open(str(path), "rb") as wav:
        if wav.getsampwidth() != 2:
            raise ValueError("only 16-bit PCM WAV files are supported")
        channels = wav.getnchannels()
        rate = wav.getframerate()
        frames = wav.readframes(wav.getnframes())
    samples = array("h")
    samples.frombytes(frames)
    if sys.byteorder == "big":
        samples.byteswap()
    data = [[s / 32768.0 for s in samples[c::channels]] for c in range(channels)]
    if channels == 1:
        data.append(list(data[0]))
    return data[:2], rate


def _write_wav(path: Path, left: list[float], right: list[float], rate: int) -> None:
    samples = array(
        "h",
        (int(max(-1.0, min(1.0, s)) * 32767) for pair in zip(left, right) for s in pair),
    )
    if sys.byteorder == "big":
        samples.byteswap()
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(2)
        wav.setsampwidth(2)
        wav.setframerate(rate)
        wav.writeframes(samples.tobytes())


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eulerdelay", description="Run a stereo delay over a 16-bit WAV file."
    )
    parser.add_argument("input", type=Path)
    parser.add_argument("output", type=Path)
    parser.add_argument("--preset", type=Path, help="XML preset to load first")
    parser.add_argument("--time-left", type=float, help="left delay time in ms")
    parser.add_argument("--time-right", type=float, help="right delay time in ms")
    parser.add_argument("--feedback", type=float, help="feedback amount in percent")
    parser.add_argument("--mix", type=float, help="wet mix in percent")
    parser.add_argument("--gain", type=float, help="output gain in dB")
    parser.add_argument("--tempo", action="store_true", help="sync times to the tempo")
    parser.add_argument("--note-left", choices=NOTES)
    parser.add_argument("--note-right", choices=NOTES)
    parser.add_argument("--bpm", type=float, default=DEFAULT_BPM)
    parser.add_argument("--link", action="store_true", help="link left and right")
    parser.add_argument("--ping-pong", action="store_true")
    parser.add_argument("--width", type=float, help="ping-pong width in percent")
    parser.add_argument("--low-cut", type=float, help="feedback low cut in Hz")
    parser.add_argument("--high-cut", type=float, help="feedback high cut in Hz")
    parser.add_argument("--block-size", type=int, default=512)
    return parser


def _apply_arguments(processor: DelayProcessor, args: argparse.Namespace) -> None:
    if args.preset is not None and not processor.presets.load_xml_preset(args.preset):
        raise ValueError(f"{args.preset} is not a preset of this delay")
    state = processor.state
    numeric = (
        (TIME[0], args.time_left),
        (TIME[1], args.time_right),
        (AMOUNT, args.feedback),
        (MIX, args.mix),
        (GAIN, args.gain),
        (WIDTH, args.width),
        (LOW_CUT, args.low_cut),
        (HIGH_CUT, args.high_cut),
    )
    for param_id, value in numeric:
        if value is not None:
            state.set(param_id, value)
    for param_id, note in ((NOTE[0], args.note_left), (NOTE[1], args.note_right)):
        if note is not None:
            state.set(param_id, NOTES.index(note))
    for param_id, flag in ((TEMPO, args.tempo), (LINK, args.link), (PING_PONG, args.ping_pong)):
        if flag:
            state.set(param_id, 1.0)


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.block_size <= 0:
        print("error: block size must be positive", file=sys.stderr)
        return 1
    processor = DelayProcessor()
    try:
        _apply_arguments(processor, args)
        (left, right), rate = _read_wav(args.input)
        processor.prepare(rate, args.block_size)
        out_left: list[float] = []
        out_right: list[float] = []
        for start in range(0, len(left), args.block_size):
            end = start + args.block_size
            block = [left[start:end], right[start:end]]
            processor.process_block(block, args.bpm)
            out_left.extend(block[0])
            out_right.extend(block[1])
        _write_wav(args.output, out_left, out_right, rate)
    except (OSError, wave.Error, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())