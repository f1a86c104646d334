# eulerdelay

A stereo delay effect in pure Python, with no dependencies outside the
standard library.

- Fractional delay lines read with four-point Hermite interpolation, up to
  2 seconds long
- A feedback path with a low cut (high-pass) and a high cut (low-pass)
  state-variable filter
- Ping-pong mode: the input is folded to mono, panned by a width control and
  the feedback crosses channels
- Tempo sync, with delay times given as note values from "1/16 triplet" to
  "1/2 dotted"
- Stereo link of the left and right delay time and note
- Smoothed parameters, a dry/wet mix and an output gain in decibels
- Factory presets, XML preset files and serialisable processor state

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Usage

```python
from eulerdelay.parameters import MIX, TIME
from eulerdelay.processor import DelayProcessor

processor = DelayProcessor()
processor.state.set(TIME[0], 250.0)   # left delay in ms
processor.state.set(MIX, 30.0)        # wet mix in percent
processor.prepare(48000.0, 512)

left = [0.0] * 512
right = [0.0] * 512
left[0] = right[0] = 1.0

processor.process_block([left, right], 120.0)
```

`DelayProcessor.process_block(buffer, bpm)` processes the first two channels
of `buffer` in place and returns it. It raises `RuntimeError` if `prepare()`
has not been called and `ValueError` if the buffer has fewer than two channels
or channels of different length. `bpm` (default 120) sets the tempo that
note-synced delay times use. Each output sample is the dry signal plus the
delayed signal scaled by the mix, multiplied by the gain.

`DelayProcessor(protect=True)` runs `eulerdelay.output.protect_ears` on every
block: the whole block is silenced if it holds a NaN, an infinity or a sample
beyond ±2, and a sample beyond ±1 only logs a warning.

### Parameters

Parameters live in a `eulerdelay.parameters.ParameterState`, reached as
`processor.state`. `get(param_id)` and `set(param_id, value)` read and write
them; values are clamped to their range and snapped to their step. The ids are
constants in `eulerdelay.parameters` (`GAIN`, `MIX`, `TIME`, `NOTE`, `AMOUNT`,
`LOW_CUT`, `HIGH_CUT`, `WIDTH`, `TEMPO`, `LINK`, `PING_PONG`):

| id | range | default |
|----|-------|---------|
| Gain | -24 to 24 dB | 0 dB |
| Mix | 0 to 100 % | 50 % |
| TimeL, TimeR | 5 to 2000 ms | 1000 ms |
| NoteL, NoteR | index into `NOTES` | 1/4 |
| Amount | -95 to 95 % | 20 % |
| LowCut | 20 to 20000 Hz | 20 Hz |
| HighCut | 20 to 20000 Hz | 20000 Hz |
| Width | -100 to 100 % | 0 % |
| Tempo, Link, PingPong | on/off | off |

With Tempo on, delay times come from `time_by_note(bpm, note)`. With PingPong
on, both channels use the left time or note. While Link is on, each block
starts by copying the time and note of the channel changed last to the other
channel.

The module also has the text conversions used for display and entry:
`string_from_decibels`, `string_from_milliseconds`, `milliseconds_from_string`
(values below 5 or ending in "s" are read as seconds), `string_from_percent`,
`string_from_hz` and `hz_from_string` (values below 20 are read as kHz).
`create_layout()` returns the parameter specifications.

### Presets and state

`processor.presets` is a `eulerdelay.presets.PresetManager`:

- `set_factory_preset(index)` applies one of three factory presets
  (`factory_preset_name(index)` gives its name)
- `save_xml_preset(path)` writes the parameter state to an XML file
- `load_xml_preset(path)` loads one back and returns `False` if the file is not
  a parameter state of this delay
- `xml_preset_current` holds the name of the last saved or loaded file

`DelayProcessor.get_state()` returns the parameters and current preset name as
XML bytes (and also writes them to `state_file` if one was given);
`set_state(data)` restores them and returns `False` for data it does not
recognise.

## Command line

```
eulerdelay input.wav output.wav --time-left 300 --time-right 450 --feedback 40 --mix 35
```

Reads a 16-bit PCM WAV file (mono input is doubled to stereo; beyond two
channels only the first two are used), runs it through the delay and writes a
16-bit stereo WAV, clipped to ±1. Options:

- `--preset FILE` load an XML preset first
- `--time-left`, `--time-right` delay times in ms
- `--feedback` feedback amount in percent; `--low-cut`, `--high-cut` feedback
  filters in Hz
- `--mix` wet mix in percent; `--gain` output gain in dB
- `--tempo`, `--note-left`, `--note-right`, `--bpm` tempo sync
- `--link` link left and right
- `--ping-pong`, `--width` ping-pong mode and its width in percent
- `--block-size` samples per processed block (default 512)

It exits with status 1 and a message on standard error if a file cannot be
read or written or an argument is invalid.

## What it does not do

The package processes sample lists and WAV files only. It has no graphical
editor, no live audio input or output, and cannot be loaded into an audio host;
the tempo comes from the `bpm` argument rather than from a host transport.