# ostt

A terminal speech-to-text recorder. It records from your microphone while
drawing a live waveform and volume meter, encodes the recording with
`ffmpeg`, sends it to a transcription provider (OpenAI or Deepgram), copies
the resulting text to the clipboard and keeps a history of everything you
have transcribed.

## Requirements

- Python 3.11 or later
- `ffmpeg`, used to encode recordings (looked for in the usual install
  locations, then on `PATH`)
- A clipboard tool: `pbcopy` (macOS), `wl-copy` (Wayland) or `xclip` (X11).
  Without one, transcription still works; the copy is skipped and logged.
- An API key for OpenAI or Deepgram

Audio is captured through SDL (via `pygame`).

## Installation

```
pip install .
```

## Usage

```
ostt [COMMAND]
```

With no command, `ostt` starts recording.

| Command | What it does |
| --- | --- |
| `record` | Record audio with a live waveform and volume meter. Enter transcribes, Space pauses and resumes, Escape, `q` or Ctrl+C cancels. |
| `auth` | Pick a provider and model from a numbered list and enter its API key. Press Enter to keep a key that is already saved. |
| `history` | Browse past transcriptions with the arrow keys. Enter copies the selected one to the clipboard; `q` or Escape leaves. |
| `keywords` | List, add and remove keywords: type `a <keyword>` to add, `x <number>` to remove, `q` to quit. |
| `config` | Open the configuration file in `$EDITOR` (or `nano`, then `vi`). |
| `list-devices` | List audio input devices with their IDs. |
| `logs` | Show the last 50 lines of the newest log file. |
| `version`, `-V`, `--version` | Show the version. |
| `help`, `-h`, `--help` | Show help. |

An unknown command exits with status 2; a failing `list-devices` or `logs`
exits with status 1.

A typical first run:

```
ostt auth
ostt record
ostt history
```

While recording, sending `SIGUSR1` to the process ends the recording and
starts transcription, which is handy for binding to a global hotkey.

The footer of the recording screen shows the elapsed time (pauses not
counted), the current level and the peak level held for three seconds. The
peak turns red once it reaches `peak_volume_threshold`.

## Models

| Provider | Model ID | Notes |
| --- | --- | --- |
| OpenAI | `gpt-4o-transcribe` | latest, best accuracy |
| OpenAI | `gpt-4o-mini-transcribe` | faster, lighter |
| OpenAI | `whisper` | legacy (sent to the API as `whisper-1`) |
| Deepgram | `nova-3` | latest, fastest |
| Deepgram | `nova-2` | previous generation |

Keywords are sent to OpenAI models as a comma-separated prompt (skipped for
`gpt-4o-transcribe`, which does not take one), and to Deepgram as `keyterm`
(Nova 3) or `keywords` (Nova 2) query parameters.

## Configuration

The configuration file lives at `~/.config/ostt/ostt.toml`. If it is
missing, any command other than `help`, `version`, `list-devices` and
`logs` writes a default one first:

```toml
[audio]
device = "default"          # "default", an index or a name from `ostt list-devices`
sample_rate = 16000         # the device's own rate is used if it differs
peak_volume_threshold = 90  # percent at which the peak meter turns red
reference_level_db = -20    # dBFS shown as 100% on the meter
output_format = "mp3 -ab 16k -ar 12000"  # ffmpeg codec followed by options

[providers.deepgram]
smart_format = true
punctuate = true
```

Only `device` and `sample_rate` are required. The Deepgram section also
accepts `filler_words`, `measurements`, `numerals`, `paragraphs`,
`profanity_filter`, `utterances`, `utt_split` (seconds, default 0.8) and
`mip_opt_out`; each flag that is `true` is passed on to the API.

The file extension of the recording follows the codec: `libopus` and
`libvorbis` give `.ogg`, `flac` `.flac`, `aac` `.m4a`, `pcm_s16le` `.wav`,
and any other codec is used as its own extension. Recordings are always
mono and are written to the system temporary directory.

## Files

- `~/.config/ostt/ostt.toml`: configuration
- `~/.config/ostt/keywords.txt`: keywords, one per line
- `~/.local/share/ostt/credentials`: API keys, readable only by you
- `~/.local/share/ostt/model`: the selected model
- `~/.local/share/ostt/transcription_history.db`: transcription history (SQLite)
- `~/.local/state/ostt/ostt.log`: logs, rotated daily (under
  `$XDG_STATE_HOME/ostt` when that is set)

The log level is read from `$OSTT_LOG` (`debug`, `info`, `warn`, `error`
or `off`) and defaults to `debug`. Nothing is logged to the terminal.

## Using it as a library

The pieces behind the commands can be used on their own, for example:

- `ostt.transcription.transcribe(TranscriptionConfig(model, api_key, keywords), path)`
  returns the text of an audio file and raises `TranscriptionError` on failure.
- `ostt.history.HistoryManager(data_dir)` stores and lists transcriptions.
- `ostt.keywords.KeywordsManager(config_dir)` reads and edits `keywords.txt`.
- `ostt.credentials` saves and reads API keys and the selected model.
- `ostt.providers.TranscriptionModel` lists the supported models.

## What it does not do

- `list-devices` shows each device's index and name only, not its sample
  rate or channel count.
- The history viewer is driven by the keyboard alone; there is no mouse
  support.
- The keywords manager is a simple line-based prompt, not a full-screen view.
- First-run setup writes the configuration file only; it does not install
  any window-manager or terminal integration.

## Development

```
pip install -e ".[test]"
pytest
```