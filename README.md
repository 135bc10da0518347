# qffconvert

A command-line media converter built on `ffmpeg` and `ffprobe`. It detects
whether an input file is video, audio, an image or a GIF, offers the output
formats that suit it, builds and runs the `ffmpeg` command lines for the
conversion, and reports a file's duration and size.

## Requirements

- Python 3.10 or later
- `ffmpeg` and `ffprobe` on your `PATH`

The package has no third-party dependencies.

## Installation

```
pip install .
```

## Command line

```
qffconvert --help
```

Subcommands:

- `qffconvert convert INPUT [-o OUTPUT] [-f FORMAT]` – probes the input, prints
  the detected type and converts it. Without `-f` the format is taken from the
  extension of `-o`, or else the first format offered for the detected type.
  Without `-o` the output is written next to the input as
  `<name>_converted.<format>`. Further options: `--resolution` (default
  `320x240`), `--video-bitrate` (kbit/s, default 2000), `--audio-bitrate`
  (kbit/s, default 128), `--sample-rate` (default `44100`), `--quality`
  (image quality, 0 leaves it unset) and `--fps` (1–60, default 8). ffmpeg's
  progress output is passed through to standard error.
- `qffconvert probe INPUT` – prints the detected type, the duration
  (e.g. `01:05 (minutes:seconds)`) and the size (e.g. `1.50 MB`).
- `qffconvert formats [video|audio|image|gif|unknown]` – lists the output
  formats offered for a media type; `unknown` (the default) lists all of them.
- `qffconvert ffmpeg-path` – where `ffmpeg` is found on `PATH`.
- `qffconvert ffmpeg-version` – the full `ffmpeg -version` output.
- `qffconvert about` – application version, Python version and ffmpeg version.
- `qffconvert settings [--auto-update on|off]` – shows or changes whether
  updates are checked for on startup.
- `qffconvert update [--check-only]` – looks up the latest release, and unless
  `--check-only` is given downloads the installer for this platform and
  launches it.
- `qffconvert setup` – makes sure a Python interpreter and `ffmpeg` are
  installed, installing them if they are missing.

The global option `--settings PATH` selects the settings file.

### How conversions are built

The output format decides the `ffmpeg` invocation:

- `gif`: one pass with `-vf fps=<fps>,scale=<resolution>`.
- `mp4`, `avi`, `mkv`, `mov`, `webm`: two passes; the first generates a
  palette image `<name>_palette.png` next to the input, the second applies it
  with `paletteuse=dither=bayer`.
- anything else: one pass with the parameters that apply to the detected
  type – resolution and video bitrate for video and GIF input, audio bitrate
  and sample rate for audio, quality for images.

### Downloads

Locations to download from are read from environment variables:

- `QFF_RELEASES_URL` – JSON description of the latest release, used by
  `update`. The asset named `QFFMediaConverter-<version>-win64.exe`,
  `-mac.dmg` or `-linux.tar.gz` is picked for the running platform.
- `QFF_FFMPEG_URL` – zip archive of an ffmpeg build, used by `setup` on
  Windows. On other systems install ffmpeg with your package manager.
- `QFF_PYTHON_URL` – Python installer, used by `setup` on Windows. On Linux
  `apt`, `dnf` or `pacman` is used, on macOS Homebrew.

## Library use

```python
from qffconvert.probe import probe_file, get_media_info, format_time
from qffconvert.formats import formats_for, default_output_path
from qffconvert.conversion import ConversionOptions, build_ffmpeg_commands, run_conversion

result = probe_file("clip.mov")
print(result.media_type, result.duration_ms, formats_for(result.media_type))

info = get_media_info("clip.mov")
print(info.duration_text, info.size_text)

output = default_output_path("clip.mov", "mkv")   # clip_converted.mkv next to the input
options = ConversionOptions(media_type=result.media_type, output_format="mkv")
for command in build_ffmpeg_commands("clip.mov", output, options):
    print(" ".join(command))

run_conversion("clip.mov", output, options, on_output=print)
```

`run_conversion` raises `ConversionError` (with `returncode`) when ffmpeg
cannot start or fails.

Other modules:

- `qffconvert.ffmpeg` – `is_ffmpeg_available`, `get_ffmpeg_path`,
  `get_ffmpeg_version`, `parse_ffmpeg_version` and
  `download_and_install_ffmpeg` (raises `FfmpegInstallError`).
- `qffconvert.pythoninstaller.PythonInstaller` – `is_python_available`,
  `download_installer` and `install_silently` (raise `PythonInstallError`).
- `qffconvert.updater.UpdateManager` – `check_for_updates` returns an
  `UpdateCheck`; `download_update` and `initiate_update` fetch and launch the
  installer. Failures raise `UpdateError`.
- `qffconvert.progress.DownloadProgress` – percentage and status text of a
  download, with an optional `on_change` callback.
- `qffconvert.settings.Settings` – `update_enabled` is saved to and loaded
  from an INI file (`default_settings_path()` gives its per-user location);
  `autoplay_enabled` is kept only for the session.

## What it does not do

There is no graphical window: no media preview or playback, and no audio
waveform display. Everything is done from the command line or from Python.

## Running the tests

```
pip install .[test]
pytest
```