"""Command-line media converter built on ffmpeg and ffprobe."""

__version__ = "1.2.14"