"""I/Q sample tools: option checking, raw passthrough, DC blocking, raw and WAV/RF64 writers."""

__version__ = "0.1.0"