"""Headerless I/Q file input."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional, Union

from .config import ConfigError, SampleFormat, bytes_per_sample, parse_sample_format
from .optparser import Option, OptionType

logger = logging.getLogger(__name__)


@dataclass
class RawFileOptions:
    """Raw file input settings as given on the command line, plus what was resolved."""

    sample_rate_hz_arg: float = 0.0
    format_str: Optional[str] = None

    sample_rate_hz: float = 0.0
    sample_rate_provided: bool = False
    format_provided: bool = False

    def validate(self) -> None:
        """Check that both rate and format were given; raise ConfigError if not."""
        if self.sample_rate_hz_arg > 0.0:
            self.sample_rate_hz = float(self.sample_rate_hz_arg)
            self.sample_rate_provided = True
        if not self.sample_rate_provided:
            raise ConfigError("Missing required option --raw-file-input-rate <hz> for raw file input.")
        if self.format_str is None:
            raise ConfigError(
                "Missing required option --raw-file-input-sample-format <format> for raw file input."
            )
        self.format_provided = True


def _format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in ("KiB", "MiB", "GiB", "TiB"):
        value /= 1024.0
        if value < 1024.0 or unit == "TiB":
            return f"{value:.2f} {unit} ({size} bytes)"
    return f"{size} B"


class RawFileSource:
    """Reads interleaved I/Q samples from a headerless file."""

    def __init__(self, path: str, sample_format: Union[SampleFormat, str], sample_rate: float) -> None:
        if isinstance(sample_format, SampleFormat):
            fmt = sample_format
        else:
            try:
                fmt = parse_sample_format(sample_format)
            except ConfigError:
                raise ConfigError(
                    f"Invalid raw input format '{sample_format}'. See --help for valid formats."
                ) from None
        if int(sample_rate) < 1:
            raise ConfigError(f"Invalid raw input sample rate {sample_rate}.")
        self.path = path
        self.sample_format = fmt
        self.requested_rate = float(sample_rate)
        self.sample_rate = int(sample_rate)
        self.bytes_per_frame = bytes_per_sample(fmt)
        try:
            self._file: Optional[BinaryIO] = open(path, "rb")
        except OSError as exc:
            raise OSError(f"Error opening raw input file '{path}': {exc.strerror}") from exc
        self.frames = os.fstat(self._file.fileno()).st_size // self.bytes_per_frame
        logger.info(
            "Opened raw file with format %s, rate %.0f Hz, and %d frames.",
            fmt.value,
            float(self.sample_rate),
            self.frames,
        )

    def __enter__(self) -> "RawFileSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def chunks(self, chunk_frames: int) -> Iterator[bytes]:
        """Yield the file's bytes in blocks of at most ``chunk_frames`` frames."""
        if chunk_frames <= 0:
            raise ValueError(f"chunk_frames must be positive, got {chunk_frames}")
        if self._file is None:
            raise ValueError("read from a closed raw file source")
        size = chunk_frames * self.bytes_per_frame
        while self._file is not None:
            block = self._file.read(size)
            if not block:
                return
            yield block

    def close(self) -> None:
        """Close the file; calling it again does nothing."""
        if self._file is not None:
            logger.info("Closing raw input file.")
            self._file.close()
            self._file = None

    def summary(self) -> list[tuple[str, str]]:
        """Return (label, value) pairs describing this input."""
        size = self.frames * self.bytes_per_frame
        return [
            ("Input File", self.path),
            ("Input Type", "RAW FILE"),
            ("Input Format", self.sample_format.value),
            ("Input Rate", f"{self.requested_rate:.0f} Hz"),
            ("Input File Size", _format_file_size(size)),
        ]


def rawfile_cli_options() -> list[Option]:
    """Return the raw file input command-line options."""
    return [
        Option(OptionType.GROUP, help="Raw File Input Options"),
        Option(
            OptionType.FLOAT,
            long_name="raw-file-input-rate",
            dest="raw_file_sample_rate_hz_arg",
            help="(Required) The sample rate of the raw input file.",
        ),
        Option(
            OptionType.STRING,
            long_name="raw-file-input-sample-format",
            dest="raw_file_format_str",
            help="(Required) The sample format of the raw input file.",
        ),
    ]