"""Output writers: raw bytes to a file or stdout, and WAV / RF64 files."""

from __future__ import annotations

import logging
import os
import struct
import sys
from typing import BinaryIO, Callable, Optional

from .config import AppConfig, ConfigError, OutputType, SampleFormat

logger = logging.getLogger(__name__)

_WAV_MAX_DATA = 0xFFFFFFFF - 36
_WAV_BITS = {SampleFormat.CS16: 16, SampleFormat.CU8: 8}


class FileWriter:
    """Base class for output writers; usable as a context manager."""

    def __init__(self) -> None:
        self.total_bytes_written = 0
        self._closed = False

    def write(self, data) -> int:
        """Write ``data`` and return the number of bytes written."""
        if self._closed:
            raise ValueError("write to a closed writer")
        view = memoryview(data).cast("B")
        if not view.nbytes:
            return 0
        written = self._write_bytes(view)
        if written > 0:
            self.total_bytes_written += written
        return written

    def close(self) -> None:
        """Finish the output; calling it again does nothing."""
        if self._closed:
            return
        self._closed = True
        self._finish()

    def __enter__(self) -> "FileWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _write_bytes(self, view: memoryview) -> int:
        raise NotImplementedError

    def _finish(self) -> None:
        raise NotImplementedError


class RawFileWriter(FileWriter):
    """Writes bytes unchanged to a file, or to stdout when ``path`` is None."""

    def __init__(self, path: Optional[str] = None) -> None:
        super().__init__()
        self.path = path
        if path is None:
            self._stream: BinaryIO = sys.stdout.buffer
            self._owns_stream = False
        else:
            try:
                self._stream = open(path, "wb")
            except OSError as exc:
                raise OSError(f"Error opening output file {path}: {exc.strerror}") from exc
            self._owns_stream = True

    def _write_bytes(self, view: memoryview) -> int:
        written = self._stream.write(view)
        return view.nbytes if written is None else written

    def _finish(self) -> None:
        if self._owns_stream:
            self._stream.close()
        else:
            self._stream.flush()


class WavFileWriter(FileWriter):
    """Writes stereo PCM (cs16 or cu8) I/Q data in a WAV or RF64 container.

    The header is written with placeholder sizes and completed on close.
    """

    def __init__(self, path: str, sample_rate: int, sample_format: SampleFormat, rf64: bool = False) -> None:
        super().__init__()
        if sample_format not in _WAV_BITS:
            raise ConfigError(
                f"Cannot create WAV file for invalid sample type '{sample_format.value}'."
            )
        if sample_rate < 1:
            raise ConfigError(f"Unsupported WAV sample rate {sample_rate}.")
        self.path = path
        self.sample_rate = int(sample_rate)
        self.sample_format = sample_format
        self.rf64 = rf64
        self._bits = _WAV_BITS[sample_format]
        self._block_align = 2 * self._bits // 8
        try:
            self._file = open(path, "wb")
        except OSError as exc:
            raise OSError(f"Error opening output WAV file {path}: {exc.strerror}") from exc
        self._file.write(self._header(0))

    def _fmt_chunk(self) -> bytes:
        return b"fmt " + struct.pack(
            "<IHHIIHH",
            16,
            1,
            2,
            self.sample_rate,
            self.sample_rate * self._block_align,
            self._block_align,
            self._bits,
        )

    def _header(self, data_size: int) -> bytes:
        fmt = self._fmt_chunk()
        if self.rf64:
            riff_size = 4 + (8 + 28) + len(fmt) + 8 + data_size
            ds64 = b"ds64" + struct.pack(
                "<IQQQI", 28, riff_size, data_size, data_size // self._block_align, 0
            )
            return (
                b"RF64" + struct.pack("<I", 0xFFFFFFFF) + b"WAVE"
                + ds64 + fmt + b"data" + struct.pack("<I", 0xFFFFFFFF)
            )
        riff_size = 4 + len(fmt) + 8 + data_size
        return b"RIFF" + struct.pack("<I", riff_size) + b"WAVE" + fmt + b"data" + struct.pack("<I", data_size)

    def _write_bytes(self, view: memoryview) -> int:
        if not self.rf64 and self.total_bytes_written + view.nbytes > _WAV_MAX_DATA:
            raise OSError("WAV file size limit exceeded; use the wav-rf64 container.")
        self._file.write(view)
        return view.nbytes

    def _finish(self) -> None:
        try:
            self._file.seek(0)
            self._file.write(self._header(self.total_bytes_written))
        finally:
            self._file.close()


def _prompt_for_overwrite(path: str) -> bool:
    sys.stderr.write(f"\nOutput file {path} exists.\nOverwrite? (y/n): ")
    sys.stderr.flush()
    answer = sys.stdin.readline().strip().lower()
    if not answer.startswith("y"):
        sys.stderr.write("\nOperation cancelled by user.\n")
        return False
    return True


def open_writer(
    config: AppConfig, confirm_overwrite: Optional[Callable[[str], bool]] = None
) -> FileWriter:
    """Create the writer that ``config`` asks for.

    When the output file already exists, ``confirm_overwrite(path)`` decides
    whether to replace it (by default the user is asked on the terminal);
    declining raises FileExistsError.
    """
    if config.output_type is OutputType.RAW and config.output_to_stdout:
        return RawFileWriter(None)

    path = config.output_filename
    if not path:
        raise ConfigError("Must specify an output destination: --stdout or --file <file>.")

    if config.output_type in (OutputType.WAV, OutputType.WAV_RF64):
        if config.output_format not in _WAV_BITS:
            raise ConfigError(
                f"Internal Error: Cannot create WAV file for invalid sample type "
                f"'{config.sample_type_name}'."
            )
        if int(config.target_rate) < 1:
            raise ConfigError(f"Unsupported WAV sample rate {int(config.target_rate)}.")
    elif config.output_type is not OutputType.RAW:
        raise ConfigError("Internal Error: Unknown output type specified.")

    if os.path.exists(path) and not os.path.isdir(path):
        confirm = confirm_overwrite or _prompt_for_overwrite
        if not confirm(path):
            raise FileExistsError(f"Output file {path} exists and was not overwritten.")

    if config.output_type is OutputType.RAW:
        return RawFileWriter(path)
    return WavFileWriter(
        path,
        int(config.target_rate),
        config.output_format,
        rf64=config.output_type is OutputType.WAV_RF64,
    )