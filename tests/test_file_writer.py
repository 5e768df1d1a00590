import struct
import wave

import pytest

from iqresample.config import AppConfig, ConfigError, OutputType, SampleFormat
from iqresample.file_writer import RawFileWriter, WavFileWriter, open_writer


def _config(path, output_type, fmt=SampleFormat.CS16, rate=48000.0):
    return AppConfig(
        output_filename=str(path),
        output_type=output_type,
        output_format=fmt,
        sample_type_name=fmt.value,
        target_rate=rate,
    )


def test_raw_writer_writes_bytes(tmp_path):
    path = tmp_path / "out.raw"
    payload = bytes(range(64))
    with RawFileWriter(str(path)) as writer:
        assert writer.write(payload) == len(payload)
        assert writer.write(payload[:10]) == 10
    assert writer.total_bytes_written == len(payload) + 10
    assert path.read_bytes() == payload + payload[:10]


def test_raw_writer_to_stdout(capsysbinary):
    writer = RawFileWriter(None)
    writer.write(b"\x01\x02\x03\x04")
    writer.close()
    assert capsysbinary.readouterr().out == b"\x01\x02\x03\x04"


def test_write_after_close_raises(tmp_path):
    writer = RawFileWriter(str(tmp_path / "x.raw"))
    writer.close()
    writer.close()
    with pytest.raises(ValueError):
        writer.write(b"ab")


def test_wav_round_trip(tmp_path):
    path = tmp_path / "out.wav"
    frames = b"".join(struct.pack("<hh", i, -i) for i in range(100))
    with open_writer(_config(path, OutputType.WAV)) as writer:
        writer.write(frames)
    with wave.open(str(path), "rb") as wav:
        assert wav.getnchannels() == 2
        assert wav.getsampwidth() == 2
        assert wav.getframerate() == 48000
        assert wav.getnframes() == 100
        assert wav.readframes(100) == frames


def test_wav_cu8_round_trip(tmp_path):
    path = tmp_path / "out8.wav"
    frames = bytes(range(0, 200))
    with WavFileWriter(str(path), 8000, SampleFormat.CU8) as writer:
        writer.write(frames)
    with wave.open(str(path), "rb") as wav:
        assert wav.getsampwidth() == 1
        assert wav.getnframes() == len(frames) // 2
        assert wav.readframes(wav.getnframes()) == frames


def test_rf64_header(tmp_path):
    path = tmp_path / "out.rf64"
    data = b"\x00\x01" * 40
    with open_writer(_config(path, OutputType.WAV_RF64)) as writer:
        writer.write(data)
    content = path.read_bytes()
    assert content[:4] == b"RF64"
    assert content[8:12] == b"WAVE"
    assert content[12:16] == b"ds64"
    riff_size, data_size, sample_count = struct.unpack("<QQQ", content[20:44])
    assert riff_size == len(content) - 8
    assert data_size == len(data)
    assert sample_count == len(data) // 4
    assert content.endswith(data)


def test_wav_rejects_invalid_format(tmp_path):
    with pytest.raises(ConfigError):
        open_writer(_config(tmp_path / "bad.wav", OutputType.WAV, fmt=SampleFormat.CS8))
    assert not (tmp_path / "bad.wav").exists()


def test_existing_file_declined(tmp_path):
    path = tmp_path / "exists.raw"
    path.write_bytes(b"keep")
    asked = []

    def decline(p):
        asked.append(p)
        return False

    with pytest.raises(FileExistsError):
        open_writer(_config(path, OutputType.RAW), confirm_overwrite=decline)
    assert asked == [str(path)]
    assert path.read_bytes() == b"keep"


def test_existing_file_overwritten_when_confirmed(tmp_path):
    path = tmp_path / "exists.raw"
    path.write_bytes(b"old contents")
    with open_writer(_config(path, OutputType.RAW), confirm_overwrite=lambda p: True) as writer:
        writer.write(b"new")
    assert path.read_bytes() == b"new"


def test_stdout_raw_selected(capsysbinary):
    config = AppConfig(output_to_stdout=True, output_type=OutputType.RAW, output_format=SampleFormat.CU8)
    writer = open_writer(config)
    assert isinstance(writer, RawFileWriter)
    writer.write(b"iq")
    writer.close()
    assert capsysbinary.readouterr().out == b"iq"