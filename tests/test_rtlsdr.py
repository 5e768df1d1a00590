import pytest

from iqresample.config import ConfigError
from iqresample.optparser import ArgumentParser, OptionType
from iqresample.rtlsdr import (
    RTLSDR_DEFAULT_SAMPLE_RATE,
    RtlSdrOptions,
    RtlSdrTuner,
    chunk_transfer,
    rtlsdr_cli_options,
    tuner_name,
)


def test_validate_defaults_provide_nothing():
    opts = RtlSdrOptions()
    opts.validate()
    assert (
        opts.gain_provided,
        opts.sample_rate_provided,
        opts.ppm_provided,
        opts.direct_sampling_provided,
    ) == (False, False, False, False)


def test_validate_gain_in_tenths():
    opts = RtlSdrOptions(gain_db_arg=49.6)
    opts.validate()
    assert opts.gain_provided
    assert opts.gain == 496


def test_validate_sample_rate_and_ppm():
    opts = RtlSdrOptions(sample_rate_hz=1.024e6, ppm=-3)
    opts.validate()
    assert opts.sample_rate_provided
    assert opts.ppm_provided


@pytest.mark.parametrize("mode", [1, 2])
def test_validate_direct_sampling_valid(mode):
    opts = RtlSdrOptions(direct_sampling_mode=mode)
    opts.validate()
    assert opts.direct_sampling_provided


@pytest.mark.parametrize("mode", [-1, 3])
def test_validate_direct_sampling_invalid(mode):
    with pytest.raises(ConfigError, match="rtlsdr-direct-sampling"):
        RtlSdrOptions(direct_sampling_mode=mode).validate()


def test_summary_automatic_gain():
    opts = RtlSdrOptions()
    opts.validate()
    items = dict(opts.summary("Maker Dongle (S/N: 00000001)", 2400000, 97.3e6, False))
    assert items["Input Source"] == "Maker Dongle (S/N: 00000001)"
    assert items["Input Format"] == "8-bit Unsigned Complex (cu8)"
    assert items["Gain"] == "Automatic (AGC)"
    assert items["Bias-T"] == "Disabled"
    assert "PPM Correction" not in items


def test_summary_manual_gain_and_ppm():
    opts = RtlSdrOptions(gain_db_arg=49.6, ppm=7)
    opts.validate()
    items = dict(opts.summary("dev", 2400000, 100e6, True))
    assert items["Gain"] == "49.6 dB (Manual)"
    assert items["PPM Correction"] == "7"
    assert items["Bias-T"] == "Enabled"
    assert items["Input Rate"] == "2400000 Hz"


def test_tuner_names():
    assert tuner_name(RtlSdrTuner.R820T) == "Rafael Micro R820T"
    assert tuner_name(RtlSdrTuner.E4000) == "Elonics E4000"
    assert tuner_name(RtlSdrTuner.UNKNOWN) == "Unknown Tuner"
    assert tuner_name(99) == "Unknown Tuner"


def test_chunk_transfer_truncates():
    data = bytes(range(100))
    kept, frames = chunk_transfer(data, 2, 10)
    assert kept == data[:20]
    assert frames == 10


def test_chunk_transfer_keeps_small_transfer():
    data = bytes(range(16))
    kept, frames = chunk_transfer(data, 2, 100)
    assert kept == data
    assert frames * 2 == len(data)


def test_chunk_transfer_rejects_bad_frame_size():
    with pytest.raises(ValueError):
        chunk_transfer(b"\x00\x00", 0, 10)


def test_cli_options_parse():
    options = rtlsdr_cli_options()
    assert options[0].type is OptionType.GROUP
    assert options[0].help == "RTL-SDR-Specific Options"
    parser = ArgumentParser(options)
    result = parser.parse(["--rtlsdr-gain", "28.0", "--rtlsdr-ppm=5", "--rtlsdr-device-idx", "1"])
    assert result.values["rtlsdr_gain_db_arg"] == 28.0
    assert result.values["rtlsdr_ppm"] == 5
    assert result.values["rtlsdr_device_index"] == 1
    assert result.values["rtlsdr_sample_rate_hz"] == RTLSDR_DEFAULT_SAMPLE_RATE