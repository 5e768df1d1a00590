import pytest

from iqresample.config import ConfigError
from iqresample.hackrf import (
    HACKRF_DEFAULT_LNA_GAIN,
    HACKRF_DEFAULT_SAMPLE_RATE,
    HACKRF_DEFAULT_VGA_GAIN,
    HackRfOptions,
    hackrf_cli_options,
    split_transfer,
)
from iqresample.optparser import ArgumentParser


def test_defaults_leave_nothing_provided():
    opts = HackRfOptions()
    opts.validate()
    assert not opts.lna_gain_provided
    assert not opts.vga_gain_provided
    assert not opts.sample_rate_provided
    assert opts.lna_gain == HACKRF_DEFAULT_LNA_GAIN
    assert opts.vga_gain == HACKRF_DEFAULT_VGA_GAIN
    assert opts.effective_sample_rate == HACKRF_DEFAULT_SAMPLE_RATE


@pytest.mark.parametrize("gain", [0, 8, 24, 40])
def test_valid_lna_gain(gain):
    opts = HackRfOptions(lna_gain_arg=gain)
    opts.validate()
    assert opts.lna_gain == gain
    assert opts.lna_gain_provided == (gain != HACKRF_DEFAULT_LNA_GAIN)


@pytest.mark.parametrize("gain", [-8, 20, 48, 7])
def test_invalid_lna_gain(gain):
    with pytest.raises(ConfigError, match="LNA gain"):
        HackRfOptions(lna_gain_arg=gain).validate()


@pytest.mark.parametrize("gain", [2, 30, 62])
def test_valid_vga_gain(gain):
    opts = HackRfOptions(vga_gain_arg=gain)
    opts.validate()
    assert opts.vga_gain == gain
    assert opts.vga_gain_provided


@pytest.mark.parametrize("gain", [-2, 63, 64, 1])
def test_invalid_vga_gain(gain):
    with pytest.raises(ConfigError, match="VGA gain"):
        HackRfOptions(vga_gain_arg=gain).validate()


def test_sample_rate_in_range():
    opts = HackRfOptions(sample_rate_hz_arg=10e6)
    opts.validate()
    assert opts.sample_rate_provided
    assert opts.effective_sample_rate == 10e6


@pytest.mark.parametrize("rate", [1e6, 25e6])
def test_sample_rate_out_of_range(rate):
    with pytest.raises(ConfigError, match="sample rate"):
        HackRfOptions(sample_rate_hz_arg=rate).validate()


def test_summary():
    opts = HackRfOptions(lna_gain_arg=24, vga_gain_arg=10, amp_enable=True)
    opts.validate()
    items = dict(opts.summary(8000000, 97.3e6, False))
    assert items["Input Source"] == "HackRF One"
    assert items["Input Format"] == "8-bit Signed Complex (cs8)"
    assert items["Input Rate"] == "8000000 Hz"
    assert items["RF Frequency"] == "97300000 Hz"
    assert items["Gain"] == "LNA: 24 dB, VGA: 10 dB"
    assert items["RF Amp"] == "Enabled"
    assert items["Bias-T"] == "Disabled"


def test_cli_options_parse():
    parser = ArgumentParser(hackrf_cli_options())
    result = parser.parse(["--hackrf-lna-gain=32", "--hackrf-amp-enable", "--hackrf-sample-rate", "4e6"])
    assert result.values["hackrf_lna_gain_arg"] == 32
    assert result.values["hackrf_vga_gain_arg"] == HACKRF_DEFAULT_VGA_GAIN
    assert result.values["hackrf_amp_enable"] == 1
    assert result.values["hackrf_sample_rate_hz_arg"] == 4e6


def test_cli_option_defaults():
    result = ArgumentParser(hackrf_cli_options()).parse([])
    assert result.values["hackrf_lna_gain_arg"] == HACKRF_DEFAULT_LNA_GAIN
    assert result.values["hackrf_sample_rate_hz_arg"] == 0.0


def test_split_transfer_reassembles():
    data = bytes(range(256)) * 3
    chunks = list(split_transfer(data, 2, 100))
    assert b"".join(c for c, _ in chunks) == data
    assert all(len(c) <= 200 for c, _ in chunks)
    assert sum(n for _, n in chunks) == len(data) // 2


def test_split_transfer_small_and_empty():
    assert list(split_transfer(b"\x01\x02\x03\x04", 2, 10)) == [(b"\x01\x02\x03\x04", 2)]
    assert list(split_transfer(b"", 2, 10)) == []


def test_split_transfer_bad_arguments():
    with pytest.raises(ValueError):
        list(split_transfer(b"ab", 0, 10))
    with pytest.raises(ValueError):
        list(split_transfer(b"ab", 2, 0))