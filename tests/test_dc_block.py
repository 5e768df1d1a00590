import logging

import numpy as np
import pytest

from iqresample.dc_block import DCBlocker


def test_constant_offset_is_removed():
    blocker = DCBlocker(1000.0, 10.0)
    samples = np.full(2000, 0.5 + 0.25j, dtype=np.complex64)
    out = blocker.process(samples)
    assert out.shape == samples.shape
    assert out.dtype == np.complex64
    assert abs(out[0] - samples[0]) < 1e-6
    assert abs(out[-1]) < 1e-3


def test_high_frequency_passes():
    blocker = DCBlocker(1000.0, 1.0)
    samples = np.array([1.0, -1.0] * 500, dtype=np.complex64)
    out = blocker.process(samples)
    assert abs(out[-1]) > 0.9


def test_block_processing_matches_whole():
    rng = np.random.default_rng(1)
    samples = (rng.standard_normal(500) + 1j * rng.standard_normal(500)).astype(np.complex64) + 0.3
    whole = DCBlocker(48000.0, 100.0).process(samples)
    split_blocker = DCBlocker(48000.0, 100.0)
    parts = np.concatenate([split_blocker.process(samples[:123]), split_blocker.process(samples[123:])])
    assert np.allclose(whole, parts, atol=1e-5)


def test_reset_restores_initial_state():
    samples = np.linspace(0, 1, 50).astype(np.complex64) + 0.5j
    blocker = DCBlocker(8000.0, 50.0)
    first = blocker.process(samples)
    blocker.process(samples)
    blocker.reset()
    again = blocker.process(samples)
    assert np.allclose(first, again)


def test_empty_input():
    out = DCBlocker(1000.0, 10.0).process([])
    assert len(out) == 0


def test_alpha_relation_to_rate():
    low = DCBlocker(1000.0, 10.0)
    high = DCBlocker(2000.0, 10.0)
    assert low.alpha == pytest.approx(2 * high.alpha, rel=1e-6)


@pytest.mark.parametrize("rate,cutoff", [(1000.0, 0.0), (1000.0, -5.0), (0.0, 10.0), (-1.0, 10.0)])
def test_invalid_parameters(rate, cutoff):
    with pytest.raises(ValueError):
        DCBlocker(rate, cutoff)


def test_large_alpha_warns(caplog):
    with caplog.at_level(logging.WARNING):
        blocker = DCBlocker(100.0, 50.0)
    assert blocker.alpha > 1.0
    assert "very large" in caplog.text