"""First-order DC-blocking filter for complex baseband samples."""

from __future__ import annotations

import logging
import math

import numpy as np

logger = logging.getLogger(__name__)


class DCBlocker:
    """High-pass filter H(z) = (1 - z^-1) / (1 - (1 - alpha) z^-1).

    ``alpha = 2 * pi * cutoff_hz / sample_rate``. State carries over between
    calls to :meth:`process`, so a stream may be fed in blocks.
    """

    def __init__(self, sample_rate: float, cutoff_hz: float) -> None:
        if sample_rate <= 0:
            raise ValueError(f"DC Block: sample rate must be positive, got {sample_rate}")
        alpha = float(np.float32(2.0 * math.pi * cutoff_hz / sample_rate))
        if alpha <= 0.0:
            raise ValueError(
                f"DC Block: Calculated normalized alpha ({alpha:.6f}) is invalid. "
                "Ensure the cutoff frequency is > 0."
            )
        if alpha > 1.0:
            logger.warning(
                "DC Block: Calculated normalized alpha (%.6f) is very large. "
                "Consider reducing the cutoff frequency.",
                alpha,
            )
        self.alpha = alpha
        self._pole = 1.0 - alpha
        self._prev_input = 0j
        self._prev_output = 0j
        logger.info("DC Block enabled")
        logger.debug("DC Block: Initialized with normalized_alpha = %.6f", alpha)

    def process(self, samples) -> np.ndarray:
        """Filter a block of complex samples and return the result as complex64."""
        block = np.asarray(samples, dtype=np.complex64).ravel()
        prev_x = self._prev_input
        prev_y = self._prev_output
        pole = self._pole
        filtered = []
        for value in block.tolist():
            prev_y = value - prev_x + pole * prev_y
            prev_x = value
            filtered.append(prev_y)
        self._prev_input = prev_x
        self._prev_output = prev_y
        return np.asarray(filtered, dtype=np.complex64)

    def reset(self) -> None:
        """Clear the filter state, e.g. after a stream discontinuity."""
        self._prev_input = 0j
        self._prev_output = 0j