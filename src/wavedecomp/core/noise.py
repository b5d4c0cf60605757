"""Noise-floor estimation utilities."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .spectral import forward_transform, magnitude_spectrum


def noise_sigma(signal: Sequence[float], *, method: str = "fft") -> float:
    """Median-based estimate of the standard deviation of white noise in ``signal``.

    For white Gaussian noise of deviation ``sigma`` the normalised spectrum
    magnitudes are Rayleigh distributed with median ``sigma * sqrt(ln 2 / N)``.
    The median over the positive-frequency bins is insensitive to the few bins
    occupied by tones, so the estimate tracks the noise rather than the
    components.  DC is excluded.
    """
    x = np.asarray(signal, dtype=float).reshape(-1)
    n = x.size
    if n < 2:
        return 0.0
    magnitudes = magnitude_spectrum(forward_transform(x, method=method))[1 : n // 2 + 1]
    return float(np.median(magnitudes) * math.sqrt(n / math.log(2.0)))


def presence_noise_scale(sigma: float, weights: np.ndarray) -> float:
    """RMS presence that white noise of deviation ``sigma`` produces under ``weights``.

    Presence is ``2 |sum(w * x * exp(-i n / f))| / sum(w)``, so noise gives a
    Rayleigh variable of scale ``2 * sigma * sqrt(sum(w**2)) / sum(w)``; it
    exceeds ``k`` times that scale with probability ``exp(-k**2)``.
    """
    w = np.asarray(weights, dtype=float)
    total = float(np.sum(w))
    if total <= 0.0:
        return 0.0
    return 2.0 * float(sigma) * math.sqrt(float(np.sum(w * w))) / total
