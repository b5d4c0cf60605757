"""Discrete Fourier transforms between sample sequences and spectra.

All spectra use the ``FFT/N`` normalisation

.. math::

   X_k = \\frac{1}{N} \\sum_{n=0}^{N-1} x_n e^{-2\\pi i k n / N}

so that the inverse transform is a plain sum of the single-bin harmonics
``Re(X_k e^{2 pi i k n / N})``.  Two evaluation strategies are available:
``"direct"`` builds the O(N^2) DFT matrix, ``"fft"`` evaluates the identical
sum with :mod:`numpy.fft`.

Frequencies are expressed as *frequency factors*: a base signal with factor
``f`` is ``sin(n / f + phase)``, i.e. it advances ``1/f`` radians per sample.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

METHODS = ("fft", "direct")


def _round_half_up(value: float) -> int:
    """Round half away from zero for non-negative ``value``."""
    return int(math.floor(value + 0.5))


def _check_method(method: str) -> None:
    if method not in METHODS:
        raise ValueError(f"unknown transform method: {method!r}, expected one of {METHODS}")


def _dft_matrix(n: int, sign: float) -> np.ndarray:
    idx = np.arange(n)
    # reduce k*n modulo N before scaling to keep the phase argument small
    phase = np.outer(idx, idx) % n
    return np.exp(sign * 2j * np.pi * phase / n)


def forward_transform(samples: Sequence[float], *, method: str = "fft") -> np.ndarray:
    """Return the normalised spectrum of ``samples``.

    Parameters
    ----------
    samples:
        Real sample sequence of length ``N``.
    method:
        ``"fft"`` (default) or ``"direct"``.

    Returns
    -------
    numpy.ndarray
        Complex spectrum of length ``N``; empty input gives an empty spectrum.
    """
    _check_method(method)
    x = np.asarray(samples, dtype=float)
    if x.ndim != 1:
        raise ValueError(f"samples must be 1D, got shape {x.shape}")
    n = x.size
    if n == 0:
        return np.zeros(0, dtype=complex)
    if method == "direct":
        return _dft_matrix(n, -1.0) @ x / float(n)
    return np.fft.fft(x) / float(n)


def inverse_transform(spectrum: Sequence[complex], *, method: str = "fft") -> np.ndarray:
    """Reconstruct the real sample sequence from a normalised spectrum.

    The result equals the sum of :func:`inverse_transform_single` over all bins.
    """
    _check_method(method)
    X = np.asarray(spectrum, dtype=complex)
    if X.ndim != 1:
        raise ValueError(f"spectrum must be 1D, got shape {X.shape}")
    n = X.size
    if n == 0:
        return np.zeros(0, dtype=float)
    if method == "direct":
        return np.real(_dft_matrix(n, 1.0) @ X)
    return np.real(np.fft.ifft(X) * n)


def inverse_transform_single(spectrum: Sequence[complex], k: int) -> np.ndarray:
    """Return the harmonic carried by bin ``k`` alone: ``Re(X_k e^{2 pi i n k / N})``."""
    X = np.asarray(spectrum, dtype=complex)
    n = X.size
    if not (0 <= k < n):
        raise IndexError(f"bin index {k} out of range for spectrum of length {n}")
    idx = np.arange(n)
    return np.real(X[k] * np.exp(2j * np.pi * ((idx * k) % n) / n))


def isolate_harmonic(spectrum: Sequence[complex], k: int) -> np.ndarray:
    """Reconstruct the real sinusoid at bin ``k``.

    A real sinusoid occupies bin ``k`` and its mirror ``N - k``; both
    single-bin contributions are summed.
    """
    X = np.asarray(spectrum, dtype=complex)
    n = X.size
    out = inverse_transform_single(X, k)
    mirror = (n - k) % n
    if mirror != k:
        out = out + inverse_transform_single(X, mirror)
    return out


def magnitude_spectrum(spectrum: Sequence[complex]) -> np.ndarray:
    """Elementwise modulus (amplitude response) of ``spectrum``."""
    return np.abs(np.asarray(spectrum, dtype=complex))


def phase_spectrum(spectrum: Sequence[complex]) -> np.ndarray:
    """Elementwise argument (phase response) of ``spectrum``."""
    return np.angle(np.asarray(spectrum, dtype=complex))


def frequency_to_index(frequency: float, length: int) -> int:
    """Map a frequency factor to its bin in a spectrum of ``length`` bins.

    The result is ``round(length / (2 pi |frequency|))`` clipped to the valid
    bin range.
    """
    if frequency == 0 or not math.isfinite(frequency):
        raise ValueError(f"frequency factor must be finite and non-zero, got {frequency}")
    if length <= 0:
        raise ValueError("length must be positive")
    k = _round_half_up(length / (2.0 * math.pi * abs(frequency)))
    return min(max(k, 0), length - 1)


def frequency_to_period(frequency: float) -> int:
    """Return the period, in samples, of a sinusoid with the given frequency factor."""
    if frequency == 0 or not math.isfinite(frequency):
        raise ValueError(f"frequency factor must be finite and non-zero, got {frequency}")
    return max(1, _round_half_up(2.0 * math.pi * abs(frequency)))
