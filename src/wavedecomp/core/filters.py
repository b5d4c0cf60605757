"""Frequency-selective filters built on the spectral transform.

:func:`filter_by_frequency` isolates the component of a composite signal near
one frequency factor.  By the convolution theorem, convolving the signal with
a pure reference tone in the time domain equals multiplying the two spectra
elementwise; the product (the *convolution spectrum*) peaks at the bin of the
reference frequency and its modulus there is the presence amplitude of that
frequency in the analysed segment.

Reference tones are pure functions of ``(frequency, length)`` so their spectra,
and the complex quadrature tones used by the window prober, are memoised in
a :class:`ReferenceToneCache` that can be shared between windows,
frequencies and worker threads.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from .spectral import forward_transform, frequency_to_index, inverse_transform

CacheKey = Tuple[float, int]


class CacheConflictError(RuntimeError):
    """Raised when a cached reference spectrum is inconsistent with its key."""

    def __init__(self, message: str, *, key: CacheKey):
        self.key = key
        super().__init__(f"{key}: {message}")


def reference_tone(frequency: float, length: int) -> np.ndarray:
    """Return ``length`` samples of the unit-amplitude tone ``sin(n / frequency)``."""

    if length < 0:
        raise ValueError("length must be non-negative")
    return np.sin(np.arange(length, dtype=float) / float(frequency))


def quadrature_tone(frequency: float, length: int) -> np.ndarray:
    """Return ``exp(1j * n / frequency)``; its imaginary part is :func:`reference_tone`."""

    if length < 0:
        raise ValueError("length must be non-negative")
    return np.exp(1j * np.arange(length, dtype=float) / float(frequency))


class ReferenceToneCache:
    """Thread-safe memo of reference spectra and quadrature tones.

    Both stores are keyed by ``(frequency, length)``.  Entries are computed
    outside the lock and published with ``dict.setdefault`` so concurrent
    callers agree on the first stored value.  Stored arrays are read-only.
    """

    def __init__(self) -> None:
        self._spectra: Dict[CacheKey, np.ndarray] = {}
        self._tones: Dict[CacheKey, np.ndarray] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._spectra) + len(self._tones)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._spectra or key in self._tones

    @staticmethod
    def key(frequency: float, length: int) -> CacheKey:
        return (float(frequency), int(length))

    def _insert(self, store: Dict[CacheKey, np.ndarray], key: CacheKey, value: np.ndarray) -> np.ndarray:
        value = np.array(value)
        value.setflags(write=False)
        with self._lock:
            stored = store.setdefault(key, value)
        if stored is not value and (stored.shape != value.shape or not np.allclose(stored, value)):
            raise CacheConflictError("a different entry is already cached", key=key)
        return stored

    def _get(self, store: Dict[CacheKey, np.ndarray], key: CacheKey, compute) -> np.ndarray:
        with self._lock:
            stored = store.get(key)
        if stored is None:
            stored = self._insert(store, key, compute())
        if stored.shape != (key[1],):
            raise CacheConflictError(f"cached entry has shape {stored.shape}, expected ({key[1]},)", key=key)
        return stored

    def insert(self, frequency: float, length: int, spectrum: np.ndarray) -> np.ndarray:
        """Store a reference spectrum; the first stored value wins.

        Raises
        ------
        CacheConflictError
            If a different spectrum is already stored under the same key.
        """
        return self._insert(self._spectra, self.key(frequency, length), spectrum)

    def get(self, frequency: float, length: int, *, method: str = "fft") -> np.ndarray:
        """Return the spectrum of ``reference_tone(frequency, length)``."""
        return self._get(
            self._spectra,
            self.key(frequency, length),
            lambda: forward_transform(reference_tone(frequency, length), method=method),
        )

    def insert_tone(self, frequency: float, length: int, tone: np.ndarray) -> np.ndarray:
        """Store a quadrature tone; same conflict rules as :meth:`insert`."""
        return self._insert(self._tones, self.key(frequency, length), tone)

    def tone(self, frequency: float, length: int) -> np.ndarray:
        """Return ``quadrature_tone(frequency, length)``."""
        return self._get(self._tones, self.key(frequency, length), lambda: quadrature_tone(frequency, length))


@dataclass(frozen=True)
class FilteredSignal:
    """Output of :func:`filter_by_frequency`.

    Attributes
    ----------
    frequency:
        Frequency factor of the reference tone.
    spectrum:
        Convolution spectrum (signal spectrum times reference spectrum).
    bin_index:
        Bin corresponding to ``frequency``.
    method:
        Transform method used, reused for the inverse transform.
    """

    frequency: float
    spectrum: np.ndarray
    bin_index: int
    method: str = "fft"

    @property
    def amplitude(self) -> float:
        """Modulus of the convolution spectrum at the target bin."""
        if self.spectrum.size == 0:
            return 0.0
        return float(np.abs(self.spectrum[self.bin_index]))

    @property
    def samples(self) -> np.ndarray:
        """Filtered time-domain signal."""
        return inverse_transform(self.spectrum, method=self.method)


def filter_by_frequency(
    signal: Sequence[float],
    frequency: float,
    *,
    cache: Optional[ReferenceToneCache] = None,
    method: str = "fft",
) -> FilteredSignal:
    """Isolate the component of ``signal`` near ``frequency``.

    Parameters
    ----------
    signal:
        Composite sample sequence of length ``N``.
    frequency:
        Frequency factor of the component to isolate.
    cache:
        Optional reference-tone cache.  Without one the reference spectrum is
        computed on every call.
    method:
        Spectral transform method, ``"fft"`` or ``"direct"``.

    Raises
    ------
    CacheConflictError
        If ``cache`` holds an inconsistent entry for ``(frequency, N)``.
    """

    x = np.asarray(signal, dtype=float)
    n = x.size
    if n == 0:
        return FilteredSignal(frequency=frequency, spectrum=np.zeros(0, dtype=complex), bin_index=0, method=method)

    if cache is None:
        reference = forward_transform(reference_tone(frequency, n), method=method)
    else:
        reference = cache.get(frequency, n, method=method)

    convolution = forward_transform(x, method=method) * reference
    return FilteredSignal(
        frequency=frequency,
        spectrum=convolution,
        bin_index=frequency_to_index(frequency, n),
        method=method,
    )


def _cutoff_mask(frequency: float, length: int, *, low_pass: bool) -> np.ndarray:
    cutoff = frequency_to_index(frequency, length)
    k = np.arange(length)
    if low_pass:
        keep = (k <= cutoff) | (k >= length - cutoff)
    else:
        keep = (k >= cutoff) & (k <= length - cutoff)
    return keep.astype(float)


def low_pass(signal: Sequence[float], frequency: float, *, method: str = "fft") -> np.ndarray:
    """Remove every harmonic above the bin of ``frequency`` (brick-wall mask)."""

    x = np.asarray(signal, dtype=float)
    if x.size == 0:
        return x.copy()
    spectrum = forward_transform(x, method=method) * _cutoff_mask(frequency, x.size, low_pass=True)
    return inverse_transform(spectrum, method=method)


def high_pass(signal: Sequence[float], frequency: float, *, method: str = "fft") -> np.ndarray:
    """Remove every harmonic below the bin of ``frequency`` (brick-wall mask)."""

    x = np.asarray(signal, dtype=float)
    if x.size == 0:
        return x.copy()
    spectrum = forward_transform(x, method=method) * _cutoff_mask(frequency, x.size, low_pass=False)
    return inverse_transform(spectrum, method=method)
