"""Diagnostic tables describing a composite signal and its components."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from ..core.filters import ReferenceToneCache, filter_by_frequency
from ..core.spectral import (
    forward_transform,
    frequency_to_index,
    inverse_transform,
    isolate_harmonic,
    magnitude_spectrum,
)
from ..generate import SineSignal, base_signal_values
from .tables import ColumnTable


def spectrum_table(signal: Sequence[float], *, method: str = "fft") -> ColumnTable:
    """Signal, amplitude spectrum and the signal repaired from its spectrum."""

    x = np.asarray(signal, dtype=float)
    spectrum = forward_transform(x, method=method)
    return ColumnTable(
        ["original", "spectrum", "repaired"],
        [x, magnitude_spectrum(spectrum), inverse_transform(spectrum, method=method)],
    )


def harmonics_table(
    signal: Sequence[float],
    frequencies: Sequence[float],
    *,
    method: str = "fft",
) -> ColumnTable:
    """One column per frequency with the harmonic reconstructed from its bin."""

    x = np.asarray(signal, dtype=float)
    spectrum = forward_transform(x, method=method)
    titles = []
    columns = []
    for index, frequency in enumerate(frequencies, start=1):
        titles.append(f"harmonic #{index}")
        if x.size == 0:
            columns.append(np.zeros(0))
            continue
        columns.append(isolate_harmonic(spectrum, frequency_to_index(frequency, x.size)))
    return ColumnTable(titles, columns, rows=x.size)


def component_table(
    signal: Sequence[float],
    base_signal: SineSignal,
    *,
    cache: Optional[ReferenceToneCache] = None,
    method: str = "fft",
) -> ColumnTable:
    """Compare a known base signal with what the frequency filter extracts.

    Columns: ``on/off`` (``1.0`` where the base signal is enabled),
    ``original`` (the base signal's samples), ``spectrum`` (amplitude of the
    convolution spectrum) and ``repaired`` (the filtered signal).
    """

    x = np.asarray(signal, dtype=float)
    n = x.size
    enabled = np.zeros(n, dtype=float)
    m = min(n, len(base_signal))
    enabled[:m] = base_signal.enabled[:m].astype(float)

    filtered = filter_by_frequency(x, base_signal.freq_factor, cache=cache, method=method)
    return ColumnTable(
        ["on/off", "original", "spectrum", "repaired"],
        [
            enabled,
            base_signal_values(base_signal, n),
            magnitude_spectrum(filtered.spectrum),
            filtered.samples,
        ],
        rows=n,
    )
