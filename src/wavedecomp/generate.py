"""Synthetic composite signals built from switched sinusoids.

A *base signal* is a sinusoid ``volume[n] * sin(n / freq_factor + phase)``
that is switched on and off per sample.  :func:`generate` sums base signals
into a composite signal and optionally adds uniform noise proportional to the
composite's peak amplitude.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .core.spectral import frequency_to_period

logger = logging.getLogger(__name__)

VOLUME_MIN = 0.3
VOLUME_MAX = 3.0


@dataclass(frozen=True)
class SineOption:
    """Frequency factor and start phase of a base sinusoid."""

    freq_factor: float
    start_phase: float = 0.0


@dataclass(frozen=True)
class SineSignal:
    """A base sinusoid together with its per-sample behaviour.

    ``volume`` and ``enabled`` have one entry per sample; the length of the
    arrays is the length of the behaviour.  Enabled samples must use a volume
    inside ``[VOLUME_MIN, VOLUME_MAX]``.
    """

    option: SineOption
    volume: np.ndarray = field(repr=False)
    enabled: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        volume = np.asarray(self.volume, dtype=float).reshape(-1)
        enabled = np.asarray(self.enabled, dtype=bool).reshape(-1)
        if volume.shape != enabled.shape:
            raise ValueError("volume and enabled must have the same length")
        active = volume[enabled]
        if active.size and (active.min() < VOLUME_MIN or active.max() > VOLUME_MAX):
            raise ValueError(f"enabled volumes must lie in [{VOLUME_MIN}, {VOLUME_MAX}]")
        object.__setattr__(self, "volume", volume)
        object.__setattr__(self, "enabled", enabled)

    def __len__(self) -> int:
        return int(self.volume.size)

    @property
    def freq_factor(self) -> float:
        return self.option.freq_factor

    @classmethod
    def from_intervals(
        cls,
        freq_factor: float,
        length: int,
        intervals: Iterable[Tuple[int, int, float]],
        phase: float = 0.0,
    ) -> "SineSignal":
        """Build a signal enabled on each ``(start, stop, volume)`` range."""

        volume = np.full(length, VOLUME_MAX, dtype=float)
        enabled = np.zeros(length, dtype=bool)
        for start, stop, level in intervals:
            volume[start:stop] = level
            enabled[start:stop] = True
        return cls(SineOption(freq_factor, phase), volume, enabled)


def sine_signal_value(signal: SineSignal, index: int) -> float:
    """Amplitude of ``signal`` at sample ``index`` (``0`` past its behaviour)."""

    if index < 0 or index >= len(signal):
        return 0.0
    if not signal.enabled[index]:
        return 0.0
    return float(signal.volume[index] * math.sin(index / signal.option.freq_factor + signal.option.start_phase))


def base_signal_values(signal: SineSignal, length: Optional[int] = None) -> np.ndarray:
    """Return the samples of ``signal``, zero wherever it is disabled.

    ``length`` defaults to the behaviour length; samples past the behaviour
    are zero.
    """

    n = len(signal) if length is None else int(length)
    idx = np.arange(n, dtype=float)
    out = np.zeros(n, dtype=float)
    m = min(n, len(signal))
    phase = idx[:m] / signal.option.freq_factor + signal.option.start_phase
    out[:m] = np.where(signal.enabled[:m], signal.volume[:m] * np.sin(phase), 0.0)
    return out


def generate(
    length: int,
    base_signals: Sequence[SineSignal],
    *,
    noise: bool = False,
    noise_level: float = 0.15,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Sum ``base_signals`` into a composite signal of ``length`` samples.

    With ``noise`` every sample receives uniform noise drawn from
    ``[-noise_level, noise_level]`` times the composite's peak amplitude.
    """

    if length <= 0:
        raise ValueError("length must be positive")

    result = np.zeros(length, dtype=float)
    for signal in base_signals:
        result += base_signal_values(signal, length)

    if noise:
        peak = float(np.max(np.abs(result)))
        rng = np.random.default_rng(seed)
        result += peak * rng.uniform(-noise_level, noise_level, size=length)

    logger.debug("generated %d samples from %d base signals", length, len(base_signals))
    return result


def _stepped_intervals(
    length: int,
    first: Tuple[int, int],
    stride: int,
    volumes: Iterable[float],
) -> List[Tuple[int, int, float]]:
    # ranges of equal width repeat every ``stride`` samples; the trailing
    # partial range is only emitted when it starts before the previous stop
    start, stop = first
    levels = iter(volumes)
    out: List[Tuple[int, int, float]] = []
    while True:
        out.append((start, stop, next(levels)))
        start = start + stride if length - start > stride else stop
        stop = stop + stride if length - stop > stride else length
        if stop == length:
            break
    return out


def _cycle(start: float, delta: float, reset: float) -> Iterable[float]:
    volume = start
    while True:
        yield volume
        volume += delta
        if not (VOLUME_MIN - 1e-9 <= volume <= VOLUME_MAX + 1e-9):
            volume = reset


def demo_base_signals(length: int) -> List[SineSignal]:
    """Return the three-component demo set used by ``wavedecomp generate``.

    * factor 5: bursts of ten periods every twenty periods, volume stepping
      from 0.5 up to 3.0 and wrapping around;
    * factor 2: bursts of ten periods every fifteen, starting after five
      periods, volume stepping down from 3.0;
    * factor 10: always on at minimum volume.
    """

    if length <= 0:
        raise ValueError("length must be positive")

    p = frequency_to_period(5.0)
    first = SineSignal.from_intervals(
        5.0,
        length,
        _stepped_intervals(length, (0, min(10 * p, length)), 20 * p, _cycle(0.5, 0.5, 0.5)),
        phase=math.pi / 2,
    )

    p = frequency_to_period(2.0)
    begin = 5 * p if length >= 5 * p else 0
    end = 15 * p if length >= 15 * p else length
    second = SineSignal.from_intervals(
        2.0,
        length,
        _stepped_intervals(length, (begin, end), 15 * p, _cycle(VOLUME_MAX, -2.0 * VOLUME_MIN, VOLUME_MAX)),
        phase=-math.pi / 4,
    )

    third = SineSignal.from_intervals(10.0, length, [(0, length, VOLUME_MIN)])
    return [first, second, third]
