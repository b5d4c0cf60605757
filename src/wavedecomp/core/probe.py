"""Sliding-window presence probing.

A Hann-tapered window several periods wide slides across the composite
signal.  At every position the samples are projected onto the quadrature
reference ``exp(-1j * n / f)``; the modulus of the projection, scaled by
``2 / sum(w)``, is the *presence* of the frequency in that window.  A sinusoid
of volume ``v`` filling the window reads ``v``.

Leakage from other components is suppressed twice.  The taper keeps steady
tones more than two resolution bins away below a few percent of their
volume.  A component switching on or off spills a broadband transient into
every frequency, but only while its edge lies inside the window; a flat grey
opening as wide as the window removes such bumps and leaves plateaus of
genuine bursts, which last at least as long as the window, untouched.  The
opening is blind within half a window of either end; there a value is kept
only when it is too large against the local level to be a transient.

Besides the presence values the series carries what the segmenter needs to
place a noise-relative cutoff: the presence scale of the estimated noise
floor and the local signal level at every window position.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np
from scipy.signal import correlate, windows

from ..config import Settings
from ..utils.signals import moving_average, remove_short_peaks
from ..utils.windows import iter_windows
from .filters import CacheConflictError, ReferenceToneCache
from .noise import noise_sigma, presence_noise_scale
from .spectral import frequency_to_period

logger = logging.getLogger(__name__)

# presence, relative to the local level, that a switching transient never reaches
EDGE_BURST_RATIO = 0.5


@dataclass(frozen=True)
class PresenceSeries:
    """Presence of one frequency, one value per window position.

    Attributes
    ----------
    frequency:
        Probed frequency factor.
    period:
        One period of ``frequency`` in samples.
    step:
        Distance between consecutive window starts.
    signal_length:
        Length of the probed signal.
    values:
        Presence per window, ordered by window start.
    smoothed:
        Whether ``values`` went through the centred moving average.
    width:
        Window width in samples; ``0`` means one period.
    noise_scale:
        RMS presence produced by the estimated noise floor alone.
    level:
        Local signal level (``sqrt(2)`` times the tapered RMS) per window,
        in the same units as ``values``.
    """

    frequency: float
    period: int
    step: int
    signal_length: int
    values: np.ndarray = field(repr=False)
    smoothed: bool = False
    width: int = 0
    noise_scale: float = 0.0
    level: Optional[np.ndarray] = field(default=None, repr=False)

    def __len__(self) -> int:
        return int(self.values.size)

    @property
    def peak(self) -> float:
        """Largest presence value, ``0.0`` for an empty series."""
        if self.values.size == 0:
            return 0.0
        return float(np.max(self.values))

    @property
    def window_width(self) -> int:
        return self.width or self.period

    def window_start(self, index: int) -> int:
        return index * self.step

    def position(self, index: int) -> int:
        """Sample index of the centre of the window behind ``values[index]``."""
        width = min(self.window_width, self.signal_length)
        return min(self.window_start(index) + width // 2, self.signal_length)


def analysis_width(frequency: float, span_periods: int = 4) -> int:
    """Window width used to probe ``frequency``: ``span_periods`` whole periods."""
    if span_periods <= 0:
        raise ValueError("span_periods must be positive")
    return span_periods * frequency_to_period(frequency)


def _projection(x: np.ndarray, weights: np.ndarray, tone: np.ndarray) -> np.ndarray:
    kernel = weights * np.conj(tone)
    real = correlate(x, kernel.real, mode="valid")
    imag = correlate(x, kernel.imag, mode="valid")
    return 2.0 * np.hypot(real, imag) / float(np.sum(weights))


def probe_presence(
    signal: Sequence[float],
    frequency: float,
    *,
    settings: Settings | None = None,
    step: int | None = None,
    smooth: bool | None = None,
    cache: Optional[ReferenceToneCache] = None,
    method: str | None = None,
    span_periods: int | None = None,
) -> PresenceSeries:
    """Compute the presence series of ``frequency`` over ``signal``.

    Parameters
    ----------
    signal:
        Composite sample sequence.
    frequency:
        Frequency factor to probe.
    settings:
        Optional :class:`~wavedecomp.config.Settings` providing defaults for
        the remaining parameters.
    step:
        Window stride in samples (``1`` probes every position).
    smooth:
        Apply a centred moving average spanning one window.
    cache:
        Reference-tone cache; a private one is used when omitted.
    method:
        Spectral transform method used for the noise-floor estimate.
    span_periods:
        Window width in periods of ``frequency``.  A signal shorter than the
        window is probed as a single window.

    Returns
    -------
    PresenceSeries
        Empty when the signal is empty or the reference cache reports a
        conflict (the conflict is logged).
    """
    if settings is None:
        settings = Settings()

    step = settings.probe.step if step is None else step
    smooth = settings.probe.smooth if smooth is None else smooth
    span_periods = settings.probe.span_periods if span_periods is None else span_periods
    method = method or settings.spectral.method
    if step <= 0:
        raise ValueError("step must be positive")

    x = np.asarray(signal, dtype=float).reshape(-1)
    n = x.size
    period = frequency_to_period(frequency)
    width = min(analysis_width(frequency, span_periods), n) if n else 0

    def _series(values: np.ndarray, smoothed: bool = False, **extra) -> PresenceSeries:
        return PresenceSeries(
            frequency=frequency,
            period=period,
            step=step,
            signal_length=n,
            values=values,
            smoothed=smoothed,
            width=width,
            **extra,
        )

    if n == 0:
        return _series(np.zeros(0, dtype=float))

    if cache is None:
        cache = ReferenceToneCache()

    starts = np.array([w.start for w in iter_windows(x, width, step)], dtype=int)
    logger.debug("probing frequency %g: window size %d, %d windows", frequency, width, starts.size)

    try:
        tone = cache.tone(frequency, width)
    except CacheConflictError as exc:
        logger.warning("skipping frequency %g after reference cache conflict: %s", frequency, exc)
        return _series(np.zeros(0, dtype=float))

    weights = windows.hann(width, sym=False)
    raw = _projection(x, weights, tone)[starts]
    power = correlate(x * x, weights, mode="valid")[starts] / float(np.sum(weights))
    level = np.sqrt(2.0 * np.maximum(power, 0.0))

    # a neighbour switching on or off leaks a transient for at most one window
    size = width // step + 1
    values = remove_short_peaks(raw, size)
    # within half a window of either end the opening is clipped and would
    # flatten a burst cut by the edge
    blind = np.zeros(raw.size, dtype=bool)
    reach = min(raw.size, (size | 1) // 2)
    blind[:reach] = True
    blind[raw.size - reach :] = True
    values = np.where(blind & (raw >= EDGE_BURST_RATIO * level), raw, values)

    scale = presence_noise_scale(noise_sigma(x, method=method), weights)

    smoothed = bool(smooth and values.size > 1)
    if smoothed:
        values = moving_average(values, max(1, width // step))
    return _series(values, smoothed=smoothed, noise_scale=scale, level=level)
