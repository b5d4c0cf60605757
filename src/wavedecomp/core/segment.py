"""Threshold a presence series into candidate presence intervals.

The default ``noise`` policy places the cutoff of every window at

    max(sigma * noise_scale, leakage * level)

where ``noise_scale`` is the presence the estimated noise floor produces and
``level`` the local signal level.  The first term bounds false detections on
noise to about ``exp(-sigma**2)`` per window whatever the noise amplitude; the
second keeps leakage of a loud component out of a quiet frequency.  Neither
depends on how loud other bursts of the same frequency are.

Each qualifying run is then trimmed to where presence rises to half of the
level reached just inside the run, so its edges sit at the switching points
of the burst rather than where the taper first picked it up.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from ..config import Settings
from ..types import Wave, Window
from ..utils.signals import mean_value
from .probe import PresenceSeries

logger = logging.getLogger(__name__)

THRESHOLD_MODES = ("noise", "relative", "fixed")

# presence below this is silence, whatever the policy
MIN_THRESHOLD = 1e-9


@dataclass(frozen=True)
class ThresholdPolicy:
    """Cutoff applied to a presence series.

    ``mode="noise"`` follows the noise floor and local level of the series
    (see the module docstring).  ``mode="relative"`` resolves to
    ``max(ratio * max(values), floor)`` and ``mode="fixed"`` to ``fixed``.
    ``refine`` trims every run to ``edge_ratio`` of its local level.
    """

    mode: str = "noise"
    sigma: float = 2.5
    leakage: float = 0.05
    ratio: float = 0.5
    fixed: float = 0.5
    floor: float = 0.15
    refine: bool = True
    edge_ratio: float = 0.5

    def __post_init__(self) -> None:
        if self.mode not in THRESHOLD_MODES:
            raise ValueError(f"mode must be one of {THRESHOLD_MODES}, got {self.mode!r}")
        if not (0.0 < self.ratio <= 1.0):
            raise ValueError("ratio must be in (0, 1]")
        if not (0.0 < self.edge_ratio <= 1.0):
            raise ValueError("edge_ratio must be in (0, 1]")
        if self.sigma < 0 or self.leakage < 0:
            raise ValueError("sigma and leakage must be non-negative")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ThresholdPolicy":
        if settings is None:
            settings = Settings()
        t = settings.threshold
        return cls(
            mode=t.mode,
            sigma=t.sigma,
            leakage=t.leakage,
            ratio=t.ratio,
            fixed=t.fixed,
            floor=t.floor,
            refine=t.refine,
            edge_ratio=t.edge_ratio,
        )

    def thresholds(self, series: PresenceSeries) -> np.ndarray:
        """Return the cutoff of every window of ``series``."""
        size = len(series)
        if self.mode == "fixed":
            cutoff = np.full(size, float(self.fixed))
        elif self.mode == "relative":
            cutoff = np.full(size, max(self.ratio * series.peak, float(self.floor)))
        else:
            level = series.level if series.level is not None else np.zeros(size)
            cutoff = np.maximum(self.sigma * series.noise_scale, self.leakage * np.asarray(level, dtype=float))
        return np.maximum(cutoff, MIN_THRESHOLD)

    def confidence(self, values: np.ndarray, thresholds: np.ndarray, peak: float) -> float:
        """Confidence of a run with presence ``values`` above ``thresholds``.

        Noise mode reports how far the run clears its cutoff,
        ``1 - mean(thresholds) / mean(values)``; relative mode divides the
        mean presence by the series peak; fixed mode uses the mean itself.
        """
        mean = mean_value(values)
        if self.mode == "fixed":
            return mean
        if self.mode == "relative":
            return mean / peak if peak > 0 else 0.0
        return 1.0 - mean_value(thresholds) / mean if mean > 0 else 0.0


def find_segments(values: Sequence[float], threshold) -> List[Window]:
    """Return the maximal runs of ``values >= threshold`` as series-index windows.

    ``threshold`` is a scalar or one cutoff per value.
    """

    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return []
    mask = np.concatenate(([0], (arr >= np.asarray(threshold, dtype=float)).astype(np.int8), [0]))
    edges = np.diff(mask)
    starts = np.flatnonzero(edges == 1)
    stops = np.flatnonzero(edges == -1)
    return [Window(int(s), int(e)) for s, e in zip(starts, stops)]


def refine_run(values: np.ndarray, run: Window, reach: int, ratio: float = 0.5) -> Window:
    """Trim ``run`` to where ``values`` reaches ``ratio`` of its level near each edge.

    The level at an edge is the largest value within ``reach`` positions
    inside the run.  A burst cut by either end of the series is already at
    its level there and keeps that end.
    """
    head = values[run.start : min(run.end, run.start + reach)]
    start = run.start + int(np.argmax(head >= ratio * head.max()))
    tail = values[max(start, run.end - reach) : run.end]
    end = run.end - int(np.argmax(tail[::-1] >= ratio * tail.max()))
    return Window(start, end)


def segment_presence(
    series: PresenceSeries,
    policy: ThresholdPolicy | None = None,
    *,
    settings: Settings | None = None,
) -> List[Wave]:
    """Turn a presence series into candidate waves in sample coordinates.

    Each qualifying run of window positions becomes one :class:`Wave` spanning
    the centres of its first and last windows.  A run that reaches the first
    (last) window is extended to the start (end) of the signal, since no
    window is centred closer to the edge.
    """
    if policy is None:
        policy = ThresholdPolicy.from_settings(settings)

    values = series.values
    if values.size == 0:
        return []

    thresholds = policy.thresholds(series)
    reach = max(1, 2 * series.window_width // series.step)
    peak = series.peak

    waves: List[Wave] = []
    for run in find_segments(values, thresholds):
        if policy.refine:
            run = refine_run(values, run, reach, policy.edge_ratio)
        start = 0 if run.start == 0 else series.position(run.start)
        if run.end == values.size:
            end = series.signal_length
        else:
            end = min(series.position(run.end - 1) + series.step, series.signal_length)
        if end <= start:
            continue
        confidence = policy.confidence(values[run.start : run.end], thresholds[run.start : run.end], peak)
        waves.append(Wave(series.frequency, confidence, start, end - start))

    logger.debug(
        "frequency %g: %s threshold (median %.4f) produced %d candidate segments",
        series.frequency,
        policy.mode,
        float(np.median(thresholds)),
        len(waves),
    )
    return waves
