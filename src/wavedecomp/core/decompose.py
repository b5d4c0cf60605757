"""Decompose a composite signal into presence intervals of known frequencies.

For every candidate frequency the pipeline runs

    probe (tapered window projection) -> segment (threshold) -> join (merge gaps)

independently and the per-frequency waves are concatenated in the order the
frequencies were given.  The only state shared between frequencies is the
reference-tone cache, which is safe to use from several worker threads.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config import Settings
from ..export.tables import ColumnTable
from ..types import Wave, WaveDecomposition
from .filters import ReferenceToneCache
from .join import join_waves
from .probe import PresenceSeries, probe_presence
from .segment import ThresholdPolicy, segment_presence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecompositionResult:
    """Waves of a decomposition run and the presence series behind them.

    ``presence`` holds one entry per input frequency, ``None`` for
    frequencies that were skipped as invalid.
    """

    frequencies: Tuple[float, ...]
    waves: WaveDecomposition = field(default_factory=list)
    presence: List[Optional[PresenceSeries]] = field(default_factory=list)

    def waves_for(self, frequency: float) -> List[Wave]:
        return [w for w in self.waves if w.frequency == frequency]


def _is_valid_frequency(frequency: float) -> bool:
    try:
        value = float(frequency)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value != 0.0


def _decompose_frequency(
    signal: np.ndarray,
    frequency: float,
    *,
    settings: Settings,
    cache: ReferenceToneCache,
    policy: ThresholdPolicy,
    step: int | None,
    smooth: bool | None,
) -> Tuple[List[Wave], Optional[PresenceSeries]]:
    if not _is_valid_frequency(frequency):
        logger.warning("skipping invalid frequency factor %r", frequency)
        return [], None

    series = probe_presence(signal, frequency, settings=settings, step=step, smooth=smooth, cache=cache)
    candidates = segment_presence(series, policy)
    waves = join_waves(candidates, series.period, settings=settings, signal_length=signal.size)
    return waves, series


def decompose_with_diagnostics(
    signal: Sequence[float],
    frequencies: Sequence[float],
    *,
    settings: Settings | None = None,
    cache: Optional[ReferenceToneCache] = None,
    workers: int | None = None,
    policy: ThresholdPolicy | None = None,
    step: int | None = None,
    smooth: bool | None = None,
) -> DecompositionResult:
    """Decompose ``signal`` and keep the intermediate presence series.

    Parameters
    ----------
    signal:
        Composite sample sequence.
    frequencies:
        Candidate frequency factors, processed in the given order.
    settings:
        Optional :class:`~wavedecomp.config.Settings` providing defaults.
    cache:
        Reference-tone cache shared by all frequencies; a fresh one is used
        when omitted.
    workers:
        Number of worker threads; ``1`` runs the frequencies sequentially.
    policy, step, smooth:
        Overrides of the threshold policy, window stride and smoothing.

    Returns
    -------
    DecompositionResult
        Never raises for degenerate input: an empty signal or an invalid
        frequency simply contributes no waves.
    """
    if settings is None:
        settings = Settings()

    workers = settings.decompose.workers if workers is None else workers
    if policy is None:
        policy = ThresholdPolicy.from_settings(settings)
    if cache is None:
        cache = ReferenceToneCache()

    x = np.asarray(signal, dtype=float).reshape(-1)
    freqs = tuple(frequencies)

    def run(indexed: Tuple[int, float]) -> Tuple[List[Wave], Optional[PresenceSeries]]:
        index, frequency = indexed
        logger.debug("decompose frequency %d/%d (factor %r)", index, len(freqs), frequency)
        return _decompose_frequency(
            x,
            frequency,
            settings=settings,
            cache=cache,
            policy=policy,
            step=step,
            smooth=smooth,
        )

    jobs = list(enumerate(freqs, start=1))
    if workers > 1 and len(jobs) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(run, jobs))
    else:
        outcomes = [run(job) for job in jobs]

    waves: WaveDecomposition = []
    presence: List[Optional[PresenceSeries]] = []
    for frequency_waves, series in outcomes:
        waves.extend(frequency_waves)
        presence.append(series)

    logger.info(
        "decomposed %d samples over %d frequencies into %d waves",
        x.size,
        len(freqs),
        len(waves),
    )
    return DecompositionResult(frequencies=freqs, waves=waves, presence=presence)


def decompose(
    signal: Sequence[float],
    frequencies: Sequence[float],
    **kwargs,
) -> WaveDecomposition:
    """Return the waves of every frequency in ``frequencies`` found in ``signal``.

    Keyword arguments are forwarded to :func:`decompose_with_diagnostics`.
    """
    return decompose_with_diagnostics(signal, frequencies, **kwargs).waves


def presence_table(result: DecompositionResult) -> ColumnTable:
    """Return the presence series of ``result`` as columns ``presence #1``, ...

    Skipped frequencies keep their column, left empty.  The table has as many
    rows as the longest series.
    """
    titles = []
    columns = []
    counter = 0
    for series in result.presence:
        counter += 1
        titles.append(f"presence #{counter}")
        columns.append(series.values if series is not None else np.zeros(0))
    return ColumnTable(titles, columns)
