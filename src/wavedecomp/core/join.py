"""Merge candidate waves of one frequency separated by short gaps."""

from __future__ import annotations

import logging
import math
from typing import List, Sequence, Tuple

from ..config import Settings
from ..types import Wave
from ..utils.signals import mean_value

logger = logging.getLogger(__name__)


def _should_merge(current: Wave, following: Wave, min_gap: int) -> bool:
    if following.start_idx < current.end:
        return True
    return following.start_idx - current.end < min_gap


def _merge(current: Wave, following: Wave) -> Wave:
    start = min(current.start_idx, following.start_idx)
    end = max(current.end, following.end)
    confidence = mean_value([current.confidence, following.confidence])
    return Wave(current.frequency, confidence, start, end - start)


def join_pass(waves: Sequence[Wave], min_gap: int) -> Tuple[List[Wave], bool]:
    """Run one merge scan over ``waves`` ordered by start index.

    Returns the new wave list and whether any merge happened.
    """
    ordered = sorted(waves, key=lambda w: w.start_idx)
    if len(ordered) <= 1:
        return ordered, False

    result: List[Wave] = []
    changed = False
    current = ordered[0]
    for following in ordered[1:]:
        if _should_merge(current, following, min_gap):
            current = _merge(current, following)
            changed = True
        else:
            result.append(current)
            current = following
    result.append(current)
    return result, changed


def _touches_edge(wave: Wave, signal_length: int) -> bool:
    return wave.start_idx == 0 or wave.end >= signal_length


def join_waves(
    waves: Sequence[Wave],
    period: int,
    *,
    settings: Settings | None = None,
    min_duration_periods: int | None = None,
    signal_length: int | None = None,
    keep_edge_waves: bool | None = None,
    edge_fraction: float | None = None,
) -> List[Wave]:
    """Merge ``waves`` to a fixed point and drop the ones too short to count.

    Two consecutive waves merge when they overlap or when the gap between
    them is shorter than ``min_duration_periods * period`` samples.  Scans
    repeat until one reports no merge.  Waves shorter than the same duration
    are then discarded.

    Edge policy: with ``keep_edge_waves`` (the default) a wave that starts at
    sample 0 or ends at ``signal_length`` is only partly observed, so it is
    kept when it spans ``edge_fraction`` of the minimum duration (half of it
    by default, never more than the whole signal).  Such edge waves are the
    only results allowed to be shorter than ``min_duration_periods`` periods;
    pass ``keep_edge_waves=False`` to apply the minimum duration everywhere.
    """
    if settings is None:
        settings = Settings()

    if min_duration_periods is None:
        min_duration_periods = settings.join.min_duration_periods
    if keep_edge_waves is None:
        keep_edge_waves = settings.join.keep_edge_waves
    if edge_fraction is None:
        edge_fraction = settings.join.edge_fraction
    if period <= 0:
        raise ValueError("period must be positive")

    min_length = min_duration_periods * period

    joined = list(waves)
    passes = 0
    while True:
        joined, changed = join_pass(joined, min_length)
        passes += 1
        if not changed:
            break

    kept: List[Wave] = []
    for wave in joined:
        if wave.length >= min_length:
            kept.append(wave)
        elif (
            keep_edge_waves
            and signal_length is not None
            and _touches_edge(wave, signal_length)
            and wave.length >= min(math.ceil(edge_fraction * min_length), signal_length)
        ):
            kept.append(wave)

    logger.debug(
        "joined %d candidates into %d waves in %d passes, %d kept",
        len(waves),
        len(joined),
        passes,
        len(kept),
    )
    return kept
