"""Signal processing helpers."""

from __future__ import annotations

from typing import Sequence

import numpy as np
from scipy.ndimage import grey_opening, uniform_filter1d


def mean_value(data: Sequence[float]) -> float:
    """Return the arithmetic mean of *data*, or ``0.0`` for an empty sequence."""

    arr = np.asarray(data, dtype=float)
    if arr.size == 0:
        return 0.0
    return float(arr.mean())


def moving_average(data: Sequence[float], window: int) -> np.ndarray:
    """Compute the centred moving average over *data*.

    The result has the same length as *data*; samples beyond either edge are
    taken equal to the nearest edge value.  Even ``window`` values are widened
    by one so the average stays centred.  ``ValueError`` is raised if
    ``window`` is not positive.
    """

    if window <= 0:
        raise ValueError("window must be positive")
    arr = np.asarray(data, dtype=float)
    if arr.size == 0 or window == 1:
        return arr.copy()
    if window % 2 == 0:
        window += 1
    return uniform_filter1d(arr, size=window, mode="nearest")


def remove_short_peaks(data: Sequence[float], window: int) -> np.ndarray:
    """Flat grey opening of *data*: peaks narrower than *window* samples are cut.

    Plateaus at least *window* samples wide keep their shape, including
    ramps leading up to them.  The structuring element is clipped at both
    ends, so the last half window of a ramp rising into an end is held at
    its value half a window inside.  Even ``window`` values are widened by
    one.
    """

    if window <= 0:
        raise ValueError("window must be positive")
    arr = np.asarray(data, dtype=float)
    if arr.size == 0 or window == 1:
        return arr.copy()
    if window % 2 == 0:
        window += 1
    return grey_opening(arr, size=(window,), mode="nearest")
