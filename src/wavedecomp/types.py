"""Common type helpers for wavedecomp.

This module defines the lightweight value containers exchanged between the
pipeline stages.  All of them are frozen: a stage never mutates the output of
a previous one, it builds new values instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List


def clamp_confidence(value: float) -> float:
    """Clamp ``value`` into the closed unit interval."""

    return min(1.0, max(0.0, float(value)))


@dataclass(frozen=True)
class Window:
    """Index based half-open window ``[start, end)`` used for segmenting sequences."""

    start: int
    end: int

    @property
    def width(self) -> int:
        """Return the number of elements covered by the window."""

        return self.end - self.start


@dataclass(frozen=True)
class Wave:
    """Detected presence interval of one base frequency.

    Attributes
    ----------
    frequency:
        Frequency factor of the base signal.
    confidence:
        Detection confidence, clamped into ``[0, 1]`` on construction.
    start_idx:
        Index of the first sample where the frequency is present.
    length:
        Number of samples the frequency stays present.
    """

    frequency: float
    confidence: float
    start_idx: int
    length: int

    def __post_init__(self) -> None:
        if self.start_idx < 0 or self.length < 0:
            raise ValueError("start_idx and length must be non-negative")
        object.__setattr__(self, "start_idx", int(self.start_idx))
        object.__setattr__(self, "length", int(self.length))
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))

    @property
    def end(self) -> int:
        """Return the exclusive end index of the interval."""

        return self.start_idx + self.length

    def __str__(self) -> str:
        return (
            f"frequency={self.frequency:g} confidence={self.confidence:.3f} "
            f"start={self.start_idx} length={self.length}"
        )


WaveDecomposition = List[Wave]
