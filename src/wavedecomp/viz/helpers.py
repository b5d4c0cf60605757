"""Utility helpers for plotting signals, presence series and waves."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Sequence

import matplotlib.pyplot as plt
import numpy as np

from ..ingest import load_signal
from ..types import Wave
from .styles import WAVE_ALPHA


def load_array(path: str | Path) -> np.ndarray:
    """Load a 1D numeric array from ``path`` (``.npy``, ``.npz`` or ``.csv``)."""
    return load_signal(path)


def auto_label(path: str | Path) -> str:
    """Derive a legend label from the file name of ``path``."""
    return Path(path).stem.replace("_", " ")


def plot_series(ax: plt.Axes, series: Sequence[float], label: str | None = None, **kwargs) -> None:
    """Plot a 1D series on ``ax`` with an optional label."""
    ax.plot(series, label=label, **kwargs)
    if label:
        ax.legend()


def shade_waves(ax: plt.Axes, waves: Sequence[Wave]) -> Dict[float, str]:
    """Mark every wave as a vertical span, one colour per frequency.

    Returns the colour assigned to each frequency.
    """
    cycle = plt.rcParams["axes.prop_cycle"].by_key().get("color", ["C0"])
    colours: Dict[float, str] = {}
    for wave in waves:
        if wave.frequency not in colours:
            colours[wave.frequency] = cycle[len(colours) % len(cycle)]
            label = f"f={wave.frequency:g}"
        else:
            label = None
        ax.axvspan(wave.start_idx, wave.end, color=colours[wave.frequency], alpha=WAVE_ALPHA, label=label)
    if colours:
        ax.legend()
    return colours


def save_or_show(fig: plt.Figure, save: str | Path | None = None, show: bool = False) -> None:
    """Save ``fig`` to ``save`` or display it interactively.

    When neither ``save`` nor ``show`` is given the figure is shown.
    """
    if save:
        fig.savefig(save, bbox_inches="tight")
    if show or not save:
        plt.show()
    else:
        plt.close(fig)
