"""Matplotlib styles for wavedecomp visualisations."""

from __future__ import annotations

import matplotlib.pyplot as plt

# Base style configuration used across all plots.  Individual entries can be
# overridden through :func:`apply_style`.
BASE_STYLE = {
    "figure.figsize": (12, 4),
    "axes.grid": True,
    "grid.linestyle": ":",
    "grid.alpha": 0.4,
    "axes.titlesize": "large",
    "axes.labelsize": "medium",
    "lines.linewidth": 1.0,
    "legend.fontsize": "small",
}

# Fill opacity of the spans marking detected waves.
WAVE_ALPHA = 0.2


def apply_style(extra: dict | None = None) -> None:
    """Apply the shared matplotlib style.

    Parameters
    ----------
    extra:
        Optional dictionary of rcParams that override the base style.
    """
    style = BASE_STYLE.copy()
    if extra:
        style.update(extra)
    plt.rcParams.update(style)
