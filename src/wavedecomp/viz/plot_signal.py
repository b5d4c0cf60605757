"""Plot a composite signal with the waves detected in it."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt

from ..export.tables import read_waves
from ..types import Wave
from .helpers import auto_label, load_array, plot_series, save_or_show, shade_waves
from .styles import apply_style


def plot_signal(
    signal: Sequence[float],
    waves: Sequence[Wave] = (),
    *,
    title: str = "Signal",
    label: str | None = None,
) -> plt.Figure:
    """Return a figure of ``signal`` with ``waves`` shaded underneath."""
    apply_style()
    fig, ax = plt.subplots()
    shade_waves(ax, waves)
    plot_series(ax, signal, label=label, color="black")
    ax.set_title(title)
    ax.set_xlabel("Sample")
    ax.set_ylabel("Amplitude")
    return fig


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Plot a signal and its detected waves")
    parser.add_argument("signal", help="Path to the signal (.npy, .npz or .csv)")
    parser.add_argument("--waves", help="Waves file written by 'wavedecomp decompose'")
    parser.add_argument("--title", help="Figure title")
    parser.add_argument("--save", help="Path to save the figure")
    parser.add_argument("--show", action="store_true", help="Display the figure interactively")
    args = parser.parse_args(argv)

    data = load_array(args.signal)
    waves = read_waves(Path(args.waves)) if args.waves else []
    fig = plot_signal(data, waves, title=args.title or auto_label(args.signal))
    save_or_show(fig, args.save, args.show)


if __name__ == "__main__":
    main()
