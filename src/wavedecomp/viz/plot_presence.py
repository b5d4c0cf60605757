"""Plot presence series exported by ``wavedecomp decompose --presence``."""

from __future__ import annotations

import argparse
from typing import Sequence

import matplotlib.pyplot as plt
import pandas as pd

from .helpers import auto_label, plot_series, save_or_show
from .styles import apply_style


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Plot presence series from a CSV table")
    parser.add_argument("table", help="Presence CSV with one column per frequency")
    parser.add_argument("--columns", nargs="*", help="Subset of columns to plot")
    parser.add_argument("--threshold", type=float, help="Draw a horizontal threshold line")
    parser.add_argument("--save", help="Path to save the figure")
    parser.add_argument("--show", action="store_true", help="Display the figure interactively")
    args = parser.parse_args(argv)

    frame = pd.read_csv(args.table, skipinitialspace=True)
    columns = args.columns or list(frame.columns)
    missing = [c for c in columns if c not in frame.columns]
    if missing:
        parser.error(f"Unknown columns: {', '.join(missing)}")

    apply_style()
    fig, ax = plt.subplots()
    for column in columns:
        plot_series(ax, frame[column].dropna().to_numpy(), label=column)
    if args.threshold is not None:
        ax.axhline(args.threshold, color="red", linestyle="--", label="threshold")
        ax.legend()

    ax.set_title(auto_label(args.table))
    ax.set_xlabel("Window")
    ax.set_ylabel("Presence")

    save_or_show(fig, args.save, args.show)


if __name__ == "__main__":
    main()
