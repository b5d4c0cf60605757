"""Tabular exports of signals, presence series and decompositions."""

from .tables import ColumnTable, read_waves, waves_to_frame, write_waves
from .diagnostics import component_table, harmonics_table, spectrum_table

__all__ = [
    "ColumnTable",
    "waves_to_frame",
    "write_waves",
    "read_waves",
    "spectrum_table",
    "harmonics_table",
    "component_table",
]
