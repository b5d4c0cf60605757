"""Column tables and wave lists on disk.

A :class:`ColumnTable` is a set of titled real-valued columns that may be
shorter than the table itself; missing cells are written as empty fields.  It
converts to a :class:`pandas.DataFrame` for further analysis.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Sequence

import numpy as np
import pandas as pd

from ..types import Wave

WAVE_COLUMNS = ["frequency", "confidence", "start_idx", "length"]


@dataclass
class ColumnTable:
    """Titled columns of possibly unequal length.

    Parameters
    ----------
    titles:
        One title per column.
    columns:
        Column values; each column may hold at most ``rows`` values.
    rows:
        Number of rows of the table.  Defaults to the longest column.
    """

    titles: List[str]
    columns: List[np.ndarray] = field(default_factory=list)
    rows: int | None = None

    def __post_init__(self) -> None:
        if len(self.titles) != len(self.columns):
            raise ValueError("Number of titles must match number of columns")
        self.columns = [np.asarray(c, dtype=float).reshape(-1) for c in self.columns]
        longest = max((c.size for c in self.columns), default=0)
        if self.rows is None:
            self.rows = longest
        elif longest > self.rows:
            raise ValueError(f"column of {longest} values exceeds {self.rows} rows")

    def to_frame(self) -> pd.DataFrame:
        """Return the table as a dataframe with ``NaN`` in missing cells."""

        data = {}
        for title, column in zip(self.titles, self.columns):
            padded = np.full(self.rows, np.nan)
            padded[: column.size] = column
            data[title] = padded
        return pd.DataFrame(data, columns=list(self.titles))

    def write_csv(self, path: str | Path) -> Path:
        """Write the table to ``path``; missing cells become empty fields."""

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_frame().to_csv(path, index=False, na_rep="", float_format="%.6f")
        return path


def waves_to_frame(waves: Sequence[Wave]) -> pd.DataFrame:
    """Return one row per wave with the columns of :data:`WAVE_COLUMNS`."""

    return pd.DataFrame([asdict(w) for w in waves], columns=WAVE_COLUMNS)


def write_waves(path: str | Path, waves: Sequence[Wave]) -> Path:
    """Persist ``waves`` as ``.csv`` or ``.json`` depending on the suffix of ``path``."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix == ".json":
        path.write_text(json.dumps([asdict(w) for w in waves], indent=2))
    elif path.suffix == ".csv":
        waves_to_frame(waves).to_csv(path, index=False)
    else:
        raise ValueError(f"unsupported waves format {path.suffix!r}, expected .csv or .json")
    return path


def read_waves(path: str | Path) -> List[Wave]:
    """Load waves written by :func:`write_waves`."""

    path = Path(path)
    if path.suffix == ".json":
        records = json.loads(path.read_text())
    else:
        records = pd.read_csv(path).to_dict(orient="records")
    return [
        Wave(
            frequency=float(r["frequency"]),
            confidence=float(r["confidence"]),
            start_idx=int(r["start_idx"]),
            length=int(r["length"]),
        )
        for r in records
    ]
