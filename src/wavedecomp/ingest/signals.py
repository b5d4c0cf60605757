# src/wavedecomp/ingest/signals.py
"""Load a one-dimensional composite signal from ``.npy``, ``.npz`` or ``.csv``.

CSV files hold one sample per row in the first column; a single non-numeric
header row is skipped.  ``.npz`` archives are read from the ``signal`` entry
or, when absent, from their first array.
"""

from __future__ import annotations

import csv
import pathlib
from typing import List, Union

import numpy as np

SUPPORTED_SUFFIXES = (".npy", ".npz", ".csv")


class SignalFormatError(ValueError):
    """Raised when a signal file cannot be read."""

    def __init__(self, message: str, *, path: Union[str, pathlib.Path]):
        self.path = str(path)
        super().__init__(f"{self.path}: {message}")


def _load_csv(path: pathlib.Path) -> np.ndarray:
    values: List[float] = []
    with path.open(newline="", encoding="utf-8-sig") as fh:
        for lineno, row in enumerate(csv.reader(fh), start=1):
            cells = [c.strip() for c in row]
            if not any(cells):
                continue
            try:
                values.append(float(cells[0]))
            except ValueError:
                if lineno == 1 and not values:
                    continue
                raise SignalFormatError(f"line {lineno}: non-numeric sample {cells[0]!r}", path=path)
    return np.asarray(values, dtype=float)


def _load_npz(path: pathlib.Path) -> np.ndarray:
    with np.load(path) as data:
        if "signal" in data.files:
            return np.asarray(data["signal"])
        if not data.files:
            raise SignalFormatError("archive contains no arrays", path=path)
        return np.asarray(data[data.files[0]])


def load_signal(path: Union[str, pathlib.Path]) -> np.ndarray:
    """Return the samples stored at ``path`` as a float array.

    Raises
    ------
    SignalFormatError
        For unsupported suffixes, non-numeric content or arrays that are not
        one-dimensional.
    """

    path = pathlib.Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise SignalFormatError(f"unsupported signal format {suffix!r}", path=path)

    if suffix == ".csv":
        samples = _load_csv(path)
    elif suffix == ".npz":
        samples = _load_npz(path)
    else:
        samples = np.load(path)

    try:
        samples = np.asarray(samples, dtype=float)
    except (TypeError, ValueError) as exc:
        raise SignalFormatError(f"non-numeric samples: {exc}", path=path) from exc
    if samples.ndim != 1:
        raise SignalFormatError(f"expected a 1D signal, got shape {samples.shape}", path=path)
    return samples
