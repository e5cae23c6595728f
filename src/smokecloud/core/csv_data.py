# smokecloud/core/csv_data.py
"""
Helpers for the CSV outputs a simulation writes (``*_hrr.csv``,
``*_devc.csv``...). The first row holds units, the second column names,
the rest numeric samples.
"""
from __future__ import annotations

import io

import pandas as pd

from smokecloud.contracts.data import DataPoint, DataVector


def read_output_csv(text: str) -> pd.DataFrame:
    """Parse an output CSV into a frame with ``(units, name)`` column pairs."""
    frame = pd.read_csv(io.StringIO(text), header=[0, 1], skipinitialspace=True)
    frame.columns = pd.MultiIndex.from_tuples(
        [(str(units).strip(), str(name).strip()) for units, name in frame.columns],
        names=["units", "name"],
    )
    return frame


def csv_to_vector(text: str, value: str, x_name: str = "Time") -> DataVector[float, float] | None:
    """Extract one column against the time column.

    Returns ``None`` when either column is missing.
    """
    frame = read_output_csv(text)
    names = list(frame.columns.get_level_values("name"))
    if value not in names or x_name not in names:
        return None

    x_idx = names.index(x_name)
    y_idx = names.index(value)
    x_units = frame.columns[x_idx][0]
    y_units = frame.columns[y_idx][0]

    xs = pd.to_numeric(frame.iloc[:, x_idx], errors="coerce")
    ys = pd.to_numeric(frame.iloc[:, y_idx], errors="coerce")
    points = [
        DataPoint[float, float](x=float(x), y=float(y))
        for x, y in zip(xs, ys)
        if not (pd.isna(x) or pd.isna(y))
    ]
    return DataVector[float, float](
        values=points, x_units=x_units, x_name=x_name, y_units=y_units, y_name=value
    )
