"""Loading tabulated collision efficiencies.

Tables are stored in long format, one row per grid point::

    R_um,ratio,E
    10,0.0,0.0001
    ...

The frame is pivoted onto a ``ratio × R_um`` grid and wrapped in a
:class:`~warmrain.physics.efficiencies.HallEfficiencyTable`.
"""
from __future__ import annotations

import logging
import warnings
from pathlib import Path

import numpy as np
import pandas as pd

from ..errors import TableLoadError
from ..physics.efficiencies import HallEfficiencyTable
from ..warnings import TableWarning

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("R_um", "ratio", "E")

__all__ = ["efficiency_table_from_frame", "load_efficiency_table", "efficiency_table_to_frame"]


def efficiency_table_from_frame(df: pd.DataFrame) -> HallEfficiencyTable:
    """Convert a long-format DataFrame into an interpolation table."""

    missing = set(REQUIRED_COLUMNS).difference(df.columns)
    if missing:
        names = ", ".join(sorted(missing))
        raise TableLoadError(f"efficiency table is missing required columns: {names}")

    work = df.loc[:, list(REQUIRED_COLUMNS)].copy()
    for col in REQUIRED_COLUMNS:
        work[col] = pd.to_numeric(work[col], errors="coerce")
    if work.isna().any().any():
        raise TableLoadError("efficiency table contains non-numeric or missing values")
    if (work["R_um"] <= 0).any() or (work["ratio"] < 0).any():
        raise TableLoadError("efficiency table requires positive R_um and non-negative ratio values")
    if work.duplicated(subset=["R_um", "ratio"]).any():
        raise TableLoadError("efficiency table has duplicate (R_um, ratio) entries")

    pivot = work.pivot(index="ratio", columns="R_um", values="E")
    pivot = pivot.sort_index(axis=0).sort_index(axis=1)
    if pivot.isna().any().any():
        raise TableLoadError("efficiency table grid has missing values")
    if len(pivot.index) < 2 or len(pivot.columns) < 2:
        raise TableLoadError("efficiency table needs at least two unique R_um and ratio values")

    e_vals = pivot.to_numpy(dtype=float)
    if np.any(e_vals > 1.0):
        warnings.warn(
            "efficiency table contains values above 1; interpolated efficiencies are clipped to 1",
            TableWarning,
            stacklevel=2,
        )
    return HallEfficiencyTable(
        R_um_vals=pivot.columns.to_numpy(dtype=float),
        ratio_vals=pivot.index.to_numpy(dtype=float),
        e_vals=e_vals,
    )


def efficiency_table_to_frame(table: HallEfficiencyTable) -> pd.DataFrame:
    """Return ``table`` in the long format accepted by :func:`load_efficiency_table`."""

    R, q = np.meshgrid(table.R_um_vals, table.ratio_vals)
    return pd.DataFrame({"R_um": R.reshape(-1), "ratio": q.reshape(-1), "E": table.e_vals.reshape(-1)})


def load_efficiency_table(path: Path | str) -> HallEfficiencyTable:
    """Read an efficiency table from a CSV file."""

    p = Path(path)
    if not p.exists():
        raise TableLoadError(f"efficiency table not found: {p}")
    try:
        df = pd.read_csv(p)
    except (OSError, ValueError) as exc:
        raise TableLoadError(f"failed to read efficiency table {p}: {exc}") from exc
    table = efficiency_table_from_frame(df)
    logger.info(
        "loaded efficiency table %s (%d radii x %d ratios)",
        p,
        table.R_um_vals.size,
        table.ratio_vals.size,
    )
    return table
