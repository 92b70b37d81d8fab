import numpy as np
import pandas as pd
import pytest

from warmrain.errors import TableLoadError
from warmrain.io import tables
from warmrain.physics.efficiencies import HallEfficiencyTable
from warmrain.warnings import TableWarning


def _small_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "R_um": [10.0, 10.0, 50.0, 50.0],
            "ratio": [0.0, 1.0, 0.0, 1.0],
            "E": [0.1, 0.2, 0.5, 0.9],
        }
    )


def test_load_efficiency_table_from_csv(tmp_path):
    path = tmp_path / "eff.csv"
    _small_frame().sample(frac=1.0, random_state=3).to_csv(path, index=False)
    table = tables.load_efficiency_table(path)
    assert np.allclose(table.R_um_vals, [10.0, 50.0])
    assert np.allclose(table.ratio_vals, [0.0, 1.0])
    assert table.collision_efficiency(50.0, 1.0) == pytest.approx(0.9)
    assert table.collision_efficiency(30.0, 0.5) == pytest.approx(0.425)


def test_builtin_table_survives_frame_conversion():
    hall = HallEfficiencyTable.hall()
    rebuilt = tables.efficiency_table_from_frame(tables.efficiency_table_to_frame(hall))
    assert np.allclose(rebuilt.e_vals, hall.e_vals)


def test_missing_file(tmp_path):
    with pytest.raises(TableLoadError, match="not found"):
        tables.load_efficiency_table(tmp_path / "absent.csv")


def test_missing_column():
    with pytest.raises(TableLoadError, match="missing required columns: E"):
        tables.efficiency_table_from_frame(_small_frame().drop(columns=["E"]))


def test_duplicate_points():
    df = pd.concat([_small_frame(), _small_frame().iloc[:1]], ignore_index=True)
    with pytest.raises(TableLoadError, match="duplicate"):
        tables.efficiency_table_from_frame(df)


def test_incomplete_grid():
    with pytest.raises(TableLoadError, match="missing values"):
        tables.efficiency_table_from_frame(_small_frame().iloc[:3])


def test_non_numeric_values():
    df = _small_frame().astype({"E": object})
    df.loc[0, "E"] = "n/a"
    with pytest.raises(TableLoadError, match="non-numeric"):
        tables.efficiency_table_from_frame(df)


def test_values_above_unity_warn():
    df = _small_frame()
    df.loc[3, "E"] = 2.5
    with pytest.warns(TableWarning):
        table = tables.efficiency_table_from_frame(df)
    assert table.collision_efficiency(50.0, 1.0) == 1.0
