from pathlib import Path

import pytest
from pydantic import ValidationError

from warmrain.config_utils import (
    apply_overrides_dict,
    build_collisions,
    build_efficiencies,
    build_grid,
    build_sedimentation,
    load_config,
    parse_override_value,
)
from warmrain.errors import ConfigurationError
from warmrain.io.tables import efficiency_table_to_frame
from warmrain.physics.efficiencies import ConstantEfficiency, HallEfficiencyTable
from warmrain.physics.strategies import HallCollisions, NoCollisions
from warmrain.schema import Config, EfficiencyConfig, GridConfig


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults():
    cfg = Config()
    assert cfg.collisions.mode == "hall"
    assert cfg.efficiency.mode == "hall"
    assert cfg.numerics.dt == 1.0
    grid = build_grid(cfg)
    assert grid.n_lay == 30
    assert grid.level_boundaries()[-1] == pytest.approx(1500.0)


def test_load_config_from_yaml(tmp_path):
    path = _write(
        tmp_path,
        """
grid:
  levels: [0.0, 100.0, 250.0]
collisions:
  mode: hall
  workers: 3
  use_numba: false
efficiency:
  mode: constant
  value: 0.5
numerics:
  dt: 0.25
""",
    )
    cfg = load_config(path)
    assert build_grid(cfg).n_lay == 2
    eff = build_efficiencies(cfg)
    assert isinstance(eff, ConstantEfficiency)
    assert eff.value == 0.5
    strategy = build_collisions(cfg)
    assert isinstance(strategy, HallCollisions)
    assert strategy.workers == 3
    assert strategy.use_numba is False
    assert cfg.numerics.dt == 0.25


def test_empty_file_gives_defaults(tmp_path):
    cfg = load_config(_write(tmp_path, ""))
    assert cfg == Config()


def test_non_mapping_root_is_rejected(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config(_write(tmp_path, "- 1\n- 2\n"))


def test_overrides(tmp_path):
    path = _write(tmp_path, "collisions:\n  mode: hall\n")
    cfg = load_config(path, overrides=["collisions.mode=none", "numerics.dt=0.5"])
    assert isinstance(build_collisions(cfg), NoCollisions)
    assert cfg.numerics.dt == 0.5


@pytest.mark.parametrize(
    "raw, expected",
    [("true", True), ("None", None), ("3", 3), ("2.5", 2.5), ("'hall'", "hall"), ("hall", "hall")],
)
def test_parse_override_value(raw, expected):
    assert parse_override_value(raw) == expected


def test_bad_override_is_rejected():
    with pytest.raises(ConfigurationError):
        apply_overrides_dict({}, ["collisions.mode"])
    with pytest.raises(ConfigurationError):
        apply_overrides_dict({"grid": 1}, ["grid.z_top=10"])


def test_decreasing_levels_are_rejected():
    with pytest.raises(ValidationError):
        GridConfig(levels=[0.0, 20.0, 10.0])


def test_table_path_requires_hall_mode(tmp_path):
    with pytest.raises(ValidationError):
        EfficiencyConfig(mode="constant", table_path=tmp_path / "table.csv")


def test_efficiency_table_from_config(tmp_path):
    path = tmp_path / "table.csv"
    efficiency_table_to_frame(HallEfficiencyTable.hall()).to_csv(path, index=False)
    cfg = Config(efficiency={"mode": "hall", "table_path": str(path)})
    table = build_efficiencies(cfg)
    assert isinstance(table, HallEfficiencyTable)
    assert table.collision_efficiency(100.0, 0.2) == pytest.approx(0.95)


def test_large_drop_radius_is_configurable():
    cfg = Config(sedimentation={"large_drop_warn_radius": 1.0e-3})
    assert build_sedimentation(cfg).law.r_max == 1.0e-3
    assert build_sedimentation(Config()).law.r_max == 2.0e-3


def test_overrides_create_missing_sections():
    payload = apply_overrides_dict({}, ['efficiency.mode="constant"', "efficiency.value=0.25"])
    assert payload == {"efficiency": {"mode": "constant", "value": 0.25}}
    assert apply_overrides_dict({"grid": None}, ["grid.length=10"]) == {"grid": {"length": 10}}
    assert apply_overrides_dict({"numerics": {"dt": 1.0}}, []) == {"numerics": {"dt": 1.0}}
