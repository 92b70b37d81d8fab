"""Loading configuration files and building collaborators from them."""
from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from . import constants
from .errors import ConfigurationError
from .grid import VerticalGrid
from .io.tables import load_efficiency_table
from .physics.efficiencies import ConstantEfficiency, EfficiencyProvider, HallEfficiencyTable
from .physics.sedimentation import DEFAULT_LAW, Sedimentation
from .physics.strategies import Collisions, make_hall_collisions, make_no_collisions
from .schema import Config

logger = logging.getLogger(__name__)

__all__ = [
    "parse_override_value",
    "apply_overrides_dict",
    "load_config",
    "build_grid",
    "build_sedimentation",
    "build_efficiencies",
    "build_collisions",
]


_LITERALS = {"true": True, "false": False, "none": None, "null": None}


def parse_override_value(raw: str) -> Any:
    """Turn the right-hand side of ``section.key=value`` into a YAML-like scalar.

    Booleans and ``none``/``null`` are matched case-insensitively, then
    integers and floats are tried; anything else stays a string with one
    pair of surrounding quotes removed.
    """

    text = raw.strip()
    if text.lower() in _LITERALS:
        return _LITERALS[text.lower()]
    for convert in (int, float):
        try:
            return convert(text)
        except ValueError:
            continue
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {"'", '"'}:
        return text[1:-1]
    return text


def apply_overrides_dict(payload: Dict[str, Any], overrides: Sequence[str]) -> Dict[str, Any]:
    """Set ``section.key=value`` entries in a raw configuration mapping.

    Missing sections are created; ``payload`` is modified in place and
    returned.
    """

    for item in overrides or ():
        path, sep, value = item.partition("=")
        keys = [k for k in path.strip().split(".") if k]
        if not sep or not keys:
            raise ConfigurationError(f"override {item!r} is not of the form section.key=value")
        section: Any = payload
        for key in keys[:-1]:
            if not isinstance(section, dict):
                break
            if section.get(key) is None:
                section[key] = {}
            section = section[key]
        if not isinstance(section, dict):
            raise ConfigurationError(f"override {item!r} descends into a non-mapping setting")
        section[keys[-1]] = parse_override_value(value)
    return payload


def load_config(path: Path | str, overrides: Optional[Sequence[str]] = None) -> Config:
    """Load a YAML configuration file into a :class:`Config` instance."""

    from ruamel.yaml import YAML

    yaml = YAML(typ="safe")
    source_path = Path(path).resolve()
    with source_path.open("r", encoding="utf-8") as fh:
        data = yaml.load(fh)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration root must be a mapping")
    if overrides:
        data = apply_overrides_dict(data, overrides)
    cfg = Config(**data)
    logger.info("load_config: %s (collisions=%s, dt=%g)", source_path, cfg.collisions.mode, cfg.numerics.dt)
    return cfg


def build_grid(cfg: Config) -> VerticalGrid:
    if cfg.grid.levels is not None:
        return VerticalGrid.from_levels(cfg.grid.levels)
    return VerticalGrid.uniform(cfg.grid.z_top, cfg.grid.length)


def build_sedimentation(cfg: Config) -> Sedimentation:
    law = DEFAULT_LAW
    if cfg.sedimentation.large_drop_warn_radius != constants.FALL_R_MAX:
        law = replace(law, r_max=float(cfg.sedimentation.large_drop_warn_radius))
    return Sedimentation(law)


def build_efficiencies(cfg: Config) -> EfficiencyProvider:
    eff = cfg.efficiency
    if eff.mode == "constant":
        return ConstantEfficiency(float(eff.value))
    if eff.table_path is not None:
        return load_efficiency_table(eff.table_path)
    return HallEfficiencyTable.hall()


def build_collisions(cfg: Config) -> Collisions:
    """Return the collision strategy selected by ``cfg.collisions.mode``."""

    if cfg.collisions.mode == "none":
        return make_no_collisions()
    return make_hall_collisions(
        build_sedimentation(cfg),
        build_efficiencies(cfg),
        workers=cfg.collisions.workers,
        use_numba=cfg.collisions.use_numba,
    )
