# retireplan/core/config.py
"""
Plan configuration (YAML).

The packaged `config/defaults.yaml` holds a complete default plan; a user file
only needs the keys it wants to change. Loading is the host-side step where
raw values get checked (PlanningInputs.validate) and the Monte Carlo trial
count gets clamped to an interactive range.

Layout:
    plan:        PlanningInputs fields (goals may use years_from_now)
    protection:  ProtectionAssumptions fields
    monte_carlo: min_trials, max_trials, seed, workers
"""

from __future__ import annotations
import copy
import datetime
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import yaml

from .goals import new_goal_id
from .inputs import PlanningInputs
from .protection import ProtectionAssumptions

logger = logging.getLogger(__name__)

DEFAULTS_PATH = Path(__file__).resolve().parent.parent / "config" / "defaults.yaml"
TRIAL_BOUNDS = (100, 3000)
SECTIONS = ("plan", "protection", "monte_carlo")


class ConfigError(ValueError):
    """Configuration file missing, unreadable or malformed."""


@dataclass(frozen=True)
class AppConfig:
    inputs: PlanningInputs
    protection: ProtectionAssumptions
    seed: Optional[int] = None
    workers: int = 1
    trial_bounds: Tuple[int, int] = TRIAL_BOUNDS


def clamp_trials(n: int, bounds: Tuple[int, int] = TRIAL_BOUNDS) -> int:
    lo, hi = bounds
    return int(min(max(int(n), lo), hi))


def read_yaml(path) -> dict:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")
    try:
        with open(p, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {p}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{p}: top level must be a mapping")
    unknown = set(data) - set(SECTIONS)
    if unknown:
        raise ConfigError(f"{p}: unknown sections {sorted(unknown)}")
    return data


def deep_merge(base: dict, override: dict) -> dict:
    """Recursive dict merge; lists and scalars in `override` replace `base`."""
    out = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


def _resolve_goals(goals: list, year: int) -> list:
    resolved = []
    for g in goals or []:
        g = dict(g)
        if "years_from_now" in g:
            offset = g.pop("years_from_now")
            g.setdefault("target_year", year + int(offset))
        if "target_year" not in g:
            raise ConfigError(f"goal {g.get('label', '?')!r} needs target_year or years_from_now")
        g.setdefault("goal_id", new_goal_id())
        resolved.append(g)
    return resolved


def load_config(path=None, overrides: Optional[dict] = None,
                as_of_year: Optional[int] = None) -> AppConfig:
    """
    Defaults <- user file at `path` <- `overrides` (same layout as the file).
    Raises ConfigError for file problems and InvalidInputError for bad values.
    """
    data = read_yaml(DEFAULTS_PATH)
    if path is not None:
        data = deep_merge(data, read_yaml(path))
        logger.info("loaded plan config from %s", path)
    data = deep_merge(data, overrides or {})

    mc = data.get("monte_carlo") or {}
    bounds = (int(mc.get("min_trials", TRIAL_BOUNDS[0])), int(mc.get("max_trials", TRIAL_BOUNDS[1])))
    if bounds[0] > bounds[1]:
        raise ConfigError("monte_carlo.min_trials must be <= max_trials")

    plan = dict(data.get("plan") or {})
    year = as_of_year if as_of_year is not None else plan.get("as_of_year") or datetime.date.today().year
    plan["goals"] = _resolve_goals(plan.get("goals"), year)
    if "trial_count" in plan:
        requested = plan["trial_count"]
        plan["trial_count"] = clamp_trials(requested, bounds)
        if plan["trial_count"] != requested:
            logger.warning("trial_count %s clamped to %d", requested, plan["trial_count"])
    if as_of_year is not None:
        plan["as_of_year"] = as_of_year

    inputs = PlanningInputs.from_dict(plan).validate()

    try:
        protection = ProtectionAssumptions.from_dict(data.get("protection") or {})
    except (TypeError, ValueError) as e:
        raise ConfigError(f"protection: {e}") from e

    seed = mc.get("seed")
    return AppConfig(
        inputs=inputs,
        protection=protection,
        seed=int(seed) if seed is not None else None,
        workers=max(1, int(mc.get("workers", 1))),
        trial_bounds=bounds,
    )


def load_plan(path=None, overrides: Optional[dict] = None) -> Tuple[PlanningInputs, ProtectionAssumptions]:
    cfg = load_config(path, overrides)
    return cfg.inputs, cfg.protection
