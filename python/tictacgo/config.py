"""
Generator settings stored as JSON.

Only the keys present in the file override ``DEFAULT_CONFIG``; anything
missing keeps its default, so old config files keep working.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any

from tictacgo.engine.gamegenerator.difficulty import (
    DEFAULT_CONFIG,
    Difficulty,
    DifficultyBand,
    DifficultyProfile,
    GeneratorConfig,
    ScoreWeights,
)
from tictacgo.engine.gamerules.rules import LineRules
from tictacgo.engine.gamesolver.context import SearchBudget

logger = logging.getLogger(__name__)

# Default config file location (working directory)
CONFIG_FILE = Path("tictacgo.json")


def config_to_dict(config: GeneratorConfig) -> dict[str, Any]:
    data = dataclasses.asdict(config)
    data["profiles"] = {
        str(difficulty): dataclasses.asdict(profile)
        for difficulty, profile in config.profiles.items()
    }
    return data


def _budget_from(raw: dict[str, Any] | None, base: SearchBudget) -> SearchBudget | None:
    # null in a profile means "use the config-wide budget"
    if raw is None:
        return None
    return dataclasses.replace(base, **raw)


def config_from_dict(data: dict[str, Any]) -> GeneratorConfig:
    """
    Build a config from a (possibly partial) dictionary.

    Raises:
        ValueError: If a value has the wrong shape or an unknown difficulty
    """
    base = DEFAULT_CONFIG
    try:
        profiles = dict(base.profiles)
        for name, raw in data.get("profiles", {}).items():
            difficulty = Difficulty(name)
            current = profiles[difficulty]
            band = dataclasses.replace(current.band, **raw.get("band", {}))
            budget = current.solver_budget
            if "solver_budget" in raw:
                budget = _budget_from(raw["solver_budget"], budget or base.solver_budget)
            profiles[difficulty] = DifficultyProfile(
                raw.get("min_crosses", current.min_crosses),
                raw.get("max_crosses", current.max_crosses),
                band,
                raw.get("scramble_steps", current.scramble_steps),
                budget,
            )
        return dataclasses.replace(
            base,
            profiles=profiles,
            weights=dataclasses.replace(base.weights, **data.get("weights", {})),
            solver_budget=dataclasses.replace(
                base.solver_budget, **data.get("solver_budget", {})
            ),
            rules=dataclasses.replace(base.rules, **data.get("rules", {})),
            **{
                key: data[key]
                for key in (
                    "batch_size",
                    "max_scramble_steps",
                    "max_restarts",
                    "time_limit",
                    "motif_bias",
                    "spread_bias",
                )
                if key in data
            },
        )
    except (TypeError, AttributeError) as e:
        raise ValueError(f"Invalid config: {e}") from e


def load_config(path: Path | str = CONFIG_FILE) -> GeneratorConfig:
    """
    Load generator settings from a JSON file.

    Returns:
        The merged config. Returns the defaults if the file is missing or invalid.
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"Config file {path} not found, using defaults")
        return DEFAULT_CONFIG

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        config = config_from_dict(data)
        logger.debug(f"Config loaded from {path}")
        return config
    except (json.JSONDecodeError, OSError, ValueError) as e:
        logger.warning(f"Failed to load config: {e}, using defaults")
        return DEFAULT_CONFIG


def save_config(config: GeneratorConfig, path: Path | str = CONFIG_FILE) -> None:
    path = Path(path)
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config_to_dict(config), f, indent=2)
        logger.debug(f"Config saved to {path}")
    except OSError as e:
        logger.error(f"Failed to save config: {e}")


__all__ = [
    "CONFIG_FILE",
    "DEFAULT_CONFIG",
    "DifficultyBand",
    "DifficultyProfile",
    "GeneratorConfig",
    "LineRules",
    "ScoreWeights",
    "SearchBudget",
    "config_from_dict",
    "config_to_dict",
    "load_config",
    "save_config",
]
