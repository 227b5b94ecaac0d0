"""
Planner settings.

Weights, complexity breakpoints and generation defaults live in a small YAML
file so they can be tuned without touching code. Anything the file leaves out
falls back to the built-in defaults below.

Example planner.yaml:

    planning_mode: meals          # meals | courses
    minimum_recipes: 7
    default_weeknight_minutes: 45
    require_monday_start: true
    cuisine_variety_weight: 0.15
    weights:
      availability: 0.2
      complexity: 0.2
      advance_prep: 0.3
      freshness: 0.15
      equipment: 0.15
    complexity_thresholds:
      simple_below: 20
      complex_above: 45
"""

from __future__ import annotations

import dataclasses as dc
import os
from typing import Dict, Optional

import yaml

from .errors import ConfigError
from .logging_utils import get_logger

logger = get_logger(__name__)

SETTINGS_FILENAME = "planner.yaml"
PLANNING_MODES = ("meals", "courses")


@dc.dataclass
class ConstraintWeights:
    availability: float = 0.2
    complexity: float = 0.2
    advance_prep: float = 0.3
    freshness: float = 0.15
    equipment: float = 0.15

    def normalized(self) -> Dict[str, float]:
        """Return the weights scaled to sum to 1.0 so the combined score stays in [0, 1]."""
        raw = dc.asdict(self)
        total = sum(raw.values())
        return {name: value / total for name, value in raw.items()}

    def validate(self) -> None:
        for name, value in dc.asdict(self).items():
            if value < 0:
                raise ConfigError(f"Constraint weight '{name}' must be non-negative, got {value}")
        if sum(dc.asdict(self).values()) <= 0:
            raise ConfigError("At least one constraint weight must be positive")


@dc.dataclass
class ComplexityThresholds:
    simple_below: float = 20.0
    complex_above: float = 45.0

    def validate(self) -> None:
        if self.simple_below > self.complex_above:
            raise ConfigError(
                f"simple_below ({self.simple_below}) cannot exceed complex_above ({self.complex_above})"
            )


@dc.dataclass
class PlannerSettings:
    weights: ConstraintWeights = dc.field(default_factory=ConstraintWeights)
    complexity_thresholds: ComplexityThresholds = dc.field(default_factory=ComplexityThresholds)
    default_weeknight_minutes: int = 45
    minimum_recipes: int = 1
    require_monday_start: bool = True
    planning_mode: str = "meals"
    cuisine_variety_weight: float = 0.15    # 0 = ignore cuisine history

    def validate(self) -> None:
        self.weights.validate()
        self.complexity_thresholds.validate()
        if not 0.0 <= self.cuisine_variety_weight <= 1.0:
            raise ConfigError(
                f"cuisine_variety_weight must be between 0 and 1, got {self.cuisine_variety_weight}"
            )
        if self.planning_mode not in PLANNING_MODES:
            raise ConfigError(
                f"planning_mode must be one of {', '.join(PLANNING_MODES)}, got '{self.planning_mode}'"
            )
        if self.minimum_recipes < 1:
            raise ConfigError(f"minimum_recipes must be at least 1, got {self.minimum_recipes}")
        if self.default_weeknight_minutes <= 0:
            raise ConfigError(
                f"default_weeknight_minutes must be positive, got {self.default_weeknight_minutes}"
            )

    @staticmethod
    def from_dict(d: Dict) -> "PlannerSettings":
        try:
            w = d.get("weights") or {}
            t = d.get("complexity_thresholds") or {}
            defaults_w = ConstraintWeights()
            defaults_t = ComplexityThresholds()
            settings = PlannerSettings(
                weights=ConstraintWeights(
                    availability=float(w.get("availability", defaults_w.availability)),
                    complexity=float(w.get("complexity", defaults_w.complexity)),
                    advance_prep=float(w.get("advance_prep", defaults_w.advance_prep)),
                    freshness=float(w.get("freshness", defaults_w.freshness)),
                    equipment=float(w.get("equipment", defaults_w.equipment)),
                ),
                complexity_thresholds=ComplexityThresholds(
                    simple_below=float(t.get("simple_below", defaults_t.simple_below)),
                    complex_above=float(t.get("complex_above", defaults_t.complex_above)),
                ),
                default_weeknight_minutes=int(d.get("default_weeknight_minutes", 45)),
                minimum_recipes=int(d.get("minimum_recipes", 1)),
                require_monday_start=bool(d.get("require_monday_start", True)),
                planning_mode=str(d.get("planning_mode", "meals")).lower(),
                cuisine_variety_weight=float(d.get("cuisine_variety_weight", 0.15)),
            )
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigError(f"Malformed planner settings: {e}") from e
        settings.validate()
        return settings


def load_settings(path: Optional[str] = None) -> PlannerSettings:
    """
    Load planner settings from YAML, or fall back to defaults.

    Priority:
    1. `path` if provided and exists
    2. planner.yaml in current working directory
    3. Built-in defaults
    """
    cfg_path = None

    if path:
        if os.path.exists(path):
            cfg_path = path
        else:
            logger.warning("Settings file '%s' not found. Using defaults.", path)
    else:
        candidate = os.path.join(os.getcwd(), SETTINGS_FILENAME)
        if os.path.exists(candidate):
            cfg_path = candidate

    if not cfg_path:
        logger.info("No %s found. Using built-in defaults.", SETTINGS_FILENAME)
        return PlannerSettings()

    with open(cfg_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {cfg_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{cfg_path} must contain a mapping at the top level")

    settings = PlannerSettings.from_dict(data)
    logger.info(
        "Settings loaded from %s: mode=%s, minimum_recipes=%d, weights=%s",
        cfg_path,
        settings.planning_mode,
        settings.minimum_recipes,
        dc.asdict(settings.weights),
    )
    return settings
