"""
Weekly meal rotation planner.

Fills a week of meal slots from a user's favorite recipes, scoring each
candidate against time, complexity, prep, dietary, freshness and equipment
heuristics, and rotating through favorites before repeating any.
"""

from .algorithm import WeekPlan, generate_week_plan, select_accompaniment
from .config import ConstraintWeights, ComplexityThresholds, PlannerSettings, load_settings
from .constraints import (
    ConstraintKind,
    classify_complexity,
    combined_score,
    complexity_score,
    evaluate_all,
    score_recipe_for_slot,
    variety_score,
)
from .dietary import filter_by_dietary_restrictions, unverifiable_recipe_ids
from .errors import (
    ConfigError,
    InsufficientRecipesError,
    InvalidDateError,
    InvalidPreferencesError,
    MealPlanningError,
    RotationStateError,
)
from .models import (
    Complexity,
    DayAssignment,
    DietaryKind,
    DietaryRestriction,
    MealAssignment,
    MealSlot,
    MealType,
    RecipeForPlanning,
    UserConstraints,
)
from .reasoning import generate_reasoning_text
from .rotation import RotationState, RotationSystem

__all__ = [
    # Planning
    'WeekPlan',
    'generate_week_plan',
    'select_accompaniment',
    # Settings
    'ConstraintWeights',
    'ComplexityThresholds',
    'PlannerSettings',
    'load_settings',
    # Scoring
    'ConstraintKind',
    'classify_complexity',
    'combined_score',
    'complexity_score',
    'evaluate_all',
    'score_recipe_for_slot',
    'variety_score',
    'generate_reasoning_text',
    # Dietary
    'filter_by_dietary_restrictions',
    'unverifiable_recipe_ids',
    # Rotation
    'RotationState',
    'RotationSystem',
    # Models
    'Complexity',
    'DayAssignment',
    'DietaryKind',
    'DietaryRestriction',
    'MealAssignment',
    'MealSlot',
    'MealType',
    'RecipeForPlanning',
    'UserConstraints',
    # Errors
    'MealPlanningError',
    'InsufficientRecipesError',
    'InvalidPreferencesError',
    'InvalidDateError',
    'RotationStateError',
    'ConfigError',
]
