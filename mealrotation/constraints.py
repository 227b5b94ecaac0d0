"""
Recipe-to-slot scoring.

Six independent heuristics, each returning a score in [0.0, 1.0]:

- availability:  does total time fit the user's weeknight budget?
- complexity:    simple food on weeknights, ambitious food on weekends
- advance_prep:  is there lead time for marinades, rises, chills?
- dietary:       hard gate, 1.0 or 0.0
- freshness:     perishable recipes early in the week
- equipment:     no two oven (slow cooker, grill) dishes on the same day

The set is closed. combined_score() folds them into one number: a weighted
sum of the five soft scores, multiplied by the dietary gate.

variety_score() sits outside the set. It reads the rotation history (cuisine
usage, last complex meal) and the planner blends it in with with_variety().
"""

from __future__ import annotations

import datetime as dt
import enum
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Sequence, Set

from .config import ComplexityThresholds, ConstraintWeights
from .dietary import satisfies_all_restrictions
from .models import (
    Complexity,
    DayAssignment,
    MealSlot,
    RecipeForPlanning,
    UserConstraints,
)

if TYPE_CHECKING:
    from .rotation import RotationState


class ConstraintKind(enum.Enum):
    AVAILABILITY = "availability"
    COMPLEXITY = "complexity"
    ADVANCE_PREP = "advance_prep"
    DIETARY = "dietary"
    FRESHNESS = "freshness"
    EQUIPMENT = "equipment"


# ---------- Complexity ----------

def complexity_score(recipe: RecipeForPlanning) -> float:
    """
    ingredients*0.3 + steps*0.4 + cook_minutes*0.3 + advance_prep_multiplier*0.3

    advance_prep_multiplier: 0 (none), 50 (< 4 h), 100 (>= 4 h)
    """
    hours = recipe.advance_prep_hours or 0
    if hours <= 0:
        prep_multiplier = 0.0
    elif hours < 4:
        prep_multiplier = 50.0
    else:
        prep_multiplier = 100.0

    return (
        recipe.ingredients_count * 0.3
        + recipe.instructions_count * 0.4
        + (recipe.cook_time_min or 0) * 0.3
        + prep_multiplier * 0.3
    )


def classify_complexity(
    recipe: RecipeForPlanning, thresholds: Optional[ComplexityThresholds] = None
) -> Complexity:
    if recipe.complexity:
        return Complexity.parse(recipe.complexity)

    thresholds = thresholds or ComplexityThresholds()
    score = complexity_score(recipe)
    if score < thresholds.simple_below:
        return Complexity.SIMPLE
    if score <= thresholds.complex_above:
        return Complexity.MODERATE
    return Complexity.COMPLEX


# ---------- Equipment ----------

EXCLUSIVE_EQUIPMENT = {"oven", "slow_cooker", "grill"}

EQUIPMENT_KEYWORDS = [
    ("slow cook", "slow_cooker"),
    ("crockpot", "slow_cooker"),
    ("bake", "oven"),
    ("roast", "oven"),
    ("casserole", "oven"),
    ("lasagna", "oven"),
    ("grill", "grill"),
    ("bbq", "grill"),
]

CONFLICT_SCORE = 0.2


def infer_equipment(recipe: RecipeForPlanning) -> Set[str]:
    if recipe.equipment:
        return {e.lower() for e in recipe.equipment}
    title = recipe.title.lower()
    found = {equipment for keyword, equipment in EQUIPMENT_KEYWORDS if keyword in title}
    return found or {"stovetop"}


# ---------- Constraints ----------

def evaluate_availability(
    recipe: RecipeForPlanning, slot: MealSlot, user_constraints: UserConstraints
) -> float:
    if slot.is_weekend():
        return 1.0

    budget = user_constraints.weeknight_availability_minutes
    if budget is None:
        return 1.0

    total = recipe.total_time_min
    if total is None:
        return 0.6

    ratio = total / budget
    if ratio <= 1.0:
        # Full budget lands at 0.7, quicker recipes climb toward 1.0
        return 1.0 - ratio * 0.3
    # Slides down with the overage: 40% over budget is already below 0.3
    return max(0.0, 0.7 - (ratio - 1.0))


def evaluate_complexity(
    recipe: RecipeForPlanning,
    slot: MealSlot,
    user_constraints: UserConstraints,
    thresholds: Optional[ComplexityThresholds] = None,
) -> float:
    complexity = classify_complexity(recipe, thresholds)
    if slot.is_weekend():
        return {
            Complexity.COMPLEX: 1.0,
            Complexity.MODERATE: 0.85,
            Complexity.SIMPLE: 0.7,
        }[complexity]
    return {
        Complexity.SIMPLE: 1.0,
        Complexity.MODERATE: 0.75,
        Complexity.COMPLEX: 0.3,
    }[complexity]


def evaluate_advance_prep(
    recipe: RecipeForPlanning, slot: MealSlot, user_constraints: UserConstraints
) -> float:
    hours = recipe.advance_prep_hours or 0
    if hours <= 0:
        return 1.0

    day = slot.day_of_week()
    if hours < 4:
        # Same-day prep works
        return 1.0
    if hours < 24:
        # Needs the evening before; Monday means prepping on Sunday, outside the plan
        return 0.9 if day >= 2 else 0.5
    # Day-plus prep wants the weekend behind it
    return 0.8 if day >= 3 else 0.6


def evaluate_dietary(
    recipe: RecipeForPlanning, slot: MealSlot, user_constraints: UserConstraints
) -> float:
    if not user_constraints.dietary_restrictions:
        return 1.0
    if satisfies_all_restrictions(recipe, user_constraints.dietary_restrictions):
        return 1.0
    return 0.0


FRESHNESS_BANDS: Dict[Optional[str], Sequence[float]] = {
    # scores for days 1-3, 4-5, 6-7
    "high": (1.0, 0.6, 0.3),
    "medium": (0.9, 0.9, 0.6),
    "low": (0.8, 0.8, 0.8),
    None: (1.0, 0.85, 0.75),
}


def evaluate_freshness(
    recipe: RecipeForPlanning, slot: MealSlot, user_constraints: UserConstraints
) -> float:
    label = recipe.freshness.lower() if recipe.freshness else None
    early, mid, late = FRESHNESS_BANDS.get(label, FRESHNESS_BANDS[None])
    day = slot.day_of_week()
    if day <= 3:
        return early
    if day <= 5:
        return mid
    return late


def evaluate_equipment(
    recipe: RecipeForPlanning,
    slot: MealSlot,
    user_constraints: UserConstraints,
    day_assignments: Sequence[DayAssignment] = (),
) -> float:
    same_day = [a for a in day_assignments if a.date == slot.date]
    if not same_day:
        return 1.0

    needed = infer_equipment(recipe) & EXCLUSIVE_EQUIPMENT
    if not needed:
        return 1.0

    busy: Set[str] = set()
    for a in same_day:
        busy |= infer_equipment(a.recipe)
    return CONFLICT_SCORE if needed & busy else 1.0


# ---------- Combination ----------

def evaluate_all(
    recipe: RecipeForPlanning,
    slot: MealSlot,
    user_constraints: UserConstraints,
    day_assignments: Sequence[DayAssignment] = (),
    thresholds: Optional[ComplexityThresholds] = None,
) -> Dict[ConstraintKind, float]:
    return {
        ConstraintKind.AVAILABILITY: evaluate_availability(recipe, slot, user_constraints),
        ConstraintKind.COMPLEXITY: evaluate_complexity(recipe, slot, user_constraints, thresholds),
        ConstraintKind.ADVANCE_PREP: evaluate_advance_prep(recipe, slot, user_constraints),
        ConstraintKind.DIETARY: evaluate_dietary(recipe, slot, user_constraints),
        ConstraintKind.FRESHNESS: evaluate_freshness(recipe, slot, user_constraints),
        ConstraintKind.EQUIPMENT: evaluate_equipment(recipe, slot, user_constraints, day_assignments),
    }


def combined_score(
    scores: Mapping[ConstraintKind, float], weights: Optional[ConstraintWeights] = None
) -> float:
    normalized = (weights or ConstraintWeights()).normalized()
    soft = sum(
        normalized[kind.value] * value
        for kind, value in scores.items()
        if kind is not ConstraintKind.DIETARY
    )
    return scores[ConstraintKind.DIETARY] * soft


def variety_score(
    recipe: RecipeForPlanning,
    slot: MealSlot,
    rotation_state: "RotationState",
    thresholds: Optional[ComplexityThresholds] = None,
) -> float:
    """
    1 / (uses of the recipe's cuisine + 1), halved for a Complex recipe the
    day after another Complex meal. Recipes without a cuisine count as fresh.
    """
    score = 1.0 / (rotation_state.get_cuisine_usage(recipe.cuisine) + 1.0)
    last = rotation_state.last_complex_meal_date
    if last and classify_complexity(recipe, thresholds) is Complexity.COMPLEX:
        if last == (slot.date - dt.timedelta(days=1)).isoformat():
            score *= 0.5
    return score


def with_variety(score: float, variety: float, variety_weight: float) -> float:
    """Blend variety into a combined score; a failed dietary gate stays at 0."""
    return score * ((1.0 - variety_weight) + variety_weight * variety)


def score_recipe_for_slot(
    recipe: RecipeForPlanning,
    slot: MealSlot,
    user_constraints: UserConstraints,
    day_assignments: Sequence[DayAssignment] = (),
    weights: Optional[ConstraintWeights] = None,
    thresholds: Optional[ComplexityThresholds] = None,
) -> float:
    scores = evaluate_all(recipe, slot, user_constraints, day_assignments, thresholds)
    return combined_score(scores, weights)
