"""
Plain-language explanations for meal assignments.

Messages are built from the same signals the scoring uses (day of week,
total time, advance prep, complexity) but never mention scores or internals.
Every message names the weekday and never prints a date.

First match wins:
1. Advance prep   -> "Prep Tuesday night for Wednesday: Requires 4-hour marinade"
2. Quick weeknight -> "Assigned to Tuesday: Quick weeknight meal (Simple recipe, 30min total time)"
3. Weekend effort -> "Assigned to Saturday: More prep time available (Complex recipe, 75min total time)"
4. Fallback       -> "Best fit for Wednesday based on your preferences"
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from .config import ComplexityThresholds
from .constraints import classify_complexity
from .models import DAY_NAMES, Complexity, MealSlot, RecipeForPlanning, UserConstraints

DEFAULT_WEEKNIGHT_MINUTES = 45


def _prep_message(hours: int, slot: MealSlot) -> str:
    day_before = DAY_NAMES[(slot.date - dt.timedelta(days=1)).weekday()]
    kind = "marinade" if hours >= 4 else "advance prep"
    return f"Prep {day_before} night for {slot.day_name}: Requires {hours}-hour {kind}"


def generate_reasoning_text(
    recipe: RecipeForPlanning,
    slot: MealSlot,
    user_constraints: UserConstraints,
    default_weeknight_minutes: int = DEFAULT_WEEKNIGHT_MINUTES,
    thresholds: Optional[ComplexityThresholds] = None,
) -> str:
    day_name = slot.day_name
    total_time = recipe.total_time_min
    complexity = classify_complexity(recipe, thresholds)

    if recipe.requires_advance_prep:
        return _prep_message(int(recipe.advance_prep_hours), slot)

    if not slot.is_weekend():
        budget = user_constraints.weeknight_availability_minutes or default_weeknight_minutes
        if total_time is not None and total_time <= budget and complexity is Complexity.SIMPLE:
            return (
                f"Assigned to {day_name}: Quick weeknight meal "
                f"(Simple recipe, {total_time}min total time)"
            )
    elif complexity in (Complexity.COMPLEX, Complexity.MODERATE):
        detail = f"{complexity.label} recipe"
        if total_time is not None:
            detail = f"{detail}, {total_time}min total time"
        return f"Assigned to {day_name}: More prep time available ({detail})"

    return f"Best fit for {day_name} based on your preferences"
