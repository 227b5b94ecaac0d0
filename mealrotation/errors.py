"""
Planner errors.

Everything the engine raises derives from MealPlanningError, so callers can
catch one type at the boundary and turn it into a user-facing message.
"""

from __future__ import annotations

from typing import Optional


class MealPlanningError(Exception):
    """Base class for all planner failures."""


class InsufficientRecipesError(MealPlanningError):
    """Not enough favorites survive filtering to build a plan. Recoverable: add more recipes."""

    def __init__(self, minimum: int, current: int, course: Optional[str] = None):
        self.minimum = minimum
        self.current = current
        self.course = course
        if course:
            msg = (
                f"Insufficient recipes for {course}: need at least {minimum}, "
                f"but only have {current}"
            )
        else:
            msg = (
                f"Insufficient recipes: need at least {minimum} favorite recipes, "
                f"but only have {current}"
            )
        super().__init__(msg)


class InvalidPreferencesError(MealPlanningError, ValueError):
    pass


class InvalidDateError(MealPlanningError, ValueError):
    pass


class RotationStateError(MealPlanningError):
    """Stored rotation state could not be decoded."""


class ConfigError(MealPlanningError, ValueError):
    pass
