import datetime as dt

import pytest

from mealrotation import MealSlot, MealType, RecipeForPlanning, UserConstraints

# Week of Monday 2025-10-20
MONDAY = dt.date(2025, 10, 20)
TUESDAY = dt.date(2025, 10, 21)
WEDNESDAY = dt.date(2025, 10, 22)
SATURDAY = dt.date(2025, 10, 25)


def make_recipe(
    rid,
    ingredients=6,
    steps=4,
    prep=10,
    cook=20,
    advance_prep=None,
    **kwargs,
):
    return RecipeForPlanning(
        id=rid,
        title=kwargs.pop("title", f"Recipe {rid}"),
        ingredients_count=ingredients,
        instructions_count=steps,
        prep_time_min=prep,
        cook_time_min=cook,
        advance_prep_hours=advance_prep,
        **kwargs,
    )


def slot_on(date, meal_type=MealType.DINNER):
    return MealSlot(date=date, meal_type=meal_type)


@pytest.fixture
def weeknight_45():
    return UserConstraints(weeknight_availability_minutes=45)


@pytest.fixture
def seven_favorites():
    return [make_recipe(f"r{i}", ingredients=5 + i, steps=3 + i) for i in range(1, 8)]
