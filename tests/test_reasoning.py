import datetime as dt

from conftest import MONDAY, SATURDAY, TUESDAY, WEDNESDAY, make_recipe, slot_on
from mealrotation import MealType, UserConstraints, generate_reasoning_text
from mealrotation.models import DAY_NAMES

JARGON = ("score", "algorithm", "constraint")


def _samples():
    return [
        make_recipe("easy"),
        make_recipe("hard", ingredients=40, steps=50, prep=30, cook=60),
        make_recipe("marinated", advance_prep=12),
        make_recipe("unknown", prep=None, cook=None),
    ]


def test_reasoning_names_weekday_and_never_a_date(weeknight_45):
    for offset in range(7):
        date = MONDAY + dt.timedelta(days=offset)
        for recipe in _samples():
            for meal_type in (MealType.BREAKFAST, MealType.DINNER):
                text = generate_reasoning_text(recipe, slot_on(date, meal_type), weeknight_45)
                assert DAY_NAMES[offset] in text
                assert "2025-10" not in text
                assert date.isoformat() not in text


def test_reasoning_is_short_and_jargon_free(weeknight_45):
    for offset in range(7):
        slot = slot_on(MONDAY + dt.timedelta(days=offset))
        for recipe in _samples():
            text = generate_reasoning_text(recipe, slot, weeknight_45)
            assert 20 <= len(text) <= 120, text
            lowered = text.lower()
            for word in JARGON:
                assert word not in lowered


def test_advance_prep_message_names_hours_and_prior_day(weeknight_45):
    recipe = make_recipe("marinated", advance_prep=4)
    text = generate_reasoning_text(recipe, slot_on(WEDNESDAY), weeknight_45)
    assert text == "Prep Tuesday night for Wednesday: Requires 4-hour marinade"

    short = make_recipe("short", advance_prep=2)
    text = generate_reasoning_text(short, slot_on(MONDAY), weeknight_45)
    assert text == "Prep Sunday night for Monday: Requires 2-hour advance prep"


def test_quick_weeknight_message(weeknight_45):
    text = generate_reasoning_text(make_recipe("easy"), slot_on(TUESDAY), weeknight_45)
    assert text == "Assigned to Tuesday: Quick weeknight meal (Simple recipe, 30min total time)"


def test_quick_weeknight_uses_default_budget_without_preferences():
    text = generate_reasoning_text(make_recipe("easy"), slot_on(TUESDAY), UserConstraints())
    assert "Quick weeknight meal" in text


def test_weekend_message_includes_label_and_time(weeknight_45):
    recipe = make_recipe("hard", ingredients=40, steps=50, prep=30, cook=60)
    text = generate_reasoning_text(recipe, slot_on(SATURDAY), weeknight_45)
    assert text == "Assigned to Saturday: More prep time available (Complex recipe, 90min total time)"


def test_fallback_message(weeknight_45):
    hard = make_recipe("hard", ingredients=40, steps=50, prep=30, cook=60)
    assert (
        generate_reasoning_text(hard, slot_on(TUESDAY), weeknight_45)
        == "Best fit for Tuesday based on your preferences"
    )
    easy = make_recipe("easy")
    assert (
        generate_reasoning_text(easy, slot_on(SATURDAY), weeknight_45)
        == "Best fit for Saturday based on your preferences"
    )
