import datetime as dt

import pytest

from conftest import MONDAY, SATURDAY, TUESDAY, WEDNESDAY, make_recipe, slot_on
from mealrotation import (
    Complexity,
    ComplexityThresholds,
    ConstraintKind,
    ConstraintWeights,
    DayAssignment,
    DietaryKind,
    DietaryRestriction,
    MealType,
    RotationState,
    UserConstraints,
    classify_complexity,
    combined_score,
    complexity_score,
    evaluate_all,
    score_recipe_for_slot,
)
from mealrotation.constraints import (
    CONFLICT_SCORE,
    evaluate_advance_prep,
    evaluate_availability,
    evaluate_complexity,
    evaluate_dietary,
    evaluate_equipment,
    evaluate_freshness,
    infer_equipment,
    variety_score,
    with_variety,
)


def _complex_recipe():
    return make_recipe("complex", ingredients=40, steps=50, prep=30, cook=60)


def test_well_matched_recipe_scores_at_least_half_everywhere(weeknight_45):
    recipe = make_recipe("easy", ingredients=6, steps=4, prep=10, cook=20)
    scores = evaluate_all(recipe, slot_on(TUESDAY), weeknight_45)

    assert set(scores) == set(ConstraintKind)
    for kind, value in scores.items():
        assert value >= 0.5, kind


def test_complex_recipe_classification_and_day_fit(weeknight_45):
    recipe = _complex_recipe()

    assert complexity_score(recipe) == pytest.approx(50.0)
    assert classify_complexity(recipe) is Complexity.COMPLEX
    assert evaluate_complexity(recipe, slot_on(TUESDAY), weeknight_45) < 0.4
    assert evaluate_complexity(recipe, slot_on(SATURDAY), weeknight_45) >= 0.8


def test_complexity_buckets_and_label_override():
    simple = make_recipe("s", ingredients=5, steps=3, cook=10)
    moderate = make_recipe("m", ingredients=20, steps=20, cook=30)
    labelled = make_recipe("l", ingredients=5, steps=3, cook=10, complexity="Complex")

    assert classify_complexity(simple) is Complexity.SIMPLE
    assert classify_complexity(moderate) is Complexity.MODERATE
    assert classify_complexity(labelled) is Complexity.COMPLEX


def test_complexity_thresholds_are_configurable():
    moderate = make_recipe("m", ingredients=20, steps=20, cook=30)
    strict = ComplexityThresholds(simple_below=10.0, complex_above=22.0)
    assert classify_complexity(moderate, strict) is Complexity.COMPLEX


def test_advance_prep_raises_complexity_score():
    plain = make_recipe("a")
    marinated = make_recipe("b", advance_prep=8)
    assert complexity_score(marinated) == pytest.approx(complexity_score(plain) + 30.0)


def test_availability_fits_budget(weeknight_45):
    recipe = make_recipe("quick", prep=10, cook=15)
    assert evaluate_availability(recipe, slot_on(TUESDAY), weeknight_45) > 0.7


def test_availability_over_budget_is_low(weeknight_45):
    recipe = make_recipe("slow", prep=30, cook=60)
    assert evaluate_availability(recipe, slot_on(TUESDAY), weeknight_45) < 0.3


def test_availability_falls_off_gradually(weeknight_45):
    slot = slot_on(TUESDAY)
    scores = [
        evaluate_availability(make_recipe(str(total), prep=0, cook=total), slot, weeknight_45)
        for total in (20, 45, 50, 55, 60)
    ]
    assert scores == sorted(scores, reverse=True)
    assert len(set(scores)) == len(scores)


def test_availability_weekend_and_unconstrained(weeknight_45):
    slow = make_recipe("slow", prep=60, cook=180)
    assert evaluate_availability(slow, slot_on(SATURDAY), weeknight_45) >= 0.8
    assert evaluate_availability(slow, slot_on(TUESDAY), UserConstraints()) == 1.0


def test_availability_unknown_time_is_neutral(weeknight_45):
    unknown = make_recipe("unknown", prep=None, cook=None)
    assert evaluate_availability(unknown, slot_on(TUESDAY), weeknight_45) == pytest.approx(0.6)


def test_advance_prep_never_penalizes_plain_recipes(weeknight_45):
    recipe = make_recipe("plain")
    for offset in range(7):
        slot = slot_on(MONDAY + dt.timedelta(days=offset))
        assert evaluate_advance_prep(recipe, slot, weeknight_45) >= 0.5


def test_advance_prep_needs_lead_time(weeknight_45):
    overnight = make_recipe("overnight", advance_prep=8)
    assert evaluate_advance_prep(overnight, slot_on(MONDAY), weeknight_45) < evaluate_advance_prep(
        overnight, slot_on(TUESDAY), weeknight_45
    )

    two_day = make_recipe("two_day", advance_prep=24)
    assert evaluate_advance_prep(two_day, slot_on(TUESDAY), weeknight_45) < evaluate_advance_prep(
        two_day, slot_on(WEDNESDAY), weeknight_45
    )

    short = make_recipe("short", advance_prep=2)
    assert evaluate_advance_prep(short, slot_on(MONDAY), weeknight_45) == 1.0


def test_dietary_is_binary():
    vegan = UserConstraints(dietary_restrictions=[DietaryRestriction(DietaryKind.VEGAN)])
    tagged = make_recipe("tagged", dietary_tags=["vegan"])
    untagged = make_recipe("untagged")

    assert evaluate_dietary(untagged, slot_on(TUESDAY), UserConstraints()) == 1.0
    assert evaluate_dietary(tagged, slot_on(TUESDAY), vegan) == 1.0
    assert evaluate_dietary(untagged, slot_on(TUESDAY), vegan) == 0.0


def test_failed_dietary_gate_zeroes_combined_score():
    vegan = UserConstraints(dietary_restrictions=[DietaryRestriction(DietaryKind.VEGAN)])
    assert score_recipe_for_slot(make_recipe("untagged"), slot_on(TUESDAY), vegan) == 0.0


def test_freshness_prefers_early_week(weeknight_45):
    fresh = make_recipe("salad", freshness="high")
    early = evaluate_freshness(fresh, slot_on(MONDAY), weeknight_45)
    late = evaluate_freshness(fresh, slot_on(SATURDAY), weeknight_45)
    assert early >= 0.5
    assert early > late

    for day in (MONDAY, TUESDAY):
        assert evaluate_freshness(make_recipe("any"), slot_on(day), weeknight_45) >= 0.5


def test_equipment_inference():
    assert infer_equipment(make_recipe("a", title="Baked Ziti")) == {"oven"}
    assert infer_equipment(make_recipe("b", title="Slow Cooker Chili")) == {"slow_cooker"}
    assert infer_equipment(make_recipe("c", title="Stir Fry")) == {"stovetop"}
    assert infer_equipment(make_recipe("d", title="Stew", equipment=["Oven"])) == {"oven"}


def test_equipment_conflict_on_same_day(weeknight_45):
    roast = make_recipe("roast", title="Roast Chicken")
    ziti = make_recipe("ziti", title="Baked Ziti")
    stir_fry = make_recipe("stir", title="Stir Fry")
    slot = slot_on(TUESDAY)

    assert evaluate_equipment(ziti, slot, weeknight_45, []) >= 0.9

    lunch = DayAssignment(date=TUESDAY, meal_type=MealType.LUNCH, recipe=roast)
    assert evaluate_equipment(ziti, slot, weeknight_45, [lunch]) == CONFLICT_SCORE
    assert evaluate_equipment(stir_fry, slot, weeknight_45, [lunch]) == 1.0

    other_day = DayAssignment(date=MONDAY, meal_type=MealType.DINNER, recipe=roast)
    assert evaluate_equipment(ziti, slot, weeknight_45, [other_day]) == 1.0


def test_combined_score_is_weighted_average():
    scores = {
        ConstraintKind.AVAILABILITY: 1.0,
        ConstraintKind.COMPLEXITY: 0.5,
        ConstraintKind.ADVANCE_PREP: 1.0,
        ConstraintKind.DIETARY: 1.0,
        ConstraintKind.FRESHNESS: 1.0,
        ConstraintKind.EQUIPMENT: 1.0,
    }
    weights = ConstraintWeights(
        availability=1.0, complexity=1.0, advance_prep=0.0, freshness=0.0, equipment=0.0
    )
    assert combined_score(scores, weights) == pytest.approx(0.75)
    assert 0.0 <= combined_score(scores) <= 1.0


def test_simple_recipe_outscores_complex_on_weeknight(weeknight_45):
    easy = make_recipe("easy")
    hard = _complex_recipe()
    slot = slot_on(TUESDAY)
    assert score_recipe_for_slot(easy, slot, weeknight_45) > score_recipe_for_slot(hard, slot, weeknight_45)


def test_variety_prefers_unused_cuisines():
    state = RotationState()
    state.increment_cuisine_usage("italian")
    state.increment_cuisine_usage("italian")
    slot = slot_on(TUESDAY)

    assert variety_score(make_recipe("pad_thai", cuisine="Thai"), slot, state) == 1.0
    assert variety_score(make_recipe("lasagna", cuisine="Italian"), slot, state) == pytest.approx(1 / 3)
    assert variety_score(make_recipe("plain"), slot, state) == 1.0


def test_variety_spaces_out_complex_meals():
    state = RotationState()
    state.update_last_complex_meal_date(MONDAY.isoformat())
    hard = _complex_recipe()

    assert variety_score(hard, slot_on(TUESDAY), state) == pytest.approx(0.5)
    assert variety_score(hard, slot_on(WEDNESDAY), state) == 1.0
    assert variety_score(make_recipe("easy"), slot_on(TUESDAY), state) == 1.0


def test_with_variety_keeps_dietary_gate():
    assert with_variety(0.0, 1.0, 0.15) == 0.0
    assert with_variety(0.8, 0.5, 0.0) == pytest.approx(0.8)
    assert with_variety(0.8, 0.5, 1.0) == pytest.approx(0.4)
