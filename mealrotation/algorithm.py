"""
Weekly meal assignment.

generate_week_plan() fills every (day, meal type) slot of a 7-day window:

1. Drop favorites that break the user's dietary restrictions. In courses
   mode, also drop recipes that fit no course.
2. Forget used ids that are no longer plannable favorites.
3. Build the slot list, ordered by date and then by meal type.
4. For each slot:
   - candidates = favorites not yet used in the current rotation cycle
     (courses mode: minus main courses already served this week)
   - if none are left, close the cycle and start over with every favorite
   - score candidates with the weighted constraint set, scaled by cuisine
     and complexity variety, and take the best
   - on exact ties the seeded shuffle order decides
   - record the assignment with its reasoning, mark the recipe used
5. Close out the rotation state once and hand it back with the plan.

Same inputs plus the same seed always give the same plan.
"""

from __future__ import annotations

import copy
import dataclasses as dc
import datetime as dt
import json
import random
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .config import PlannerSettings
from .constraints import classify_complexity, score_recipe_for_slot, variety_score, with_variety
from .dietary import filter_by_dietary_restrictions, unverifiable_recipe_ids
from .errors import InsufficientRecipesError, InvalidDateError
from .logging_utils import get_logger
from .models import (
    MEAL_TYPES_BY_MODE,
    Complexity,
    DayAssignment,
    DietaryKind,
    MealAssignment,
    MealSlot,
    MealType,
    RecipeForPlanning,
    UserConstraints,
)
from .reasoning import generate_reasoning_text
from .rotation import RotationState, RotationSystem

logger = get_logger(__name__)

DAYS_PER_WEEK = 7


@dc.dataclass
class WeekPlan:
    start_date: str
    seed: int
    assignments: List[MealAssignment]
    rotation_state: RotationState
    warnings: List[str] = dc.field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "start_date": self.start_date,
            "seed": self.seed,
            "assignments": [a.to_dict() for a in self.assignments],
            "rotation_state": self.rotation_state.to_dict(),
            "warnings": list(self.warnings),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)


# ---------- Planning Helpers ----------

def parse_week_start(start_date: str, require_monday: bool = True) -> dt.date:
    try:
        start = dt.date.fromisoformat(start_date)
    except (TypeError, ValueError) as e:
        raise InvalidDateError(f"Week start '{start_date}' is not an ISO date (YYYY-MM-DD)") from e
    if require_monday and start.weekday() != 0:
        raise InvalidDateError(
            f"Meal plan start date {start.isoformat()} must be a Monday "
            f"(found {start.strftime('%A')})"
        )
    return start


def generate_slots(start: dt.date, meal_types: Sequence[MealType]) -> List[MealSlot]:
    return [
        MealSlot(date=start + dt.timedelta(days=offset), meal_type=meal_type)
        for offset in range(DAYS_PER_WEEK)
        for meal_type in meal_types
    ]


def select_accompaniment(
    main: RecipeForPlanning,
    accompaniments: Sequence[RecipeForPlanning],
    rng: random.Random,
) -> Optional[RecipeForPlanning]:
    """
    Pick a side dish for a recipe that takes one.

    Limited to the recipe's preferred categories when it lists any.
    Sides are not rotation-tracked and may repeat.
    """
    if not main.accepts_accompaniment or not accompaniments:
        return None

    if main.preferred_accompaniments:
        wanted = {c.lower() for c in main.preferred_accompaniments}
        compatible = [
            a for a in accompaniments
            if a.accompaniment_category and a.accompaniment_category.lower() in wanted
        ]
    else:
        compatible = list(accompaniments)

    if not compatible:
        return None
    return rng.choice(compatible)


def pick_best(scored: Sequence[Tuple[float, RecipeForPlanning]]) -> RecipeForPlanning:
    """Highest score wins; exact ties go to the earliest entry."""
    best_score, best = scored[0]
    for score, recipe in scored[1:]:
        if score > best_score:
            best_score, best = score, recipe
    return best


def _dedupe(recipes: Sequence[RecipeForPlanning]) -> List[RecipeForPlanning]:
    seen = set()
    out: List[RecipeForPlanning] = []
    for r in recipes:
        if r.id in seen:
            logger.warning("Duplicate favorite %s ignored", r.id)
            continue
        seen.add(r.id)
        out.append(r)
    return out


def course_key(recipe_type: str) -> str:
    """Normalize a recipe_type: "Main Course" and "main-course" both become "main_course"."""
    return "_".join(recipe_type.strip().lower().replace("-", " ").split())


def _build_pools(
    favorites: Sequence[RecipeForPlanning], meal_types: Sequence[MealType], mode: str
) -> Tuple[Dict[MealType, List[RecipeForPlanning]], List[RecipeForPlanning]]:
    """
    Split favorites into one pool per meal type.

    Returns the pools and the favorites that fit none of them. In meals mode
    every favorite fits every slot. In courses mode a recipe only fills the
    course named by its recipe_type, and main courses must cover a whole week
    without repeating.
    """
    if mode != "courses":
        return {mt: list(favorites) for mt in meal_types}, []

    pools: Dict[MealType, List[RecipeForPlanning]] = {mt: [] for mt in meal_types}
    unplaced: List[RecipeForPlanning] = []
    by_value = {mt.value: mt for mt in meal_types}
    for r in favorites:
        mt = by_value.get(course_key(r.recipe_type))
        if mt is None:
            unplaced.append(r)
        else:
            pools[mt].append(r)

    for mt in meal_types:
        minimum = DAYS_PER_WEEK if mt is MealType.MAIN_COURSE else 1
        if len(pools[mt]) < minimum:
            raise InsufficientRecipesError(minimum=minimum, current=len(pools[mt]), course=mt.value)
    return pools, unplaced


# ---------- Generation ----------

def generate_week_plan(
    start_date: str,
    favorites: Sequence[RecipeForPlanning],
    constraints: UserConstraints,
    rotation_state: RotationState,
    seed: Optional[int] = None,
    settings: Optional[PlannerSettings] = None,
) -> WeekPlan:
    """
    Assign a recipe to every slot of the week starting at `start_date`.

    Raises:
        InvalidDateError: start date unparsable, or not a Monday when required
        InvalidPreferencesError: malformed user constraints
        InsufficientRecipesError: too few favorites left after dietary filtering
    """
    settings = settings or PlannerSettings()
    constraints.validate()
    start = parse_week_start(start_date, settings.require_monday_start)

    if seed is None:
        seed = random.randrange(0, 10**9)
        logger.info("No seed provided. Using random seed: %d", seed)
    rng = random.Random(seed)

    favorites = _dedupe(favorites)
    sides = [r for r in favorites if r.is_accompaniment]
    candidates = [r for r in favorites if not r.is_accompaniment]

    restrictions = constraints.dietary_restrictions
    filtered = filter_by_dietary_restrictions(candidates, restrictions)
    sides = filter_by_dietary_restrictions(sides, restrictions)

    warnings: List[str] = []
    unchecked = unverifiable_recipe_ids(filtered + sides, restrictions)
    if unchecked:
        customs = ", ".join(r.text or "" for r in restrictions if r.kind is DietaryKind.CUSTOM)
        warnings.append(
            f"Could not check '{customs}' against {len(unchecked)} recipe(s) "
            f"without ingredient details: {', '.join(unchecked)}"
        )

    # Shuffle once; this order settles exact score ties
    rng.shuffle(filtered)

    mode = settings.planning_mode
    meal_types = MEAL_TYPES_BY_MODE[mode]
    pools, unplaced = _build_pools(filtered, meal_types, mode)
    if unplaced:
        msg = (
            f"Skipped {len(unplaced)} recipe(s) that are not an appetizer, main course or dessert: "
            f"{', '.join(r.id for r in unplaced)}"
        )
        logger.warning(msg)
        warnings.append(msg)
        skipped = {r.id for r in unplaced}
        filtered = [r for r in filtered if r.id not in skipped]

    if len(filtered) < settings.minimum_recipes:
        raise InsufficientRecipesError(minimum=settings.minimum_recipes, current=len(filtered))

    favorite_ids = [r.id for r in filtered]
    slots = generate_slots(start, meal_types)

    state = copy.deepcopy(rotation_state)
    dropped = state.retain_only(favorite_ids)
    if dropped:
        logger.info(
            "Dropped %d used recipe(s) no longer in the plannable favorites: %s",
            len(dropped),
            ", ".join(dropped),
        )
    state.total_favorite_count = len(filtered)
    reset_stamp = dt.datetime.combine(start, dt.time.min, tzinfo=dt.timezone.utc).isoformat()
    cycle_assigned: List[str] = []
    day_assignments: List[DayAssignment] = []
    assignments: List[MealAssignment] = []
    week_mains: Set[str] = set()
    resets = 0

    logger.info(
        "Generating %d slots from %d favorites (cycle %d, %d already used, seed %d)",
        len(slots),
        len(filtered),
        state.cycle_number,
        state.used_count(),
        seed,
    )

    for slot in slots:
        unique_main = mode == "courses" and slot.meal_type is MealType.MAIN_COURSE
        pool = pools[slot.meal_type]
        if unique_main:
            pool = [r for r in pool if r.id not in week_mains]
        available = [r for r in pool if not state.is_used(r.id)]

        if not available:
            if not RotationSystem.filter_available_recipes(favorite_ids, state):
                state.reset_cycle(reset_stamp)
                cycle_assigned = []
                resets += 1
                logger.info("Rotation exhausted at %s %s; starting cycle %d",
                            slot.date.isoformat(), slot.meal_type.value, state.cycle_number)
            else:
                msg = (
                    f"All {slot.meal_type.label.lower()} recipes already used this rotation; "
                    f"repeating one on {slot.day_name}"
                )
                logger.warning(msg)
                warnings.append(msg)
            available = list(pool)

        same_day = [a for a in day_assignments if a.date == slot.date]
        scored = [
            (
                with_variety(
                    score_recipe_for_slot(
                        r,
                        slot,
                        constraints,
                        same_day,
                        settings.weights,
                        settings.complexity_thresholds,
                    ),
                    variety_score(r, slot, state, settings.complexity_thresholds),
                    settings.cuisine_variety_weight,
                ),
                r,
            )
            for r in available
        ]
        chosen = pick_best(scored)

        side = select_accompaniment(chosen, sides, rng)
        reasoning = generate_reasoning_text(
            chosen,
            slot,
            constraints,
            settings.default_weeknight_minutes,
            settings.complexity_thresholds,
        )

        assignments.append(
            MealAssignment(
                date=slot.date.isoformat(),
                meal_type=slot.meal_type.value,
                recipe_id=chosen.id,
                prep_required=chosen.requires_advance_prep,
                reasoning=reasoning,
                accompaniment_recipe_id=side.id if side else None,
            )
        )
        day_assignments.append(DayAssignment(date=slot.date, meal_type=slot.meal_type, recipe=chosen))

        state.mark_used(chosen.id)
        state.increment_cuisine_usage(chosen.cuisine)
        if classify_complexity(chosen, settings.complexity_thresholds) is Complexity.COMPLEX:
            state.update_last_complex_meal_date(slot.date.isoformat())
        if unique_main:
            week_mains.add(chosen.id)
        if chosen.id not in cycle_assigned:
            cycle_assigned.append(chosen.id)
        logger.debug("%s %s -> %s", slot.date.isoformat(), slot.meal_type.value, chosen.id)

    final_state = RotationSystem.update_after_generation(
        cycle_assigned, len(filtered), state, started_at=reset_stamp
    )

    logger.info(
        "Generated %d assignments for week of %s (%d mid-plan rotation reset(s), now cycle %d)",
        len(assignments),
        start.isoformat(),
        resets,
        final_state.cycle_number,
    )

    return WeekPlan(
        start_date=start.isoformat(),
        seed=seed,
        assignments=assignments,
        rotation_state=final_state,
        warnings=warnings,
    )
