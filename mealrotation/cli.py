"""
Weekly Meal Rotation (command line)

- Reads favorite recipe cards from YAML files (./cards/*.yaml by default)
- Reads user preferences from YAML (weeknight minutes, dietary restrictions)
- Reads the previous rotation state from JSON (fresh rotation if missing or unreadable)
- Fills 7 days x 3 slots with the constraint-scored planner
- Outputs:
    - out/week_plan.csv
    - out/weekly_plan.md
    - out/rotation_state.json   (feed back in with --rotation next week)
"""

from __future__ import annotations

import argparse
import csv
import datetime as dt
import glob
import logging
import os
import random
import sys
from typing import Dict, List, Optional

import yaml

from .algorithm import WeekPlan, generate_week_plan
from .config import load_settings
from .errors import InvalidPreferencesError, MealPlanningError
from .logging_utils import init_logging
from .models import DAY_NAMES, RecipeForPlanning, UserConstraints
from .rotation import RotationState


# ---------- Input Loading ----------

def load_cards(cards_dir: str) -> List[RecipeForPlanning]:
    cards: Dict[str, RecipeForPlanning] = {}
    for path in sorted(glob.glob(os.path.join(cards_dir, "*.y*ml"))):
        with open(path, "r", encoding="utf-8") as f:
            try:
                doc = yaml.safe_load(f)
            except yaml.YAMLError as e:
                print(f"[warn] Skipping {path}: not valid YAML ({e})")
                continue
        if not doc:
            continue
        docs = doc if isinstance(doc, list) else [doc]
        for d in docs:
            try:
                card = RecipeForPlanning.from_dict(d)
            except KeyError as e:
                print(f"[warn] Skipping card in {path}: missing field {e}")
                continue
            except (TypeError, ValueError, AttributeError) as e:
                print(f"[warn] Skipping card in {path}: {e}")
                continue
            cards[card.id] = card
    return list(cards.values())


def load_preferences(path: Optional[str]) -> UserConstraints:
    if not path:
        return UserConstraints()
    if not os.path.exists(path):
        print(f"[warn] Preferences file '{path}' not found. Planning without preferences.")
        return UserConstraints()
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise InvalidPreferencesError(f"Could not parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidPreferencesError(f"{path} must contain a mapping at the top level")
    return UserConstraints.from_dict(data)


def load_rotation(path: Optional[str]) -> RotationState:
    if not path or not os.path.exists(path):
        return RotationState()
    with open(path, "r", encoding="utf-8") as f:
        return RotationState.from_json_or_new(f.read())


def next_monday(today: Optional[dt.date] = None) -> dt.date:
    today = today or dt.date.today()
    return today + dt.timedelta(days=7 - today.weekday())


# ---------- Output Writers ----------

def ensure_dir(p: str) -> None:
    if p:
        os.makedirs(p, exist_ok=True)


def _title(recipes: Dict[str, RecipeForPlanning], recipe_id: Optional[str]) -> str:
    if not recipe_id:
        return ""
    recipe = recipes.get(recipe_id)
    return recipe.title if recipe else recipe_id


def write_week_plan_csv(path: str, plan: WeekPlan, recipes: Dict[str, RecipeForPlanning]) -> None:
    rows: List[Dict] = []
    for a in plan.assignments:
        rows.append(
            {
                "date": a.date,
                "day": DAY_NAMES[dt.date.fromisoformat(a.date).weekday()],
                "meal_type": a.meal_type,
                "recipe_id": a.recipe_id,
                "name": _title(recipes, a.recipe_id),
                "side": _title(recipes, a.accompaniment_recipe_id),
                "prep_required": "yes" if a.prep_required else "no",
                "reasoning": a.reasoning,
            }
        )
    if not rows:
        return
    ensure_dir(os.path.dirname(path))
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        w.writeheader()
        w.writerows(rows)


def write_markdown(path: str, plan: WeekPlan, recipes: Dict[str, RecipeForPlanning]) -> None:
    ensure_dir(os.path.dirname(path))
    by_date: Dict[str, list] = {}
    for a in plan.assignments:
        by_date.setdefault(a.date, []).append(a)

    with open(path, "w", encoding="utf-8") as f:
        f.write(f"# Week of {plan.start_date}\n\n")
        for date, day_assignments in by_date.items():
            day = DAY_NAMES[dt.date.fromisoformat(date).weekday()]
            f.write(f"## {day}\n\n")
            for a in day_assignments:
                name = _title(recipes, a.recipe_id)
                side = _title(recipes, a.accompaniment_recipe_id)
                if side:
                    name = f"{name} + {side}"
                prep = " (prep ahead)" if a.prep_required else ""
                label = a.meal_type.replace("_", " ").capitalize()
                f.write(f"- **{label}**: {name}{prep} - {a.reasoning}\n")
            f.write("\n")

        if plan.warnings:
            f.write("## Notes\n\n")
            for w in plan.warnings:
                f.write(f"- {w}\n")
            f.write("\n")

        state = plan.rotation_state
        f.write(
            f"_Rotation cycle {state.cycle_number}: "
            f"{state.used_count()} of {state.total_favorite_count} favorites used._\n"
        )


def write_rotation(path: str, state: RotationState) -> None:
    ensure_dir(os.path.dirname(path))
    with open(path, "w", encoding="utf-8") as f:
        f.write(state.to_json())


# ---------- Main ----------

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Weekly meal plan from rotating favorite recipes")
    ap.add_argument("--cards_dir", default="./cards", help="Directory with *.yaml recipe cards")
    ap.add_argument("--preferences", default=None, help="YAML file with weeknight minutes and dietary restrictions")
    ap.add_argument("--rotation", default=None, help="Rotation state JSON from the previous run")
    ap.add_argument("--settings", default=None, help="Planner settings YAML (optional). If omitted, tries planner.yaml.")
    ap.add_argument("--week_start", default=None, help="Monday the plan starts on (YYYY-MM-DD); defaults to next Monday")
    ap.add_argument("--out_dir", default="./out", help="Output directory")
    ap.add_argument(
        "--seed",
        type=int,
        default=None,
        help="RNG seed (omit for different plan each run)"
    )
    ap.add_argument("--verbose", action="store_true", help="Log per-slot decisions")
    args = ap.parse_args(argv)

    init_logging(logging.DEBUG if args.verbose else logging.WARNING)

    recipes = load_cards(args.cards_dir)
    if not recipes:
        print("No recipe cards loaded from", args.cards_dir)
        return 1

    if args.seed is None:
        seed = random.randrange(0, 10**9)
        print(f"[info] No seed provided. Using random seed: {seed}")
    else:
        seed = args.seed
        print(f"[info] Using fixed seed: {seed}")

    week_start = args.week_start or next_monday().isoformat()

    try:
        settings = load_settings(args.settings)
        constraints = load_preferences(args.preferences)
        rotation = load_rotation(args.rotation)
        plan = generate_week_plan(week_start, recipes, constraints, rotation, seed=seed, settings=settings)
    except MealPlanningError as e:
        print(f"[error] {e}")
        return 1

    for w in plan.warnings:
        print(f"[warn] {w}")

    by_id = {r.id: r for r in recipes}
    ensure_dir(args.out_dir)
    write_week_plan_csv(os.path.join(args.out_dir, "week_plan.csv"), plan, by_id)
    write_markdown(os.path.join(args.out_dir, "weekly_plan.md"), plan, by_id)
    write_rotation(os.path.join(args.out_dir, "rotation_state.json"), plan.rotation_state)

    print(
        f"[info] Planned {len(plan.assignments)} meals for week of {plan.start_date} "
        f"(rotation cycle {plan.rotation_state.cycle_number})."
    )
    print("Outputs written in", args.out_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
