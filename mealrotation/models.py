from __future__ import annotations

import dataclasses as dc
import datetime as dt
import enum
from typing import Dict, List, Optional

from .errors import InvalidPreferencesError

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


# ---------- Enums ----------

class MealType(enum.Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    APPETIZER = "appetizer"
    MAIN_COURSE = "main_course"
    DESSERT = "dessert"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


# Slot order within a day, per planning mode.
MEAL_TYPES_BY_MODE: Dict[str, List[MealType]] = {
    "meals": [MealType.BREAKFAST, MealType.LUNCH, MealType.DINNER],
    "courses": [MealType.APPETIZER, MealType.MAIN_COURSE, MealType.DESSERT],
}


class Complexity(enum.Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"

    @staticmethod
    def parse(s: str) -> "Complexity":
        # Unknown labels land in the middle bucket
        s = s.strip().lower()
        if s == "simple":
            return Complexity.SIMPLE
        if s == "complex":
            return Complexity.COMPLEX
        return Complexity.MODERATE

    @property
    def label(self) -> str:
        return self.value.capitalize()


class DietaryKind(enum.Enum):
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    GLUTEN_FREE = "gluten_free"
    DAIRY_FREE = "dairy_free"
    NUT_FREE = "nut_free"
    HALAL = "halal"
    KOSHER = "kosher"
    CUSTOM = "custom"


@dc.dataclass(frozen=True)
class DietaryRestriction:
    """
    One dietary rule a user wants enforced.

    Standard kinds map to a required recipe tag of the same name
    (Vegetarian -> "vegetarian", GlutenFree -> "gluten_free", ...).
    CUSTOM carries free text for an allergen matched against ingredient names.
    """
    kind: DietaryKind
    text: Optional[str] = None

    def __post_init__(self):
        if self.kind is DietaryKind.CUSTOM and not (self.text and self.text.strip()):
            raise InvalidPreferencesError("Custom dietary restriction requires allergen text")

    @property
    def required_tag(self) -> Optional[str]:
        if self.kind is DietaryKind.CUSTOM:
            return None
        return self.kind.value

    @staticmethod
    def custom(text: str) -> "DietaryRestriction":
        return DietaryRestriction(DietaryKind.CUSTOM, text)

    @staticmethod
    def parse(value: str) -> "DietaryRestriction":
        """
        Accepts "vegetarian", "Gluten-Free", "gluten_free", "GlutenFree" or
        "custom:peanut".
        """
        raw = str(value).strip()
        if raw.lower().startswith("custom:"):
            return DietaryRestriction.custom(raw.split(":", 1)[1].strip())

        key = raw.lower().replace("-", "_").replace(" ", "_")
        compact = key.replace("_", "")
        for kind in DietaryKind:
            if kind is DietaryKind.CUSTOM:
                continue
            if key == kind.value or compact == kind.value.replace("_", ""):
                return DietaryRestriction(kind)
        raise InvalidPreferencesError(
            f"Unknown dietary restriction '{value}'. Use one of "
            f"{', '.join(k.value for k in DietaryKind if k is not DietaryKind.CUSTOM)} "
            f"or 'custom:<allergen>'."
        )

    def __str__(self) -> str:
        if self.kind is DietaryKind.CUSTOM:
            return f"custom:{self.text}"
        return self.kind.value


# ---------- Data Models ----------

@dc.dataclass
class RecipeForPlanning:
    """
    Read-only projection of a favorite recipe, carrying just what the planner scores on.

    Missing timing fields mean "unknown", not zero.
    """
    id: str
    title: str
    recipe_type: str = "main_course"        # appetizer | main_course | dessert
    ingredients_count: int = 0
    instructions_count: int = 0
    prep_time_min: Optional[int] = None
    cook_time_min: Optional[int] = None
    advance_prep_hours: Optional[int] = None
    complexity: Optional[str] = None        # pre-computed label, wins over the score
    dietary_tags: List[str] = dc.field(default_factory=list)
    cuisine: Optional[str] = None
    accepts_accompaniment: bool = False
    preferred_accompaniments: List[str] = dc.field(default_factory=list)
    accompaniment_category: Optional[str] = None   # set only on side dishes
    ingredient_names: Optional[List[str]] = None
    equipment: List[str] = dc.field(default_factory=list)
    freshness: Optional[str] = None         # high | medium | low

    def __post_init__(self):
        if self.ingredients_count < 0 or self.instructions_count < 0:
            raise ValueError(
                f"Recipe {self.id}: ingredient and instruction counts must be non-negative"
            )

    @property
    def total_time_min(self) -> Optional[int]:
        if self.prep_time_min is None and self.cook_time_min is None:
            return None
        return (self.prep_time_min or 0) + (self.cook_time_min or 0)

    @property
    def requires_advance_prep(self) -> bool:
        return bool(self.advance_prep_hours and self.advance_prep_hours > 0)

    @property
    def is_accompaniment(self) -> bool:
        return self.accompaniment_category is not None

    @staticmethod
    def _opt_int(value) -> Optional[int]:
        return None if value is None else int(value)

    @staticmethod
    def from_dict(d: Dict) -> "RecipeForPlanning":
        ingredient_names = d.get("ingredient_names")
        if ingredient_names is None and isinstance(d.get("ingredients"), list):
            ingredient_names = [
                str(i.get("item")) if isinstance(i, dict) else str(i)
                for i in d["ingredients"]
            ]

        steps = d.get("steps")
        return RecipeForPlanning(
            id=str(d["id"]),
            title=str(d.get("title", d.get("name", d["id"]))),
            recipe_type=str(d.get("recipe_type", "main_course")),
            ingredients_count=int(
                d.get("ingredients_count", len(ingredient_names) if ingredient_names else 0)
            ),
            instructions_count=int(
                d.get("instructions_count", len(steps) if isinstance(steps, list) else 0)
            ),
            prep_time_min=RecipeForPlanning._opt_int(d.get("prep_time_min")),
            cook_time_min=RecipeForPlanning._opt_int(d.get("cook_time_min")),
            advance_prep_hours=RecipeForPlanning._opt_int(d.get("advance_prep_hours")),
            complexity=d.get("complexity"),
            dietary_tags=[str(t) for t in d.get("dietary_tags", [])],
            cuisine=d.get("cuisine"),
            accepts_accompaniment=bool(d.get("accepts_accompaniment", False)),
            preferred_accompaniments=[str(c) for c in d.get("preferred_accompaniments", [])],
            accompaniment_category=d.get("accompaniment_category"),
            ingredient_names=ingredient_names,
            equipment=[str(e).lower() for e in d.get("equipment", [])],
            freshness=d.get("freshness"),
        )


@dc.dataclass
class UserConstraints:
    weeknight_availability_minutes: Optional[int] = None   # None = unconstrained
    dietary_restrictions: List[DietaryRestriction] = dc.field(default_factory=list)

    def validate(self) -> None:
        minutes = self.weeknight_availability_minutes
        if minutes is not None and minutes <= 0:
            raise InvalidPreferencesError(
                f"weeknight_availability_minutes must be positive, got {minutes}"
            )

    @staticmethod
    def from_dict(d: Dict) -> "UserConstraints":
        if not isinstance(d, dict):
            raise InvalidPreferencesError(
                f"Preferences must be a mapping, got {type(d).__name__}"
            )
        restrictions = d.get("dietary_restrictions") or []
        if isinstance(restrictions, str) or not isinstance(restrictions, list):
            raise InvalidPreferencesError("dietary_restrictions must be a list")

        minutes = d.get("weeknight_availability_minutes")
        try:
            minutes = None if minutes is None else int(minutes)
        except (TypeError, ValueError) as e:
            raise InvalidPreferencesError(
                f"weeknight_availability_minutes must be a whole number, got {minutes!r}"
            ) from e
        constraints = UserConstraints(
            weeknight_availability_minutes=minutes,
            dietary_restrictions=[DietaryRestriction.parse(r) for r in restrictions],
        )
        constraints.validate()
        return constraints


@dc.dataclass(frozen=True)
class MealSlot:
    date: dt.date
    meal_type: MealType

    def is_weekend(self) -> bool:
        return self.date.weekday() >= 5

    def day_of_week(self) -> int:
        # 1 = Monday, 7 = Sunday
        return self.date.weekday() + 1

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.date.weekday()]


@dc.dataclass(frozen=True)
class DayAssignment:
    """What has already been placed on a date; used for equipment conflicts."""
    date: dt.date
    meal_type: MealType
    recipe: RecipeForPlanning


@dc.dataclass(frozen=True)
class MealAssignment:
    date: str                  # ISO date
    meal_type: str
    recipe_id: str
    prep_required: bool
    reasoning: str
    accompaniment_recipe_id: Optional[str] = None

    def to_dict(self) -> Dict:
        return dc.asdict(self)
