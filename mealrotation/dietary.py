"""
Dietary filtering of favorite recipes.

Rules:
- An empty restriction list keeps every recipe.
- Otherwise a recipe must satisfy ALL restrictions (AND, not OR).
- Standard restrictions need the matching tag on the recipe. A missing tag
  counts as non-compliant; nothing is assumed safe.
- Custom restrictions exclude recipes whose ingredient names contain the
  allergen text (case-insensitive). Recipes without ingredient names cannot
  be checked: they are kept and reported by unverifiable_recipe_ids().
"""

from __future__ import annotations

from typing import List, Sequence

from .logging_utils import get_logger
from .models import DietaryKind, DietaryRestriction, RecipeForPlanning

logger = get_logger(__name__)


def has_dietary_tag(recipe: RecipeForPlanning, tag: str) -> bool:
    return any(t.strip().lower() == tag for t in recipe.dietary_tags)


def contains_allergen(recipe: RecipeForPlanning, allergen_text: str) -> bool:
    """True if any ingredient name contains the allergen. Recipes without ingredient names return False."""
    if not recipe.ingredient_names:
        return False
    needle = allergen_text.strip().lower()
    return any(needle in name.lower() for name in recipe.ingredient_names)


def satisfies_restriction(recipe: RecipeForPlanning, restriction: DietaryRestriction) -> bool:
    if restriction.kind is DietaryKind.CUSTOM:
        return not contains_allergen(recipe, restriction.text or "")
    return has_dietary_tag(recipe, restriction.required_tag or "")


def satisfies_all_restrictions(
    recipe: RecipeForPlanning, restrictions: Sequence[DietaryRestriction]
) -> bool:
    return all(satisfies_restriction(recipe, r) for r in restrictions)


def unverifiable_recipe_ids(
    recipes: Sequence[RecipeForPlanning], restrictions: Sequence[DietaryRestriction]
) -> List[str]:
    """
    IDs of recipes a custom restriction could not actually be checked against.

    The planning projection usually lacks ingredient names; those recipes pass
    the custom check only because there was nothing to inspect.
    """
    if not any(r.kind is DietaryKind.CUSTOM for r in restrictions):
        return []
    return [r.id for r in recipes if r.ingredient_names is None]


def filter_by_dietary_restrictions(
    recipes: Sequence[RecipeForPlanning], restrictions: Sequence[DietaryRestriction]
) -> List[RecipeForPlanning]:
    if not restrictions:
        return list(recipes)

    kept = [r for r in recipes if satisfies_all_restrictions(r, restrictions)]

    unchecked = unverifiable_recipe_ids(kept, restrictions)
    if unchecked:
        customs = ", ".join(str(r) for r in restrictions if r.kind is DietaryKind.CUSTOM)
        logger.warning(
            "Custom restriction(s) %s not verifiable for %d recipe(s) without ingredient names: %s",
            customs,
            len(unchecked),
            ", ".join(unchecked),
        )

    logger.debug(
        "Dietary filter kept %d of %d recipes for [%s]",
        len(kept),
        len(recipes),
        ", ".join(str(r) for r in restrictions),
    )
    return kept
