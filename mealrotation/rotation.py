"""
Recipe rotation bookkeeping.

Each favorite is used at most once per rotation cycle. Once every favorite
has appeared, the cycle resets: the used set is cleared and the cycle number
goes up by one. The state is a plain value: it is passed into a generation
run, a new one comes back out, and the caller persists it as JSON.
"""

from __future__ import annotations

import copy
import dataclasses as dc
import datetime as dt
import json
from typing import Dict, Iterable, List, Optional, Sequence

from .errors import RotationStateError
from .logging_utils import get_logger

logger = get_logger(__name__)

MAX_CYCLE_NUMBER = 2 ** 32 - 1


def _utc_now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


@dc.dataclass
class RotationState:
    cycle_number: int = 1
    cycle_started_at: str = dc.field(default_factory=_utc_now)
    used_recipe_ids: List[str] = dc.field(default_factory=list)
    total_favorite_count: int = 0
    # Survive cycle resets; they steer variety across weeks
    cuisine_usage_count: Dict[str, int] = dc.field(default_factory=dict)
    last_complex_meal_date: Optional[str] = None    # ISO date

    @staticmethod
    def with_favorite_count(total_favorite_count: int) -> "RotationState":
        if total_favorite_count <= 0:
            raise ValueError("total_favorite_count must be greater than 0")
        return RotationState(total_favorite_count=total_favorite_count)

    # ---------- Queries ----------

    def is_used(self, recipe_id: str) -> bool:
        return recipe_id in self.used_recipe_ids

    def used_count(self) -> int:
        return len(self.used_recipe_ids)

    def should_reset_cycle(self) -> bool:
        return self.total_favorite_count > 0 and self.used_count() >= self.total_favorite_count

    def get_cuisine_usage(self, cuisine: Optional[str]) -> int:
        if not cuisine:
            return 0
        return self.cuisine_usage_count.get(cuisine.strip().lower(), 0)

    # ---------- Mutations ----------

    def mark_used(self, recipe_id: str) -> None:
        if recipe_id not in self.used_recipe_ids:
            self.used_recipe_ids.append(recipe_id)

    def unmark_used(self, recipe_id: str) -> None:
        """Return a recipe to the pool, e.g. after a single meal was swapped out."""
        if recipe_id not in self.used_recipe_ids:
            raise KeyError(
                f"Recipe {recipe_id} was not marked as used in cycle {self.cycle_number}"
            )
        self.used_recipe_ids.remove(recipe_id)

    def retain_only(self, recipe_ids: Iterable[str]) -> List[str]:
        """
        Forget used ids that are no longer among `recipe_ids` (unfavorited,
        or excluded by a new dietary restriction). Returns the dropped ids.
        """
        keep = set(recipe_ids)
        dropped = [rid for rid in self.used_recipe_ids if rid not in keep]
        if dropped:
            self.used_recipe_ids = [rid for rid in self.used_recipe_ids if rid in keep]
        return dropped

    def increment_cuisine_usage(self, cuisine: Optional[str]) -> None:
        if not cuisine:
            return
        key = cuisine.strip().lower()
        self.cuisine_usage_count[key] = self.cuisine_usage_count.get(key, 0) + 1

    def update_last_complex_meal_date(self, date: str) -> None:
        self.last_complex_meal_date = date

    def reset_cycle(self, started_at: Optional[str] = None) -> None:
        self.cycle_number = min(self.cycle_number + 1, MAX_CYCLE_NUMBER)
        self.cycle_started_at = started_at or _utc_now()
        self.used_recipe_ids.clear()

    # ---------- Serialization ----------

    def to_dict(self) -> dict:
        return dc.asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @staticmethod
    def from_dict(d: dict) -> "RotationState":
        if not isinstance(d, dict):
            raise RotationStateError(f"Rotation state must be an object, got {type(d).__name__}")
        try:
            cycle_number = d["cycle_number"]
            used = d.get("used_recipe_ids", [])
            total = d.get("total_favorite_count", 0)
            started = d.get("cycle_started_at") or _utc_now()
            cuisines = d.get("cuisine_usage_count") or {}
            last_complex = d.get("last_complex_meal_date")
        except KeyError as e:
            raise RotationStateError(f"Rotation state is missing field {e}") from e

        if isinstance(cycle_number, bool) or not isinstance(cycle_number, int) or cycle_number < 1:
            raise RotationStateError(f"Invalid cycle_number: {cycle_number!r}")
        if isinstance(total, bool) or not isinstance(total, int) or total < 0:
            raise RotationStateError(f"Invalid total_favorite_count: {total!r}")
        if not isinstance(used, list) or not all(isinstance(i, str) for i in used):
            raise RotationStateError("used_recipe_ids must be a list of strings")
        if len(set(used)) != len(used):
            raise RotationStateError("used_recipe_ids contains duplicates")
        if not isinstance(cuisines, dict) or not all(
            isinstance(k, str) and isinstance(v, int) and not isinstance(v, bool) and v >= 0
            for k, v in cuisines.items()
        ):
            raise RotationStateError("cuisine_usage_count must map cuisine names to non-negative counts")
        if last_complex is not None and not isinstance(last_complex, str):
            raise RotationStateError(f"Invalid last_complex_meal_date: {last_complex!r}")

        return RotationState(
            cycle_number=cycle_number,
            cycle_started_at=str(started),
            used_recipe_ids=list(used),
            total_favorite_count=total,
            cuisine_usage_count=dict(cuisines),
            last_complex_meal_date=last_complex,
        )

    @staticmethod
    def from_json(text: str) -> "RotationState":
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise RotationStateError(f"Rotation state is not valid JSON: {e}") from e
        return RotationState.from_dict(data)

    @staticmethod
    def from_json_or_new(text: Optional[str]) -> "RotationState":
        """Decode stored state; corrupt or missing state starts a fresh rotation instead of failing the request."""
        if not text:
            return RotationState()
        try:
            return RotationState.from_json(text)
        except RotationStateError as e:
            logger.warning("Discarding unreadable rotation state, starting fresh: %s", e)
            return RotationState()


class RotationSystem:
    """Stateless rotation rules applied to a RotationState."""

    @staticmethod
    def filter_available_recipes(
        all_favorite_ids: Iterable[str], rotation_state: RotationState
    ) -> List[str]:
        return [rid for rid in all_favorite_ids if not rotation_state.is_used(rid)]

    @staticmethod
    def should_reset_cycle(total_favorite_count: int, rotation_state: RotationState) -> bool:
        return total_favorite_count > 0 and rotation_state.used_count() >= total_favorite_count

    @staticmethod
    def update_after_generation(
        assigned_recipe_ids: Sequence[str],
        total_favorite_count: int,
        rotation_state: RotationState,
        started_at: Optional[str] = None,
    ) -> RotationState:
        """
        Mark every assigned recipe as used, then reset the cycle if all
        favorites have now been used. Returns a new state; the input is untouched.
        """
        state = copy.deepcopy(rotation_state)
        for recipe_id in assigned_recipe_ids:
            state.mark_used(recipe_id)
        state.total_favorite_count = total_favorite_count

        if RotationSystem.should_reset_cycle(total_favorite_count, state):
            logger.info(
                "All %d favorites used; closing rotation cycle %d",
                total_favorite_count,
                state.cycle_number,
            )
            state.reset_cycle(started_at)
        return state
