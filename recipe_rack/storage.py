from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol

NOT_FOUND = "not_found"
STORAGE_ERROR = "storage_error"
MAX_DOCUMENT_ID_BYTES = 1500


class RecipeNotFound(KeyError):
    """Raised when no recipe document exists for an id."""

    def __init__(self, recipe_id: str) -> None:
        self.recipe_id = recipe_id
        super().__init__(f"No recipe found with id: {recipe_id}")


@dataclass(frozen=True)
class StoreResult:
    """Outcome of a write that reports failure instead of raising.

    Truthiness mirrors success, ``reason`` tells why a write did not happen.
    """

    ok: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls) -> "StoreResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, reason: str) -> "StoreResult":
        return cls(ok=False, reason=reason)


class RecipeRepository(Protocol):
    """Protocol describing the behaviour required by the web layer."""

    def list_recipes(self) -> List[Dict[str, Any]]:
        """Return every stored recipe, annotated with its id, ordered by title."""

    def get_recipe(self, recipe_id: str) -> Dict[str, Any]:
        """Return a single recipe or raise :class:`RecipeNotFound` if missing."""

    def add_recipe(self, recipe_data: Mapping[str, Any]) -> str:
        """Persist a recipe and return the id it was stored under."""

    def update_recipe(self, recipe_id: str, recipe_data: Mapping[str, Any]) -> StoreResult:
        """Merge fields into an existing recipe."""

    def delete_recipe(self, recipe_id: str) -> StoreResult:
        """Remove an existing recipe."""


def split_document_id(recipe_data: Mapping[str, Any]) -> tuple[Optional[str], Dict[str, Any]]:
    """Separate a caller supplied id from the fields to store."""

    fields = {key: value for key, value in recipe_data.items() if key != "id"}
    recipe_id = recipe_data.get("id")
    return (str(recipe_id) if recipe_id else None), fields


def is_valid_document_id(recipe_id: str) -> bool:
    """Whether ``recipe_id`` can address a single document in the collection.

    Follows the Firestore document id rules so every backend accepts the same
    ids: no slashes, not ``.`` or ``..``, not of the reserved ``__name__``
    form and at most 1500 bytes.
    """

    if not recipe_id or "/" in recipe_id or recipe_id in (".", ".."):
        return False
    if len(recipe_id) >= 4 and recipe_id.startswith("__") and recipe_id.endswith("__"):
        return False
    return len(recipe_id.encode("utf-8")) <= MAX_DOCUMENT_ID_BYTES


__all__ = [
    "NOT_FOUND",
    "STORAGE_ERROR",
    "RecipeNotFound",
    "RecipeRepository",
    "StoreResult",
    "is_valid_document_id",
    "split_document_id",
]
