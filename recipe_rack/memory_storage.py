from __future__ import annotations

import copy
import logging
import uuid
from typing import Any, Dict, List, Mapping

from .normalize import title_sort_key
from .storage import NOT_FOUND, RecipeNotFound, RecipeRepository, StoreResult, split_document_id

logger = logging.getLogger(__name__)


class InMemoryRecipeStorage(RecipeRepository):
    """Process local recipe storage for development and tests.

    Documents are copied on the way in and out so callers never share
    mutable state with the stored collection.
    """

    def __init__(self) -> None:
        self._documents: Dict[str, Dict[str, Any]] = {}

    def list_recipes(self) -> List[Dict[str, Any]]:
        if not self._documents:
            logger.info("Get all recipes | No recipes found")
            return []

        recipes = [self._annotate(doc_id, data) for doc_id, data in self._documents.items()]
        return sorted(recipes, key=lambda recipe: title_sort_key(recipe.get("title")))

    def get_recipe(self, recipe_id: str) -> Dict[str, Any]:
        try:
            data = self._documents[recipe_id]
        except KeyError:
            raise RecipeNotFound(recipe_id) from None
        return self._annotate(recipe_id, data)

    def add_recipe(self, recipe_data: Mapping[str, Any]) -> str:
        recipe_id, fields = split_document_id(recipe_data)
        if recipe_id is None:
            recipe_id = uuid.uuid4().hex
        self._documents[recipe_id] = copy.deepcopy(fields)
        return recipe_id

    def update_recipe(self, recipe_id: str, recipe_data: Mapping[str, Any]) -> StoreResult:
        document = self._documents.get(recipe_id)
        if document is None:
            logger.error("Failed to update recipe: %s (not found)", recipe_id)
            return StoreResult.failure(NOT_FOUND)

        _, fields = split_document_id(recipe_data)
        document.update(copy.deepcopy(fields))
        return StoreResult.success()

    def delete_recipe(self, recipe_id: str) -> StoreResult:
        if self._documents.pop(recipe_id, None) is None:
            logger.error("Failed to delete recipe: %s (not found)", recipe_id)
            return StoreResult.failure(NOT_FOUND)
        return StoreResult.success()

    @staticmethod
    def _annotate(recipe_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {"id": recipe_id, **copy.deepcopy(dict(data))}


__all__ = ["InMemoryRecipeStorage"]
