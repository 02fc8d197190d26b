from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from google.api_core import exceptions as gcloud_exceptions
from google.cloud import firestore

from .config import Settings
from .normalize import title_sort_key
from .storage import (
    NOT_FOUND,
    STORAGE_ERROR,
    RecipeNotFound,
    RecipeRepository,
    StoreResult,
    split_document_id,
)

logger = logging.getLogger(__name__)


class FirestoreRecipeStorage(RecipeRepository):
    """Recipe storage backed by a Firestore collection, one document per recipe."""

    def __init__(
        self,
        *,
        project: Optional[str] = None,
        collection_name: str = "recipes",
        client: Optional[firestore.Client] = None,
    ) -> None:
        self._project = project
        self._collection_name = collection_name

        self._firestore_client = client if client is not None else firestore.Client(project=project)
        self._collection = self._firestore_client.collection(collection_name)

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirestoreRecipeStorage":
        """Build a storage instance from application settings."""

        return cls(project=settings.gcp_project, collection_name=settings.collection_name)

    def list_recipes(self) -> List[Dict[str, Any]]:
        docs = list(self._collection.stream())

        if not docs:
            logger.info("Get all recipes | No recipes found")
            return []

        recipes = [self._snapshot_to_dict(doc) for doc in docs]
        return sorted(recipes, key=lambda recipe: title_sort_key(recipe.get("title")))

    def get_recipe(self, recipe_id: str) -> Dict[str, Any]:
        snapshot = self._collection.document(recipe_id).get()

        if not snapshot.exists:
            raise RecipeNotFound(recipe_id)

        return self._snapshot_to_dict(snapshot)

    def add_recipe(self, recipe_data: Mapping[str, Any]) -> str:
        recipe_id, fields = split_document_id(recipe_data)

        if recipe_id is not None:
            # Explicit ids overwrite whatever is stored there.
            doc_ref = self._collection.document(recipe_id)
        else:
            doc_ref = self._collection.document()

        doc_ref.set(fields)
        return doc_ref.id

    def update_recipe(self, recipe_id: str, recipe_data: Mapping[str, Any]) -> StoreResult:
        _, fields = split_document_id(recipe_data)

        try:
            self._collection.document(recipe_id).update(fields)
        except gcloud_exceptions.NotFound:
            logger.error("Failed to update recipe: %s (not found)", recipe_id)
            return StoreResult.failure(NOT_FOUND)
        except Exception:
            logger.exception("Failed to update recipe: %s", recipe_id)
            return StoreResult.failure(STORAGE_ERROR)

        return StoreResult.success()

    def delete_recipe(self, recipe_id: str) -> StoreResult:
        try:
            doc_ref = self._collection.document(recipe_id)
            if not doc_ref.get().exists:
                logger.error("Failed to delete recipe: %s (not found)", recipe_id)
                return StoreResult.failure(NOT_FOUND)

            batch = self._firestore_client.batch()
            batch.delete(doc_ref)
            batch.commit()
        except Exception:
            logger.exception("Failed to delete recipe: %s", recipe_id)
            return StoreResult.failure(STORAGE_ERROR)

        return StoreResult.success()

    @staticmethod
    def _snapshot_to_dict(snapshot: Any) -> Dict[str, Any]:
        data = snapshot.to_dict() or {}
        data.pop("id", None)
        return {"id": snapshot.id, **data}


__all__ = ["FirestoreRecipeStorage"]
