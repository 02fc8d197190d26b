from typing import Any, Optional

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

from .config import Settings
from .memory_storage import InMemoryRecipeStorage
from .models import Ingredient, Recipe
from .storage import RecipeNotFound, RecipeRepository, is_valid_document_id

try:
    from .gcp_storage import FirestoreRecipeStorage
except ImportError:  # pragma: no cover - allows running tests without optional deps
    FirestoreRecipeStorage = None  # type: ignore[assignment,misc]

INVALID_FIELDS_MESSAGE = "Missing or invalid required fields"


def create_app(
    storage: Optional[RecipeRepository] = None,
    settings: Optional[Settings] = None,
) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    storage:
        Optional recipe repository. When ``None`` the backend named by
        ``settings.storage_backend`` is built.
    settings:
        Optional settings. When ``None`` they are read from the environment.
    """

    if settings is None:
        settings = Settings.from_env()

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = settings.max_content_length
    app.config["RECIPE_SETTINGS"] = settings

    if storage is None:
        storage = _build_storage(settings)
    app.config["RECIPE_STORAGE"] = storage

    @app.after_request
    def add_cors_headers(response: Response) -> Response:
        origin = settings.cors_allowed_origin
        if origin == "*" and request.headers.get("Origin"):
            # Reflect the caller's origin, matching an allow-all policy.
            origin = request.headers["Origin"]
            response.headers.add("Vary", "Origin")
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        return _failed(exc.description or exc.name, exc.code or 500)

    @app.get("/health")
    def health_check():
        return jsonify(status="healthy")

    @app.post("/api/recipes/create")
    def create_recipe():
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]

        recipe_data = request.get_json(silent=True)
        if not _is_valid_recipe_payload(recipe_data) or not _has_addressable_id(recipe_data):
            return _failed(INVALID_FIELDS_MESSAGE, 400)

        try:
            recipe_id = storage_backend.add_recipe(_storable_fields(recipe_data))
        except Exception:
            app.logger.exception("Error adding recipe")
            return _failed("Error adding recipe", 500)

        return jsonify(id=recipe_id)

    @app.get("/api/recipes/get/", defaults={"recipe_id": ""})
    @app.get("/api/recipes/get/<recipe_id>")
    def get_recipe(recipe_id: str):
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]

        if not recipe_id:
            return _failed(INVALID_FIELDS_MESSAGE, 400)

        try:
            recipe = storage_backend.get_recipe(recipe_id)
            return jsonify(status="Success", data=recipe)
        except RecipeNotFound:
            app.logger.info("Get recipe | No recipe found with id: %s", recipe_id)
            return _failed("Recipe not found", 404)
        except Exception:
            app.logger.exception("Error getting recipe: %s", recipe_id)
            return _failed("Error getting recipe", 500)

    @app.get("/api/recipes/getAll")
    def list_recipes():
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]

        try:
            recipes = storage_backend.list_recipes()
            return jsonify(status="Success", data={"recipes": list(recipes)})
        except Exception:
            app.logger.exception("Error getting all recipes")
            return _failed("Error getting all recipes", 500)

    @app.put("/api/recipes/update/", defaults={"recipe_id": ""})
    @app.put("/api/recipes/update/<recipe_id>")
    def update_recipe(recipe_id: str):
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]

        recipe_data = request.get_json(silent=True)
        if not recipe_id or not _is_valid_recipe_payload(recipe_data):
            return _failed(INVALID_FIELDS_MESSAGE, 400)

        try:
            result = storage_backend.update_recipe(recipe_id, _storable_fields(recipe_data))
        except Exception:
            app.logger.exception("Error updating recipe: %s", recipe_id)
            return _failed("Error updating recipe", 500)

        if not result:
            app.logger.warning("Update recipe | %s not updated (%s)", recipe_id, result.reason)
            return _failed("Recipe failed to update", 400)
        return jsonify(status="Success", msg="Recipe Updated")

    @app.delete("/api/recipes/delete/", defaults={"recipe_id": ""})
    @app.delete("/api/recipes/delete/<recipe_id>")
    def delete_recipe(recipe_id: str):
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]

        if not recipe_id:
            return _failed(INVALID_FIELDS_MESSAGE, 400)

        try:
            result = storage_backend.delete_recipe(recipe_id)
        except Exception:
            app.logger.exception("Error deleting recipe: %s", recipe_id)
            return _failed("Error deleting recipe", 500)

        if not result:
            app.logger.warning("Delete recipe | %s not deleted (%s)", recipe_id, result.reason)
            return _failed("Recipe failed to delete", 400)
        return jsonify(status="Success", msg="Recipe Deleted")

    return app


def _build_storage(settings: Settings) -> RecipeRepository:
    if settings.storage_backend == "memory":
        return InMemoryRecipeStorage()

    if FirestoreRecipeStorage is None:
        raise RuntimeError(
            "google-cloud-firestore is not installed. Install it, set "
            "RECIPE_STORAGE_BACKEND=memory or pass an explicit storage backend to create_app."
        )
    return FirestoreRecipeStorage.from_settings(settings)


def _is_valid_recipe_payload(data: Any) -> bool:
    if not isinstance(data, dict):
        return False
    title = data.get("title")
    return (
        isinstance(title, str)
        and bool(title)
        and isinstance(data.get("ingredients"), list)
        and isinstance(data.get("instructions"), list)
    )


def _has_addressable_id(data: dict) -> bool:
    recipe_id = data.get("id")
    return not recipe_id or is_valid_document_id(str(recipe_id))


def _storable_fields(data: dict) -> dict:
    # The singular ``cuisine`` field is legacy and is never written again.
    return {key: value for key, value in data.items() if key != "cuisine"}


def _failed(message: str, status_code: int):
    return jsonify(status="Failed", msg=message), status_code


__all__ = ["create_app", "Ingredient", "Recipe"]
