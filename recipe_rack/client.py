"""HTTP client for the recipe API.

:class:`RecipeClient` mirrors the browser code that talks to the API: form
data is validated and reshaped with :func:`normalize_outbound` before it is
sent, and fetched documents go through :func:`normalize_inbound` before they
are returned. Every failure reaches the caller as a :class:`RecipeApiError`
whose message is fit for display.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional
from urllib.parse import quote

import httpx

from .forms import validate_recipe_form
from .models import Recipe
from .normalize import normalize_inbound, normalize_outbound

logger = logging.getLogger(__name__)


class RecipeApiError(RuntimeError):
    """A failed API call, carrying a human readable message."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RecipeClient:
    def __init__(
        self,
        base_url: str,
        *,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 20,
    ) -> None:
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "RecipeClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def list_recipes(self) -> List[Recipe]:
        response = self._send("GET", "/api/recipes/getAll", "Failed to fetch recipes")
        result = _json_body(response)

        data = result.get("data")
        if (
            result.get("status") == "Success"
            and isinstance(data, dict)
            and isinstance(data.get("recipes"), list)
        ):
            return [normalize_inbound(recipe) for recipe in data["recipes"]]

        logger.warning("Fetched recipes data is not in the expected format: %r", data)
        return []

    def get_recipe(self, recipe_id: str) -> Recipe:
        response = self._send(
            "GET",
            f"/api/recipes/get/{_path_id(recipe_id)}",
            "Failed to fetch recipe",
            not_found_message="Recipe not found.",
        )
        result = _json_body(response)

        if result.get("status") == "Success" and result.get("data"):
            return normalize_inbound(result["data"])
        raise RecipeApiError("Recipe data not found in response.", response.status_code)

    def save_recipe(self, form: Mapping[str, Any], recipe_id: Optional[str] = None) -> str:
        """Create a recipe, or update ``recipe_id``, from form data.

        Returns the id of the stored recipe.
        """

        validate_recipe_form(form)
        payload = normalize_outbound(form)

        if recipe_id:
            self._send(
                "PUT",
                f"/api/recipes/update/{_path_id(recipe_id)}",
                "Failed to save recipe",
                json=payload,
            )
            return recipe_id

        response = self._send("POST", "/api/recipes/create", "Failed to save recipe", json=payload)
        new_id = _json_body(response).get("id")
        if not new_id:
            raise RecipeApiError("Recipe id missing from response.", response.status_code)
        return str(new_id)

    def delete_recipe(self, recipe_id: str) -> None:
        self._send("DELETE", f"/api/recipes/delete/{_path_id(recipe_id)}", "Failed to delete recipe")

    def _send(
        self,
        method: str,
        url: str,
        failure_prefix: str,
        *,
        not_found_message: Optional[str] = None,
        json: Any = None,
    ) -> httpx.Response:
        try:
            response = self._http.request(method, url, json=json)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise RecipeApiError(f"{failure_prefix}: {exc}") from exc

        if response.is_success:
            return response

        if response.status_code == 404 and not_found_message:
            raise RecipeApiError(not_found_message, response.status_code)

        message = _error_message(response) or f"{failure_prefix}: {response.reason_phrase}"
        logger.error("%s %s returned %s: %s", method, url, response.status_code, message)
        raise RecipeApiError(message, response.status_code)


def _path_id(recipe_id: str) -> str:
    return quote(str(recipe_id), safe="")


def _json_body(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _error_message(response: httpx.Response) -> Optional[str]:
    body = _json_body(response)
    message = body.get("message") or body.get("msg")
    return message if isinstance(message, str) and message else None


def filter_recipes(recipes: Iterable[Recipe], term: str) -> List[Recipe]:
    """Recipes whose title or any cuisine tag contains ``term``, ignoring case."""

    if not term:
        return list(recipes)

    needle = term.lower()
    return [
        recipe
        for recipe in recipes
        if needle in recipe.title.lower()
        or any(needle in tag.lower() for tag in recipe.cuisines if isinstance(tag, str))
    ]


__all__ = ["RecipeApiError", "RecipeClient", "filter_recipes"]
