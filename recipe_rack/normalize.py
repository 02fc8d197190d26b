"""Conversion between stored recipe documents, display models and form data.

Stored recipes exist in more than one shape. Older documents carry a single
``cuisine`` string instead of the ``cuisines`` list, and some keep the
instructions as one multi-line string. :func:`normalize_inbound` is the one
place where those shapes are reconciled; nothing past it sees the legacy
fields.
"""

from __future__ import annotations

import unicodedata
import uuid
from typing import Any, Dict, List, Mapping, Optional

from .models import Ingredient, Recipe

OPTIONAL_TEXT_FIELDS = ("prepTime", "cookTime", "servingSize")


def new_ingredient_id() -> str:
    return str(uuid.uuid4())


def parse_cuisine_tags(text: Optional[str]) -> List[str]:
    """Split a comma separated tag string, keeping order and duplicates."""

    if not text:
        return []
    return [tag.strip() for tag in text.split(",") if tag.strip()]


def title_sort_key(title: Any) -> tuple:
    """Collation key for alphabetical browsing.

    Accents and case only matter when two titles are otherwise equal, so
    "éclair" sorts next to "Eclair" rather than after "Zucchini". Among such
    ties lowercase comes first.
    """

    text = title if isinstance(title, str) else ""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return (base.casefold(), text.swapcase())


def normalize_inbound(raw: Mapping[str, Any] | Recipe) -> Recipe:
    """Build a canonical :class:`Recipe` from a stored or fetched document."""

    if isinstance(raw, Recipe):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping):
        raw = {}

    return Recipe(
        id=str(raw.get("id") or ""),
        title=raw.get("title") if isinstance(raw.get("title"), str) else "",
        ingredients=_inbound_ingredients(raw.get("ingredients")),
        instructions=_inbound_instructions(raw.get("instructions")),
        cuisines=_inbound_cuisines(raw),
        prep_time=raw.get("prepTime") or None,
        cook_time=raw.get("cookTime") or None,
        serving_size=raw.get("servingSize") or None,
    )


def _inbound_cuisines(raw: Mapping[str, Any]) -> List[str]:
    cuisines = raw.get("cuisines")
    if isinstance(cuisines, list):
        return list(cuisines)

    legacy = raw.get("cuisine")
    if isinstance(legacy, str) and legacy.strip():
        return [legacy.strip()]
    return []


def _inbound_instructions(instructions: Any) -> List[str]:
    if isinstance(instructions, list):
        return list(instructions)
    # Instructions used to be stored as a single multi-line string.
    if isinstance(instructions, str) and instructions.strip():
        return [instructions]
    return []


def _inbound_ingredients(ingredients: Any) -> List[Ingredient]:
    if not isinstance(ingredients, list):
        return []

    parsed = []
    for item in ingredients:
        if isinstance(item, Ingredient):
            item = item.to_dict()
        if not isinstance(item, Mapping):
            continue
        parsed.append(
            Ingredient(
                id=str(item.get("id") or ""),
                name=str(item.get("name") or ""),
                quantity=str(item.get("quantity") or ""),
            )
        )
    return parsed


def normalize_outbound(form: Mapping[str, Any]) -> Dict[str, Any]:
    """Turn validated form data into the payload sent for storage.

    The payload always carries ``cuisines`` and the optional text fields,
    never the legacy ``cuisine`` key and never an ``id``.
    """

    if "cuisine" in form and isinstance(form.get("cuisine"), str):
        cuisines = parse_cuisine_tags(form["cuisine"])
    elif isinstance(form.get("cuisines"), list):
        cuisines = [str(tag).strip() for tag in form["cuisines"] if str(tag).strip()]
    else:
        cuisines = []

    payload: Dict[str, Any] = {
        "title": form.get("title", ""),
        "ingredients": _outbound_ingredients(form.get("ingredients") or []),
        "instructions": list(form.get("instructions") or []),
        "cuisines": cuisines,
    }
    for key in OPTIONAL_TEXT_FIELDS:
        payload[key] = form.get(key) or ""
    return payload


def _outbound_ingredients(ingredients: List[Any]) -> List[Dict[str, str]]:
    result = []
    for ingredient in ingredients:
        if isinstance(ingredient, Ingredient):
            ingredient = ingredient.to_dict()
        result.append(
            {
                "id": ingredient.get("id") or new_ingredient_id(),
                "name": ingredient.get("name", ""),
                "quantity": ingredient.get("quantity", ""),
            }
        )
    return result


def recipe_to_form(recipe: Mapping[str, Any] | Recipe) -> Dict[str, Any]:
    """Prefill data for editing an existing recipe."""

    recipe = normalize_inbound(recipe)
    return {
        "title": recipe.title,
        "ingredients": [
            {
                "id": ingredient.id or new_ingredient_id(),
                "name": ingredient.name,
                "quantity": ingredient.quantity,
            }
            for ingredient in recipe.ingredients
        ],
        "instructions": list(recipe.instructions) or [""],
        "cuisine": ", ".join(recipe.cuisines),
        "prepTime": recipe.prep_time or "",
        "cookTime": recipe.cook_time or "",
        "servingSize": recipe.serving_size or "",
    }


def suggestion_to_form(
    suggestion: Mapping[str, Any], default_title: str = "Untitled Suggested Recipe"
) -> Dict[str, Any]:
    """Prefill data for a suggested or extracted recipe the user accepted.

    Suggested ingredients always get fresh ids. Empty ingredient or
    instruction lists become a single blank row to fill in.
    """

    ingredients = [
        {
            "id": new_ingredient_id(),
            "name": str(item.get("name") or ""),
            "quantity": str(item.get("quantity") or ""),
        }
        for item in suggestion.get("ingredients") or []
        if isinstance(item, Mapping)
    ]
    instructions = suggestion.get("instructions")
    if not isinstance(instructions, list) or not instructions:
        instructions = [""]
    cuisine = suggestion.get("cuisine")

    return {
        "title": suggestion.get("title") or default_title,
        "ingredients": ingredients or [{"id": new_ingredient_id(), "name": "", "quantity": ""}],
        "instructions": list(instructions),
        "cuisine": ", ".join(parse_cuisine_tags(cuisine if isinstance(cuisine, str) else "")),
        "prepTime": suggestion.get("prepTime") or "",
        "cookTime": suggestion.get("cookTime") or "",
        "servingSize": suggestion.get("servingSize") or "",
    }


__all__ = [
    "new_ingredient_id",
    "normalize_inbound",
    "normalize_outbound",
    "parse_cuisine_tags",
    "recipe_to_form",
    "suggestion_to_form",
    "title_sort_key",
]
