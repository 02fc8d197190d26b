from __future__ import annotations

import uuid
from typing import Any, Dict, Mapping

TITLE_MAX_LENGTH = 150
INGREDIENT_NAME_MAX_LENGTH = 100
QUANTITY_MAX_LENGTH = 50
INSTRUCTION_MAX_LENGTH = 1000
CUISINE_MAX_LENGTH = 200


class FormValidationError(ValueError):
    """Raised when recipe form data does not satisfy the form rules."""

    def __init__(self, errors: Dict[str, str]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))


def validate_recipe_form(form: Mapping[str, Any]) -> None:
    """Check a recipe form and raise :class:`FormValidationError` on problems.

    Error keys use dotted paths such as ``ingredients.0.name`` so callers can
    attach messages to individual rows.
    """

    errors: Dict[str, str] = {}

    title = form.get("title")
    if not isinstance(title, str) or not title:
        errors["title"] = "Title is required"
    elif len(title) > TITLE_MAX_LENGTH:
        errors["title"] = "Title too long"

    ingredients = form.get("ingredients")
    if not isinstance(ingredients, list) or not ingredients:
        errors["ingredients"] = "At least one ingredient is required"
    else:
        for index, ingredient in enumerate(ingredients):
            ingredient_id = ingredient.get("id") if isinstance(ingredient, Mapping) else None
            name = ingredient.get("name") if isinstance(ingredient, Mapping) else None
            quantity = ingredient.get("quantity") if isinstance(ingredient, Mapping) else None

            if not isinstance(name, str) or not name:
                errors[f"ingredients.{index}.name"] = "Ingredient name is required"
            elif len(name) > INGREDIENT_NAME_MAX_LENGTH:
                errors[f"ingredients.{index}.name"] = "Ingredient name too long"

            if not isinstance(quantity, str) or not quantity:
                errors[f"ingredients.{index}.quantity"] = "Quantity is required"
            elif len(quantity) > QUANTITY_MAX_LENGTH:
                errors[f"ingredients.{index}.quantity"] = "Quantity description too long"

            if ingredient_id and not _is_uuid(ingredient_id):
                errors[f"ingredients.{index}.id"] = "Invalid ingredient id"

    instructions = form.get("instructions")
    if not isinstance(instructions, list) or not instructions:
        errors["instructions"] = "At least one instruction step is required."
    else:
        for index, step in enumerate(instructions):
            if not isinstance(step, str) or not step:
                errors[f"instructions.{index}"] = "Instruction step cannot be empty."
            elif len(step) > INSTRUCTION_MAX_LENGTH:
                errors[f"instructions.{index}"] = (
                    "Instruction step is too long (max 1000 characters)."
                )

    cuisine = form.get("cuisine")
    if cuisine is not None and (not isinstance(cuisine, str) or len(cuisine) > CUISINE_MAX_LENGTH):
        errors["cuisine"] = "Cuisine tags string too long (max 200 characters)"

    if errors:
        raise FormValidationError(errors)


def _is_uuid(value: Any) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


__all__ = ["FormValidationError", "validate_recipe_form"]
