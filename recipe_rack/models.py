from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Ingredient:
    """A named, quantified component of a recipe."""

    id: str
    name: str
    quantity: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "quantity": self.quantity}


@dataclass
class Recipe:
    """Canonical in-memory recipe as handed to display code."""

    id: str
    title: str
    ingredients: List[Ingredient] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)
    cuisines: List[str] = field(default_factory=list)
    prep_time: Optional[str] = None
    cook_time: Optional[str] = None
    serving_size: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the recipe using the JSON field names of the API."""

        return {
            "id": self.id,
            "title": self.title,
            "ingredients": [ingredient.to_dict() for ingredient in self.ingredients],
            "instructions": list(self.instructions),
            "cuisines": list(self.cuisines),
            "prepTime": self.prep_time,
            "cookTime": self.cook_time,
            "servingSize": self.serving_size,
        }


__all__ = ["Ingredient", "Recipe"]
