from __future__ import annotations

from pathlib import Path
import sys

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from recipe_rack import create_app
from recipe_rack.client import RecipeApiError, RecipeClient, filter_recipes
from recipe_rack.config import Settings
from recipe_rack.forms import FormValidationError
from recipe_rack.memory_storage import InMemoryRecipeStorage
from recipe_rack.models import Recipe


@pytest.fixture
def storage():
    return InMemoryRecipeStorage()


@pytest.fixture
def client(storage):
    app = create_app(storage=storage, settings=Settings(storage_backend="memory"))
    http_client = httpx.Client(transport=httpx.WSGITransport(app=app), base_url="http://testserver")
    with RecipeClient("http://testserver", http_client=http_client) as recipe_client:
        yield recipe_client


def client_returning(handler):
    http_client = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://testserver")
    return RecipeClient("http://testserver", http_client=http_client)


def curry_form(**overrides):
    form = {
        "title": "Green Curry",
        "ingredients": [
            {"name": "coconut milk", "quantity": "400 ml"},
            {"name": "curry paste", "quantity": "2 tbsp"},
        ],
        "instructions": ["Fry the paste.", "Add the milk."],
        "cuisine": "Thai, Spicy",
        "prepTime": "10 min",
    }
    form.update(overrides)
    return form


def test_save_then_get_round_trip(client, storage):
    recipe_id = client.save_recipe(curry_form())

    recipe = client.get_recipe(recipe_id)

    assert recipe.id == recipe_id
    assert recipe.title == "Green Curry"
    assert [(item.name, item.quantity) for item in recipe.ingredients] == [
        ("coconut milk", "400 ml"),
        ("curry paste", "2 tbsp"),
    ]
    assert all(item.id for item in recipe.ingredients)
    assert recipe.instructions == ["Fry the paste.", "Add the milk."]
    assert recipe.cuisines == ["Thai", "Spicy"]
    assert recipe.prep_time == "10 min"
    assert recipe.cook_time is None

    stored = storage.get_recipe(recipe_id)
    assert stored["cookTime"] == ""
    assert "cuisine" not in stored


def test_update_preserves_ingredient_ids(client):
    recipe_id = client.save_recipe(curry_form())
    original_ids = [item.id for item in client.get_recipe(recipe_id).ingredients]

    form = curry_form(
        title="Red Curry",
        ingredients=[
            {"id": original_ids[0], "name": "coconut milk", "quantity": "400 ml"},
            {"name": "red curry paste", "quantity": "2 tbsp"},
        ],
    )
    assert client.save_recipe(form, recipe_id=recipe_id) == recipe_id

    updated = client.get_recipe(recipe_id)
    assert updated.title == "Red Curry"
    assert updated.ingredients[0].id == original_ids[0]
    assert updated.ingredients[1].id not in original_ids


def test_list_recipes_normalizes_legacy_records(client, storage):
    storage.add_recipe({"title": "Lasagne", "cuisine": "Italian", "instructions": "Layer.\nBake."})
    storage.add_recipe({"title": "Borscht", "cuisines": ["Ukrainian"], "instructions": ["Simmer."]})

    recipes = client.list_recipes()

    assert [recipe.title for recipe in recipes] == ["Borscht", "Lasagne"]
    assert recipes[1].cuisines == ["Italian"]
    assert recipes[1].instructions == ["Layer.\nBake."]


def test_list_recipes_empty(client):
    assert client.list_recipes() == []


def test_delete_recipe(client):
    recipe_id = client.save_recipe(curry_form())

    client.delete_recipe(recipe_id)

    with pytest.raises(RecipeApiError) as excinfo:
        client.get_recipe(recipe_id)
    assert excinfo.value.message == "Recipe not found."
    assert excinfo.value.status_code == 404


def test_delete_missing_recipe_uses_server_message(client):
    with pytest.raises(RecipeApiError) as excinfo:
        client.delete_recipe("ghost")

    assert excinfo.value.message == "Recipe failed to delete"
    assert excinfo.value.status_code == 400


def test_invalid_form_is_not_sent(client, storage):
    with pytest.raises(FormValidationError):
        client.save_recipe(curry_form(title="", instructions=[]))

    assert storage.list_recipes() == []


def test_error_without_message_falls_back_to_reason_phrase():
    recipe_client = client_returning(lambda request: httpx.Response(503, text="<html>down</html>"))

    with pytest.raises(RecipeApiError) as excinfo:
        recipe_client.list_recipes()

    assert excinfo.value.message == "Failed to fetch recipes: Service Unavailable"


def test_error_message_field_is_preferred():
    recipe_client = client_returning(
        lambda request: httpx.Response(422, json={"message": "Title is required"})
    )

    with pytest.raises(RecipeApiError) as excinfo:
        recipe_client.save_recipe(curry_form())

    assert excinfo.value.message == "Title is required"


def test_unexpected_list_payload_yields_empty_list():
    recipe_client = client_returning(
        lambda request: httpx.Response(200, json={"status": "Success", "data": None})
    )

    assert recipe_client.list_recipes() == []


def test_transport_errors_are_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RecipeApiError) as excinfo:
        client_returning(handler).get_recipe("r1")

    assert excinfo.value.message.startswith("Failed to fetch recipe")


def test_filter_recipes_matches_title_or_cuisine():
    recipes = [
        Recipe(id="1", title="Green Curry", cuisines=["Thai"]),
        Recipe(id="2", title="Pad Thai", cuisines=[]),
        Recipe(id="3", title="Lasagne", cuisines=["Italian"]),
    ]

    assert [recipe.id for recipe in filter_recipes(recipes, "thai")] == ["1", "2"]
    assert [recipe.id for recipe in filter_recipes(recipes, "ITAL")] == ["3"]
    assert filter_recipes(recipes, "") == recipes


def test_ids_with_url_characters_address_the_right_recipe(client, storage):
    storage.add_recipe({"id": "soup", "title": "Soup", "ingredients": [], "instructions": ["Boil."]})
    storage.add_recipe(
        {"id": "soup?v=2", "title": "Soup v2", "ingredients": [], "instructions": ["Boil."]}
    )
    storage.add_recipe(
        {"id": "stew#1", "title": "Stew", "ingredients": [], "instructions": ["Simmer."]}
    )

    assert client.get_recipe("soup?v=2").title == "Soup v2"
    assert client.get_recipe("stew#1").title == "Stew"

    client.save_recipe(curry_form(title="Soup v3"), recipe_id="soup?v=2")
    assert storage.get_recipe("soup?v=2")["title"] == "Soup v3"
    assert storage.get_recipe("soup")["title"] == "Soup"

    client.delete_recipe("soup?v=2")
    assert [recipe["id"] for recipe in storage.list_recipes()] == ["soup", "stew#1"]
