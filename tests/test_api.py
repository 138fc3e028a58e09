"""Tests for the Cookbook HTTP API.

Tests cover:
- Ready endpoint
- Recipe listing, lookup, create and update
- Reference data endpoints
- Multipart ingest upload
- Recipe images
"""

import json

import pytest


def _upload(client, files):
    return client.post(
        "/api/ingest",
        files={name: (path.name, path.read_bytes(), "application/json") for name, path in files.items()},
    )


@pytest.fixture
def ingested(client, payload_files):
    response = _upload(client, payload_files)
    assert response.status_code == 200
    return response.json()


def test_ready_endpoint(client):
    response = client.get("/api/ready")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "database_ok": True}


def test_ingest_upload(ingested):
    assert ingested == {
        "ingredients": 1,
        "preparations": 1,
        "units": 1,
        "ingredient_units": 1,
        "authors": 1,
        "recipes": 1,
    }


def test_ingest_missing_field(client, payload_files):
    del payload_files["units"]
    response = _upload(client, payload_files)
    assert response.status_code == 400
    assert response.json()["detail"] == "Couldn't get form fields"


def test_ingest_invalid_file(client, payload_files):
    payload_files["recipes"].write_text(json.dumps([{"id": "r1"}]))
    response = _upload(client, payload_files)
    assert response.status_code == 422
    assert response.json()["detail"].startswith("Parsing recipes: [0].")


def test_ingest_unpublished_recipe(client, payload_files, recipe_payload):
    payload_files["recipes"].write_text(json.dumps([recipe_payload(published_at=None)]))
    response = _upload(client, payload_files)
    assert response.status_code == 500
    assert response.json()["detail"].startswith("Ingesting recipes:")


def test_list_recipes(client, ingested):
    response = client.get("/api/recipes")
    assert response.status_code == 200
    data = response.json()
    assert [r["id"] for r in data] == ["r1"]
    assert data[0]["total_time"] == "PT40M"
    assert data[0]["author"]["name"] == "Chef A"
    step_setting = data[0]["steps"][0]["capability"]["settings"][0]
    assert step_setting["reference_setting"]["id"] == "kitchenos:Kenwood:TimeSetting"


def test_list_custom_recipes_only(client, ingested):
    response = client.get("/api/recipes", params={"all": "false"})
    assert response.status_code == 200
    assert response.json() == []


def test_list_recipe_items(client, ingested):
    response = client.get("/api/recipes/items")
    assert response.status_code == 200
    assert response.json() == [
        {"id": "r1", "name": "Bread", "author_name": "Chef A", "total_time": "PT40M"}
    ]


def test_get_recipe(client, ingested):
    response = client.get("/api/recipes/r1")
    assert response.status_code == 200
    assert response.json()["exposed_id"] == "bread-r1"


def test_get_missing_recipe(client):
    response = client.get("/api/recipes/nope")
    assert response.status_code == 404


def test_create_recipe(client, recipe_payload):
    payload = recipe_payload(id="c1", published_at=None)
    response = client.post("/api/recipes", json=payload)
    assert response.status_code == 201
    assert response.json()["published_at"] is not None

    duplicate = client.post("/api/recipes", json=payload)
    assert duplicate.status_code == 409

    custom = client.get("/api/recipes", params={"all": "false"}).json()
    assert [r["id"] for r in custom] == ["c1"]


def test_update_recipe(client, ingested, recipe_payload):
    response = client.put("/api/recipes/r1", json=recipe_payload(name="Sourdough", cook_time="PT1H"))
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Sourdough"
    assert data["cook_time"] == "PT1H"


def test_update_recipe_id_mismatch(client, recipe_payload):
    response = client.put("/api/recipes/other", json=recipe_payload())
    assert response.status_code == 400


def test_update_missing_recipe(client, recipe_payload):
    response = client.put("/api/recipes/r9", json=recipe_payload(id="r9"))
    assert response.status_code == 404


def test_create_recipe_rejects_bad_duration(client, recipe_payload):
    response = client.post("/api/recipes", json=recipe_payload(total_time="soon"))
    assert response.status_code == 422


def test_reference_endpoints(client, ingested):
    assert client.get("/api/ingredients").json() == [{"id": "flour", "name": "Flour"}]
    assert client.get("/api/preparations").json() == [{"id": "sifted", "name": "Sifted"}]

    units = client.get("/api/ingredients/flour/units")
    assert units.status_code == 200
    assert units.json() == [{"id": "g", "name": "gram", "abbreviation": "g", "dimension": "mass"}]

    assert client.get("/api/ingredients/unobtainium/units").status_code == 404


def test_images(client, ingested):
    assert client.get("/api/images/r1").status_code == 404

    response = client.put("/api/images/r1", content=b"\x89PNG-data")
    assert response.status_code == 204

    by_id = client.get("/api/images/r1")
    assert by_id.status_code == 200
    assert by_id.content == b"\x89PNG-data"
    assert by_id.headers["content-type"] == "application/octet-stream"

    # exposed id resolves to the same image
    assert client.get("/api/images/bread-r1").content == b"\x89PNG-data"

    client.put("/api/images/r1", content=b"replaced")
    assert client.get("/api/images/r1").content == b"replaced"


def test_put_empty_image(client):
    assert client.put("/api/images/r1", content=b"").status_code == 400


def test_unknown_route_without_fallback(client):
    assert client.get("/api/unknown/thing").status_code == 404


def test_ingest_duration_out_of_range(client, payload_files, recipe_payload):
    payload_files["recipes"].write_text(json.dumps([recipe_payload(total_time="P99999999W")]))
    response = _upload(client, payload_files)
    assert response.status_code == 422
    assert "[0].total_time" in response.json()["detail"]


def test_ingest_file_too_large(client, payload_files, monkeypatch):
    from cookbook.settings import settings

    monkeypatch.setattr(settings, "max_upload_bytes", 8)
    response = _upload(client, payload_files)
    assert response.status_code == 413
    assert response.json()["detail"] == "ingredients.json is too large"
