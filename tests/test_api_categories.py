from __future__ import annotations

from typing import Callable

from fastapi.testclient import TestClient


def _headcategory(client: TestClient, name: str, craft: str = "haken") -> dict:
    response = client.post("/api/headcategories", data={"name": name, "type": craft})
    assert response.status_code == 201, response.text
    return response.json()


def _category(client: TestClient, name: str, **fields) -> dict:
    response = client.post("/api/categories", data={"name": name, **fields})
    assert response.status_code == 201, response.text
    return response.json()


def test_category_inherits_headcategory_type(admin: TestClient) -> None:
    head = _headcategory(admin, "Knuffels & Poppen", craft="borduren")
    assert head["slug"] == "knuffels-poppen"
    category = _category(admin, "Kleine Beren", headcategoryId=str(head["id"]))
    assert category["type"] == "borduren"
    assert category["slug"] == "kleine-beren"

    linked = admin.get(f"/api/headcategories/{head['id']}/categories").json()
    assert [c["id"] for c in linked] == [category["id"]]


def test_category_validation(admin: TestClient) -> None:
    assert admin.post("/api/categories", data={"name": ""}).status_code == 400
    response = admin.post("/api/categories", data={"name": "Sokken", "type": "breien"})
    assert response.status_code == 400
    assert "type must be one of" in response.json()["error"]
    assert admin.post("/api/categories", data={"name": "X", "headcategoryId": "42"}).status_code == 400


def test_headimage_upload_and_removal(admin: TestClient, make_image: Callable[..., bytes]) -> None:
    response = admin.post(
        "/api/categories",
        data={"name": "Tassen", "type": "haken"},
        files={"headimage": ("tas.png", make_image(2400, 2400), "image/png")},
    )
    assert response.status_code == 201, response.text
    category = response.json()
    assert category["headimageurl"].endswith("-tas.png")

    cleared = admin.delete(f"/api/categories/{category['id']}/headimage")
    assert cleared.json()["headimageurl"] is None


def test_category_items_ranked_and_by_type(admin: TestClient) -> None:
    haken = _category(admin, "Amigurumi", type="haken")
    borduren = _category(admin, "Merklappen", type="borduren")
    first = admin.post("/api/items", data={"name": "Beer", "categoryIds": f"[{haken['id']}]"}).json()
    second = admin.post("/api/items", data={"name": "Konijn", "categoryIds": f"[{haken['id']}]"}).json()
    third = admin.post("/api/items", data={"name": "Lap", "categoryIds": f"[{borduren['id']}]"}).json()
    admin.patch(f"/api/items/{first['id']}", data={"is_favorite": "true"})

    in_category = admin.get(f"/api/categories/{haken['id']}/items").json()
    assert [i["id"] for i in in_category] == [first["id"], second["id"]]

    newest = admin.get("/api/categories/type/haken/items", params={"limit": 1}).json()
    assert [i["id"] for i in newest] == [second["id"]]
    assert [i["id"] for i in admin.get("/api/categories/type/borduren/items").json()] == [third["id"]]

    cats = admin.get(f"/api/items/{third['id']}/categories").json()
    assert [c["slug"] for c in cats] == ["merklappen"]


def test_category_orders(admin: TestClient) -> None:
    a, b, c = (_category(admin, name) for name in ("Aa", "Bb", "Cc"))
    body = {"categories": [{"id": c["id"], "order": 0}, {"id": b["id"], "order": 1}, {"id": a["id"], "order": 2}]}
    assert admin.patch("/api/categories/orders", json=body).status_code == 200
    assert [x["id"] for x in admin.get("/api/categories").json()] == [c["id"], b["id"], a["id"]]

    negative = admin.patch("/api/categories/orders", json={"categories": [{"id": a["id"], "order": -1}]})
    assert negative.status_code == 400


def test_headcategory_crud_and_orders(admin: TestClient) -> None:
    one = _headcategory(admin, "Een")
    two = _headcategory(admin, "Twee")
    cat = _category(admin, "Kat")

    updated = admin.patch(
        f"/api/headcategories/{one['id']}",
        data={"description": "Eerste", "categoryIds": f"[{cat['id']}]"},
    ).json()
    assert updated["description"] == "Eerste"
    assert [c["id"] for c in admin.get(f"/api/headcategories/{one['id']}/categories").json()] == [cat["id"]]

    body = {"headcategories": [{"id": two["id"], "order": 0}, {"id": one["id"], "order": 1}]}
    assert admin.patch("/api/headcategories/orders", json=body).json() == {"ok": True}
    assert [h["id"] for h in admin.get("/api/headcategories").json()] == [two["id"], one["id"]]

    assert admin.delete(f"/api/headcategories/{one['id']}").json() == {"ok": True}
    assert admin.get(f"/api/headcategories/{one['id']}").status_code == 404
    assert admin.get(f"/api/categories/{cat['id']}").status_code == 200


def test_delete_category_unlinks_items(admin: TestClient) -> None:
    cat = _category(admin, "Weg")
    item = admin.post("/api/items", data={"name": "Blijft", "categoryIds": f"[{cat['id']}]"}).json()
    assert admin.delete(f"/api/categories/{cat['id']}").json() == {"ok": True}
    assert admin.get(f"/api/items/{item['id']}/categories").json() == []
    assert admin.get(f"/api/categories/{cat['id']}/items").status_code == 404
