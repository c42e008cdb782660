from marketplace.extensions import db
from marketplace.model import Business
from marketplace.model.business import PLACEHOLDER_IMAGE


def test_create_requires_name_and_owner(client):
    resp = client.post("/api/businesses", json={"name": "No owner"})
    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "error": "Name and owner_id are required"}


def test_create_uses_placeholder_images(business):
    assert business["logo_url"] == PLACEHOLDER_IMAGE
    assert business["banner_url"] == PLACEHOLDER_IMAGE
    assert business["image_url"] == PLACEHOLDER_IMAGE
    assert business["is_active"] is True


def test_categories_round_trip(client, business):
    resp = client.get(f"/api/businesses?id={business['id']}")
    data = resp.get_json()
    assert data["success"] is True
    assert data["businesses"][0]["categories"] == ["bakery", "cafe"]
    assert data["businesses"][0]["payment_methods"] == ["cash", "upi"]


def test_rating_defaults_when_missing(client, business):
    data = client.get(f"/api/businesses/{business['id']}").get_json()
    assert data["business"]["rating"] == 4.5


def test_list_by_owner_accepts_uid_and_numeric(client, business):
    client.post("/api/businesses", json={"name": "Numeric", "owner_id": 42})
    by_uid = client.get("/api/businesses?ownerId=firebase-owner-1").get_json()["businesses"]
    by_num = client.get("/api/businesses?ownerId=42").get_json()["businesses"]
    assert [b["name"] for b in by_uid] == ["Crumbs & Co"]
    assert [b["name"] for b in by_num] == ["Numeric"]


def test_list_all_only_active(client, business):
    client.post("/api/businesses", json={"name": "Closed", "owner_id": "x", "is_active": False})
    names = [b["name"] for b in client.get("/api/businesses").get_json()["businesses"]]
    assert names == ["Crumbs & Co"]


def test_invalid_id_is_400(client):
    assert client.get("/api/businesses?id=abc").status_code == 400
    assert client.get("/api/businesses/abc").status_code == 400


def test_partial_update_keeps_other_fields(client, business):
    resp = client.put("/api/businesses", json={"id": business["id"], "phone": "12345", "delivery_fee": 30})
    assert resp.status_code == 200
    updated = resp.get_json()["business"]
    assert updated["phone"] == "12345"
    assert updated["delivery_fee"] == 30.0
    assert updated["name"] == "Crumbs & Co"
    assert updated["categories"] == ["bakery", "cafe"]


def test_update_by_path_and_missing(client, business):
    resp = client.put(f"/api/businesses/{business['id']}", json={"categories": ["patisserie"]})
    assert resp.get_json()["business"]["categories"] == ["patisserie"]
    assert client.put("/api/businesses", json={"id": 9999, "name": "x"}).status_code == 404
    assert client.put("/api/businesses", json={"name": "x"}).status_code == 400


def test_update_rejects_bad_values(client, business):
    resp = client.put("/api/businesses", json={"id": business["id"], "categories": "bakery"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid value for categories"


def test_delete(client, app):
    bid = client.post("/api/businesses", json={"name": "Temp", "owner_id": "o"}).get_json()["business"]["id"]
    resp = client.delete(f"/api/businesses/{bid}")
    assert resp.get_json() == {"success": True, "message": "Business deleted successfully"}
    assert client.delete(f"/api/businesses/{bid}").status_code == 404
    with app.app_context():
        assert db.session.get(Business, bid) is None


def test_delete_with_products_conflicts(client, business, make_product):
    make_product()
    resp = client.delete(f"/api/businesses/{business['id']}")
    assert resp.status_code == 409
    assert client.get(f"/api/businesses/{business['id']}").status_code == 200


def test_details_lists_every_product(client, business, make_product):
    make_product(name="Visible")
    make_product(name="Hidden", ad_only=True)
    data = client.get(f"/api/businesses/{business['id']}/details").get_json()
    assert data["business"]["id"] == business["id"]
    assert sorted(p["name"] for p in data["products"]) == ["Hidden", "Visible"]


def test_promotional_businesses(client, business):
    data = client.get("/api/businesses/promotional").get_json()
    assert [b["id"] for b in data["businesses"]] == [business["id"]]
