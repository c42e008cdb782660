def test_health(client):
    assert client.get("/").get_json() == {"success": True, "msg": "API running"}


def test_unknown_route_uses_envelope(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_method_not_allowed(client):
    resp = client.patch("/api/products")
    assert resp.status_code == 405
    assert resp.get_json()["success"] is False


def test_cors_headers(client):
    resp = client.get("/api/businesses", headers={"Origin": "https://shop.example.com"})
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
