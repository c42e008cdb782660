from datetime import datetime, timedelta

from marketplace.extensions import db
from marketplace.model import PromotionalCode


def _code(client, **body):
    payload = {"code": "save10", "discount_type": "percent", "discount_value": 10}
    payload.update(body)
    return client.post("/api/promotional", json=payload)


def _iso(dt):
    return dt.replace(microsecond=0).isoformat()


def test_create_normalizes_code(client):
    resp = _code(client, usage_limit=5)
    assert resp.status_code == 201
    code = resp.get_json()["code"]
    assert code["code"] == "SAVE10"
    assert code["used_count"] == 0
    assert code["discount_value"] == 10.0


def test_create_rejects_duplicates_and_bad_input(client):
    _code(client)
    assert _code(client, code="Save10").status_code == 409
    assert _code(client, code="X1", discount_type="bogus").status_code == 400
    assert _code(client, code="X2", discount_value=0).status_code == 400
    assert _code(client, code="X3", discount_value=150).status_code == 400
    assert _code(client, code="X4", valid_from="2026-02-01", valid_until="2026-01-01").status_code == 400


def test_list(client, business):
    _code(client, business_id=business["id"])
    _code(client, code="OTHER", is_active=False)
    assert len(client.get("/api/promotional").get_json()["codes"]) == 2
    active = client.get("/api/promotional?active=true").get_json()["codes"]
    assert [c["code"] for c in active] == ["SAVE10"]
    mine = client.get(f"/api/promotional?businessId={business['id']}").get_json()["codes"]
    assert mine[0]["business_name"] == "Crumbs & Co"


def test_validate_ok_case_insensitive(client):
    _code(client)
    resp = client.post("/api/promotional/validate", json={"code": "Save10"})
    assert resp.status_code == 200
    assert resp.get_json()["code"]["code"] == "SAVE10"


def test_validate_outside_window(client):
    now = datetime.utcnow()
    _code(client, code="EXPIRED", valid_until=_iso(now - timedelta(days=1)))
    _code(client, code="FUTURE", valid_from=_iso(now + timedelta(days=1)))
    _code(client, code="OFF", is_active=False)
    for code in ("EXPIRED", "FUTURE", "OFF", "MISSING"):
        resp = client.post("/api/promotional/validate", json={"code": code})
        assert resp.status_code == 404, code
        assert resp.get_json()["success"] is False


def test_validate_requires_code(client):
    assert client.post("/api/promotional/validate", json={}).status_code == 400


def test_validate_usage_limit_reached(app, client):
    _code(client, usage_limit=2)
    with app.app_context():
        PromotionalCode.query.filter_by(code="SAVE10").one().used_count = 2
        db.session.commit()
    resp = client.post("/api/promotional/validate", json={"code": "SAVE10"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "This promotional code has reached its usage limit"


def test_validate_per_user_limit(client, make_order):
    _code(client, max_uses_per_user=1)
    assert client.post("/api/promotional/validate", json={"code": "SAVE10", "userId": "firebase-buyer-1"}).status_code == 200

    make_order(discount_code="save10")
    resp = client.post("/api/promotional/validate", json={"code": "SAVE10", "userId": "firebase-buyer-1"})
    assert resp.status_code == 400
    other = client.post("/api/promotional/validate", json={"code": "SAVE10", "userId": "someone-else"})
    assert other.status_code == 200


def test_mark_used_respects_limit(client):
    _code(client, usage_limit=1)
    first = client.post("/api/promotional/mark-used", json={"code": "save10"})
    assert first.status_code == 200
    assert first.get_json()["code"]["used_count"] == 1

    second = client.post("/api/promotional/mark-used", json={"code": "SAVE10"})
    assert second.status_code == 400
    assert client.get("/api/promotional").get_json()["codes"][0]["used_count"] == 1


def test_mark_used_unlimited(client):
    _code(client)
    for expected in (1, 2, 3):
        resp = client.post("/api/promotional/mark-used", json={"code": "SAVE10"})
        assert resp.get_json()["code"]["used_count"] == expected


def test_mark_used_unknown(client):
    assert client.post("/api/promotional/mark-used", json={"code": "NOPE"}).status_code == 404
    assert client.post("/api/promotional/mark-used", json={}).status_code == 400


def test_create_accepts_numeric_code(client):
    resp = _code(client, code=2024)
    assert resp.status_code == 201
    assert resp.get_json()["code"]["code"] == "2024"
    assert client.post("/api/promotional/validate", json={"code": 2024}).status_code == 200


def test_create_rejects_non_string_discount_type(client):
    resp = _code(client, discount_type=5)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "discount_type must be 'percent' or 'fixed'"
