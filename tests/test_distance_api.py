from apps.market.caching import distance_key
from apps.market.models import Shopkeeper

from conftest import register_shop

ORIGIN = {"user_latitude": 26.80, "user_longitude": 80.90}


def _shop_without_location(db, mobile="9000000099"):
    # registration refuses (0, 0), so legacy rows are inserted directly
    shop = Shopkeeper(name="Old", mobile=mobile, password_hash="x", shop_name="Old Shop", latitude=0.0, longitude=0.0)
    db.add(shop)
    db.commit()
    return shop.id


def test_single_distance(client):
    shop = register_shop(client)
    resp = client.post("/api/distance", json={**ORIGIN, "shop_id": shop["id"]})
    assert resp.status_code == 200
    body = resp.json()
    assert body["shop_id"] == shop["id"]
    assert body["shop_name"] == "Sharma Kirana"
    assert 7 < body["distance_km"] < 8
    assert body["formatted"].endswith(" km")
    assert body["error"] is None


def test_single_distance_is_cached(client, caches):
    shop = register_shop(client)
    client.post("/api/distance", json={**ORIGIN, "shop_id": shop["id"]})
    assert distance_key(shop["id"], 26.80, 80.90) in caches.distances


def test_short_distance_in_metres(client):
    shop = register_shop(client, latitude=26.8010, longitude=80.9000)
    body = client.post("/api/distance", json={**ORIGIN, "shop_id": shop["id"]}).json()
    assert body["formatted"].endswith(" m")


def test_bad_origin_is_rejected(client):
    shop = register_shop(client)
    resp = client.post("/api/distance", json={"user_latitude": 0, "user_longitude": 0, "shop_id": shop["id"]})
    assert resp.status_code == 400
    assert "(0, 0)" in resp.json()["detail"]

    resp = client.post("/api/distance", json={"user_latitude": 95, "user_longitude": 80, "shop_id": shop["id"]})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Latitude must be between -90 and 90"

    resp = client.post("/api/distance", json={"shop_id": shop["id"]})
    assert resp.status_code == 400


def test_unknown_shop(client):
    resp = client.post("/api/distance", json={**ORIGIN, "shop_id": 4242})
    assert resp.status_code == 404


def test_shop_with_bad_location(client, db):
    shop_id = _shop_without_location(db)
    resp = client.post("/api/distance", json={**ORIGIN, "shop_id": shop_id})
    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("Shop has invalid location data")


def test_batch_keeps_order_and_reports_bad_shops_inline(client, db, caches):
    a = register_shop(client, mobile="9000000001", shop_name="A")
    b = register_shop(client, mobile="9000000002", shop_name="B", latitude=26.90, longitude=81.00)
    bad = _shop_without_location(db)

    resp = client.post("/api/distances", json={**ORIGIN, "shop_ids": [b["id"], bad, a["id"]]})
    assert resp.status_code == 200
    distances = resp.json()["distances"]
    assert [d["shop_id"] for d in distances] == [b["id"], bad, a["id"]]

    assert distances[0]["error"] is None
    assert distances[2]["error"] is None
    assert distances[1]["distance_km"] is None
    assert distances[1]["formatted"] == "Location unavailable"
    assert "(0, 0)" in distances[1]["error"]

    # only valid results are cached
    assert distance_key(a["id"], 26.80, 80.90) in caches.distances
    assert distance_key(bad, 26.80, 80.90) not in caches.distances


def test_batch_matches_single_requests(client):
    a = register_shop(client, mobile="9000000001", shop_name="A")
    b = register_shop(client, mobile="9000000002", shop_name="B", latitude=26.90, longitude=81.00)

    batch = client.post("/api/distances", json={**ORIGIN, "shop_ids": [a["id"], b["id"]]}).json()["distances"]
    singles = [client.post("/api/distance", json={**ORIGIN, "shop_id": sid}).json() for sid in (a["id"], b["id"])]
    assert [d["distance_km"] for d in batch] == [s["distance_km"] for s in singles]


def test_batch_unknown_shop(client):
    shop = register_shop(client)
    distances = client.post("/api/distances", json={**ORIGIN, "shop_ids": [shop["id"], 777]}).json()["distances"]
    assert distances[1] == {
        "shop_id": 777,
        "shop_name": None,
        "distance_km": None,
        "formatted": "Location unavailable",
        "error": "Shop not found",
    }


def test_batch_validation(client):
    assert client.post("/api/distances", json={**ORIGIN, "shop_ids": []}).status_code == 400
    assert client.post("/api/distances", json={"user_latitude": 0, "user_longitude": 0, "shop_ids": [1]}).status_code == 400


def test_moving_a_shop_drops_its_distances(client, caches):
    shop = register_shop(client)
    client.post("/api/distance", json={**ORIGIN, "shop_id": shop["id"]})
    assert len(caches.distances) == 1

    resp = client.post("/api/shop/profile", json={
        "id": shop["id"],
        "name": "Ramesh",
        "shop_name": "Sharma Kirana",
        "latitude": 27.0,
        "longitude": 81.0,
    })
    assert resp.status_code == 200
    assert len(caches.distances) == 0

    moved = client.post("/api/distance", json={**ORIGIN, "shop_id": shop["id"]}).json()
    assert moved["distance_km"] > 20
