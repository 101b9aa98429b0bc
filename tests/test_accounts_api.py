from conftest import add_product, register_shop, register_user


def test_register_and_login_user(client):
    user = register_user(client)
    assert user["type"] == "user"
    assert "password" not in user and "password_hash" not in user

    resp = client.post("/api/login", json={"mobile": "8000000001", "password": "secret"})
    assert resp.status_code == 200
    assert resp.json()["id"] == user["id"]


def test_login_as_shopkeeper(client):
    shop = register_shop(client)
    resp = client.post("/api/login", json={"mobile": "9000000001", "password": "secret"})
    assert resp.status_code == 200
    assert resp.json()["type"] == "shopkeeper"
    assert resp.json()["shop_name"] == shop["shop_name"]


def test_wrong_password(client):
    register_user(client)
    resp = client.post("/api/login", json={"mobile": "8000000001", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid credentials"


def test_mobile_must_be_ten_digits(client):
    resp = client.post("/api/register/user", json={"name": "A", "mobile": "12345", "password": "x"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Please enter a valid 10-digit mobile number."


def test_mobile_is_unique_across_account_types(client):
    register_user(client, mobile="9000000001")
    resp = client.post("/api/register/shopkeeper", json={
        "name": "R", "mobile": "9000000001", "password": "x", "shop_name": "S", "latitude": 26.8, "longitude": 80.9,
    })
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Mobile registered. Please login."


def test_shop_needs_a_real_location(client):
    resp = client.post("/api/register/shopkeeper", json={
        "name": "R", "mobile": "9000000001", "password": "x", "shop_name": "S", "latitude": 0, "longitude": 0,
    })
    assert resp.status_code == 400
    assert "GPS" in resp.json()["detail"]


def test_new_shop_appears_in_directory(client):
    assert client.get("/api/shopkeepers").json() == []
    register_shop(client)
    shops = client.get("/api/shopkeepers").json()
    assert [s["shop_name"] for s in shops] == ["Sharma Kirana"]


def test_status_change_refreshes_directory_and_detail(client):
    shop = register_shop(client)
    assert client.get("/api/shopkeepers").json()[0]["is_open"] is True
    assert client.get(f"/api/shops/{shop['id']}").json()["is_open"] is True

    resp = client.put(f"/api/shops/{shop['id']}/status", json={"is_open": False})
    assert resp.status_code == 200
    assert client.get("/api/shopkeepers").json()[0]["is_open"] is False
    assert client.get(f"/api/shops/{shop['id']}").json()["is_open"] is False


def test_directory_is_served_from_cache(client, clock, db):
    from apps.market.models import Shopkeeper

    register_shop(client)
    assert len(client.get("/api/shopkeepers").json()) == 1

    # a write that bypasses the API is only seen once the entry expires
    db.add(Shopkeeper(name="X", mobile="9111111111", password_hash="x", shop_name="Hidden", latitude=26.0, longitude=80.0))
    db.commit()
    assert len(client.get("/api/shopkeepers").json()) == 1
    clock.advance(31)
    assert len(client.get("/api/shopkeepers").json()) == 2


def test_profile_update_renames_shop_everywhere(client):
    shop = register_shop(client)
    add_product(client, shop["id"], "Atta", is_special_offer=True)
    assert client.get("/api/products/offers").json()[0]["shop_name"] == "Sharma Kirana"
    client.get(f"/api/shops/{shop['id']}")

    resp = client.post("/api/shop/profile", json={
        "id": shop["id"],
        "name": "Ramesh",
        "shop_name": "Sharma General Store",
        "opening_time": "08:00",
        "closing_time": "21:00",
    })
    assert resp.status_code == 200
    assert resp.json()["opening_time"] == "08:00"
    # location untouched when not sent
    assert resp.json()["latitude"] == 26.85

    assert client.get("/api/products/offers").json()[0]["shop_name"] == "Sharma General Store"
    assert client.get(f"/api/shops/{shop['id']}").json()["shop_name"] == "Sharma General Store"
    assert client.get("/api/shopkeepers").json()[0]["shop_name"] == "Sharma General Store"


def test_profile_update_rejects_bad_location(client):
    shop = register_shop(client)
    resp = client.post("/api/shop/profile", json={
        "id": shop["id"], "name": "R", "shop_name": "S", "latitude": 100, "longitude": 80,
    })
    assert resp.status_code == 400


def test_unknown_shop(client):
    assert client.get("/api/shops/999").status_code == 404
    assert client.put("/api/shops/999/status", json={"is_open": True}).status_code == 404
    assert client.post("/api/shop/profile", json={"id": 999, "name": "R", "shop_name": "S"}).status_code == 404


def test_reviews_update_rating(client):
    shop = register_shop(client)
    first = register_user(client, mobile="8000000001", name="Sita")
    second = register_user(client, mobile="8000000002", name="Gita")

    detail = client.get(f"/api/shops/{shop['id']}").json()
    assert detail["avg_rating"] == 0.0
    assert detail["total_ratings"] == 0

    client.post("/api/reviews", json={"shop_id": shop["id"], "user_id": first["id"], "rating": 5, "comment": "Fresh"})
    client.post("/api/reviews", json={"shop_id": shop["id"], "user_id": second["id"], "rating": 4})

    detail = client.get(f"/api/shops/{shop['id']}").json()
    assert detail["avg_rating"] == 4.5
    assert detail["total_ratings"] == 2
    assert {r["user_name"] for r in detail["reviews"]} == {"Sita", "Gita"}


def test_one_review_per_user(client):
    shop = register_shop(client)
    user = register_user(client)
    body = {"shop_id": shop["id"], "user_id": user["id"], "rating": 3}
    assert client.post("/api/reviews", json=body).status_code == 200
    resp = client.post("/api/reviews", json=body)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Already reviewed"


def test_review_rating_range(client):
    shop = register_shop(client)
    user = register_user(client)
    resp = client.post("/api/reviews", json={"shop_id": shop["id"], "user_id": user["id"], "rating": 6})
    assert resp.status_code == 422
