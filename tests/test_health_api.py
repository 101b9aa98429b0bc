from conftest import add_product, register_shop


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_health_db(client):
    resp = client.get("/api/health/db")
    assert resp.status_code == 200
    assert resp.json()["scope"] == "db"


def test_health_cache_reports_both_caches(client):
    register_shop(client)
    client.get("/api/shopkeepers")
    client.get("/api/shopkeepers")

    caches = client.get("/api/health/cache").json()["caches"]
    assert caches["responses"]["hits"] == 1
    assert caches["responses"]["max_entries"] == 150
    assert caches["distances"]["max_entries"] == 1000
    assert set(caches["sweepers"]) == {"response_sweep", "distance_sweep"}


def test_health_synonyms(client):
    body = client.get("/api/health/synonyms").json()
    assert body["status"] == "healthy"
    assert body["metrics"]["total_entries"] > 0


def test_health_feature_flags(client):
    flags = client.get("/api/health/feature-flags").json()["flags"]
    assert flags["SEARCH_SYNONYMS"] is True
    assert flags["RESPONSE_CACHE"] is True


def test_broken_synonym_file_does_not_break_search(client, tmp_path, monkeypatch):
    from apps.core.config import settings
    from apps.market.services.synonyms import get_synonym_dictionary

    path = tmp_path / "synonyms.yml"
    path.write_text("categories:\n  veg: {aloo: [potato\n", encoding="utf-8")
    monkeypatch.setattr(settings, "synonyms_path", str(path))
    get_synonym_dictionary.cache_clear()
    try:
        shop = register_shop(client)
        add_product(client, shop["id"], "Aloo")

        resp = client.get("/api/products", params={"search": "aloo"})
        assert resp.status_code == 200
        assert [p["name"] for p in resp.json()] == ["Aloo"]

        health = client.get("/api/health/synonyms")
        assert health.status_code == 200
        assert health.json()["status"] == "unhealthy"
    finally:
        get_synonym_dictionary.cache_clear()
