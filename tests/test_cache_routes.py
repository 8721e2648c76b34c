def test_stats_report_size_and_keys(api, cache):
    cache.set("product:1", {"success": True}, 60)
    cache.set("product:2", {"success": True}, 60)

    body = api.get("/api/cache").json()
    assert body["success"] is True
    assert body["data"]["cacheSize"] == 2
    assert sorted(body["data"]["cachedKeys"]) == ["product:1", "product:2"]
    assert body["data"]["message"] == "Cache contains 2 items"


def test_delete_single_key(api, cache):
    cache.set("product:1", {"success": True}, 60)

    assert api.delete("/api/cache", params={"key": "product:1"}).json()["message"] == "Cache key 'product:1' deleted"
    assert api.delete("/api/cache", params={"key": "product:1"}).json()["message"] == "Cache key 'product:1' not found"


def test_delete_everything(api, cache):
    cache.set("a", 1, 60)
    cache.set("b", 2, 60)

    assert api.delete("/api/cache").json()["message"] == "All cache cleared successfully"
    assert cache.stats()["size"] == 0


def test_sweep_removes_expired_entries(api, cache, clock):
    cache.set("short", 1, 1)
    cache.set("long", 2, 600)
    clock.advance(5)

    body = api.post("/api/cache").json()
    assert body["data"]["itemsBefore"] == 2
    assert body["data"]["itemsAfter"] == 1
    assert body["data"]["itemsRemoved"] == 1
    assert cache.stats()["keys"] == ["long"]
