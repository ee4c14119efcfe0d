"""Unit tests for the TTL/version cache and its storage media."""

import json
import logging

import pytest

from labordata.cache import (
    CacheDomain,
    CacheStore,
    JsonFileStorage,
    MemoryStorage,
    build_cache_key,
    ttl_for,
)


@pytest.mark.unit
def test_build_cache_key():
    key = build_cache_key(CacheDomain.OES_WAGES, "151252", "S0600000")
    assert key == "bls_cache:oes_wages:151252:S0600000"


@pytest.mark.unit
def test_build_cache_key_rejects_unknown_domain_and_separator():
    with pytest.raises(ValueError):
        build_cache_key("weather", "x")
    with pytest.raises(ValueError):
        build_cache_key(CacheDomain.SNAPSHOT, "a:b")


@pytest.mark.unit
def test_ttls_by_domain():
    assert ttl_for(CacheDomain.OES_WAGES) > ttl_for(CacheDomain.JOLTS_OPENINGS)


@pytest.mark.unit
def test_put_then_get(cache):
    cache.put("bls_cache:snapshot:national", {"rate": 4.1}, ttl=60)
    assert cache.get("bls_cache:snapshot:national") == {"rate": 4.1}


@pytest.mark.unit
def test_entry_shape(cache, storage, clock):
    cache.put("bls_cache:snapshot:national", [1, 2], ttl=60)
    entry = json.loads(storage.get_item("bls_cache:snapshot:national"))
    assert set(entry) == {"data", "cachedAt", "expiresAt", "version"}
    assert entry["version"] == cache.version


@pytest.mark.unit
def test_expired_entry_is_a_miss_and_removed(cache, storage, clock):
    key = "bls_cache:cpi_current:all_items"
    cache.put(key, {"cpi": 310.0}, ttl=60)

    clock.advance(59)
    assert cache.get(key) == {"cpi": 310.0}

    clock.advance(1)
    assert cache.get(key) is None
    assert storage.get_item(key) is None


@pytest.mark.unit
def test_version_mismatch_is_a_miss_and_removed(storage, clock):
    key = "bls_cache:oes_wages:151252:N0000000"
    CacheStore(storage, clock=clock, version=1).put(key, {"median": 1}, ttl=600)

    newer = CacheStore(storage, clock=clock, version=2)
    assert newer.get(key) is None
    assert storage.get_item(key) is None


@pytest.mark.unit
def test_corrupted_entry_is_a_miss_and_removed(cache, storage):
    key = "bls_cache:snapshot:national"
    storage.set_item(key, "{not json")
    assert cache.get(key) is None
    assert key not in storage.keys()


@pytest.mark.unit
def test_write_failures_are_swallowed(clock, caplog):
    class FullDisk(MemoryStorage):
        def set_item(self, key, value):
            raise OSError("No space left on device")

    cache = CacheStore(FullDisk(), clock=clock)
    with caplog.at_level(logging.WARNING, logger="labordata.cache"):
        cache.put("bls_cache:snapshot:national", {"a": 1}, ttl=60)
    assert cache.get("bls_cache:snapshot:national") is None
    assert "No space left" in caplog.text


@pytest.mark.unit
def test_clear_all_only_touches_cache_prefix(cache, storage):
    cache.put("bls_cache:snapshot:national", 1, ttl=60)
    cache.put("bls_cache:cpi_current:all_items", 2, ttl=60)
    storage.set_item("user_settings", "{}")

    assert cache.clear_all() == 2
    assert storage.keys() == ["user_settings"]


@pytest.mark.unit
def test_clear_all_with_narrower_prefix(cache, storage):
    cache.put("bls_cache:snapshot:national", 1, ttl=60)
    cache.put("bls_cache:cpi_current:all_items", 2, ttl=60)

    assert cache.clear_all("bls_cache:snapshot") == 1
    assert storage.keys() == ["bls_cache:cpi_current:all_items"]


@pytest.mark.unit
def test_json_file_storage_persists_between_stores(tmp_path, clock):
    path = tmp_path / "nested" / "bls_cache.json"
    CacheStore(JsonFileStorage(path), clock=clock).put("bls_cache:snapshot:national", {"x": 1}, ttl=60)

    assert path.exists()
    reopened = CacheStore(JsonFileStorage(path), clock=clock)
    assert reopened.get("bls_cache:snapshot:national") == {"x": 1}


@pytest.mark.unit
def test_json_file_storage_ignores_unreadable_file(tmp_path):
    path = tmp_path / "bls_cache.json"
    path.write_text("garbage")
    storage = JsonFileStorage(path)
    assert storage.keys() == []
    storage.set_item("k", "v")
    assert storage.get_item("k") == "v"
