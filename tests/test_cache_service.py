"""
Tests for the offline garage cache.
"""
import pytest

from parksync.schemas.cache import MapRegion


class TestOfflineCache:

    @pytest.mark.asyncio
    async def test_save_and_load(self, cache):
        garages = [{"id": "g1", "name": "Marina Mall", "latitude": 25.07, "longitude": 55.14}]
        region = {"latitude": 25.07, "longitude": 55.14, "latitudeDelta": 0.05, "longitudeDelta": 0.05}

        saved = await cache.save_garages(garages, region)
        loaded = await cache.load_garages()

        assert loaded.garages == garages
        assert loaded.region == MapRegion(latitude=25.07, longitude=55.14,
                                          latitude_delta=0.05, longitude_delta=0.05)
        assert loaded.timestamp == saved.timestamp > 0

    @pytest.mark.asyncio
    async def test_region_is_optional(self, cache):
        await cache.save_garages([])

        loaded = await cache.load_garages()

        assert loaded.garages == []
        assert loaded.region is None

    @pytest.mark.asyncio
    async def test_load_without_cache(self, cache):
        assert await cache.load_garages() is None

    @pytest.mark.asyncio
    async def test_unparseable_cache_returns_none(self, cache, memory_store):
        await memory_store.set(cache.key, "{broken")

        assert await cache.load_garages() is None

    @pytest.mark.asyncio
    async def test_clear(self, cache):
        await cache.save_garages([{"id": "g1"}])

        await cache.clear_garages()

        assert await cache.load_garages() is None
