from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from parksync.core.config import settings
from parksync.core.store import DurableStore
from parksync.schemas.cache import CachedGarages, MapRegion
from parksync.schemas.queue import now_ms
from .base_service import BaseService


class OfflineCache(BaseService):
    """Keeps the last fetched garages so the map has something to show offline."""

    def __init__(self, store: DurableStore, key: str = None):
        super().__init__(store, key or settings.CACHE_GARAGES_KEY)

    async def save_garages(
        self,
        garages: List[Dict[str, Any]],
        region: Optional[Union[MapRegion, Dict[str, Any]]] = None,
    ) -> CachedGarages:
        if isinstance(region, dict):
            region = MapRegion.model_validate(region)
        cached = CachedGarages(garages=garages, region=region, timestamp=now_ms())
        await self.write_slot(cached.model_dump_json(by_alias=True))
        self.logger.debug("Garages cached", count=len(garages))
        return cached

    async def load_garages(self) -> Optional[CachedGarages]:
        raw = await self.read_slot()
        if not raw:
            return None
        try:
            return CachedGarages.model_validate_json(raw)
        except ValidationError as e:
            self.logger.warning("Failed to parse cached garages", error=str(e))
            return None

    async def clear_garages(self):
        await self.clear_slot()
