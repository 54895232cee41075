"""
Default handler registry for replaying queued parking actions.

Each handler validates the payload shape it expects; a payload that does
not validate raises ``ValidationError`` and counts as a failed delivery.
"""
from typing import Any, Dict, Optional

from parksync.core.api_client import ParkingApiClient
from parksync.core.logging import get_logger
from parksync.schemas.session import (
    ACTION_END_SESSION,
    ACTION_REFRESH_NEARBY,
    ACTION_START_SESSION,
    ACTION_SYNC_EXTEND,
    EndSessionPayload,
    ExtendSessionPayload,
    RefreshNearbyPayload,
    StartSessionPayload,
)
from .cache_service import OfflineCache
from .queue_service import Handler

logger = get_logger(__name__)


def build_handlers(api_client: ParkingApiClient, cache: Optional[OfflineCache] = None) -> Dict[str, Handler]:
    """Map every built-in action type to a coroutine that delivers it."""

    async def sync_extend(payload: Any):
        request = ExtendSessionPayload.model_validate(payload)
        return await api_client.extend_session(request.session_id, request.minutes)

    async def start_session(payload: Any):
        request = StartSessionPayload.model_validate(payload)
        return await api_client.start_session_with_qr(request.garage_id, request.qr_data)

    async def end_session(payload: Any):
        request = EndSessionPayload.model_validate(payload)
        return await api_client.end_session(request.session_id)

    async def refresh_nearby(payload: Any):
        request = RefreshNearbyPayload.model_validate(payload)
        garages = await api_client.nearby_garages(request.lat, request.lng, request.radius)
        if cache is not None:
            await cache.save_garages(garages)
        logger.debug("Nearby garages refreshed", count=len(garages))
        return garages

    return {
        ACTION_SYNC_EXTEND: sync_extend,
        ACTION_START_SESSION: start_session,
        ACTION_END_SESSION: end_session,
        ACTION_REFRESH_NEARBY: refresh_nearby,
    }
