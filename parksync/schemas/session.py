from typing import Optional
from pydantic import BaseModel, Field


# Action types understood by the built-in handlers
ACTION_SYNC_EXTEND = "sync_extend"
ACTION_START_SESSION = "start_session"
ACTION_END_SESSION = "end_session"
ACTION_REFRESH_NEARBY = "refreshNearby"


class ExtendSessionPayload(BaseModel):
    """Payload for extending an active parking session."""

    session_id: str = Field(..., alias="sessionId", min_length=1)
    minutes: int = Field(..., gt=0, description="Minutes to add")

    class Config:
        populate_by_name = True


class StartSessionPayload(BaseModel):
    """Payload for starting a session from a scanned garage QR code."""

    garage_id: str = Field(..., alias="garageId", min_length=1)
    qr_data: str = Field(..., alias="qrData", min_length=1)

    class Config:
        populate_by_name = True


class EndSessionPayload(BaseModel):
    session_id: str = Field(..., alias="sessionId", min_length=1)

    class Config:
        populate_by_name = True


class RefreshNearbyPayload(BaseModel):
    """Payload for re-fetching garages around a map position."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    radius: Optional[int] = Field(default=None, gt=0, description="Radius in meters")
