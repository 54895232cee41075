from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class MapRegion(BaseModel):
    """Visible map area when the garages were fetched."""

    latitude: float
    longitude: float
    latitude_delta: float = Field(..., alias="latitudeDelta")
    longitude_delta: float = Field(..., alias="longitudeDelta")

    class Config:
        populate_by_name = True


class CachedGarages(BaseModel):
    """Last garage list saved for offline browsing."""

    garages: List[Dict[str, Any]] = Field(default_factory=list)
    region: Optional[MapRegion] = None
    timestamp: int = Field(..., description="Epoch milliseconds")
