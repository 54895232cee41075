import json
from typing import Any, Dict, List, Optional

import httpx

from .config import settings
from .exceptions import ApiError
from .logging import get_logger

logger = get_logger(__name__)


class ParkingApiClient:
    """Client for the parking REST API used to replay queued actions."""

    def __init__(
        self,
        base_url: str = None,
        timeout: float = None,
        token: Optional[str] = None,
        transport: httpx.AsyncBaseTransport = None,
    ):
        """
        Initialize API client.

        Args:
            base_url: API root, e.g. "http://localhost:3000/api"
            timeout: Request timeout in seconds
            token: Optional bearer token sent on every request
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = (base_url or settings.API_URL).rstrip('/')
        self.timeout = timeout or settings.API_TIMEOUT_SECONDS
        self.token = token if token is not None else settings.API_TOKEN
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": f"{settings.APP_NAME}/{settings.VERSION}",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Send one request and decode the JSON body.

        Raises:
            ApiError: On transport failure or an HTTP status >= 400
        """
        url = f"{self.base_url}/{path.lstrip('/')}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(
                    method,
                    url,
                    json=payload,
                    params=params,
                    headers=self._headers(),
                )
        except httpx.HTTPError as e:
            logger.warning("Parking API request failed", method=method, url=url, error=str(e))
            raise ApiError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            logger.warning(
                "Parking API returned an error",
                method=method,
                url=url,
                status_code=response.status_code,
                response_text=response.text[:500],
            )
            raise ApiError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )

        logger.debug("Parking API request succeeded", method=method, url=url, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except json.JSONDecodeError:
            return {"raw_response": response.text}

    @staticmethod
    def _unwrap(body: Any, *keys: str) -> Any:
        if not isinstance(body, dict):
            return body
        for key in keys:
            if body.get(key) is not None:
                return body[key]
        return None

    async def start_session_with_qr(self, garage_id: str, qr_data: str) -> Optional[Dict[str, Any]]:
        body = await self._request("POST", "/sessions/start-qr", {"garageId": garage_id, "qrData": qr_data})
        return self._unwrap(body, "data", "session")

    async def extend_session(self, session_id: str, minutes: int) -> Optional[Dict[str, Any]]:
        body = await self._request("POST", f"/sessions/{session_id}/extend", {"minutes": minutes})
        return self._unwrap(body, "data", "session")

    async def end_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        body = await self._request("POST", f"/sessions/{session_id}/end")
        return self._unwrap(body, "data", "session")

    async def nearby_garages(self, lat: float, lng: float, radius: Optional[int] = None) -> List[Dict[str, Any]]:
        """Fetch garages around a point; status defaults to "available"."""
        params = {"lat": lat, "lng": lng}
        if radius is not None:
            params["radius"] = radius

        body = await self._request("GET", "/parking/nearby", params=params)
        items = body if isinstance(body, list) else self._unwrap(body, "data", "garages")

        return [
            {**garage, "status": garage.get("status") or "available"}
            for garage in (items or [])
        ]
