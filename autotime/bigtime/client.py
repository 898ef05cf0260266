"""
BigTime API Client

Thin async client for the three BigTime calls autotime needs:
    - POST /session               (username/password -> token + firm realm)
    - GET  /time/Sheet/{staffsid} (timesheet entries for a date range)
    - POST /time                  (create one time entry)

All failures surface as BigTimeAPIError. Retrying and rate limiting are
the caller's business (see autotime.submission.scheduler).

API Documentation: https://iq.bigtime.net/BigtimeData/api/v2/help
"""

from __future__ import annotations

import os
from datetime import date
from typing import Any

import httpx

from autotime.errors import BigTimeAPIError, ConfigurationError
from autotime.generation.models import TimeEntry
from autotime.logging_config import get_logger

logger = get_logger(__name__)

BIGTIME_API_BASE = "https://iq.bigtime.net/BigtimeData/api/v2"


class BigTimeClient:
    """
    BigTime REST client.

    Session headers (X-Auth-Token / X-Auth-Realm) are attached to every call
    after create_session().
    """

    def __init__(
        self,
        username: str,
        password: str,
        base_url: str = BIGTIME_API_BASE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            username: BigTime login
            password: BigTime password
            base_url: Override API base URL (for testing)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._username = username
        self._password = password
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

        self._client: httpx.AsyncClient | None = None
        self._token: str | None = None
        self._firm: str | None = None
        self.staff_sid: Any = None

    @classmethod
    def from_env(
        cls,
        base_url: str = BIGTIME_API_BASE,
        timeout: float = 30.0,
        environ: dict[str, str] | None = None,
    ) -> BigTimeClient:
        """Build a client from BIGTIME_USERNAME / BIGTIME_PASSWORD."""
        environ = os.environ if environ is None else environ
        username = environ.get("BIGTIME_USERNAME")
        password = environ.get("BIGTIME_PASSWORD")
        if not username:
            raise ConfigurationError("Missing BIGTIME_USERNAME environment variable.")
        if not password:
            raise ConfigurationError("Missing BIGTIME_PASSWORD environment variable.")
        return cls(username, password, base_url=base_url, timeout=timeout)

    @property
    def has_session(self) -> bool:
        return self._token is not None

    async def __aenter__(self) -> BigTimeClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    def _session_headers(self) -> dict[str, str]:
        if not self.has_session:
            raise BigTimeAPIError("No BigTime session; call create_session() first")
        return {"X-Auth-Token": self._token, "X-Auth-Realm": self._firm or ""}

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        """Make API request with error handling."""
        client = self._get_client()
        headers = self._session_headers() if authenticated else {}

        try:
            response = await client.request(method, endpoint, params=params, json=json, headers=headers)
            response.raise_for_status()
            return response.json() if response.content else None
        except httpx.HTTPStatusError as e:
            logger.error(
                "bigtime_api_error",
                method=method,
                endpoint=endpoint,
                status=e.response.status_code,
            )
            raise BigTimeAPIError(
                f"BigTime API error: {e.response.status_code} on {method} {endpoint}",
                status_code=e.response.status_code,
                body=e.response.text,
            ) from e
        except httpx.RequestError as e:
            logger.error("bigtime_request_error", method=method, endpoint=endpoint, error=str(e))
            raise BigTimeAPIError(f"BigTime request error: {e}") from e
        except ValueError as e:
            raise BigTimeAPIError(f"BigTime returned invalid JSON for {method} {endpoint}") from e

    # =========================================================================
    # API calls
    # =========================================================================

    async def create_session(self) -> dict[str, Any]:
        """Authenticate and keep the session token for later calls."""
        data = await self._request(
            "POST",
            "/session",
            json={"UserId": self._username, "Pwd": self._password},
            authenticated=False,
        )
        if not isinstance(data, dict) or not data.get("token"):
            raise BigTimeAPIError("BigTime session response did not include a token")

        self._token = data["token"]
        self._firm = data.get("firm")
        self.staff_sid = data.get("staffsid")
        logger.info("bigtime_session_created", firm=self._firm, staff_sid=self.staff_sid)
        return data

    async def get_time_sheet_range(self, start: date, end: date | None = None) -> list[dict[str, Any]]:
        """
        Fetch timesheet entries from start (inclusive) to end (inclusive).

        Returns:
            Raw entries: {ProjectSID, ProjectNm, ClientNm, ClientID, Dt, Hours_IN, ...}
        """
        params: dict[str, Any] = {"StartDt": start.isoformat(), "View": "Detailed"}
        if end is not None:
            params["EndDt"] = end.isoformat()

        data = await self._request("GET", f"/time/Sheet/{self.staff_sid}", params=params)
        if data is None:
            return []
        if not isinstance(data, list):
            raise BigTimeAPIError("BigTime timesheet response was not a list")

        logger.debug("bigtime_timesheet_fetched", start=params["StartDt"], end=params.get("EndDt"), count=len(data))
        return data

    async def create_time_entry(self, entry: TimeEntry, budget_category_id: int) -> dict[str, Any] | None:
        """Create one time entry."""
        payload = {
            "Dt": entry.date.isoformat(),
            "ProjectSID": entry.project_id,
            "BudgCatID": budget_category_id,
            "Hours_IN": entry.hours,
            "StaffSID": self.staff_sid,
        }
        return await self._request("POST", "/time", json=payload)


__all__ = ["BIGTIME_API_BASE", "BigTimeClient"]
