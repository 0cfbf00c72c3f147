"""
Time-sheets API client
Handles token authentication and JSON requests to the remote attendance service
"""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

import httpx
import structlog

from ..common.datetime_utils import format_iso_date
from ..core.constants import DEFAULT_REQUEST_TIMEOUT, GENERIC_REQUEST_ERROR, NETWORK_ERROR
from ..core.exceptions import GatewayError
from .model import AttendanceRecord, EmployeesStatus, TodayTimeSheet

log = structlog.get_logger(__name__)


def extract_error_message(response: httpx.Response) -> str:
    """Pick the human-readable message out of an error response body."""
    try:
        data = response.json()
    except ValueError:
        return GENERIC_REQUEST_ERROR
    if not isinstance(data, dict):
        return GENERIC_REQUEST_ERROR
    if data.get("detail"):
        return str(data["detail"])
    non_field = data.get("non_field_errors")
    if non_field:
        return str(non_field[0])
    return GENERIC_REQUEST_ERROR


class HttpAttendanceGateway:
    """Client for the time-sheets REST endpoints"""

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        auth_scheme: str = "Bearer",
        prefix: str = "/time_sheets",
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not token:
            raise ValueError("An API token is required")
        self.base_url = base_url.rstrip("/")
        self.prefix = "/" + prefix.strip("/") if prefix.strip("/") else ""
        self.token = token
        self.auth_scheme = auth_scheme
        self.timeout = timeout
        self._transport = transport

    def _get_auth_header(self) -> Dict[str, str]:
        return {"Authorization": f"{self.auth_scheme} {self.token}"}

    def _client(self) -> httpx.AsyncClient:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        headers.update(self._get_auth_header())
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, endpoint: str, *, allow_404: bool = False, **kwargs) -> Any:
        """Make a request; returns decoded JSON, or None for a tolerated 404."""
        url = f"{self.prefix}/{endpoint.strip('/')}/"
        try:
            async with self._client() as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            log.warning("gateway_transport_failed", method=method, url=url, error=str(e))
            raise GatewayError(NETWORK_ERROR) from e

        if response.status_code == 404 and allow_404:
            return None
        if response.is_error:
            message = extract_error_message(response)
            log.warning("gateway_request_failed", method=method, url=url, status=response.status_code, message=message)
            raise GatewayError(message, status_code=response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise GatewayError(GENERIC_REQUEST_ERROR, status_code=response.status_code) from e

    async def _action(self, endpoint: str, note: str) -> AttendanceRecord:
        data = await self._request("POST", endpoint, json={"note": note or ""})
        if not isinstance(data, dict):
            raise GatewayError(GENERIC_REQUEST_ERROR)
        # Some deployments wrap the record the same way as the today endpoint.
        payload = data.get("time_sheet") or data.get("record") or data
        return AttendanceRecord.from_payload(payload)

    async def clock_in(self, note: str = "") -> AttendanceRecord:
        return await self._action("clock_in", note)

    async def start_break(self, note: str = "") -> AttendanceRecord:
        return await self._action("start_break", note)

    async def end_break(self, note: str = "") -> AttendanceRecord:
        return await self._action("end_break", note)

    async def clock_out(self, note: str = "") -> AttendanceRecord:
        return await self._action("clock_out", note)

    async def fetch_today(self) -> TodayTimeSheet:
        data = await self._request("GET", "get_today_time_sheet", allow_404=True)
        return TodayTimeSheet.from_payload(data)

    async def fetch_range(self, start: date, end: date) -> List[AttendanceRecord]:
        params = {"start_date": format_iso_date(start), "end_date": format_iso_date(end)}
        data = await self._request("GET", "get_user_time_sheets", params=params)
        if isinstance(data, dict):
            data = data.get("results") or []
        return [AttendanceRecord.from_payload(item) for item in data or []]

    async def fetch_day(self, day: date) -> Optional[AttendanceRecord]:
        data = await self._request("GET", f"get_day_time_sheet/{format_iso_date(day)}", allow_404=True)
        if not data:
            return None
        if isinstance(data, dict) and ("time_sheet" in data or "record" in data):
            data = data.get("time_sheet") or data.get("record")
            if not data:
                return None
        return AttendanceRecord.from_payload(data)

    async def fetch_employees_status(self) -> EmployeesStatus:
        data = await self._request("GET", "get_employees_status")
        return EmployeesStatus.from_payload(data)
