from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Sequence
from urllib.parse import quote

import aiohttp
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from .errors import SheetsApiError, SheetsRateLimitError

SHEETS_SCOPES = ("https://www.googleapis.com/auth/spreadsheets",)
TOKEN_URI = "https://oauth2.googleapis.com/token"


def normalize_private_key(raw: str) -> str:
    # Keys pasted into .env files usually carry literal "\n" sequences.
    return raw.replace("\\n", "\n").strip()


class ServiceAccountTokens:
    """Mints and refreshes OAuth access tokens for a Google service account."""

    def __init__(self, email: str, private_key: str) -> None:
        info = {
            "type": "service_account",
            "client_email": email,
            "private_key": normalize_private_key(private_key),
            "token_uri": TOKEN_URI,
        }
        self._credentials = service_account.Credentials.from_service_account_info(info, scopes=list(SHEETS_SCOPES))
        self._lock = asyncio.Lock()

    async def token(self) -> str:
        async with self._lock:
            if not self._credentials.valid:
                await asyncio.to_thread(self._credentials.refresh, GoogleAuthRequest())
            return str(self._credentials.token)


class SheetsClient:
    """Raw Google Sheets v4 REST calls. No retries here; see SheetsTable."""

    def __init__(
        self,
        spreadsheet_id: str,
        tokens: ServiceAccountTokens | Any,
        timeout_seconds: int = 30,
        base_url: str = "https://sheets.googleapis.com",
    ) -> None:
        self.spreadsheet_id = spreadsheet_id
        self.tokens = tokens
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: aiohttp.ClientSession | None = None

    async def start(self) -> None:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    def _spreadsheet_url(self) -> str:
        return f"{self.base_url}/v4/spreadsheets/{self.spreadsheet_id}"

    def _values_url(self, rng: str, suffix: str = "") -> str:
        return f"{self._spreadsheet_url()}/values/{quote(rng, safe='')}{suffix}"

    @staticmethod
    def _error_from_response(status: int, text: str) -> SheetsApiError:
        reason = ""
        message = text[:400]
        try:
            payload = json.loads(text) if text else {}
        except json.JSONDecodeError:
            payload = {}
        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict):
            reason = str(error.get("status") or "")
            message = str(error.get("message") or message)
        if status == 429 or reason == "RESOURCE_EXHAUSTED":
            return SheetsRateLimitError(status, reason, message)
        return SheetsApiError(status, reason, message)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Dict[str, str] | None = None,
        payload: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        if self._session is None or self._session.closed:
            await self.start()
        assert self._session is not None

        headers = {"Authorization": f"Bearer {await self.tokens.token()}"}
        async with self._session.request(method, url, params=params, json=payload, headers=headers) as response:
            text = await response.text()
            if 200 <= response.status < 300:
                return json.loads(text) if text else {}
            raise self._error_from_response(response.status, text)

    async def get_metadata(self) -> Dict[str, Any]:
        return await self._request("GET", self._spreadsheet_url(), params={"fields": "sheets.properties"})

    async def batch_update(self, requests: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
        return await self._request(
            "POST",
            f"{self._spreadsheet_url()}:batchUpdate",
            payload={"requests": list(requests)},
        )

    async def get_values(self, rng: str) -> List[List[str]]:
        data = await self._request("GET", self._values_url(rng))
        values = data.get("values") or []
        return [[str(cell) for cell in row] for row in values]

    async def update_values(self, rng: str, rows: Sequence[Sequence[str]]) -> Dict[str, Any]:
        return await self._request(
            "PUT",
            self._values_url(rng),
            params={"valueInputOption": "RAW"},
            payload={"range": rng, "majorDimension": "ROWS", "values": [list(row) for row in rows]},
        )

    async def append_values(self, rng: str, rows: Sequence[Sequence[str]]) -> Dict[str, Any]:
        return await self._request(
            "POST",
            self._values_url(rng, ":append"),
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            payload={"majorDimension": "ROWS", "values": [list(row) for row in rows]},
        )
