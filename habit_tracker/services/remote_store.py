"""Remote backend client (PostgREST dialect, as served by Supabase)."""
from typing import Optional

import httpx
from loguru import logger

from habit_tracker.models.sync import RemoteConfig


class RemoteStoreError(Exception):
    """A remote upsert or select failed."""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.table = table
        self.operation = operation
        self.status_code = status_code

    def __str__(self) -> str:
        if self.table and self.operation:
            return f"{self.operation} {self.table} failed: {self.message}"
        return self.message


class RemoteStore:
    """Async client for the remote tables."""

    def __init__(
        self,
        config: RemoteConfig,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Remote URL and API key
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.url.rstrip("/") + "/rest/v1",
            headers={
                "apikey": config.api_key,
                "Authorization": f"Bearer {config.api_key}",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "RemoteStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def upsert(self, table: str, rows: list[dict], on_conflict: str = "id") -> None:
        """
        Insert or update rows keyed by ``on_conflict``.

        Raises:
            RemoteStoreError: If the request fails
        """
        await self._request(
            "upsert",
            table,
            "POST",
            params={"on_conflict": on_conflict},
            json=rows,
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )

    async def select(
        self,
        table: str,
        updated_after: Optional[str] = None,
        limit: int = 1000,
    ) -> list[dict]:
        """
        Fetch rows changed after a timestamp, oldest change first.

        Args:
            table: Remote table
            updated_after: ISO timestamp; None fetches from the beginning
            limit: Maximum number of rows

        Raises:
            RemoteStoreError: If the request fails
        """
        params = {
            "select": "*",
            "order": "updated_at.asc",
            "limit": str(limit),
        }
        if updated_after:
            params["updated_at"] = f"gt.{updated_after}"

        response = await self._request("select", table, "GET", params=params)
        return response.json()

    async def _request(self, operation: str, table: str, method: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, f"/{table}", **kwargs)
        except httpx.HTTPError as e:
            raise RemoteStoreError(str(e) or type(e).__name__, table, operation) from e

        if response.is_error:
            message = self._error_message(response)
            logger.warning("Remote {} on {} returned {}: {}", operation, table, response.status_code, message)
            raise RemoteStoreError(message, table, operation, response.status_code)

        return response

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict) and body.get("message"):
            return body["message"]
        return f"HTTP {response.status_code}"
