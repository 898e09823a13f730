"""
PostgrestStore - hosted relational store over its REST API

Talks the PostgREST dialect served at {SUPABASE_URL}/rest/v1:

    GET    /{table}?select=*&order=sort_order.asc
    POST   /{table}                      Prefer: return=representation
    PATCH  /{table}?id=eq.{id}           Prefer: return=representation
    DELETE /{table}?id=eq.{id}           Prefer: return=representation

Row-level security is enforced by the backend. A PATCH/DELETE that the
policy hides (or that targets a missing id) answers 200 with an empty
representation, which is reported as a not-found StoreError.

Usage:
    store = PostgrestStore.from_settings(get_settings())
    admin_store = store.scoped(identity.access_token)
    rows = await admin_store.select_ordered("services")
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config.settings import Settings
from ..exceptions import StoreError
from .base import ContentStore, Row, table_columns

logger = logging.getLogger(__name__)


class PostgrestStore(ContentStore):
    """
    REST content store.

    Requests carry the public API key plus a bearer token: the session's
    access token when scoped to a signed-in user, the API key otherwise.
    """

    def __init__(
        self,
        rest_url: str,
        api_key: str,
        access_token: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.rest_url = rest_url.rstrip('/')
        self.api_key = api_key
        self.access_token = access_token
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        access_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> 'PostgrestStore':
        return cls(
            rest_url=settings.rest_url,
            api_key=settings.supabase_anon_key,
            access_token=access_token,
            timeout=settings.request_timeout,
            client=client,
        )

    def scoped(self, access_token: Optional[str]) -> 'PostgrestStore':
        """Same endpoint and connection, requests made as `access_token`"""
        store = PostgrestStore(
            rest_url=self.rest_url,
            api_key=self.api_key,
            access_token=access_token,
            timeout=self.timeout,
            client=self._get_client(),
        )
        return store

    def _get_client(self) -> httpx.AsyncClient:
        """Ensure the httpx client exists."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the client if this store created it."""
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            'apikey': self.api_key,
            'Authorization': f"Bearer {self.access_token or self.api_key}",
            'Accept': 'application/json',
        }
        if prefer:
            headers['Prefer'] = prefer
        return headers

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Pull the backend's error message out of a failed response"""
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            return body.get('message') or body.get('error') or body.get('hint') or str(body)
        return str(body)

    async def _request(
        self,
        method: str,
        table: str,
        operation: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        client = self._get_client()
        url = f"{self.rest_url}/{table}"
        try:
            response = await client.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(prefer),
            )
        except httpx.TimeoutException as e:
            raise StoreError(
                f"Content store timed out during {operation} on {table}",
                collection=table,
                operation=operation,
            ) from e
        except httpx.RequestError as e:
            raise StoreError(
                f"Could not reach content store: {e}",
                collection=table,
                operation=operation,
            ) from e

        if response.status_code >= 400:
            message = self._error_message(response)
            logger.warning(f"{operation} on {table} failed ({response.status_code}): {message}")
            raise StoreError(
                message,
                collection=table,
                operation=operation,
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, list):
            # A 2xx write already reached the table
            logger.warning(f"{operation} on {table} returned an unreadable body ({response.status_code})")
            raise StoreError(
                f"Unexpected response from content store during {operation} on {table}",
                collection=table,
                operation=operation,
                status_code=response.status_code,
                applied=method != 'GET',
            )
        return body

    # =========================================================================
    # ContentStore
    # =========================================================================

    async def select_ordered(self, table: str) -> List[Row]:
        table, _ = table_columns(table)
        rows = await self._request(
            'GET', table, 'list',
            params={'select': '*', 'order': 'sort_order.asc'},
        )
        return list(rows or [])

    async def insert_row(self, table: str, row: Row) -> Row:
        table, columns = table_columns(table)
        payload = {name: row.get(name) for name in columns}
        rows = await self._request(
            'POST', table, 'insert',
            json=payload,
            prefer='return=representation',
        )
        if not rows:
            # Inserted but not visible to this session
            raise StoreError(
                f"Insert into {table} returned no row",
                collection=table,
                operation='insert',
                applied=True,
            )
        return rows[0]

    async def update_row(self, table: str, row_id: str, row: Row) -> Row:
        table, columns = table_columns(table)
        payload = {name: row.get(name) for name in columns}
        rows = await self._request(
            'PATCH', table, 'update',
            params={'id': f"eq.{row_id}"},
            json=payload,
            prefer='return=representation',
        )
        if not rows:
            raise StoreError(
                f"No {table} row with id {row_id}",
                collection=table,
                operation='update',
                not_found=True,
            )
        return rows[0]

    async def delete_row(self, table: str, row_id: str) -> None:
        table, _ = table_columns(table)
        rows = await self._request(
            'DELETE', table, 'delete',
            params={'id': f"eq.{row_id}"},
            prefer='return=representation',
        )
        if not rows:
            raise StoreError(
                f"No {table} row with id {row_id}",
                collection=table,
                operation='delete',
                not_found=True,
            )
