"""Thin client for the managed PostgREST store (``/rest/v1/<table>``)."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

import requests

from src.errors import StoreError

logger = logging.getLogger(__name__)


class StoreClient:
    """Select, insert and update rows with equality filters.

    ``session`` defaults to a fresh :class:`requests.Session`; tests pass a
    stand-in with the same ``request`` signature.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        access_token: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ) -> None:
        if not url or not api_key:
            raise StoreError("Store URL and API key are required")
        self._base_url = url.rstrip("/") + "/rest/v1"
        self._api_key = api_key
        self._access_token = access_token or api_key
        self._session = session or requests.Session()
        self._timeout = timeout

    def _headers(self, prefer_representation: bool = False) -> Dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if prefer_representation:
            headers["Prefer"] = "return=representation"
        return headers

    @staticmethod
    def _filter_params(filters: Optional[Mapping[str, object]]) -> Dict[str, str]:
        return {column: f"eq.{value}" for column, value in (filters or {}).items()}

    def _request(self, method: str, table: str, **kwargs) -> List[dict]:
        url = f"{self._base_url}/{table}"
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error("Store %s %s failed: %s", method, table, exc)
            raise StoreError(f"Could not reach store: {exc}") from exc
        if not response.ok:
            logger.error("Store %s %s returned %s: %s", method, table, response.status_code, response.text)
            raise StoreError(f"{method} {table} failed ({response.status_code}): {response.text}")
        if not response.content:
            return []
        data = response.json()
        return data if isinstance(data, list) else [data]

    def select(
        self,
        table: str,
        filters: Optional[Mapping[str, object]] = None,
        *,
        order: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[dict]:
        params = {"select": "*", **self._filter_params(filters)}
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(int(limit))
        return self._request("GET", table, params=params, headers=self._headers())

    def insert(self, table: str, row: Mapping[str, object]) -> dict:
        rows = self._request(
            "POST", table, json=dict(row), headers=self._headers(prefer_representation=True)
        )
        if not rows:
            raise StoreError(f"Insert into {table} returned no row")
        return rows[0]

    def update(
        self,
        table: str,
        values: Mapping[str, object],
        filters: Mapping[str, object],
    ) -> List[dict]:
        if not filters:
            raise ValueError("Refusing to update without filters")
        return self._request(
            "PATCH",
            table,
            params=self._filter_params(filters),
            json=dict(values),
            headers=self._headers(prefer_representation=True),
        )


__all__ = ["StoreClient"]
