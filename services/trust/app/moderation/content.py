"""
Content collaborator — who owns a piece of content, and deleting it.

Songs, albums, playlists and comments live in the content service.  This
module talks to its internal API over httpx:

  GET    {base}/internal/content/{type}/{id}/owners   → {"owner_ids": [...]}; 404 = gone
  DELETE {base}/internal/content/{type}/{id}          → 2xx, or 404 when already gone

Routes depend on ``get_content_store`` so tests can swap in a fake through
``app.dependency_overrides``.
"""
from __future__ import annotations

import logging
import uuid
from typing import Protocol

import httpx
from fastapi import Depends

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)


class ContentStoreError(Exception):
    """The content service could not be reached or refused the call."""


class ContentStore(Protocol):
    async def owner_of(self, content_type: str, content_id: uuid.UUID) -> list[uuid.UUID] | None:
        """Owner account ids, or None when the content does not exist."""
        ...

    async def hard_delete(self, content_type: str, content_id: uuid.UUID) -> None:
        ...


def _extract_error_detail(response: httpx.Response) -> str:
    detail = response.reason_phrase or f"Request failed ({response.status_code})"
    try:
        payload = response.json()
    except ValueError:
        return detail
    if isinstance(payload, dict):
        body_error = payload.get("error")
        if isinstance(body_error, dict) and isinstance(body_error.get("message"), str):
            return body_error["message"]
        if isinstance(payload.get("detail"), str):
            return payload["detail"]
    return detail


class HttpContentStore:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        internal_token: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout, connect=3.0)
        self._headers = {"X-Internal-Token": internal_token} if internal_token else {}
        self._transport = transport

    def _url(self, content_type: str, content_id: uuid.UUID, suffix: str = "") -> str:
        return f"{self._base_url}/internal/content/{content_type}/{content_id}{suffix}"

    async def _request(self, method: str, url: str) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, headers=self._headers, transport=self._transport
            ) as client:
                return await client.request(method, url)
        except httpx.RequestError as exc:
            logger.error("Content service %s %s failed: %s", method, url, exc)
            raise ContentStoreError("Content service is unavailable.") from exc

    async def owner_of(self, content_type: str, content_id: uuid.UUID) -> list[uuid.UUID] | None:
        response = await self._request("GET", self._url(content_type, content_id, "/owners"))
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            logger.error(
                "Content service owner lookup error %s: %s",
                response.status_code,
                response.text[:300],
            )
            raise ContentStoreError(_extract_error_detail(response))
        try:
            payload = response.json()
            return [uuid.UUID(str(o)) for o in payload.get("owner_ids", [])]
        except (ValueError, AttributeError) as exc:
            raise ContentStoreError("Content service returned an invalid owner list.") from exc

    async def hard_delete(self, content_type: str, content_id: uuid.UUID) -> None:
        response = await self._request("DELETE", self._url(content_type, content_id))
        # Already gone counts as deleted.
        if response.status_code == 404:
            logger.info("Content %s/%s already deleted", content_type, content_id)
            return
        if response.status_code >= 400:
            logger.error(
                "Content service delete error %s: %s",
                response.status_code,
                response.text[:300],
            )
            raise ContentStoreError(_extract_error_detail(response))


def get_content_store(settings: Settings = Depends(get_settings)) -> ContentStore:
    return HttpContentStore(
        settings.content_service_url,
        timeout=settings.content_service_timeout_seconds,
        internal_token=settings.internal_api_token,
    )
