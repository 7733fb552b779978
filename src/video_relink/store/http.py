"""Content store adapter over the hosted HTTP API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from video_relink.config import StoreSettings
from video_relink.core.paths import DocumentPath
from video_relink.core.references import draft_id, strip_draft_prefix
from video_relink.exceptions import StoreMutationError, StoreQueryError
from video_relink.models import Document, LegacyVideoPost, MediaLibraryAsset, MediaLibraryLink, VideoAsset
from video_relink.store.groq import (
    MEDIA_LIBRARY_ASSET_BY_TITLE_QUERY,
    MEDIA_LIBRARY_ASSET_QUERY,
    POSTS_WITH_LEGACY_VIDEO_QUERY,
    REFERENCING_DOCUMENTS_QUERY,
    VIDEO_ASSETS_QUERY,
)

logger = logging.getLogger(__name__)


def encode_params(query: str, params: Mapping[str, Any] | None) -> dict[str, str]:
    """Query-string form of a GROQ query: parameters are JSON encoded and ``$``-prefixed."""
    encoded = {"query": query}
    for name, value in (params or {}).items():
        encoded[f"${name}"] = json.dumps(value)
    return encoded


def serialize_sets(sets: Mapping[DocumentPath, Any]) -> dict[str, Any]:
    return {path.render(): value for path, value in sets.items()}


async def _get_result(client: httpx.AsyncClient, url: str, params: dict[str, str]) -> Any:
    try:
        response = await client.get(url, params=params)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise StoreQueryError(f"query against {url} failed: {exc}") from exc
    try:
        payload = response.json()
    except ValueError as exc:
        raise StoreQueryError(f"query against {url} returned invalid JSON") from exc
    if not isinstance(payload, dict):
        raise StoreQueryError(f"query against {url} returned {type(payload).__name__}, expected an object")
    return payload.get("result")


def _to_media_library_asset(row: Any) -> MediaLibraryAsset | None:
    if not row:
        return None
    try:
        return MediaLibraryAsset.model_validate(row)
    except ValidationError as exc:
        raise StoreQueryError(f"unexpected media library asset shape: {exc}") from exc


class HttpMediaLibrary:
    def __init__(self, client: httpx.AsyncClient, base_url: str, library_id: str) -> None:
        self._client = client
        self._url = f"{base_url}/media-libraries/{library_id}/query"
        self.library_id = library_id

    async def fetch(self, query: str, params: Mapping[str, Any] | None = None) -> Any:
        return await _get_result(self._client, self._url, encode_params(query, params))

    async def find_asset_with_container(self, instance_id: str) -> MediaLibraryAsset | None:
        row = await self.fetch(MEDIA_LIBRARY_ASSET_QUERY, {"assetId": instance_id})
        return _to_media_library_asset(row)

    async def find_asset_by_title(self, title: str) -> MediaLibraryAsset | None:
        row = await self.fetch(MEDIA_LIBRARY_ASSET_BY_TITLE_QUERY, {"title": title})
        return _to_media_library_asset(row)


class HttpDocumentStore:
    """``DocumentStore`` backed by the store's query, mutate and media library endpoints.

    Reads use the raw perspective so drafts are visible. Each ``commit_patch``
    is a single mutate request, which the store applies atomically.
    """

    def __init__(self, settings: StoreSettings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._settings = settings
        client_kwargs: dict[str, Any] = {"headers": {"Authorization": f"Bearer {settings.token}"}}
        if settings.timeout is not None:
            client_kwargs["timeout"] = settings.timeout
        self._client = httpx.AsyncClient(transport=transport, **client_kwargs)
        project_base = f"{settings.project_host}/{settings.api_version}"
        self._query_url = f"{project_base}/data/query/{settings.dataset}"
        self._mutate_url = f"{project_base}/data/mutate/{settings.dataset}"
        self._link_url = f"{project_base}/assets/media-library-link/{settings.dataset}"
        self._global_base = f"{settings.api_host}/{settings.api_version}"

    async def fetch(self, query: str, params: Mapping[str, Any] | None = None) -> Any:
        encoded = encode_params(query, params)
        encoded["perspective"] = "raw"
        return await _get_result(self._client, self._query_url, encoded)

    async def list_video_assets(self) -> list[VideoAsset]:
        rows = await self.fetch(VIDEO_ASSETS_QUERY) or []
        try:
            return [VideoAsset.model_validate(row) for row in rows]
        except ValidationError as exc:
            raise StoreQueryError(f"unexpected video asset shape: {exc}") from exc

    async def find_referencing_documents(self, asset_id: str) -> list[Document]:
        clean_id = strip_draft_prefix(asset_id)
        rows = await self.fetch(REFERENCING_DOCUMENTS_QUERY, {"assetId": clean_id, "draftAssetId": draft_id(clean_id)})
        return list(rows or [])

    async def list_posts_with_legacy_video(self) -> list[LegacyVideoPost]:
        rows = await self.fetch(POSTS_WITH_LEGACY_VIDEO_QUERY) or []
        try:
            return [LegacyVideoPost.model_validate(row) for row in rows]
        except ValidationError as exc:
            raise StoreQueryError(f"unexpected post shape: {exc}") from exc

    async def commit_patch(self, document_id: str, sets: Mapping[DocumentPath, Any]) -> None:
        body = {"mutations": [{"patch": {"id": document_id, "set": serialize_sets(sets)}}]}
        try:
            response = await self._client.post(self._mutate_url, json=body)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StoreMutationError(f"patch of {document_id} failed: {exc}", document_id) from exc
        logger.debug("Committed patch for %s (status %d)", document_id, response.status_code)

    async def create_media_library_link(self, asset_id: str, library_id: str, instance_id: str) -> MediaLibraryLink:
        body = {"assetId": asset_id, "mediaLibraryId": library_id, "assetInstanceId": instance_id}
        try:
            response = await self._client.post(self._link_url, json=body)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise StoreMutationError(f"link for media library asset {asset_id} failed: {exc}") from exc
        except ValueError as exc:
            raise StoreMutationError(f"link for media library asset {asset_id} returned invalid JSON") from exc
        document = payload.get("document") if isinstance(payload, dict) else None
        try:
            return MediaLibraryLink.model_validate(document)
        except ValidationError as exc:
            raise StoreMutationError(f"unexpected link response for {asset_id}: {exc}") from exc

    def media_library(self, library_id: str) -> HttpMediaLibrary:
        return HttpMediaLibrary(self._client, self._global_base, library_id)

    async def dispose(self) -> None:
        await self._client.aclose()
