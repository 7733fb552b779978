"""Tests for the HTTP store adapter using ``httpx.MockTransport``."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from video_relink.config import StoreSettings
from video_relink.core.migrate import QUERY_FAILED, run_migration
from video_relink.core.paths import DocumentPath, KeySegment
from video_relink.exceptions import StoreMutationError, StoreQueryError
from video_relink.store import HttpDocumentStore
from video_relink.store.http import encode_params, serialize_sets

Handler = Callable[[httpx.Request], httpx.Response]


def _settings(**overrides: Any) -> StoreSettings:
    values: dict[str, Any] = {"project_id": "abc123", "token": "secret", "dataset": "staging", "api_version": "vX"}
    values.update(overrides)
    return StoreSettings(**values)


def _store(handler: Handler, **overrides: Any) -> tuple[HttpDocumentStore, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    return HttpDocumentStore(_settings(**overrides), transport=httpx.MockTransport(_record)), seen


def test_encode_params_json_encodes_values() -> None:
    assert encode_params("*[_id == $id]", {"id": "videoA", "n": 2}) == {
        "query": "*[_id == $id]",
        "$id": '"videoA"',
        "$n": "2",
    }


def test_serialize_sets_renders_paths() -> None:
    sets = {DocumentPath.of("gallery", KeySegment("k"), "asset"): 1, DocumentPath.of("video", "media"): 2}
    assert serialize_sets(sets) == {'gallery[_key=="k"].asset': 1, "video.media": 2}


@pytest.mark.asyncio
async def test_list_video_assets_queries_staging_with_raw_perspective() -> None:
    media = {"_type": "reference", "_ref": "media-library:l:i"}
    rows = [{"_id": "videoA", "_type": "sanity.videoAsset", "media": media}]
    store, seen = _store(lambda _: httpx.Response(200, json={"result": rows}))

    assets = await store.list_video_assets()
    await store.dispose()

    assert [a.id for a in assets] == ["videoA"]
    assert assets[0].media is not None
    request = seen[0]
    assert request.url.host == "abc123.api.sanity.work"
    assert request.url.path == "/vX/data/query/staging"
    assert request.url.params["perspective"] == "raw"
    assert request.headers["Authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_referencing_query_sends_canonical_and_draft_ids() -> None:
    store, seen = _store(lambda _: httpx.Response(200, json={"result": [{"_id": "postX"}]}))

    docs = await store.find_referencing_documents("drafts.videoA")

    assert docs == [{"_id": "postX"}]
    params = seen[0].url.params
    assert json.loads(params["$assetId"]) == "videoA"
    assert json.loads(params["$draftAssetId"]) == "drafts.videoA"


@pytest.mark.asyncio
async def test_media_library_lookup_uses_global_host() -> None:
    body = {"result": {"_id": "inst1", "container": {"_id": "cont1", "_type": "sanity.asset"}}}
    store, seen = _store(lambda _: httpx.Response(200, json=body), prod=True)

    found = await store.media_library("lib1").find_asset_with_container("inst1")

    assert found is not None
    assert found.container is not None
    assert found.container.id == "cont1"
    assert seen[0].url.host == "api.sanity.io"
    assert seen[0].url.path == "/vX/media-libraries/lib1/query"
    assert json.loads(seen[0].url.params["$assetId"]) == "inst1"


@pytest.mark.asyncio
async def test_media_library_lookup_miss_returns_none() -> None:
    store, _ = _store(lambda _: httpx.Response(200, json={"result": None}))
    assert await store.media_library("lib1").find_asset_with_container("inst1") is None


@pytest.mark.asyncio
async def test_commit_patch_posts_a_single_set_mutation() -> None:
    store, seen = _store(lambda _: httpx.Response(200, json={"transactionId": "tx1"}))
    value = {"_type": "globalDocumentReference", "_ref": "media-library:lib1:inst1", "_weak": True}

    await store.commit_patch("postX", {DocumentPath.of("video", "asset"): value})

    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/vX/data/mutate/staging"
    assert json.loads(request.content) == {"mutations": [{"patch": {"id": "postX", "set": {"video.asset": value}}}]}


@pytest.mark.asyncio
async def test_commit_patch_failure_raises_mutation_error() -> None:
    store, _ = _store(lambda _: httpx.Response(409, json={"error": "conflict"}))

    with pytest.raises(StoreMutationError) as excinfo:
        await store.commit_patch("postX", {DocumentPath.of("video", "asset"): {}})

    assert excinfo.value.document_id == "postX"


@pytest.mark.asyncio
async def test_query_transport_error_raises_query_error() -> None:
    def _boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    store, _ = _store(_boom)

    with pytest.raises(StoreQueryError):
        await store.list_video_assets()


@pytest.mark.asyncio
async def test_create_media_library_link() -> None:
    body = {"document": {"_id": "link1", "media": {"_type": "globalDocumentReference", "_ref": "media-library:l:a"}}}
    store, seen = _store(lambda _: httpx.Response(200, json=body), api_version="2025-07-24")

    link = await store.create_media_library_link("asset1", "l", "inst1")

    assert link.id == "link1"
    assert link.media.ref == "media-library:l:a"
    assert seen[0].url.path == "/v2025-07-24/assets/media-library-link/staging"
    assert json.loads(seen[0].content) == {"assetId": "asset1", "mediaLibraryId": "l", "assetInstanceId": "inst1"}


@pytest.mark.asyncio
async def test_malformed_media_fields_still_list() -> None:
    rows = [
        {"_id": "videoA", "media": {"_type": "reference"}},
        {"_id": "videoB", "media": "media-library:x"},
        {"_id": "videoC", "media": {"_type": "reference", "_ref": "media-library:l:i"}},
    ]
    store, _ = _store(lambda _: httpx.Response(200, json={"result": rows}))

    assets = await store.list_video_assets()

    assert [a.media_token for a in assets] == [None, "media-library:x", "media-library:l:i"]


@pytest.mark.asyncio
async def test_media_library_row_without_container_id_raises_query_error() -> None:
    body = {"result": {"_id": "inst1", "container": {"_type": "sanity.asset"}}}
    store, _ = _store(lambda _: httpx.Response(200, json=body))

    with pytest.raises(StoreQueryError):
        await store.media_library("lib1").find_asset_with_container("inst1")
    with pytest.raises(StoreQueryError):
        await store.media_library("lib1").find_asset_by_title("intro.mp4")


@pytest.mark.asyncio
async def test_non_object_body_raises_query_error() -> None:
    store, _ = _store(lambda _: httpx.Response(200, json=["not", "an", "object"]))

    with pytest.raises(StoreQueryError):
        await store.list_video_assets()


@pytest.mark.asyncio
async def test_unexpected_post_shape_raises_query_error() -> None:
    store, _ = _store(lambda _: httpx.Response(200, json={"result": [{"title": "no id"}]}))

    with pytest.raises(StoreQueryError):
        await store.list_posts_with_legacy_video()


@pytest.mark.asyncio
async def test_unexpected_link_body_raises_mutation_error() -> None:
    store, _ = _store(lambda _: httpx.Response(200, content=b"<html>"))

    with pytest.raises(StoreMutationError):
        await store.create_media_library_link("asset1", "l", "inst1")


@pytest.mark.asyncio
async def test_bad_media_library_row_skips_only_that_asset() -> None:
    assets = [{"_id": "videoA", "media": {"_type": "reference", "_ref": "media-library:lib1:inst1"}}]

    def _handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.startswith("/vX/media-libraries/"):
            return httpx.Response(200, json={"result": {"_id": "inst1", "container": {"_type": "sanity.asset"}}})
        return httpx.Response(200, json={"result": assets})

    store, _ = _store(_handler)

    result = await run_migration(store)

    assert [(s.asset_id, s.status) for s in result.plan.skipped] == [("videoA", QUERY_FAILED)]
    assert result.report is None
