"""Shared fixtures and helpers for tests."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from video_relink.models import VideoAsset
from video_relink.store import InMemoryDocumentStore

_TESTS_ROOT = Path(__file__).parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        rel = Path(str(item.fspath)).relative_to(_TESTS_ROOT)
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


def video_asset_doc(asset_id: str, media_ref: str | None = None, **extra: Any) -> dict[str, Any]:
    doc: dict[str, Any] = {"_id": asset_id, "_type": "sanity.videoAsset", **extra}
    if media_ref is not None:
        doc["media"] = {"_type": "reference", "_ref": media_ref}
    return doc


def video_field(asset_id: str) -> dict[str, Any]:
    return {"_type": "sanity.video", "asset": {"_type": "reference", "_ref": asset_id}}


@pytest.fixture
def library_entries() -> list[dict[str, Any]]:
    """Media library ``lib1``: instance ``inst1`` whose container is ``cont1``."""
    return [
        {"_id": "inst1", "_type": "sanity.videoAsset"},
        {"_id": "cont1", "_type": "sanity.asset", "title": "intro.mp4", "currentVersion": {"_ref": "inst1"}},
    ]


@pytest.fixture
def video_asset() -> VideoAsset:
    doc = video_asset_doc("videoA", "media-library:lib1:inst1", originalFilename="intro.mp4")
    return VideoAsset.model_validate(doc)


@pytest.fixture
def store(library_entries: list[dict[str, Any]]) -> InMemoryDocumentStore:
    """One legacy asset ``videoA`` referenced by ``postX`` at ``video.asset``."""
    return InMemoryDocumentStore(
        documents=[
            video_asset_doc("videoA", "media-library:lib1:inst1", originalFilename="intro.mp4", size=5 * 1024 * 1024),
            {"_id": "postX", "_type": "post", "title": "Post X", "video": video_field("videoA")},
        ],
        media_libraries={"lib1": library_entries},
    )


@pytest.fixture
def make_asset_doc() -> Callable[..., dict[str, Any]]:
    return video_asset_doc


@pytest.fixture
def make_video_field() -> Callable[[str], dict[str, Any]]:
    return video_field
