from collections.abc import Mapping
from typing import Any, Protocol

from video_relink.core.paths import DocumentPath
from video_relink.models import Document, LegacyVideoPost, MediaLibraryAsset, MediaLibraryLink, VideoAsset


class MediaLibrary(Protocol):
    async def find_asset_with_container(self, instance_id: str) -> MediaLibraryAsset | None: ...

    async def find_asset_by_title(self, title: str) -> MediaLibraryAsset | None: ...


class DocumentStore(Protocol):
    async def list_video_assets(self) -> list[VideoAsset]: ...

    async def find_referencing_documents(self, asset_id: str) -> list[Document]: ...

    async def commit_patch(self, document_id: str, sets: Mapping[DocumentPath, Any]) -> None: ...

    async def list_posts_with_legacy_video(self) -> list[LegacyVideoPost]: ...

    async def create_media_library_link(
        self, asset_id: str, library_id: str, instance_id: str
    ) -> MediaLibraryLink: ...

    def media_library(self, library_id: str) -> MediaLibrary: ...

    async def dispose(self) -> None: ...
