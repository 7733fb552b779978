import copy
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from video_relink.core.paths import DocumentPath, FieldSegment, IndexSegment, KeySegment, Segment
from video_relink.core.references import draft_id, is_draft, strip_draft_prefix
from video_relink.exceptions import StoreMutationError, StoreQueryError
from video_relink.models import (
    ContainerRef,
    Document,
    LegacyVideoPost,
    MediaLibraryAsset,
    MediaLibraryLink,
    Reference,
    VideoAsset,
)

VIDEO_ASSET_TYPE = "sanity.videoAsset"
MEDIA_LIBRARY_ASSET_TYPE = "sanity.asset"


def iter_refs(node: Any) -> Iterator[str]:
    """Yield every ``_ref`` value anywhere in ``node``."""
    if isinstance(node, dict):
        ref = node.get("_ref")
        if isinstance(ref, str):
            yield ref
        for value in node.values():
            yield from iter_refs(value)
    elif isinstance(node, list):
        for item in node:
            yield from iter_refs(item)


def _step(node: Any, segment: Segment, create: bool) -> Any:
    if isinstance(segment, FieldSegment):
        if not isinstance(node, dict):
            raise KeyError(segment.name)
        if create and segment.name not in node:
            node[segment.name] = {}
        return node[segment.name]
    if isinstance(segment, KeySegment):
        for item in node if isinstance(node, list) else []:
            if isinstance(item, dict) and item.get("_key") == segment.key:
                return item
        raise KeyError(segment.key)
    return node[segment.index]


def set_path(document: Document, path: DocumentPath, value: Any) -> None:
    """Assign ``value`` at ``path``, creating missing intermediate objects."""
    if not path.segments:
        raise ValueError("cannot set the document root")
    node: Any = document
    for segment in path.segments[:-1]:
        node = _step(node, segment, create=True)

    last = path.last
    if isinstance(last, FieldSegment):
        node[last.name] = value
    elif isinstance(last, IndexSegment):
        node[last.index] = value
    else:
        assert isinstance(last, KeySegment)
        for index, item in enumerate(node):
            if isinstance(item, dict) and item.get("_key") == last.key:
                node[index] = value
                return
        raise KeyError(last.key)


class InMemoryMediaLibrary:
    def __init__(self, library_id: str, entries: Iterable[Document] = ()) -> None:
        self.library_id = library_id
        self.entries: list[Document] = [copy.deepcopy(e) for e in entries]

    def _get(self, entry_id: str) -> Document | None:
        return next((e for e in self.entries if e.get("_id") == entry_id), None)

    async def find_asset_with_container(self, instance_id: str) -> MediaLibraryAsset | None:
        instance = self._get(instance_id)
        if instance is None:
            return None
        container = next(
            (
                e
                for e in self.entries
                if e.get("_type") == MEDIA_LIBRARY_ASSET_TYPE
                and (e.get("currentVersion") or {}).get("_ref") == instance_id
            ),
            None,
        )
        return MediaLibraryAsset(
            id=instance_id,
            container=ContainerRef(id=container["_id"], type=container["_type"]) if container else None,
        )

    async def find_asset_by_title(self, title: str) -> MediaLibraryAsset | None:
        for entry in self.entries:
            if entry.get("_type") == MEDIA_LIBRARY_ASSET_TYPE and entry.get("title") == title:
                return MediaLibraryAsset.model_validate(entry)
        return None


class InMemoryDocumentStore:
    """Dict-backed ``DocumentStore`` that applies patches along typed paths.

    ``fail_documents`` lists ids whose patches are rejected.
    """

    def __init__(
        self,
        documents: Iterable[Document] = (),
        media_libraries: Mapping[str, Iterable[Document]] | None = None,
        fail_documents: Iterable[str] = (),
    ) -> None:
        self.documents: dict[str, Document] = {d["_id"]: copy.deepcopy(d) for d in documents}
        self.libraries: dict[str, InMemoryMediaLibrary] = {
            library_id: InMemoryMediaLibrary(library_id, entries)
            for library_id, entries in (media_libraries or {}).items()
        }
        self.fail_documents = set(fail_documents)
        self.commits: list[tuple[str, dict[str, Any]]] = []
        self.links: list[MediaLibraryLink] = []
        self.disposed = False

    async def list_video_assets(self) -> list[VideoAsset]:
        try:
            return [VideoAsset.model_validate(d) for d in self.documents.values() if d.get("_type") == VIDEO_ASSET_TYPE]
        except ValidationError as exc:
            raise StoreQueryError(f"unexpected video asset shape: {exc}") from exc

    async def find_referencing_documents(self, asset_id: str) -> list[Document]:
        targets = {strip_draft_prefix(asset_id), draft_id(asset_id)}
        return [
            copy.deepcopy(d)
            for d in self.documents.values()
            if d["_id"] not in targets and targets.intersection(iter_refs(d))
        ]

    async def commit_patch(self, document_id: str, sets: Mapping[DocumentPath, Any]) -> None:
        if document_id in self.fail_documents:
            raise StoreMutationError(f"patch of {document_id} rejected", document_id)
        if document_id not in self.documents:
            raise StoreMutationError(f"document {document_id} not found", document_id)

        updated = copy.deepcopy(self.documents[document_id])
        try:
            for path, value in sets.items():
                set_path(updated, path, copy.deepcopy(value))
        except (KeyError, IndexError, TypeError) as exc:
            raise StoreMutationError(f"cannot apply patch to {document_id}: {exc!r}", document_id) from exc

        self.documents[document_id] = updated
        self.commits.append((document_id, {path.render(): value for path, value in sets.items()}))

    async def list_posts_with_legacy_video(self) -> list[LegacyVideoPost]:
        posts: list[LegacyVideoPost] = []
        for doc in self.documents.values():
            if doc.get("_type") != "post" or "OldVideo" not in doc or is_draft(doc["_id"]):
                continue
            ref = ((doc["OldVideo"] or {}).get("asset") or {}).get("_ref")
            asset = self.documents.get(ref) if ref else None
            posts.append(
                LegacyVideoPost(
                    id=doc["_id"],
                    title=doc.get("title"),
                    filename=asset.get("originalFilename") if asset else None,
                )
            )
        return posts

    async def create_media_library_link(self, asset_id: str, library_id: str, instance_id: str) -> MediaLibraryLink:
        link = MediaLibraryLink(
            id=f"media-library-{library_id}-{asset_id}",
            media=Reference(type="globalDocumentReference", ref=f"media-library:{library_id}:{asset_id}"),
        )
        self.documents[link.id] = {
            "_id": link.id,
            "_type": "sanity.videoAsset",
            "media": link.media.to_store(),
            "assetInstanceId": instance_id,
        }
        self.links.append(link)
        return link

    def media_library(self, library_id: str) -> InMemoryMediaLibrary:
        if library_id not in self.libraries:
            self.libraries[library_id] = InMemoryMediaLibrary(library_id)
        return self.libraries[library_id]

    async def dispose(self) -> None:
        self.disposed = True
