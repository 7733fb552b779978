import logging
from dataclasses import dataclass
from enum import Enum

from video_relink.core.ports.store import DocumentStore
from video_relink.core.references import parse_media_reference
from video_relink.models import VideoAsset

logger = logging.getLogger(__name__)


class ResolutionStatus(str, Enum):
    RESOLVED = "resolved"
    NO_MAPPING = "no-mapping"
    MALFORMED_TOKEN = "malformed-token"
    LOOKUP_FAILED = "lookup-failed"


@dataclass(frozen=True)
class MediaLibraryMapping:
    library_id: str
    instance_id: str
    container_id: str


@dataclass(frozen=True)
class Resolution:
    status: ResolutionStatus
    detail: str
    mapping: MediaLibraryMapping | None = None

    @property
    def resolved(self) -> bool:
        return self.status is ResolutionStatus.RESOLVED


async def resolve_media_library_asset(store: DocumentStore, asset: VideoAsset) -> Resolution:
    """Work out which media library instance and container a legacy video asset was linked to.

    Store errors from the registry lookup propagate to the caller.
    """
    if asset.media is None:
        return Resolution(ResolutionStatus.NO_MAPPING, "no 'media' field on video asset")

    parsed = parse_media_reference(asset.media_token)
    if parsed is None:
        return Resolution(
            ResolutionStatus.MALFORMED_TOKEN,
            f"invalid media reference format: {asset.media_token!r}",
        )
    library_id, instance_id = parsed

    found = await _find_container_id(store, library_id, instance_id)
    if found is None:
        return Resolution(
            ResolutionStatus.LOOKUP_FAILED,
            f"could not find instance {instance_id} or its container in media library {library_id}",
        )

    mapping = MediaLibraryMapping(library_id=library_id, instance_id=instance_id, container_id=found)
    logger.debug(
        "Resolved %s -> library %s, instance %s, container %s",
        asset.id,
        library_id,
        instance_id,
        found,
    )
    return Resolution(ResolutionStatus.RESOLVED, "found media library asset", mapping)


async def _find_container_id(store: DocumentStore, library_id: str, instance_id: str) -> str | None:
    """Return the container id for ``instance_id``, or None if the instance or container is missing."""
    result = await store.media_library(library_id).find_asset_with_container(instance_id)
    if result is None or result.container is None:
        return None
    return result.container.id
