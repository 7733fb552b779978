"""Attach media library videos to posts by matching the legacy video's filename.

For each published post with an ``OldVideo`` field, the media library asset
whose title equals the uploaded file's original filename is linked into the
dataset and written to the post's ``video`` field.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from video_relink.core.paths import DocumentPath
from video_relink.core.ports.store import DocumentStore
from video_relink.core.references import is_draft
from video_relink.models import GlobalDocumentReference, LegacyVideoPost, MediaLibraryLink, Reference

logger = logging.getLogger(__name__)

VIDEO_FIELD = DocumentPath.of("video")


@dataclass(frozen=True)
class PlannedLink:
    post_id: str
    filename: str
    asset_id: str
    instance_id: str


@dataclass
class LinkResult:
    dry_run: bool
    planned: list[PlannedLink] = field(default_factory=list)
    linked: dict[str, str] = field(default_factory=dict)
    skipped: dict[str, str] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)


def build_video_field(link: MediaLibraryLink) -> dict[str, Any]:
    return {
        "_type": "sanity.video",
        "asset": Reference(ref=link.id).to_store(),
        "media": GlobalDocumentReference(ref=link.media.ref).to_store(),
    }


async def _plan_post(store: DocumentStore, library_id: str, post: LegacyVideoPost) -> PlannedLink | str:
    """Return the planned link, or a skip reason."""
    if not post.filename:
        return "legacy video has no original filename"

    found = await store.media_library(library_id).find_asset_by_title(post.filename)
    if found is None:
        return f"no media library asset titled {post.filename!r}"
    if found.current_version is None:
        return f"media library asset {found.id} has no current version"

    return PlannedLink(
        post_id=post.id,
        filename=post.filename,
        asset_id=found.id,
        instance_id=found.current_version.ref,
    )


async def link_videos_by_filename(store: DocumentStore, library_id: str, dry_run: bool = False) -> LinkResult:
    result = LinkResult(dry_run=dry_run)
    posts = [post for post in await store.list_posts_with_legacy_video() if not is_draft(post.id)]
    logger.info("Found %d posts with a legacy video", len(posts))

    for post in posts:
        logger.debug("Old video filename for %s: %s", post.id, post.filename)
        try:
            planned = await _plan_post(store, library_id, post)
            if isinstance(planned, str):
                logger.info("Skipping %s: %s", post.id, planned)
                result.skipped[post.id] = planned
                continue

            result.planned.append(planned)
            logger.debug("Video found matching %s, id: %s", planned.filename, planned.asset_id)
            if dry_run:
                continue

            link = await store.create_media_library_link(planned.asset_id, library_id, planned.instance_id)
            logger.debug("Link document created, id: %s", link.id)
            await store.commit_patch(post.id, {VIDEO_FIELD: build_video_field(link)})
        except Exception as exc:
            logger.exception("Failed to link video for post %s", post.id)
            result.failed[post.id] = str(exc) or type(exc).__name__
            continue

        result.linked[post.id] = link.id
        logger.info("Updated post %s", post.title or post.id)

    return result
