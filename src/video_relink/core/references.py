from video_relink.models import GlobalDocumentReference, Reference

DRAFTS_PREFIX = "drafts."
MEDIA_LIBRARY_KIND = "media-library"


def strip_draft_prefix(document_id: str) -> str:
    return document_id.removeprefix(DRAFTS_PREFIX)


def draft_id(document_id: str) -> str:
    return DRAFTS_PREFIX + strip_draft_prefix(document_id)


def is_draft(document_id: str) -> bool:
    return document_id.startswith(DRAFTS_PREFIX)


def parse_media_reference(value: Reference | str | None) -> tuple[str, str] | None:
    """Split ``media-library:<libraryId>:<instanceId>`` into ``(library_id, instance_id)``.

    Returns None for anything that is not exactly three parts led by ``media-library``.
    """
    if isinstance(value, Reference):
        value = value.ref
    if not value or not isinstance(value, str):
        return None

    parts = value.split(":")
    if len(parts) != 3 or parts[0] != MEDIA_LIBRARY_KIND:
        return None
    library_id, instance_id = parts[1], parts[2]
    if not library_id or not instance_id:
        return None
    return library_id, instance_id


def global_reference(library_id: str, document_id: str, weak: bool = True) -> GlobalDocumentReference:
    return GlobalDocumentReference(ref=f"{MEDIA_LIBRARY_KIND}:{library_id}:{document_id}", weak=weak)
