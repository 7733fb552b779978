from dataclasses import dataclass
from typing import Literal

from video_relink.core.locator import find_asset_paths
from video_relink.core.paths import DocumentPath
from video_relink.core.references import global_reference
from video_relink.core.resolver import MediaLibraryMapping
from video_relink.models import Document, GlobalDocumentReference, Reference, VideoAsset

MEDIA_FIELD = "media"

OperationKind = Literal["asset", "media"]


@dataclass(frozen=True)
class PatchOperation:
    document_id: str
    path: DocumentPath
    kind: OperationKind
    new_reference: GlobalDocumentReference
    # Informational only: the executor does not check it before writing.
    old_reference: Reference | None = None


def plan_patch_operations(
    document: Document,
    asset: VideoAsset,
    mapping: MediaLibraryMapping,
) -> list[PatchOperation]:
    """Plan the ``asset``/``media`` replacement pair for every reference to ``asset`` in ``document``.

    An empty list means the document no longer references the asset, usually
    because it was already migrated.
    """
    document_id: str = document["_id"]
    operations: list[PatchOperation] = []

    for path in find_asset_paths(document, only_ref_to=asset.id):
        operations.append(
            PatchOperation(
                document_id=document_id,
                path=path,
                kind="asset",
                old_reference=Reference(ref=asset.id),
                new_reference=global_reference(mapping.library_id, mapping.instance_id),
            )
        )
        operations.append(
            PatchOperation(
                document_id=document_id,
                path=path.sibling(MEDIA_FIELD),
                kind="media",
                new_reference=global_reference(mapping.library_id, mapping.container_id),
            )
        )

    return operations
