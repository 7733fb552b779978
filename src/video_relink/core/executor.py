import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from video_relink.core.planner import PatchOperation
from video_relink.core.ports.store import DocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentPreview:
    document_id: str
    operations: list[PatchOperation]


@dataclass
class PatchReport:
    dry_run: bool
    previews: list[DocumentPreview] = field(default_factory=list)
    patched: dict[str, int] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def group_by_document(operations: Iterable[PatchOperation]) -> dict[str, list[PatchOperation]]:
    """Group operations by target document, keeping first-seen document order."""
    grouped: dict[str, list[PatchOperation]] = {}
    for op in operations:
        grouped.setdefault(op.document_id, []).append(op)
    return grouped


async def apply_patches(
    store: DocumentStore,
    operations: Iterable[PatchOperation],
    dry_run: bool = False,
) -> PatchReport:
    """Apply planned operations as one transaction per document, or preview them.

    A failed document is recorded in ``PatchReport.failed`` and does not stop
    the remaining documents. Nothing is retried.
    """
    report = PatchReport(dry_run=dry_run)

    for document_id, doc_operations in group_by_document(operations).items():
        if dry_run:
            report.previews.append(DocumentPreview(document_id, doc_operations))
            continue

        sets = {op.path: op.new_reference.to_store() for op in doc_operations}
        try:
            await store.commit_patch(document_id, sets)
        except Exception as exc:
            logger.exception("Failed to patch document %s", document_id)
            report.failed[document_id] = str(exc) or type(exc).__name__
            continue

        report.patched[document_id] = len(doc_operations)
        logger.info("Patched document %s (%d references)", document_id, len(doc_operations))

    return report
