"""Gather-then-apply migration of legacy video asset references.

The planning phase reads assets, registry entries and referencing documents
and accumulates patch operations; the apply phase writes them in one pass.
Documents edited between the two phases are overwritten without a check.
Re-running is safe: migrated documents no longer reference the legacy asset
and plan zero operations.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from video_relink.core.executor import PatchReport, apply_patches
from video_relink.core.planner import PatchOperation, plan_patch_operations
from video_relink.core.ports.store import DocumentStore
from video_relink.core.resolver import resolve_media_library_asset
from video_relink.exceptions import StoreError
from video_relink.models import VideoAsset

logger = logging.getLogger(__name__)

QUERY_FAILED = "query-failed"


@dataclass(frozen=True)
class SkippedAsset:
    asset_id: str
    status: str
    detail: str


@dataclass(frozen=True)
class MigrationStats:
    total_operations: int
    unique_documents: int
    asset_operations: int
    media_operations: int


@dataclass
class MigrationPlan:
    assets: list[VideoAsset] = field(default_factory=list)
    operations: list[PatchOperation] = field(default_factory=list)
    skipped: list[SkippedAsset] = field(default_factory=list)

    @property
    def stats(self) -> MigrationStats:
        return summarize(self.operations)


@dataclass
class MigrationResult:
    plan: MigrationPlan
    report: PatchReport | None = None

    @property
    def stats(self) -> MigrationStats:
        return self.plan.stats


def summarize(operations: Iterable[PatchOperation]) -> MigrationStats:
    ops = list(operations)
    return MigrationStats(
        total_operations=len(ops),
        unique_documents=len({op.document_id for op in ops}),
        asset_operations=sum(1 for op in ops if op.kind == "asset"),
        media_operations=sum(1 for op in ops if op.kind == "media"),
    )


def describe_asset(asset: VideoAsset) -> str:
    size = f"{asset.size / 1024 / 1024:.2f} MB" if asset.size else "unknown"
    media = asset.media_token or "none"
    return f"{asset.id} (filename: {asset.original_filename or 'unknown'}, size: {size}, media: {media})"


async def plan_migration(store: DocumentStore) -> MigrationPlan:
    """Collect patch operations for every legacy video asset in the dataset.

    A failure listing the assets propagates; failures for a single asset are
    recorded as skipped and the run moves on.
    """
    plan = MigrationPlan(assets=await store.list_video_assets())
    logger.info("Found %d video assets", len(plan.assets))

    for index, asset in enumerate(plan.assets, start=1):
        logger.debug("Processing asset %d/%d: %s", index, len(plan.assets), describe_asset(asset))
        try:
            await _plan_asset(store, asset, plan)
        except StoreError as exc:
            logger.error("Failed to process asset %s: %s", asset.id, exc)
            plan.skipped.append(SkippedAsset(asset.id, QUERY_FAILED, str(exc)))

    return plan


async def _plan_asset(store: DocumentStore, asset: VideoAsset, plan: MigrationPlan) -> None:
    resolution = await resolve_media_library_asset(store, asset)
    if resolution.mapping is None:
        logger.info("Skipping %s: %s", asset.id, resolution.detail)
        plan.skipped.append(SkippedAsset(asset.id, resolution.status.value, resolution.detail))
        return

    documents = await store.find_referencing_documents(asset.id)
    if not documents:
        logger.info("No documents reference %s", asset.id)
        return
    logger.info("Found %d documents referencing %s", len(documents), asset.id)

    for document in documents:
        operations = plan_patch_operations(document, asset, resolution.mapping)
        plan.operations.extend(operations)
        if operations:
            logger.debug(
                "  %s (%s): %s",
                document.get("_id"),
                document.get("_type", "unknown"),
                ", ".join(str(op.path) for op in operations),
            )
        else:
            logger.debug("  %s: no operations generated (might be already updated)", document.get("_id"))


async def run_migration(store: DocumentStore, dry_run: bool = False) -> MigrationResult:
    plan = await plan_migration(store)
    result = MigrationResult(plan=plan)
    if plan.operations:
        result.report = await apply_patches(store, plan.operations, dry_run=dry_run)
    return result
