import asyncio
from typing import Annotated

import typer
from rich.markup import escape

from video_relink.cli.console import configure_logging, console, render_table
from video_relink.config import DEFAULT_DATASET, StoreSettings, build_settings
from video_relink.core.executor import PatchReport
from video_relink.core.migrate import MigrationResult, describe_asset, run_migration
from video_relink.core.ports.store import DocumentStore
from video_relink.exceptions import ConfigurationError, StoreError

app = typer.Typer(
    name="replace-local-video-assets",
    help="Replace local video asset references with media library global document references.",
    epilog="Example: replace-local-video-assets --dry-run abc123 my-token staging",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_store(settings: StoreSettings) -> DocumentStore:
    from video_relink.store.http import HttpDocumentStore

    return HttpDocumentStore(settings)


def _render_result(result: MigrationResult, verbose: bool) -> None:
    plan = result.plan
    if verbose:
        console.print("[blue]Found video assets:[/blue]")
        for index, asset in enumerate(plan.assets, start=1):
            console.print(f"[dim]{index}. {escape(describe_asset(asset))}[/dim]")
        if plan.skipped:
            render_table(
                ["asset", "status", "reason"],
                [(s.asset_id, s.status, s.detail) for s in plan.skipped],
                title="Skipped assets",
            )

    stats = result.stats
    render_table(
        ["metric", "count"],
        [
            ("Total operations", stats.total_operations),
            ("Unique documents", stats.unique_documents),
            ("Asset references", stats.asset_operations),
            ("Media references", stats.media_operations),
            ("Skipped assets", len(plan.skipped)),
        ],
        title="Summary",
    )


def _render_report(report: PatchReport) -> None:
    if report.dry_run:
        console.print("[yellow]=== DRY RUN MODE - No changes will be made ===[/yellow]")
        for preview in report.previews:
            console.print(f"[yellow][DRY RUN] Would patch document {preview.document_id}:[/yellow]")
            for op in preview.operations:
                console.print(f"[dim]  - Path: {escape(str(op.path))}[/dim]")
                if op.old_reference is not None:
                    console.print(f"[red]    From: {op.old_reference.ref}[/red]")
                console.print(f"[green]    To: {op.new_reference.ref}[/green]")
        console.print("[yellow]=== DRY RUN COMPLETE - No changes were made ===[/yellow]")
        console.print("[dim]Run without --dry-run to apply these changes[/dim]")
        return

    for document_id, count in report.patched.items():
        console.print(f"[green]✓ Patched document {document_id} ({count} references)[/green]")
    for document_id, error in report.failed.items():
        console.print(f"[red]✗ Failed to patch document {document_id}: {escape(error)}[/red]")

    if report.ok:
        console.print("[green]✓ All patches applied successfully[/green]")
    else:
        console.print(f"[yellow]{len(report.failed)} document(s) failed; re-run to retry them[/yellow]")


@app.command()
def replace(
    project_id: Annotated[str, typer.Argument(help="Sanity project ID.")],
    token: Annotated[str, typer.Argument(help="Sanity auth token.")],
    dataset: Annotated[str, typer.Argument(help="Dataset name.")] = DEFAULT_DATASET,
    dry_run: Annotated[bool, typer.Option("--dry-run", "-d", help="Preview patches without applying them.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show detailed output.")] = False,
    prod: Annotated[
        bool, typer.Option("--prod", help="Use production API (api.sanity.io) instead of staging (api.sanity.work).")
    ] = False,
) -> None:
    """Rewrite every reference to a legacy video asset as a media library reference."""
    try:
        settings = build_settings(project_id=project_id, token=token, dataset=dataset, prod=prod)
    except ConfigurationError as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc

    configure_logging(verbose)
    console.print("[blue]Starting video asset reference replacement...[/blue]")
    console.print(f"[dim]Project: {settings.project_id}[/dim]")
    console.print(f"[dim]Dataset: {settings.dataset}[/dim]")
    console.print(f"[dim]API: {'production' if prod else 'staging'} ({settings.api_host})[/dim]")
    console.print(f"[dim]Mode: {'DRY RUN' if dry_run else 'LIVE'}[/dim]")

    store = _get_store(settings)

    async def _run() -> MigrationResult:
        try:
            with console.status("Processing video assets..."):
                return await run_migration(store, dry_run=dry_run)
        finally:
            await store.dispose()

    try:
        result = asyncio.run(_run())
    except StoreError as exc:
        console.print(f"[red]Failed to query video assets: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc

    if not result.plan.assets:
        console.print("[yellow]No video assets found[/yellow]")
        return

    _render_result(result, verbose)

    if result.report is None:
        console.print("[yellow]No references found to update[/yellow]")
        return

    _render_report(result.report)


def main() -> None:
    app()
