import asyncio
from typing import Annotated

import typer
from rich.markup import escape

from video_relink.cli.console import configure_logging, console, render_table
from video_relink.config import DEFAULT_DATASET, StoreSettings, build_settings
from video_relink.core.filename_link import LinkResult, link_videos_by_filename
from video_relink.core.ports.store import DocumentStore
from video_relink.exceptions import ConfigurationError, StoreError

app = typer.Typer(
    name="link-videos-by-filename",
    help="Set each post's media library video by matching its legacy video's filename to an asset title.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_store(settings: StoreSettings) -> DocumentStore:
    from video_relink.store.http import HttpDocumentStore

    return HttpDocumentStore(settings)


def _render(result: LinkResult) -> None:
    if result.dry_run:
        render_table(
            ["post", "filename", "media library asset", "instance"],
            [(p.post_id, p.filename, p.asset_id, p.instance_id) for p in result.planned],
            title="Planned links (dry run)",
        )
    for post_id, link_id in result.linked.items():
        console.print(f"[green]✓ Linked post {post_id} via {link_id}[/green]")
    for post_id, reason in result.skipped.items():
        console.print(f"[yellow]⚠ Skipped post {post_id}: {escape(reason)}[/yellow]")
    for post_id, error in result.failed.items():
        console.print(f"[red]✗ Failed to link post {post_id}: {escape(error)}[/red]")


@app.command()
def link(
    project_id: Annotated[str, typer.Option(envvar="SANITY_STUDIO_PROJECT_ID", help="Sanity project ID.")],
    token: Annotated[
        str, typer.Option(envvar="VIDEO_MIGRATION_TOKEN", help="Token with dataset and media library access.")
    ],
    media_library_id: Annotated[str, typer.Option(envvar="MEDIA_LIBRARY_ID", help="Media library to match against.")],
    dataset: Annotated[str, typer.Option(envvar="SANITY_STUDIO_DATASET", help="Dataset name.")] = DEFAULT_DATASET,
    api_version: Annotated[str, typer.Option(help="API version to request.")] = "v2025-07-24",
    prod: Annotated[bool, typer.Option("--prod/--staging", help="Target the production or staging API host.")] = True,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", "-d", help="Match videos without creating links or patching.")
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show detailed output.")] = False,
) -> None:
    """Link legacy post videos to media library assets by filename."""
    try:
        settings = build_settings(
            project_id=project_id, token=token, dataset=dataset, api_version=api_version, prod=prod
        )
    except ConfigurationError as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc

    configure_logging(verbose)
    store = _get_store(settings)

    async def _run() -> LinkResult:
        try:
            return await link_videos_by_filename(store, media_library_id, dry_run=dry_run)
        finally:
            await store.dispose()

    try:
        result = asyncio.run(_run())
    except StoreError as exc:
        console.print(f"[red]Failed to query posts: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc

    _render(result)


def main() -> None:
    app()
