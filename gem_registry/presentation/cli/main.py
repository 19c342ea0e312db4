"""
CLI for the RubyGems registry client.

Commands:
    gem-registry get NAME - Show gem information
    gem-registry search QUERY - Search gems
    gem-registry versions NAME - List versions of a gem
    gem-registry latest NAME - Show the latest version of a gem
    gem-registry deps NAME... - Show dependencies
    gem-registry rdeps NAME - Show reverse dependencies
    gem-registry downloads [NAME VERSION] - Show download counts
    gem-registry bulk NAME... - Fetch many gems concurrently
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Annotated, Any, Awaitable, Callable, List, Optional

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.table import Table

from ... import __version__
from ...core.config import ConfigLoader, Settings
from ...core.container import create_client
from ...core.exceptions import RegistryError
from ...infrastructure.api import BulkOptions, BulkOperationsMixin
from ...utils.logging_utils import get_logger, setup_logging

app = typer.Typer(
    name="gem-registry",
    help="Query the RubyGems registry and its mirrors",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)

logger = get_logger(__name__)


@dataclass
class CLIState:
    """Options shared by every command."""
    mirror: Optional[str] = None
    no_cache: bool = False
    as_json: bool = False
    verbose: bool = False


def _load_settings(state: CLIState) -> Settings:
    settings = ConfigLoader.load_config()
    update = {}
    if state.mirror:
        update["registry"] = settings.registry.model_copy(update={"mirror": state.mirror})
    if state.no_cache:
        update["cache"] = settings.cache.model_copy(update={"enabled": False})
    return settings.model_copy(update=update) if update else settings


def _run(ctx: typer.Context, operation: Callable[[Any], Awaitable[Any]]) -> Any:
    """Build a client, run operation against it and close it."""
    state: CLIState = ctx.obj

    async def runner(settings: Settings):
        client = create_client(settings)
        try:
            return await operation(client)
        finally:
            await client.close()

    try:
        settings = _load_settings(state)
        if state.verbose:
            setup_logging("DEBUG", debug=True)
        else:
            setup_logging(settings.log_level, debug=settings.debug)

        return asyncio.run(runner(settings))
    except RegistryError as e:
        logger.debug(f"Command failed: {type(e).__name__}: {e}")
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_to_jsonable(item) for item in value]
    return value


def _print_json(value: Any) -> None:
    console.print_json(json.dumps(_to_jsonable(value)))


def _limit(items: List[Any], limit: Optional[int]) -> List[Any]:
    if limit is not None and limit > 0:
        return items[:limit]
    return items


@app.callback()
def main(
    ctx: typer.Context,
    mirror: Annotated[
        Optional[str],
        typer.Option("--mirror", "-m", help="Mirror name (official, ruby-china, tsinghua, aliyun)"),
    ] = None,
    no_cache: Annotated[
        bool,
        typer.Option("--no-cache", help="Bypass the response cache"),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print raw JSON"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log requests and retries"),
    ] = False,
) -> None:
    """Query the RubyGems registry."""
    ctx.obj = CLIState(mirror=mirror, no_cache=no_cache, as_json=as_json, verbose=verbose)


@app.command()
def version() -> None:
    """Print version."""
    console.print(f"gem-registry {__version__}")


@app.command()
def get(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Gem name")],
) -> None:
    """Show gem information."""
    package = _run(ctx, lambda client: client.get_package(name))

    if ctx.obj.as_json:
        _print_json(package)
        return

    table = Table(title=f"{package.name} {package.version}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Downloads", f"{package.downloads:,}")
    table.add_row("Authors", package.authors or "")
    table.add_row("Licenses", ", ".join(package.licenses or []))
    table.add_row("Homepage", package.homepage_uri or "")
    table.add_row("Source", package.source_code_uri or "")
    table.add_row(
        "Runtime deps",
        ", ".join(f"{dep.name} {dep.requirements}" for dep in package.dependencies.runtime)
    )
    table.add_row("Info", package.info or "")
    console.print(table)


@app.command()
def search(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Search query")],
    page: Annotated[int, typer.Option("--page", "-p", help="Result page")] = 1,
    limit: Annotated[Optional[int], typer.Option("--limit", "-l", help="Maximum rows")] = None,
) -> None:
    """Search gems."""
    results = _limit(_run(ctx, lambda client: client.search(query, page)), limit)

    if ctx.obj.as_json:
        _print_json(results)
        return

    table = Table(title=f"Search: {query} (page {page})")
    table.add_column("Name", style="cyan")
    table.add_column("Version")
    table.add_column("Downloads", justify="right")
    table.add_column("Info")
    for package in results:
        table.add_row(
            package.name,
            package.version,
            f"{package.downloads:,}",
            (package.info or "")[:60]
        )
    console.print(table)


@app.command()
def versions(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Gem name")],
    limit: Annotated[Optional[int], typer.Option("--limit", "-l", help="Maximum rows")] = None,
) -> None:
    """List versions of a gem, newest first."""
    results = _limit(_run(ctx, lambda client: client.get_versions(name)), limit)

    if ctx.obj.as_json:
        _print_json(results)
        return

    table = Table(title=f"{name} versions")
    table.add_column("Version", style="cyan")
    table.add_column("Platform")
    table.add_column("Created")
    table.add_column("Downloads", justify="right")
    for item in results:
        created = item.created_at.strftime("%Y-%m-%d") if item.created_at else ""
        table.add_row(item.number, item.platform, created, f"{item.downloads_count:,}")
    console.print(table)


@app.command()
def latest(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Gem name")],
) -> None:
    """Show the latest version of a gem."""
    result = _run(ctx, lambda client: client.get_latest_version(name))

    if ctx.obj.as_json:
        _print_json(result)
        return

    console.print(f"{name} [bold cyan]{result.version}[/bold cyan]")


@app.command()
def deps(
    ctx: typer.Context,
    names: Annotated[List[str], typer.Argument(help="Gem names")],
) -> None:
    """Show dependencies of every version of the given gems."""
    results = _run(ctx, lambda client: client.get_dependencies(*names))

    if ctx.obj.as_json:
        _print_json(results)
        return

    if not results:
        console.print("[yellow]No dependencies found[/yellow]")
        return

    table = Table(title="Dependencies")
    table.add_column("Gem", style="cyan")
    table.add_column("Dependency")
    table.add_column("Requirements")
    table.add_column("Type")
    for info in results:
        table.add_row(info.name, info.dependent_name, info.requirements, info.dependent_type)
    console.print(table)


@app.command()
def rdeps(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Gem name")],
    limit: Annotated[Optional[int], typer.Option("--limit", "-l", help="Maximum rows")] = None,
) -> None:
    """Show gems that depend on a gem."""
    results = _run(ctx, lambda client: client.get_reverse_dependencies(name))
    total = len(results)
    results = _limit(results, limit)

    if ctx.obj.as_json:
        _print_json(results)
        return

    console.print(f"[bold]{total}[/bold] gems depend on {name}")
    for dependent in results:
        console.print(f"  {dependent}")


@app.command()
def downloads(
    ctx: typer.Context,
    name: Annotated[Optional[str], typer.Argument(help="Gem name")] = None,
    gem_version: Annotated[Optional[str], typer.Argument(help="Gem version")] = None,
) -> None:
    """Show registry-wide downloads, or those of one gem version."""
    if name and not gem_version:
        error_console.print("[red]Error:[/red] a version is required with a gem name")
        raise typer.Exit(1)

    if name:
        result = _run(ctx, lambda client: client.get_version_downloads(name, gem_version))
    else:
        result = _run(ctx, lambda client: client.get_downloads())

    if ctx.obj.as_json:
        _print_json(result)
        return

    if name:
        console.print(f"{name} {gem_version}: [bold]{result.version_downloads:,}[/bold] downloads")
        console.print(f"All versions: [bold]{result.total_downloads:,}[/bold] downloads")
    else:
        console.print(f"Registry total: [bold]{result.total_downloads:,}[/bold] downloads")


@app.command()
def bulk(
    ctx: typer.Context,
    names: Annotated[List[str], typer.Argument(help="Gem names")],
    concurrency: Annotated[
        int,
        typer.Option("--concurrency", "-c", help="Concurrent requests"),
    ] = 10,
    stop_on_error: Annotated[
        bool,
        typer.Option("--stop-on-error", help="Stop dispatching after the first failure"),
    ] = False,
) -> None:
    """Fetch information for many gems concurrently."""
    options = BulkOptions(max_concurrency=concurrency, continue_on_error=not stop_on_error)

    async def operation(client: BulkOperationsMixin):
        return await client.bulk_get_packages(names, options)

    results = _run(ctx, operation)

    if ctx.obj.as_json:
        _print_json([
            {
                "name": result.key,
                "package": _to_jsonable(result.value),
                "error": str(result.error) if result.error else None,
            }
            for result in results
        ])
    else:
        table = Table(title=f"Bulk fetch ({len(results)}/{len(names)})")
        table.add_column("Gem", style="cyan")
        table.add_column("Version")
        table.add_column("Downloads", justify="right")
        table.add_column("Error", style="red")
        for result in results:
            if result.ok:
                table.add_row(result.key, result.value.version, f"{result.value.downloads:,}", "")
            else:
                table.add_row(result.key, "", "", str(result.error))
        console.print(table)

    if any(not result.ok for result in results):
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
