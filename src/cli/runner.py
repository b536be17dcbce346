# src/cli/runner.py

"""Headless CLI commands built on the catalog service."""

import asyncio
import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.models.product import ScoredProduct
from src.services.catalog_service import CatalogService
from src.services.refresh_scheduler import RefreshScheduler

logger = logging.getLogger("door_catalog.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _results_to_dicts(
    results: list[ScoredProduct],
) -> list[dict[str, object]]:
    """Serialise scored products to plain dicts for JSON output."""
    base_url = Settings.STORE_BASE_URL
    return [
        {
            **r.product.to_dict(),
            "url": r.product.absolute_url(base_url),
            "score": r.score,
        }
        for r in results
    ]


def _print_table(results: list[ScoredProduct]) -> None:
    """Render a Rich table of search results to stdout."""
    table = Table(
        title="Catalog Search",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", max_width=60)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Category", style="magenta")
    table.add_column("Score", justify="right")
    table.add_column("URL", overflow="fold", style="dim")

    for idx, r in enumerate(results, 1):
        p = r.product
        table.add_row(
            str(idx),
            p.title[:60],
            p.price,
            p.category or "—",
            f"{r.score:.0f}",
            p.absolute_url(Settings.STORE_BASE_URL),
        )

    Console().print(table)


async def _started_service() -> CatalogService | None:
    """Create a service and load its catalog, or report failure."""
    service = CatalogService()
    if not await service.start():
        _err.print("[red]No catalog available (cache and feed both failed).[/red]")
        return None
    return service


async def cli_search(
    query: str,
    limit: int | None,
    output_format: str,
) -> int:
    """Run a single search and return an exit code (0=ok, 1=fail)."""
    service = await _started_service()
    if service is None:
        return 1

    _err.print(
        f"[bold]Searching:[/bold] {query}  "
        f"[dim]{service.product_count} products in catalog[/dim]"
    )
    results = service.search_scored(query, limit)
    if not results:
        _err.print("[yellow]No products found.[/yellow]")
        return 1

    _err.print(f"[green]✓ {len(results)} products[/green]")
    if output_format == "table":
        _print_table(results)
    else:
        json.dump(
            _results_to_dicts(results),
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")
    return 0


async def run_refresh() -> int:
    """Run one feed ingest cycle now."""
    _err.print(f"[bold]Refreshing catalog from[/bold] {Settings.FEED_URL}")
    service = CatalogService()
    if not await service.refresh():
        _err.print("[red]Refresh failed, existing cache left untouched.[/red]")
        return 1
    _err.print(f"[green]✓ {service.product_count:,} products cached[/green]")
    return 0


async def run_categories() -> int:
    """Print product counts per category."""
    service = await _started_service()
    if service is None:
        return 1

    table = Table(title="Categories", title_style="bold cyan")
    table.add_column("Category")
    table.add_column("Products", justify="right", style="green")
    for name, count in sorted(
        service.categories().items(), key=lambda kv: -kv[1]
    ):
        table.add_row(name, str(count))
    Console().print(table)
    return 0


async def run_watch() -> int:
    """Keep the catalog loaded and refresh it on schedule until stopped."""
    service = await _started_service()
    if service is None:
        return 1

    scheduler = RefreshScheduler(service)
    scheduler.start()
    _err.print(
        f"[bold]Watching feed[/bold] every "
        f"{scheduler.interval / 86400:.1f} days. Ctrl+C to stop."
    )
    try:
        await asyncio.Event().wait()
    finally:
        await scheduler.stop()
    return 0


async def run_health_check() -> int:
    """Check feed reachability and cache freshness."""
    from src.services.health_checker import HealthChecker

    _err.print("[bold]Running catalog health check...[/bold]")
    checker = HealthChecker()
    results = await checker.check_all()

    table = Table(
        title="Catalog Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Check", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status in ("slow", "stale"):
            status = f"[yellow]⚠️  {r.status.upper()}[/yellow]"
        else:
            status = f"[red]❌ {r.status.upper()}[/red]"
            any_down = True

        latency = (
            f"{r.latency_ms:.0f}ms"
            if r.latency_ms > 0
            else "—"
        )
        table.add_row(r.source_id, status, latency, r.message)

    Console().print(table)
    return 1 if any_down else 0
