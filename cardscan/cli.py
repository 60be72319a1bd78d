"""Command-line interface for the card scanner core."""

import asyncio
import json
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .core.types import IdentificationResult, OcrReading, VariantId
from .ledger.events import AddEvent, CardLocation, new_event_id, utc_now
from .ledger.holdings import materialize
from .ledger.valuation import PriceRecord, compute_collection_value
from .match.index import InMemoryCatalogIndex
from .match.remote import HttpCatalogIndex
from .scan.pipeline import identify, identify_async, make_lookup
from .scan.session import ScanSession
from .store.jsonl import JsonlEventStore
from .utils.config import settings
from .utils.error_handler import CardScanError, ConfigurationError
from .utils.log import bind_scan_context, clear_scan_context, configure_logging, get_logger

# Configure logging
configure_logging()
logger = get_logger(__name__)

# Rich console
console = Console()

app = typer.Typer(
    name="cardscan",
    help="Card Scanner - resolve OCR text to catalog printings and track a collection ledger",
    add_completion=False
)


def _policy() -> dict:
    return {
        "auto_confirm_threshold": settings.AUTO_CONFIRM_THRESHOLD,
        "disambiguation_margin": settings.DISAMBIGUATION_MARGIN,
        "min_candidate_score": settings.MIN_CANDIDATE_SCORE,
        "search_limit": settings.SEARCH_LIMIT,
    }


def _fail(error: Exception) -> NoReturn:
    console.print(f"[red]❌ {escape(str(error))}[/red]")
    raise typer.Exit(1)


def _print_result(result: IdentificationResult, title: str) -> None:
    table = Table(title=title)
    table.add_column("#", style="dim")
    table.add_column("Entry", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Set", style="white")
    table.add_column("Number", style="white")
    table.add_column("Score", justify="right")

    for i, c in enumerate(result.candidates, start=1):
        table.add_row(str(i), c.entry_id, c.name, c.entry.set_code, c.entry.collector_number, str(c.score))

    console.print(table)
    console.print(f"OCR confidence: {result.normalized.confidence}")
    if not result.found:
        console.print("[red]❌ Not found in catalog[/red]")
    elif result.auto_confirmed:
        console.print(f"[green]✓ Auto-confirmed: {result.top.name}[/green]")
    else:
        console.print("[yellow]⚠ Needs confirmation - pick a candidate[/yellow]")


async def _identify_remote(reading: OcrReading) -> IdentificationResult:
    if not settings.CATALOG_API_URL:
        raise ConfigurationError("CATALOG_API_URL is not set")
    async with HttpCatalogIndex(settings.CATALOG_API_URL, settings.CATALOG_API_KEY) as index:
        return await identify_async(reading, index, **_policy())


@app.command("identify")
def identify_cmd(
    name: str = typer.Argument(..., help="Card name as read by OCR"),
    catalog: Optional[Path] = typer.Option(None, "--catalog", "-c", help="Catalog JSON file"),
    number: Optional[str] = typer.Option(None, "--number", "-n", help="Collector number"),
    set_code: Optional[str] = typer.Option(None, "--set", "-s", help="Set code"),
    remote: bool = typer.Option(False, "--remote", help="Search the configured catalog service"),
):
    """Rank catalog candidates for one OCR reading."""
    reading = OcrReading(name_raw=name, collector_number_raw=number, set_code_raw=set_code)
    try:
        if remote:
            result = asyncio.run(_identify_remote(reading))
        elif catalog is None:
            raise ConfigurationError("Pass --catalog or --remote")
        else:
            result = identify(reading, InMemoryCatalogIndex.from_json(catalog), **_policy())
    except CardScanError as e:
        _fail(e)

    _print_result(result, f"Candidates for '{result.normalized.name}'")


@app.command()
def holdings(
    ledger: Optional[Path] = typer.Option(None, "--ledger", "-l", help="Ledger JSONL file"),
):
    """Show holdings materialized from the ledger."""
    try:
        events = JsonlEventStore(ledger).read()
    except CardScanError as e:
        _fail(e)

    table = Table(title=f"Holdings ({len(events)} events)")
    table.add_column("Variant", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Locations", style="white")
    table.add_column("Condition", style="white")
    table.add_column("Language", style="white")
    table.add_column("Note", style="dim")

    for variant_id, h in materialize(events).items():
        total = str(h.total_quantity) if h.is_consistent else f"[red]{h.total_quantity}[/red]"
        locations = ", ".join(
            f"{lq.location.kind}:{lq.location.name}={lq.quantity}" for lq in h.by_location
        )
        table.add_row(
            variant_id,
            total,
            locations,
            h.last_condition.value if h.last_condition else "",
            h.last_language or "",
            h.last_note or "",
        )

    console.print(table)


@app.command()
def add(
    variant_id: str = typer.Argument(..., help="Catalog entry (variant) id"),
    quantity: int = typer.Option(1, "--qty", "-q", min=1, help="Copies to add"),
    location: Optional[str] = typer.Option(None, "--location", help="Location name"),
    location_kind: str = typer.Option("binder", "--location-kind", help="binder, box, deck or other"),
    ledger: Optional[Path] = typer.Option(None, "--ledger", "-l", help="Ledger JSONL file"),
):
    """Append an add event to the ledger."""
    try:
        event = AddEvent(
            id=new_event_id(),
            at=utc_now(),
            variant_id=VariantId(variant_id),
            quantity=quantity,
            location=CardLocation(kind=location_kind, name=location) if location else None,
        )
        JsonlEventStore(ledger).append([event])
    except (CardScanError, ValueError) as e:
        _fail(e)

    console.print(f"[green]✓ Added {quantity} × {variant_id}[/green] [dim]({event.id})[/dim]")


@app.command()
def value(
    prices: Path = typer.Option(..., "--prices", "-p", help="Price records JSON file"),
    market: str = typer.Option("tcgplayer", "--market", help="Market to price against"),
    kind: str = typer.Option("market", "--kind", help="market, low, mid or high"),
    currency: str = typer.Option("USD", "--currency", help="Currency code"),
    ledger: Optional[Path] = typer.Option(None, "--ledger", "-l", help="Ledger JSONL file"),
):
    """Value the collection with supplied prices."""
    try:
        with open(prices, "r", encoding="utf-8") as f:
            records = [PriceRecord.model_validate(r) for r in json.load(f)]
        current = materialize(JsonlEventStore(ledger).read())
        result = compute_collection_value(current.values(), records, market, kind, currency)
    except (CardScanError, OSError, ValueError) as e:
        _fail(e)

    console.print(Panel.fit(
        f"[bold]{result.total.amount:.2f} {result.total.currency}[/bold]",
        title=f"Collection value ({market}/{kind})",
        border_style="green"
    ))
    if result.missing_prices:
        console.print(f"[yellow]⚠ No price for: {', '.join(result.missing_prices)}[/yellow]")


async def _replay(frames: List[str], index: InMemoryCatalogIndex, interval_s: float) -> ScanSession:
    def on_result(name: str, result: IdentificationResult) -> None:
        _print_result(result, f"Lookup for '{name}'")

    session = ScanSession(
        make_lookup(index, **_policy()),
        config=settings.gate_config(),
        on_result=on_result,
    )
    for i, raw_text in enumerate(frames):
        action = session.feed(raw_text, now=i * interval_s)
        console.print(f"[dim]frame {i}: {action.kind.value} {action.name or ''}[/dim]")
        # Let a scheduled lookup make progress between frames
        await asyncio.sleep(0)
    await session.wait_idle()
    return session


@app.command()
def replay(
    frames_file: Path = typer.Argument(..., help="JSON list of per-frame OCR texts"),
    catalog: Path = typer.Option(..., "--catalog", "-c", help="Catalog JSON file"),
    interval_ms: int = typer.Option(150, "--interval-ms", help="Simulated time between frames"),
):
    """Feed recorded frame texts through a scan session with a simulated clock."""
    try:
        with open(frames_file, "r", encoding="utf-8") as f:
            frames = [str(t) for t in json.load(f)]
        index = InMemoryCatalogIndex.from_json(catalog)
    except (CardScanError, OSError, ValueError) as e:
        _fail(e)

    bind_scan_context(replay=frames_file.name)
    try:
        session = asyncio.run(_replay(frames, index, interval_ms / 1000.0))
    finally:
        clear_scan_context()
    logger.info("Replay finished", frames=len(frames), lookups=session.lookups_issued)
    console.print(f"\n[bold]Replay complete[/bold]: {len(frames)} frames, {session.lookups_issued} lookups")


if __name__ == "__main__":
    app()
