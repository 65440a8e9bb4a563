"""Terminal front end for the asset directory."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Set
from urllib.parse import urlencode

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from assets.catalog import CatalogClient
from assets.directory import AssetDirectory
from assets.export import ExportFormat
from assets.filters import deserialize, serialize
from assets.models import AssetRecord
from assets.navigation import RecordingNavigator
from assets.resolution import Navigate
from assets.scanner import ScanMode
from assets.storage import FilterCache
from assets.synchronizer import FilterBadge, QueryStateSynchronizer
from assets.warranty import WarrantyStatus, classify_warranty
from common.config import settings
from common.logging import configure_logging
from common.notifications import Notification, NotificationLevel, NotificationService
from common.schemas import Pagination
from common.security import roles_from_token

load_dotenv()

console = Console()
app = typer.Typer(help="Browse, scan and export the asset catalog.")

UI_BASE = os.getenv("ASSETS_UI_BASE", "http://localhost:4000/assets")

WARRANTY_STYLES: Dict[WarrantyStatus, str] = {
    WarrantyStatus.EXPIRED: "red",
    WarrantyStatus.EXPIRING_URGENT: "dark_orange",
    WarrantyStatus.EXPIRING_WARNING: "yellow",
}


def _print_notification(notification: Notification) -> None:
    style = {
        NotificationLevel.ERROR: "red",
        NotificationLevel.WARNING: "yellow",
        NotificationLevel.SUCCESS: "green",
    }[notification.level]
    console.print(f"[{style}]{notification.message}[/{style}]")


def _roles(role: Optional[List[str]], token: Optional[str]) -> Set[str]:
    roles: Set[str] = set(role or [])
    token = token or os.getenv("ASSETS_ACCESS_TOKEN")
    if token:
        roles |= roles_from_token(token)
    return roles


def _filter_params(
    *,
    name: Optional[str] = None,
    serial_number: Optional[str] = None,
    qr_code_id: Optional[str] = None,
    facility: Optional[str] = None,
    location: Optional[str] = None,
    asset_class: Optional[str] = None,
    status: Optional[str] = None,
    before: Optional[str] = None,
    after: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
) -> Dict[str, str]:
    raw: Dict[str, Any] = {
        "name": name,
        "serial_number": serial_number,
        "qr_code_id": qr_code_id,
        "facility": facility,
        "location": location,
        "asset_class": asset_class,
        "status": status,
        "warranty_amc_end_of_validity_before": before,
        "warranty_amc_end_of_validity_after": after,
        "search": search,
        "page": page if page != 1 else None,
    }
    return {key: str(value) for key, value in raw.items() if value not in (None, "")}


def _build_directory(
    roles: Optional[Set[str]] = None, use_cache: bool = False
) -> tuple[AssetDirectory, RecordingNavigator]:
    configure_logging(settings.log_level)
    notifier = NotificationService()
    notifier.subscribe(_print_notification)
    navigator = RecordingNavigator()
    directory = AssetDirectory(
        CatalogClient.from_settings(),
        navigator,
        roles=roles,
        notifier=notifier,
        cache=FilterCache() if use_cache else None,
    )
    return directory, navigator


def _warranty_cell(record: AssetRecord) -> str:
    status = classify_warranty(record.warranty_amc_end_of_validity)
    if status is None:
        return ""
    style = WARRANTY_STYLES[status]
    return f"[{style}]{status.label}[/{style}]"


def _render_assets(listing: QueryStateSynchronizer, badges: List[FilterBadge]) -> None:
    if not listing.results_exist:
        console.print("[yellow]No Assets Found[/yellow]")
    else:
        table = Table(show_edge=False, header_style="bold cyan")
        table.add_column("Name", style="cyan")
        table.add_column("Location")
        table.add_column("Facility")
        table.add_column("Working")
        table.add_column("Warranty/AMC")
        table.add_column("Status")
        table.add_column("Link", style="dim")
        for record in listing.assets:
            working = "[green]Working[/green]" if record.is_working else "[red]Not Working[/red]"
            status = f"[red]{record.latest_status}[/red]" if record.is_down else ""
            table.add_row(
                record.name or "-",
                record.location_name or "-",
                record.facility_name or "-",
                working,
                _warranty_cell(record),
                status,
                record.detail_path or "-",
            )
        console.print(table)

    pagination = Pagination(
        total=listing.total_count,
        limit=listing.filters.page_size,
        offset=listing.filters.offset,
    )
    console.print(
        f"[dim]Total Assets: {pagination.total} · page {pagination.page} of {pagination.page_count}[/dim]"
    )
    if badges:
        console.print(
            "[dim]Filters: "
            + ", ".join(f"{badge.label}: {badge.value}" for badge in badges)
            + "[/dim]"
        )


async def _list_assets(params: Dict[str, str], use_cache: bool) -> None:
    directory, _ = _build_directory(use_cache=use_cache)
    async with directory.catalog:
        await directory.listing.restore(params)
        badges = await directory.listing.badges()
        _render_assets(directory.listing, badges)
        console.print(f"[dim]Share: {directory.listing.share_url(UI_BASE)}[/dim]")


@app.command(name="list")
def list_assets(
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Search by name."),
    serial_number: Optional[str] = typer.Option(None, "--serial", "-p", help="Search by serial number."),
    qr_code_id: Optional[str] = typer.Option(None, "--qr", "-u", help="Search by QR code id."),
    facility: Optional[str] = typer.Option(None, "--facility", "-f", help="Facility id."),
    location: Optional[str] = typer.Option(None, "--location", "-l", help="Location id (needs --facility)."),
    asset_class: Optional[str] = typer.Option(None, "--asset-class", help="ONVIF, HL7MONITOR, VENTILATOR..."),
    status: Optional[str] = typer.Option(None, "--status", help="Asset status."),
    before: Optional[str] = typer.Option(None, "--warranty-before", help="Warranty/AMC ends before (YYYY-MM-DD)."),
    after: Optional[str] = typer.Option(None, "--warranty-after", help="Warranty/AMC ends after (YYYY-MM-DD)."),
    search: Optional[str] = typer.Option(None, "--search", "-q", help="Free text across name/serial/QR id."),
    page: int = typer.Option(1, "--page", min=1, help="Result page."),
    use_cache: bool = typer.Option(True, "--cache/--no-cache", help="Reuse the last filters when none are given."),
) -> None:
    """List assets matching the filters."""
    params = _filter_params(
        name=name,
        serial_number=serial_number,
        qr_code_id=qr_code_id,
        facility=facility,
        location=location,
        asset_class=asset_class,
        status=status,
        before=before,
        after=after,
        search=search,
        page=page,
    )
    asyncio.run(_list_assets(params, use_cache))


@app.command()
def link(
    facility: Optional[str] = typer.Option(None, "--facility", "-f"),
    location: Optional[str] = typer.Option(None, "--location", "-l"),
    asset_class: Optional[str] = typer.Option(None, "--asset-class"),
    status: Optional[str] = typer.Option(None, "--status"),
    search: Optional[str] = typer.Option(None, "--search", "-q"),
    page: int = typer.Option(1, "--page", min=1),
    base: str = typer.Option(UI_BASE, "--base", help="Base URL of the asset list."),
) -> None:
    """Print a shareable link for a filter set without querying the catalog."""
    filters = deserialize(
        _filter_params(
            facility=facility,
            location=location,
            asset_class=asset_class,
            status=status,
            search=search,
            page=page,
        ),
        page_size=settings.assets_page_size,
    )
    console.print(f"{base}?{urlencode(serialize(filters))}")


async def _resolve(text: str) -> Optional[str]:
    directory, _ = _build_directory()
    async with directory.catalog:
        outcome = await directory.pipeline.resolve(text)
    return outcome.path if isinstance(outcome, Navigate) else None


@app.command()
def resolve(text: str = typer.Argument(..., help="Scanned tag URL, e.g. https://host/?asset=QR123")) -> None:
    """Resolve a tag URL to its asset page."""
    path = asyncio.run(_resolve(text))
    if path is None:
        raise typer.Exit(1)
    console.print(f"[green]{path}[/green]")


async def _scan() -> Optional[str]:
    directory, navigator = _build_directory()
    scanner = directory.scanner
    async with directory.catalog:
        scanner.activate()
        while scanner.mode is ScanMode.SCANNING:
            try:
                text = typer.prompt("Scan asset QR (blank to close)", default="", show_default=False)
            except typer.Abort:
                scanner.deactivate()
                break
            if not text.strip():
                scanner.deactivate()
                break
            await scanner.on_capture(text)
    return navigator.last


@app.command()
def scan() -> None:
    """Read tag URLs from the terminal until one is resolved or scanning is closed."""
    path = asyncio.run(_scan())
    if path:
        console.print(f"[green]{path}[/green]")


async def _export(
    params: Dict[str, str], export_format: ExportFormat, roles: Set[str], output: Path
) -> Optional[Path]:
    directory, _ = _build_directory(roles=roles)
    async with directory.catalog:
        await directory.listing.load_parameters(params)
        payload = await directory.export(export_format)
    if payload is None:
        return None
    output.mkdir(parents=True, exist_ok=True)
    target = output / payload.filename
    target.write_bytes(payload.content)
    return target


@app.command()
def export(
    export_format: ExportFormat = typer.Option(ExportFormat.JSON, "--format", "-F", case_sensitive=False),
    facility: Optional[str] = typer.Option(None, "--facility", "-f"),
    location: Optional[str] = typer.Option(None, "--location", "-l"),
    asset_class: Optional[str] = typer.Option(None, "--asset-class"),
    status: Optional[str] = typer.Option(None, "--status"),
    search: Optional[str] = typer.Option(None, "--search", "-q"),
    output: Path = typer.Option(Path("."), "--output", "-o", help="Directory for the export file."),
    role: Optional[List[str]] = typer.Option(None, "--role", "-r", help="Role held by the caller."),
    token: Optional[str] = typer.Option(None, "--token", help="Signed access token carrying roles."),
) -> None:
    """Export every asset matching the filters."""
    roles = _roles(role, token)
    params = _filter_params(
        facility=facility,
        location=location,
        asset_class=asset_class,
        status=status,
        search=search,
    )
    target = asyncio.run(_export(params, export_format, roles, output))
    if target is None:
        console.print("[red]Export unavailable (not authorized or no matching assets).[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Wrote {target}[/green]")


async def _create(facility: Optional[str], roles: Set[str]) -> Optional[str]:
    directory, _ = _build_directory(roles=roles)
    async with directory.catalog:
        return directory.create_asset(facility)


@app.command()
def create(
    facility: Optional[str] = typer.Option(None, "--facility", "-f", help="Facility picked for the new asset."),
    role: Optional[List[str]] = typer.Option(None, "--role", "-r"),
    token: Optional[str] = typer.Option(None, "--token"),
) -> None:
    """Show where a new asset would be created."""
    path = asyncio.run(_create(facility, _roles(role, token)))
    if path is None:
        console.print("[yellow]Select a facility first (--facility) or check your roles.[/yellow]")
        raise typer.Exit(1)
    console.print(path)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
