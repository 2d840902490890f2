"""ietf-groups CLI: scrape, store and inspect IETF/IRTF group data.

Usage:
    ietf-groups fetch [OUTPUT_FILE] --format yaml|json   # Scrape both organizations
    ietf-groups integrate SNAPSHOT                       # Install a snapshot as package data
    ietf-groups names [OUTPUT_FILE]                      # Flat JSON array of group names
    ietf-groups list --type wg --status active           # Query the installed snapshot
    ietf-groups show HTTPBIS                             # Show one group
"""

import asyncio
import shutil
from pathlib import Path
from typing import Optional

import click
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ietf_groups.config.settings import LOG_LEVELS, settings
from ietf_groups.logging.setup import setup_logging
from ietf_groups.models.group import Group
from ietf_groups.query.dataset import GroupDataset
from ietf_groups.scrapers.runner import fetch_all
from ietf_groups.storage.snapshot import (
    StorageError,
    dump_name_list,
    load_snapshot,
    parse_format,
    save_to_file,
    workgroup_names,
)

console = Console()


def _dataset(snapshot: Optional[str]) -> GroupDataset:
    return GroupDataset(snapshot) if snapshot else GroupDataset()


def _group_panel(group: Group) -> Panel:
    lines = [f"[bold]{escape(group.name)}[/bold]"]
    for label, value in (
        ("Organization", group.organization.value),
        ("Type", group.type),
        ("Area", group.area),
        ("Status", group.status.value),
        ("Chairs", ", ".join(group.chairs) if group.chairs else None),
        ("Mailing list", group.mailing_list),
        ("Archive", group.mailing_list_archive),
        ("Website", group.website_url),
        ("Charter", group.charter_url),
        ("Concluded", group.concluded_date.isoformat() if group.concluded_date else None),
    ):
        if value:
            lines.append(f"{label}: {escape(value)}")
    if group.description:
        lines.append("")
        lines.append(escape(group.description))
    return Panel("\n".join(lines), title=group.abbreviation, expand=False)


@click.group()
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Override the configured log level.",
)
def cli(log_level: Optional[str]) -> None:
    """Fetch and query IETF/IRTF working and research groups."""
    setup_logging(log_level)


@cli.command()
@click.argument("output_file", required=False)
@click.option("--format", "fmt", default="yaml", show_default=True, help="yaml or json")
@click.option("--ietf-only", is_flag=True, help="Skip the IRTF scraper.")
@click.option("--irtf-only", is_flag=True, help="Skip the IETF scraper.")
@click.option(
    "--concurrency",
    type=int,
    default=None,
    help="Detail pages fetched at once (default from settings).",
)
def fetch(
    output_file: Optional[str],
    fmt: str,
    ietf_only: bool,
    irtf_only: bool,
    concurrency: Optional[int],
) -> None:
    """Fetch IETF/IRTF groups and save them to OUTPUT_FILE."""
    try:
        output_format = parse_format(fmt)
    except StorageError as e:
        raise click.ClickException(str(e))
    if ietf_only and irtf_only:
        raise click.UsageError("--ietf-only and --irtf-only are mutually exclusive")

    output_file = output_file or f"ietf_groups.{output_format.value}"
    collection = asyncio.run(
        fetch_all(
            include_ietf=not irtf_only,
            include_irtf=not ietf_only,
            detail_concurrency=concurrency,
        )
    )

    try:
        save_to_file(collection, output_file, output_format)
    except OSError as e:
        raise click.ClickException(f"Could not write {output_file}: {e}")
    console.print(f"Saved {len(collection)} groups to {output_file}")


@cli.command()
@click.argument("snapshot_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--target",
    type=click.Path(dir_okay=False),
    default=None,
    help="Where to install the snapshot (default from settings).",
)
def integrate(snapshot_file: str, target: Optional[str]) -> None:
    """Validate SNAPSHOT_FILE and install it as the packaged dataset."""
    try:
        collection = load_snapshot(snapshot_file)
    except StorageError as e:
        raise click.ClickException(f"Error reading snapshot: {e}")

    target_path = Path(target) if target else settings.groups_path
    target_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(snapshot_file, target_path)
    logger.info(f"Copied {snapshot_file} to {target_path}")
    console.print(f"Integrated {len(collection)} groups into {target_path}")


@cli.command()
@click.argument("output_file", required=False)
@click.option("--snapshot", default=None, help="Snapshot to read (default from settings).")
def names(output_file: Optional[str], snapshot: Optional[str]) -> None:
    """Write a flat JSON array of working/research group names."""
    try:
        collection = _dataset(snapshot).collection
    except StorageError as e:
        raise click.ClickException(str(e))

    text = dump_name_list(workgroup_names(collection))
    if output_file:
        Path(output_file).write_text(text, encoding="utf-8")
        console.print(f"Wrote names to {output_file}")
    else:
        click.echo(text)


@cli.command("list")
@click.option("--snapshot", default=None, help="Snapshot to read (default from settings).")
@click.option("--organization", type=click.Choice(["ietf", "irtf"]), default=None)
@click.option("--type", "group_type", default=None, help="Group type, e.g. wg or rg.")
@click.option("--area", default=None)
@click.option(
    "--status",
    type=click.Choice(["active", "concluded", "bof", "proposed"]),
    default=None,
)
def list_groups(
    snapshot: Optional[str],
    organization: Optional[str],
    group_type: Optional[str],
    area: Optional[str],
    status: Optional[str],
) -> None:
    """List groups from the snapshot matching every given filter."""
    try:
        collection = _dataset(snapshot).collection
    except StorageError as e:
        raise click.ClickException(str(e))

    matches = collection.filter(
        organization=organization, type=group_type, area=area, status=status
    )

    table = Table(title=f"{len(matches)} groups")
    for column in ("Abbreviation", "Name", "Org", "Type", "Area", "Status"):
        table.add_column(column)
    for group in matches:
        table.add_row(
            group.abbreviation,
            group.name,
            group.organization.value,
            group.type,
            group.area or "",
            group.status.value,
        )
    console.print(table)


@cli.command()
@click.argument("abbreviation")
@click.option("--snapshot", default=None, help="Snapshot to read (default from settings).")
def show(abbreviation: str, snapshot: Optional[str]) -> None:
    """Show a single group by ABBREVIATION (case-insensitive)."""
    try:
        group = _dataset(snapshot).find_group(abbreviation)
    except StorageError as e:
        raise click.ClickException(str(e))

    if group is None:
        raise click.ClickException(f"No group named {abbreviation!r}")
    console.print(_group_panel(group))
