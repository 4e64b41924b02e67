"""Command-line interface for bt2magnet.

Provides:
- ``convert``: turn a .torrent file, magnet URI or info hash into a magnet URI
- ``info``: show the metadata of any supported input
- ``config show``: print the effective configuration
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.markup import escape
from rich.table import Table

from bt2magnet import __version__
from bt2magnet.cli.console import create_console, print_warning
from bt2magnet.config.config import ConfigManager, init_config
from bt2magnet.core.magnet import generate_magnet_link
from bt2magnet.core.resolver import resolve_from_bytes, resolve_from_text
from bt2magnet.core.torrent import TorrentParser
from bt2magnet.models import LogLevel, MagnetRecord, RecordSource, TorrentDescriptor
from bt2magnet.utils.exceptions import Bt2MagnetError
from bt2magnet.utils.formatting import (
    format_file_size,
    is_valid_info_hash,
    truncate_text,
)
from bt2magnet.utils.logging_config import LoggingContext, log_exception, setup_logging

logger = logging.getLogger(__name__)

STDIN_SOURCE = "-"
MAX_LISTED_FILES = 50


def _raise_cli_error(error: Bt2MagnetError) -> NoReturn:
    """Raise a ClickException describing a core error."""
    log_exception(logger, error, "Conversion failed")
    prefix = f"{error.kind.value}: " if error.kind else ""
    raise click.ClickException(f"{prefix}{error.message}") from None


def _get_config_manager(ctx: click.Context) -> ConfigManager:
    return ctx.obj["config_manager"]


def _resolve_source(source: str, max_depth: int) -> tuple[TorrentDescriptor, RecordSource]:
    """Resolve a CLI argument into a descriptor and the kind of input it was."""
    if source == STDIN_SOURCE:
        data = click.get_binary_stream("stdin").read()
        return resolve_from_bytes(data, max_depth=max_depth), RecordSource.FILE

    candidate = source.strip()
    if candidate.lower().startswith("magnet:") or is_valid_info_hash(candidate):
        return resolve_from_text(candidate), RecordSource.INPUT

    if Path(source).is_file():
        return TorrentParser(max_depth=max_depth).parse(source), RecordSource.FILE

    # Neither a file nor recognizable text; let the resolver report it
    return resolve_from_text(candidate), RecordSource.INPUT


@click.group()
@click.version_option(__version__, prog_name="bt2magnet")
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file path",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v: info, -vv: debug)",
)
@click.pass_context
def cli(ctx: click.Context, config_file: str | None, verbose: int) -> None:
    """bt2magnet - convert torrent files and info hashes to magnet links."""
    ctx.ensure_object(dict)
    try:
        config_manager = init_config(config_file, configure_logging=False)
    except Bt2MagnetError as e:
        raise click.ClickException(e.message) from None

    observability = config_manager.config.observability
    if verbose >= 2:
        observability.log_level = LogLevel.DEBUG
    elif verbose == 1:
        observability.log_level = LogLevel.INFO
    setup_logging(observability)

    ctx.obj["config_manager"] = config_manager


@cli.command()
@click.argument("source")
@click.option("--name", "-n", help="Display name to put in the magnet link")
@click.option(
    "--trackers/--no-trackers",
    "include_trackers",
    default=None,
    help="Add default trackers when the input carries none",
)
@click.option(
    "--tracker",
    "-t",
    "extra_trackers",
    multiple=True,
    help="Tracker to add when the input carries none (repeatable)",
)
@click.option("--json", "as_json", is_flag=True, help="Print a JSON history record")
@click.pass_context
def convert(
    ctx: click.Context,
    source: str,
    name: str | None,
    include_trackers: bool | None,
    extra_trackers: tuple[str, ...],
    as_json: bool,
) -> None:
    """Convert SOURCE (a .torrent path, magnet URI, info hash or '-') to a magnet link."""
    cfg = _get_config_manager(ctx).config

    if extra_trackers:
        trackers = list(extra_trackers)
        include = True if include_trackers is None else include_trackers
    else:
        trackers = cfg.magnet.default_trackers
        include = cfg.magnet.include_trackers if include_trackers is None else include_trackers

    try:
        with LoggingContext("convert", logger=logger, source=source):
            descriptor, record_source = _resolve_source(source, cfg.codec.max_depth)
    except Bt2MagnetError as e:
        _raise_cli_error(e)

    if descriptor.trackers and extra_trackers:
        print_warning("Input already lists trackers; extra trackers were not added")

    magnet_link = generate_magnet_link(
        descriptor,
        name=name,
        trackers=trackers,
        include_trackers=include,
    )

    if as_json:
        record = MagnetRecord.from_descriptor(
            descriptor,
            magnet_link,
            record_source,
            name=name,
        )
        click.echo(record.model_dump_json(indent=2))
    else:
        click.echo(magnet_link)


@cli.command()
@click.argument("source")
@click.pass_context
def info(ctx: click.Context, source: str) -> None:
    """Show the metadata of SOURCE (a .torrent path, magnet URI, info hash or '-')."""
    cfg = _get_config_manager(ctx).config
    try:
        descriptor, _ = _resolve_source(source, cfg.codec.max_depth)
    except Bt2MagnetError as e:
        _raise_cli_error(e)

    console = create_console()

    table = Table(title="Torrent", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Name", escape(descriptor.name or "-"))
    table.add_row("Info hash", descriptor.info_hash_hex)
    if descriptor.total_length is not None:
        table.add_row("Size", format_file_size(descriptor.total_length))
    if descriptor.piece_length is not None:
        table.add_row("Piece length", format_file_size(descriptor.piece_length))
    if descriptor.is_private:
        table.add_row("Private", "yes")
    if descriptor.comment:
        table.add_row("Comment", escape(truncate_text(descriptor.comment, 80)))
    if descriptor.created_by:
        table.add_row("Created by", escape(descriptor.created_by))
    for index, tracker in enumerate(descriptor.trackers):
        table.add_row("Trackers" if index == 0 else "", escape(tracker))
    console.print(table)

    if descriptor.files:
        files_table = Table(title=f"Files ({len(descriptor.files)})")
        files_table.add_column("Path")
        files_table.add_column("Size", justify="right")
        for entry in descriptor.files[:MAX_LISTED_FILES]:
            files_table.add_row(escape(entry.path), format_file_size(entry.length))
        if len(descriptor.files) > MAX_LISTED_FILES:
            files_table.add_row(f"... {len(descriptor.files) - MAX_LISTED_FILES} more", "")
        console.print(files_table)


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("show")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["toml", "json"]),
    default="toml",
    show_default=True,
    help="Output format",
)
@click.pass_context
def config_show(ctx: click.Context, fmt: str) -> None:
    """Print the effective configuration."""
    click.echo(_get_config_manager(ctx).export(fmt))


def main() -> None:
    """Entry point for the ``bt2magnet`` console script."""
    sys.exit(cli(obj={}))  # pylint: disable=no-value-for-parameter
