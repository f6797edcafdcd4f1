"""CLI entrypoint for taskgrid."""

import logging
import sys
from pathlib import Path

import click

from . import __version__


def _parse_column_filters(values: tuple[str, ...]) -> dict[str, str]:
    columns: dict[str, str] = {}
    for raw in values:
        column, sep, text = raw.partition("=")
        if not sep or not column.strip():
            raise click.BadParameter(f"expected COLUMN=TEXT, got {raw!r}", param_hint="--column-filter")
        columns[column.strip()] = text
    return columns


@click.group()
@click.version_option(__version__, prog_name="taskgrid")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to taskgrid.toml (defaults to auto-detected ./taskgrid.toml)",
)
@click.option("--verbose", is_flag=True, help="Log engine decisions to stderr")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """taskgrid - Filter, sort and summarize exported task and project lists."""
    from .config import DEFAULT_CONFIG, find_config, load_config

    ctx.ensure_object(dict)

    if verbose:
        from rich.console import Console
        from rich.logging import RichHandler

        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )

    if config_path is None:
        config_path = find_config(Path.cwd())

    config = DEFAULT_CONFIG
    if config_path is not None:
        try:
            config = load_config(config_path)
        except (OSError, ValueError) as e:
            raise click.ClickException(str(e)) from e

    ctx.obj["config"] = config


@cli.command()
@click.argument("records", type=click.Path(exists=False, dir_okay=False, path_type=Path))
@click.option(
    "--kind",
    type=click.Choice(["task", "project"]),
    default="task",
    show_default=True,
    help="Record kind in RECORDS",
)
@click.option(
    "--filters",
    "filters_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Saved filter state (.toml, .yaml or .json)",
)
@click.option("--search", type=str, default=None, help="Free-text search term")
@click.option(
    "--predefined",
    type=str,
    default=None,
    metavar="NAME",
    help="Predefined filter (e.g., my-tasks, overdue, high-priority, completed)",
)
@click.option(
    "--column-filter",
    "column_filters",
    multiple=True,
    metavar="COLUMN=TEXT",
    help="Per-column filter (repeatable)",
)
@click.option("--sort", "sort_field", type=str, default=None, help="Field to sort by")
@click.option(
    "--direction",
    type=click.Choice(["asc", "desc"]),
    default=None,
    help="Sort direction",
)
@click.option("--user-id", type=str, default=None, help="Current user id (for my-* filters)")
@click.option("--user-name", type=str, default=None, help="Current user name")
@click.option("--user-email", type=str, default=None, help="Current user email")
@click.option(
    "--aux",
    "aux_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Records used to resolve reference IDs (e.g., tasks for a project list)",
)
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def view(
    ctx: click.Context,
    records: Path,
    kind: str,
    filters_path: Path | None,
    search: str | None,
    predefined: str | None,
    column_filters: tuple[str, ...],
    sort_field: str | None,
    direction: str | None,
    user_id: str | None,
    user_name: str | None,
    user_email: str | None,
    aux_path: Path | None,
    output_json: bool,
) -> None:
    """Filter and sort a record export.

    Examples:

        taskgrid view tasks.json --predefined overdue --sort priority

        taskgrid view projects.json --kind project --aux tasks.json

        taskgrid view tasks.json --filters board.toml --column-filter status=progress
    """
    from .commands.view import run_view
    from .models import CurrentUser

    user = CurrentUser.from_mapping({"id": user_id, "name": user_name, "email": user_email})

    exit_code = run_view(
        records,
        kind=kind,
        filters_path=filters_path,
        search=search,
        predefined=predefined,
        column_filters=_parse_column_filters(column_filters),
        sort_field=sort_field,
        direction=direction,
        user=user,
        aux_path=aux_path,
        output_json=output_json,
        config=ctx.obj["config"],
    )
    sys.exit(exit_code)


@cli.command()
@click.argument("records", type=click.Path(exists=False, dir_okay=False, path_type=Path))
@click.option(
    "--kind",
    type=click.Choice(["task", "project"]),
    default="task",
    show_default=True,
    help="Record kind in RECORDS",
)
@click.option(
    "--aux",
    "aux_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Records used to resolve reference IDs",
)
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def stats(
    ctx: click.Context,
    records: Path,
    kind: str,
    aux_path: Path | None,
    output_json: bool,
) -> None:
    """Summarize a record export: counts per status, overdue, average progress."""
    from .commands.stats import run_stats

    sys.exit(run_stats(records, kind=kind, aux_path=aux_path, output_json=output_json, config=ctx.obj["config"]))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
