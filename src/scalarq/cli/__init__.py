"""scalarq CLI: run filter queries against collection data files."""

from __future__ import annotations

import logging
from typing import Optional

import typer

from scalarq.cli import alter, info, parse_cmd, query

app = typer.Typer(
    name="scalarq",
    help="scalarq CLI — query and alter collection data files with filter expressions.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    data: str | None = None
    json_output: bool = False


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        try:
            from importlib.metadata import version

            v = version("scalarq")
        except Exception:
            v = "unknown"
        print(f"scalarq {v}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    data: Optional[str] = typer.Option(
        None,
        "--data",
        "-d",
        envvar="SCALARQ_DATA",
        help="Collection data file (.json, .yaml or .yml)",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output when supported"),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        envvar="SCALARQ_LOG_LEVEL",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all scalarq commands."""
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        raise typer.BadParameter(f"Unknown log level '{log_level}'", param_hint="--log-level")
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("scalarq").setLevel(level)

    state.data = data
    state.json_output = json_output
    if ctx.invoked_subcommand is None and not version:
        print(ctx.get_help())
        raise typer.Exit()


app.command(name="query")(query.query_cmd)
app.command(name="parse")(parse_cmd.parse_cmd)
app.command(name="describe")(info.describe_cmd)
app.command(name="stats")(info.stats_cmd)
app.command(name="alter")(alter.alter_cmd)


def main() -> None:
    """Entry point for the scalarq CLI."""
    app()
