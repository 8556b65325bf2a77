"""Shared setup logic for CLI commands."""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING, Any, NoReturn

import click

from hisaab.core.config import Config, get_config
from hisaab.core.exceptions import HisaabError
from hisaab.core.utils.logging import setup_logging

if TYPE_CHECKING:
    from hisaab.financial.ledger import InMemoryLedger

CONTEXT_CONFIG_KEY = "config"


def init_context(ctx: click.Context, config_file: str | None, log_level: str | None) -> None:
    """Load config and configure logging for the invoked command."""
    config = Config(config_file=config_file) if config_file else get_config()
    if log_level:
        config.set("logging.level", log_level)
    try:
        settings = config.validated()
    except HisaabError as e:
        fail(e)
    setup_logging(
        level=settings.logging.level,
        log_file=settings.logging.file,
        log_dir=settings.paths.log_dir if settings.logging.to_file else None,
    )
    ctx.ensure_object(dict)
    ctx.obj[CONTEXT_CONFIG_KEY] = config


def get_ctx_config(ctx: click.Context) -> Config:
    return ctx.obj[CONTEXT_CONFIG_KEY]


def resolve_ledger_path(ctx: click.Context, ledger: str | None) -> str:
    """Use --ledger when given, else paths.ledger_file from config."""
    return ledger or get_ctx_config(ctx).get("paths.ledger_file")


def load_ctx_ledger(ctx: click.Context, ledger: str | None) -> InMemoryLedger:
    """Load the ledger named by --ledger or config, applying ``currency.default``."""
    from hisaab.financial.ledger import load_ledger

    config = get_ctx_config(ctx)
    return load_ledger(resolve_ledger_path(ctx, ledger), default_currency=config.get("currency.default", "USD"))


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


def echo_rows(rows: list[tuple[str, Any]]) -> None:
    width = max(len(label) for label, _ in rows)
    for label, value in rows:
        click.echo(f"{label:<{width}}  {value}")


def fail(error: HisaabError) -> NoReturn:
    """Report a library error and exit non-zero."""
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


ledger_option = click.option(
    "--ledger",
    type=click.Path(dir_okay=False),
    default=None,
    help="Ledger YAML file (defaults to paths.ledger_file).",
)
json_option = click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table.")
