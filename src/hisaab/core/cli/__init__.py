"""Hisaab CLI: entry point for report and rule commands."""

import click

from hisaab import __version__


@click.group()
@click.version_option(version=__version__, package_name="hisaab")
@click.option("--config", "config_file", type=click.Path(dir_okay=False), default=None, help="YAML or JSON config file.")
@click.option("--log-level", default=None, help="Override logging.level (DEBUG, INFO, WARNING, ...).")
@click.pass_context
def main(ctx: click.Context, config_file: str | None, log_level: str | None) -> None:
    """Hisaab: track assets and liabilities, compute gains and payments."""
    from .common import init_context

    init_context(ctx, config_file, log_level)


# Register subcommands
from .report_cmd import dividends, liability, profit
from .rules_cmd import run_rules

main.add_command(profit)
main.add_command(dividends)
main.add_command(liability)
main.add_command(run_rules)
