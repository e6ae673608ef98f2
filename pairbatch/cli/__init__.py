"""CLI entry point for batch trading pair creation."""

from __future__ import annotations

import click

from pairbatch.cli.commands import (
    check_pending,
    create_pairs,
    estimate_fees,
    list_items,
    show_result,
)


@click.group()
def cli() -> None:
    """Batch trading pair creation for the NGN stock DEX."""


cli.add_command(create_pairs)
cli.add_command(check_pending)
cli.add_command(estimate_fees)
cli.add_command(list_items)
cli.add_command(show_result)
