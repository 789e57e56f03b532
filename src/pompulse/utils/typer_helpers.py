"""Typer helper utilities."""

from difflib import get_close_matches

import typer
from typer.core import TyperGroup

from pompulse.utils.exit_codes import ERROR_INVALID_ARGS
from pompulse.utils.ui.console import get_console


class SuggestingGroup(TyperGroup):
    """Typer group that suggests the closest verb on a typo (``pp strat``)."""

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except Exception as e:
            if not args:
                raise
            attempted = args[0]
            suggestions = get_close_matches(
                attempted, list(self.commands.keys()), n=3, cutoff=0.6
            )
            if not suggestions:
                raise

            console = get_console()
            console.print(
                f'[red]Error:[/red] unknown command "{attempted}" for "{ctx.info_name}"'
            )
            console.print()
            console.print("[yellow]Did you mean this?[/yellow]")
            for suggestion in suggestions:
                console.print(f"        {suggestion}")
            raise typer.Exit(ERROR_INVALID_ARGS) from e
