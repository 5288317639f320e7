"""Main entry point for the recur CLI."""

import typer
from rich.console import Console

from recurrence_engine import __version__
from recurrence_engine.commands import rules, series
from recurrence_engine.utils.typer_helpers import SuggestingGroup

app = typer.Typer(
    name="recur",
    cls=SuggestingGroup,
    help="Encode, describe and bind recurrence rules for tasks and habits",
    no_args_is_help=True,
)

console = Console()


app.command("encode")(rules.encode)
app.command("decode")(rules.decode)
app.command("describe")(rules.describe)
app.command("presets")(rules.presets)
app.command("legacy")(rules.legacy)
app.command("apply")(series.apply)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]recur[/bold] version [cyan]{__version__}[/cyan]")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
