"""cronloop CLI interface."""

import typer
from rich.console import Console

# CLI App
app = typer.Typer(
    name="cronloop",
    help="In-process cron scheduler with clock-jump handling.",
    no_args_is_help=True,
)

# Console for rich output
console = Console()

# Import commands to register them
from cronloop.cli.commands import demo, expression  # noqa: E402, F401


@app.command()
def version() -> None:
    """Show cronloop version."""
    from cronloop import __version__

    console.print(f"cronloop v{__version__}")


if __name__ == "__main__":
    app()
