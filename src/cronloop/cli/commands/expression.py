"""Expression inspection commands for cronloop CLI."""

import typer
from rich.table import Table

from cronloop.cli import app, console
from cronloop.cli.utils import format_datetime
from cronloop.errors import InvalidExpressionError
from cronloop.scheduler.expression import parse_expression, preview_fire_times


@app.command()
def validate(
    expression: str = typer.Argument(..., help="Cron expression (5 or 6 fields)"),
) -> None:
    """Check that a cron expression parses.

    Examples:
        cronloop validate "*/5 * * * *"
        cronloop validate "0 30 9 * * 1-5"
    """
    try:
        parse_expression(expression)
    except InvalidExpressionError as e:
        console.print(f"[red]✗[/] {e.message}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/] Valid expression: [cyan]{expression}[/]")


@app.command(name="next")
def next_runs(
    expression: str = typer.Argument(..., help="Cron expression (5 or 6 fields)"),
    count: int = typer.Option(5, "--count", "-n", min=1, help="Number of fire times to show"),
    timezone: str = typer.Option(
        "local",
        "--timezone",
        help="IANA timezone name, or 'local'",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output results as JSON",
    ),
) -> None:
    """Preview upcoming fire times of a cron expression.

    Examples:
        cronloop next "0 9 * * *"
        cronloop next "*/15 * * * *" --count 10 --timezone Europe/Berlin
        cronloop next "0 0 1 * *" --json
    """
    try:
        fire_times = preview_fire_times(expression, count=count, timezone=timezone)
    except InvalidExpressionError as e:
        console.print(f"[red]Error:[/] {e.message}")
        raise typer.Exit(1)

    if json_output:
        console.print_json(
            data={
                "expression": expression,
                "timezone": timezone,
                "next": [t.isoformat() for t in fire_times],
            }
        )
        return

    if not fire_times:
        console.print(f"[yellow]Expression never fires again:[/] {expression}")
        return

    table = Table(title=f"Next runs for '{expression}'")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Fire Time", style="cyan")

    for index, fire_time in enumerate(fire_times, start=1):
        table.add_row(str(index), format_datetime(fire_time))

    console.print(table)
