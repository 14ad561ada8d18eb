"""Demo command for cronloop CLI.

Runs a live scheduler in the foreground and prints every lifecycle event,
which is handy for checking an expression against the wall clock.
"""

from __future__ import annotations

import logging
import signal
import threading
from datetime import datetime
from typing import TYPE_CHECKING

import typer

from cronloop.cli import app, console
from cronloop.cli.utils import format_datetime, setup_logging
from cronloop.config import SchedulerConfig, load_config
from cronloop.errors import CronLoopError
from cronloop.models.events import SchedulerEvent
from cronloop.scheduler import Scheduler

if TYPE_CHECKING:
    from types import FrameType

    from cronloop.models.events import SchedulerEventRecord

logger = logging.getLogger(__name__)

_EVENT_STYLES = {
    SchedulerEvent.STARTED: "green",
    SchedulerEvent.STOPPED: "yellow",
    SchedulerEvent.SCHEDULED: "cyan",
    SchedulerEvent.CANCELLED: "magenta",
    SchedulerEvent.INVOKED: "bold green",
    SchedulerEvent.FAILED: "red",
}


def _print_event(record: SchedulerEventRecord) -> None:
    style = _EVENT_STYLES.get(record.kind, "white")
    job = f" [dim]{record.job_id}[/]" if record.job_id else ""
    stamp = record.timestamp.astimezone().strftime("%H:%M:%S")
    console.print(f"[dim]{stamp}[/] [{style}]{record.kind.value}[/]{job}")


@app.command()
def demo(
    expression: str = typer.Argument("* * * * * *", help="Cron expression to schedule"),
    duration: float = typer.Option(
        10.0,
        "--duration",
        "-d",
        min=0,
        help="Seconds to run before stopping (0 runs until Ctrl+C)",
    ),
    tick_interval: int | None = typer.Option(
        None,
        "--tick-interval",
        "-t",
        help="Tick interval in milliseconds (overrides config)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging",
    ),
) -> None:
    """Run a scheduler that prints each invocation.

    Examples:
        cronloop demo
        cronloop demo "*/2 * * * * *" --duration 30
        cronloop demo "* * * * *" --duration 0 --debug
    """
    setup_logging(debug)

    try:
        config = load_config()
        if tick_interval is not None:
            config = SchedulerConfig.from_value(
                {**config.model_dump(), "tick_interval_ms": tick_interval}
            )
        scheduler = Scheduler(config)
        scheduler.events.subscribe(_print_event)

        invocations = 0

        def on_fire() -> None:
            nonlocal invocations
            invocations += 1
            console.print(f"  [bold]tick[/] #{invocations} at {format_datetime(datetime.now())}")

        job_id = scheduler.schedule(expression, on_fire, name="demo")
    except CronLoopError as e:
        console.print(f"[red]Error:[/] {e.message}")
        raise typer.Exit(1)

    done = threading.Event()

    def handle_signal(signum: int, frame: FrameType | None) -> None:
        logger.info(f"Received signal {signum}, stopping...")
        done.set()

    previous_handlers = {
        signum: signal.signal(signum, handle_signal) for signum in (signal.SIGINT, signal.SIGTERM)
    }

    console.print(f"[cyan]▶[/] Running [bold]{expression}[/] every {config.tick_interval_ms}ms tick")
    scheduler.start()
    try:
        done.wait(duration if duration > 0 else None)
    finally:
        scheduler.cancel(job_id)
        scheduler.stop().result()
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)

    console.print(f"[green]✓[/] Stopped after {invocations} invocation(s)")
