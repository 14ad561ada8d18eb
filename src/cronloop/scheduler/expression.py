"""Cron expression evaluation backed by APScheduler triggers."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta

from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.combining import OrTrigger
from apscheduler.triggers.cron import CronTrigger as APCronTrigger

from cronloop.errors import InvalidExpressionError

# Cron numbers Sunday as 0 (or 7); APScheduler numbers Monday as 0 and puts
# Sunday last, so day-of-week fields are expanded here and handed over as names.
_WEEKDAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")
_ALL_WEEKDAYS = frozenset(range(7))

# Fire times are whole seconds, so one microsecond past the reference
# excludes the reference itself.
_EPSILON = timedelta(microseconds=1)


def _weekday_number(token: str) -> int:
    token = token.strip().lower()
    if token in _WEEKDAY_NAMES:
        return _WEEKDAY_NAMES.index(token)
    if not token.isdigit():
        msg = f"invalid day of week '{token}'"
        raise ValueError(msg)

    number = int(token)
    if number > 7:
        msg = f"day of week {number} is out of range (0-7)"
        raise ValueError(msg)
    return number


def _expand_day_of_week(field: str) -> set[int]:
    """Expand a cron day-of-week field into weekday numbers (0 is Sunday).

    Supports ``*``, single days, ranges, lists and ``/step`` on any of them.
    A range may end on Sunday written as 7 (``5-7``) or as ``sun`` (``mon-sun``).
    """
    days: set[int] = set()
    for term in field.split(","):
        span, has_step, step_text = term.partition("/")
        step = 1
        if has_step:
            if not step_text.isdigit() or int(step_text) == 0:
                msg = f"invalid step in day of week '{term}'"
                raise ValueError(msg)
            step = int(step_text)

        if span == "*":
            first, last = 0, 6
        elif "-" in span:
            start, _, end = span.partition("-")
            first, last = _weekday_number(start), _weekday_number(end)
            if last == 0 and first > 0:
                last = 7
        else:
            first = _weekday_number(span)
            # "n/step" runs to the end of the week
            last = 7 if has_step else first

        if first > last:
            msg = f"day of week range '{span}' is reversed"
            raise ValueError(msg)
        days.update(day % 7 for day in range(first, last + 1, step))
    return days


def _build_trigger(
    second: str,
    minute: str,
    hour: str,
    day: str,
    month: str,
    day_of_week: str,
    tz: str | None,
) -> BaseTrigger:
    days = _expand_day_of_week(day_of_week)
    weekdays = ",".join(_WEEKDAY_NAMES[number] for number in sorted(days))
    fields = {"second": second, "minute": minute, "hour": hour, "month": month, "timezone": tz}

    if day == "*" or days == _ALL_WEEKDAYS:
        return APCronTrigger(day=day, day_of_week=weekdays, **fields)

    # Both day fields restricted: a day matching either one fires
    return OrTrigger(
        [
            APCronTrigger(day=day, day_of_week="*", **fields),
            APCronTrigger(day="*", day_of_week=weekdays, **fields),
        ]
    )


@dataclass(frozen=True)
class CronExpression:
    """A parsed cron expression.

    Attributes:
        source: The original expression string.
        trigger: APScheduler trigger used to compute fire times.
    """

    source: str
    trigger: BaseTrigger

    def next_after(self, reference: datetime) -> datetime | None:
        """Return the first fire time strictly after ``reference``.

        Args:
            reference: Timezone-aware reference instant.

        Returns:
            The next matching instant, or None if the expression never fires again.
        """
        return self.trigger.get_next_fire_time(None, reference + _EPSILON)

    def iter_after(self, reference: datetime) -> Iterator[datetime]:
        """Yield successive fire times after ``reference``."""
        current = self.next_after(reference)
        while current is not None:
            yield current
            current = self.next_after(current)


def parse_expression(expression: str, timezone: str = "local") -> CronExpression:
    """Parse a 5 or 6 field cron expression.

    Args:
        expression: Cron expression. Five fields are
            ``minute hour day month day_of_week``; six fields prepend ``second``.
        timezone: IANA timezone name, or "local" for the host timezone.

    Returns:
        The parsed expression.

    Raises:
        InvalidExpressionError: If the expression is malformed.
    """
    if not isinstance(expression, str):
        raise InvalidExpressionError(repr(expression), "expression must be a string")

    parts = expression.split()
    tz = timezone if timezone != "local" else None

    try:
        if len(parts) == 5:
            # Standard cron: minute hour day month day_of_week
            trigger = _build_trigger("0", *parts, tz=tz)
        elif len(parts) == 6:
            # Extended cron: second minute hour day month day_of_week
            trigger = _build_trigger(*parts, tz=tz)
        else:
            msg = f"expected 5 or 6 fields, got {len(parts)}"
            raise InvalidExpressionError(expression, msg)
    except InvalidExpressionError:
        raise
    except Exception as e:
        # APScheduler reports bad fields as ValueError, bad zones as tz lookup errors
        raise InvalidExpressionError(expression, str(e)) from e

    return CronExpression(source=expression, trigger=trigger)


def validate_expression(expression: str) -> bool:
    """Check whether an expression parses.

    Args:
        expression: The cron expression to validate.

    Returns:
        True if the expression is valid.
    """
    try:
        parse_expression(expression)
    except InvalidExpressionError:
        return False
    return True


def preview_fire_times(
    expression: str,
    count: int = 5,
    now: datetime | None = None,
    timezone: str = "local",
) -> list[datetime]:
    """List the next fire times for an expression.

    Args:
        expression: The cron expression.
        count: Number of fire times to return.
        now: Reference instant (defaults to the current local time).
        timezone: Timezone for evaluation.

    Returns:
        Up to ``count`` upcoming fire times in order.
    """
    parsed = parse_expression(expression, timezone)
    reference = now or datetime.now().astimezone()

    result: list[datetime] = []
    for fire_time in parsed.iter_after(reference):
        if len(result) >= count:
            break
        result.append(fire_time)
    return result
