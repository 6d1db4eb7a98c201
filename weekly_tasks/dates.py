"""Calendar helpers for backlog stamps and archive keys."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable


class DateProvider:
    """Supply ISO dates relative to an injectable clock."""

    def __init__(self, clock: Callable[[], date] | None = None) -> None:
        self._clock = clock or date.today

    def current_date(self) -> date:
        return self._clock()

    def today(self) -> str:
        return self.current_date().isoformat()

    def monday_of_current_week(self) -> str:
        current = self.current_date()
        return (current - timedelta(days=current.weekday())).isoformat()


def fixed_clock(value: date | str) -> Callable[[], date]:
    if isinstance(value, str):
        value = date.fromisoformat(value)
    return lambda: value
