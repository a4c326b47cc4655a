from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone


@dataclass(frozen=True)
class TaskFilters:
    day: date
    include_completed: bool = True

    def bounds(self) -> tuple[datetime, datetime]:
        start = datetime.combine(self.day, time.min, tzinfo=timezone.utc)
        return start, start + timedelta(days=1)
