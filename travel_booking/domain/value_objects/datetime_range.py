"""Value Object DatetimeRange - check-in/check-out window of a stay."""

from dataclasses import dataclass
from datetime import datetime, timedelta

DAY = timedelta(hours=24)


@dataclass(frozen=True)
class DatetimeRange:
    """
    Immutable date/time range.

    Attributes:
        start: Check-in instant.
        end: Check-out instant.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(f"start must be before end: {self.start} >= {self.end}")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def nights(self) -> int:
        """
        Whole 24h periods between check-in and check-out.

        Partial days are dropped, and a stay is never shorter than one night.
        Example: 47 hours = 1 night.
        """
        return max(1, self.duration // DAY)

    def overlaps_with(self, other: "DatetimeRange") -> bool:
        """Closed-interval overlap: touching endpoints count as overlapping."""
        return self.start <= other.end and other.start <= self.end

    def __str__(self) -> str:
        return f"{self.start.isoformat()} -> {self.end.isoformat()}"
