"""
Date range value object for report windows.

Represents an inclusive period of calendar days and converts it into
the half-open timestamp window used to filter payment dates.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Tuple, Union

from shared.exceptions import DataValidationError


@dataclass(frozen=True)
class DateRange:
    """
    Immutable date range value object.

    Both ends are inclusive: a range ending on 2020-08-15 covers every
    payment made on that day.
    """

    start_date: date
    end_date: date

    def __init__(
        self,
        start: Union[str, date, datetime],
        end: Union[str, date, datetime]
    ):
        """
        Create DateRange with validation.

        Args:
            start: Start date (inclusive)
            end: End date (inclusive)
        """
        start_date = self._to_date(start, "start")
        end_date = self._to_date(end, "end")

        if start_date > end_date:
            raise DataValidationError(
                f"Start date {start_date} cannot be after end date {end_date}",
                code="invalid_date_range",
                details={"start": str(start_date), "end": str(end_date)},
            )

        object.__setattr__(self, 'start_date', start_date)
        object.__setattr__(self, 'end_date', end_date)

    @staticmethod
    def _to_date(value: Union[str, date, datetime], field_name: str) -> date:
        """Convert various input types to date."""
        if isinstance(value, datetime):
            return value.date()
        elif isinstance(value, date):
            return value
        elif isinstance(value, str):
            value = value.strip()
            if not value:
                raise DataValidationError(f"{field_name} date cannot be empty")

            try:
                return datetime.strptime(value, '%Y-%m-%d').date()
            except ValueError:
                pass

            try:
                return datetime.fromisoformat(value.replace('Z', '+00:00')).date()
            except ValueError:
                pass

            raise DataValidationError(f"Invalid {field_name} date format: {value}")
        else:
            raise DataValidationError(f"{field_name} must be date, datetime, or string")

    @property
    def days(self) -> int:
        """Get number of days in range (inclusive)."""
        return (self.end_date - self.start_date).days + 1

    def timestamp_bounds(self) -> Tuple[datetime, datetime]:
        """Return ``(start, end_exclusive)`` datetimes covering the range."""
        lower = datetime.combine(self.start_date, time.min)
        upper = datetime.combine(self.end_date + timedelta(days=1), time.min)
        return lower, upper

    def contains(self, moment: Union[date, datetime]) -> bool:
        """Check whether a date or timestamp falls inside the range."""
        if isinstance(moment, datetime):
            moment = moment.date()
        return self.start_date <= moment <= self.end_date

    def __str__(self) -> str:
        return f"{self.start_date} to {self.end_date}"
