"""
app/domain package marker.
"""

from app.domain.date_range import (
    AvailableDateBounds,
    DateRange,
    DateRangeSelection,
    InvalidDateRangeError,
)

__all__ = [
    "AvailableDateBounds",
    "DateRange",
    "DateRangeSelection",
    "InvalidDateRangeError",
]
