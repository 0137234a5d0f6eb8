"""
app/parsing package marker.
"""

from app.parsing.dates import parse_date
from app.parsing.scalars import to_float, to_int

__all__ = [
    "parse_date",
    "to_float",
    "to_int",
]
