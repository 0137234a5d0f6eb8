"""
app/services package marker.
"""

from app.services.csv_loader import (
    CSVLoader,
    CSVSourceError,
    HTTPSource,
    LocalDirectorySource,
    get_csv_loader,
)
from app.services.date_bounds import extract_bounds
from app.services.date_filter import filter_by_range

__all__ = [
    "CSVLoader",
    "CSVSourceError",
    "HTTPSource",
    "LocalDirectorySource",
    "extract_bounds",
    "filter_by_range",
    "get_csv_loader",
]
