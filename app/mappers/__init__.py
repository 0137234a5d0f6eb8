"""
app/mappers package marker.
"""

from app.mappers.field_resolver import find_field, resolve, resolve_text

__all__ = [
    "find_field",
    "resolve",
    "resolve_text",
]
