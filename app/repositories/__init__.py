"""
app/repositories package marker.
"""

from app.repositories.dataset_store import DatasetStore, DatasetView

__all__ = [
    "DatasetStore",
    "DatasetView",
]
