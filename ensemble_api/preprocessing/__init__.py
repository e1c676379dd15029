# ensemble_api/preprocessing/__init__.py

from .record_processing import RecordVectorizer

__all__ = [
    "RecordVectorizer",
]
