"""Reference data loading and indexing."""

from .index import build_index, merge_indexes, normalize
from .loader import DocumentLoader
from .repository import ReferenceRepository

__all__ = [
    "DocumentLoader",
    "ReferenceRepository",
    "build_index",
    "merge_indexes",
    "normalize",
]
