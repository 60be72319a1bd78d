"""
Match module for ranking catalog entries against OCR queries.
"""

from .index import AsyncCatalogIndex, CatalogIndex, InMemoryCatalogIndex, entry_from_dict
from .remote import HttpCatalogIndex
from .score import bounded_edit_distance, name_score, score_entry

__all__ = [
    "CatalogIndex",
    "AsyncCatalogIndex",
    "InMemoryCatalogIndex",
    "HttpCatalogIndex",
    "entry_from_dict",
    "bounded_edit_distance",
    "name_score",
    "score_entry",
]
