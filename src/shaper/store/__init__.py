"""Profile, assignment and object stores."""

from shaper.store.base import Catalog, ObjectStore
from shaper.store.loader import StoreLoader, default_content_id
from shaper.store.memory import MemoryStore

__all__ = [
    "Catalog",
    "ObjectStore",
    "MemoryStore",
    "StoreLoader",
    "default_content_id",
]
