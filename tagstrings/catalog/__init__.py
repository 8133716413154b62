"""
Catalog synchronizers: add missing strings to per-language catalogs.
"""

from .base import CatalogStrategy, EntryTranslator, SyncContext, SyncReport
from .document import DocumentCatalog
from .module import ModuleCatalog

STRATEGIES = {
    ModuleCatalog.name: ModuleCatalog,
    DocumentCatalog.name: DocumentCatalog,
}

__all__ = [
    "CatalogStrategy",
    "DocumentCatalog",
    "EntryTranslator",
    "ModuleCatalog",
    "STRATEGIES",
    "SyncContext",
    "SyncReport",
]
