from .batch import LedgerBatchMixin
from .deletion import LedgerDeletionMixin
from .locator import LedgerLocatorMixin
from .schema import LedgerSchemaMixin
from .upsert import LedgerUpsertMixin

__all__ = [
    "LedgerSchemaMixin",
    "LedgerLocatorMixin",
    "LedgerDeletionMixin",
    "LedgerUpsertMixin",
    "LedgerBatchMixin",
]
