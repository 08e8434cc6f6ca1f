from .errors import SheetsApiError, SheetsRateLimitError, StaleLocationError, is_rate_limited
from .factory import build_table
from .memory_table import InMemorySheetsTable
from .retry import RetryPolicy, call_with_retry
from .table import SheetsTable, TableClient

__all__ = [
    "InMemorySheetsTable",
    "RetryPolicy",
    "SheetsApiError",
    "SheetsRateLimitError",
    "SheetsTable",
    "StaleLocationError",
    "TableClient",
    "build_table",
    "call_with_retry",
    "is_rate_limited",
]
