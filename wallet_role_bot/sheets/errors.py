from __future__ import annotations


class SheetsApiError(RuntimeError):
    """Failure reported by the spreadsheet service (or the local table emulating it)."""

    def __init__(self, status: int, reason: str = "", message: str = "") -> None:
        self.status = int(status)
        self.reason = reason
        self.message = message
        detail = f"Sheets error {self.status}"
        if reason:
            detail += f" ({reason})"
        if message:
            detail += f": {message}"
        super().__init__(detail)


class SheetsRateLimitError(SheetsApiError):
    """Quota exhausted; the only failure the retry policy waits out."""


class StaleLocationError(RuntimeError):
    def __init__(self, partition: str, row_number: int, expected_user_id: str, found_user_id: str) -> None:
        self.partition = partition
        self.row_number = row_number
        self.expected_user_id = expected_user_id
        self.found_user_id = found_user_id
        super().__init__(
            f"Row {partition}!{row_number} holds user {found_user_id or '<empty>'}, "
            f"expected {expected_user_id}; location is stale"
        )


def is_rate_limited(exc: BaseException) -> bool:
    if isinstance(exc, SheetsRateLimitError):
        return True
    if isinstance(exc, SheetsApiError):
        return exc.status == 429 or exc.reason == "RESOURCE_EXHAUSTED"
    status = getattr(exc, "status", None)
    return status == 429
