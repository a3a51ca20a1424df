"""
Analytics Errors

Exceptions raised by the record source and the report aggregator.
"""

from typing import Optional


class AnalyticsError(Exception):
    """Base class for analytics failures"""

    retryable: bool = False


class SourceUnavailable(AnalyticsError):
    """
    A record source read failed or timed out.

    Raised once per aggregation run no matter how many reads failed; the
    caller decides whether to retry.
    """

    retryable = True

    def __init__(self, read: str, cause: Optional[BaseException] = None):
        self.read = read
        self.cause = cause
        message = f"Record source read '{read}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
