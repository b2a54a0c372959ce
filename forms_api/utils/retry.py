"""
Retry utility for handling transient database connection errors.
Inserts into the submission tables occasionally fail with
"Connection reset by peer" when the pooled connection has gone stale.
"""
import time
import logging
from typing import Callable, Any

logger = logging.getLogger(__name__)


def _is_connection_reset(exc: Exception) -> bool:
    message = str(exc).lower()
    return (
        isinstance(exc, ConnectionError)
        or "connection reset" in message
        or "errno 104" in message
    )


def retry_supabase_query(
    query_func: Callable,
    max_retries: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 4.0,
) -> Any:
    """
    Execute a Supabase query, retrying when the connection was reset.

    Usage:
        result = retry_supabase_query(
            lambda: client.table("contact_submissions").insert(row).execute()
        )

    Args:
        query_func: A callable that executes the Supabase query
        max_retries: Maximum number of retry attempts
        base_delay: Delay before the first retry, doubled on each attempt
        max_delay: Upper bound for the delay between attempts

    Returns:
        The query result

    Raises:
        The last error once retries are exhausted, or any error that is not
        a connection reset straight away.
    """
    attempt = 0
    while True:
        try:
            return query_func()
        except Exception as e:
            if not _is_connection_reset(e) or attempt >= max_retries:
                raise
            delay = min(base_delay * (2 ** attempt), max_delay)
            attempt += 1
            logger.warning(
                f"Supabase connection reset, retry {attempt}/{max_retries}. "
                f"Waiting {delay}s..."
            )
            time.sleep(delay)
