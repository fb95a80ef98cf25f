"""
Bounded retry with exponential backoff for installation actions.
"""

import logging
import threading
import time
from typing import Callable, Optional, TypeVar

from ..exceptions import InstallActionFailed, InstallCancelled
from ..models.retry import RetryPolicy

T = TypeVar("T")

logger = logging.getLogger(__name__)


def with_retry(action: Callable[[], T],
               policy: RetryPolicy,
               sleep: Callable[[float], None] = time.sleep,
               cancel: Optional[threading.Event] = None,
               label: Optional[str] = None) -> T:
    """
    Run an action up to policy.max_attempts times.

    Failures before the last attempt are logged and retried after a delay that
    doubles each time. The final failure is raised as InstallActionFailed with
    the underlying exception chained.

    Args:
        action: Zero-argument callable to attempt
        policy: Attempt count and delay schedule
        sleep: Blocking wait used between attempts when no cancel token is given
        cancel: Optional event; once set, no further attempts are made
        label: Name used in log lines and errors

    Returns:
        Whatever the first successful attempt returned
    """
    name = label or getattr(action, "__name__", "action")
    delays = policy.delays()

    for attempt in range(1, policy.max_attempts + 1):
        if cancel is not None and cancel.is_set():
            raise InstallCancelled(f"{name} cancelled before attempt {attempt}", label)

        try:
            return action()
        except Exception as exc:
            if attempt >= policy.max_attempts:
                logger.error(f"{name}: attempt {attempt}/{policy.max_attempts} failed: {exc}")
                raise InstallActionFailed(attempt, exc, label) from exc

            delay = next(delays)
            logger.warning(
                f"{name}: attempt {attempt}/{policy.max_attempts} failed: {exc}; "
                f"retrying in {delay:g}s"
            )

        if cancel is not None:
            if cancel.wait(delay):
                raise InstallCancelled(f"{name} cancelled while waiting to retry", label)
        else:
            sleep(delay)

    # max_attempts >= 1 guarantees the loop returns or raises
    raise AssertionError("unreachable")
