"""
Bounded calls to external collaborators.

Every call from the domain to the credential store or the hashing
utility goes through call_bounded(), so a hung collaborator costs a
request at most timeout_seconds and surfaces as UpstreamUnavailable.
"""

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TypeVar

from .exceptions import UpstreamUnavailable

T = TypeVar("T")

# Shared across requests; holds no request state.
_executor = ThreadPoolExecutor(max_workers=16, thread_name_prefix="upstream")


def call_bounded(timeout_seconds: float, func: Callable[..., T], *args: object) -> T:
    """
    Run func(*args) and wait at most timeout_seconds for the result.

    Exceptions raised by func propagate unchanged.

    Raises:
        UpstreamUnavailable: If the call does not finish in time
    """
    future = _executor.submit(func, *args)
    try:
        return future.result(timeout=timeout_seconds)
    except FutureTimeoutError:
        future.cancel()
        name = getattr(func, "__name__", repr(func))
        raise UpstreamUnavailable(f"{name} did not answer within {timeout_seconds}s") from None
