"""Run independent calls concurrently within one request."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Sequence

from .config import MAX_FANOUT_WORKERS

Call = Callable[[], Any]


def gather(calls: Sequence[Call]) -> List[Any]:
    """Run ``calls`` in parallel and return their results in order.

    The first exception raised by any call propagates once all calls have
    finished; there is no compensation for the calls that succeeded.
    """
    if not calls:
        return []
    if len(calls) == 1:
        return [calls[0]()]
    workers = min(MAX_FANOUT_WORKERS, len(calls))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fanout") as executor:
        futures = [executor.submit(call) for call in calls]
        return [future.result() for future in futures]
