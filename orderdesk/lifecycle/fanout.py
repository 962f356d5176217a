from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from orderdesk.config import get_config

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class Outcome(Generic[T, R]):
    """Result of one call in a fan-out: either `result` or `error` is set."""
    item: T
    result: Optional[R] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def fan_out(call: Callable[[T], R], items: Sequence[T], max_workers: Optional[int] = None) -> List[Outcome[T, R]]:
    """Issue `call` for every item concurrently and wait for all of them.

    Calls are independent: one failing does not stop the others. Outcomes are
    returned in input order; no ordering between the calls themselves is implied.
    """
    if not items:
        return []
    workers = max(1, min(max_workers or get_config().max_parallel_requests, len(items)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [(item, pool.submit(call, item)) for item in items]
        outcomes: List[Outcome[T, R]] = []
        for item, future in futures:
            try:
                outcomes.append(Outcome(item=item, result=future.result()))
            except Exception as e:
                outcomes.append(Outcome(item=item, error=e))
    return outcomes
