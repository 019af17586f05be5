"""
Thread-pool fan-out for independent file operations.

Every task runs to completion; sibling failures never cancel each
other. Once all tasks have settled, any failures are raised together as
one ``FanOutError``.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class FanOutError(RuntimeError):
    """One or more fan-out tasks failed."""

    def __init__(self, label: str, failures: list[tuple[object, BaseException]]) -> None:
        self.label = label
        self.failures = failures
        lines = [f"{label}: {len(failures)} task(s) failed"]
        lines += [f"  - {item}: {exc}" for item, exc in failures]
        super().__init__("\n".join(lines))


def run_parallel(
    label: str,
    items: Iterable[T],
    func: Callable[[T], R],
    max_workers: int | None = None,
) -> list[R]:
    """Call ``func`` on every item concurrently.

    Results are returned in completion order, not input order.

    Raises:
        FanOutError: After all tasks finish, if any of them raised.
    """
    items = list(items)
    if not items:
        return []

    results: list[R] = []
    failures: list[tuple[object, BaseException]] = []

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {pool.submit(func, item): item for item in items}
        for future in as_completed(futures):
            item = futures[future]
            try:
                results.append(future.result())
            except Exception as e:
                logger.error("%s failed for %s: %s", label, item, e)
                failures.append((item, e))

    if failures:
        raise FanOutError(label, failures)

    logger.debug("%s: %d task(s) done", label, len(results))
    return results
