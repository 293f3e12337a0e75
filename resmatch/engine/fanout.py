from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence, TypeVar

from ..errors import PartialBatchError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_all(tasks: Sequence[Callable[[], T]], max_workers: int = 8) -> list[T]:
    """Run independent tasks concurrently and join on all of them.

    Every task runs to completion even when a sibling fails. If any failed,
    raises ``PartialBatchError`` after the join; results of the tasks that
    succeeded are discarded but their effects stay applied.
    """
    if not tasks:
        return []

    results: list[T] = []
    errors: list[BaseException] = []

    if max_workers <= 1 or len(tasks) == 1:
        for task in tasks:
            try:
                results.append(task())
            except Exception as exc:
                errors.append(exc)
    else:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(tasks))) as pool:
            futures = [pool.submit(task) for task in tasks]
            for future in futures:
                exc = future.exception()
                if exc is None:
                    results.append(future.result())
                else:
                    errors.append(exc)

    if errors:
        logger.warning("%d of %d tasks failed", len(errors), len(tasks))
        raise PartialBatchError(len(results), len(errors), errors) from errors[0]
    return results
