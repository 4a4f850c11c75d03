# core/batch.py
"""
Bulk operations: apply one backend call per selected item, keep going when
an item fails, and report what happened to each item.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional

from django.conf import settings

from .exceptions import OligowatchError

logger = logging.getLogger(__name__)


class BatchFailure:
    """One item that failed: its display label and the error message."""

    def __init__(self, label: str, message: str):
        self.label = label
        self.message = message

    def __repr__(self):
        return f'BatchFailure({self.label!r}, {self.message!r})'

    def __str__(self):
        return f'{self.label}: {self.message}'


class BatchResult:
    """
    Outcome of a bulk operation.

    success_count + failure_count always equals total.
    """

    def __init__(self, total: int, succeeded: List[str], failures: List[BatchFailure]):
        self.total = total
        self.succeeded = succeeded
        self.failures = failures

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures

    def summary(self, noun: str = 'item') -> str:
        plural = noun if self.total == 1 else f'{noun}s'
        return (
            f'{self.success_count} of {self.total} {plural} succeeded, '
            f'{self.failure_count} failed.'
        )


def _run_one(item, action, label):
    try:
        action(item)
    except OligowatchError as e:
        return BatchFailure(label(item), e.message)
    except Exception as e:
        logger.exception(f'Unexpected error in bulk operation for {label(item)}')
        return BatchFailure(label(item), f'Unexpected error: {e}')
    return None


def run_batch(items: Iterable, action: Callable, label: Callable = str,
              max_workers: Optional[int] = None) -> BatchResult:
    """
    Apply action to every item with bounded concurrency.

    Args:
        items: Items to process (ids, records, ...)
        action: Called once per item; raises OligowatchError on failure.
            Any other exception is logged and recorded as a failure too
        label: Turns an item into the name shown in failure reports
        max_workers: Concurrent calls; defaults to settings.BULK_MAX_WORKERS,
            1 runs strictly one after the other

    Returns:
        BatchResult with per-item outcomes in input order
    """
    items = list(items)
    if max_workers is None:
        max_workers = getattr(settings, 'BULK_MAX_WORKERS', 1)
    max_workers = max(1, min(int(max_workers), len(items) or 1))

    if max_workers == 1:
        outcomes = [_run_one(item, action, label) for item in items]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            outcomes = list(executor.map(lambda item: _run_one(item, action, label), items))

    succeeded = []
    failures = []
    for item, failure in zip(items, outcomes):
        if failure is None:
            succeeded.append(label(item))
        else:
            failures.append(failure)

    if failures:
        logger.warning(f'Bulk operation: {len(failures)} of {len(items)} items failed')
    return BatchResult(len(items), succeeded, failures)
