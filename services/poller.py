"""
Completion polling for the translated document.

The translation service writes the destination blob when the batch finishes,
so readiness is observed by fetching that blob until it exists. The retry
budget counts retries, not attempts: a budget of N allows N + 1 fetches and
N sleeps, and a budget of 0 still performs exactly one fetch.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from services.errors import DownloadError, ObjectNotFound, PollingCancelled, PollingTimeout, StorageError

logger = logging.getLogger("translator.poller")


@dataclass(frozen=True)
class FixedIntervalRetry:
    max_retries: int
    interval_sec: float = 1.0
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False, compare=False)

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")

    def delay(self, retry_number: int) -> float:
        return self.interval_sec


@dataclass(frozen=True)
class ExponentialBackoffRetry:
    max_retries: int
    base_sec: float = 1.0
    factor: float = 2.0
    max_delay_sec: float = 30.0
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False, compare=False)

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")

    def delay(self, retry_number: int) -> float:
        return min(self.base_sec * (self.factor ** (retry_number - 1)), self.max_delay_sec)


@dataclass(frozen=True)
class PollOutcome:
    attempts: int
    sleeps: int


def poll_until_ready(
    store,
    blob_name: str,
    local_path: str,
    policy,
    cancel_event: Optional[threading.Event] = None,
) -> PollOutcome:
    attempts = 0
    sleeps = 0

    while True:
        attempts += 1
        try:
            store.download_to_file(blob_name, local_path)
        except ObjectNotFound:
            logger.debug("translated_document_not_ready blob=%s attempt=%s", blob_name, attempts)
        except StorageError as exc:
            raise DownloadError(f"error downloading translated document {blob_name}: {exc}") from exc
        else:
            logger.info("translated_document_ready blob=%s attempts=%s", blob_name, attempts)
            return PollOutcome(attempts=attempts, sleeps=sleeps)

        if sleeps >= policy.max_retries:
            raise PollingTimeout(blob_name, attempts)
        _raise_if_cancelled(cancel_event, blob_name, attempts)

        sleeps += 1
        delay = policy.delay(sleeps)
        logger.info("File not yet ready, wait for %ss", delay)
        policy.sleep(delay)
        _raise_if_cancelled(cancel_event, blob_name, attempts)


def _raise_if_cancelled(cancel_event: Optional[threading.Event], blob_name: str, attempts: int) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise PollingCancelled(blob_name, attempts)
