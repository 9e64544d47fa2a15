# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Background propagation worker.

Runs propagation requests on a ThreadPoolExecutor so that long numerical
integrations do not block the caller. Requests are keyed (for example
by satellite or scenario id): a new request for a key supersedes the
previous one, whose run is cancelled and whose result is dropped even
if it finishes first. Runs for different keys share nothing and proceed
in parallel; the lock below guards only the worker's bookkeeping.

External dependencies (threading, concurrent.futures) are confined to
this adapter layer.
"""
import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Hashable

from skypass.domain.errors import InvalidOrbitError, PropagationCancelled
from skypass.domain.propagation_result import (
    PropagationRequest,
    PropagationResult,
    run_propagation,
)


_log = logging.getLogger(__name__)

ResultCallback = Callable[[Hashable, PropagationResult], None]


class PropagationWorker:
    """
    Keyed, cancellable propagation runner.

    Args:
        max_workers: Thread pool size.
            Default: min(32, os.cpu_count() + 4), the executor default.
        on_result: Called as on_result(key, result) for every result that
            is still current when it completes. Never called for
            superseded or cancelled runs. Runs on the pool thread without
            the worker lock held, so it may call back into the worker.

    The latest accepted result per key is retained until forget(key).
    """

    def __init__(
        self,
        max_workers: int | None = None,
        on_result: ResultCallback | None = None,
    ):
        self._max_workers = max_workers or min(32, (os.cpu_count() or 1) + 4)
        self._executor = ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="skypass-propagation",
        )
        self._on_result = on_result
        self._lock = threading.RLock()
        self._generation: dict[Hashable, int] = {}
        self._cancel_events: dict[Hashable, threading.Event] = {}
        self._latest: dict[Hashable, PropagationResult] = {}

    def submit(self, key: Hashable, request: PropagationRequest) -> "Future[PropagationResult]":
        """
        Start a run for key, superseding any run already pending for it.

        Returns:
            Future resolving to the result, or failing with
            PropagationCancelled if the run is superseded or cancelled
            before its result is accepted.
        """
        with self._lock:
            generation = self._generation.get(key, 0) + 1
            self._generation[key] = generation
            previous = self._cancel_events.get(key)
            if previous is not None:
                previous.set()
                _log.debug("Superseding propagation for %r (generation %d)", key, generation - 1)
            event = threading.Event()
            self._cancel_events[key] = event
        return self._executor.submit(self._run, key, generation, request, event)

    def _run(
        self,
        key: Hashable,
        generation: int,
        request: PropagationRequest,
        event: threading.Event,
    ) -> PropagationResult:
        if event.is_set():
            raise PropagationCancelled(f"propagation for {key!r} cancelled before start")
        result = run_propagation(request, cancel_event=event)

        with self._lock:
            if event.is_set() or self._generation.get(key) != generation:
                _log.debug("Dropping stale propagation result for %r (generation %d)", key, generation)
                raise PropagationCancelled(f"propagation for {key!r} superseded")
            self._latest[key] = result
            if self._cancel_events.get(key) is event:
                del self._cancel_events[key]
            callback = self._on_result

        # Outside the lock: the callback may hand off to threads that call back in
        if callback is not None:
            callback(key, result)
        return result

    def latest(self, key: Hashable) -> PropagationResult | None:
        """Most recent accepted result for key, or None."""
        with self._lock:
            return self._latest.get(key)

    def cancel(self, key: Hashable) -> bool:
        """Cancel the pending run for key. Returns True if one was pending."""
        with self._lock:
            if key not in self._generation:
                return False
            self._generation[key] += 1
            event = self._cancel_events.pop(key, None)
        if event is None:
            return False
        event.set()
        return True

    def forget(self, key: Hashable) -> bool:
        """
        Cancel any pending run for key and release its stored result.

        Accepted results are otherwise kept until the worker is discarded.
        Returns True if the worker knew the key.
        """
        with self._lock:
            known = key in self._generation
            event = self._cancel_events.pop(key, None)
            self._generation.pop(key, None)
            self._latest.pop(key, None)
        if event is not None:
            event.set()
        return known

    def run_batch(
        self,
        requests: dict[Hashable, PropagationRequest],
    ) -> dict[Hashable, PropagationResult]:
        """
        Propagate independent requests in parallel and wait for all.

        Requests with invalid elements or runs superseded meanwhile are
        skipped with a warning.
        """
        futures = {self.submit(key, request): key for key, request in requests.items()}
        results: dict[Hashable, PropagationResult] = {}
        for future in as_completed(futures):
            key = futures[future]
            try:
                results[key] = future.result()
            except (InvalidOrbitError, PropagationCancelled) as e:
                _log.warning("Skipping %r: %s", key, e)
                continue
        return results

    def shutdown(self, wait: bool = True) -> None:
        """Cancel pending runs and stop the pool."""
        with self._lock:
            events = list(self._cancel_events.values())
            self._cancel_events.clear()
            for key in self._generation:
                self._generation[key] += 1
        for event in events:
            event.set()
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "PropagationWorker":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)
