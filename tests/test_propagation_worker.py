# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for the keyed background propagation worker."""
import threading
from datetime import datetime, timezone

import pytest

from skypass.adapters.propagation_worker import PropagationWorker
from skypass.domain.errors import PropagationCancelled
from skypass.domain.numerical_propagation import PerturbationConfig
from skypass.domain.orbital_elements import OrbitalElements
from skypass.domain.propagation_result import (
    AnalyticPropagation,
    NumericalPropagation,
    PropagationRequest,
)

_EPOCH = datetime(2026, 3, 20, 12, 0, 0, tzinfo=timezone.utc)
_LEO = OrbitalElements(6878.137, 0.001, 97.4, 0.0, 0.0, 0.0)


def _slow_request() -> PropagationRequest:
    """Hits the sample cap: tens of thousands of RK4 steps."""
    return PropagationRequest(
        _LEO, _EPOCH, mode="numerical-full", num_orbits=200.0, step_s=1.0,
    )


def _quick_request(**kwargs) -> PropagationRequest:
    kwargs.setdefault("num_orbits", 0.2)
    kwargs.setdefault("perturbations", PerturbationConfig(j2=True))
    return PropagationRequest(_LEO, _EPOCH, **kwargs)


class TestPropagationWorker:

    def test_default_max_workers(self):
        with PropagationWorker() as worker:
            assert worker._max_workers > 1

    def test_configurable_max_workers(self):
        with PropagationWorker(max_workers=3) as worker:
            assert worker._max_workers == 3

    def test_submit_returns_result(self):
        with PropagationWorker(max_workers=2) as worker:
            result = worker.submit("sat-1", _quick_request()).result(timeout=60)
            assert isinstance(result, NumericalPropagation)
            assert worker.latest("sat-1") is result

    def test_keplerian_request(self):
        with PropagationWorker(max_workers=2) as worker:
            result = worker.submit("sat-1", _quick_request(mode="keplerian")).result(timeout=60)
            assert isinstance(result, AnalyticPropagation)

    def test_latest_unknown_key(self):
        with PropagationWorker(max_workers=1) as worker:
            assert worker.latest("nope") is None

    def test_new_request_supersedes_pending_run(self):
        delivered = []
        with PropagationWorker(max_workers=2, on_result=lambda k, r: delivered.append((k, r))) as worker:
            stale = worker.submit("sat-1", _slow_request())
            fresh = worker.submit("sat-1", _quick_request())

            result = fresh.result(timeout=60)
            with pytest.raises(PropagationCancelled):
                stale.result(timeout=60)

            assert worker.latest("sat-1") is result
            assert delivered == [("sat-1", result)]

    def test_keys_are_independent(self):
        with PropagationWorker(max_workers=2) as worker:
            a = worker.submit("a", _quick_request())
            b = worker.submit("b", _quick_request(step_s=60.0))
            assert a.result(timeout=60).effective_step_s == 30.0
            assert b.result(timeout=60).effective_step_s == 60.0

    def test_cancel_pending_run(self):
        with PropagationWorker(max_workers=1) as worker:
            future = worker.submit("sat-1", _slow_request())
            assert worker.cancel("sat-1") is True
            with pytest.raises(PropagationCancelled):
                future.result(timeout=60)
            assert worker.latest("sat-1") is None

    def test_cancel_without_run(self):
        with PropagationWorker(max_workers=1) as worker:
            assert worker.cancel("sat-1") is False

    def test_cancel_after_completion(self):
        with PropagationWorker(max_workers=1) as worker:
            worker.submit("sat-1", _quick_request()).result(timeout=60)
            assert worker.cancel("sat-1") is False
            assert worker.latest("sat-1") is not None

    def test_callback_runs_once_per_accepted_result(self):
        calls = []
        done = threading.Event()

        def on_result(key, result):
            calls.append(key)
            done.set()

        with PropagationWorker(max_workers=1, on_result=on_result) as worker:
            worker.submit("sat-1", _quick_request()).result(timeout=60)
            assert done.wait(timeout=5)
        assert calls == ["sat-1"]

    def test_callback_can_wait_on_threads_using_the_worker(self):
        """A callback handing off to another thread must not block that thread's worker calls."""
        handoff = {}

        def on_result(key, result):
            def consumer():
                handoff["latest"] = worker.latest("other")
                handoff["cancelled"] = worker.cancel("other")

            t = threading.Thread(target=consumer)
            t.start()
            t.join(timeout=5)
            handoff["finished"] = not t.is_alive()

        worker = PropagationWorker(max_workers=1, on_result=on_result)
        with worker:
            worker.submit("sat-1", _quick_request()).result(timeout=60)
        assert handoff["finished"] is True
        assert handoff["latest"] is None
        assert handoff["cancelled"] is False

    def test_cancel_unknown_key_leaves_no_state(self):
        with PropagationWorker(max_workers=1) as worker:
            assert worker.cancel("ghost") is False
            assert "ghost" not in worker._generation


class TestForget:

    def test_releases_stored_result(self):
        with PropagationWorker(max_workers=1) as worker:
            worker.submit("sat-1", _quick_request()).result(timeout=60)
            assert worker.forget("sat-1") is True
            assert worker.latest("sat-1") is None
            assert "sat-1" not in worker._generation

    def test_unknown_key(self):
        with PropagationWorker(max_workers=1) as worker:
            assert worker.forget("ghost") is False

    def test_cancels_pending_run(self):
        with PropagationWorker(max_workers=1) as worker:
            future = worker.submit("sat-1", _slow_request())
            assert worker.forget("sat-1") is True
            with pytest.raises(PropagationCancelled):
                future.result(timeout=60)
            assert worker.latest("sat-1") is None

    def test_key_reusable_after_forget(self):
        with PropagationWorker(max_workers=1) as worker:
            worker.submit("sat-1", _quick_request()).result(timeout=60)
            worker.forget("sat-1")
            result = worker.submit("sat-1", _quick_request()).result(timeout=60)
            assert worker.latest("sat-1") is result


class TestRunBatch:

    def test_batch_results(self):
        requests = {
            "leo": _quick_request(),
            "analytic": _quick_request(mode="keplerian"),
        }
        with PropagationWorker(max_workers=2) as worker:
            results = worker.run_batch(requests)
        assert set(results) == {"leo", "analytic"}
        assert isinstance(results["analytic"], AnalyticPropagation)

    def test_invalid_orbit_skipped(self, caplog):
        hyperbolic = OrbitalElements(-20000.0, 1.5, 30.0, 0.0, 0.0, 0.0)
        requests = {
            "good": _quick_request(),
            "escape": PropagationRequest(hyperbolic, _EPOCH),
        }
        with PropagationWorker(max_workers=2) as worker:
            results = worker.run_batch(requests)
        assert set(results) == {"good"}
        assert "escape" in caplog.text

    def test_empty_batch(self):
        with PropagationWorker(max_workers=1) as worker:
            assert worker.run_batch({}) == {}
