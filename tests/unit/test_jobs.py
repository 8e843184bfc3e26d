"""
Unit tests for core/editor/jobs.py: generation-guarded background jobs.
"""

import threading
from concurrent import futures

import pytest

from core.editor.jobs import GenerationJobRunner
from core.exceptions import StaleJobError


@pytest.fixture
def runner():
    r = GenerationJobRunner(max_workers=2)
    yield r
    r.shutdown()


class TestGenerationJobRunner:
    def test_result_of_current_job(self, runner):
        ticket = runner.submit("doc", lambda x: x * 2, 21)
        assert runner.wait(ticket, timeout=5) == 42
        assert runner.is_current(ticket)

    def test_generations_increase_per_channel(self, runner):
        t1 = runner.submit("a", lambda: 1)
        t2 = runner.submit("a", lambda: 2)
        t3 = runner.submit("b", lambda: 3)
        assert (t1.generation, t2.generation, t3.generation) == (1, 2, 1)
        assert runner.current_generation("a") == 2

    def test_superseded_job_is_stale(self, runner):
        gate = threading.Event()
        old = runner.submit("doc", gate.wait, 5)
        new = runner.submit("doc", lambda: "new")
        gate.set()
        with pytest.raises(StaleJobError):
            runner.wait(old, timeout=5)
        assert runner.wait(new, timeout=5) == "new"

    def test_stale_result_not_delivered(self, runner):
        gate = threading.Event()
        delivered = []
        done = threading.Event()

        old = runner.submit("doc", lambda: gate.wait(5) and "old")
        runner.on_result(old, delivered.append)
        new = runner.submit("doc", lambda: "new")
        runner.on_result(new, lambda value: (delivered.append(value), done.set()))

        gate.set()
        futures.wait([old.future], timeout=5)
        assert done.wait(5)
        assert delivered == ["new"]

    def test_failed_job_not_delivered(self, runner):
        delivered = []

        def boom():
            raise RuntimeError("boom")

        ticket = runner.submit("doc", boom)
        runner.on_result(ticket, delivered.append)
        with pytest.raises(RuntimeError):
            runner.wait(ticket, timeout=5)
        assert delivered == []

    def test_timeout(self, runner):
        gate = threading.Event()
        ticket = runner.submit("doc", gate.wait, 5)
        try:
            with pytest.raises(TimeoutError):
                runner.wait(ticket, timeout=0.05)
        finally:
            gate.set()

    def test_supersede_cancels_queued_job(self):
        single = GenerationJobRunner(max_workers=1)
        try:
            gate = threading.Event()
            delivered = []
            single.submit("busy", gate.wait, 5)
            queued = single.submit("doc", lambda: "old")
            single.on_result(queued, delivered.append)

            assert single.supersede("doc") == queued.generation + 1
            assert queued.future.cancelled()
            gate.set()
            with pytest.raises(StaleJobError):
                single.wait(queued, timeout=5)
            assert delivered == []
        finally:
            single.shutdown()

    def test_supersede_without_job(self, runner):
        assert runner.supersede("fresh") == 1
        ticket = runner.submit("fresh", lambda: "value")
        assert ticket.generation == 2
        assert runner.wait(ticket, timeout=5) == "value"
