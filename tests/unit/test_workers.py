"""
Unit tests for per-connection worker threads.
"""

import logging
import threading

from fileserver.core.workers import ConnectionWorker, WorkerGroup


class FakeConnection:
    """Stands in for Connection; records close() calls."""

    def __init__(self, conn_id: str = "fake0001"):
        self.id = conn_id
        self.closed = False

    def close(self):
        self.closed = True


class TestWorkerGroup:
    """Tests for WorkerGroup class."""

    def test_spawn_runs_handler_on_its_own_thread(self):
        """Test that each connection is handled off the calling thread."""
        seen = []
        done = threading.Event()

        def handler(conn):
            seen.append((conn.id, threading.current_thread().name))
            done.set()

        workers = WorkerGroup(handler)
        worker = workers.spawn(FakeConnection())

        assert done.wait(timeout=2.0)
        assert workers.join(timeout=2.0)
        assert seen == [("fake0001", worker.name)]
        assert worker.name == "Worker-0"
        assert worker.daemon

    def test_workers_run_concurrently(self):
        """Test that a blocked connection does not block the next one."""
        release = threading.Event()
        second_done = threading.Event()

        def handler(conn):
            if conn.id == "slow":
                release.wait(timeout=5.0)
            else:
                second_done.set()

        workers = WorkerGroup(handler)
        workers.spawn(FakeConnection("slow"))
        workers.spawn(FakeConnection("fast"))

        assert second_done.wait(timeout=2.0)
        assert workers.active_workers >= 1

        release.set()
        assert workers.join(timeout=2.0)
        assert workers.active_workers == 0

    def test_join_times_out(self):
        """Test that join() reports workers still running."""
        release = threading.Event()
        workers = WorkerGroup(lambda conn: release.wait(timeout=5.0))
        workers.spawn(FakeConnection())

        assert workers.join(timeout=0.1) is False

        release.set()
        assert workers.join(timeout=2.0) is True

    def test_join_with_no_workers(self):
        """Test that join() returns at once when idle."""
        assert WorkerGroup(lambda conn: None).join(timeout=0.1) is True

    def test_worker_ids_increase(self):
        """Test sequential worker names."""
        workers = WorkerGroup(lambda conn: None)
        names = [workers.spawn(FakeConnection()).name for _ in range(3)]
        workers.join(timeout=2.0)

        assert names == ["Worker-0", "Worker-1", "Worker-2"]


class TestConnectionWorker:
    """Tests for ConnectionWorker class."""

    def test_handler_exception_is_contained(self, caplog):
        """Test that a crashing handler is logged and the conn closed."""
        conn = FakeConnection()
        exited = []

        def handler(conn):
            raise RuntimeError("boom")

        worker = ConnectionWorker(conn, handler, worker_id=7, on_exit=exited.append)

        with caplog.at_level(logging.ERROR, logger="fileserver.core.workers"):
            worker.start()
            worker.join(timeout=2.0)

        assert conn.closed
        assert exited == [worker]
        assert any("boom" in r.getMessage() for r in caplog.records)
