"""
=============================================================================
CONNECTION WORKERS
=============================================================================

Every accepted connection gets its own thread.

=============================================================================
WHY A THREAD PER CONNECTION (AND NOT A POOL)?
=============================================================================

    Main thread                 Worker threads
    ───────────                 ──────────────
    accept() ──► conn A ──────► Worker-0: read, respond, close
    accept() ──► conn B ──────► Worker-1: read, respond, close
    accept() ──► conn C ──────► Worker-2: read, respond, close
    accept() ...

Each worker blocks independently on its own read and write, so a slow
client can only ever stall its own thread. There is no cap on the number
of workers and no queue: a pool would mean a connection could wait
behind others before its first byte is read.

What bounds resource use is the per-connection socket deadline (see
connection.py): a silent client is dropped after ``timeout`` seconds.

Workers share nothing mutable except the registry below, which only the
accept thread and finishing workers touch, under a lock.

=============================================================================
"""

import threading
import time
import logging
from typing import Callable, Optional

from .connection import Connection


logger = logging.getLogger(__name__)


class ConnectionWorker(threading.Thread):
    """
    Thread that runs a handler for exactly one connection.

    Exceptions escaping the handler are logged with their traceback and
    the connection is closed; they never reach the accept loop.
    """

    def __init__(
        self,
        conn: Connection,
        handler: Callable[[Connection], None],
        worker_id: int,
        on_exit: Optional[Callable[["ConnectionWorker"], None]] = None,
    ):
        """
        Args:
            conn: The accepted connection.
            handler: Called once with the connection.
            worker_id: Sequence number (thread name, logs).
            on_exit: Called with this worker when it finishes.
        """
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.conn = conn
        self.handler = handler
        self.worker_id = worker_id
        self.on_exit = on_exit

    def run(self):
        start_time = time.time()
        try:
            self.handler(self.conn)
        except Exception as e:
            logger.exception(f"Worker {self.worker_id} [{self.conn.id}] failed: {e}")
            self.conn.close()
        finally:
            elapsed = time.time() - start_time
            logger.debug(f"Worker {self.worker_id} finished in {elapsed:.3f}s")
            if self.on_exit is not None:
                self.on_exit(self)


class WorkerGroup:
    """
    Spawns and tracks one ConnectionWorker per connection.

    Usage:
        workers = WorkerGroup(handler.handle)
        socket_server.start(workers.spawn)   # called per accepted conn
        ...
        workers.join(timeout=5.0)            # on shutdown
    """

    def __init__(self, handler: Callable[[Connection], None]):
        self.handler = handler

        self._workers: set = set()
        self._lock = threading.Lock()  # Protects _workers and _next_worker_id
        self._next_worker_id = 0
        self._idle = threading.Condition(self._lock)

    def spawn(self, conn: Connection) -> ConnectionWorker:
        """Start a worker thread for ``conn`` and return immediately."""
        with self._lock:
            worker = ConnectionWorker(
                conn=conn,
                handler=self.handler,
                worker_id=self._next_worker_id,
                on_exit=self._remove,
            )
            self._next_worker_id += 1
            self._workers.add(worker)

        try:
            worker.start()
        except RuntimeError as e:
            # Out of threads: drop this connection, keep accepting
            logger.error(f"[{conn.id}] Could not start worker: {e}")
            self._remove(worker)
            conn.close()
        return worker

    def _remove(self, worker: ConnectionWorker) -> None:
        with self._lock:
            self._workers.discard(worker)
            if not self._workers:
                self._idle.notify_all()

    @property
    def active_workers(self) -> int:
        """Number of connections currently being handled."""
        with self._lock:
            return len(self._workers)

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until every running worker has finished.

        Returns:
            True if all workers finished, False on timeout.
        """
        with self._lock:
            return self._idle.wait_for(lambda: not self._workers, timeout=timeout)
