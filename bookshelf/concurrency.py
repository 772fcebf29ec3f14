"""
Concurrency Module
===================
Runs storage calls on a background worker thread.
Keeps the TUI responsive while SQLite work is in progress.
"""

from __future__ import annotations

import itertools
import logging
import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor, Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, TypeVar, Generic

logger = logging.getLogger(__name__)


class TaskStatus(Enum):
    """Lifecycle of a dispatched call."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class TaskMessage:
    """Lifecycle notice for one dispatched storage call."""
    task_id: str
    status: TaskStatus
    message: str = ""
    data: Any = None
    error: Optional[Exception] = None
    timestamp: float = field(default_factory=time.time)


T = TypeVar('T')


class TaskQueue(Generic[T]):
    """Thread-safe FIFO carrying dispatcher messages to whoever polls them."""

    def __init__(self, maxsize: int = 0):
        self._queue: queue.Queue[T] = queue.Queue(maxsize=maxsize)
        self._put_lock = threading.Lock()

    def put(self, item: T, block: bool = True, timeout: Optional[float] = None) -> None:
        self._queue.put(item, block=block, timeout=timeout)

    def put_latest(self, item: T) -> None:
        """Put without blocking; when the queue is full the oldest item is dropped."""
        with self._put_lock:
            while True:
                try:
                    self._queue.put_nowait(item)
                    return
                except queue.Full:
                    self.get_nowait()

    def get(self, block: bool = True, timeout: Optional[float] = None) -> Optional[T]:
        """Next item, or None when nothing arrives (non-blocking or timed out)."""
        try:
            return self._queue.get(block=block, timeout=timeout)
        except queue.Empty:
            return None

    def get_nowait(self) -> Optional[T]:
        return self.get(block=False)

    def get_all(self) -> list[T]:
        """Drain everything queued right now."""
        return list(iter(self.get_nowait, None))

    def empty(self) -> bool:
        return self._queue.empty()

    def qsize(self) -> int:
        return self._queue.qsize()


@dataclass
class TaskResult(Generic[T]):
    """Outcome handed to the completion callback."""
    task_id: str
    status: TaskStatus
    result: Optional[T] = None
    error: Optional[Exception] = None
    elapsed_time: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status is TaskStatus.COMPLETED


class StorageDispatcher:
    """
    Executes storage calls on a single worker thread.

    One worker matches the single shared SQLite connection, so calls run in
    submission order. Each call posts PENDING, RUNNING and then COMPLETED or
    FAILED messages to the queue, and the optional callback receives the
    TaskResult on the worker thread. The queue keeps at most message_limit
    messages; once full, the oldest message is dropped for each new one.

    Example:
        dispatcher = StorageDispatcher()
        future = dispatcher.submit("list", repo.list_all,
                                   callback=lambda r: app.call_from_thread(show, r))
        dispatcher.shutdown()
    """

    def __init__(self, name: str = "storage", message_limit: int = 256):
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._message_queue: TaskQueue[TaskMessage] = TaskQueue(maxsize=message_limit)
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._closed = False

    @property
    def message_queue(self) -> TaskQueue[TaskMessage]:
        """Get the message queue for UI updates."""
        return self._message_queue

    @property
    def closed(self) -> bool:
        return self._closed

    def _next_id(self, label: str) -> str:
        with self._lock:
            return f"{label}-{next(self._counter)}"

    def submit(
        self,
        label: str,
        func: Callable[..., T],
        *args,
        callback: Optional[Callable[[TaskResult[T]], None]] = None,
        **kwargs
    ) -> Future:
        """
        Queue a call for the worker thread.

        Args:
            label: Short name used to build the task id
            func: Storage call to run
            *args: Positional arguments for func
            callback: Receives the TaskResult once the call has finished
            **kwargs: Keyword arguments for func

        Returns:
            Future resolving to func's return value

        Raises:
            RuntimeError: If the dispatcher has been shut down
        """
        if self._closed:
            raise RuntimeError("Dispatcher is shut down")

        task_id = self._next_id(label)
        self._message_queue.put_latest(TaskMessage(
            task_id=task_id,
            status=TaskStatus.PENDING,
            message="Task queued"
        ))

        def wrapped():
            start_time = time.time()
            self._message_queue.put_latest(TaskMessage(
                task_id=task_id,
                status=TaskStatus.RUNNING,
                message="Task started"
            ))
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed = time.time() - start_time
                logger.error("Task %s failed: %s", task_id, e, exc_info=True)
                outcome = TaskResult(task_id, TaskStatus.FAILED, error=e, elapsed_time=elapsed)
                self._message_queue.put_latest(TaskMessage(
                    task_id=task_id,
                    status=TaskStatus.FAILED,
                    message=f"Task failed: {str(e)}",
                    error=e,
                    data=outcome
                ))
                self._notify(callback, outcome)
                raise

            elapsed = time.time() - start_time
            outcome = TaskResult(task_id, TaskStatus.COMPLETED, result=result, elapsed_time=elapsed)
            self._message_queue.put_latest(TaskMessage(
                task_id=task_id,
                status=TaskStatus.COMPLETED,
                message="Task completed",
                data=outcome
            ))
            self._notify(callback, outcome)
            return result

        return self._executor.submit(wrapped)

    @staticmethod
    def _notify(callback, outcome: TaskResult) -> None:
        if callback is None:
            return
        try:
            callback(outcome)
        except Exception as e:
            logger.error("Callback for task %s raised: %s", outcome.task_id, e, exc_info=True)

    def run(self, label: str, func: Callable[..., T], *args, **kwargs) -> T:
        """Submit a call and block for its result."""
        return self.submit(label, func, *args, **kwargs).result()

    def get_messages(self) -> list[TaskMessage]:
        """Get all pending messages from background tasks."""
        return self._message_queue.get_all()

    def shutdown(self, wait: bool = True) -> None:
        """
        Stop accepting work; queued calls that have not started are dropped.

        Args:
            wait: If True, wait for the running call to complete
        """
        self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=True)
        logger.info("Storage dispatcher shut down")
