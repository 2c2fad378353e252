"""
Pull bridges: step-at-a-time access to push sequences.

A push sequence decides its own pacing: it calls the consumer once per
element until told to stop. Consumers that must alternate between two
sequences (``zip_seqs``) need the opposite, a ``next()`` they call
whenever they want one more value. A ``PullSource`` provides that, backed
either by the sequence's native Python iterator or, for arbitrary drive
functions, by a worker thread handing values over one at a time.
"""

import itertools
import logging
import queue
import threading
from abc import ABC, abstractmethod
from typing import Iterator, Optional

from lazyseq.config import get_settings
from lazyseq.errors import BridgeError
from lazyseq.models import NOT_FOUND, BridgeStrategy, Lookup

logger = logging.getLogger(__name__)

_FINISHED = object()
_worker_ids = itertools.count(1)


class _Failed:
    """Terminal marker carrying the exception a producer raised."""
    __slots__ = ("error",)

    def __init__(self, error: BaseException):
        self.error = error


def _is_terminal(item) -> bool:
    return item is _FINISHED or isinstance(item, _Failed)


class PullSource(ABC):
    """
    Resumable external iteration over a sequence.

    ``next()`` returns ``Lookup(value, True)`` per element and
    ``NOT_FOUND`` once exhausted (and on every call after that).
    ``stop()`` must run on every exit path; it is idempotent and
    releases everything the source holds.
    """

    @abstractmethod
    def next(self) -> Lookup:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...

    def __enter__(self) -> "PullSource":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False


class IteratorPullSource(PullSource):
    """Pull source over a native Python iterator (cooperative suspension)."""

    def __init__(self, iterator: Iterator):
        self._iterator: Optional[Iterator] = iterator

    def next(self) -> Lookup:
        if self._iterator is None:
            return NOT_FOUND
        try:
            value = next(self._iterator)
        except StopIteration:
            self.stop()
            return NOT_FOUND
        return Lookup(value, True)

    def stop(self) -> None:
        iterator, self._iterator = self._iterator, None
        close = getattr(iterator, "close", None)
        if close is not None:
            close()


class ThreadPullSource(PullSource):
    """
    Pull source that drives the sequence on a worker thread.

    The worker and the puller alternate strictly. The worker offers one
    value on the value queue, then blocks on the permit queue until the
    puller either asks for another value (``True``) or stops (``False``).
    Both queues hold at most one item, so every element crosses exactly
    once and nothing is buffered.

    The worker is started on construction and joined before ``stop()``
    returns. A producer that never honours the stop signal hangs
    ``stop()``; that is a bug in the producer.
    """

    def __init__(self, seq, name: Optional[str] = None):
        if name is None:
            name = f"{get_settings().thread_name_prefix}-{next(_worker_ids)}"
        self._seq = seq
        self._values: queue.Queue = queue.Queue(maxsize=1)
        self._permits: queue.Queue = queue.Queue(maxsize=1)
        self._stopped = threading.Event()
        self._awaiting_permit = False
        self._finished = False
        self._worker = threading.Thread(target=self._run, name=name, daemon=True)
        self._worker.start()
        logger.debug(f"Started pull worker {name}")

    def _run(self):
        outcome = _FINISHED
        try:
            self._seq.drive(self._hand_off)
        except BaseException as e:
            outcome = _Failed(e)
        finally:
            self._values.put(outcome)

    def _hand_off(self, value) -> bool:
        # Runs on the worker thread.
        if self._stopped.is_set():
            logger.debug(f"{self._worker.name} discarded a value offered after stop")
            return False
        self._values.put(value)
        return self._permits.get()

    def next(self) -> Lookup:
        if threading.current_thread() is self._worker:
            raise BridgeError(
                f"next() called from inside {self._worker.name}; "
                "a producer cannot pull from its own bridge"
            )
        if self._finished or self._stopped.is_set():
            return NOT_FOUND
        if self._awaiting_permit:
            self._awaiting_permit = False
            self._permits.put(True)
        item = self._values.get()
        if _is_terminal(item):
            self._finish(item)
            return NOT_FOUND
        self._awaiting_permit = True
        return Lookup(item, True)

    def stop(self) -> None:
        if self._stopped.is_set():
            return
        self._stopped.set()
        if self._finished:
            return
        logger.debug(f"Stopping pull worker {self._worker.name}")
        if self._awaiting_permit:
            self._awaiting_permit = False
            self._permits.put(False)
        # The worker may still offer a value it produced before seeing the
        # stop event; refuse each one until it reports completion.
        item = self._values.get()
        while not _is_terminal(item):
            self._permits.put(False)
            item = self._values.get()
        self._finish(item)

    def _finish(self, outcome):
        self._finished = True
        self._worker.join()
        logger.debug(f"Joined pull worker {self._worker.name}")
        if isinstance(outcome, _Failed):
            raise outcome.error

    @property
    def worker(self) -> threading.Thread:
        return self._worker


def open_pull(seq, strategy=None) -> PullSource:
    """
    Open a pull source over ``seq``.

    With ``BridgeStrategy.AUTO`` (the default unless configured otherwise)
    a natively iterable sequence is pulled through its own iterator and
    anything else through a worker thread. ``BridgeStrategy.THREAD``
    always uses a worker thread.
    """
    if strategy is None:
        strategy = get_settings().bridge
    strategy = BridgeStrategy(strategy)

    if strategy is BridgeStrategy.AUTO and seq.native is not None:
        return IteratorPullSource(seq.native())
    return ThreadPullSource(seq)
