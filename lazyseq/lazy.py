"""
Lazy push sequences and their combinators.

A ``Seq`` is an immutable descriptor around a drive function: calling
``seq.drive(consumer)`` runs the producer, which calls ``consumer`` once
per element, in order, until the consumer returns ``False`` or the
elements run out. Nothing happens until a sequence is driven, and every
drive replays from the beginning.

Sequences built from Python iterables (``values``, ``count``,
``cycle_values``) through the combinators below also carry a ``native``
iterator factory, which lets ``zip_seqs`` and ``for`` loops pull from
them without a worker thread.
"""

import contextlib
import itertools
import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from lazyseq.models import NOT_FOUND, Lookup, Pair
from lazyseq.pull import IteratorPullSource, PullSource, open_pull

logger = logging.getLogger(__name__)

Consumer = Callable[[Any], bool]
Drive = Callable[[Consumer], None]
NativeFactory = Callable[[], Iterator]

_MISSING = object()


def _require_callable(value, name):
    if not callable(value):
        raise TypeError(f"{name} must be callable, got {type(value).__name__}")


def _require_seq(value, name):
    if not isinstance(value, Seq):
        raise TypeError(f"{name} must be a Seq, got {type(value).__name__}")


def _latch(consumer: Consumer) -> Consumer:
    """Wrap ``consumer`` so it is never called again once it returned False."""
    stopped = False
    warned = False

    def accept(value):
        nonlocal stopped, warned
        if stopped:
            if not warned:
                warned = True
                logger.warning(
                    "Producer kept calling its consumer after being told to stop; "
                    "ignoring late values"
                )
            return False
        if not consumer(value):
            stopped = True
            return False
        return True

    return accept


class Seq:
    """
    A restartable, possibly infinite, lazily evaluated sequence.

    Combinator methods return new sequences and never mutate ``self``.
    Terminal methods (``to_list``, ``first``, ``sum`` ...) drive it.
    """

    __slots__ = ("_drive", "native")

    def __init__(self, drive: Drive, native: Optional[NativeFactory] = None):
        _require_callable(drive, "drive")
        self._drive = drive
        self.native = native

    @classmethod
    def of(cls, iterable: Iterable) -> "Seq":
        return values(iterable)

    # --------- protocol ----------
    def drive(self, consumer: Consumer) -> None:
        """Call ``consumer`` per element until it returns False or input ends."""
        _require_callable(consumer, "consumer")
        self._drive(_latch(consumer))

    def __iter__(self) -> Iterator:
        if self.native is not None:
            return self.native()
        return _pull_values(self)

    def _derive(self, drive: Drive, build: Callable[[Iterator], Iterator]) -> "Seq":
        native = self.native
        if native is None:
            return Seq(drive)
        return Seq(drive, lambda: build(native()))

    # --------- combinators (lazy) ----------
    def map(self, fn: Callable[[Any], Any]) -> "Seq":
        _require_callable(fn, "fn")
        upstream = self

        def drive(consumer):
            upstream.drive(lambda x: consumer(fn(x)))

        return self._derive(drive, lambda it: map(fn, it))

    def filter(self, pred: Callable[[Any], bool]) -> "Seq":
        _require_callable(pred, "pred")
        upstream = self

        def drive(consumer):
            upstream.drive(lambda x: consumer(x) if pred(x) else True)

        return self._derive(drive, lambda it: filter(pred, it))

    def take(self, n: int) -> "Seq":
        """First ``n`` elements; upstream is not asked for an (n+1)th."""
        n = int(n)
        if n <= 0:
            return empty()
        upstream = self

        def drive(consumer):
            taken = 0

            def accept(x):
                nonlocal taken
                taken += 1
                return bool(consumer(x)) and taken < n

            upstream.drive(accept)

        return self._derive(drive, lambda it: itertools.islice(it, n))

    def take_while(self, pred: Callable[[Any], bool]) -> "Seq":
        """Leading elements satisfying ``pred``; the first failure is not emitted."""
        _require_callable(pred, "pred")
        upstream = self

        def drive(consumer):
            upstream.drive(lambda x: bool(pred(x)) and bool(consumer(x)))

        return self._derive(drive, lambda it: itertools.takewhile(pred, it))

    def drop(self, n: int) -> "Seq":
        n = int(n)
        if n <= 0:
            return self
        upstream = self

        def drive(consumer):
            skipped = 0

            def accept(x):
                nonlocal skipped
                if skipped < n:
                    skipped += 1
                    return True
                return consumer(x)

            upstream.drive(accept)

        return self._derive(drive, lambda it: itertools.islice(it, n, None))

    def drop_while(self, pred: Callable[[Any], bool]) -> "Seq":
        """
        Skip leading elements satisfying ``pred``.

        Once ``pred`` fails, every later element is emitted, including
        ones that would satisfy ``pred`` again.
        """
        _require_callable(pred, "pred")
        upstream = self

        def drive(consumer):
            dropping = True

            def accept(x):
                nonlocal dropping
                if dropping:
                    if pred(x):
                        return True
                    dropping = False
                return consumer(x)

            upstream.drive(accept)

        return self._derive(drive, lambda it: itertools.dropwhile(pred, it))

    def chain(self, *others: "Seq") -> "Seq":
        return chain(self, *others)

    def cycle(self) -> "Seq":
        return cycle(self)

    def enumerate(self) -> "Seq":
        """``(index, value)`` tuples, counting from zero."""
        upstream = self

        def drive(consumer):
            index = 0

            def accept(x):
                nonlocal index
                item = (index, x)
                index += 1
                return consumer(item)

            upstream.drive(accept)

        return self._derive(drive, enumerate)

    def zip(self, other: "Seq") -> "Seq":
        return zip_seqs(self, other)

    def pair_up(self) -> "Seq":
        """Turn a sequence of 2-tuples into a sequence of ``Pair`` records."""
        return self.map(lambda item: Pair(item[0], item[1]))

    # --------- lookups ----------
    def at(self, index: int) -> Lookup:
        """Element at 0-based ``index``, or ``NOT_FOUND``."""
        if index < 0:
            return NOT_FOUND
        result = NOT_FOUND
        position = 0

        def accept(x):
            nonlocal result, position
            if position == index:
                result = Lookup(x, True)
                return False
            position += 1
            return True

        self.drive(accept)
        return result

    def first(self) -> Lookup:
        result = NOT_FOUND

        def accept(x):
            nonlocal result
            result = Lookup(x, True)
            return False

        self.drive(accept)
        return result

    def find(self, pred: Callable[[Any], bool]) -> Lookup:
        """First element satisfying ``pred``, or ``NOT_FOUND``."""
        return self.filter(pred).first()

    def last(self, default=None):
        """Return the last element, or default if empty"""
        result = default

        def accept(x):
            nonlocal result
            result = x
            return True

        self.drive(accept)
        return result

    # --------- reducing operations (force evaluation) ----------
    def to_list(self) -> List[Any]:
        items = []
        self.drive(lambda x: items.append(x) or True)
        return items

    def for_each(self, fn: Callable[[Any], Any]) -> None:
        """Call ``fn`` on every element."""
        _require_callable(fn, "fn")
        self.drive(lambda x: fn(x) or True)

    def reduce(self, fn: Callable[[Any, Any], Any], initial=_MISSING):
        """Apply a function of two arguments cumulatively to items, from left to right"""
        _require_callable(fn, "fn")
        acc = initial

        def accept(x):
            nonlocal acc
            acc = x if acc is _MISSING else fn(acc, x)
            return True

        self.drive(accept)
        if acc is _MISSING:
            raise TypeError("reduce() of empty sequence with no initial value")
        return acc

    def sum(self, start=0):
        """Return the sum of all elements"""
        return self.reduce(lambda total, x: total + x, start)

    def length(self) -> int:
        """Return the count of elements"""
        return self.reduce(lambda n, _: n + 1, 0)

    def min(self, default=_MISSING):
        """Return the minimum element"""
        return self._extreme(lambda best, x: x < best, default, "min")

    def max(self, default=_MISSING):
        """Return the maximum element"""
        return self._extreme(lambda best, x: x > best, default, "max")

    def _extreme(self, better, default, name):
        best = _MISSING

        def accept(x):
            nonlocal best
            if best is _MISSING or better(best, x):
                best = x
            return True

        self.drive(accept)
        if best is not _MISSING:
            return best
        if default is not _MISSING:
            return default
        raise ValueError(f"{name}() of empty sequence with no default")

    def any(self, pred: Optional[Callable[[Any], bool]] = None) -> bool:
        """Return True if any element is truthy (or satisfies predicate); stops at the first"""
        test = bool if pred is None else pred
        return self.find(lambda x: test(x)).found

    def all(self, pred: Optional[Callable[[Any], bool]] = None) -> bool:
        """Return True if all elements are truthy (or satisfy predicate); stops at the first miss"""
        test = bool if pred is None else pred
        return not self.find(lambda x: not test(x)).found

    def group_by(self, key_fn: Callable[[Any], Any]) -> Dict[Any, List[Any]]:
        """Group elements by the result of key_fn"""
        _require_callable(key_fn, "key_fn")
        groups: Dict[Any, List[Any]] = {}
        self.for_each(lambda x: groups.setdefault(key_fn(x), []).append(x))
        return groups


def _pull_values(seq: Seq) -> Iterator:
    # Abandoning the generator closes it, which stops the source.
    with open_pull(seq) as source:
        while True:
            item = source.next()
            if not item.found:
                return
            yield item.value


# --------- factories ----------
def from_drive(drive: Drive) -> Seq:
    """Sequence backed by an arbitrary push-style drive function."""
    return Seq(drive)


def values(iterable: Iterable) -> Seq:
    """
    Sequence over the elements of ``iterable``.

    Restartable as long as ``iterable`` is (a list, a range); a one-shot
    iterator is consumed by the first drive.
    """
    def drive(consumer):
        for x in iterable:
            if not consumer(x):
                return

    return Seq(drive, lambda: iter(iterable))


def empty() -> Seq:
    return Seq(lambda consumer: None, lambda: iter(()))


def count(start=0, step=1) -> Seq:
    """
    ``start, start+step, start+2*step, ...`` forever.

    Plain Python arithmetic, so integers never overflow.
    """
    def drive(consumer):
        value = start
        while consumer(value):
            value += step

    return Seq(drive, lambda: itertools.count(start, step))


def cycle_values(*items) -> Seq:
    """Repeat ``items`` forever; no items gives an empty sequence."""
    items = tuple(items)
    if not items:
        return empty()

    def drive(consumer):
        while True:
            for x in items:
                if not consumer(x):
                    return

    return Seq(drive, lambda: itertools.cycle(items))


def cycle(seq: Seq) -> Seq:
    """
    Replay ``seq`` forever.

    The first pass is buffered and later passes replay the buffer. An
    empty ``seq`` gives an empty sequence; an infinite one never finishes
    its first pass, so the result behaves exactly like ``seq``.
    """
    _require_seq(seq, "seq")

    def drive(consumer):
        saved = []
        stopped = False

        def first_pass(x):
            nonlocal stopped
            saved.append(x)
            if not consumer(x):
                stopped = True
                return False
            return True

        seq.drive(first_pass)
        if stopped or not saved:
            return
        while True:
            for x in saved:
                if not consumer(x):
                    return

    return seq._derive(drive, itertools.cycle)


def chain(*seqs: Seq) -> Seq:
    """All of the first sequence, then all of the second, and so on."""
    for i, seq in enumerate(seqs):
        _require_seq(seq, f"seqs[{i}]")
    if not seqs:
        return empty()
    if len(seqs) == 1:
        return seqs[0]

    def drive(consumer):
        stopped = False

        def accept(x):
            nonlocal stopped
            if not consumer(x):
                stopped = True
                return False
            return True

        for seq in seqs:
            seq.drive(accept)
            if stopped:
                return

    native = None
    if all(seq.native is not None for seq in seqs):
        native = lambda: itertools.chain.from_iterable(seq.native() for seq in seqs)
    return Seq(drive, native)


flatten = chain


def _zip_pulls(left: PullSource, right: PullSource) -> Iterator:
    while True:
        # Both sides are asked every round, even when the left is done.
        a = left.next()
        b = right.next()
        if not (a.found and b.found):
            return
        yield a.value, b.value


def zip_seqs(first: Seq, second: Seq) -> Seq:
    """
    Positional pairs ``(first_i, second_i)``, ending with the shorter input.

    Each drive opens a fresh pull source per side and stops both before
    returning, on every exit path.
    """
    _require_seq(first, "first")
    _require_seq(second, "second")

    def drive(consumer):
        with contextlib.ExitStack() as stack:
            left = stack.enter_context(open_pull(first))
            right = stack.enter_context(open_pull(second))
            for pair in _zip_pulls(left, right):
                if not consumer(pair):
                    return

    def native():
        with IteratorPullSource(first.native()) as left, \
                IteratorPullSource(second.native()) as right:
            yield from _zip_pulls(left, right)

    if first.native is None or second.native is None:
        return Seq(drive)
    return Seq(drive, native)
