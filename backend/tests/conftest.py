"""Shared fixtures: an in-memory NumberStore and allocator helpers."""

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field

import pytest

from fence_admin.numbering import AllocateOnConflict, NumberFormat, SequenceAllocator, SequenceFamily


class NumberTaken(Exception):
    """In-memory stand-in for a unique constraint violation."""


@dataclass
class _OpenAttempt:
    family: SequenceFamily
    inserted: list[str] = field(default_factory=list)
    locked: bool = False


class InMemoryNumberStore:
    """NumberStore keeping every issued number per family in memory.

    ``serialize=True`` holds a per-family lock for the duration of an
    attempt, mirroring the advisory lock of the SQL store. ``interleave``
    yields to the event loop between reading numbers and inserting, which
    lets concurrent tasks race on the same value.
    """

    def __init__(self, *, serialize: bool = True, interleave: bool = False):
        self.serialize = serialize
        self.interleave = interleave
        self.numbers: dict[str, list[str]] = defaultdict(list)
        self.deleted: set[str] = set()
        self.reads = 0
        self.commits = 0
        self.rollbacks = 0
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._open: dict[asyncio.Task, _OpenAttempt] = {}

    def seed(self, family: SequenceFamily, *numbers: str) -> None:
        self.numbers[family.key].extend(numbers)

    def delete(self, number: str) -> None:
        # Soft delete: the number stays issued
        self.deleted.add(number)

    def active(self, family: SequenceFamily) -> list[str]:
        return [n for n in self.numbers[family.key] if n not in self.deleted]

    async def existing_numbers(self, family: SequenceFamily) -> list[str]:
        self.reads += 1
        numbers = list(self.numbers[family.key])
        if self.interleave:
            await asyncio.sleep(0)
        return numbers

    async def begin_attempt(self, family: SequenceFamily) -> None:
        attempt = _OpenAttempt(family)
        if self.serialize:
            await self._locks[family.key].acquire()
            attempt.locked = True
        self._open[self._task()] = attempt

    async def insert(self, number: str) -> None:
        attempt = self._open[self._task()]
        issued = self.numbers[attempt.family.key]
        if number in issued:
            raise NumberTaken(number)
        issued.append(number)
        attempt.inserted.append(number)

    async def commit_attempt(self) -> None:
        self.commits += 1
        self._close()

    async def rollback_attempt(self) -> None:
        self.rollbacks += 1
        attempt = self._open.get(self._task())
        if attempt is not None:
            issued = self.numbers[attempt.family.key]
            for number in attempt.inserted:
                issued.remove(number)
        self._close()

    def is_conflict(self, family: SequenceFamily, exc: BaseException) -> bool:
        return isinstance(exc, NumberTaken)

    def _close(self) -> None:
        attempt = self._open.pop(self._task(), None)
        if attempt is not None and attempt.locked:
            self._locks[attempt.family.key].release()

    @staticmethod
    def _task() -> asyncio.Task:
        task = asyncio.current_task()
        assert task is not None
        return task


async def insert_with(attempts: AllocateOnConflict, store: InMemoryNumberStore) -> str:
    """Run an allocation loop that inserts the allocated number into ``store``."""
    async for attempt in attempts:
        async with attempt:
            await store.insert(attempt.value)
    return attempts.value


@pytest.fixture
def store() -> InMemoryNumberStore:
    return InMemoryNumberStore()


@pytest.fixture
def allocator(store: InMemoryNumberStore) -> SequenceAllocator:
    return SequenceAllocator(store, formats=NumberFormat(prefix="PVC-", min_width=3), max_retries=5)
