"""Implements a binary min-heap whose elements can be looked up and updated by their grid coordinates."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Generic, Protocol, TypeVar


class Heapable(Protocol):
    """Structural type of the elements a MinHeapMap can hold.

    Elements expose their (x, y) grid position, which must be unique within one heap, and support '<'.
    """

    x: int
    y: int

    def __lt__(self, other: object, /) -> bool: ...


T = TypeVar("T", bound=Heapable)


def lookup_key(value: Heapable) -> tuple[int, int]:
    """Returns the (x, y) key a heap element is registered under."""
    return value.x, value.y


class HeapError(Exception):
    """Base class of all errors raised by MinHeapMap."""


class HeapEmptyError(HeapError, IndexError):
    """Raised when an element is popped or peeked from an empty heap."""


class HeapLookupError(HeapError, KeyError):
    """Raised when no element is registered under the requested coordinates."""


class HeapKeyError(HeapError, KeyError):
    """Raised when an element is inserted under coordinates that are already taken."""


class MinHeapMap(Generic[T]):
    """Priority queue that keeps the smallest element on top and an index of every element by its coordinates.

    The backing list '_data' satisfies the min-heap property (no child is smaller than its parent) and '_lookup' maps the
    key of every element to its current position in '_data'. Both invariants hold after every public operation, which
    is what allows 'lookup_and_mutate()' to find and re-sift a single element in O(log n) instead of rebuilding the heap.
    """

    # Binary heap stored level by level, the children of index i are at 2i + 1 and 2i + 2.
    _data: list[T]
    # Maps the (x, y) key of every element to its index in '_data'.
    _lookup: dict[tuple[int, int], int]

    def __init__(self, values: Iterable[T] = ()) -> None:
        """Creates a heap and inserts all given values one by one.

        Args:
            values: Initial elements, their keys must be unique.
        """
        self._data = []
        self._lookup = {}
        for value in values:
            self.insert(value)

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._lookup

    def __iter__(self) -> Iterator[tuple[int, int]]:
        """Iterates over the keys of all elements in heap array order (not sorted)."""
        return (lookup_key(value) for value in self._data)

    def __repr__(self) -> str:
        return f"MinHeapMap({self._data!r})"

    def insert(self, value: T) -> None:
        """Adds an element and moves it up until the heap property holds.

        Raises:
            HeapKeyError: If another element is already registered under the same coordinates.
        """
        key = lookup_key(value)
        if key in self._lookup:
            raise HeapKeyError(f"an element with key {key} is already in the heap")
        self._data.append(value)
        self._lookup[key] = len(self._data) - 1
        self._sift_up(len(self._data) - 1)

    def pop(self) -> T:
        """Removes and returns the smallest element.

        Raises:
            HeapEmptyError: If the heap holds no elements.
        """
        if not self._data:
            raise HeapEmptyError("cannot pop from an empty heap")

        last = self._data.pop()
        if not self._data:
            del self._lookup[lookup_key(last)]
            return last

        out = self._data[0]
        del self._lookup[lookup_key(out)]
        self._data[0] = last
        self._lookup[lookup_key(last)] = 0
        self._sift_down(0)
        return out

    def peek(self) -> T:
        """Returns the smallest element without removing it.

        Raises:
            HeapEmptyError: If the heap holds no elements.
        """
        if not self._data:
            raise HeapEmptyError("cannot peek into an empty heap")
        return self._data[0]

    def lookup(self, key: tuple[int, int]) -> T | None:
        """Returns the element registered under the given coordinates, or None. Does not change the heap order."""
        index = self._lookup.get(key)
        if index is None:
            return None
        return self._data[index]

    def lookup_and_mutate(self, key: tuple[int, int], mutate: Callable[[T], T | None]) -> None:
        """Applies a mutation to a single element and restores the heap property afterwards.

        The element is moved up or down, whichever direction the mutation requires.

        Args:
            key: The (x, y) coordinates of the element.
            mutate: Called with the element. It either modifies the element in place and returns None, or returns a
                replacement element. A replacement must keep the same coordinates.

        Raises:
            HeapLookupError: If no element is registered under the given coordinates.
        """
        index = self._lookup.get(key)
        if index is None:
            raise HeapLookupError(f"no element with key {key} in the heap")

        replacement = mutate(self._data[index])
        if replacement is not None:
            if lookup_key(replacement) != key:
                raise HeapKeyError(f"replacement for key {key} changed its key to {lookup_key(replacement)}")
            self._data[index] = replacement

        index = self._sift_up(index)
        self._sift_down(index)

    def is_valid(self) -> bool:
        """Checks the min-heap property and the consistency of the coordinate lookup table."""
        if len(self._lookup) != len(self._data):
            return False
        for index, value in enumerate(self._data):
            if self._lookup.get(lookup_key(value)) != index:
                return False
            for child in (2 * index + 1, 2 * index + 2):
                if child < len(self._data) and self._data[child] < value:
                    return False
        return True

    def _swap(self, one: int, other: int) -> None:
        """Swaps two elements and updates both lookup entries."""
        self._data[one], self._data[other] = self._data[other], self._data[one]
        self._lookup[lookup_key(self._data[one])] = one
        self._lookup[lookup_key(self._data[other])] = other

    def _sift_up(self, index: int) -> int:
        """Moves an element towards the root while it is smaller than its parent. Returns its final index."""
        while index > 0:
            parent = (index - 1) // 2
            if not self._data[index] < self._data[parent]:
                break
            self._swap(index, parent)
            index = parent
        return index

    def _sift_down(self, index: int) -> int:
        """Moves an element towards the leaves while a child is smaller. Returns its final index."""
        length = len(self._data)
        while True:
            smallest = index
            for child in (2 * index + 1, 2 * index + 2):
                if child < length and self._data[child] < self._data[smallest]:
                    smallest = child
            if smallest == index:
                return index
            self._swap(index, smallest)
            index = smallest
