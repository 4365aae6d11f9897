"""
Input streams that parsers consume.

Any type can be parsed as long as it implements the `Input` protocol. Inputs are immutable cursors: consuming an item returns a new input, the old one stays valid and can be retried from. This is how backtracking works.
"""

from __future__ import annotations
from typing import Any, Protocol, Self, TypeVar, runtime_checkable

from collections.abc import Sequence


_ItemT = TypeVar("_ItemT")
_ItemCovT = TypeVar("_ItemCovT", covariant=True)


@runtime_checkable
class Input(Protocol[_ItemCovT]):
    """
    The contract every input type must satisfy.

    Implementations must be immutable and cheap to duplicate. Every backtracking attempt holds on to an older input value, so an input should be a cursor into a shared buffer rather than a copy of it.

    Only `decompose()` is required:
    ```
    class NodeInput(Input[Node]):
        def decompose(self) -> tuple[Node, NodeInput] | None:
            ...
    ```
    """

    def decompose(self) -> tuple[_ItemCovT, Self] | None:
        """Returns the next item and the input after it, or `None` if the input is exhausted."""
        ...

    def is_empty(self) -> bool:
        """Whether there are no items left."""
        return self.decompose() is None

    def remaining_length(self) -> int | None:
        """The number of items left, if known."""
        return None


class SequenceInput(Input[_ItemT]):
    """
    An input over any sequence of items. (Tokens, DOM nodes, JSON values...)

    Stores the sequence and a position. The sequence is shared between all the inputs derived from this one and is never copied.
    """

    __slots__ = ("src", "pos")

    def __init__(self, src: Sequence[_ItemT], pos: int = 0) -> None:
        """
        `src`: The sequence being parsed. Must not be mutated while parsing.
        `pos`: The index of the next item.
        """
        if not 0 <= pos <= len(src):
            raise ValueError(f"Position {pos} is out of range for a sequence of length {len(src)}.")
        self.src: Sequence[_ItemT] = src
        """The sequence that's being parsed."""
        self.pos: int = pos
        """The index of the next item."""

    def decompose(self) -> tuple[_ItemT, Self] | None:
        if self.pos >= len(self.src):
            return None
        return (self.src[self.pos], self.advance(1))

    def is_empty(self) -> bool:
        return self.pos >= len(self.src)

    def remaining_length(self) -> int:
        return len(self.src) - self.pos

    def advance(self, amount: int) -> Self:
        """Returns a new input moved forward by the specified amount of items."""
        return type(self)(self.src, self.pos + amount)

    def rest(self) -> Sequence[_ItemT]:
        """The remaining items."""
        return self.src[self.pos:]

    def __len__(self) -> int:
        return len(self.src) - self.pos

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        assert isinstance(other, SequenceInput)
        if self.src is other.src:
            return self.pos == other.pos
        if len(self) != len(other):
            return False
        # item by item, so a list and a tuple holding the same items are equal
        return all(a == b for a, b in zip(self.rest(), other.rest()))

    def __hash__(self) -> int:
        # the items may be unhashable (dicts, lists...)
        return hash((type(self), len(self)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rest()!r})"


class StringInput(SequenceInput[str]):
    """
    An input over a string. Each item is a single character.
    """

    __slots__ = ()

    src: str

    def rest(self) -> str:
        return self.src[self.pos:]

    def __hash__(self) -> int:
        return hash((StringInput, self.src[self.pos:]))

    def line_and_column(self) -> tuple[int, int]:
        """The 1-based line and column of the current position."""
        # should still work with CRLF
        line = self.src.count("\n", 0, self.pos) + 1
        column = self.pos - self.src.rfind("\n", 0, self.pos) # works even when it returns -1
        return (line, column)


class BytesInput(SequenceInput[int]):
    """
    An input over bytes. Each item is an `int`, like when indexing `bytes`.
    """

    __slots__ = ()

    src: bytes

    def rest(self) -> bytes:
        return bytes(self.src[self.pos:])

    def __hash__(self) -> int:
        return hash((BytesInput, self.rest()))


def as_input(value: Any) -> Input[Any]:
    """
    Converts a value into an `Input`.

    - `Input` objects are returned as-is.
    - `str` becomes a `StringInput`.
    - `bytes` and `bytearray` become a `BytesInput`.
    - Any other `Sequence` becomes a `SequenceInput`.
    """
    if isinstance(value, Input):
        return value
    elif isinstance(value, str):
        return StringInput(value)
    elif isinstance(value, (bytes, bytearray)):
        return BytesInput(bytes(value))
    elif isinstance(value, Sequence):
        return SequenceInput(value)
    else:
        raise TypeError(f"Can't parse an object of type {type(value).__name__}.")
