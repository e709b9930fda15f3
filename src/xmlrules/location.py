"""Canonical path of the tokenizer's current position."""

from __future__ import annotations


class Location:
    """String-backed stack mirroring element entry and exit.

    The path is kept as a list of string pieces plus a stack of lengths.
    A push remembers the current length and appends the new segment; a
    pop truncates back to the remembered length. The joined string is
    cached until the next push/pop, which makes back-to-back lookups for
    the start-tag and text events of the same element free.
    """

    __slots__ = ("_cache", "_lengths", "_pieces")

    def __init__(self) -> None:
        self._pieces: list[str] = []
        self._lengths: list[int] = []
        self._cache: str | None = "/"

    def __repr__(self) -> str:
        return f"Location({self.path!r})"

    def __str__(self) -> str:
        return self.path

    def __len__(self) -> int:
        return len(self._lengths)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Location):
            return self.path == other.path
        if isinstance(other, str):
            return self.path == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]  # Mutable

    @property
    def path(self) -> str:
        cache = self._cache
        if cache is None:
            cache = "".join(self._pieces) if self._pieces else "/"
            self._cache = cache
        return cache

    def clear(self) -> None:
        self._pieces.clear()
        self._lengths.clear()
        self._cache = "/"

    def push(self, local_name: str, namespace_uri: str | None = None) -> None:
        self._cache = None
        pieces = self._pieces
        self._lengths.append(len(pieces))
        pieces.append("/")
        if namespace_uri:
            pieces.append("[")
            pieces.append(namespace_uri)
            pieces.append("]")
        pieces.append(local_name)

    def pop(self) -> None:
        if not self._lengths:
            raise IndexError("pop from empty Location")
        self._cache = None
        del self._pieces[self._lengths.pop() :]
