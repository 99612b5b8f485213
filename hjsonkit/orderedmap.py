"""
An insertion-ordered string-keyed map with positional access.
"""

from __future__ import annotations

from typing import Any, Generic, Iterator, MutableMapping, TypeVar

T = TypeVar("T")


class OrderedMap(MutableMapping[str, T], Generic[T]):
    """
    A mapping that remembers the order of its keys and can be addressed
    both by key and by position.

    The key sequence and the underlying dict are only changed together,
    so every key appears exactly once in each.
    """

    __slots__ = ("_keys", "_map")

    def __init__(self, *args: Any, **kwargs: T) -> None:
        self._keys: list[str] = []
        self._map: dict[str, T] = {}
        self.update(*args, **kwargs)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {v!r}" for k, v in self.items())
        return f"{self.__class__.__name__}({{{items}}})"

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._map

    def __getitem__(self, key: str) -> T:
        return self._map[key]

    def __setitem__(self, key: str, value: T) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        if key not in self._map:
            raise KeyError(key)
        self.delete_key(key)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OrderedMap):
            return self._keys == other._keys and self._map == other._map
        if isinstance(other, dict):
            return self._map == other
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        eq = self.__eq__(other)
        return eq if eq is NotImplemented else not eq

    def _index_of(self, key: str) -> int:
        return self._keys.index(key)

    def insert(self, index: int, key: str, value: T) -> tuple[T | None, bool]:
        """
        Inserts `key` at `index`, shifting the following keys.

        An existing key keeps its position and only its value is replaced.

        :returns: The previous value and whether the key already existed.
        """
        if key in self._map:
            old = self._map[key]
            self._map[key] = value
            return old, True
        if not 0 <= index <= len(self._keys):
            raise IndexError(f"index {index} out of range for {len(self._keys)} keys")
        self._keys.insert(index, key)
        self._map[key] = value
        return None, False

    def set(self, key: str, value: T) -> tuple[T | None, bool]:
        """Same as `insert` at the end of the map."""
        return self.insert(len(self._keys), key, value)

    def at_index(self, index: int) -> T:
        return self._map[self.key_at(index)]

    def key_at(self, index: int) -> str:
        if not 0 <= index < len(self._keys):
            raise IndexError(f"index {index} out of range for {len(self._keys)} keys")
        return self._keys[index]

    def at_key(self, key: str) -> tuple[T | None, bool]:
        if key in self._map:
            return self._map[key], True
        return None, False

    def index_of(self, key: str) -> int:
        """Position of `key`, -1 if absent."""
        return self._index_of(key) if key in self._map else -1

    def delete_index(self, index: int) -> tuple[str, T]:
        key = self.key_at(index)
        del self._keys[index]
        return key, self._map.pop(key)

    def delete_key(self, key: str) -> tuple[T | None, bool]:
        if key not in self._map:
            return None, False
        del self._keys[self._index_of(key)]
        return self._map.pop(key), True

    def copy(self) -> OrderedMap[T]:
        return self.__class__(self)

    def clear(self) -> None:
        self._keys.clear()
        self._map.clear()
