"""Keyed store of command-line flag tokens."""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Sequence, Tuple, Union


class _Disabled:
    __slots__ = ()

    def __repr__(self) -> str:
        return "DISABLED"

    def __bool__(self) -> bool:
        return False


DISABLED = _Disabled()

Tokens = Tuple[str, ...]
OptionValue = Union[Tokens, _Disabled]


class OptionTable:
    """Mutable mapping of option keys to flag tokens.

    ``set`` always overwrites. Storing ``DISABLED`` keeps the key but removes
    its contribution to built commands. Iteration is key-sorted so that every
    command built from the same table comes out in the same order.

    Not safe to mutate while a capture built from it is being prepared on
    another thread; callers sharing a table must synchronize themselves.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, OptionValue] = {}

    def set(self, key: str, tokens: Union[Sequence[object], _Disabled]) -> None:
        if tokens is DISABLED:
            self._entries[key] = DISABLED
        else:
            self._entries[key] = tuple(str(token) for token in tokens)

    def disable(self, key: str) -> None:
        self._entries[key] = DISABLED

    def disable_all(self) -> None:
        for key in self._entries:
            self._entries[key] = DISABLED

    def get(self, key: str) -> Optional[OptionValue]:
        """Stored value for ``key``: tokens, ``DISABLED`` or None if never set."""
        return self._entries.get(key)

    def tokens(self, key: str) -> Optional[Tokens]:
        """Active tokens for ``key``, or None if unset or disabled."""
        value = self._entries.get(key)
        if value is None or value is DISABLED:
            return None
        return value

    def is_enabled(self, key: str) -> bool:
        return self.tokens(key) is not None

    def enabled_items(self) -> Iterator[Tuple[str, Tokens]]:
        for key in sorted(self._entries):
            value = self._entries[key]
            if value is not DISABLED:
                yield key, value

    def keys(self) -> list[str]:
        return sorted(self._entries)

    def copy(self) -> "OptionTable":
        clone = OptionTable()
        clone._entries = dict(self._entries)
        return clone

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"OptionTable({dict(sorted(self._entries.items()))!r})"


__all__ = ["DISABLED", "OptionTable", "OptionValue", "Tokens"]
