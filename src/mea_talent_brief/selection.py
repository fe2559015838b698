"""Bounded selection of candidate ids chosen during curation."""

from __future__ import annotations

from typing import FrozenSet, Iterator, Set


class SelectionSet:
    """Unordered set of selected item ids, capped at ``MAX_SIZE`` members.

    Adding beyond the cap is a silent no-op; removal is always allowed.
    """

    MIN_SIZE = 7
    MAX_SIZE = 10

    def __init__(self) -> None:
        self._ids: Set[str] = set()

    def toggle(self, item_id: str) -> bool:
        """Flip membership of ``item_id``; return True when the set changed."""
        if item_id in self._ids:
            self._ids.discard(item_id)
            return True
        if len(self._ids) >= self.MAX_SIZE:
            return False
        self._ids.add(item_id)
        return True

    def is_selectable(self, item_id: str) -> bool:
        return item_id in self._ids or len(self._ids) < self.MAX_SIZE

    @property
    def can_synthesize(self) -> bool:
        return self.MIN_SIZE <= len(self._ids) <= self.MAX_SIZE

    @property
    def ids(self) -> FrozenSet[str]:
        return frozenset(self._ids)

    def clear(self) -> None:
        self._ids.clear()

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)
