"""Ownership of claimed transactions.

Every transaction assigned to a repo (by upstream passes or by this engine)
is recorded here. Claims only ever accumulate.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class ClaimConflict(ValueError):
    """Raised when a transaction would be assigned to a second repo."""


class ClaimRegistry:
    """Accumulate-only set of claimed transaction indices."""

    def __init__(self, claimed: Iterable[int] = ()) -> None:
        self._claimed: set[int] = set(claimed)

    def __contains__(self, index: object) -> bool:
        if not isinstance(index, int):
            return False
        return index in self._claimed

    def __len__(self) -> int:
        return len(self._claimed)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._claimed))

    def claim(self, indices: Iterable[int]) -> None:
        """Claim a group of transactions.

        Raises:
            ClaimConflict: If any of them is already claimed. Nothing is
                claimed in that case.
        """
        group = set(indices)
        overlap = group & self._claimed
        if overlap:
            raise ClaimConflict(f"Transactions already claimed: {sorted(overlap)}")
        self._claimed |= group

    def merge(self, other: ClaimRegistry) -> None:
        """Fold a round-local registry into this one."""
        self.claim(other._claimed)

    def snapshot(self) -> frozenset[int]:
        return frozenset(self._claimed)
