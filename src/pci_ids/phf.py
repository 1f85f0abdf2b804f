"""Minimal perfect hash map over a fixed set of integer keys.

Uses the CHD ("compress, hash, displace") construction also used by
rust-phf: each key hashes to (g, f1, f2); keys are grouped into buckets by
g, and every bucket gets a displacement pair (d1, d2) chosen so that

    slot = (f2 + f1 * d1 + d2) % len(table)

is distinct for every key. The table has exactly one slot per key, so a
lookup is one hash, one displacement read and one key comparison.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Generic, NamedTuple, TypeVar

from pci_ids.errors import GenerationError

logger = logging.getLogger(__name__)

V = TypeVar("V")

# Average number of keys per bucket
LAMBDA = 5

# Seeds tried before giving up (each failure is a full hash collision)
MAX_SEEDS = 64

_MASK64 = (1 << 64) - 1
_MASK21 = (1 << 21) - 1


def _mix64(value: int) -> int:
    """SplitMix64 finalizer."""
    value = (value + 0x9E3779B97F4A7C15) & _MASK64
    value = ((value ^ (value >> 30)) * 0xBF58476D1CE4E5B9) & _MASK64
    value = ((value ^ (value >> 27)) * 0x94D049BB133111EB) & _MASK64
    return value ^ (value >> 31)


class Hashes(NamedTuple):
    """The three hash components of a key."""

    g: int
    f1: int
    f2: int


def hash_key(key: int, seed: int) -> Hashes:
    """Hash an integer key with the given seed."""
    h = _mix64((key ^ _mix64(seed)) & _MASK64)
    return Hashes(h & _MASK21, (h >> 21) & _MASK21, h >> 42)


def _displace(hashes: Hashes, d1: int, d2: int, table_len: int) -> int:
    return (hashes.f2 + hashes.f1 * d1 + d2) % table_len


def _try_seed(
    hashes: list[Hashes],
) -> tuple[list[tuple[int, int]], list[int]] | None:
    """Search displacements for one seed.

    Returns:
        (displacements per bucket, key index per slot), or None if two keys
        collide on every displacement.
    """
    table_len = len(hashes)
    buckets_len = (table_len + LAMBDA - 1) // LAMBDA
    buckets: list[list[int]] = [[] for _ in range(buckets_len)]
    for index, h in enumerate(hashes):
        buckets[h.g % buckets_len].append(index)

    # Keys sharing a bucket and (f1, f2) modulo the table length can never be separated
    for members in buckets:
        pairs = {(hashes[i].f1 % table_len, hashes[i].f2 % table_len) for i in members}
        if len(pairs) != len(members):
            return None

    # Largest buckets first, while the table is still empty
    order = sorted(range(buckets_len), key=lambda b: len(buckets[b]), reverse=True)

    slots: list[int | None] = [None] * table_len
    marks = [0] * table_len
    generation = 0
    displacements = [(0, 0)] * buckets_len

    for bucket in order:
        members = buckets[bucket]
        if not members:
            break

        placed = False
        for d1 in range(table_len):
            for d2 in range(table_len):
                generation += 1
                taken: list[int] = []
                for index in members:
                    slot = _displace(hashes[index], d1, d2, table_len)
                    if slots[slot] is not None or marks[slot] == generation:
                        break
                    marks[slot] = generation
                    taken.append(slot)
                else:
                    for index, slot in zip(members, taken):
                        slots[slot] = index
                    displacements[bucket] = (d1, d2)
                    placed = True
                    break
            if placed:
                break

        if not placed:
            return None

    return displacements, [slot for slot in slots if slot is not None]


class PerfectHashMap(Generic[V]):
    """Immutable int -> value map with collision-free O(1) lookup.

    Build with PerfectHashMap.build(); there is no mutation API. Iteration
    follows slot order, which is deterministic for a given key set but not
    numeric.
    """

    __slots__ = ("_seed", "_displacements", "_entries")

    def __init__(
        self,
        seed: int,
        displacements: Iterable[tuple[int, int]],
        entries: Iterable[tuple[int, V]],
    ) -> None:
        """Wrap an already computed table.

        Args:
            seed: Seed the keys were hashed with.
            displacements: (d1, d2) per bucket.
            entries: (key, value) per slot, in slot order.
        """
        self._seed = seed
        self._displacements = tuple((int(d1), int(d2)) for d1, d2 in displacements)
        self._entries = tuple(entries)

    @classmethod
    def build(cls, items: Iterable[tuple[int, V]]) -> PerfectHashMap[V]:
        """Build a table for a fixed set of (key, value) pairs.

        Args:
            items: Pairs with unique integer keys.

        Returns:
            A new PerfectHashMap.

        Raises:
            GenerationError: If a key repeats, or no seed yields a table.
        """
        pairs = list(items)
        seen: set[int] = set()
        for key, _ in pairs:
            if key in seen:
                raise GenerationError(key, f"duplicate key {key:#x}")
            seen.add(key)

        if not pairs:
            return cls(0, (), ())

        for seed in range(MAX_SEEDS):
            hashes = [hash_key(key, seed) for key, _ in pairs]
            result = _try_seed(hashes)
            if result is None:
                logger.debug("Seed %d collides for %d keys, retrying", seed, len(pairs))
                continue
            displacements, slots = result
            logger.debug(
                "Built perfect hash for %d keys (seed %d, %d buckets)",
                len(pairs),
                seed,
                len(displacements),
            )
            return cls(seed, displacements, (pairs[index] for index in slots))

        raise GenerationError(None, f"no perfect hash found for {len(pairs)} keys")

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def displacements(self) -> tuple[tuple[int, int], ...]:
        return self._displacements

    @property
    def entries(self) -> tuple[tuple[int, V], ...]:
        return self._entries

    def get(self, key: int, default: V | None = None) -> V | None:
        """Look up a key.

        Args:
            key: Integer key.
            default: Returned when the key is absent.

        Returns:
            The value stored for key, or default.
        """
        if not self._entries:
            return default
        h = hash_key(key, self._seed)
        d1, d2 = self._displacements[h.g % len(self._displacements)]
        stored_key, value = self._entries[_displace(h, d1, d2, len(self._entries))]
        if stored_key != key:
            return default
        return value

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, int):
            return False
        sentinel = object()
        return self.get(key, sentinel) is not sentinel  # type: ignore[arg-type]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[int]:
        return self.keys()

    def keys(self) -> Iterator[int]:
        return (key for key, _ in self._entries)

    def values(self) -> Iterator[V]:
        return (value for _, value in self._entries)

    def items(self) -> Iterator[tuple[int, V]]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PerfectHashMap):
            return NotImplemented
        return (
            self._seed == other._seed
            and self._displacements == other._displacements
            and self._entries == other._entries
        )

    def __repr__(self) -> str:
        return f"PerfectHashMap(<{len(self._entries)} keys>, seed={self._seed})"
