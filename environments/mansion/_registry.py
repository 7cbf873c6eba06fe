"""Clue registry: a chained hash table mapping clue text to suspect name.

The table has a fixed number of buckets and never resizes. Each bucket holds a
singly linked chain of associations; new entries are prepended, so a clue that
is registered twice resolves to its most recent suspect (the older entry stays
in the chain, shadowed).
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_BUCKET_COUNT = 10
UNKNOWN_SUSPECT = "UNKNOWN"


@dataclass
class SuspectAssociation:
    """One chain link: clue text (key) -> suspect name (value)."""
    clue_text: str
    suspect_name: str
    next: Optional["SuspectAssociation"] = None


def clue_hash(clue_text: str, bucket_count: int) -> int:
    """Sum of character codes modulo the bucket count."""
    return sum(ord(ch) for ch in clue_text) % bucket_count


class ClueRegistry:
    """Fixed-size hash table with separate chaining.

    Lookups are exact string matches. A miss is a normal outcome and returns
    ``UNKNOWN_SUSPECT`` rather than raising.
    """

    def __init__(self, bucket_count: int = DEFAULT_BUCKET_COUNT):
        if bucket_count < 1:
            raise ValueError(f"Registry needs at least 1 bucket, got {bucket_count}")
        self.bucket_count = bucket_count
        self._buckets: List[Optional[SuspectAssociation]] = [None] * bucket_count
        self._size = 0
        self._suspects: Dict[str, None] = {}

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[Tuple[str, str]],
        bucket_count: int = DEFAULT_BUCKET_COUNT
    ) -> "ClueRegistry":
        """Build a registry, inserting ``(clue_text, suspect_name)`` pairs in order."""
        registry = cls(bucket_count)
        for clue_text, suspect_name in pairs:
            registry.insert(clue_text, suspect_name)
        return registry

    def insert(self, clue_text: str, suspect_name: str) -> None:
        """Prepend an association to the clue's bucket chain."""
        index = clue_hash(clue_text, self.bucket_count)
        head = self._buckets[index]
        if self._find(head, clue_text) is not None:
            logger.warning("Clue %r registered again; %r now shadows the earlier suspect",
                           clue_text, suspect_name)
        self._buckets[index] = SuspectAssociation(clue_text, suspect_name, next=head)
        self._size += 1
        self._suspects.setdefault(suspect_name, None)
        logger.debug("Registered clue in bucket %d -> %s", index, suspect_name)

    def lookup(self, clue_text: str) -> str:
        """Return the suspect for ``clue_text``, or ``UNKNOWN_SUSPECT``."""
        index = clue_hash(clue_text, self.bucket_count)
        match = self._find(self._buckets[index], clue_text)
        if match is None:
            return UNKNOWN_SUSPECT
        return match.suspect_name

    def chain(self, index: int) -> Iterator[SuspectAssociation]:
        """Yield the associations of one bucket, head first."""
        if not (0 <= index < self.bucket_count):
            raise ValueError(f"Bucket {index} out of range [0, {self.bucket_count})")
        current = self._buckets[index]
        while current is not None:
            yield current
            current = current.next

    def suspects(self) -> List[str]:
        """Distinct suspect names, in the order they were first registered."""
        return list(self._suspects)

    def clear(self) -> int:
        """Release every chain and return the number of associations dropped."""
        released = 0
        for i in range(self.bucket_count):
            current = self._buckets[i]
            while current is not None:
                following = current.next
                current.next = None
                current = following
                released += 1
            self._buckets[i] = None
        self._size = 0
        self._suspects.clear()
        return released

    def __len__(self) -> int:
        return self._size

    def __contains__(self, clue_text: object) -> bool:
        if not isinstance(clue_text, str):
            return False
        index = clue_hash(clue_text, self.bucket_count)
        return self._find(self._buckets[index], clue_text) is not None

    @staticmethod
    def _find(head: Optional[SuspectAssociation], clue_text: str) -> Optional[SuspectAssociation]:
        current = head
        while current is not None:
            if current.clue_text == clue_text:
                return current
            current = current.next
        return None
