"""Clue dossier: a binary search tree of collected clue texts.

Ordering is plain ``str`` comparison, which for Python strings is by code
point and agrees with byte-wise comparison of their UTF-8 encodings.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class ClueRecord:
    """A dossier node."""
    text: str
    left: Optional["ClueRecord"] = None
    right: Optional["ClueRecord"] = None


def insert_clue(
    root: Optional[ClueRecord],
    clue_text: str,
    on_added: Optional[Callable[[str], None]] = None
) -> ClueRecord:
    """Insert ``clue_text`` and return the (possibly new) root.

    Inserting a text that is already present leaves the tree unchanged.
    ``on_added`` is called only when a new node is allocated.
    """
    if root is None:
        if on_added is not None:
            on_added(clue_text)
        return ClueRecord(clue_text)

    if clue_text < root.text:
        root.left = insert_clue(root.left, clue_text, on_added)
    elif clue_text > root.text:
        root.right = insert_clue(root.right, clue_text, on_added)
    return root


def inorder_traverse(root: Optional[ClueRecord]) -> Iterator[str]:
    """Yield clue texts in ascending order (left, self, right)."""
    stack: List[ClueRecord] = []
    node = root
    while stack or node is not None:
        while node is not None:
            stack.append(node)
            node = node.left
        node = stack.pop()
        yield node.text
        node = node.right


def release(root: Optional[ClueRecord]) -> int:
    """Unlink every node in post-order and return how many were released."""
    released = 0
    stack: List[Tuple[ClueRecord, bool]] = [(root, False)] if root is not None else []
    while stack:
        node, children_done = stack.pop()
        if children_done:
            node.left = None
            node.right = None
            released += 1
            continue
        stack.append((node, True))
        for child in (node.right, node.left):
            if child is not None:
                stack.append((child, False))
    return released


class Dossier:
    """Owns the root of a clue BST."""

    def __init__(self):
        self.root: Optional[ClueRecord] = None
        self._size = 0

    def insert(self, clue_text: str) -> bool:
        """Insert a clue; returns True if it was not already in the dossier."""
        added: List[str] = []
        self.root = insert_clue(self.root, clue_text, added.append)
        if added:
            self._size += 1
            logger.debug("Dossier now holds %d clue(s)", self._size)
        return bool(added)

    @property
    def is_empty(self) -> bool:
        return self.root is None

    def __iter__(self) -> Iterator[str]:
        return inorder_traverse(self.root)

    def __len__(self) -> int:
        return self._size

    def __contains__(self, clue_text: object) -> bool:
        if not isinstance(clue_text, str):
            return False
        node = self.root
        while node is not None:
            if clue_text == node.text:
                return True
            node = node.left if clue_text < node.text else node.right
        return False

    def clear(self) -> int:
        released = release(self.root)
        self.root = None
        self._size = 0
        return released
