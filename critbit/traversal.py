"""
Crit-bit Tree Traversal
=======================
Ordered, lazy walk over the leaves of the tree stored in a Slab.

The walk is an explicit-stack depth-first search: pop a pointer, decode
that one slot, yield it if it is a leaf, push its two children if it is an
inner node. Children are pushed so the one holding the next keys in the
requested order is popped first. Nothing is decoded ahead of the consumer.

Only Inner and Leaf nodes may be reachable from the root. Anything else
(a free slot, an uninitialized slot, an undecodable slot, a path deeper
than the key width, or a leaf count that disagrees with the header)
raises StructuralCorruptionError and ends the walk.
"""

import logging
from typing import Iterator, List, Tuple, Union

from slab import (
    InnerNode, LeafNode, NodeTag, Slab, SlabError, StructuralCorruptionError,
)
from critbit.keys import KEY_BITS

logger = logging.getLogger(__name__)

# A root-to-leaf path visits at most one inner node per key bit.
MAX_DEPTH = KEY_BITS


def tree_node(slab: Slab, pointer: int, depth: int) -> Union[InnerNode, LeafNode]:
    """
    Decode a slot that must belong to the tree.

    Raises StructuralCorruptionError if ``depth`` exceeds MAX_DEPTH, if the
    slot cannot be decoded, or if it holds anything but an inner or leaf node.
    """
    if depth > MAX_DEPTH:
        raise StructuralCorruptionError(
            f"tree deeper than {MAX_DEPTH} at slot {pointer} (cycle?)")
    try:
        node = slab.node_at(pointer)
    except SlabError as exc:
        logger.warning("corrupt tree slot %d at depth %d: %s", pointer, depth, exc)
        raise StructuralCorruptionError(
            f"slot {pointer} at depth {depth}: {exc}") from exc
    if node.tag == NodeTag.INNER or node.tag == NodeTag.LEAF:
        return node
    logger.warning("tree reaches %s slot %d at depth %d",
                   node.tag.name, pointer, depth)
    raise StructuralCorruptionError(
        f"slot {pointer} at depth {depth} is a {node.tag.name} node inside the tree")


class SlabIterator:
    """
    Cursor over the leaves of one Slab, ascending or descending by key.

    Each instance is independent; iterate the same Slab again by creating
    a new SlabIterator (or calling traverse()).
    """

    def __init__(self, slab: Slab, ascending: bool = True):
        self._slab = slab
        self._ascending = ascending
        self._expected = slab.header.leaf_count
        self._yielded = 0
        # (pointer, depth). Empty trees never touch the root slot.
        self._stack: List[Tuple[int, int]] = []
        if not slab.is_empty:
            self._stack.append((slab.header.root_node, 0))

    @property
    def ascending(self) -> bool:
        return self._ascending

    @property
    def yielded(self) -> int:
        """Leaves produced so far."""
        return self._yielded

    def __iter__(self) -> "SlabIterator":
        return self

    def __next__(self) -> LeafNode:
        while self._stack:
            pointer, depth = self._stack.pop()
            node = tree_node(self._slab, pointer, depth)

            if node.tag == NodeTag.LEAF:
                if self._yielded >= self._expected:
                    raise StructuralCorruptionError(
                        f"tree holds more than the {self._expected} leaves "
                        f"recorded in the header")
                self._yielded += 1
                return node

            # Inner: the child popped first comes out first.
            low, high = node.children
            if self._ascending:
                self._stack.append((high, depth + 1))
                self._stack.append((low, depth + 1))
            else:
                self._stack.append((low, depth + 1))
                self._stack.append((high, depth + 1))

        if self._yielded != self._expected:
            raise StructuralCorruptionError(
                f"tree holds {self._yielded} leaves, header records "
                f"{self._expected}")
        raise StopIteration


def traverse(slab: Slab, ascending: bool = True) -> Iterator[LeafNode]:
    """Fresh lazy iterator over all leaves in key order."""
    return SlabIterator(slab, ascending)
