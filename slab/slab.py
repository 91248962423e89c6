"""
Slab Snapshot
=============
A Slab is one immutable snapshot of an order-book account:

  [0..65]                         SlabHeader
  [65 + i*slot_size ..]           slot i (tag byte + node payload)

Slot indices are plain integers into this array. Slot 0 is a real slot,
not a null pointer; emptiness is leaf_count == 0 and nothing else.

A Slab never changes after construction. To observe new account state,
build a new Slab from freshly fetched bytes.
"""

import logging
from typing import Iterator, Tuple

from slab.errors import BufferUnderrunError, SlabError, StructuralCorruptionError
from slab.header import HEADER_SIZE, SlabHeader, parse_header
from slab.node import FreeNode, Node, NodeTag, parse_node, slot_size

logger = logging.getLogger(__name__)


class Slab:
    """
    Read-only view over a slab buffer.

    Memory layout:
      [0..64]   Header
      [65..]    slot_count fixed-size slots
    """

    __slots__ = ("_header", "_data", "_callback_info_len", "_slot_size")

    def __init__(self, header: SlabHeader, data: bytes, callback_info_len: int):
        """
        Args:
            header: Header decoded from ``data``
            data: Full account data, header included
            callback_info_len: Per-order metadata length for this market
        """
        if callback_info_len < 0:
            raise ValueError(f"callback_info_len must be >= 0, got {callback_info_len}")
        self._header = header
        self._data = bytes(data)
        self._callback_info_len = callback_info_len
        self._slot_size = slot_size(callback_info_len)

    @classmethod
    def from_bytes(cls, data, callback_info_len: int) -> "Slab":
        """Decode the header and wrap a private copy of ``data``."""
        header = parse_header(data)
        slab = cls(header, data, callback_info_len)
        logger.debug(
            "slab for market %s: %d leaves, root=%d, %d slots of %d bytes",
            header.market_pubkey, header.leaf_count, header.root_node,
            slab.slot_count, slab.slot_size)
        return slab

    # ─── Properties ─────────────────────────────────────────────────

    @property
    def header(self) -> SlabHeader:
        return self._header

    @property
    def data(self) -> bytes:
        return self._data

    @property
    def callback_info_len(self) -> int:
        return self._callback_info_len

    @property
    def slot_size(self) -> int:
        return self._slot_size

    @property
    def slot_count(self) -> int:
        """Number of whole slots present after the header."""
        return max(len(self._data) - HEADER_SIZE, 0) // self._slot_size

    @property
    def is_empty(self) -> bool:
        return self._header.is_empty

    # ─── Slot access ────────────────────────────────────────────────

    def slot_offset(self, pointer: int) -> int:
        """Byte offset of slot ``pointer`` within the buffer."""
        return HEADER_SIZE + pointer * self._slot_size

    def node_at(self, pointer: int) -> Node:
        """
        Decode the node in slot ``pointer``.

        Re-decodes on every call. Raises BufferUnderrunError if the slot
        lies past the end of the buffer, otherwise whatever the node
        decoder raises.
        """
        if pointer < 0:
            raise ValueError(f"slot pointer must be >= 0, got {pointer}")
        start = self.slot_offset(pointer)
        end = start + self._slot_size
        if end > len(self._data):
            raise BufferUnderrunError(
                f"slot {pointer}", end, len(self._data))
        return parse_node(memoryview(self._data)[start:end],
                          self._callback_info_len)

    def free_slots(self) -> Iterator[Tuple[int, FreeNode]]:
        """
        Walk the free list: (pointer, FreeNode) for free_list_len hops
        starting at free_list_head.

        Raises StructuralCorruptionError if the chain reaches a slot that
        is not a free node.
        """
        if self._header.free_list_len > self.slot_count:
            raise StructuralCorruptionError(
                f"free list length {self._header.free_list_len} exceeds "
                f"slot count {self.slot_count}")
        pointer = self._header.free_list_head
        for hop in range(self._header.free_list_len):
            try:
                node = self.node_at(pointer)
            except SlabError as exc:
                raise StructuralCorruptionError(
                    f"free list hop {hop}: slot {pointer} unreadable: {exc}") from exc
            if node.tag != NodeTag.FREE and node.tag != NodeTag.LAST_FREE:
                raise StructuralCorruptionError(
                    f"free list hop {hop}: slot {pointer} holds a "
                    f"{node.tag.name} node")
            yield pointer, node
            pointer = node.next

    def __repr__(self) -> str:
        return (f"Slab(leaves={self._header.leaf_count}, "
                f"root={self._header.root_node}, slots={self.slot_count}, "
                f"slot_size={self._slot_size})")
