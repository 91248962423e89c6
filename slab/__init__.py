"""
Slab Layout
===========
Binary layout of an order-book slab account: header, tagged node slots,
and the immutable Slab value that resolves slot pointers to nodes.

Usage:
    from slab import Slab, NodeTag, InnerNode, LeafNode, FreeNode
"""

from slab.errors import (
    SlabError, UninitializedSlotError, UnrecognizedNodeTagError,
    BufferUnderrunError, StructuralCorruptionError,
)
from slab.header import SlabHeader, HEADER_SIZE, parse_header
from slab.node import (
    NodeTag, InnerNode, LeafNode, FreeNode, Node, MIN_SLOT_SIZE,
    decode_node, parse_node, encode_node, slot_size,
)
from slab.slab import Slab

__all__ = [
    "SlabError", "UninitializedSlotError", "UnrecognizedNodeTagError",
    "BufferUnderrunError", "StructuralCorruptionError",
    "SlabHeader", "HEADER_SIZE", "parse_header",
    "NodeTag", "InnerNode", "LeafNode", "FreeNode", "Node", "MIN_SLOT_SIZE",
    "decode_node", "parse_node", "encode_node", "slot_size",
    "Slab",
]
