"""
Slab Node Decoder
=================
Every slot in the slab holds one tagged node record:

  [0]    tag      u8  discriminant (NodeTag)
  [1..]  payload      variant-specific, trailing slot padding ignored

Payloads (LITTLE-ENDIAN):

  INNER      prefix_len u32 | key u128 | children [u32; 2]    (28 bytes)
  LEAF       key u128 | callback_info [callback_info_len] | asset_quantity u64
  FREE       next u32                                          (4 bytes)
  LAST_FREE  next u32  (same shape as FREE, tag preserved on decode)

callback_info_len is market configuration. It is never stored in the slab,
so every decode call has to be told what it is.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple, Union

from slab.errors import (
    BufferUnderrunError, UninitializedSlotError, UnrecognizedNodeTagError,
)

# ─── Constants ──────────────────────────────────────────────────────────────

KEY_SIZE = 16               # u128
QUANTITY_SIZE = 8           # u64
TAG_SIZE = 1
MIN_SLOT_SIZE = 32

# prefix_len(I) key(16s) child0(I) child1(I)
INNER_STRUCT = struct.Struct("<I16sII")
FREE_STRUCT = struct.Struct("<I")
QUANTITY_STRUCT = struct.Struct("<Q")


class NodeTag(IntEnum):
    """Slot discriminant byte."""
    UNINITIALIZED = 0
    INNER = 1
    LEAF = 2
    FREE = 3
    LAST_FREE = 4


def slot_size(callback_info_len: int) -> int:
    """Bytes per slot for a market with the given callback info length."""
    return max(callback_info_len + QUANTITY_SIZE + KEY_SIZE + TAG_SIZE,
               MIN_SLOT_SIZE)


def leaf_payload_size(callback_info_len: int) -> int:
    return KEY_SIZE + callback_info_len + QUANTITY_SIZE


# ─── Node variants ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class InnerNode:
    """Branch node. Every key under children[0] < every key under children[1]."""
    prefix_len: int
    key: int
    children: Tuple[int, int]

    tag = NodeTag.INNER


@dataclass(frozen=True)
class LeafNode:
    """One resting order."""
    key: int
    callback_info: bytes
    asset_quantity: int

    tag = NodeTag.LEAF


@dataclass(frozen=True)
class FreeNode:
    """Reclaimed slot. ``tag`` is FREE or LAST_FREE, as found on disk."""
    next: int
    tag: NodeTag = NodeTag.FREE


Node = Union[InnerNode, LeafNode, FreeNode]


# ─── Decode ─────────────────────────────────────────────────────────────────

def decode_node(tag: int, payload, callback_info_len: int) -> Node:
    """
    Decode one node from its discriminant and the bytes that follow it.

    Pure function of its inputs. Raises UninitializedSlotError for tag 0,
    UnrecognizedNodeTagError for tags outside NodeTag, BufferUnderrunError
    if the payload is shorter than the variant needs.
    """
    if tag == NodeTag.UNINITIALIZED:
        raise UninitializedSlotError("node is uninitialized")

    elif tag == NodeTag.INNER:
        _require(payload, INNER_STRUCT.size, "inner node")
        prefix_len, raw_key, left, right = INNER_STRUCT.unpack_from(payload, 0)
        return InnerNode(prefix_len=prefix_len,
                         key=int.from_bytes(raw_key, "little"),
                         children=(left, right))

    elif tag == NodeTag.LEAF:
        _require(payload, leaf_payload_size(callback_info_len), "leaf node")
        qty_offset = KEY_SIZE + callback_info_len
        (quantity,) = QUANTITY_STRUCT.unpack_from(payload, qty_offset)
        return LeafNode(key=int.from_bytes(payload[:KEY_SIZE], "little"),
                        callback_info=bytes(payload[KEY_SIZE:qty_offset]),
                        asset_quantity=quantity)

    elif tag == NodeTag.FREE or tag == NodeTag.LAST_FREE:
        _require(payload, FREE_STRUCT.size, "free node")
        (next_slot,) = FREE_STRUCT.unpack_from(payload, 0)
        return FreeNode(next=next_slot, tag=NodeTag(tag))

    raise UnrecognizedNodeTagError(tag)


def parse_node(slot, callback_info_len: int) -> Node:
    """Decode a whole slot: first byte is the tag, the rest is payload."""
    _require(slot, TAG_SIZE, "node tag")
    view = memoryview(slot)
    return decode_node(view[0], view[TAG_SIZE:], callback_info_len)


def _require(data, needed: int, what: str) -> None:
    if len(data) < needed:
        raise BufferUnderrunError(what, needed, len(data))


# ─── Encode ─────────────────────────────────────────────────────────────────

def encode_node(node: Node, callback_info_len: int) -> bytes:
    """
    Serialize a node into one full slot (zero padded to slot_size).

    Only used to build snapshots outside of a Slab; a decoded Slab is
    never written back.
    """
    buf = bytearray(slot_size(callback_info_len))
    buf[0] = int(node.tag)

    if node.tag == NodeTag.INNER:
        INNER_STRUCT.pack_into(buf, TAG_SIZE, node.prefix_len,
                               node.key.to_bytes(KEY_SIZE, "little"),
                               node.children[0], node.children[1])

    elif node.tag == NodeTag.LEAF:
        if len(node.callback_info) != callback_info_len:
            raise ValueError(
                f"callback_info is {len(node.callback_info)} bytes, "
                f"market expects {callback_info_len}")
        offset = TAG_SIZE
        buf[offset:offset + KEY_SIZE] = node.key.to_bytes(KEY_SIZE, "little")
        offset += KEY_SIZE
        buf[offset:offset + callback_info_len] = node.callback_info
        offset += callback_info_len
        QUANTITY_STRUCT.pack_into(buf, offset, node.asset_quantity)

    elif node.tag == NodeTag.FREE or node.tag == NodeTag.LAST_FREE:
        FREE_STRUCT.pack_into(buf, TAG_SIZE, node.next)

    else:
        raise ValueError(f"cannot encode node with tag {node.tag}")

    return bytes(buf)
