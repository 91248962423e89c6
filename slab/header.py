"""
Slab Header
===========
Fixed 65-byte header at offset 0 of every slab account.

Layout (all integers LITTLE-ENDIAN, no padding):

  [0]      account_tag     u8   raw market-type discriminant
  [1..9]   bump_index      u64  next never-used slot
  [9..17]  free_list_len   u64  length of the reclaimed-slot chain
  [17..21] free_list_head  u32  first reclaimed slot
  [21..25] root_node       u32  slot index of the tree root
  [25..33] leaf_count      u64  number of orders in the tree
  [33..65] market_address  32B  owning market account

The account tag is stored raw; interpreting it is the market layer's job
(see market/account_tag.py).
"""

import struct
from dataclasses import dataclass

from solders.pubkey import Pubkey

from slab.errors import BufferUnderrunError

# ─── Constants ──────────────────────────────────────────────────────────────

HEADER_SIZE = 65

# account_tag(B) bump_index(Q) free_list_len(Q) free_list_head(I)
# root_node(I) leaf_count(Q) market_address(32s)
HEADER_FMT = "<BQQIIQ32s"
HEADER_STRUCT = struct.Struct(HEADER_FMT)

assert HEADER_STRUCT.size == HEADER_SIZE


@dataclass(frozen=True)
class SlabHeader:
    """Decoded slab header. Field relationships are not validated."""
    account_tag: int
    bump_index: int
    free_list_len: int
    free_list_head: int
    root_node: int
    leaf_count: int
    market_address: bytes

    @property
    def is_empty(self) -> bool:
        """
        True when the tree holds no orders.

        root_node == 0 is NOT emptiness: slot 0 is a valid root.
        """
        return self.leaf_count == 0

    @property
    def market_pubkey(self) -> Pubkey:
        return Pubkey.from_bytes(self.market_address)

    def to_bytes(self) -> bytes:
        return HEADER_STRUCT.pack(
            self.account_tag,
            self.bump_index,
            self.free_list_len,
            self.free_list_head,
            self.root_node,
            self.leaf_count,
            self.market_address,
        )


def parse_header(data) -> SlabHeader:
    """Decode the header from the first 65 bytes of ``data``."""
    if len(data) < HEADER_SIZE:
        raise BufferUnderrunError("slab header", HEADER_SIZE, len(data))
    vals = HEADER_STRUCT.unpack_from(data, 0)
    return SlabHeader(
        account_tag=vals[0],
        bump_index=vals[1],
        free_list_len=vals[2],
        free_list_head=vals[3],
        root_node=vals[4],
        leaf_count=vals[5],
        market_address=bytes(vals[6]),
    )
