"""
Slab Layout Tests
=================
Header parsing, node decoding for every tag, slot resolution and
the free list walk.
"""

import struct

import pytest
from solders.pubkey import Pubkey

from slab import (
    BufferUnderrunError, FreeNode, HEADER_SIZE, InnerNode, LeafNode,
    NodeTag, Slab, StructuralCorruptionError, UninitializedSlotError,
    UnrecognizedNodeTagError, decode_node, parse_header, parse_node,
    slot_size,
)

from slab_fixtures import (
    CALLBACK_INFO_LEN, MARKET_ADDRESS, assemble_slab, build_slab,
    build_slab_bytes,
)


KEY_A = 0x0123456789ABCDEF_FEDCBA9876543210
KEY_B = (1 << 127) | 7


def _slot(tag: int, payload: bytes, callback_info_len: int = CALLBACK_INFO_LEN) -> bytes:
    return (bytes([tag]) + payload).ljust(slot_size(callback_info_len), b"\xAA")


@pytest.fixture
def tagged_buffer():
    """
    Header + five hand-packed slots, one per tag 0..4.
    Padding is 0xAA so any read past a field shows up as a wrong value.
    """
    cbl = CALLBACK_INFO_LEN
    header = struct.pack("<BQQIIQ32s", 3, 5, 2, 3, 1, 1, MARKET_ADDRESS)
    slots = [
        _slot(0, b""),
        _slot(1, struct.pack("<I", 17) + KEY_A.to_bytes(16, "little")
              + struct.pack("<II", 2, 3)),
        _slot(2, KEY_B.to_bytes(16, "little") + bytes(range(cbl))
              + struct.pack("<Q", 987654321)),
        _slot(3, struct.pack("<I", 4)),
        _slot(4, struct.pack("<I", 0)),
    ]
    return header + b"".join(slots)


# ═══════════════════════════════════════════════════════════════════════════
# Header
# ═══════════════════════════════════════════════════════════════════════════

class TestHeader:

    def test_fields(self, tagged_buffer):
        h = parse_header(tagged_buffer)
        assert h.account_tag == 3
        assert h.bump_index == 5
        assert h.free_list_len == 2
        assert h.free_list_head == 3
        assert h.root_node == 1
        assert h.leaf_count == 1
        assert h.market_address == MARKET_ADDRESS

    def test_market_pubkey(self, tagged_buffer):
        h = parse_header(tagged_buffer)
        assert h.market_pubkey == Pubkey.from_bytes(MARKET_ADDRESS)

    def test_exactly_65_bytes(self, tagged_buffer):
        h = parse_header(tagged_buffer[:HEADER_SIZE])
        assert h.to_bytes() == tagged_buffer[:HEADER_SIZE]

    def test_short_header(self):
        with pytest.raises(BufferUnderrunError) as exc:
            parse_header(b"\x03" * 64)
        assert exc.value.needed == 65 and exc.value.available == 64

    def test_root_zero_is_not_empty(self):
        h = parse_header(build_slab_bytes([5]))
        assert h.root_node == 0
        assert not h.is_empty


# ═══════════════════════════════════════════════════════════════════════════
# Node Decoder
# ═══════════════════════════════════════════════════════════════════════════

class TestNodeDecoder:

    def _slot(self, buf, i):
        size = slot_size(CALLBACK_INFO_LEN)
        start = HEADER_SIZE + i * size
        return buf[start:start + size]

    def test_uninitialized(self, tagged_buffer):
        with pytest.raises(UninitializedSlotError):
            parse_node(self._slot(tagged_buffer, 0), CALLBACK_INFO_LEN)

    def test_inner(self, tagged_buffer):
        node = parse_node(self._slot(tagged_buffer, 1), CALLBACK_INFO_LEN)
        assert node == InnerNode(prefix_len=17, key=KEY_A, children=(2, 3))
        assert node.tag == NodeTag.INNER

    def test_leaf(self, tagged_buffer):
        node = parse_node(self._slot(tagged_buffer, 2), CALLBACK_INFO_LEN)
        assert node.tag == NodeTag.LEAF
        assert node.key == KEY_B
        assert node.callback_info == bytes(range(CALLBACK_INFO_LEN))
        assert node.asset_quantity == 987654321

    def test_free(self, tagged_buffer):
        node = parse_node(self._slot(tagged_buffer, 3), CALLBACK_INFO_LEN)
        assert node == FreeNode(next=4, tag=NodeTag.FREE)

    def test_last_free_keeps_tag(self, tagged_buffer):
        node = parse_node(self._slot(tagged_buffer, 4), CALLBACK_INFO_LEN)
        assert node.next == 0
        assert node.tag == NodeTag.LAST_FREE

    def test_unknown_tag(self):
        with pytest.raises(UnrecognizedNodeTagError) as exc:
            decode_node(9, bytes(40), CALLBACK_INFO_LEN)
        assert exc.value.tag == 9

    def test_inner_underrun(self):
        with pytest.raises(BufferUnderrunError):
            decode_node(NodeTag.INNER, bytes(27), 0)

    def test_leaf_underrun(self):
        # key + callback info present, quantity missing a byte
        with pytest.raises(BufferUnderrunError):
            decode_node(NodeTag.LEAF, bytes(16 + 8 + 7), 8)

    def test_free_underrun(self):
        with pytest.raises(BufferUnderrunError):
            decode_node(NodeTag.FREE, bytes(3), 0)

    def test_empty_slot(self):
        with pytest.raises(BufferUnderrunError):
            parse_node(b"", 0)

    def test_zero_callback_info(self):
        payload = (42).to_bytes(16, "little") + struct.pack("<Q", 9)
        node = decode_node(NodeTag.LEAF, payload, 0)
        assert node == LeafNode(key=42, callback_info=b"", asset_quantity=9)

    def test_max_u128_key(self):
        key = (1 << 128) - 1
        payload = key.to_bytes(16, "little") + struct.pack("<Q", 1)
        assert decode_node(NodeTag.LEAF, payload, 0).key == key


class TestSlotSize:

    def test_minimum(self):
        assert slot_size(0) == 32
        assert slot_size(7) == 32

    def test_grows_with_callback_info(self):
        assert slot_size(8) == 33
        assert slot_size(32) == 57


# ═══════════════════════════════════════════════════════════════════════════
# Slab Indexer
# ═══════════════════════════════════════════════════════════════════════════

class TestSlab:

    def test_node_at(self, tagged_buffer):
        slab = Slab.from_bytes(tagged_buffer, CALLBACK_INFO_LEN)
        assert slab.slot_count == 5
        assert slab.node_at(3) == FreeNode(next=4)
        assert slab.node_at(2).key == KEY_B

    def test_node_at_past_end(self, tagged_buffer):
        slab = Slab.from_bytes(tagged_buffer, CALLBACK_INFO_LEN)
        with pytest.raises(BufferUnderrunError):
            slab.node_at(5)

    def test_truncated_last_slot(self, tagged_buffer):
        slab = Slab.from_bytes(tagged_buffer[:-1], CALLBACK_INFO_LEN)
        assert slab.slot_count == 4
        with pytest.raises(BufferUnderrunError):
            slab.node_at(4)

    def test_snapshot_is_a_copy(self):
        buf = bytearray(build_slab_bytes([1, 2, 3]))
        slab = Slab.from_bytes(buf, CALLBACK_INFO_LEN)
        buf[HEADER_SIZE:] = bytes(len(buf) - HEADER_SIZE)
        assert slab.node_at(0).tag == NodeTag.INNER

    def test_slot_zero_is_valid(self):
        slab = build_slab([77])
        assert slab.node_at(0).key == 77

    def test_negative_pointer(self):
        slab = build_slab([1])
        with pytest.raises(ValueError):
            slab.node_at(-1)

    def test_negative_callback_info_len(self):
        with pytest.raises(ValueError):
            Slab.from_bytes(build_slab_bytes(), -1)

    def test_header_only(self):
        slab = Slab.from_bytes(build_slab_bytes(), CALLBACK_INFO_LEN)
        assert slab.slot_count == 0
        assert slab.is_empty


class TestFreeList:

    def test_walk(self):
        slab = build_slab([1, 2, 3], free_count=3)
        free = list(slab.free_slots())
        # 3 leaves + 2 inner nodes occupy slots 0..4
        assert [p for p, _ in free] == [5, 6, 7]
        assert [n.tag for _, n in free] == [NodeTag.FREE, NodeTag.FREE, NodeTag.LAST_FREE]

    def test_empty_list(self):
        assert list(build_slab([1]).free_slots()) == []

    def test_chain_into_tree_node(self):
        data = build_slab_bytes([1, 2], free_count=0)
        # Claim slot 0 (an inner node) is a free slot
        raw = bytearray(data)
        raw[9:17] = struct.pack("<Q", 1)
        slab = Slab.from_bytes(bytes(raw), CALLBACK_INFO_LEN)
        with pytest.raises(StructuralCorruptionError):
            list(slab.free_slots())

    def test_length_beyond_slots(self):
        data = assemble_slab([FreeNode(next=0)], free_list_len=10)
        slab = Slab.from_bytes(data, CALLBACK_INFO_LEN)
        with pytest.raises(StructuralCorruptionError):
            list(slab.free_slots())
