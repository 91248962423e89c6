"""
Order Keys
==========
Tree keys are unsigned 128-bit integers (Python ints, decoded little-endian
from the slab). The high 64 bits are the limit price, the low 64 bits an
order sequence number, so key order is price-then-time order.

Bit numbering for the crit-bit tree counts from the most significant bit:
an inner node with prefix_len p branches on bit (127 - p).
"""

KEY_BITS = 128
MAX_KEY = (1 << KEY_BITS) - 1
PRICE_SHIFT = 64
SEQUENCE_MASK = (1 << PRICE_SHIFT) - 1


def check_key(key: int) -> int:
    """Return ``key`` unchanged, or raise ValueError if it is not a u128."""
    if not 0 <= key <= MAX_KEY:
        raise ValueError(f"key out of u128 range: {key}")
    return key


def crit_bit(key: int, prefix_len: int) -> int:
    """The bit an inner node with ``prefix_len`` branches on, as 0 or 1."""
    return (key >> (KEY_BITS - 1 - prefix_len)) & 1


def common_prefix_len(a: int, b: int) -> int:
    """Number of leading bits ``a`` and ``b`` share (128 when equal)."""
    return KEY_BITS - (a ^ b).bit_length()


def price_from_key(key: int) -> int:
    """Default price extractor: the high 64 bits of the key."""
    return key >> PRICE_SHIFT


def sequence_from_key(key: int) -> int:
    return key & SEQUENCE_MASK


def order_key(price: int, sequence: int) -> int:
    """Build the key of an order from its price and sequence number."""
    if not 0 <= price <= SEQUENCE_MASK:
        raise ValueError(f"price out of u64 range: {price}")
    if not 0 <= sequence <= SEQUENCE_MASK:
        raise ValueError(f"sequence out of u64 range: {sequence}")
    return (price << PRICE_SHIFT) | sequence
