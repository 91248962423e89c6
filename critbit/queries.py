"""
Order Book Queries
==================
Read-only queries over a Slab's crit-bit tree:

  lookup      crit-bit descent by key bits (closest leaf, NOT exact match)
  find_exact  lookup + key equality check
  min_or_max  leftmost / rightmost leaf
  l2_depth    price levels with summed quantity, best price first
  top_n       first N raw orders from the best price

Side semantics: asks are read in ascending key order, bids in descending
order, so both start at the best price for their side.

Every query is a pure function of (slab, arguments). Bounded queries stop
decoding as soon as their cap is reached.
"""

from enum import Enum
from itertools import islice
from typing import Callable, Iterator, List, NamedTuple, Optional

from slab import LeafNode, NodeTag, Slab
from critbit.keys import check_key, crit_bit, price_from_key
from critbit.traversal import tree_node, traverse


class Side(Enum):
    BID = "bid"
    ASK = "ask"

    @property
    def ascending(self) -> bool:
        """Traversal order that starts from this side's best price."""
        return self is Side.ASK


class PriceLevel(NamedTuple):
    """One aggregated L2 level."""
    price: int
    quantity: int


# ─── Point queries ──────────────────────────────────────────────────────────

def lookup(slab: Slab, key: int) -> Optional[LeafNode]:
    """
    Descend from the root following the bits of ``key``.

    At each inner node the bit (127 - prefix_len) of ``key`` picks the
    child. The leaf reached shares the longest common prefix with ``key``
    among all leaves, but its key need not equal ``key``; compare it
    yourself or use find_exact(). Returns None on an empty tree.
    """
    check_key(key)
    if slab.is_empty:
        return None
    pointer = slab.header.root_node
    depth = 0
    while True:
        node = tree_node(slab, pointer, depth)
        if node.tag == NodeTag.LEAF:
            return node
        pointer = node.children[crit_bit(key, node.prefix_len)]
        depth += 1


def find_exact(slab: Slab, key: int) -> Optional[LeafNode]:
    """The leaf whose key is exactly ``key``, or None."""
    leaf = lookup(slab, key)
    if leaf is not None and leaf.key == key:
        return leaf
    return None


def min_or_max(slab: Slab, want_max: bool) -> Optional[LeafNode]:
    """
    Leaf with the largest (want_max) or smallest key, None if empty.

    A chosen child pointer equal to 0 is treated as absent and the sibling
    is followed instead. Writers never use slot 0 as a child of a
    well-formed tree, so this matches their output.
    """
    if slab.is_empty:
        return None
    direction = 1 if want_max else 0
    pointer = slab.header.root_node
    depth = 0
    while True:
        node = tree_node(slab, pointer, depth)
        if node.tag == NodeTag.LEAF:
            return node
        pointer = node.children[direction]
        if pointer == 0:
            pointer = node.children[1 - direction]
        depth += 1


def min_leaf(slab: Slab) -> Optional[LeafNode]:
    return min_or_max(slab, want_max=False)


def max_leaf(slab: Slab) -> Optional[LeafNode]:
    return min_or_max(slab, want_max=True)


def best_leaf(slab: Slab, side: Side) -> Optional[LeafNode]:
    """Best order on ``side``: highest bid or lowest ask."""
    return min_or_max(slab, want_max=side is Side.BID)


# ─── Book queries ───────────────────────────────────────────────────────────

def l2_depth(slab: Slab, depth: int, side: Side,
             price_fn: Callable[[int], int] = price_from_key) -> List[PriceLevel]:
    """
    Aggregate resting quantity per price, best price first.

    Walks leaves in ``side`` order. A leaf at the same price as the last
    level adds to it. A leaf at a new price opens a level, unless ``depth``
    levels already exist, in which case the walk stops there.
    """
    if depth < 0:
        raise ValueError(f"depth must be >= 0, got {depth}")
    prices: List[int] = []
    quantities: List[int] = []
    for leaf in traverse(slab, ascending=side.ascending):
        price = price_fn(leaf.key)
        if prices and prices[-1] == price:
            quantities[-1] += leaf.asset_quantity
        elif len(prices) == depth:
            break
        else:
            prices.append(price)
            quantities.append(leaf.asset_quantity)
    return [PriceLevel(p, q) for p, q in zip(prices, quantities)]


def iter_top_n(slab: Slab, max_count: int, side: Side) -> Iterator[LeafNode]:
    """Lazy form of top_n()."""
    if max_count < 0:
        raise ValueError(f"max_count must be >= 0, got {max_count}")
    return islice(traverse(slab, ascending=side.ascending), max_count)


def top_n(slab: Slab, max_count: int, side: Side) -> List[LeafNode]:
    """At most ``max_count`` raw orders in ``side`` order."""
    return list(iter_top_n(slab, max_count, side))
