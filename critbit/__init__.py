"""
Crit-bit Tree Engine
====================
Navigation over the order tree stored in a Slab.

Components:
  - keys: u128 key helpers, crit-bit extraction, default price extractor
  - traversal: lazy explicit-stack leaf iterator (ascending / descending)
  - queries: lookup, min/max, L2 depth aggregation, top-N orders
"""

from critbit.keys import (
    KEY_BITS, MAX_KEY, crit_bit, common_prefix_len,
    price_from_key, sequence_from_key, order_key,
)
from critbit.traversal import MAX_DEPTH, SlabIterator, traverse
from critbit.queries import (
    Side, PriceLevel, lookup, find_exact, min_or_max, min_leaf, max_leaf,
    best_leaf, l2_depth, iter_top_n, top_n,
)

__all__ = [
    "KEY_BITS", "MAX_KEY", "crit_bit", "common_prefix_len",
    "price_from_key", "sequence_from_key", "order_key",
    "MAX_DEPTH", "SlabIterator", "traverse",
    "Side", "PriceLevel", "lookup", "find_exact", "min_or_max",
    "min_leaf", "max_leaf", "best_leaf", "l2_depth", "iter_top_n", "top_n",
]
