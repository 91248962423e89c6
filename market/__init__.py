"""
Market Collaborators
====================
Everything the slab reader needs from outside the slab itself:
account tag meaning, market configuration (callback_info_len, tick size),
account data loading and runtime configuration.
"""

from market.account_tag import AccountTag, parse_account_tag, side_for_tag
from market.state import MarketState, MARKET_STATE_SIZE
from market.config import ReaderConfig
from market.loader import (
    decode_account_data, slab_from_hex, slab_from_base64,
    load_slab, load_market_state,
)

__all__ = [
    "AccountTag", "parse_account_tag", "side_for_tag",
    "MarketState", "MARKET_STATE_SIZE",
    "ReaderConfig",
    "decode_account_data", "slab_from_hex", "slab_from_base64",
    "load_slab", "load_market_state",
]
