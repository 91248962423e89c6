"""
Market State
============
Decoder for the market account that owns a pair of bid/ask slabs.
It is where a reader learns the callback_info_len a slab needs.

Layout (LITTLE-ENDIAN, 192 bytes):

  tag                  u64
  caller_authority     32B
  event_queue          32B
  bids                 32B
  asks                 32B
  callback_id_len      u64
  callback_info_len    u64
  fee_budget           u64
  initial_lamports     u64
  min_base_order_size  u64
  tick_size            u64
  cranker_reward       u64
"""

import struct
from dataclasses import dataclass

from solders.pubkey import Pubkey

from slab.errors import BufferUnderrunError
from market.account_tag import AccountTag

MARKET_STATE_FMT = "<Q32s32s32s32sQQQQQQQ"
MARKET_STATE_STRUCT = struct.Struct(MARKET_STATE_FMT)
MARKET_STATE_SIZE = MARKET_STATE_STRUCT.size


@dataclass(frozen=True)
class MarketState:
    tag: int
    caller_authority: Pubkey
    event_queue: Pubkey
    bids: Pubkey
    asks: Pubkey
    callback_id_len: int
    callback_info_len: int
    fee_budget: int
    initial_lamports: int
    min_base_order_size: int
    tick_size: int
    cranker_reward: int

    @classmethod
    def from_bytes(cls, data) -> "MarketState":
        """
        Decode a market account.

        Raises BufferUnderrunError if ``data`` is too short and ValueError
        if the account is not tagged as a market.
        """
        if len(data) < MARKET_STATE_SIZE:
            raise BufferUnderrunError("market state", MARKET_STATE_SIZE, len(data))
        vals = MARKET_STATE_STRUCT.unpack_from(data, 0)
        if vals[0] != AccountTag.MARKET:
            raise ValueError(f"account tag {vals[0]} is not a market")
        return cls(
            tag=vals[0],
            caller_authority=Pubkey.from_bytes(vals[1]),
            event_queue=Pubkey.from_bytes(vals[2]),
            bids=Pubkey.from_bytes(vals[3]),
            asks=Pubkey.from_bytes(vals[4]),
            callback_id_len=vals[5],
            callback_info_len=vals[6],
            fee_budget=vals[7],
            initial_lamports=vals[8],
            min_base_order_size=vals[9],
            tick_size=vals[10],
            cranker_reward=vals[11],
        )

    def to_bytes(self) -> bytes:
        return MARKET_STATE_STRUCT.pack(
            self.tag,
            bytes(self.caller_authority),
            bytes(self.event_queue),
            bytes(self.bids),
            bytes(self.asks),
            self.callback_id_len,
            self.callback_info_len,
            self.fee_budget,
            self.initial_lamports,
            self.min_base_order_size,
            self.tick_size,
            self.cranker_reward,
        )
