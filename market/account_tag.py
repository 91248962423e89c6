"""
Account Tags
============
Interpretation of the first byte/word of order-book program accounts.
The slab header stores this value raw; this module gives it a meaning.
"""

from enum import IntEnum

from critbit.queries import Side


class AccountTag(IntEnum):
    UNINITIALIZED = 0
    MARKET = 1
    EVENT_QUEUE = 2
    BIDS = 3
    ASKS = 4
    DISABLED = 5


def parse_account_tag(raw: int) -> AccountTag:
    """Raises ValueError for values outside AccountTag."""
    try:
        return AccountTag(raw)
    except ValueError:
        raise ValueError(f"unknown account tag {raw}") from None


def side_for_tag(raw: int) -> Side:
    """Book side of a slab account from its raw header tag."""
    tag = parse_account_tag(raw)
    if tag == AccountTag.BIDS:
        return Side.BID
    if tag == AccountTag.ASKS:
        return Side.ASK
    raise ValueError(f"{tag.name} account is not an order book side")
