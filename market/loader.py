"""
Slab Loader
===========
Turns account data obtained elsewhere (RPC dump, file on disk) into a
Slab. Fetching the data is the caller's business; this module only
accepts bytes, hex text or base64 text.
"""

import base64
import binascii
import logging
import os

from slab import Slab
from market.state import MarketState

logger = logging.getLogger(__name__)

ENCODINGS = ("raw", "hex", "base64")


def decode_account_data(payload: bytes, encoding: str = "raw") -> bytes:
    """Undo the transport encoding of an account dump."""
    if encoding == "raw":
        return bytes(payload)
    if encoding == "hex":
        text = payload.decode("ascii").strip()
        if text.startswith("0x"):
            text = text[2:]
        try:
            return bytes.fromhex(text)
        except ValueError as exc:
            raise ValueError(f"invalid hex account data: {exc}") from exc
    if encoding == "base64":
        try:
            return base64.b64decode(payload.strip(), validate=True)
        except binascii.Error as exc:
            raise ValueError(f"invalid base64 account data: {exc}") from exc
    raise ValueError(f"unknown encoding {encoding!r}, expected one of {ENCODINGS}")


def slab_from_hex(text: str, callback_info_len: int) -> Slab:
    return Slab.from_bytes(decode_account_data(text.encode("ascii"), "hex"),
                           callback_info_len)


def slab_from_base64(text: str, callback_info_len: int) -> Slab:
    return Slab.from_bytes(decode_account_data(text.encode("ascii"), "base64"),
                           callback_info_len)


def read_account_file(path: str, encoding: str = "raw") -> bytes:
    if not os.path.isfile(path):
        raise FileNotFoundError(f"account dump not found: {path}")
    with open(path, "rb") as f:
        payload = f.read()
    data = decode_account_data(payload, encoding)
    logger.info("read %d bytes of account data from %s", len(data), path)
    return data


def load_slab(path: str, callback_info_len: int, encoding: str = "raw") -> Slab:
    """Read a slab account dump from disk."""
    return Slab.from_bytes(read_account_file(path, encoding), callback_info_len)


def load_market_state(path: str, encoding: str = "raw") -> MarketState:
    """Read a market account dump from disk."""
    return MarketState.from_bytes(read_account_file(path, encoding))
