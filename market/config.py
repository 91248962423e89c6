"""
Reader Configuration
====================
Runtime knobs, read from the environment once at startup.

  SLAB_CALLBACK_INFO_LEN   default callback info length (bytes)
  SLAB_DEPTH               default number of L2 levels / orders shown
  SLAB_LOG_LEVEL           logging level name (default WARNING)
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_CALLBACK_INFO_LEN = 32
DEFAULT_DEPTH = 10
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class ReaderConfig:
    callback_info_len: int = DEFAULT_CALLBACK_INFO_LEN
    depth: int = DEFAULT_DEPTH
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ReaderConfig":
        env = os.environ if environ is None else environ
        return cls(
            callback_info_len=_int_var(env, "SLAB_CALLBACK_INFO_LEN",
                                       DEFAULT_CALLBACK_INFO_LEN),
            depth=_int_var(env, "SLAB_DEPTH", DEFAULT_DEPTH),
            log_level=env.get("SLAB_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper(),
        )

    @property
    def log_level_int(self) -> int:
        level = getattr(logging, self.log_level, None)
        return level if isinstance(level, int) else logging.WARNING


def _int_var(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value
