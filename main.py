"""
Slab Reader: Order Book Slab Inspector
======================================
Entry point: decode an order-book slab account dump and query it.

Usage:
    python main.py [options] SLAB_FILE

Options:
    --help                  Show help
    --callback-info-len N   Per-order callback info length (bytes)
    --market FILE           Market account dump; supplies callback-info-len
    --encoding E            raw (default), hex or base64
    --side bid|ask          Book side (default: from the slab's account tag)
    --depth N               Show N aggregated price levels
    --orders N              Show the N best raw orders
    --min / --max           Show the lowest / highest key order
    --lookup KEY            Crit-bit lookup of KEY (decimal or 0x hex)
    --stats                 Header summary and free list length
    --raw                   Pipe-separated output instead of tables

Default:
    L2 depth of SLAB_DEPTH levels (environment, default 10)
"""

import logging
import sys

from critbit import (
    Side, l2_depth, lookup, max_leaf, min_leaf, top_n,
)
from market import (
    ReaderConfig, load_market_state, load_slab, side_for_tag,
)
from cli.renderer import Renderer

logger = logging.getLogger("slab_reader")


def print_help():
    print(__doc__)


class UsageError(Exception):
    pass


def parse_args(args, config: ReaderConfig) -> dict:
    """Parse CLI arguments into an options dict."""
    opts = {
        "slab_file": None,
        "callback_info_len": None,
        "market_file": None,
        "encoding": "raw",
        "side": None,
        "depth": None,
        "orders": None,
        "min": False,
        "max": False,
        "lookup": None,
        "stats": False,
        "raw": False,
    }
    valued = {
        "--callback-info-len": ("callback_info_len", _parse_uint),
        "--market": ("market_file", str),
        "--encoding": ("encoding", str),
        "--side": ("side", _parse_side),
        "--depth": ("depth", _parse_uint),
        "--orders": ("orders", _parse_uint),
        "--lookup": ("lookup", _parse_key),
    }
    flags = {"--min": "min", "--max": "max", "--stats": "stats", "--raw": "raw"}

    i = 0
    while i < len(args):
        arg = args[i]
        if arg in valued:
            if i + 1 >= len(args):
                raise UsageError(f"{arg} needs a value")
            name, convert = valued[arg]
            opts[name] = convert(args[i + 1])
            i += 2
        elif arg in flags:
            opts[flags[arg]] = True
            i += 1
        elif arg.startswith("-"):
            raise UsageError(f"Unknown option: {arg}")
        elif opts["slab_file"] is None:
            opts["slab_file"] = arg
            i += 1
        else:
            raise UsageError(f"Unexpected argument: {arg}")

    if opts["slab_file"] is None:
        raise UsageError("missing SLAB_FILE")

    nothing_chosen = not (opts["orders"] is not None or opts["min"] or opts["max"]
                          or opts["lookup"] is not None or opts["stats"])
    if opts["depth"] is None and nothing_chosen:
        opts["depth"] = config.depth
    return opts


def _parse_uint(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise UsageError(f"expected a number, got {text!r}") from None
    if value < 0:
        raise UsageError(f"expected a non-negative number, got {value}")
    return value


def _parse_key(text: str) -> int:
    try:
        return int(text, 0)
    except ValueError:
        raise UsageError(f"expected a key, got {text!r}") from None


def _parse_side(text: str) -> Side:
    try:
        return Side(text.lower())
    except ValueError:
        raise UsageError(f"side must be bid or ask, got {text!r}") from None


def run(opts: dict, config: ReaderConfig, renderer: Renderer) -> None:
    """Load the slab and render every requested query."""
    callback_info_len = opts["callback_info_len"]
    if callback_info_len is None and opts["market_file"]:
        market = load_market_state(opts["market_file"], opts["encoding"])
        callback_info_len = market.callback_info_len
        logger.info("callback_info_len=%d from market %s",
                    callback_info_len, opts["market_file"])
    if callback_info_len is None:
        callback_info_len = config.callback_info_len

    slab = load_slab(opts["slab_file"], callback_info_len, opts["encoding"])
    if opts["raw"]:
        renderer.mode = "raw"

    side = opts["side"]
    if side is None and (opts["depth"] is not None or opts["orders"] is not None):
        side = side_for_tag(slab.header.account_tag)

    if opts["stats"]:
        header = slab.header
        renderer.render_summary({
            "market": header.market_pubkey,
            "account_tag": header.account_tag,
            "leaf_count": header.leaf_count,
            "root_node": header.root_node,
            "bump_index": header.bump_index,
            "free_list_len": header.free_list_len,
            "free_list_head": header.free_list_head,
            "slot_size": slab.slot_size,
            "slot_count": slab.slot_count,
            "free_slots_walked": sum(1 for _ in slab.free_slots()),
        })
    if opts["depth"] is not None:
        renderer.render_levels(l2_depth(slab, opts["depth"], side))
    if opts["orders"] is not None:
        renderer.render_orders(top_n(slab, opts["orders"], side))
    if opts["min"]:
        renderer.render_orders(_present(min_leaf(slab)))
    if opts["max"]:
        renderer.render_orders(_present(max_leaf(slab)))
    if opts["lookup"] is not None:
        renderer.render_orders(_present(lookup(slab, opts["lookup"])))


def _present(leaf):
    return [] if leaf is None else [leaf]


def main(argv=None) -> int:
    """Parse CLI arguments and dispatch. Returns the process exit code."""
    args = sys.argv[1:] if argv is None else argv

    if "--help" in args or "-h" in args:
        print_help()
        return 0

    renderer = Renderer()
    try:
        config = ReaderConfig.from_env()
        logging.basicConfig(
            level=config.log_level_int,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )
        opts = parse_args(args, config)
    except (UsageError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        print_help()
        return 2

    try:
        run(opts, config, renderer)
    except Exception as e:
        logger.debug("query failed", exc_info=True)
        Renderer(output=sys.stderr).render_error(e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
