from __future__ import annotations
import argparse
import sys
import time
from ..config import SimConfig
from ..core.decoder import describe_address, format_address
from ..core.geometry import CACHE_SIZE_CHOICES, BLOCK_SIZE_CHOICES, valid_associativities
from ..errors import CacheVisError
from ..runtime.simulator import reset, run_all
from ..workload.patterns import AccessPattern, PATTERN_DESCRIPTIONS, generate
from ..utils import viz
from ..utils.logging import get_logger, set_verbosity
from ..utils.reporting import generate_report, print_summary

logger = get_logger(__name__)


def _parse_address(text: str) -> int:
    return int(text, 0)


def cmd_run(args):
    """Handles the 'run' command."""
    config = SimConfig.from_args(args)
    geometry = config.geometry()
    logger.info("Simulating %s on %s", config.pattern, geometry.describe())

    if args.addresses:
        addresses = args.addresses
    else:
        addresses = generate(
            config.pattern, geometry, config.length, seed=config.seed,
            max_addr=config.max_addr, word_size=config.word_size,
            stride_multiplier=config.stride_multiplier, pool_size=config.repeat_pool_size,
        )

    state = reset(geometry)
    for result in run_all(state, addresses):
        if args.trace:
            print(f"{format_address(result.address)} {'HIT ' if result.hit else 'MISS'} "
                  f"set={result.set_index} way={result.way} tag={result.tag:#x}")
        if config.delay_ms > 0:
            time.sleep(config.delay_ms / 1000.0)

    if args.ascii:
        print(viz.export_history_ascii(state.history, config.history_window))
        print(viz.export_occupancy_ascii(state.snapshot(), state.last_result))

    if config.report_dir:
        generate_report(state.history, geometry, state.stats, state.snapshot(), config)
    else:
        print_summary(geometry, state.stats)
    return state


def cmd_decode(args):
    """Handles the 'decode' command."""
    config = SimConfig.from_args(args)
    geometry = config.geometry()
    print(f"Cache: {geometry.describe()}")
    for address in args.address:
        print(describe_address(address, geometry))


def cmd_options(args):
    """Handles the 'options' command."""
    options = valid_associativities(args.cache_size_bytes, args.block_size_bytes)
    if not options:
        print(f"No valid associativity for {args.cache_size_bytes}B / {args.block_size_bytes}B")
        return
    for assoc, label in options:
        print(f"{str(assoc):>6}  {label}")


def _add_geometry_args(p):
    g = p.add_argument_group('Cache Geometry')
    g.add_argument("--cache-size", type=int, default=None, dest="cache_size_bytes",
                   help=f"Cache size in bytes (presets: {', '.join(map(str, CACHE_SIZE_CHOICES))})")
    g.add_argument("--block-size", type=int, default=None, dest="block_size_bytes",
                   help=f"Block size in bytes (presets: {', '.join(map(str, BLOCK_SIZE_CHOICES))})")
    g.add_argument("--assoc", type=str, default=None, dest="associativity",
                   help="Number of ways per set, or 'fully'")
    g.add_argument("--address-bits", type=int, default=None, dest="address_bits",
                   help="Width of the address register")


def build_parser():
    p = argparse.ArgumentParser(
        prog="cachevis",
        description="Set-associative LRU cache simulator",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log every access")
    sub = p.add_subparsers(dest="cmd", required=True)

    # --- Run Command ---
    pr = sub.add_parser("run", help="Simulate an access pattern",
                        formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    pr.add_argument("-c", "--config", type=str, default=None,
                    help="Path to YAML config file to override defaults")
    _add_geometry_args(pr)

    w = pr.add_argument_group('Workload')
    w.add_argument("--pattern", type=str, default=None,
                   choices=[pattern.value for pattern in AccessPattern],
                   help="; ".join(f"{k.value}: {v}" for k, v in PATTERN_DESCRIPTIONS.items()))
    w.add_argument("--length", type=int, default=None, help="Number of accesses to generate")
    w.add_argument("--seed", type=int, default=None, help="Seed for random and repeated patterns")
    w.add_argument("--max-addr", type=int, default=None, dest="max_addr",
                   help="Upper bound (exclusive) of generated addresses")
    w.add_argument("--addresses", type=_parse_address, nargs="+", default=None,
                   help="Explicit address sequence (overrides --pattern)")

    o = pr.add_argument_group('Output')
    o.add_argument("--report", type=str, default=None, dest="report_dir",
                   help="Directory to save report.json and report.html")
    o.add_argument("--ascii", action="store_true", help="Print the history and cache table")
    o.add_argument("--trace", action="store_true", help="Print each access as it happens")
    o.add_argument("--delay-ms", type=int, default=None, dest="delay_ms",
                   help="Pause between accesses, in milliseconds")
    o.add_argument("--window", type=int, default=None, dest="history_window",
                   help="Number of recent accesses shown in the ASCII history")
    pr.set_defaults(func=cmd_run)

    # --- Decode Command ---
    pd_ = sub.add_parser("decode", help="Split addresses into tag/index/offset",
                         formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    pd_.add_argument("-c", "--config", type=str, default=None,
                     help="Path to YAML config file to override defaults")
    _add_geometry_args(pd_)
    pd_.add_argument("address", type=_parse_address, nargs="+",
                     help="Addresses (decimal or 0x-prefixed hex)")
    pd_.set_defaults(func=cmd_decode)

    # --- Options Command ---
    po = sub.add_parser("options", help="List associativities valid for a cache/block size")
    po.add_argument("cache_size_bytes", type=int)
    po.add_argument("block_size_bytes", type=int)
    po.set_defaults(func=cmd_options)

    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbosity(args.verbose)
    try:
        args.func(args)
    except CacheVisError as e:
        logger.error("%s", e)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
