"""CLI entry point for the market scanner.

Usage:
    python -m app analyze BTCUSDT --timeframe 4h
    python -m app scan momentum
    python -m app scan support_resistance --mode breakout --days 60
    python -m app scan-bullish --timeframe 4h
    python -m app top-picks --count 10
    python -m app hot-setups
"""

import argparse
import asyncio
import logging
import sys
from typing import Any

import orjson

from app.clients.binance_rest import BinanceRestClient
from app.config import Settings, get_settings
from app.services.analyzer import SymbolAnalyzer
from app.services.confluence import ConfluenceAggregator
from app.services.scanners import build_scanners
from app.services.universe import UniverseProvider
from app.storage.kline_cache import KlineCache
from core.rules.registry import list_scanners

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m app",
        description="Technical analysis and multi-strategy market scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m app analyze BTCUSDT --timeframe 4h
  python -m app scan momentum --limit 10
  python -m app scan support_resistance --mode breakout --days 60
  python -m app top-picks --count 10
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Score one symbol")
    analyze.add_argument("symbol", type=str)
    analyze.add_argument("--timeframe", "-t", type=str, default="1h")
    analyze.add_argument("--limit", type=int, default=100, help="Candles to analyze")
    analyze.add_argument(
        "--with-candles", action="store_true", help="Include the candle series in the output"
    )

    scan = sub.add_parser("scan", help="Run one scanner")
    scan.add_argument("scanner", choices=list_scanners())
    scan.add_argument("--limit", type=int, default=None, help="Max results")
    scan.add_argument("--universe-size", type=int, default=None)
    scan.add_argument("--mode", choices=["bounce", "breakout"], default="bounce")
    scan.add_argument("--days", type=int, default=None, help="Support/resistance lookback")
    scan.add_argument("--timeframe", type=str, default=None, help="High-potential timeframe")

    bullish = sub.add_parser("scan-bullish", help="Bulk analysis of strongly bullish symbols")
    bullish.add_argument(
        "--symbols", type=str, default=None,
        help="Comma-separated symbols (default: top volume universe)",
    )
    bullish.add_argument("--timeframe", "-t", type=str, default="4h")
    bullish.add_argument("--min-score", type=int, default=10)

    top = sub.add_parser("top-picks", help="Confluence of every bullish scanner")
    top.add_argument("--count", type=int, default=None)
    top.add_argument("--min-score", type=int, default=None)

    hot = sub.add_parser("hot-setups", help="Breakouts, volume spikes and momentum")
    hot.add_argument("--count", type=int, default=None)
    hot.add_argument("--min-score", type=int, default=None)

    return parser.parse_args(argv)


def emit(payload: Any) -> None:
    """Write a pydantic model (or a list of them) as indented JSON."""
    if isinstance(payload, list):
        data = [item.model_dump(mode="json") for item in payload]
    else:
        data = payload.model_dump(mode="json")
    sys.stdout.buffer.write(orjson.dumps(data, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")


async def run(args: argparse.Namespace, settings: Settings) -> None:
    client = BinanceRestClient(
        base_url=settings.binance_base_url,
        timeout=settings.request_timeout,
        calls_per_minute=settings.calls_per_minute,
    )
    cache = KlineCache(ttl=settings.kline_cache_ttl, max_size=settings.kline_cache_max_size)
    analyzer = SymbolAnalyzer(
        client,
        cache,
        seed=settings.analyzer_seed,
        batch_size=settings.scan_batch_size,
        batch_delay=settings.scan_batch_delay,
    )
    universe = UniverseProvider(client, settings.fallback_symbols)
    scanners = build_scanners(
        analyzer, universe, settings.scan_batch_size, settings.scan_batch_delay
    )

    try:
        if args.command == "analyze":
            analysis = await analyzer.analyze_symbol(args.symbol, args.timeframe, args.limit)
            if not args.with_candles:
                analysis = analysis.model_copy(update={"candles": []})
            emit(analysis)

        elif args.command == "scan":
            params = {"limit": args.limit, "universe_size": args.universe_size}
            if args.scanner == "support_resistance":
                params.update(mode=args.mode, days=args.days)
            elif args.scanner == "high_potential":
                params.update(timeframe=args.timeframe)
            emit(await scanners[args.scanner].scan(**params))

        elif args.command == "scan-bullish":
            if args.symbols:
                symbols = [s.strip().upper() for s in args.symbols.split(",") if s.strip()]
            else:
                symbols = [t.symbol for t in await universe.top_volume(settings.universe_size)]
            results = await analyzer.scan_bullish(
                symbols, args.timeframe, min_score=args.min_score
            )
            emit([r.model_copy(update={"candles": []}) for r in results])

        elif args.command in ("top-picks", "hot-setups"):
            aggregator = ConfluenceAggregator(scanners)
            if args.command == "top-picks":
                records = await aggregator.top_picks(args.count, args.min_score)
            else:
                records = await aggregator.hot_setups(args.count, args.min_score)
            emit(records)
    finally:
        await client.close()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = get_settings()

    level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    asyncio.run(run(args, settings))


if __name__ == "__main__":
    main()
