"""rsiscan — application entry point.

Boots the FastAPI internal server and provides the CLI entry point for
one-off scans.
"""

import logging

from fastapi import FastAPI

from rsiscan.api.routers import router

app = FastAPI(title="rsiscan Internal API", version="0.1.0")
app.include_router(router)

logger = logging.getLogger("rsiscan")


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


# ── CLI ──────────────────────────────────────────────────────────────────


def _run_cli() -> None:
    """Parse CLI arguments and either run one scan or serve the API."""
    import argparse
    import asyncio
    from dataclasses import replace

    from rsiscan.api.routers import configure_routers
    from rsiscan.cli.report import format_results
    from rsiscan.config import load_config
    from rsiscan.market.cache import BarCache, CachedFetcher
    from rsiscan.market.providers import make_provider
    from rsiscan.scanner.batch import BatchScanner
    from rsiscan.scanner.filters import passing_results
    from rsiscan.scanner.models import DEFAULT_UNIVERSE, ScanConfig

    parser = argparse.ArgumentParser(description="RSI signal backtest scanner")
    parser.add_argument("--symbols", help="Comma-separated tickers")
    parser.add_argument("--period", type=int, default=14)
    parser.add_argument("--oversold", type=float, default=50.0)
    parser.add_argument("--overbought", type=float, default=70.0)
    parser.add_argument(
        "--horizon", choices=["single", "dual"], default="dual",
    )
    parser.add_argument(
        "--mode", choices=["edge", "sustained"], default="sustained",
    )
    parser.add_argument("--min-win-rate", type=float, default=None)
    parser.add_argument("--min-signals", type=int, default=None)
    parser.add_argument(
        "--in-zone-only",
        action="store_true",
        help="Only list instruments currently in the signal zone",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Serve the /scan API instead of running one scan",
    )
    args = parser.parse_args()

    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    provider = make_provider(config)
    cache = BarCache(ttl_seconds=config.cache_ttl_seconds)
    fetch = CachedFetcher(provider.fetch_series, cache, provider.source)

    if args.serve:
        import uvicorn

        configure_routers(
            fetch,
            data_source=config.data_source_label,
            batch_size=config.batch_size,
            batch_delay_seconds=config.batch_delay_seconds,
        )
        logger.info("API available at http://localhost:%d", config.api_port)
        uvicorn.run(app, host="0.0.0.0", port=config.api_port, log_level="info")
        return

    scan_config = ScanConfig(
        period=args.period,
        oversold=args.oversold,
        overbought=args.overbought,
        horizon=args.horizon,
        mode=args.mode,
        min_win_rate=args.min_win_rate,
        min_signals=args.min_signals,
        in_zone_only=args.in_zone_only,
        batch_size=config.batch_size,
        batch_delay_seconds=config.batch_delay_seconds,
    )
    symbols = args.symbols.split(",") if args.symbols else list(DEFAULT_UNIVERSE)
    scanner = BatchScanner(scan_config, fetch, data_source=config.data_source_label)
    response = asyncio.run(scanner.scan(symbols))
    format_results(replace(response, results=passing_results(response)))


if __name__ == "__main__":
    _run_cli()
