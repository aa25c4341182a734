"""CLI report — prints ranked scan results to the console."""

from rsiscan.scanner.models import ScanResponse
from rsiscan.signals.indicators import rsi_status


def format_results(response: ScanResponse) -> str:
    """Format and print a ranked results table.

    Returns:
        The formatted string (also printed to stdout).
    """
    cfg = response.config
    lines = [
        "──────────────── rsiscan results ────────────────",
        f"  Source:     {response.data_source or 'N/A'}",
        f"  RSI:        period {cfg.period}, "
        f"oversold {cfg.oversold:g}, overbought {cfg.overbought:g}",
        f"  Scanned at: {response.timestamp}",
        "",
        f"  {'Symbol':<8}{'Score':>6}{'Price':>11}{'RSI':>8}"
        f"{'Signals':>9}{'Win%':>7}  {'Status':<8}Zone",
    ]
    for r in response.results:
        if r.error:
            lines.append(f"  {r.symbol:<8}{'-':>6}  error: {r.error}")
            continue
        zone = "yes" if r.in_zone else ""
        status = rsi_status(r.current_rsi, cfg.oversold, cfg.overbought)
        lines.append(
            f"  {r.symbol:<8}{r.combined_score:>6}{r.current_price:>11.2f}"
            f"{r.current_rsi:>8.1f}{r.short_term.total_signals:>9}"
            f"{r.short_term.win_rate_at_target_a:>7.0f}  {status:<8}{zone}"
        )
    lines.append("──────────────────────────────────────────────────")
    output = "\n".join(lines)
    print(output)
    return output
