"""rsiscan — exception taxonomy.

Insufficient data is never an exception: short series produce empty
oscillator output and zeroed metrics.
"""


class RsiScanError(Exception):
    """Base class for all rsiscan errors."""


class ConfigurationError(RsiScanError, ValueError):
    """Invalid scan parameters.  Raised before any fetching begins."""


class ProviderError(RsiScanError):
    """An upstream market-data fetch failed for one instrument."""


class CombinerIncompleteDataError(RsiScanError):
    """Dual-horizon scoring was requested but one horizon has no bars."""
