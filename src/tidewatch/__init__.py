"""
Tidewatch - liquidity regime monitor.

Acquires macroeconomic series and a crypto spot price from unreliable upstream
sources, reconciles failures against a local cache and derives a composite
liquidity regime score.
"""

__version__ = "0.1.0"
