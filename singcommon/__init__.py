"""Building blocks for network proxy software: buffers, errors, addresses, ABX reading, matchers, caches and timers."""

__version__ = "0.1.0"