"""Terminal views over the report chain."""

from civicledger.monitor.renderer import ChainRenderer

__all__ = ["ChainRenderer"]
