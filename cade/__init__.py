"""
CADE package
============

This package contains the Campaign Discovery Engine (CADE): filtering,
search, sorting and "load more" pagination over an in-memory catalog of
crowdfunding campaigns.

- The CLI entry point is in `cade/cli.py`.
- The pure pipeline (`compute_view`) and the interactive session are in `cade/engine.py`.
- Catalog loading is in `cade/loader.py`.
"""

from .engine import DiscoverySession, DiscoveryView, compute_view
from .filters import ALL_LOCATIONS, DEFAULT_FUNDING_RANGE, FilterState
from .sorting import SortState

__version__ = '0.1.0'

__all__ = [
    "ALL_LOCATIONS",
    "DEFAULT_FUNDING_RANGE",
    "DiscoverySession",
    "DiscoveryView",
    "FilterState",
    "SortState",
    "compute_view",
]
