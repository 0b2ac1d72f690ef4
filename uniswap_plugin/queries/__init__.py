"""
Subgraph data access
"""

from .dex_data_query import DexDataQuery

__all__ = ["DexDataQuery"]
