"""
dex/adapters/ - Venue adapters.

Adapters:
- base: VenueAdapter contract and SwapParams
- uniswap_v2: constant-product reference adapter (Uniswap V2 / SushiSwap V2)
"""

from dex.adapters.base import SwapParams, VenueAdapter
from dex.adapters.uniswap_v2 import Pair, UniswapV2Adapter

__all__ = [
    "SwapParams",
    "VenueAdapter",
    "Pair",
    "UniswapV2Adapter",
]
