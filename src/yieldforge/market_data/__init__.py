from .defillama import MIN_POOL_TVL_USD, PoolFilter, UpstreamUnavailableError
from .gateway import MarketDataGateway

__all__ = [
    "MIN_POOL_TVL_USD",
    "MarketDataGateway",
    "PoolFilter",
    "UpstreamUnavailableError",
]
