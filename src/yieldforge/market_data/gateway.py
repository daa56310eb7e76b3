"""
Market-Data Gateway

Single entry point for every outbound data source the agent uses:
DeFiLlama yield pools, CoinGecko spot prices and Fraxtal JSON-RPC reads.

Failure policy differs by source. Pool lookups raise UpstreamUnavailableError,
spot prices fall back to a hard-coded value, and chain reads raise
NetworkUnavailableError. Nothing is cached or retried.
"""
from __future__ import annotations

from typing import Any

import requests
import structlog

from yieldforge.fraxtal.provider import FraxtalProvider, NetworkStatus
from yieldforge.risk.types import PoolRecord

from .coingecko import SpotQuote, get_spot_quote
from .defillama import (
    PoolFilter,
    fetch_raw_pools,
    filter_frax_pools,
    filter_pools,
    normalize_pool,
    summarize_market,
)

logger = structlog.get_logger(__name__)


class MarketDataGateway:
    """
    Facade over the REST and RPC data sources.

    Attributes:
        session (requests.Session): Shared HTTP session for REST calls
        fraxtal (FraxtalProvider): JSON-RPC reader for the Fraxtal testnet
        defillama_base_url (str): Base URL of the DeFiLlama yields API
        coingecko_base_url (str): Base URL of the CoinGecko API
        timeout (float): Per-request HTTP timeout in seconds
    """

    def __init__(
        self,
        session: requests.Session,
        fraxtal: FraxtalProvider,
        defillama_base_url: str,
        coingecko_base_url: str,
        timeout: float = 15.0,
    ) -> None:
        self.session = session
        self.fraxtal = fraxtal
        self.defillama_base_url = defillama_base_url
        self.coingecko_base_url = coingecko_base_url
        self.timeout = timeout
        self.logger = logger.bind(service="market_data")

    def fetch_all_pools(self) -> list[PoolRecord]:
        raw = fetch_raw_pools(self.session, self.defillama_base_url, self.timeout)
        return [normalize_pool(r) for r in raw]

    def fetch_pools(self, pool_filter: PoolFilter, limit: int = 20) -> list[PoolRecord]:
        pools = filter_pools(self.fetch_all_pools(), pool_filter, limit)
        self.logger.debug(
            "pools_filtered",
            min_apy=pool_filter.min_apy,
            max_risk=pool_filter.max_risk_bucket.value,
            returned=len(pools),
        )
        return pools

    def fetch_frax_pools(self, limit: int = 10) -> list[PoolRecord]:
        return filter_frax_pools(self.fetch_all_pools(), limit)

    def market_summary(self, top: int = 10) -> dict[str, Any]:
        return summarize_market(self.fetch_all_pools(), top)

    def fetch_spot_quote(self, symbol: str = "ETH") -> SpotQuote:
        return get_spot_quote(self.session, self.coingecko_base_url, symbol, self.timeout)

    def fetch_spot_price_usd(self, symbol: str = "ETH") -> float:
        return self.fetch_spot_quote(symbol).price_usd

    def fetch_gas_price_wei(self) -> int:
        return self.fraxtal.gas_price_wei()

    def fetch_block_number(self) -> int:
        return self.fraxtal.block_number()

    def fetch_chain_id(self) -> int:
        return self.fraxtal.chain_id()

    def fetch_network_status(self) -> NetworkStatus:
        return self.fraxtal.network_status()
