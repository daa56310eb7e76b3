"""
Shared fixtures for the YieldForge test suite.

Outbound HTTP is replaced with ``unittest.mock`` sessions and web3 with a
mocked client, so no test touches the network.
"""
from unittest.mock import Mock, PropertyMock

import pytest

from yieldforge.fraxtal.provider import FraxtalProvider
from yieldforge.market_data.coingecko import SpotQuote, coin_id_for
from yieldforge.market_data.defillama import normalize_pool
from yieldforge.market_data.gateway import MarketDataGateway

# Scores: aave 2, curve 2, frax-ether 6, velodrome 7, degen 10, dust 9
RAW_POOLS = [
    {
        "pool": "p-aave-usdc",
        "project": "aave-v3",
        "symbol": "USDC",
        "chain": "Ethereum",
        "apy": 4.2,
        "tvlUsd": 450_000_000,
        "stablecoin": True,
        "ilRisk": "no",
    },
    {
        "pool": "p-curve-frax",
        "project": "curve-dex",
        "symbol": "FRAX-USDC",
        "chain": "Ethereum",
        "apy": 8.5,
        "tvlUsd": 25_000_000,
        "stablecoin": True,
        "ilRisk": "no",
    },
    {
        "pool": "p-frax-sfrxeth",
        "project": "frax-ether",
        "symbol": "SFRXETH",
        "chain": "Ethereum",
        "apy": 12.0,
        "tvlUsd": 8_000_000,
        "stablecoin": False,
        "ilRisk": "no",
    },
    {
        "pool": "p-velo-weth",
        "project": "velodrome-v2",
        "symbol": "WETH-OP",
        "chain": "Optimism",
        "apy": 35.0,
        "tvlUsd": 6_000_000,
        "stablecoin": False,
        "ilRisk": "yes",
    },
    {
        "pool": "p-degen",
        "project": "degen-farm",
        "symbol": "PEPE-WETH",
        "chain": "Base",
        "apy": 180.0,
        "tvlUsd": 500_000,
        "stablecoin": False,
        "ilRisk": "yes",
    },
    {
        "pool": "p-dust",
        "project": "tiny-dex",
        "symbol": "ABC-XYZ",
        "chain": "Base",
        "apy": 22.0,
        "tvlUsd": 50_000,
        "stablecoin": False,
        "ilRisk": None,
    },
]

WALLET_ADDRESS = "0x000000000000000000000000000000000000dead"


@pytest.fixture
def raw_pools():
    return [dict(r) for r in RAW_POOLS]


@pytest.fixture
def sample_pools(raw_pools):
    return [normalize_pool(r) for r in raw_pools]


@pytest.fixture
def make_w3():
    """Factory for a mocked Web3 client; pass ``fail`` to break a chain read."""

    def _make(
        chain_id=2522,
        block_number=1_234_567,
        gas_price=1_000_000_000,
        balance=2 * 10**18,
        fail=(),
    ):
        w3 = Mock()
        values = {
            "chain_id": chain_id,
            "block_number": block_number,
            "gas_price": gas_price,
        }
        for name, value in values.items():
            if name in fail:
                setattr(
                    type(w3.eth),
                    name,
                    PropertyMock(side_effect=ConnectionError(f"{name} unreachable")),
                )
            else:
                setattr(w3.eth, name, value)
        if "get_balance" in fail:
            w3.eth.get_balance.side_effect = ConnectionError("balance unreachable")
        else:
            w3.eth.get_balance.return_value = balance
        w3.eth.account.from_key.return_value.address = WALLET_ADDRESS
        return w3

    return _make


class FakeGateway(MarketDataGateway):
    """Gateway serving fixed pools and price; chain reads go to a mocked w3."""

    def __init__(
        self, fraxtal, pools=None, pools_error=None, spot_price=2000.0, spot_live=True
    ):
        super().__init__(
            session=Mock(),
            fraxtal=fraxtal,
            defillama_base_url="http://llama.test",
            coingecko_base_url="http://gecko.test",
        )
        self.pools = pools or []
        self.pools_error = pools_error
        self.spot_price = spot_price
        self.spot_live = spot_live
        self.calls = []

    def fetch_all_pools(self):
        self.calls.append("fetch_all_pools")
        if self.pools_error is not None:
            raise self.pools_error
        return list(self.pools)

    def fetch_spot_quote(self, symbol="ETH"):
        self.calls.append(f"fetch_spot_quote:{symbol}")
        return SpotQuote(coin_id_for(symbol), self.spot_price, live=self.spot_live)

    def fetch_network_status(self):
        self.calls.append("fetch_network_status")
        return super().fetch_network_status()


@pytest.fixture
def fake_gateway(make_w3, sample_pools):
    """Factory for a FakeGateway; keyword arguments override the defaults."""

    def _make(
        pools=None, pools_error=None, w3=None, private_key="", spot_price=2000.0, spot_live=True
    ):
        fraxtal = FraxtalProvider(
            rpc_url="http://fraxtal.test",
            chain_id=2522,
            explorer_url="https://explorer.test/",
            private_key=private_key,
            w3=w3 or make_w3(),
        )
        return FakeGateway(
            fraxtal,
            pools=sample_pools if pools is None else pools,
            pools_error=pools_error,
            spot_price=spot_price,
            spot_live=spot_live,
        )

    return _make
