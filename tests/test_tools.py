"""Tests for the tool executors run on top of a fake gateway."""
import pytest

from yieldforge.agent.intents import GatewayCall, Intent, route
from yieldforge.agent.tools import ToolExecutor, format_tvl
from yieldforge.market_data.defillama import UpstreamUnavailableError
from yieldforge.projection.engine import FALLBACK_APY, FALLBACK_GAS_PER_REBALANCE_USD
from yieldforge.risk.types import RiskTolerance

from .conftest import WALLET_ADDRESS


@pytest.mark.parametrize(
    ("tvl", "text"),
    [
        (2_500_000_000, "$2.50B"),
        (33_000_000, "$33.00M"),
        (1_500, "$1.50K"),
        (12.5, "$12.50"),
    ],
)
def test_format_tvl(tvl, text):
    assert format_tvl(tvl) == text


class TestScanAndLookups:
    def test_scan_pools(self, fake_gateway):
        result = ToolExecutor(fake_gateway()).scan_pools()
        assert result["pools_found"] == 2
        assert [p["pool_id"] for p in result["pools"]] == ["p-frax-sfrxeth", "p-curve-frax"]
        assert [p["risk_score"] for p in result["pools"]] == [6, 2]
        assert result["filters"]["max_risk"] == "medium"

    def test_scan_pools_upstream_failure(self, fake_gateway):
        gateway = fake_gateway(pools_error=UpstreamUnavailableError("DeFiLlama down"))
        result = ToolExecutor(gateway).scan_pools()
        assert result == {"error": "Failed to fetch yield pools", "message": "DeFiLlama down"}

    def test_spot_price(self, fake_gateway):
        result = ToolExecutor(fake_gateway()).spot_price()
        assert result["price_usd"] == 2000.0
        assert result["source"] == "CoinGecko API"

    def test_spot_price_fallback_is_labelled(self, fake_gateway):
        result = ToolExecutor(fake_gateway(spot_price=2500.0, spot_live=False)).spot_price()
        assert result["price_usd"] == 2500.0
        assert result["source"] == "fallback"

    def test_frax_pools(self, fake_gateway):
        result = ToolExecutor(fake_gateway()).frax_pools()
        assert result["frax_pools_found"] == 2
        assert result["total_frax_tvl"] == "$33.00M"
        assert all(p["krwq_compatible"] for p in result["pools"])

    def test_market_summary(self, fake_gateway):
        result = ToolExecutor(fake_gateway()).market_summary()
        assert result["market_overview"]["total_pools"] == 6
        assert result["market_overview"]["active_chains"] == 3
        assert result["top_protocols"][0] == {"protocol": "aave-v3", "tvl": "$450.00M"}

    def test_market_summary_failure(self, fake_gateway):
        gateway = fake_gateway(pools_error=UpstreamUnavailableError("timeout"))
        result = ToolExecutor(gateway).market_summary()
        assert result["error"] == "Failed to fetch market conditions"


class TestSimulateHarvest:
    def test_live_data(self, fake_gateway):
        result = ToolExecutor(fake_gateway()).simulate_harvest(1000.0, 30)
        assert result["success"] is True
        assert result["strategy"]["avg_apy"] == 10.25
        assert result["strategy"]["total_rebalances"] == 4
        # 1 gwei * 150k gas * $2000
        assert result["data_sources"] == {
            "apy": "live",
            "gas": "live",
            "gas_per_rebalance_usd": 0.3,
        }
        assert result["simulation"]["gas_cost_usd"] == 1.2
        assert set(result["projections"]) == {"day7", "day30", "day90", "day365"}

    def test_apy_fallback_when_pools_unavailable(self, fake_gateway):
        gateway = fake_gateway(pools_error=UpstreamUnavailableError("down"))
        result = ToolExecutor(gateway).simulate_harvest(1000.0, 30)
        assert result["success"] is True
        assert result["strategy"]["avg_apy"] == FALLBACK_APY
        assert result["data_sources"]["apy"] == "fallback"

    def test_gas_fallback_when_rpc_unavailable(self, fake_gateway, make_w3):
        gateway = fake_gateway(w3=make_w3(fail=("gas_price",)))
        result = ToolExecutor(gateway).simulate_harvest(1000.0, 14)
        assert result["data_sources"]["gas"] == "fallback"
        assert result["simulation"]["gas_cost_usd"] == 2 * FALLBACK_GAS_PER_REBALANCE_USD

    def test_gas_partial_when_eth_price_falls_back(self, fake_gateway):
        gateway = fake_gateway(spot_price=2500.0, spot_live=False)
        result = ToolExecutor(gateway).simulate_harvest(1000.0, 30)
        # live 1 gwei * 150k gas priced at the $2500 fallback
        assert result["data_sources"]["gas"] == "partial"
        assert result["data_sources"]["gas_per_rebalance_usd"] == 0.375
        assert "fetch_spot_quote:ETH" in gateway.calls

    def test_no_matching_pools(self, fake_gateway):
        result = ToolExecutor(fake_gateway(pools=[])).simulate_harvest(1000.0, 30)
        assert result == {"success": False, "error": "No matching pools found for simulation"}

    def test_unresolvable_selection(self, fake_gateway):
        result = ToolExecutor(fake_gateway()).simulate_harvest(
            1000.0, 30, pool_selections=["does-not-exist"]
        )
        assert result["success"] is False
        assert "No matching pools" in result["error"]

    def test_explicit_selection_by_name(self, fake_gateway):
        result = ToolExecutor(fake_gateway()).simulate_harvest(
            1000.0, 30, pool_selections=["velodrome"]
        )
        assert result["strategy"]["avg_apy"] == 35.0

    def test_invalid_input(self, fake_gateway):
        result = ToolExecutor(fake_gateway()).simulate_harvest(-5.0, 30)
        assert result["success"] is False
        assert result["error"] == "Invalid simulation input"


class TestNetworkStatus:
    def test_connected(self, fake_gateway):
        result = ToolExecutor(fake_gateway()).network_status()
        assert result["network"]["chain_id"] == 2522
        assert result["network"]["configured_chain_id"] == 2522
        assert result["gas_price_wei"] == "1000000000"
        assert result["wallet"]["configured"] is False

    def test_wallet(self, fake_gateway):
        result = ToolExecutor(fake_gateway(private_key="0x01")).network_status()
        assert result["wallet"]["address"] == WALLET_ADDRESS
        assert result["wallet"]["explorer"] == f"https://explorer.test/address/{WALLET_ADDRESS}"

    def test_unreachable(self, fake_gateway, make_w3):
        gateway = fake_gateway(w3=make_w3(fail=("block_number",)))
        result = ToolExecutor(gateway).network_status()
        assert result["error"] == "Failed to connect to Fraxtal Testnet"
        assert len(result["troubleshooting"]) == 3
        assert "network" not in result


class TestRiskProfile:
    def test_conservative(self, fake_gateway):
        result = ToolExecutor(fake_gateway()).risk_profile(RiskTolerance.CONSERVATIVE, 1000.0)
        assert [p["pool_id"] for p in result["recommendations"]] == [
            "p-curve-frax",
            "p-aave-usdc",
        ]
        assert result["projected_returns_usd"]["yearly"] == 63.5
        assert result["risk_profile"]["level"] == "conservative"

    def test_upstream_failure_keeps_profile(self, fake_gateway):
        gateway = fake_gateway(pools_error=UpstreamUnavailableError("down"))
        result = ToolExecutor(gateway).risk_profile(RiskTolerance.AGGRESSIVE, 1000.0)
        assert result["risk_profile"]["level"] == "aggressive"
        assert result["error"] == "Failed to fetch yield pools"


class TestRun:
    def test_results_keyed_by_intent(self, fake_gateway):
        results = ToolExecutor(fake_gateway()).run(route("show me frax yield"))
        assert list(results) == ["scan_pools", "frax_pools"]

    def test_no_calls(self, fake_gateway):
        gateway = fake_gateway()
        assert ToolExecutor(gateway).run([]) == {}
        assert gateway.calls == []

    def test_params_are_passed_through(self, fake_gateway):
        call = GatewayCall(Intent.SIMULATE_HARVEST, {"amount_usd": 500.0, "duration_days": 7})
        results = ToolExecutor(fake_gateway()).run([call])
        assert results["simulate_harvest"]["simulation"]["initial_investment_usd"] == 500.0
