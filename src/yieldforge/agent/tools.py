"""
Tool executors.

Turn routed GatewayCalls into JSON-ready payloads for the response composer:
fetch from the Market-Data Gateway, run the risk scorer or projection engine,
and convert recoverable upstream failures into structured error payloads.
"""
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import ValidationError

from yieldforge.fraxtal.provider import (
    ALTERNATE_RPC_URL,
    FAUCET_URL,
    NetworkUnavailableError,
)
from yieldforge.market_data.defillama import PoolFilter, UpstreamUnavailableError
from yieldforge.market_data.gateway import MarketDataGateway
from yieldforge.projection.engine import (
    FALLBACK_GAS_PER_REBALANCE_USD,
    FALLBACK_POOL,
    REBALANCE_INTERVAL_DAYS,
    EmptySelectionError,
    SimulationInput,
    SimulationResult,
    estimate_gas_per_rebalance_usd,
    project_returns,
    resolve_pools,
    simulate,
)
from yieldforge.risk.scorer import score_risk
from yieldforge.risk.tiers import profile_payload, recommend_for_profile, summarize
from yieldforge.risk.types import PoolRecord, RiskBucket, RiskTolerance

from .intents import GatewayCall, Intent

logger = structlog.get_logger(__name__)

SCAN_POOL_FILTER = PoolFilter(min_apy=5.0, max_risk_bucket=RiskBucket.MEDIUM)
SCAN_POOL_LIMIT = 10
SIMULATION_POOL_COUNT = 3
KRWQ_CHAINS = ("base", "ethereum")
DISCLAIMER = (
    "Projections based on current market data. "
    "Past performance does not guarantee future results."
)


def now_iso() -> str:
    return datetime.now(UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def format_tvl(tvl: float) -> str:
    if tvl >= 1_000_000_000:
        return f"${tvl / 1_000_000_000:.2f}B"
    if tvl >= 1_000_000:
        return f"${tvl / 1_000_000:.2f}M"
    if tvl >= 1_000:
        return f"${tvl / 1_000:.2f}K"
    return f"${tvl:.2f}"


def pool_payload(pool: PoolRecord) -> dict[str, Any]:
    assessment = score_risk(pool)
    return {
        "pool_id": pool.pool_id,
        "protocol": pool.protocol,
        "pool": pool.pool_symbol,
        "chain": pool.chain,
        "apy": round(pool.apy, 2),
        "tvl": format_tvl(pool.tvl_usd),
        "stablecoin": pool.is_stablecoin,
        "il_risk": pool.il_risk.value,
        "risk_score": assessment.score,
        "risk_bucket": assessment.bucket.value,
    }


def simulation_payload(
    sim_input: SimulationInput,
    result: SimulationResult,
    apy_source: str,
    gas_source: str,
) -> dict[str, Any]:
    return {
        "success": True,
        "simulation": {
            "duration_days": sim_input.duration_days,
            "initial_investment_usd": round(sim_input.principal_usd, 2),
            "final_amount_usd": round(result.final_amount_usd, 2),
            "gross_profit_usd": round(result.gross_profit_usd, 2),
            "gas_cost_usd": round(result.gas_cost_usd, 2),
            "net_profit_usd": round(result.net_profit_usd, 2),
            "roi_percent": round(result.roi_percent, 2),
        },
        "strategy": {
            "pools": [pool_payload(p) for p in result.pools_used],
            "avg_apy": round(result.avg_apy, 2),
            "auto_compound": sim_input.auto_compound,
            "rebalance_interval_days": REBALANCE_INTERVAL_DAYS,
            "total_rebalances": result.rebalance_count,
        },
        "projections": {
            f"day{d}": round(amount, 2) for d, amount in result.checkpoints.items()
        },
        "data_sources": {
            "apy": apy_source,
            "gas": gas_source,
            "gas_per_rebalance_usd": round(result.gas_per_rebalance_usd, 4),
        },
        "disclaimer": DISCLAIMER,
    }


class ToolExecutor:
    """
    Runs GatewayCalls against the Market-Data Gateway.

    Calls run one after another in the order given. Recoverable upstream
    failures become error payloads; anything else propagates to the caller.

    Attributes:
        gateway (MarketDataGateway): Data source facade shared by all requests
    """

    def __init__(self, gateway: MarketDataGateway) -> None:
        self.gateway = gateway
        self.logger = logger.bind(component="tools")
        self._handlers = {
            Intent.SCAN_POOLS: self.scan_pools,
            Intent.SPOT_PRICE: self.spot_price,
            Intent.FRAX_POOLS: self.frax_pools,
            Intent.SIMULATE_HARVEST: self.simulate_harvest,
            Intent.MARKET_SUMMARY: self.market_summary,
            Intent.NETWORK_STATUS: self.network_status,
            Intent.RISK_PROFILE: self.risk_profile,
        }

    def run(self, calls: list[GatewayCall]) -> dict[str, Any]:
        results: dict[str, Any] = {}
        for call in calls:
            self.logger.debug("tool_call", intent=call.intent.value, params=call.params)
            results[call.intent.value] = self._handlers[call.intent](**call.params)
        return results

    def scan_pools(self, pool_filter: PoolFilter = SCAN_POOL_FILTER) -> dict[str, Any]:
        try:
            pools = self.gateway.fetch_pools(pool_filter, limit=SCAN_POOL_LIMIT)
        except UpstreamUnavailableError as e:
            return {"error": "Failed to fetch yield pools", "message": str(e)}
        return {
            "timestamp": now_iso(),
            "pools_found": len(pools),
            "pools": [pool_payload(p) for p in pools],
            "filters": {
                "min_apy": pool_filter.min_apy,
                "max_risk": pool_filter.max_risk_bucket.value,
                "chain": pool_filter.chain,
                "protocols": list(pool_filter.protocol_names),
            },
            "source": "DeFiLlama",
        }

    def spot_price(self, symbol: str = "ETH") -> dict[str, Any]:
        quote = self.gateway.fetch_spot_quote(symbol)
        return {
            "symbol": symbol,
            "price_usd": round(quote.price_usd, 2),
            "currency": "USD",
            "source": "CoinGecko API" if quote.live else "fallback",
            "timestamp": now_iso(),
        }

    def frax_pools(self) -> dict[str, Any]:
        try:
            pools = self.gateway.fetch_frax_pools()
        except UpstreamUnavailableError as e:
            return {"error": "Failed to fetch Frax pools", "message": str(e)}
        return {
            "timestamp": now_iso(),
            "frax_pools_found": len(pools),
            "pools": [
                {**pool_payload(p), "krwq_compatible": p.chain.lower() in KRWQ_CHAINS}
                for p in pools
            ],
            "total_frax_tvl": format_tvl(sum(p.tvl_usd for p in pools)),
        }

    def _gas_per_rebalance(self) -> tuple[float, str]:
        """Return the USD gas cost per rebalance and its source: live, partial or fallback."""
        try:
            gas_price = self.gateway.fetch_gas_price_wei()
        except NetworkUnavailableError:
            self.logger.warning(
                "gas_price_fallback", fallback_usd=FALLBACK_GAS_PER_REBALANCE_USD
            )
            return FALLBACK_GAS_PER_REBALANCE_USD, "fallback"
        eth = self.gateway.fetch_spot_quote("ETH")
        # partial: live gas price priced at the fallback ETH price
        source = "live" if eth.live else "partial"
        return estimate_gas_per_rebalance_usd(gas_price, eth.price_usd), source

    def simulate_harvest(
        self,
        amount_usd: float,
        duration_days: int,
        pool_selections: list[str] | None = None,
        auto_compound: bool = True,
    ) -> dict[str, Any]:
        """
        Simulate a harvest strategy.

        Without explicit ``pool_selections`` the top pools of the default scan
        are used. When DeFiLlama is unreachable the fallback APY is used.
        """
        apy_source = "live"
        try:
            if pool_selections:
                candidates = self.gateway.fetch_all_pools()
            else:
                candidates = self.gateway.fetch_pools(
                    SCAN_POOL_FILTER, limit=SIMULATION_POOL_COUNT
                )
        except UpstreamUnavailableError:
            self.logger.warning("simulation_apy_fallback", apy=FALLBACK_POOL.apy)
            candidates = [FALLBACK_POOL]
            apy_source = "fallback"

        selections = pool_selections or [p.pool_id for p in candidates]
        if apy_source == "fallback":
            selections = [FALLBACK_POOL.pool_id]
        if not selections:
            return {"success": False, "error": "No matching pools found for simulation"}

        try:
            sim_input = SimulationInput(
                principal_usd=amount_usd,
                duration_days=duration_days,
                pool_selections=selections,
                auto_compound=auto_compound,
            )
        except ValidationError as e:
            return {"success": False, "error": "Invalid simulation input", "message": str(e)}

        gas_per_rebalance, gas_source = self._gas_per_rebalance()
        try:
            result = simulate(
                sim_input,
                resolve_pools(sim_input.pool_selections, candidates),
                gas_per_rebalance,
            )
        except EmptySelectionError as e:
            return {"success": False, "error": str(e)}
        return simulation_payload(sim_input, result, apy_source, gas_source)

    def market_summary(self) -> dict[str, Any]:
        try:
            summary = self.gateway.market_summary()
        except UpstreamUnavailableError as e:
            return {"error": "Failed to fetch market conditions", "message": str(e)}
        return {
            "timestamp": now_iso(),
            "market_overview": {
                "total_tvl": format_tvl(summary["total_tvl_usd"]),
                "avg_apy": round(summary["avg_apy"], 2),
                "total_pools": summary["total_pools"],
                "active_chains": summary["active_chains"],
            },
            "top_protocols": [
                {"protocol": p["protocol"], "tvl": format_tvl(p["tvl_usd"])}
                for p in summary["top_protocols"]
            ],
            "source": "DeFiLlama",
        }

    def network_status(self) -> dict[str, Any]:
        fraxtal = self.gateway.fraxtal
        try:
            status = self.gateway.fetch_network_status()
        except NetworkUnavailableError as e:
            return {
                "error": "Failed to connect to Fraxtal Testnet",
                "message": str(e),
                "troubleshooting": [
                    "Check your internet connection",
                    "Verify the RPC URL is accessible",
                    f"Try the alternative RPC: {ALTERNATE_RPC_URL}",
                ],
            }

        if status.wallet_configured:
            wallet = {
                "configured": True,
                "address": status.wallet_address,
                "balance": status.wallet_balance,
                "explorer": fraxtal.explorer_link("address", status.wallet_address or ""),
            }
        else:
            wallet = {
                "configured": False,
                "message": "No wallet configured. Set WALLET_PRIVATE_KEY for on-chain features.",
            }
        return {
            "network": {
                "name": "Fraxtal Testnet",
                "chain_id": status.chain_id,
                "configured_chain_id": fraxtal.configured_chain_id,
                "block_number": status.block_number,
                "rpc_url": fraxtal.rpc_url,
                "explorer": fraxtal.explorer_url,
            },
            "gas_price_wei": status.gas_price_wei,
            "wallet": wallet,
            "faucet": FAUCET_URL,
            "status": "Connected to Fraxtal Testnet",
            "timestamp": now_iso(),
        }

    def risk_profile(
        self,
        tolerance: RiskTolerance,
        amount_usd: float,
        target_apy: float | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"risk_profile": profile_payload(tolerance)}
        try:
            pools = self.gateway.fetch_all_pools()
        except UpstreamUnavailableError as e:
            payload.update({"error": "Failed to fetch yield pools", "message": str(e)})
            return payload

        recommendations = recommend_for_profile(pools, tolerance, target_apy=target_apy)
        payload["recommendations"] = [
            {**pool_payload(r.pool), "advice": r.advice, "rationale": r.assessment.rationale}
            for r in recommendations
        ]
        payload["summary"] = summarize(recommendations, tolerance)
        if recommendations:
            avg_apy = sum(r.pool.apy for r in recommendations) / len(recommendations)
            payload["projected_returns_usd"] = {
                k: round(v, 2) for k, v in project_returns(amount_usd, avg_apy).items()
            }
            payload["investment_usd"] = amount_usd
        return payload
