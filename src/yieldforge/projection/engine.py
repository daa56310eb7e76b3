"""
Harvest simulation and yield projections - PURE MATH, NO LLM.

Live inputs (gas price, ETH price, pool APYs) are fetched by the caller and
passed in, so every function here is deterministic.
"""
from dataclasses import dataclass, field

from pydantic import BaseModel, Field

from yieldforge.risk.types import IlRisk, PoolRecord

# Typical DeFi transaction
GAS_UNITS_PER_REBALANCE = 150_000
FALLBACK_GAS_PER_REBALANCE_USD = 5.0
REBALANCE_INTERVAL_DAYS = 7
CHECKPOINT_DAYS = (7, 30, 90, 365)

FALLBACK_APY = 12.0
FALLBACK_POOL = PoolRecord(
    pool_id="fallback",
    protocol="fallback",
    pool_symbol="FALLBACK",
    chain="unknown",
    apy=FALLBACK_APY,
    tvl_usd=0.0,
    is_stablecoin=False,
    il_risk=IlRisk.UNKNOWN,
)


class EmptySelectionError(ValueError):
    """Raised when a simulation has no resolvable pools."""


class SimulationInput(BaseModel):
    """
    Validated simulation request.

    Attributes:
        principal_usd: Initial investment in USD, must be positive
        duration_days: Simulation length, 1 to 365 days
        pool_selections: Pool ids or names to simulate (1 to 5)
        auto_compound: Compound daily instead of simple interest
    """

    principal_usd: float = Field(..., gt=0)
    duration_days: int = Field(..., ge=1, le=365)
    pool_selections: list[str] = Field(..., min_length=1, max_length=5)
    auto_compound: bool = True


@dataclass(frozen=True)
class SimulationResult:
    final_amount_usd: float
    gross_profit_usd: float
    gas_cost_usd: float
    net_profit_usd: float
    roi_percent: float
    avg_apy: float
    rebalance_count: int
    gas_per_rebalance_usd: float
    checkpoints: dict[int, float] = field(default_factory=dict)
    pools_used: tuple[PoolRecord, ...] = ()


def average_apy(pools: list[PoolRecord]) -> float:
    if not pools:
        msg = "No matching pools found for simulation"
        raise EmptySelectionError(msg)
    return sum(p.apy for p in pools) / len(pools)


def compound_amount(principal: float, apy: float, days: int) -> float:
    daily_rate = apy / 100 / 365
    return principal * (1 + daily_rate) ** days


def simple_amount(principal: float, apy: float, days: int) -> float:
    return principal + principal * apy / 100 * days / 365


def estimate_gas_per_rebalance_usd(gas_price_wei: int, eth_price_usd: float) -> float:
    """
    Convert a live gas price into the USD cost of one rebalance.

    Formula: cost = gas_price_wei × GAS_UNITS_PER_REBALANCE / 1e18 × ETH/USD
    """
    cost_eth = gas_price_wei * GAS_UNITS_PER_REBALANCE / 1e18
    return cost_eth * eth_price_usd


def rebalance_count(duration_days: int) -> int:
    return duration_days // REBALANCE_INTERVAL_DAYS


def resolve_pools(selections: list[str], pools: list[PoolRecord]) -> list[PoolRecord]:
    """
    Resolve user selections against fetched pools.

    Each selection matches a pool id exactly, or else the first pool whose
    symbol or project contains it (case-insensitive). Unmatched selections
    are dropped.
    """
    by_id = {p.pool_id: p for p in pools}
    resolved: list[PoolRecord] = []
    for selection in selections:
        if selection in by_id:
            resolved.append(by_id[selection])
            continue
        needle = selection.lower()
        match = next(
            (
                p
                for p in pools
                if needle in p.pool_symbol.lower() or needle in p.protocol.lower()
            ),
            None,
        )
        if match is not None:
            resolved.append(match)
    return resolved


def simulate(
    sim_input: SimulationInput,
    resolved_pools: list[PoolRecord],
    gas_per_rebalance_usd: float,
) -> SimulationResult:
    """
    Project the outcome of holding ``principal_usd`` across the resolved pools.

    Args:
        sim_input: Validated simulation request
        resolved_pools: Pools whose mean APY drives the projection
        gas_per_rebalance_usd: Cost of one weekly rebalance

    Returns:
        SimulationResult including checkpoint projections at 7/30/90/365 days.
        Checkpoints always compound from day 0 regardless of ``duration_days``.

    Raises:
        EmptySelectionError: If ``resolved_pools`` is empty
    """
    avg_apy = average_apy(resolved_pools)
    principal = sim_input.principal_usd
    days = sim_input.duration_days

    if sim_input.auto_compound:
        final_amount = compound_amount(principal, avg_apy, days)
    else:
        final_amount = simple_amount(principal, avg_apy, days)

    rebalances = rebalance_count(days)
    gas_cost = rebalances * gas_per_rebalance_usd

    gross_profit = final_amount - principal
    net_profit = gross_profit - gas_cost
    roi = net_profit / principal * 100

    return SimulationResult(
        final_amount_usd=final_amount,
        gross_profit_usd=gross_profit,
        gas_cost_usd=gas_cost,
        net_profit_usd=net_profit,
        roi_percent=roi,
        avg_apy=avg_apy,
        rebalance_count=rebalances,
        gas_per_rebalance_usd=gas_per_rebalance_usd,
        checkpoints={d: compound_amount(principal, avg_apy, d) for d in CHECKPOINT_DAYS},
        pools_used=tuple(resolved_pools),
    )


def project_returns(amount_usd: float, apy: float) -> dict[str, float]:
    """Simple-interest dollar returns per day, month and year."""
    yearly = amount_usd * (apy / 100)
    return {
        "daily": yearly / 365,
        "monthly": yearly / 12,
        "yearly": yearly,
    }
