from .engine import (
    EmptySelectionError,
    SimulationInput,
    SimulationResult,
    estimate_gas_per_rebalance_usd,
    project_returns,
    resolve_pools,
    simulate,
)

__all__ = [
    "EmptySelectionError",
    "SimulationInput",
    "SimulationResult",
    "estimate_gas_per_rebalance_usd",
    "project_returns",
    "resolve_pools",
    "simulate",
]
