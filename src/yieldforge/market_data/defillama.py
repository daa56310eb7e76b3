from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import pandas as pd
import requests
import structlog

from yieldforge.risk.scorer import within_risk_bucket
from yieldforge.risk.types import IlRisk, PoolRecord, RiskBucket

logger = structlog.get_logger(__name__)

# Pools at or below this TVL are treated as dust
MIN_POOL_TVL_USD = 100_000

# DeFiLlama reports ilRisk as "no"/"yes"; older payloads use graded labels
IL_RISK_ALIASES = {
    "no": IlRisk.NONE,
    "none": IlRisk.NONE,
    "low": IlRisk.LOW,
    "yes": IlRisk.HIGH,
    "high": IlRisk.HIGH,
}

SUMMARY_COLUMNS = ["protocol", "chain", "apy", "tvl_usd"]


class UpstreamUnavailableError(RuntimeError):
    """Raised when a market-data REST endpoint cannot be reached or parsed."""


@dataclass(frozen=True)
class PoolFilter:
    min_apy: float = 0.0
    max_risk_bucket: RiskBucket = RiskBucket.HIGH
    chain: str | None = None
    protocol_names: tuple[str, ...] = ()


def fetch_raw_pools(
    session: requests.Session,
    base_url: str,
    timeout: float = 15.0,
) -> list[dict[str, Any]]:
    """
    Fetch every pool from the DeFiLlama yields API.

    Raises:
        UpstreamUnavailableError: On transport errors, HTTP errors or a
            payload without a ``data`` list
    """
    url = f"{base_url.rstrip('/')}/pools"
    try:
        r = session.get(url, timeout=timeout)
        r.raise_for_status()
        payload = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("defillama_fetch_failed", url=url, error=str(e))
        raise UpstreamUnavailableError(f"DeFiLlama unavailable: {e}") from e

    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list):
        logger.warning("defillama_unexpected_payload", url=url)
        raise UpstreamUnavailableError("DeFiLlama returned no pool list")

    logger.debug("pools_fetched", count=len(data))
    return data


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def normalize_pool(raw: dict[str, Any]) -> PoolRecord:
    il_raw = str(raw.get("ilRisk") or "").lower()
    return PoolRecord(
        pool_id=str(raw.get("pool") or ""),
        protocol=str(raw.get("project") or "unknown"),
        pool_symbol=str(raw.get("symbol") or ""),
        chain=str(raw.get("chain") or "unknown"),
        apy=_as_float(raw.get("apy")),
        tvl_usd=_as_float(raw.get("tvlUsd")),
        is_stablecoin=bool(raw.get("stablecoin") or False),
        il_risk=IL_RISK_ALIASES.get(il_raw, IlRisk.UNKNOWN),
    )


def filter_pools(
    pools: list[PoolRecord],
    pool_filter: PoolFilter,
    limit: int = 20,
) -> list[PoolRecord]:
    """
    Apply the pool filter, then sort by APY (highest first) and truncate.

    Filters run in order: APY floor, risk ceiling, TVL floor, chain equality,
    protocol substring. Each is a plain predicate so the result does not
    depend on the order pools arrive in.
    """
    out = [p for p in pools if p.apy >= pool_filter.min_apy]
    out = [p for p in out if within_risk_bucket(p, pool_filter.max_risk_bucket)]
    out = [p for p in out if p.tvl_usd > MIN_POOL_TVL_USD]
    if pool_filter.chain:
        chain = pool_filter.chain.lower()
        out = [p for p in out if p.chain.lower() == chain]
    if pool_filter.protocol_names:
        names = [n.lower() for n in pool_filter.protocol_names]
        out = [p for p in out if any(n in p.protocol.lower() for n in names)]
    out.sort(key=lambda p: p.apy, reverse=True)
    return out[:limit]


def filter_frax_pools(pools: list[PoolRecord], limit: int = 10) -> list[PoolRecord]:
    frax = [
        p
        for p in pools
        if "frax" in p.protocol.lower() or "frax" in p.pool_symbol.lower()
    ]
    frax.sort(key=lambda p: p.apy, reverse=True)
    return frax[:limit]


def summarize_market(pools: list[PoolRecord], top: int = 10) -> dict[str, Any]:
    """
    Aggregate market-wide metrics over the full pool table.

    Returns:
        dict with total TVL, mean APY, pool count, distinct chain count and
        the ``top`` protocols by summed TVL
    """
    df = pd.DataFrame([asdict(p) for p in pools], columns=SUMMARY_COLUMNS)
    if df.empty:
        return {
            "total_tvl_usd": 0.0,
            "avg_apy": 0.0,
            "total_pools": 0,
            "active_chains": 0,
            "top_protocols": [],
        }

    by_protocol = (
        df.groupby("protocol")["tvl_usd"]
        .sum()
        .sort_values(ascending=False)
        .head(top)
    )
    return {
        "total_tvl_usd": float(df["tvl_usd"].sum()),
        "avg_apy": float(df["apy"].mean()),
        "total_pools": int(len(df)),
        "active_chains": int(df["chain"].nunique()),
        "top_protocols": [
            {"protocol": name, "tvl_usd": float(tvl)}
            for name, tvl in by_protocol.items()
        ],
    }
