"""
Profile-based pool filtering.

Uses the ``RISK_TIER_PROFILES`` rule set, which is independent of the point
score in ``scorer``. The score is attached to each recommendation for display
only; it never decides admission.
"""
from typing import Any

from .scorer import score_risk
from .types import (
    IL_RISK_RANK,
    RISK_TIER_PROFILES,
    PoolRecommendation,
    PoolRecord,
    RiskTierProfile,
    RiskTolerance,
)


def admits(
    profile: RiskTierProfile,
    pool: PoolRecord,
    target_apy: float | None = None,
    prefer_stablecoins: bool | None = None,
) -> bool:
    stable_only = profile.stablecoin_only if prefer_stablecoins is None else prefer_stablecoins
    if pool.tvl_usd < profile.min_tvl:
        return False
    if pool.apy > profile.max_apy:
        return False
    if stable_only and not pool.is_stablecoin:
        return False
    if IL_RISK_RANK[pool.il_risk] > IL_RISK_RANK[profile.max_il_risk]:
        return False
    if target_apy is not None and pool.apy < target_apy:
        return False
    return True


def advice_for(pool: PoolRecord, tolerance: RiskTolerance) -> str:
    if tolerance is RiskTolerance.CONSERVATIVE:
        if pool.is_stablecoin:
            return (
                "Excellent choice for conservative investors. "
                f"Stable {pool.apy:.2f}% APY with minimal risk."
            )
        return "Consider stablecoin alternatives for lower risk."
    if tolerance is RiskTolerance.MODERATE:
        if pool.apy > 15:
            return (
                "Good balance of risk and reward. "
                f"{pool.apy:.2f}% APY with moderate volatility."
            )
        return "Acceptable returns for moderate risk tolerance."
    if pool.apy > 30:
        return f"High yield opportunity at {pool.apy:.2f}% APY. Monitor closely for volatility."
    return "Consider higher APY pools for aggressive strategy."


def recommend_for_profile(
    pools: list[PoolRecord],
    tolerance: RiskTolerance,
    target_apy: float | None = None,
    prefer_stablecoins: bool | None = None,
    limit: int = 5,
) -> list[PoolRecommendation]:
    """
    Select the highest-APY pools admitted by a risk tolerance.

    Args:
        pools: Candidate pools
        tolerance: Risk tolerance selecting the tier profile
        target_apy: Optional APY floor (percent)
        prefer_stablecoins: Overrides the profile's stablecoin rule when set
        limit: Maximum number of recommendations

    Returns:
        Recommendations sorted by APY, highest first
    """
    profile = RISK_TIER_PROFILES[tolerance]
    admitted = [p for p in pools if admits(profile, p, target_apy, prefer_stablecoins)]
    admitted.sort(key=lambda p: p.apy, reverse=True)
    return [
        PoolRecommendation(pool=p, assessment=score_risk(p), advice=advice_for(p, tolerance))
        for p in admitted[:limit]
    ]


def summarize(recommendations: list[PoolRecommendation], tolerance: RiskTolerance) -> str:
    if not recommendations:
        return "No suitable pools found for your risk profile. Consider adjusting parameters."
    avg_apy = sum(r.pool.apy for r in recommendations) / len(recommendations)
    return (
        f"Found {len(recommendations)} pools matching your {tolerance.value} risk profile "
        f"with average APY of {avg_apy:.2f}%. Diversify across these pools for "
        "better risk-adjusted returns."
    )


def profile_payload(tolerance: RiskTolerance) -> dict[str, Any]:
    profile = RISK_TIER_PROFILES[tolerance]
    return {
        "level": profile.name,
        "description": profile.description,
        "max_apy": profile.max_apy,
        "min_tvl_usd": profile.min_tvl,
        "stablecoin_only": profile.stablecoin_only,
        "max_il_risk": profile.max_il_risk.value,
    }
