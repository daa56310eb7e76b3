"""
Type definitions for pool risk analysis.

Every record here is a request-scoped value: built from one upstream response,
never persisted, never mutated after construction.
"""
from dataclasses import dataclass
from enum import Enum


class IlRisk(str, Enum):
    """Impermanent-loss exposure as reported by DeFiLlama"""
    NONE = "none"
    LOW = "low"
    HIGH = "high"
    UNKNOWN = "unknown"


# Ordering used for IL ceilings; an unreported IL risk is treated as high
IL_RISK_RANK = {
    IlRisk.NONE: 0,
    IlRisk.LOW: 1,
    IlRisk.HIGH: 2,
    IlRisk.UNKNOWN: 2,
}


class RiskBucket(str, Enum):
    """Coarse label derived from the numeric risk score"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskTolerance(str, Enum):
    """User risk tolerance levels for profile-based filtering"""
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


@dataclass(frozen=True)
class PoolRecord:
    """
    One yield pool, normalized from a DeFiLlama ``/pools`` entry.

    Attributes:
        pool_id: DeFiLlama pool identifier (``pool`` field)
        protocol: Project slug, e.g. ``aave-v3``
        pool_symbol: Pool symbol, e.g. ``USDC-FRAX``
        chain: Chain name as reported upstream
        apy: Total APY in percent
        tvl_usd: Total value locked in USD
        is_stablecoin: Upstream stablecoin flag
        il_risk: Impermanent-loss exposure
    """
    pool_id: str
    protocol: str
    pool_symbol: str
    chain: str
    apy: float
    tvl_usd: float
    is_stablecoin: bool = False
    il_risk: IlRisk = IlRisk.UNKNOWN


@dataclass(frozen=True)
class RiskAssessment:
    """
    Output of the point-based risk scorer.

    Attributes:
        score: Integer risk score in [1, 10]; higher means riskier
        bucket: Label mapped from the score (see ``scorer.bucket_for_score``)
        rationale: Human-readable list of the applied adjustments
    """
    score: int
    bucket: RiskBucket
    rationale: str


@dataclass(frozen=True)
class RiskTierProfile:
    """
    Filtering thresholds for one risk tolerance.

    Independent of the point score: a pool is admitted by comparing its raw
    TVL, APY, stablecoin flag and IL risk against these limits.

    Attributes:
        name: Tolerance identifier
        max_apy: Highest APY (percent) admitted
        min_tvl: Lowest TVL (USD) admitted
        stablecoin_only: Admit only stablecoin pools
        max_il_risk: Highest impermanent-loss exposure admitted
        description: Short explanation shown to the user
    """
    name: str
    max_apy: float
    min_tvl: float
    stablecoin_only: bool
    max_il_risk: IlRisk
    description: str


RISK_TIER_PROFILES = {
    RiskTolerance.CONSERVATIVE: RiskTierProfile(
        name="conservative",
        max_apy=15.0,
        min_tvl=10_000_000.0,
        stablecoin_only=True,
        max_il_risk=IlRisk.NONE,
        description="Stablecoin pools on established protocols",
    ),
    RiskTolerance.MODERATE: RiskTierProfile(
        name="moderate",
        max_apy=30.0,
        min_tvl=5_000_000.0,
        stablecoin_only=False,
        max_il_risk=IlRisk.LOW,
        description="Mix of stablecoins and blue-chip token pairs",
    ),
    RiskTolerance.AGGRESSIVE: RiskTierProfile(
        name="aggressive",
        max_apy=100.0,
        min_tvl=1_000_000.0,
        stablecoin_only=False,
        max_il_risk=IlRisk.HIGH,
        description="Higher risk and reward with newer protocols and tokens",
    ),
}


@dataclass(frozen=True)
class PoolRecommendation:
    """A pool admitted by a risk tier, with its score and advice text"""
    pool: PoolRecord
    assessment: RiskAssessment
    advice: str
