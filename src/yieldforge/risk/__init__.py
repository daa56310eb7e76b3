from .scorer import MAX_RISK_SCORE, bucket_for_score, score_risk, within_risk_bucket
from .tiers import recommend_for_profile
from .types import (
    RISK_TIER_PROFILES,
    IlRisk,
    PoolRecommendation,
    PoolRecord,
    RiskAssessment,
    RiskBucket,
    RiskTierProfile,
    RiskTolerance,
)

__all__ = [
    "MAX_RISK_SCORE",
    "RISK_TIER_PROFILES",
    "IlRisk",
    "PoolRecommendation",
    "PoolRecord",
    "RiskAssessment",
    "RiskBucket",
    "RiskTierProfile",
    "RiskTolerance",
    "bucket_for_score",
    "recommend_for_profile",
    "score_risk",
    "within_risk_bucket",
]
