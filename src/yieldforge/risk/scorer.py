"""
Point-based pool risk scorer - PURE MATH, NO LLM.

The score is an accumulation of fixed adjustments applied in a fixed order,
so identical pools always produce identical assessments.
"""
from .types import PoolRecord, RiskAssessment, RiskBucket

BASE_SCORE = 5
MIN_SCORE = 1
MAX_SCORE = 10

# Case-sensitive symbol fragments that mark a stablecoin pool
STABLE_SYMBOL_MARKERS = ("USD", "DAI", "FRAX")

# Highest numeric score admitted under each ``max_risk_bucket`` pool filter
MAX_RISK_SCORE = {
    RiskBucket.LOW: 3,
    RiskBucket.MEDIUM: 6,
    RiskBucket.HIGH: 10,
}


def bucket_for_score(score: int) -> RiskBucket:
    """
    Map a numeric score to its bucket label.

    The mapping is inverted relative to the score: scores of 6 and above are
    labelled ``low``. Callers rely on this exact mapping.
    """
    if score >= 6:
        return RiskBucket.LOW
    if score >= 4:
        return RiskBucket.MEDIUM
    return RiskBucket.HIGH


def score_risk(pool: PoolRecord) -> RiskAssessment:
    """
    Score a pool on a 1-10 scale.

    Rules, in order:
        1. start at 5
        2. TVL < $1M: +3, TVL < $10M: +1, otherwise -1
        3. APY > 50: +2, APY > 20: +1
        4. symbol contains USD, DAI or FRAX: -2
        5. clamp to [1, 10]

    Args:
        pool: Normalized pool record

    Returns:
        RiskAssessment with score, bucket and rationale
    """
    score = BASE_SCORE
    reasons = [f"base={BASE_SCORE}"]

    if pool.tvl_usd < 1_000_000:
        score += 3
        reasons.append("tvl<$1M +3")
    elif pool.tvl_usd < 10_000_000:
        score += 1
        reasons.append("tvl<$10M +1")
    else:
        score -= 1
        reasons.append("tvl>=$10M -1")

    if pool.apy > 50:
        score += 2
        reasons.append("apy>50% +2")
    elif pool.apy > 20:
        score += 1
        reasons.append("apy>20% +1")

    if any(marker in pool.pool_symbol for marker in STABLE_SYMBOL_MARKERS):
        score -= 2
        reasons.append("stable symbol -2")

    clamped = max(MIN_SCORE, min(MAX_SCORE, score))
    if clamped != score:
        reasons.append(f"clamped {score}->{clamped}")

    return RiskAssessment(
        score=clamped,
        bucket=bucket_for_score(clamped),
        rationale=", ".join(reasons),
    )


def within_risk_bucket(pool: PoolRecord, max_risk_bucket: RiskBucket) -> bool:
    return score_risk(pool).score <= MAX_RISK_SCORE[max_risk_bucket]
