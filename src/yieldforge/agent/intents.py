"""
Keyword intent router.

Matches a chat message against a fixed, ordered rule table. Categories are
independent: any number of them may fire for one message, and each fires at
most once. This is a flat keyword table, not a classifier.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from yieldforge.risk.types import RiskTolerance

DEFAULT_SIMULATION_AMOUNT_USD = 1000.0
DEFAULT_SIMULATION_DAYS = 30

_NUMBER = r"(\d[\d,]*(?:\.\d+)?)\s*([km])?"
AMOUNT_PATTERNS = (
    re.compile(r"\$\s*" + _NUMBER + r"\b", re.IGNORECASE),
    re.compile(_NUMBER + r"\s*(?:usd|usdc|dollars?)\b", re.IGNORECASE),
)
DURATION_PATTERN = re.compile(r"\b(\d+)\s*(?:days?|d)\b", re.IGNORECASE)
MULTIPLIERS = {"k": 1_000, "m": 1_000_000}


class Intent(str, Enum):
    SCAN_POOLS = "scan_pools"
    SPOT_PRICE = "spot_price"
    FRAX_POOLS = "frax_pools"
    SIMULATE_HARVEST = "simulate_harvest"
    MARKET_SUMMARY = "market_summary"
    NETWORK_STATUS = "network_status"
    RISK_PROFILE = "risk_profile"


@dataclass(frozen=True)
class IntentRule:
    """
    One row of the routing table.

    A rule matches when the lowercased message contains any keyword in
    ``any_of`` (if given) and every keyword in ``all_of`` (if given).
    """
    intent: Intent
    any_of: tuple[str, ...] = ()
    all_of: tuple[str, ...] = ()

    def first_match(self, text: str) -> str | None:
        if self.all_of and not all(k in text for k in self.all_of):
            return None
        if not self.any_of:
            return self.all_of[0] if self.all_of else None
        return next((k for k in self.any_of if k in text), None)


@dataclass(frozen=True)
class GatewayCall:
    intent: Intent
    params: dict[str, Any] = field(default_factory=dict)


INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(Intent.SCAN_POOLS, any_of=("yield", "apy", "pool", "opportunit")),
    IntentRule(Intent.SPOT_PRICE, all_of=("eth", "price")),
    IntentRule(Intent.FRAX_POOLS, any_of=("frax",)),
    IntentRule(Intent.SIMULATE_HARVEST, any_of=("simulat", "return")),
    IntentRule(Intent.MARKET_SUMMARY, any_of=("market", "overview")),
    IntentRule(Intent.NETWORK_STATUS, any_of=("fraxtal", "testnet")),
    IntentRule(
        Intent.RISK_PROFILE,
        any_of=tuple(t.value for t in RiskTolerance),
    ),
)


def extract_amount_usd(message: str) -> float:
    """
    Best-effort dollar amount from ``$1,500``, ``2k usd`` or ``300 dollars``.

    Falls back to DEFAULT_SIMULATION_AMOUNT_USD when nothing positive matches.
    """
    for pattern in AMOUNT_PATTERNS:
        m = pattern.search(message)
        if not m:
            continue
        value = float(m.group(1).replace(",", ""))
        if m.group(2):
            value *= MULTIPLIERS[m.group(2).lower()]
        if value > 0:
            return value
    return DEFAULT_SIMULATION_AMOUNT_USD


def extract_duration_days(message: str) -> int:
    m = DURATION_PATTERN.search(message)
    if not m:
        return DEFAULT_SIMULATION_DAYS
    return max(1, min(365, int(m.group(1))))


def _params_for(intent: Intent, keyword: str, message: str) -> dict[str, Any]:
    if intent is Intent.SIMULATE_HARVEST:
        return {
            "amount_usd": extract_amount_usd(message),
            "duration_days": extract_duration_days(message),
        }
    if intent is Intent.RISK_PROFILE:
        return {
            "tolerance": RiskTolerance(keyword),
            "amount_usd": extract_amount_usd(message),
        }
    if intent is Intent.SPOT_PRICE:
        return {"symbol": "ETH"}
    return {}


def route(message: str) -> list[GatewayCall]:
    """
    Select the gateway calls for a message.

    Args:
        message: Raw user text

    Returns:
        One GatewayCall per matching rule, in table order. Empty when no
        keyword matches.
    """
    text = message.lower()
    calls: list[GatewayCall] = []
    for rule in INTENT_RULES:
        keyword = rule.first_match(text)
        if keyword is None:
            continue
        calls.append(GatewayCall(rule.intent, _params_for(rule.intent, keyword, message)))
    return calls
