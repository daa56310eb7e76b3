from __future__ import annotations

from dataclasses import dataclass

import requests
import structlog

logger = structlog.get_logger(__name__)

COIN_IDS = {
    "ETH": "ethereum",
    "BTC": "bitcoin",
    "FRAX": "frax",
}

# Served whenever the live lookup fails
FALLBACK_PRICES_USD = {
    "ethereum": 2500.0,
    "bitcoin": 60000.0,
    "frax": 1.0,
}


def coin_id_for(symbol: str) -> str:
    return COIN_IDS.get(symbol.upper(), symbol.lower())


@dataclass(frozen=True)
class SpotQuote:
    coin_id: str
    price_usd: float
    live: bool  # False when the fallback price was served


def get_spot_quote(
    session: requests.Session,
    base_url: str,
    symbol: str = "ETH",
    timeout: float = 15.0,
) -> SpotQuote:
    """
    Fetch the USD spot price for ``symbol`` from CoinGecko.

    Never raises: any transport, HTTP or payload problem logs a warning and
    returns the hard-coded fallback price for the coin (0.0 if none is known)
    with ``live`` set to False.
    """
    coin_id = coin_id_for(symbol)
    fallback = FALLBACK_PRICES_USD.get(coin_id, 0.0)
    url = f"{base_url.rstrip('/')}/simple/price"
    params = {"ids": coin_id, "vs_currencies": "usd"}
    try:
        r = session.get(url, params=params, timeout=timeout)
        r.raise_for_status()
        usd = r.json().get(coin_id, {}).get("usd")
        if not isinstance(usd, (int, float)) or isinstance(usd, bool):
            raise ValueError(f"no usd price for {coin_id}")
        return SpotQuote(coin_id, float(usd), live=True)
    except (requests.RequestException, ValueError, AttributeError) as e:
        logger.warning("spot_price_fallback", coin=coin_id, fallback=fallback, error=str(e))
        return SpotQuote(coin_id, fallback, live=False)


def get_spot_price_usd(
    session: requests.Session,
    base_url: str,
    symbol: str = "ETH",
    timeout: float = 15.0,
) -> float:
    return get_spot_quote(session, base_url, symbol, timeout).price_usd
