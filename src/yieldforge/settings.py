import structlog
from pydantic_settings import BaseSettings, SettingsConfigDict
from web3 import Account

logger = structlog.get_logger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing in strict mode."""


class Settings(BaseSettings):
    # Flags
    simulate_ai: bool = False
    strict_config: bool = False
    debug: bool = False

    # CORS
    cors_origins: list[str] = ["*"]

    # Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # API
    api_version: str = "v1"

    # Market data
    defillama_base_url: str = "https://yields.llama.fi"
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    http_timeout_seconds: float = 15.0

    # Fraxtal testnet
    fraxtal_rpc_url: str = "https://rpc.testnet.frax.com"
    fraxtal_chain_id: int = 2522
    fraxtal_explorer_url: str = "https://holesky.fraxscan.com"
    wallet_private_key: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def _redact_settings(d: dict) -> dict:
    redacted = dict(d)
    for k in ("gemini_api_key", "wallet_private_key"):
        if k in redacted and redacted[k]:
            redacted[k] = "***REDACTED***"
    return redacted


def check_settings(s: Settings) -> bool:
    """
    Validate settings at startup.

    Returns True when a real model provider can be used. A missing API key is
    fatal in strict mode and only a warning otherwise.

    Raises:
        ConfigurationError: If the Gemini API key is missing and
            ``strict_config`` is enabled.
    """
    if s.simulate_ai:
        return False
    if not s.gemini_api_key:
        if s.strict_config:
            msg = "GEMINI_API_KEY is not set"
            raise ConfigurationError(msg)
        logger.warning(
            "gemini_api_key_missing",
            hint="Agent replies will be simulated until GEMINI_API_KEY is set",
        )
        return False
    return True


def check_wallet_key(s: Settings) -> str:
    """
    Return the wallet private key if web3 can load it, else an empty string.

    An unset key is returned as is. A malformed key is fatal in strict mode and
    otherwise leaves the wallet unconfigured.

    Raises:
        ConfigurationError: If the key is malformed and ``strict_config`` is
            enabled.
    """
    if not s.wallet_private_key:
        return ""
    try:
        Account.from_key(s.wallet_private_key)
    except Exception as e:
        if s.strict_config:
            msg = "WALLET_PRIVATE_KEY is not a valid private key"
            raise ConfigurationError(msg) from e
        # the key itself is never logged
        logger.warning(
            "wallet_key_invalid",
            error_type=type(e).__name__,
            hint="Wallet reads are disabled until WALLET_PRIVATE_KEY is fixed",
        )
        return ""
    return s.wallet_private_key


settings = Settings()
logger.debug("settings", settings=_redact_settings(settings.model_dump()))
