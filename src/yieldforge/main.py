"""
YieldForge Agent API Main Application Module

This module initializes and configures the FastAPI application for the
YieldForge agent. It sets up CORS middleware, builds the AI provider and the
Market-Data Gateway once, and mounts the agent router.

The application can be run directly using uvicorn or imported as a module.
"""

import requests
import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from yieldforge.agent import ResponseComposer, ToolExecutor
from yieldforge.ai import BaseAIProvider, DummyAIProvider, GeminiProvider
from yieldforge.api import AgentRouter
from yieldforge.fraxtal import FraxtalProvider
from yieldforge.market_data import MarketDataGateway
from yieldforge.settings import Settings, check_settings, check_wallet_key, settings

logger = structlog.get_logger(__name__)


def build_ai_provider(app_settings: Settings) -> BaseAIProvider:
    if check_settings(app_settings):
        return GeminiProvider(
            api_key=app_settings.gemini_api_key, model=app_settings.gemini_model
        )
    logger.info("using_simulated_ai")
    return DummyAIProvider()


def build_gateway(app_settings: Settings) -> MarketDataGateway:
    fraxtal = FraxtalProvider(
        rpc_url=app_settings.fraxtal_rpc_url,
        chain_id=app_settings.fraxtal_chain_id,
        explorer_url=app_settings.fraxtal_explorer_url,
        private_key=check_wallet_key(app_settings),
        timeout=app_settings.http_timeout_seconds,
    )
    return MarketDataGateway(
        session=requests.Session(),
        fraxtal=fraxtal,
        defillama_base_url=app_settings.defillama_base_url,
        coingecko_base_url=app_settings.coingecko_base_url,
        timeout=app_settings.http_timeout_seconds,
    )


def create_app(
    app_settings: Settings = settings,
    ai: BaseAIProvider | None = None,
    gateway: MarketDataGateway | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    The AI provider and gateway are built exactly once here and shared by
    every request. Either can be injected, which tests use to avoid network
    access.

    Returns:
        FastAPI: Configured FastAPI application instance

    Raises:
        ConfigurationError: If ``strict_config`` is set and the Gemini API
            key is missing or the wallet key is malformed
    """
    app = FastAPI(
        title="YieldForge Agent", version=app_settings.api_version, redirect_slashes=False
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    agent = AgentRouter(
        composer=ResponseComposer(ai or build_ai_provider(app_settings)),
        tools=ToolExecutor(gateway or build_gateway(app_settings)),
        debug=app_settings.debug,
    )
    app.include_router(agent.router, prefix="/api/agent", tags=["agent"])

    @app.get("/health")
    async def health() -> dict[str, str]:  # pyright: ignore [reportUnusedFunction]
        return {"status": "ok"}

    logger.info(
        "app_created",
        chain_id=app_settings.fraxtal_chain_id,
        rpc_url=app_settings.fraxtal_rpc_url,
    )
    return app


app = create_app()


def start() -> None:
    """
    Start the FastAPI application server using uvicorn.

    Binds to all interfaces on port 8080.
    """
    uvicorn.run(app, host="0.0.0.0", port=8080)  # noqa: S104


if __name__ == "__main__":
    start()
