"""
Agent Router Module

This module implements the chat endpoint of the YieldForge agent API.

The module provides an AgentRouter class that wires together:
- Keyword intent routing through ``yieldforge.agent.intents``
- Live data lookups through ToolExecutor and the Market-Data Gateway
- Reply generation through ResponseComposer and the configured AI provider
"""

import traceback
from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from yieldforge.agent.composer import ResponseComposer
from yieldforge.agent.intents import route
from yieldforge.agent.tools import ToolExecutor

logger = structlog.get_logger(__name__)

API_VERSION = "1.0.0"
CAPABILITIES: dict[str, Any] = {
    "status": "YieldForge Agent API is running",
    "version": API_VERSION,
    "endpoints": {
        "POST": "/api/agent - Send message to agent",
    },
    "agent": {
        "name": "YieldForge",
        "description": "DeFi yield assistant with live market data",
        "features": [
            "Yield pool scanning with risk scoring",
            "Risk profile recommendations",
            "Harvest simulation with live gas costs",
            "Frax Finance pools",
            "Market overview",
            "Fraxtal testnet status",
        ],
    },
}


def bad_request() -> JSONResponse:
    return JSONResponse({"error": "Message is required"}, status_code=400)


class AgentRouter:
    """
    Router class for the ``/api/agent`` endpoint.

    Each POST is handled in one sequential pass: route the message to gateway
    calls, run them, then compose the reply. The router holds no per-request
    state.

    Attributes:
        composer (ResponseComposer): Builds the prompt and calls the AI provider
        tools (ToolExecutor): Runs the gateway calls selected for a message
        debug (bool): Include tracebacks in 500 responses
        logger (BoundLogger): Structured logger for the agent router
    """

    def __init__(
        self,
        composer: ResponseComposer,
        tools: ToolExecutor,
        debug: bool = False,
    ) -> None:
        self._router = APIRouter()
        self.composer = composer
        self.tools = tools
        self.debug = debug
        self.logger = logger.bind(router="agent")
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Register the POST and GET handlers on the underlying APIRouter."""

        @self._router.post("")
        async def agent(request: Request) -> Any:  # pyright: ignore [reportUnusedFunction]
            """
            Answer one chat message.

            Returns:
                200 ``{"response", "timestamp"}``, 400 when ``message`` is
                missing or not a string, 500 on any unhandled failure.
            """
            try:
                body = await request.json()
            except ValueError:
                return bad_request()
            message = body.get("message") if isinstance(body, dict) else None
            if not isinstance(message, str) or not message:
                return bad_request()

            try:
                # gateway and model calls block; keep them off the event loop
                return {
                    "response": await run_in_threadpool(self.handle_message, message),
                    "timestamp": datetime.now(UTC).isoformat(),
                }
            except Exception as e:
                self.logger.exception("message_handling_failed", error=str(e))
                content: dict[str, Any] = {
                    "error": "Failed to process request",
                    "message": str(e) or "Unknown error",
                }
                if self.debug:
                    content["details"] = traceback.format_exc()
                return JSONResponse(content, status_code=500)

        @self._router.get("")
        async def capabilities() -> dict[str, Any]:  # pyright: ignore [reportUnusedFunction]
            return CAPABILITIES

    @property
    def router(self) -> APIRouter:
        """Get the FastAPI router with registered routes."""
        return self._router

    def handle_message(self, message: str) -> str:
        self.logger.debug("received_message", message=message)
        calls = route(message)
        self.logger.info(
            "message_routed", intents=[c.intent.value for c in calls]
        )
        tool_results = self.tools.run(calls)
        return self.composer.compose(message, tool_results)
