from .composer import ResponseComposer
from .intents import GatewayCall, Intent, route
from .tools import ToolExecutor

__all__ = ["GatewayCall", "Intent", "ResponseComposer", "ToolExecutor", "route"]
