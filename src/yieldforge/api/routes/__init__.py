from .agent import AgentRouter

__all__ = ["AgentRouter"]
