from .routes import AgentRouter

__all__ = ["AgentRouter"]
