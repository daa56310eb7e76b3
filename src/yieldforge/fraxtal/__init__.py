from .provider import FraxtalProvider, NetworkStatus, NetworkUnavailableError

__all__ = ["FraxtalProvider", "NetworkStatus", "NetworkUnavailableError"]
