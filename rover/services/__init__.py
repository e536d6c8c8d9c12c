from .jwt_service import JWTAuthService
from .navigation_engine import NavigationEngine
from .protocol_router import ConnectionRegistry, ProtocolRouter

__all__ = [
    "ConnectionRegistry",
    "JWTAuthService",
    "NavigationEngine",
    "ProtocolRouter",
]
