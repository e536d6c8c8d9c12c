from .health_handler import HealthHandler
from .docs_handler import DocsHandler
from .control_ws_handler import ControlWebSocketHandler

__all__ = [
    "HealthHandler",
    "DocsHandler",
    "ControlWebSocketHandler",
]
