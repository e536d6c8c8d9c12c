from typing import Any, Dict

import tornado.websocket
from jose import JWTError
from jose.exceptions import ExpiredSignatureError

from rover.services.jwt_service import JWTAuthService
from rover.services.protocol_router import ProtocolRouter


class ControlWebSocketHandler(tornado.websocket.WebSocketHandler):
    """WebSocket endpoint mission control connects to. All protocol logic lives in the router."""

    def initialize(self, router: ProtocolRouter, jwt_service: JWTAuthService):
        self.router = router
        self.jwt_service = jwt_service
        self.jwt_payload: Dict[str, Any] | None = None

    def check_origin(self, origin: str) -> bool:
        # Allow cross-origin WebSocket connections (lock down in production).
        return True

    def open(self):
        if not self._authenticate():
            return
        self.router.open_connection(self)

    def on_message(self, message: str | bytes):
        self.router.handle_message(self, message)

    def on_close(self):
        self.router.close_connection(self)

    def _authenticate(self) -> bool:
        if not self.jwt_service.enabled:
            return True
        token = self._extract_token()
        if not token:
            self.close(code=4001, reason="missing token")
            return False
        try:
            self.jwt_payload = self.jwt_service.decode_token(token)
            return True
        except ExpiredSignatureError:
            self.close(code=4001, reason="token expired")
            return False
        except JWTError:
            self.close(code=4003, reason="invalid token")
            return False

    def _extract_token(self) -> str | None:
        auth_header = self.request.headers.get("Authorization")
        if auth_header and auth_header.lower().startswith("bearer "):
            return auth_header.split(" ", 1)[1].strip()
        return self.get_argument("token", default=None)
