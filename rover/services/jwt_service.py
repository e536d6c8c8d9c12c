import base64
import binascii
import os
from typing import Any, Dict, Optional

from jose import JWTError, jwt


def pem_from_env(value: Optional[str]) -> Optional[str]:
    """PEM text as given, or decoded from base64 when it lacks the armour lines."""
    if not value or "-----BEGIN" in value:
        return value
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return value


class JWTAuthService:
    """
    Optional bearer-token check for mission control connections.

    HMAC algorithms (``HS*``) verify against ``JWT_SECRET``; any other
    algorithm verifies against the ``JWT_CERTIFICATE`` public key. With no key
    for the configured algorithm the service is disabled and every decode
    fails.
    """

    def __init__(self):
        self.algorithm = os.getenv("JWT_ALGORITHM", "HS256")
        self.secret = os.getenv("JWT_SECRET")
        self.public_key = pem_from_env(os.getenv("JWT_CERTIFICATE"))
        self._key = self.secret if self.algorithm.startswith("HS") else self.public_key

    @property
    def enabled(self) -> bool:
        return bool(self._key)

    def decode_token(self, token: str) -> Dict[str, Any]:
        if not self.enabled:
            raise RuntimeError(f"no verification key configured for {self.algorithm}")
        return jwt.decode(token, self._key, algorithms=[self.algorithm])

    def try_decode(self, token: str) -> Optional[Dict[str, Any]]:
        try:
            return self.decode_token(token)
        except (JWTError, RuntimeError):
            return None
