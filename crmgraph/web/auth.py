"""
Bearer Token Authentication
===========================

Verifies HS256 JWTs issued by the CRM's auth service. Tokens are only
verified here, never issued; the ``userId`` claim identifies the owner
whose network a request may read.

Token Sources
-------------
    1. ``Authorization: Bearer <token>`` header
    2. ``?token=<token>`` query parameter (EventSource clients cannot
       set headers)

Usage
-----
    from crmgraph.web.auth import TokenVerifier

    verifier = TokenVerifier(secret)
    owner_id = verifier.owner_from_request()
"""

import base64
import hashlib
import hmac
import json
import logging
import time
from typing import Any, Dict, Optional

import cherrypy

from crmgraph.analytics.errors import AuthenticationError

logger = logging.getLogger("Auth")

OWNER_CLAIM = "userId"


def b64url(x: bytes) -> str:
    return base64.urlsafe_b64encode(x).rstrip(b"=").decode()


def b64url_decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


def sign_token(payload: Dict[str, Any], secret: str) -> str:
    """
    Build an HS256 token.

    Used by tests and local tooling; production tokens come from the
    auth service.
    """
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = b64url(json.dumps(header, separators=(",", ":")).encode())
    payload_b64 = b64url(json.dumps(payload, separators=(",", ":")).encode())
    signing_input = f"{header_b64}.{payload_b64}".encode()
    signature = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{b64url(signature)}"


class TokenVerifier:
    """
    HS256 JWT verifier bound to one shared secret.

    Args:
        secret: Shared signing secret
        leeway: Seconds of clock skew tolerated on ``exp``
    """

    def __init__(self, secret: str, leeway: int = 0):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret.encode()
        self.leeway = leeway

    def decode(self, token: str, now: Optional[float] = None) -> Dict[str, Any]:
        """
        Verify a token and return its claims.

        Raises:
            AuthenticationError: Malformed, wrongly signed or expired token
        """
        parts = token.split(".") if token else []
        if len(parts) != 3:
            raise AuthenticationError("Malformed token")

        header_b64, payload_b64, signature_b64 = parts

        try:
            header = json.loads(b64url_decode(header_b64))
            claims = json.loads(b64url_decode(payload_b64))
            signature = b64url_decode(signature_b64)
        except (ValueError, TypeError):
            raise AuthenticationError("Malformed token")

        if not isinstance(header, dict) or header.get("alg") != "HS256":
            raise AuthenticationError("Unsupported token algorithm")
        if not isinstance(claims, dict):
            raise AuthenticationError("Malformed token")

        expected = hmac.new(
            self._secret,
            f"{header_b64}.{payload_b64}".encode(),
            hashlib.sha256,
        ).digest()
        if not hmac.compare_digest(expected, signature):
            raise AuthenticationError("Invalid token signature")

        exp = claims.get("exp")
        if exp is not None:
            current = time.time() if now is None else now
            if not isinstance(exp, (int, float)) or current > exp + self.leeway:
                raise AuthenticationError("Token expired")

        return claims

    def owner_id(self, token: str) -> str:
        """Owner id carried by a valid token."""
        claims = self.decode(token)
        owner = claims.get(OWNER_CLAIM)
        if not owner or not isinstance(owner, str):
            raise AuthenticationError("Token has no user")
        return owner

    def owner_from_request(self) -> str:
        """
        Authenticate the current CherryPy request.

        Raises:
            AuthenticationError: No token, or the token does not verify
        """
        header = cherrypy.request.headers.get("Authorization", "")
        token = None
        if header.startswith("Bearer "):
            token = header[len("Bearer "):].strip()
        if not token:
            token = cherrypy.request.params.get("token")
        if not token:
            raise AuthenticationError()

        try:
            return self.owner_id(token)
        except AuthenticationError as e:
            logger.warning(f"Rejected token from {cherrypy.request.remote.ip}: {e.message}")
            raise
