"""Admin authentication: credential check and JWT tokens.

Tokens are HS256 JWTs built on the stdlib hmac module, so they verify with
any standard JWT library given the same secret.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional

from .config import Settings

ADMIN_ID = 1
ADMIN_ROLE = "admin"
ADMIN_DISPLAY_NAME = "Administrador"


# ---------------------------------------------------------------------------
# HS256 JWT
# ---------------------------------------------------------------------------

JWT_HEADER = {"alg": "HS256", "typ": "JWT"}


def _segment(obj: Dict[str, Any]) -> str:
    raw = json.dumps(obj, separators=(",", ":"), default=str).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _unpad(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _sign(signing_input: str, secret: str) -> bytes:
    return hmac.new(secret.encode(), signing_input.encode(), hashlib.sha256).digest()


def _jwt_encode(payload: Dict[str, Any], secret: str) -> str:
    signing_input = f"{_segment(JWT_HEADER)}.{_segment(payload)}"
    signature = base64.urlsafe_b64encode(_sign(signing_input, secret)).rstrip(b"=").decode()
    return f"{signing_input}.{signature}"


def _jwt_decode(token: str, secret: str) -> Optional[Dict[str, Any]]:
    try:
        header_seg, payload_seg, signature_seg = token.split(".")
    except ValueError:
        return None

    try:
        if json.loads(_unpad(header_seg)).get("alg") != JWT_HEADER["alg"]:
            return None
        if not hmac.compare_digest(_sign(f"{header_seg}.{payload_seg}", secret), _unpad(signature_seg)):
            return None
        claims = json.loads(_unpad(payload_seg))
    except (ValueError, TypeError, AttributeError):
        # bad base64 and bad JSON both surface as ValueError
        return None

    if not isinstance(claims, dict):
        return None
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)) or exp < time.time():
        return None
    return claims


# ---------------------------------------------------------------------------
# Admin credentials
# ---------------------------------------------------------------------------

def _credential_bytes(value: str) -> bytes:
    # JSON allows lone surrogates; they must compare unequal, not raise
    return value.encode("utf-8", errors="surrogatepass")


def check_admin_credentials(settings: Settings, email: str, password: str) -> bool:
    """
    Exact, case-sensitive comparison against the configured admin literals.

    Both comparisons always run so timing does not reveal which one failed.
    """
    email_ok = hmac.compare_digest(_credential_bytes(email), _credential_bytes(settings.admin_email))
    password_ok = hmac.compare_digest(_credential_bytes(password), _credential_bytes(settings.admin_password))
    return email_ok and password_ok


def admin_profile(email: str) -> Dict[str, Any]:
    """Public admin record returned next to the token."""
    return {
        "id": ADMIN_ID,
        "email": email,
        "nombre": ADMIN_DISPLAY_NAME,
        "rol": ADMIN_ROLE,
    }


# ---------------------------------------------------------------------------
# Token Creation/Decoding
# ---------------------------------------------------------------------------

def create_access_token(
    settings: Settings,
    user_id: int,
    email: str,
    rol: str,
    now: Optional[int] = None,
) -> str:
    """Create a signed token expiring ``jwt_expire_hours`` after issuance."""
    issued_at = int(time.time()) if now is None else now
    payload = {
        "id": user_id,
        "email": email,
        "rol": rol,
        "iat": issued_at,
        "exp": issued_at + settings.jwt_expire_hours * 3600,
    }
    return _jwt_encode(payload, settings.get_jwt_secret())


def create_admin_token(settings: Settings, email: str) -> str:
    return create_access_token(settings, ADMIN_ID, email, ADMIN_ROLE)


def decode_access_token(settings: Settings, token: str) -> Optional[dict]:
    """
    Decode and validate a token.

    Returns:
        Token payload dict, or None if invalid/expired.
    """
    if not token:
        return None
    payload = _jwt_decode(token, settings.get_jwt_secret())
    if payload is None:
        return None
    if "id" not in payload or "rol" not in payload:
        return None
    return payload


__all__ = [
    "ADMIN_ID",
    "ADMIN_ROLE",
    "check_admin_credentials",
    "admin_profile",
    "create_access_token",
    "create_admin_token",
    "decode_access_token",
]
