from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from jose import JWTError, jwt

MANAGE_OPTIONS = "manage_options"
GENERATE_THEME_ACTION = "geniewp_generate_theme"


def create_access_token(
    subject: str | int,
    secret_key: str,
    algorithm: str = "HS256",
    expires_minutes: int = 60 * 24 * 7,
    caps: Iterable[str] = (MANAGE_OPTIONS,),
) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=expires_minutes)
    payload = {
        "sub": str(subject),
        "caps": sorted(set(caps)),
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, secret_key, algorithm=algorithm)


def decode_token(token: str, secret_key: str, algorithms: list[str] = ["HS256"]) -> Optional[dict]:
    try:
        return jwt.decode(token, secret_key, algorithms=algorithms)
    except JWTError:
        return None


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract raw token from an Authorization header value.

    Accepts values like "Bearer <token>" (case-insensitive). Returns None when
    header is missing or malformed.
    """
    if not authorization:
        return None
    val = authorization.strip()
    if not val.lower().startswith("bearer "):
        return None
    return val.split(" ", 1)[1]


def has_capability(claims: Optional[dict], cap: str = MANAGE_OPTIONS) -> bool:
    if not claims or not claims.get("sub"):
        return False
    caps = claims.get("caps")
    return isinstance(caps, list) and cap in caps


def create_nonce(
    subject: str,
    secret_key: str,
    action: str = GENERATE_THEME_ACTION,
    algorithm: str = "HS256",
    expires_minutes: int = 60 * 24,
) -> str:
    """CSRF token bound to one user and one action."""
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=expires_minutes)
    payload = {"sub": str(subject), "act": action, "typ": "nonce", "exp": int(exp.timestamp())}
    return jwt.encode(payload, secret_key, algorithm=algorithm)


def verify_nonce(
    nonce: Optional[str],
    subject: str,
    secret_key: str,
    action: str = GENERATE_THEME_ACTION,
    algorithm: str = "HS256",
) -> bool:
    if not nonce:
        return False
    data = decode_token(nonce, secret_key, [algorithm])
    if not data or data.get("typ") != "nonce":
        return False
    return data.get("sub") == str(subject) and data.get("act") == action
