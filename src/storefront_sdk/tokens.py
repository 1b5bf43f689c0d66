"""Unverified access-token inspection.

Reads the payload of a JWT-shaped access credential to find its expiry and
identity claims. Nothing here verifies a signature: the results are advisory
and only drive proactive refresh and offline identity fallback. Malformed
tokens are an expected input, so every function returns a neutral value
instead of raising.
"""

from __future__ import annotations

import json
import time
from typing import Any

from jwt.utils import base64url_decode
from pydantic import ValidationError

from .models import Identity
from .telemetry import get_logger

# Claim names that may carry the user id, in lookup order
IDENTITY_ID_CLAIMS = ("userId", "sub", "id")
DEFAULT_ROLE = "user"


def decode(token: str | None) -> dict[str, Any] | None:
    """Decode the payload segment of a token without verifying it.

    Args:
        token: Compact JWT (``header.payload.signature``).

    Returns:
        The payload as a dict, or None when the token is absent, does not
        have exactly three segments, or its payload is not a JSON object.
    """
    if not isinstance(token, str) or token.count(".") != 2:
        return None

    # Header and signature are opaque here; only the payload is read
    try:
        payload = json.loads(base64url_decode(token.split(".")[1]))
    except ValueError as e:
        get_logger().debug("Token payload unreadable", error=str(e))
        return None

    return payload if isinstance(payload, dict) else None


def is_expired(
    token: str | None,
    *,
    now: float | None = None,
    leeway: int = 0,
) -> bool:
    """Check whether a token should be considered expired.

    Fails closed: an unreadable token or one without a numeric ``exp`` claim
    counts as expired.

    Args:
        token: Access token.
        now: Current Unix time (defaults to ``time.time()``).
        leeway: Seconds before the real expiry at which the token already
            counts as expired.

    Returns:
        True if the token is expired or cannot be inspected.
    """
    payload = decode(token)
    if payload is None:
        return True

    exp = payload.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return True

    current = int(time.time() if now is None else now)
    return exp < current + leeway


def identity_from_token(token: str | None) -> Identity | None:
    """Best-effort identity extraction from token claims.

    Args:
        token: Access token.

    Returns:
        Identity built from the claims, or None if the token is unreadable.
    """
    payload = decode(token)
    if payload is None:
        return None

    user_id = next(
        (payload[claim] for claim in IDENTITY_ID_CLAIMS if payload.get(claim) is not None),
        None,
    )
    try:
        return Identity(
            id=user_id,
            email=payload.get("email"),
            name=payload.get("name"),
            role=payload.get("role") or DEFAULT_ROLE,
        )
    except ValidationError as e:
        get_logger().debug("Token identity claims unusable", error=str(e))
        return None
