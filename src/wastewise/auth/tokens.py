# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from itsdangerous import BadSignature, URLSafeTimedSerializer

USER_TOKEN_MAX_AGE = 30 * 24 * 60 * 60  # 30 days
DEFAULT_SALT = "wastewise.auth.v1"


@dataclass(frozen=True)
class TokenClaims:
    id: int
    email: str
    name: Optional[str]
    issued_at: int
    expires_at: int

    def identity(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email, "name": self.name}


class TokenService:
    """Issue and verify signed session tokens.

    The token is an itsdangerous URL-safe timed payload carrying the identity
    claims plus ``iat``/``exp``. Any failure on the way back (bad structure,
    bad signature, expired) yields None so callers have a single
    "not authenticated" path.
    """

    def __init__(self, secret: str, *, max_age: int = USER_TOKEN_MAX_AGE, salt: str = DEFAULT_SALT):
        if not secret:
            raise RuntimeError("Token secret is empty")
        self.max_age = int(max_age)
        self._serializer = URLSafeTimedSerializer(secret_key=secret, salt=salt)

    def create(self, claims: Mapping[str, Any]) -> str:
        now = int(time.time())
        payload = {
            "id": int(claims["id"]),
            "email": str(claims["email"]),
            "name": claims.get("name"),
            "iat": now,
            "exp": now + self.max_age,
        }
        return self._serializer.dumps(payload)

    def verify(self, token: Optional[str]) -> Optional[TokenClaims]:
        if not token:
            return None
        try:
            data = self._serializer.loads(token, max_age=self.max_age)
        except BadSignature:
            return None
        return _claims_from_payload(data)


def _claims_from_payload(data: Any) -> Optional[TokenClaims]:
    if not isinstance(data, dict):
        return None
    uid = data.get("id")
    email = data.get("email")
    exp = data.get("exp")
    # bool is an int subclass; reject it explicitly
    if not isinstance(uid, int) or isinstance(uid, bool):
        return None
    if not isinstance(email, str) or not email:
        return None
    if not isinstance(exp, int) or int(time.time()) > exp:
        return None
    name = data.get("name")
    return TokenClaims(
        id=uid,
        email=email,
        name=name if isinstance(name, str) else None,
        issued_at=int(data.get("iat") or 0),
        expires_at=exp,
    )
