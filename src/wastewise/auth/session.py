# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Cookie transport for the user and admin sessions.

Nothing here decodes cookie values: the user cookie carries a signed token
and the admin cookie a JSON record, and each resolver handles its own shape.
"""

from __future__ import annotations

from typing import Optional

from starlette.requests import Request
from starlette.responses import Response

from wastewise.auth.tokens import USER_TOKEN_MAX_AGE

USER_COOKIE_NAME = "auth_token"
ADMIN_COOKIE_NAME = "admin_session"

USER_COOKIE_MAX_AGE = USER_TOKEN_MAX_AGE
ADMIN_COOKIE_MAX_AGE = 8 * 60 * 60  # 8 hours


def cookie_settings(*, secure: bool) -> dict:
    return {"httponly": True, "samesite": "lax", "secure": secure, "path": "/"}


def write_cookie(response: Response, name: str, value: str, *, max_age: int, secure: bool = False) -> None:
    response.set_cookie(name, value, max_age=max_age, **cookie_settings(secure=secure))


def clear_cookie(response: Response, name: str, *, secure: bool = False) -> None:
    write_cookie(response, name, "", max_age=0, secure=secure)


def read_cookie(request: Request, name: str) -> Optional[str]:
    value = request.cookies.get(name)
    return value or None
