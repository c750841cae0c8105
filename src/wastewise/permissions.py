# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from fastapi import HTTPException, Request

from wastewise.auth.admins import resolve_admin
from wastewise.auth.principal import Principal
from wastewise.auth.session import ADMIN_COOKIE_NAME, USER_COOKIE_NAME, read_cookie
from wastewise.auth.users import resolve_user

USER_SIGNIN_PATH = "/auth/signin"
ADMIN_SIGNIN_PATH = "/admin/login"


def load_user_from_request(request: Request) -> Optional[Principal]:
    state = request.app.state
    return resolve_user(read_cookie(request, USER_COOKIE_NAME), state.tokens, state.accounts)


def load_admin_from_request(request: Request) -> Optional[Principal]:
    return resolve_admin(read_cookie(request, ADMIN_COOKIE_NAME))


def current_user_optional(request: Request) -> Optional[Principal]:
    # Memoised per request only; every request resolves from its own cookie.
    if hasattr(request.state, "user"):
        return request.state.user
    u = load_user_from_request(request)
    request.state.user = u
    return u


def current_admin_optional(request: Request) -> Optional[Principal]:
    if hasattr(request.state, "admin"):
        return request.state.admin
    a = load_admin_from_request(request)
    request.state.admin = a
    return a


def _signin_redirect(request: Request, signin_path: str, *, with_from: bool) -> HTTPException:
    loc = signin_path
    if with_from:
        next_url = str(request.url.path)
        if request.url.query:
            next_url += "?" + request.url.query
        loc = f"{signin_path}?from={quote(next_url, safe='/')}"
    return HTTPException(status_code=303, headers={"Location": loc})


def require_user(request: Request) -> Principal:
    u = current_user_optional(request)
    if u:
        return u
    raise HTTPException(status_code=401, detail="Unauthorized")


def require_admin(request: Request) -> Principal:
    a = current_admin_optional(request)
    if a:
        return a
    raise HTTPException(status_code=401, detail="Unauthorized")


def require_user_page(request: Request) -> Principal:
    u = current_user_optional(request)
    if u:
        return u
    raise _signin_redirect(request, USER_SIGNIN_PATH, with_from=True)


def require_admin_page(request: Request) -> Principal:
    a = current_admin_optional(request)
    if a:
        return a
    raise _signin_redirect(request, ADMIN_SIGNIN_PATH, with_from=False)
