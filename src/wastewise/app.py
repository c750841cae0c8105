# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from wastewise.auth.admins import authenticate_admin, encode_admin_session
from wastewise.auth.passwords import hash_password, verify_password
from wastewise.auth.principal import Principal
from wastewise.auth.session import (
    ADMIN_COOKIE_MAX_AGE,
    ADMIN_COOKIE_NAME,
    USER_COOKIE_MAX_AGE,
    USER_COOKIE_NAME,
    clear_cookie,
    write_cookie,
)
from wastewise.auth.tokens import TokenService
from wastewise.auth.users import authenticate
from wastewise.config import Settings
from wastewise.infra.account_repo import AccountRecord, AccountStoreError, EmailTakenError, YamlAccountStore
from wastewise.permissions import (
    current_admin_optional,
    current_user_optional,
    require_admin_page,
    require_user,
    require_user_page,
)

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS = "Invalid credentials"
INVALID_ADMIN_CREDENTIALS = "Invalid admin credentials"

router = APIRouter()


class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class ChangePasswordIn(BaseModel):
    currentPassword: Optional[str] = None
    newPassword: Optional[str] = None


class DeleteAccountIn(BaseModel):
    password: Optional[str] = None


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse({"error": message, **extra}, status_code=status_code)


def _public_user(rec: AccountRecord) -> dict:
    return {"id": rec.id, "email": rec.email, "name": rec.name}


def _safe_next(target: Optional[str], default: str) -> str:
    """Only same-site absolute paths are accepted as post-login targets."""
    t = (target or "").strip()
    if not t.startswith("/") or t.startswith("//"):
        return default
    return t


def _start_user_session(request: Request, rec: AccountRecord, body: dict, *, status_code: int = 200) -> JSONResponse:
    token = request.app.state.tokens.create(_public_user(rec))
    resp = JSONResponse(body, status_code=status_code)
    write_cookie(resp, USER_COOKIE_NAME, token, max_age=USER_COOKIE_MAX_AGE, secure=_settings(request).secure_cookies)
    return resp


# ------------------ User auth ------------------


@router.post("/auth/login")
def login(request: Request, payload: LoginIn):
    if not payload.email or not payload.password:
        return _error(422, "Email and password are required")

    rec = authenticate(request.app.state.accounts, payload.email, payload.password)
    if not rec:
        logger.info("Rejected login attempt")
        return _error(401, INVALID_CREDENTIALS)

    logger.info("User login id=%s", rec.id)
    return _start_user_session(request, rec, {"user": _public_user(rec)})


@router.post("/auth/register")
def register(request: Request, payload: RegisterIn):
    if not payload.email or not payload.password:
        details = {}
        if not payload.email:
            details["email"] = "Email is required"
        if not payload.password:
            details["password"] = "Password is required"
        return _error(422, "Validation failed", details=details)

    email = payload.email.strip()
    if "@" not in email:
        return _error(422, "Validation failed", details={"email": "Invalid email format"})

    accounts = request.app.state.accounts
    if accounts.find_by_email(email):
        return _error(409, "Email already registered")

    name = (payload.name or "").strip() or email.split("@")[0]
    try:
        rec = accounts.create(email=email, name=name, password_hash=hash_password(payload.password))
    except EmailTakenError:
        return _error(409, "Email already registered")

    return _start_user_session(request, rec, {"user": _public_user(rec)}, status_code=201)


@router.post("/auth/logout")
def logout(request: Request):
    resp = JSONResponse({"success": True})
    clear_cookie(resp, USER_COOKIE_NAME, secure=_settings(request).secure_cookies)
    return resp


@router.get("/auth/check")
def check(request: Request):
    try:
        user = current_user_optional(request)
    except AccountStoreError:
        logger.exception("Auth check failed")
        return JSONResponse(
            {"isAuthenticated": False, "error": "Failed to check authentication"},
            status_code=500,
        )
    if not user:
        return JSONResponse({"isAuthenticated": False}, status_code=401)
    return {"isAuthenticated": True, "user": user.public()}


# ------------------ User account ------------------


@router.get("/user/profile")
def profile(user: Principal = Depends(require_user)):
    return user.public()


@router.post("/user/change-password")
def change_password(request: Request, payload: ChangePasswordIn, user: Principal = Depends(require_user)):
    if not payload.currentPassword or not payload.newPassword:
        return _error(400, "Current password and new password are required")
    if len(payload.newPassword) < MIN_PASSWORD_LENGTH:
        return _error(400, f"New password must be at least {MIN_PASSWORD_LENGTH} characters long")

    accounts = request.app.state.accounts
    rec = accounts.find_by_id(user.id)
    if rec is None:
        return _error(401, "Unauthorized")
    if not verify_password(payload.currentPassword, rec.password_hash):
        return _error(400, "Current password is incorrect")

    try:
        accounts.update_password(rec.id, hash_password(payload.newPassword))
    except KeyError:
        # Account removed since the lookup above.
        return _error(401, "Unauthorized")
    return {"message": "Password changed successfully"}


@router.delete("/user/delete-account")
def delete_account(request: Request, payload: DeleteAccountIn, user: Principal = Depends(require_user)):
    if not payload.password:
        return _error(400, "Password is required for account deletion")

    accounts = request.app.state.accounts
    rec = accounts.find_by_id(user.id)
    if rec is None:
        return _error(401, "Unauthorized")
    if not verify_password(payload.password, rec.password_hash):
        return _error(401, "Invalid password")

    try:
        accounts.delete(rec.id)
    except KeyError:
        return _error(401, "Unauthorized")

    resp = JSONResponse({"message": "Account deleted successfully"})
    clear_cookie(resp, USER_COOKIE_NAME, secure=_settings(request).secure_cookies)
    return resp


# ------------------ Admin auth ------------------


@router.post("/admin/auth/login")
def admin_login(request: Request, payload: LoginIn):
    # Absent fields are invalid input; empty strings are just a non-matching pair.
    if payload.email is None or payload.password is None:
        return _error(422, "Email and password are required")

    cred = authenticate_admin(_settings(request).admins, payload.email, payload.password)
    if not cred:
        logger.warning("Rejected admin login attempt")
        return _error(401, INVALID_ADMIN_CREDENTIALS)

    admin = cred.principal()
    resp = JSONResponse({"admin": admin.public(), "message": "Admin login successful"})
    write_cookie(
        resp,
        ADMIN_COOKIE_NAME,
        encode_admin_session(admin),
        max_age=ADMIN_COOKIE_MAX_AGE,
        secure=_settings(request).secure_cookies,
    )
    logger.info("Admin login id=%s", admin.id)
    return resp


@router.post("/admin/auth/logout")
def admin_logout(request: Request):
    resp = JSONResponse({"success": True, "message": "Admin logout successful"})
    clear_cookie(resp, ADMIN_COOKIE_NAME, secure=_settings(request).secure_cookies)
    return resp


@router.get("/admin/auth/check")
def admin_check(request: Request):
    admin = current_admin_optional(request)
    if not admin:
        return JSONResponse({"isAuthenticated": False, "isAdmin": False}, status_code=401)
    return {"isAuthenticated": True, "isAdmin": True, "admin": admin.public()}


# ------------------ Pages ------------------


def _render(request: Request, template_name: str, ctx: dict):
    base_ctx = {"current_user": getattr(request.state, "user", None)}
    return templates.TemplateResponse(request, template_name, {**base_ctx, **(ctx or {})})


@router.get("/", response_class=HTMLResponse)
def home(request: Request):
    return _render(request, "index.html", {})


@router.get("/auth/signin", response_class=HTMLResponse)
def signin_page(request: Request):
    # "from" is a Python keyword, so read it off the query string directly.
    target = _safe_next(request.query_params.get("from"), "/dashboard")
    if current_user_optional(request):
        return RedirectResponse(url=target, status_code=303)
    return _render(request, "signin.html", {"next": target})


@router.get("/admin/login", response_class=HTMLResponse)
def admin_login_page(request: Request):
    if current_admin_optional(request):
        return RedirectResponse(url="/admin", status_code=303)
    return _render(request, "admin_login.html", {})


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(request: Request, user: Principal = Depends(require_user_page)):
    return _render(request, "dashboard.html", {"user": user})


@router.get("/admin", response_class=HTMLResponse)
def admin_dashboard(request: Request, admin: Principal = Depends(require_admin_page)):
    return _render(request, "admin_dashboard.html", {"admin": admin})


# ------------------ App factory ------------------


async def _account_store_error(request: Request, exc: AccountStoreError):
    logger.error("Account store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    application = FastAPI(title="wastewise")
    application.state.settings = settings
    application.state.tokens = TokenService(settings.secret_key, salt=settings.token_salt)
    application.state.accounts = YamlAccountStore(settings.accounts_path)
    application.add_exception_handler(AccountStoreError, _account_store_error)
    application.include_router(router)
    return application


app = create_app()
