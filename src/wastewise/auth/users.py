# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from wastewise.auth.passwords import verify_password
from wastewise.auth.principal import Principal
from wastewise.auth.tokens import TokenService
from wastewise.infra.account_repo import AccountRecord, AccountStore


def authenticate(accounts: AccountStore, email: str, password: str) -> Optional[AccountRecord]:
    """Return the account for a matching email/password pair, else None.

    Unknown email, an account without a password hash and a wrong password
    are indistinguishable to the caller.
    """
    rec = accounts.find_by_email(email)
    if not rec or not rec.password_hash:
        return None
    if not verify_password(password, rec.password_hash):
        return None
    return rec


def resolve_user(token: Optional[str], tokens: TokenService, accounts: AccountStore) -> Optional[Principal]:
    if not token:
        return None
    claims = tokens.verify(token)
    if claims is None:
        return None
    # Identity comes from the stored account, not the token, so renames and
    # deletions take effect before the token expires.
    rec = accounts.find_by_id(claims.id)
    if rec is None:
        return None
    return Principal.user(id=rec.id, email=rec.email, name=rec.name)
