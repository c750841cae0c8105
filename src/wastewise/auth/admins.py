# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import hmac
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import yaml

from wastewise.auth.principal import Principal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdminCredential:
    id: int
    email: str
    password: str
    name: Optional[str] = None

    def principal(self) -> Principal:
        return Principal.admin(id=self.id, email=self.email, name=self.name)


def load_admins(path: Path) -> Tuple[AdminCredential, ...]:
    """Load the admin allow-list from a YAML file.

    Expected layout::

        admins:
          - id: 1
            email: root@example.com
            password: change-me
            name: Root
    """
    if not path.exists():
        logger.warning("Admin allow-list %s not found; admin login disabled", path)
        return ()
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    entries = raw.get("admins") if isinstance(raw, dict) else None
    if entries is None:
        return ()
    if not isinstance(entries, list):
        raise RuntimeError(f"'admins' must be a list in {path}")
    out: List[AdminCredential] = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise RuntimeError(f"Admin entry #{i} in {path} is not a mapping")
        email = str(entry.get("email") or "").strip()
        password = str(entry.get("password") or "")
        if not email or not password:
            raise RuntimeError(f"Admin entry #{i} in {path} needs email and password")
        try:
            aid = int(entry.get("id", i + 1))
        except (TypeError, ValueError) as exc:
            raise RuntimeError(f"Admin entry #{i} in {path} has a non-numeric id") from exc
        name = entry.get("name")
        out.append(AdminCredential(id=aid, email=email, password=password, name=str(name) if name else None))
    return tuple(out)


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def authenticate_admin(admins: Iterable[AdminCredential], email: str, password: str) -> Optional[AdminCredential]:
    if not email or not password:
        return None
    for cred in admins:
        if _same(cred.email, email) and _same(cred.password, password):
            return cred
    return None


def encode_admin_session(admin: Principal) -> str:
    return json.dumps(admin.public(), separators=(",", ":"))


def resolve_admin(raw: Optional[str]) -> Optional[Principal]:
    """Rebuild the admin principal from the ``admin_session`` cookie.

    The cookie is plain JSON with no signature and it is not re-checked
    against the allow-list: whoever can set the cookie is trusted as that
    admin.
    """
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError):
        logger.warning("Unparseable admin session cookie")
        return None
    if not isinstance(data, dict):
        return None
    aid = data.get("id")
    # bool is an int subclass; floats such as 1e400 are not ids
    if not isinstance(aid, int) or isinstance(aid, bool):
        return None
    name = data.get("name")
    return Principal.admin(id=aid, email=str(data.get("email") or ""), name=str(name) if name is not None else None)
