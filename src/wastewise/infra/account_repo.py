# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple

import yaml

logger = logging.getLogger(__name__)


class AccountStoreError(RuntimeError):
    """The account store could not be read or written."""


@dataclass(frozen=True)
class AccountRecord:
    id: int
    email: str
    name: Optional[str]
    password_hash: str = ""


class AccountStore(Protocol):
    def find_by_email(self, email: str) -> Optional[AccountRecord]: ...

    def find_by_id(self, account_id: int) -> Optional[AccountRecord]: ...

    def update_password(self, account_id: int, password_hash: str) -> None: ...

    def create(self, email: str, name: Optional[str], password_hash: str) -> AccountRecord: ...

    def delete(self, account_id: int) -> None: ...


class EmailTakenError(ValueError):
    pass


class YamlAccountStore:
    """Account store backed by a YAML file.

    Layout::

        version: 1
        accounts:
          a@x.com:
            id: 1
            name: A
            password_hash: $argon2id$...

    Emails are keys and are compared exactly as stored. Reads are cached by
    file mtime; writes go through a temp file and ``os.replace`` under a lock.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._cache: Tuple[float, Dict[str, AccountRecord]] = (0.0, {})

    # ------------------ reads ------------------

    def _load_file(self) -> Dict[str, AccountRecord]:
        if not self.path.exists():
            return {}
        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise AccountStoreError(f"Cannot read account store {self.path}") from exc
        accounts = (raw.get("accounts") or {}) if isinstance(raw, dict) else {}
        if not isinstance(accounts, dict):
            raise AccountStoreError(f"Malformed account store {self.path}")
        out: Dict[str, AccountRecord] = {}
        for email, adata in accounts.items():
            if not isinstance(adata, dict):
                continue
            email = str(email or "").strip()
            try:
                aid = int(adata.get("id"))
            except (TypeError, ValueError, OverflowError):
                logger.warning("Skipping account %s without a numeric id", email)
                continue
            if not email:
                continue
            name = adata.get("name")
            out[email] = AccountRecord(
                id=aid,
                email=email,
                name=str(name) if name is not None else None,
                password_hash=str(adata.get("password_hash") or "").strip(),
            )
        return out

    def _accounts(self) -> Dict[str, AccountRecord]:
        try:
            mtime = self.path.stat().st_mtime if self.path.exists() else 0.0
        except OSError:
            mtime = 0.0

        cached_mtime, cached = self._cache
        if mtime and mtime == cached_mtime and cached:
            return cached

        accounts = self._load_file()
        self._cache = (mtime, accounts)
        return accounts

    def find_by_email(self, email: str) -> Optional[AccountRecord]:
        # Exact match: no trimming or case folding on lookup.
        if not email:
            return None
        return self._accounts().get(email)

    def find_by_id(self, account_id: int) -> Optional[AccountRecord]:
        for rec in self._accounts().values():
            if rec.id == account_id:
                return rec
        return None

    # ------------------ writes ------------------

    def _dump(self, accounts: Dict[str, AccountRecord]) -> None:
        raw = {
            "version": 1,
            "accounts": {
                rec.email: {"id": rec.id, "name": rec.name, "password_hash": rec.password_hash}
                for rec in accounts.values()
            },
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".accounts-", suffix=".yml", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                yaml.safe_dump(raw, fh, sort_keys=False, allow_unicode=True)
            os.replace(tmp, self.path)
        except OSError as exc:
            Path(tmp).unlink(missing_ok=True)
            raise AccountStoreError(f"Cannot write account store {self.path}") from exc
        # mtime resolution can hide back-to-back writes
        self._cache = (0.0, {})

    def create(self, email: str, name: Optional[str], password_hash: str) -> AccountRecord:
        e = (email or "").strip()
        if not e:
            raise ValueError("Email is required")
        with self._lock:
            accounts = dict(self._load_file())
            if e in accounts:
                raise EmailTakenError(e)
            next_id = max((r.id for r in accounts.values()), default=0) + 1
            rec = AccountRecord(id=next_id, email=e, name=name, password_hash=password_hash)
            accounts[e] = rec
            self._dump(accounts)
        logger.info("Created account id=%s", rec.id)
        return rec

    def update_password(self, account_id: int, password_hash: str) -> None:
        with self._lock:
            accounts = dict(self._load_file())
            for email, rec in accounts.items():
                if rec.id == account_id:
                    accounts[email] = AccountRecord(
                        id=rec.id, email=rec.email, name=rec.name, password_hash=password_hash
                    )
                    break
            else:
                raise KeyError(account_id)
            self._dump(accounts)
        logger.info("Password updated for account id=%s", account_id)

    def delete(self, account_id: int) -> None:
        with self._lock:
            accounts = dict(self._load_file())
            email = next((e for e, rec in accounts.items() if rec.id == account_id), None)
            if email is None:
                raise KeyError(account_id)
            del accounts[email]
            self._dump(accounts)
        logger.info("Deleted account id=%s", account_id)
