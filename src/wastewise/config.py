# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from wastewise.auth.admins import AdminCredential, load_admins
from wastewise.auth.tokens import DEFAULT_SALT

logger = logging.getLogger(__name__)

DEV_SECRET = "dev-insecure-secret-change-me"


def _truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "y"}


@dataclass(frozen=True)
class Settings:
    secret_key: str
    accounts_path: Path
    admins: Tuple[AdminCredential, ...] = ()
    production: bool = False
    token_salt: str = DEFAULT_SALT
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False
    log_level: str = "INFO"
    data_dir: Path = field(default_factory=lambda: Path("data"))

    @property
    def secure_cookies(self) -> bool:
        return self.production

    @classmethod
    def from_env(cls) -> "Settings":
        production = os.getenv("WW_ENV", "development").strip().lower() == "production"

        secret = os.getenv("WW_SECRET_KEY") or os.getenv("SECRET_KEY")
        if not secret:
            if production:
                raise RuntimeError("Missing WW_SECRET_KEY (or SECRET_KEY) in production")
            logger.warning("WW_SECRET_KEY not set; using an insecure development secret")
            secret = DEV_SECRET

        data_dir = Path(os.getenv("WW_DATA_DIR", "data")).resolve()
        accounts_path = Path(os.getenv("WW_ACCOUNTS_PATH", str(data_dir / "accounts.yml"))).resolve()
        admins_path = Path(os.getenv("WW_ADMINS_PATH", str(data_dir / "admins.yml"))).resolve()

        return cls(
            secret_key=secret,
            accounts_path=accounts_path,
            admins=load_admins(admins_path),
            production=production,
            token_salt=os.getenv("WW_TOKEN_SALT", DEFAULT_SALT),
            host=os.getenv("WW_HOST", "0.0.0.0"),
            port=int(os.getenv("WW_PORT", "8000")),
            reload=_truthy(os.getenv("WW_RELOAD")),
            log_level=os.getenv("WW_LOG_LEVEL", "INFO").upper(),
            data_dir=data_dir,
        )
