# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class PrincipalKind(str, Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """Authenticated identity attached to a request.

    Users and admins live in separate identity spaces: a USER id refers to the
    account store, an ADMIN id to the configured allow-list.
    """

    kind: PrincipalKind
    id: int
    email: str
    name: Optional[str] = None

    @classmethod
    def user(cls, id: int, email: str, name: Optional[str] = None) -> "Principal":
        return cls(kind=PrincipalKind.USER, id=id, email=email, name=name)

    @classmethod
    def admin(cls, id: int, email: str, name: Optional[str] = None) -> "Principal":
        return cls(kind=PrincipalKind.ADMIN, id=id, email=email, name=name)

    @property
    def is_admin(self) -> bool:
        return self.kind is PrincipalKind.ADMIN

    def public(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email, "name": self.name}
