# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Client guards: block protected content until the server confirms a session.

A guard calls the auth-check endpoint once on mount. Until the answer arrives
it stays PENDING and only the loading view renders. A negative answer, a
non-200 status, a malformed body or a transport error all count as
unauthenticated: the guard moves to DENIED and redirects to its sign-in page.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, Set, TypeVar

import httpx

from wastewise.client.navigation import Navigator, NavigationPhase, Router

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GuardState(str, Enum):
    PENDING = "pending"
    ALLOWED = "allowed"
    DENIED = "denied"


class AuthGuard:
    check_path = "/auth/check"
    signin_path = "/auth/signin"
    flag = "isAuthenticated"
    principal_key = "user"

    def __init__(self, client: httpx.AsyncClient, navigator: Navigator):
        self.client = client
        self.navigator = navigator
        self.state = GuardState.PENDING
        self.principal: Optional[Dict[str, Any]] = None
        self._mounted = False
        self._generation = 0
        self._tasks: Set[asyncio.Task] = set()
        self._unwatch: Callable[[], None] = lambda: None

    async def _fetch(self) -> Optional[Dict[str, Any]]:
        try:
            res = await self.client.get(self.check_path, headers={"Accept": "application/json"})
        except httpx.HTTPError as exc:
            logger.warning("Auth check against %s failed: %s", self.check_path, exc)
            return None
        if res.status_code != 200:
            return None
        try:
            data = res.json()
        except ValueError:
            return None
        if not isinstance(data, dict) or data.get(self.flag) is not True:
            return None
        return data

    async def check(self) -> GuardState:
        self._generation += 1
        generation = self._generation
        data = await self._fetch()
        # Unmounted, or superseded by a newer check: leave state alone.
        if not self._mounted or generation != self._generation:
            return self.state
        if data is None:
            self.state = GuardState.DENIED
            self.principal = None
            self.navigator.push(self.signin_path)
        else:
            self.state = GuardState.ALLOWED
            principal = data.get(self.principal_key)
            self.principal = principal if isinstance(principal, dict) else None
        return self.state

    async def mount(self) -> GuardState:
        if self._mounted:
            return self.state
        self._mounted = True
        return await self.check()

    def unmount(self) -> None:
        self._mounted = False
        self._unwatch()
        self._unwatch = lambda: None
        for task in list(self._tasks):
            task.cancel()

    def watch(self, router: Router) -> Callable[[], None]:
        """Re-run the check after each completed navigation away from sign-in.

        Must be called from inside a running event loop.
        """
        loop = asyncio.get_running_loop()

        def on_navigation(phase: NavigationPhase, url: str) -> None:
            if phase is not NavigationPhase.COMPLETE or not self._mounted:
                return
            if url.split("?", 1)[0] == self.signin_path:
                return
            task = loop.create_task(self.check())
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        self._unwatch()
        self._unwatch = router.subscribe(on_navigation)
        return self._unwatch

    def render(
        self,
        protected: Callable[[], T],
        loading: Callable[[], T],
        denied: Optional[Callable[[], T]] = None,
    ) -> Optional[T]:
        if self.state is GuardState.ALLOWED:
            return protected()
        if self.state is GuardState.PENDING:
            return loading()
        return denied() if denied else None


class AdminGuard(AuthGuard):
    check_path = "/admin/auth/check"
    signin_path = "/admin/login"
    flag = "isAdmin"
    principal_key = "admin"
