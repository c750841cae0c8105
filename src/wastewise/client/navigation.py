# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Client-side navigation with an explicit event subscription interface.

Observers (loading indicators, guards that re-check on navigation) subscribe
to a Router instead of wrapping its methods.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, List, Protocol


class NavigationPhase(str, Enum):
    START = "start"
    COMPLETE = "complete"


NavigationListener = Callable[[NavigationPhase, str], None]


class Navigator(Protocol):
    def push(self, url: str) -> None: ...

    def replace(self, url: str) -> None: ...


class Router:
    """Minimal history-backed router emitting start/complete events."""

    def __init__(self, initial: str = "/"):
        self.history: List[str] = [initial]
        self._listeners: List[NavigationListener] = []

    @property
    def current(self) -> str:
        return self.history[-1]

    def subscribe(self, listener: NavigationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, phase: NavigationPhase, url: str) -> None:
        for listener in list(self._listeners):
            listener(phase, url)

    def push(self, url: str) -> None:
        self._emit(NavigationPhase.START, url)
        self.history.append(url)
        self._emit(NavigationPhase.COMPLETE, url)

    def replace(self, url: str) -> None:
        self._emit(NavigationPhase.START, url)
        self.history[-1] = url
        self._emit(NavigationPhase.COMPLETE, url)


class NavigationLoader:
    """Tracks whether a navigation is in flight."""

    def __init__(self) -> None:
        self.loading = False
        self._unsubscribe: Callable[[], None] = lambda: None

    def _on_navigation(self, phase: NavigationPhase, url: str) -> None:
        self.loading = phase is NavigationPhase.START

    def attach(self, router: Router) -> None:
        self.detach()
        self._unsubscribe = router.subscribe(self._on_navigation)

    def detach(self) -> None:
        self._unsubscribe()
        self._unsubscribe = lambda: None
        self.loading = False
