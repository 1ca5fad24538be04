"""Minimal subscribe/notify container for immutable state snapshots."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Generic, TypeVar

StateT = TypeVar("StateT")
Listener = Callable[[StateT], None]


class StateStore(Generic[StateT]):
    """Holds one snapshot; every change replaces it wholesale and notifies listeners."""

    def __init__(self, initial: StateT) -> None:
        self._state = initial
        self._listeners: list[Listener[StateT]] = []

    def get(self) -> StateT:
        return self._state

    def set(self, state: StateT) -> None:
        previous = self._state
        self._state = state
        if state == previous:
            return
        for listener in list(self._listeners):
            listener(state)

    def update(self, **changes: Any) -> StateT:
        new_state = replace(self._state, **changes)
        self.set(new_state)
        return new_state

    def subscribe(self, listener: Listener[StateT]) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


__all__ = ["StateStore"]
