"""Collaborator contracts the controllers depend on but do not implement."""

from __future__ import annotations

from typing import Awaitable, Protocol, Union

from loguru import logger


class WalletSigner(Protocol):
    """Signs the exact challenge message; may raise when the user declines."""

    def __call__(self, message: str) -> Union[Awaitable[str], str]:
        ...


class Notifier(Protocol):
    """User-visible notifications (toasts in a UI, stderr lines in the CLI)."""

    def success(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class Navigator(Protocol):
    """Moves the user to another surface, e.g. the login screen."""

    def navigate(self, route: str) -> None:
        ...


class LoggingNotifier:
    def success(self, message: str) -> None:
        logger.success(message)

    def error(self, message: str) -> None:
        logger.error(message)


class LoggingNavigator:
    """Records the requested route; headless callers poll ``current_route``."""

    def __init__(self, initial_route: str = "/") -> None:
        self.current_route = initial_route

    def navigate(self, route: str) -> None:
        logger.info("Navigating to {}", route)
        self.current_route = route


__all__ = [
    "LoggingNavigator",
    "LoggingNotifier",
    "Navigator",
    "Notifier",
    "WalletSigner",
]
