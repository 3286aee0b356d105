"""Hooks for user interaction: confirmation dialogs and blocking notifications."""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, TypeVar, Union

T = TypeVar("T")

Confirm = Callable[[str], Union[bool, Awaitable[bool]]]
Notify = Callable[[str], Union[None, Awaitable[None]]]

logger = logging.getLogger("catalog-admin.notify")


async def resolve(value: Union[T, Awaitable[T]]) -> T:
    if inspect.isawaitable(value):
        return await value
    return value


def log_notify(message: str) -> None:
    """Notificare implicită când nu există UI: doar log."""
    logger.warning("%s", message)


def always_confirm(message: str) -> bool:
    return True


def never_confirm(message: str) -> bool:
    return False
