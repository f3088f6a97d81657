"""
Change notification for stores.

Each store owns a ChangeNotifier and publishes its full collection after
every successful write. Subscribers may be plain functions or coroutine
functions. A failing subscriber is logged and does not stop the others or
fail the write that triggered it.
"""

import inspect
from typing import Any, Callable, Generic, TypeVar

import structlog


T = TypeVar("T")

Listener = Callable[[Any], Any]

logger = structlog.get_logger(__name__)


class ChangeNotifier(Generic[T]):
    """Publish-on-write callback list."""

    def __init__(self, name: str):
        self._name = name
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Callable[[T], Any]) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def publish(self, value: T) -> None:
        """Deliver a new value to every listener."""
        for listener in list(self._listeners):
            try:
                result = listener(value)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    "listener_failed",
                    notifier=self._name,
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    error=str(e),
                )
