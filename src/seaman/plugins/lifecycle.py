"""Lifecycle events and their dispatch to plugin handlers.

CLI commands announce what they are about to do (and what they just did)
by dispatching a :class:`LifecycleEvent`. Plugins subscribe through the
:class:`~seaman.plugins.capabilities.LifecycleSubscriber` capability::

    class NotifyPlugin(Plugin, LifecycleSubscriber):
        descriptor = PluginDescriptor(name="acme/notify")

        def lifecycle_handlers(self):
            return [LifecycleHandler("after:start", self._announce, priority=5)]

        def _announce(self, data: LifecycleEventData) -> None:
            print(f"started {data.service or 'all services'}")

Handlers run synchronously, highest priority first. A handler that raises
stops the dispatch and the exception propagates to the caller.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from seaman.plugins.capabilities import extract_lifecycle_handlers

if TYPE_CHECKING:
    from seaman.plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)


class LifecycleEvent(str, enum.Enum):
    """Events dispatched around the environment-management commands."""

    BEFORE_INIT = "before:init"
    AFTER_INIT = "after:init"
    BEFORE_START = "before:start"
    AFTER_START = "after:start"
    BEFORE_STOP = "before:stop"
    AFTER_STOP = "after:stop"
    BEFORE_REBUILD = "before:rebuild"
    AFTER_REBUILD = "after:rebuild"
    BEFORE_DESTROY = "before:destroy"
    AFTER_DESTROY = "after:destroy"


def _event_name(event: Union[LifecycleEvent, str]) -> str:
    return event.value if isinstance(event, LifecycleEvent) else event


@dataclass(frozen=True)
class LifecycleEventData:
    """Payload handed to every handler of a dispatched event.

    Attributes:
        event: The event name, e.g. ``"before:start"``.
        project_root: Root directory of the project being managed.
        service: The single service the command targets, or ``None`` when
            it applies to the whole environment.
    """

    event: str
    project_root: Path
    service: Optional[str] = None


@dataclass(frozen=True)
class LifecycleHandler:
    """A callable subscribed to one lifecycle event."""

    event: str
    handler: Callable[[LifecycleEventData], Any]
    priority: int = 0

    def __post_init__(self) -> None:
        # Accept LifecycleEvent members and keep the plain string.
        object.__setattr__(self, "event", _event_name(self.event))


class LifecycleDispatcher:
    """Invokes plugin lifecycle handlers for a dispatched event.

    Handlers are collected from the registry on every dispatch and never
    cached.
    """

    def __init__(self, registry: PluginRegistry) -> None:
        self.registry = registry

    def collect_handlers(self, event: Union[LifecycleEvent, str]) -> list[LifecycleHandler]:
        """Return the handlers for *event* in invocation order.

        Handlers are ordered by priority, highest first; handlers of equal
        priority keep plugin registration order.
        """
        name = _event_name(event)
        handlers = [
            handler
            for loaded in self.registry
            for handler in extract_lifecycle_handlers(loaded.instance)
            if handler.event == name
        ]
        return sorted(handlers, key=lambda h: h.priority, reverse=True)

    def dispatch(
        self, event: Union[LifecycleEvent, str], data: LifecycleEventData
    ) -> None:
        """Invoke every handler subscribed to *event* with *data*.

        Return values are ignored.

        Raises:
            Exception: Whatever a handler raises; remaining handlers are
                not invoked.
        """
        handlers = self.collect_handlers(event)
        logger.debug("Dispatching '%s' to %d handler(s)", _event_name(event), len(handlers))
        for handler in handlers:
            handler.handler(data)
