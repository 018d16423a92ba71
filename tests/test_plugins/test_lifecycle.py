"""Tests for lifecycle events and the LifecycleDispatcher."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from seaman.plugins.base import Plugin, PluginDescriptor
from seaman.plugins.capabilities import LifecycleSubscriber
from seaman.plugins.lifecycle import (
    LifecycleDispatcher,
    LifecycleEvent,
    LifecycleEventData,
    LifecycleHandler,
)
from seaman.plugins.registry import PluginRegistry


def _subscriber(name: str, handlers: list[LifecycleHandler]) -> Plugin:
    """Build a plugin instance returning *handlers*."""

    class Subscriber(Plugin, LifecycleSubscriber):
        descriptor = PluginDescriptor(name=name)

        def lifecycle_handlers(self) -> list[LifecycleHandler]:
            return handlers

    return Subscriber()


def _recorder(calls: list[Any], label: Any) -> Callable[[LifecycleEventData], None]:
    def handler(data: LifecycleEventData) -> None:
        calls.append(label)

    return handler


@pytest.fixture
def data(tmp_path: Path) -> LifecycleEventData:
    return LifecycleEventData(event="before:start", project_root=tmp_path)


class TestLifecycleEvent:
    def test_event_names(self) -> None:
        assert [e.value for e in LifecycleEvent] == [
            "before:init",
            "after:init",
            "before:start",
            "after:start",
            "before:stop",
            "after:stop",
            "before:rebuild",
            "after:rebuild",
            "before:destroy",
            "after:destroy",
        ]

    def test_handler_normalises_enum_to_string(self) -> None:
        handler = LifecycleHandler(LifecycleEvent.AFTER_STOP, lambda data: None)
        assert handler.event == "after:stop"
        assert type(handler.event) is str
        assert handler.priority == 0

    def test_event_data_defaults(self, tmp_path: Path) -> None:
        data = LifecycleEventData(event="after:init", project_root=tmp_path)
        assert data.service is None


class TestDispatcher:
    def test_priority_order_across_plugins(self, data: LifecycleEventData) -> None:
        calls: list[int] = []
        registry = PluginRegistry()
        registry.register(_subscriber("acme/low", [LifecycleHandler("before:start", _recorder(calls, 1), priority=1)]))
        registry.register(_subscriber("acme/high", [LifecycleHandler("before:start", _recorder(calls, 10), priority=10)]))
        registry.register(_subscriber("acme/mid", [LifecycleHandler("before:start", _recorder(calls, 5), priority=5)]))

        LifecycleDispatcher(registry).dispatch(LifecycleEvent.BEFORE_START, data)
        assert calls == [10, 5, 1]

    def test_equal_priority_keeps_registration_order(self, data: LifecycleEventData) -> None:
        calls: list[str] = []
        registry = PluginRegistry()
        registry.register(_subscriber("acme/first", [LifecycleHandler("before:start", _recorder(calls, "first"))]))
        registry.register(_subscriber("acme/second", [LifecycleHandler("before:start", _recorder(calls, "second"))]))
        registry.register(
            _subscriber(
                "acme/third",
                [
                    LifecycleHandler("before:start", _recorder(calls, "third-a")),
                    LifecycleHandler("before:start", _recorder(calls, "third-b")),
                ],
            )
        )

        LifecycleDispatcher(registry).dispatch("before:start", data)
        assert calls == ["first", "second", "third-a", "third-b"]

    def test_only_matching_event_handlers_run(self, data: LifecycleEventData) -> None:
        calls: list[str] = []
        registry = PluginRegistry()
        registry.register(
            _subscriber(
                "acme/mixed",
                [
                    LifecycleHandler("before:start", _recorder(calls, "start")),
                    LifecycleHandler("after:stop", _recorder(calls, "stop")),
                ],
            )
        )

        LifecycleDispatcher(registry).dispatch("before:start", data)
        assert calls == ["start"]

    def test_handler_receives_event_data(self, tmp_path: Path) -> None:
        received: list[LifecycleEventData] = []
        registry = PluginRegistry()
        registry.register(_subscriber("acme/capture", [LifecycleHandler("after:start", received.append)]))

        payload = LifecycleEventData(event="after:start", project_root=tmp_path, service="redis")
        LifecycleDispatcher(registry).dispatch("after:start", payload)
        assert received == [payload]

    def test_no_handlers_is_a_no_op(self, data: LifecycleEventData) -> None:
        registry = PluginRegistry()
        registry.register(_subscriber("acme/quiet", []))
        LifecycleDispatcher(registry).dispatch("before:destroy", data)

    def test_plugins_without_capability_are_ignored(self, data: LifecycleEventData) -> None:
        class Plain(Plugin):
            descriptor = PluginDescriptor(name="acme/plain")

        registry = PluginRegistry()
        registry.register(Plain())
        assert LifecycleDispatcher(registry).collect_handlers("before:start") == []

    def test_failing_handler_stops_dispatch(self, data: LifecycleEventData) -> None:
        calls: list[str] = []

        def explode(_: LifecycleEventData) -> None:
            calls.append("explode")
            raise RuntimeError("handler failed")

        registry = PluginRegistry()
        registry.register(
            _subscriber(
                "acme/chain",
                [
                    LifecycleHandler("before:start", _recorder(calls, "first"), priority=10),
                    LifecycleHandler("before:start", explode, priority=5),
                    LifecycleHandler("before:start", _recorder(calls, "never"), priority=1),
                ],
            )
        )

        with pytest.raises(RuntimeError, match="handler failed"):
            LifecycleDispatcher(registry).dispatch("before:start", data)
        assert calls == ["first", "explode"]

    def test_handlers_collected_on_every_dispatch(self, data: LifecycleEventData) -> None:
        calls: list[str] = []
        registry = PluginRegistry()
        dispatcher = LifecycleDispatcher(registry)
        dispatcher.dispatch("before:start", data)

        registry.register(_subscriber("acme/late", [LifecycleHandler("before:start", _recorder(calls, "late"))]))
        dispatcher.dispatch("before:start", data)
        assert calls == ["late"]

    def test_return_values_are_ignored(self, data: LifecycleEventData) -> None:
        registry = PluginRegistry()
        registry.register(_subscriber("acme/returns", [LifecycleHandler("before:start", lambda d: False)]))
        assert LifecycleDispatcher(registry).dispatch("before:start", data) is None
