"""
Tests for the ComponentRegistry class.

Tests cover:
- Component registration and retrieval
- Alias management
- Start/stop hooks, sync and async, and their ordering
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from chatgate.component_registry import ComponentRegistry


class TestComponentRegistration:
    """Tests for basic component registration and retrieval."""

    def test_register_component(self) -> None:
        registry = ComponentRegistry()
        component = MagicMock()

        registry.register("session_store", component)

        assert "session_store" in registry.components
        assert registry.get("session_store") is component

    def test_register_duplicate_raises_error(self) -> None:
        registry = ComponentRegistry()
        registry.register("session_store", MagicMock())

        with pytest.raises(ValueError, match="already registered"):
            registry.register("session_store", MagicMock())

    def test_get_nonexistent_component(self) -> None:
        assert ComponentRegistry().get("nonexistent") is None

    def test_unregister_component(self) -> None:
        registry = ComponentRegistry()
        registry.register("session_store", MagicMock())
        registry.register_alias("sessions", "session_store")

        registry.unregister("session_store")

        assert registry.get("session_store") is None
        assert registry.get("sessions") is None

    def test_unregister_nonexistent_component_no_error(self) -> None:
        ComponentRegistry().unregister("nonexistent")


class TestAliases:
    def test_alias_resolves_to_component(self) -> None:
        registry = ComponentRegistry()
        component = MagicMock()
        registry.register("gateway", component)

        registry.register_alias("orchestrator", "gateway")

        assert registry.get("orchestrator") is component

    def test_alias_conflicting_with_component_name(self) -> None:
        registry = ComponentRegistry()
        registry.register("gateway", MagicMock())
        registry.register("batch_runner", MagicMock())

        with pytest.raises(ValueError, match="conflicts"):
            registry.register_alias("batch_runner", "gateway")

    def test_alias_rebinding_rejected(self) -> None:
        registry = ComponentRegistry()
        registry.register_alias("orchestrator", "gateway")

        with pytest.raises(ValueError, match="already registered"):
            registry.register_alias("orchestrator", "batch_runner")

    def test_same_alias_twice_is_allowed(self) -> None:
        registry = ComponentRegistry()
        registry.register_alias("orchestrator", "gateway")
        registry.register_alias("orchestrator", "gateway")


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_sync_and_async_hooks(self) -> None:
        registry = ComponentRegistry()
        sync_start = MagicMock(return_value=None)
        async_stop = AsyncMock()
        registry.register("client", MagicMock(), start_hook=sync_start, stop_hook=async_stop)

        await registry.start_all()
        await registry.stop_all()

        sync_start.assert_called_once()
        async_stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_start_in_order_stop_in_reverse(self) -> None:
        registry = ComponentRegistry()
        calls: list[str] = []
        for name in ("first", "second", "third"):
            registry.register(
                name,
                object(),
                start_hook=lambda name=name: calls.append(f"start:{name}"),
                stop_hook=lambda name=name: calls.append(f"stop:{name}"),
            )

        await registry.start_all()
        await registry.stop_all()

        assert calls == [
            "start:first",
            "start:second",
            "start:third",
            "stop:third",
            "stop:second",
            "stop:first",
        ]

    @pytest.mark.asyncio
    async def test_start_failure_propagates(self) -> None:
        registry = ComponentRegistry()
        registry.register("broken", object(), start_hook=MagicMock(side_effect=RuntimeError("boom")))

        with pytest.raises(RuntimeError, match="boom"):
            await registry.start_all()

    @pytest.mark.asyncio
    async def test_stop_failure_does_not_block_others(self) -> None:
        registry = ComponentRegistry()
        healthy_stop = AsyncMock()
        registry.register("healthy", object(), stop_hook=healthy_stop)
        registry.register("broken", object(), stop_hook=AsyncMock(side_effect=RuntimeError("boom")))

        await registry.stop_all()

        healthy_stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_components_without_hooks(self) -> None:
        registry = ComponentRegistry()
        registry.register("plain", object())

        await registry.start_all()
        await registry.stop_all()
