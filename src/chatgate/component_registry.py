import asyncio
from collections.abc import Callable
import logging


logger = logging.getLogger(__name__)


class ComponentRegistry:
    """
    Named components hosted by one node, with start/stop lifecycle hooks.

    Start hooks run in registration order, stop hooks in reverse.
    """

    def __init__(self) -> None:
        self._components: dict[str, object] = {}
        self._aliases: dict[str, str] = {}
        self._lifecycle_hooks: dict[str, dict[str, Callable | None]] = {}
        self._startup_order: list[str] = []

    @property
    def components(self) -> dict[str, object]:
        return self._components

    def register_alias(self, alias: str, name: str) -> None:
        """Register an alias for a component."""
        if alias in self._components:
            msg = f"Alias '{alias}' conflicts with existing component name"
            raise ValueError(msg)
        if alias in self._aliases and self._aliases[alias] != name:
            msg = f"Alias '{alias}' already registered to '{self._aliases[alias]}'"
            raise ValueError(msg)

        self._aliases[alias] = name

    def register(
        self,
        name: str,
        component: object,
        start_hook: Callable | None = None,
        stop_hook: Callable | None = None,
    ) -> None:
        if name in self._components:
            msg = f"Component {name} already registered"
            raise ValueError(msg)

        self._components[name] = component
        self._lifecycle_hooks[name] = {"start": start_hook, "stop": stop_hook}
        self._startup_order.append(name)
        logger.info("Registered component: %s (%s)", name, type(component).__name__)

    def unregister(self, name: str) -> None:
        if name not in self._components:
            return
        del self._components[name]
        del self._lifecycle_hooks[name]
        self._startup_order.remove(name)

        for alias in [k for k, v in self._aliases.items() if v == name]:
            del self._aliases[alias]

    def get(self, name: str) -> object:
        if name in self._aliases:
            name = self._aliases[name]
        return self._components.get(name)

    async def _run_hook(self, name: str, kind: str) -> None:
        hook = self._lifecycle_hooks[name].get(kind)
        if not hook:
            return
        result = hook()
        if asyncio.iscoroutine(result):
            await result

    async def start_all(self) -> None:
        """Run start hooks for all components."""
        logger.info("Starting all components...")
        for name in self._startup_order:
            try:
                await self._run_hook(name, "start")
            except Exception:
                logger.exception("Failed to start component %s", name)
                raise

    async def stop_all(self) -> None:
        """Run stop hooks for all components in reverse order. Failures are logged."""
        logger.info("Stopping all components...")
        for name in reversed(self._startup_order):
            try:
                await self._run_hook(name, "stop")
            except Exception:
                logger.exception("Failed to stop component %s", name)
