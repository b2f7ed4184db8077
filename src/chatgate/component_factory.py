from collections.abc import Callable
import logging
from typing import Any

import httpx

from .component_registry import ComponentRegistry
from .components import MetricsRecorder, SessionStore
from .config import ChatGateSettings
from .enums import ComponentType
from .services.gateway.batch_runner import BatchRunner
from .services.gateway.orchestrator import Orchestrator
from .services.gateway.rpc_client import RPCClient


logger = logging.getLogger(__name__)

# Type alias for component factory function
ComponentFactory = Callable[[ChatGateSettings, ComponentRegistry], Any]


def create_session_store(settings: ChatGateSettings, _registry: ComponentRegistry) -> SessionStore:
    return SessionStore(default_language=settings.default_user_language)


def create_metrics_recorder(
    _settings: ChatGateSettings, _registry: ComponentRegistry
) -> MetricsRecorder:
    return MetricsRecorder()


def create_translation_client(
    settings: ChatGateSettings,
    _registry: ComponentRegistry,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RPCClient:
    return RPCClient(
        base_url=settings.translation_url,
        service_name="translation",
        timeout_seconds=settings.worker_timeout_seconds,
        transport=transport,
    )


def create_audio_client(
    settings: ChatGateSettings,
    _registry: ComponentRegistry,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RPCClient:
    return RPCClient(
        base_url=settings.audio_url,
        service_name="audio",
        timeout_seconds=settings.worker_timeout_seconds,
        transport=transport,
    )


def create_gateway_orchestrator(
    settings: ChatGateSettings, registry: ComponentRegistry
) -> Orchestrator:
    return Orchestrator(
        translation_client=registry.get(ComponentType.TRANSLATION_CLIENT.value),  # type: ignore[arg-type]
        audio_client=registry.get(ComponentType.AUDIO_CLIENT.value),  # type: ignore[arg-type]
        session_store=registry.get(ComponentType.SESSION_STORE.value),  # type: ignore[arg-type]
        metrics_recorder=registry.get(ComponentType.METRICS_RECORDER.value),  # type: ignore[arg-type]
        settings=settings,
    )


def create_batch_runner(settings: ChatGateSettings, registry: ComponentRegistry) -> BatchRunner:
    return BatchRunner(
        translation_client=registry.get(ComponentType.TRANSLATION_CLIENT.value),  # type: ignore[arg-type]
        settings=settings,
    )


COMPONENT_FACTORIES: dict[ComponentType, ComponentFactory] = {
    ComponentType.SESSION_STORE: create_session_store,
    ComponentType.METRICS_RECORDER: create_metrics_recorder,
    ComponentType.TRANSLATION_CLIENT: create_translation_client,
    ComponentType.AUDIO_CLIENT: create_audio_client,
    ComponentType.GATEWAY: create_gateway_orchestrator,
    ComponentType.BATCH_RUNNER: create_batch_runner,
}

# Registration order matters: later factories look up earlier components.
GATEWAY_COMPONENTS: tuple[ComponentType, ...] = (
    ComponentType.SESSION_STORE,
    ComponentType.METRICS_RECORDER,
    ComponentType.TRANSLATION_CLIENT,
    ComponentType.AUDIO_CLIENT,
    ComponentType.GATEWAY,
    ComponentType.BATCH_RUNNER,
)


def create_component(
    ctype: ComponentType | str,
    settings: ChatGateSettings,
    registry: ComponentRegistry,
) -> Any:
    """
    Create a component instance based on its type.

    Raises:
        ValueError: If the component type is unknown
    """
    try:
        factory = COMPONENT_FACTORIES[ComponentType(ctype)]
    except ValueError:
        msg = f"Unknown component type: {ctype}"
        raise ValueError(msg) from None
    return factory(settings, registry)


def build_gateway_registry(
    settings: ChatGateSettings,
    translation_transport: httpx.AsyncBaseTransport | None = None,
    audio_transport: httpx.AsyncBaseTransport | None = None,
) -> ComponentRegistry:
    """
    Create and register every component the gateway node hosts.

    Transports are only overridden to run workers in-process.
    """
    registry = ComponentRegistry()

    for ctype in GATEWAY_COMPONENTS:
        if ctype is ComponentType.TRANSLATION_CLIENT:
            component = create_translation_client(settings, registry, translation_transport)
        elif ctype is ComponentType.AUDIO_CLIENT:
            component = create_audio_client(settings, registry, audio_transport)
        else:
            component = create_component(ctype, settings, registry)

        registry.register(
            name=ctype.value,
            component=component,
            start_hook=getattr(component, "start", None),
            stop_hook=getattr(component, "close", None),
        )

    logger.info("Gateway components ready: %s", ", ".join(registry.components))
    return registry
