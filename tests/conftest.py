"""
Shared fixtures: real worker apps served in-process through httpx.ASGITransport.
"""

from collections.abc import AsyncGenerator

from fastapi import FastAPI
import httpx
import pytest
import pytest_asyncio

from chatgate.components import MetricsRecorder, SessionStore
from chatgate.config import ChatGateSettings
from chatgate.runtime_factory import create_app
from chatgate.services.gateway.orchestrator import Orchestrator
from chatgate.services.gateway.rpc_client import RPCClient


@pytest.fixture
def gateway_settings() -> ChatGateSettings:
    return ChatGateSettings(node_number=0, enable_tracing=False)


@pytest.fixture
def translation_app() -> FastAPI:
    return create_app(ChatGateSettings(node_number=1, enable_tracing=False))


@pytest.fixture
def audio_app() -> FastAPI:
    return create_app(ChatGateSettings(node_number=2, enable_tracing=False))


@pytest_asyncio.fixture
async def translation_client(translation_app: FastAPI) -> AsyncGenerator[RPCClient, None]:
    client = RPCClient(
        base_url="http://translation.test",
        service_name="translation",
        transport=httpx.ASGITransport(app=translation_app),
    )
    yield client
    await client.close()


@pytest_asyncio.fixture
async def audio_client(audio_app: FastAPI) -> AsyncGenerator[RPCClient, None]:
    client = RPCClient(
        base_url="http://audio.test",
        service_name="audio",
        transport=httpx.ASGITransport(app=audio_app),
    )
    yield client
    await client.close()


@pytest.fixture
def session_store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def metrics_recorder() -> MetricsRecorder:
    return MetricsRecorder()


@pytest.fixture
def orchestrator(
    translation_client: RPCClient,
    audio_client: RPCClient,
    session_store: SessionStore,
    metrics_recorder: MetricsRecorder,
    gateway_settings: ChatGateSettings,
) -> Orchestrator:
    return Orchestrator(
        translation_client=translation_client,
        audio_client=audio_client,
        session_store=session_store,
        metrics_recorder=metrics_recorder,
        settings=gateway_settings,
    )
