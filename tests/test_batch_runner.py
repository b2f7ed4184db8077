"""
Tests for the concurrent batch runner.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from chatgate.base_schemas import decode_message
from chatgate.config import ChatGateSettings
from chatgate.services.gateway.batch_runner import BatchRunner
from chatgate.services.gateway.errors import BatchPartialFailureError, RequestValidationFailed
from chatgate.services.gateway.rpc_client import RPCClient, RPCError
from chatgate.services.translation.schemas import TranslateRequest, TranslateResponse


@pytest.fixture
def batch_runner(
    translation_client: RPCClient, gateway_settings: ChatGateSettings
) -> BatchRunner:
    return BatchRunner(translation_client=translation_client, settings=gateway_settings)


class TestBatchRunner:
    @pytest.mark.asyncio
    async def test_batch_of_five(self, batch_runner: BatchRunner) -> None:
        response = await batch_runner.run(5)

        assert response.success is True
        assert response.messages_processed == 5
        assert [result.index for result in response.results] == [1, 2, 3, 4, 5]
        assert response.results[0].translated_text == "[ES] Test message 1"
        assert response.avg_time_per_message_ms == pytest.approx(
            response.total_time_ms / 5, abs=0.01
        )
        assert all(result.elapsed_ms >= 0 for result in response.results)
        assert response.total_time_ms >= max(result.elapsed_ms for result in response.results)

    @pytest.mark.asyncio
    async def test_requests_are_synthetic(self, batch_runner: BatchRunner) -> None:
        sent: list[TranslateRequest] = []
        original_call = batch_runner.translation_client.call

        async def spy(endpoint: str, payload: bytes, response_type: type) -> TranslateResponse:
            sent.append(decode_message(payload, TranslateRequest))
            return await original_call(endpoint, payload, response_type)

        with patch.object(batch_runner.translation_client, "call", new=spy):
            await batch_runner.run(3)

        assert sorted(request.user_id for request in sent) == [
            "test-user-1",
            "test-user-2",
            "test-user-3",
        ]
        assert {(request.source_language, request.target_language) for request in sent} == {
            ("en", "es")
        }

    @pytest.mark.asyncio
    async def test_calls_run_concurrently(self, batch_runner: BatchRunner) -> None:
        in_flight = 0
        peak = 0

        async def slow_call(_endpoint: str, _payload: bytes, _type: type) -> TranslateResponse:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return TranslateResponse(
                original_text="x",
                translated_text="y",
                source_language="en",
                target_language="es",
                success=True,
            )

        with patch.object(batch_runner.translation_client, "call", new=slow_call):
            await batch_runner.run(10)

        assert peak == 10

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, -3, 1001, True, "5"])
    async def test_count_out_of_range(self, batch_runner: BatchRunner, count: object) -> None:
        with pytest.raises(RequestValidationFailed):
            await batch_runner.run(count)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_failure_reports_index(self, batch_runner: BatchRunner) -> None:
        async def flaky(_endpoint: str, payload: bytes, _type: type) -> TranslateResponse:
            request = decode_message(payload, TranslateRequest)
            if request.user_id == "test-user-3":
                raise RPCError("worker crashed")
            return TranslateResponse(
                original_text=request.text,
                translated_text=request.text,
                source_language="en",
                target_language="es",
                success=True,
            )

        with patch.object(batch_runner.translation_client, "call", new=flaky):
            with pytest.raises(BatchPartialFailureError) as exc_info:
                await batch_runner.run(5)

        assert exc_info.value.failed_index == 3
        assert exc_info.value.details["reason"] == "worker crashed"

    @pytest.mark.asyncio
    async def test_lowest_failing_index_wins_over_earliest(
        self, batch_runner: BatchRunner
    ) -> None:
        async def uneven(_endpoint: str, payload: bytes, _type: type) -> TranslateResponse:
            request = decode_message(payload, TranslateRequest)
            if request.user_id == "test-user-2":
                await asyncio.sleep(0.05)
                raise RPCError("slow failure")
            if request.user_id == "test-user-4":
                raise RPCError("fast failure")
            return TranslateResponse(
                original_text=request.text,
                translated_text=request.text,
                source_language="en",
                target_language="es",
                success=True,
            )

        with patch.object(batch_runner.translation_client, "call", new=uneven):
            with pytest.raises(BatchPartialFailureError) as exc_info:
                await batch_runner.run(5)

        assert exc_info.value.failed_index == 2
        assert exc_info.value.details["reason"] == "slow failure"
        assert exc_info.value.details["failed_count"] == 2

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_batch_failure(
        self, batch_runner: BatchRunner
    ) -> None:
        with patch.object(
            batch_runner.translation_client,
            "call",
            new=AsyncMock(side_effect=RuntimeError("client closed")),
        ):
            with pytest.raises(BatchPartialFailureError) as exc_info:
                await batch_runner.run(3)

        assert exc_info.value.failed_index == 1
        assert exc_info.value.details["reason"] == "client closed"

    @pytest.mark.asyncio
    async def test_worker_reported_failure(self, batch_runner: BatchRunner) -> None:
        failed = TranslateResponse(
            original_text="x",
            translated_text="",
            source_language="en",
            target_language="es",
            success=False,
            error_message="nope",
        )
        with patch.object(
            batch_runner.translation_client, "call", new=AsyncMock(return_value=failed)
        ):
            with pytest.raises(BatchPartialFailureError):
                await batch_runner.run(2)
