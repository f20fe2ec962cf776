"""Tests for the FrameSampler."""

from __future__ import annotations

import asyncio
import base64
from unittest.mock import AsyncMock, patch

import pytest

from fingersnake.capture.base import CaptureError
from fingersnake.capture.sampler import FrameSampler
from fingersnake.domain.models import EncodedFrame
from fingersnake.utils.imaging import FrameEncodeError


@pytest.fixture
def mock_adapter() -> AsyncMock:
    adapter = AsyncMock()
    adapter.send_frame.return_value = True
    return adapter


@pytest.fixture
def sampler(mock_capture_source: AsyncMock, mock_adapter: AsyncMock) -> FrameSampler:
    return FrameSampler(mock_capture_source, mock_adapter, frame_rate=2.0)


class TestSampleOnce:
    @pytest.mark.asyncio
    async def test_sends_downsized_jpeg(self, sampler: FrameSampler, mock_adapter: AsyncMock) -> None:
        assert await sampler.sample_once() is True
        frame: EncodedFrame = mock_adapter.send_frame.call_args.args[0]
        assert frame.mime_type == "image/jpeg"
        assert frame.frame_number == 1
        assert base64.b64decode(frame.data)[:2] == b"\xff\xd8"
        assert sampler.frames_sent == 1

    @pytest.mark.asyncio
    async def test_capture_error_drops_frame(self, sampler: FrameSampler, mock_capture_source: AsyncMock,
                                             mock_adapter: AsyncMock) -> None:
        mock_capture_source.capture_frame.side_effect = CaptureError("no frame")
        assert await sampler.sample_once() is False
        mock_adapter.send_frame.assert_not_called()
        assert sampler.frames_failed == 1

    @pytest.mark.asyncio
    async def test_encode_error_drops_frame(self, sampler: FrameSampler, mock_adapter: AsyncMock) -> None:
        with patch("fingersnake.capture.sampler.numpy_to_base64_jpeg", side_effect=FrameEncodeError("bad")):
            assert await sampler.sample_once() is False
        mock_adapter.send_frame.assert_not_called()
        assert sampler.frames_failed == 1

    @pytest.mark.asyncio
    async def test_closed_session_not_counted(self, sampler: FrameSampler, mock_adapter: AsyncMock) -> None:
        mock_adapter.send_frame.return_value = False
        assert await sampler.sample_once() is False
        assert sampler.frames_sent == 0


class TestFire:
    @pytest.mark.asyncio
    async def test_busy_tick_is_dropped(self, sampler: FrameSampler, mock_adapter: AsyncMock) -> None:
        gate = asyncio.Event()

        async def slow_send(frame: EncodedFrame) -> bool:
            await gate.wait()
            return True

        mock_adapter.send_frame.side_effect = slow_send
        assert sampler.fire() is True
        # Let the pass reach the send.
        for _ in range(50):
            await asyncio.sleep(0.01)
            if mock_adapter.send_frame.await_count:
                break
        assert sampler.busy
        assert sampler.fire() is False
        assert sampler.fire() is False
        assert sampler.frames_dropped == 2

        gate.set()
        await sampler._in_flight
        assert not sampler.busy
        assert sampler.frames_sent == 1
        assert mock_adapter.send_frame.await_count == 1

    @pytest.mark.asyncio
    async def test_fire_after_completion_starts_new_pass(self, sampler: FrameSampler) -> None:
        assert sampler.fire() is True
        await sampler._in_flight
        assert sampler.fire() is True
        await sampler._in_flight
        assert sampler.frames_sent == 2


    @pytest.mark.asyncio
    async def test_unexpected_error_is_retrieved_and_logged(
            self, sampler: FrameSampler, caplog: pytest.LogCaptureFixture) -> None:
        with patch("fingersnake.capture.sampler.fit_within", side_effect=RuntimeError("resize blew up")):
            assert sampler.fire() is True
            task = sampler._in_flight
            await asyncio.gather(task, return_exceptions=True)
            await asyncio.sleep(0)
        assert "resize blew up" in caplog.text
        assert sampler.frames_failed == 1
        assert not sampler.busy
        assert sampler.fire() is True
        await sampler._in_flight


class TestLifecycle:
    def test_rejects_non_positive_rate(self, mock_capture_source: AsyncMock, mock_adapter: AsyncMock) -> None:
        with pytest.raises(ValueError):
            FrameSampler(mock_capture_source, mock_adapter, frame_rate=0)

    def test_interval(self, sampler: FrameSampler) -> None:
        assert sampler.interval == pytest.approx(0.5)

    @pytest.mark.asyncio
    async def test_start_and_stop(self, mock_capture_source: AsyncMock, mock_adapter: AsyncMock) -> None:
        sampler = FrameSampler(mock_capture_source, mock_adapter, frame_rate=50.0)
        sampler.start()
        assert sampler.is_running
        await asyncio.sleep(0.15)
        await sampler.stop()
        assert not sampler.is_running
        assert mock_adapter.send_frame.await_count >= 1

    @pytest.mark.asyncio
    async def test_stop_without_start(self, sampler: FrameSampler) -> None:
        await sampler.stop()
        assert not sampler.is_running
