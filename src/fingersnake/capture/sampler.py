"""Fixed-rate frame sampler feeding the AI session.

The sampler's timer runs independently of the render loop. Every tick
it starts one capture -> encode -> send pass as its own task and goes
straight back to sleeping, so a slow network never delays the timer.
At most one pass is in flight: a tick that finds the previous pass still
running is dropped rather than queued, which keeps the frames the model
sees recent and bounds memory.
"""

from __future__ import annotations

import asyncio
import logging

from fingersnake.capture.base import CaptureError, CaptureSource
from fingersnake.domain.models import EncodedFrame
from fingersnake.session.adapter import SessionAdapter
from fingersnake.utils.imaging import FrameEncodeError, fit_within, numpy_to_base64_jpeg

logger = logging.getLogger(__name__)


class FrameSampler:
    """Periodically captures, encodes and forwards frames."""

    def __init__(
        self,
        capture: CaptureSource,
        adapter: SessionAdapter,
        frame_rate: float = 2.0,
        jpeg_quality: float = 0.5,
        max_size: tuple[int, int] = (320, 240),
    ) -> None:
        if frame_rate <= 0:
            raise ValueError(f"frame_rate must be positive, got {frame_rate}")
        self._capture = capture
        self._adapter = adapter
        self._interval = 1.0 / frame_rate
        self._jpeg_quality = jpeg_quality
        self._max_size = max_size
        self._timer: asyncio.Task | None = None
        self._in_flight: asyncio.Task | None = None
        self._frames_sent = 0
        self._frames_dropped = 0
        self._frames_failed = 0

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def busy(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def frames_sent(self) -> int:
        return self._frames_sent

    @property
    def frames_dropped(self) -> int:
        """Ticks skipped because a previous frame was still in flight."""
        return self._frames_dropped

    @property
    def frames_failed(self) -> int:
        return self._frames_failed

    def start(self) -> None:
        """Start the sampling timer on the running event loop."""
        if self.is_running:
            return
        self._timer = asyncio.create_task(self._run(), name="frame-sampler")
        logger.info("Frame sampler started at %.1f fps", 1.0 / self._interval)

    async def stop(self) -> None:
        """Stop the timer and cancel any in-flight frame."""
        tasks = [t for t in (self._timer, self._in_flight) if t is not None and not t.done()]
        self._timer = None
        self._in_flight = None
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(
                "Frame sampler stopped (sent=%d dropped=%d failed=%d)",
                self._frames_sent, self._frames_dropped, self._frames_failed,
            )

    def fire(self) -> bool:
        """Start one sampling pass unless one is already running.

        Returns True if a pass was started.
        """
        if self.busy:
            self._frames_dropped += 1
            logger.debug("Previous frame still in flight, skipping tick")
            return False
        self._in_flight = asyncio.create_task(self.sample_once(), name="frame-sample")
        self._in_flight.add_done_callback(self._on_sample_done)
        return True

    def _on_sample_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._frames_failed += 1
            logger.error("Frame sampling failed unexpectedly: %r", error)

    async def sample_once(self) -> bool:
        """Capture, encode and send one frame.

        Capture and encode failures are logged and the frame is dropped.
        Returns True if the session accepted the frame.
        """
        try:
            frame = await self._capture.capture_frame()
        except CaptureError as e:
            self._frames_failed += 1
            logger.warning("Frame capture failed: %s", e)
            return False

        loop = asyncio.get_running_loop()
        try:
            data = await loop.run_in_executor(None, self._encode, frame.image)
        except FrameEncodeError as e:
            self._frames_failed += 1
            logger.warning("Frame %d encode failed: %s", frame.frame_number, e)
            return False

        sent = await self._adapter.send_frame(
            EncodedFrame(data=data, frame_number=frame.frame_number)
        )
        if sent:
            self._frames_sent += 1
        return sent

    def _encode(self, image) -> str:
        """Downsize and JPEG-encode (runs in thread pool)."""
        width, height = self._max_size
        return numpy_to_base64_jpeg(fit_within(image, width, height), self._jpeg_quality)

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            self.fire()
            next_tick += self._interval
            delay = next_tick - loop.time()
            if delay < 0:
                # Fell behind (e.g. the loop was blocked); resync instead of bursting.
                next_tick = loop.time()
                delay = 0.0
            await asyncio.sleep(delay)
