"""Application wiring for one play session.

Builds the game loop, display, camera, frame sampler and AI session from
settings and runs them together on one event loop.
"""

from __future__ import annotations

import asyncio
import logging

from fingersnake.capture.base import CameraAcquisitionError, CaptureSource
from fingersnake.capture.sampler import FrameSampler
from fingersnake.config.settings import Settings
from fingersnake.display.status import StatusBoard
from fingersnake.domain.models import GamePhase
from fingersnake.engine.loop import GameLoop
from fingersnake.session.adapter import SessionAdapter
from fingersnake.tracking.resolver import TargetResolver

logger = logging.getLogger(__name__)


class FingerSnakeApp:
    """Runs the game with optional fingertip tracking.

    Tracking failures (no camera, no API key, dropped session) are shown
    as status text; the game keeps going with the wander behaviour.
    """

    def __init__(
        self,
        game: GameLoop,
        display,
        status: StatusBoard,
        capture: CaptureSource | None = None,
        adapter: SessionAdapter | None = None,
        sampler: FrameSampler | None = None,
        fps: int = 60,
    ) -> None:
        self._game = game
        self._display = display
        self._status = status
        self._capture = capture
        self._adapter = adapter
        self._sampler = sampler
        self._fps = fps
        self._connect_task: asyncio.Task | None = None
        self._phase_task: asyncio.Task | None = None
        self._tracking_ready = False
        game.on_phase = self._on_phase

    @classmethod
    def from_settings(cls, settings: Settings, use_ai: bool = True) -> FingerSnakeApp:
        from fingersnake.display.window import GameDisplay

        status = StatusBoard()
        game_cfg = settings.game
        resolver = TargetResolver(
            width=game_cfg.width,
            height=game_cfg.height,
            liveness_timeout=game_cfg.liveness_timeout,
            wander_probability=game_cfg.wander_probability,
            mirror_x=settings.session.mirror_x,
            on_status=status.set,
        )
        game = GameLoop.from_config(game_cfg, resolver)
        display = GameDisplay(width=game_cfg.width, height=game_cfg.height, status=status)

        capture = adapter = sampler = None
        if use_ai:
            from fingersnake.capture.webcam import WebcamCapture
            from fingersnake.session.gemini import GeminiLiveTransport

            cap_cfg = settings.capture
            resolution = (cap_cfg.resolution_width, cap_cfg.resolution_height)
            capture = WebcamCapture(device_index=cap_cfg.device_index, resolution=resolution)
            transport = GeminiLiveTransport(
                api_key=settings.gemini_api_key.get_secret_value(),
                model=settings.session.model,
                system_instruction=settings.session.system_prompt_override,
            )
            adapter = SessionAdapter(
                transport=transport,
                on_signal=resolver.update_signal,
                on_status=status.set,
                on_error=lambda message: logger.error("Session error: %s", message),
                on_disconnect=resolver.clear_signal,
            )
            sampler = FrameSampler(
                capture=capture,
                adapter=adapter,
                frame_rate=cap_cfg.frame_rate,
                jpeg_quality=cap_cfg.jpeg_quality,
                max_size=resolution,
            )

        return cls(
            game=game,
            display=display,
            status=status,
            capture=capture,
            adapter=adapter,
            sampler=sampler,
            fps=game_cfg.fps,
        )

    @property
    def game(self) -> GameLoop:
        return self._game

    async def run(self) -> None:
        """Open the window and play until it closes.

        The camera is acquired once. The AI session follows the game
        phase: it connects and starts sampling on entering PLAYING and is
        torn down on leaving it, so a restart always gets a fresh session.
        """
        self._display.open()
        try:
            await self._prepare_tracking()
            self._game.start()
            await self._game.run(self._display, fps=self._fps)
        finally:
            await self._shutdown_tracking()
            self._display.close()

    async def _prepare_tracking(self) -> None:
        if self._capture is None or self._adapter is None:
            self._status.set("Wandering (tracking disabled)")
            return
        try:
            await self._capture.open()
        except CameraAcquisitionError as e:
            logger.error("Camera unavailable: %s", e)
            self._status.set(e.user_message)
            return
        self._tracking_ready = True

    def _on_phase(self, phase: GamePhase) -> None:
        """Queue a session transition behind any still in progress."""
        if not self._tracking_ready:
            return
        previous = self._phase_task
        self._phase_task = asyncio.create_task(
            self._apply_phase(phase, previous), name="session-phase"
        )

    async def _apply_phase(self, phase: GamePhase, previous: asyncio.Task | None) -> None:
        if previous is not None:
            await asyncio.gather(previous, return_exceptions=True)
        if phase == GamePhase.PLAYING:
            self._start_session()
        else:
            await self._stop_session()

    def _start_session(self) -> None:
        logger.info("Starting tracking session")
        # Frames are dropped by the adapter until the handshake completes.
        if self._sampler is not None:
            self._sampler.start()
        self._connect_task = asyncio.create_task(self._adapter.connect(), name="session-connect")

    async def _stop_session(self) -> None:
        logger.info("Stopping tracking session")
        if self._sampler is not None:
            await self._sampler.stop()
        task, self._connect_task = self._connect_task, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        await self._adapter.disconnect()

    async def _shutdown_tracking(self) -> None:
        task, self._phase_task = self._phase_task, None
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        if self._tracking_ready:
            self._tracking_ready = False
            await self._stop_session()
        if self._capture is not None:
            await self._capture.close()
