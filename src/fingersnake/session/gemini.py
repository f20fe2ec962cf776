"""Gemini Live session transport.

Uses the google-genai SDK's async live API: frames are pushed as
realtime video input, tool calls arrive on the receive stream and are
answered with function responses correlated by call id.
"""

from __future__ import annotations

import asyncio
import base64
import contextlib
import logging

from fingersnake.config.settings import DEFAULT_LIVE_MODEL
from fingersnake.domain.models import EncodedFrame, ToolAcknowledgement, ToolInvocation
from fingersnake.session.base import (
    DEFAULT_SYSTEM_INSTRUCTION,
    FINGER_TOOL_DESCRIPTION,
    FINGER_TOOL_NAME,
    FINGER_X_DESCRIPTION,
    FINGER_Y_DESCRIPTION,
    SessionError,
    SessionListener,
    SessionTransport,
)

logger = logging.getLogger(__name__)


def build_live_config(system_instruction: str | None = None):
    """Build the LiveConnectConfig declaring the fingertip tool."""
    from google.genai import types

    finger_tool = types.FunctionDeclaration(
        name=FINGER_TOOL_NAME,
        description=FINGER_TOOL_DESCRIPTION,
        parameters=types.Schema(
            type=types.Type.OBJECT,
            properties={
                "x": types.Schema(
                    type=types.Type.NUMBER,
                    description=FINGER_X_DESCRIPTION,
                    minimum=0.0,
                    maximum=1.0,
                ),
                "y": types.Schema(
                    type=types.Type.NUMBER,
                    description=FINGER_Y_DESCRIPTION,
                    minimum=0.0,
                    maximum=1.0,
                ),
            },
            required=["x", "y"],
        ),
    )
    return types.LiveConnectConfig(
        # The native-audio models refuse TEXT; only tool calls are consumed.
        response_modalities=[types.Modality.AUDIO],
        tools=[types.Tool(function_declarations=[finger_tool])],
        system_instruction=types.Content(
            parts=[types.Part(text=system_instruction or DEFAULT_SYSTEM_INSTRUCTION)]
        ),
    )


def invocations_from_message(message) -> list[ToolInvocation]:
    """Extract tool invocations from a LiveServerMessage."""
    tool_call = getattr(message, "tool_call", None)
    if tool_call is None or not tool_call.function_calls:
        return []
    return [
        ToolInvocation(
            id=call.id or "",
            name=call.name or "",
            args=dict(call.args or {}),
        )
        for call in tool_call.function_calls
    ]


class GeminiLiveTransport(SessionTransport):
    """Session transport backed by the Gemini Live API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_LIVE_MODEL,
        system_instruction: str | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._system_instruction = system_instruction
        self._client = None
        self._stack: contextlib.AsyncExitStack | None = None
        self._session = None
        self._receive_task: asyncio.Task | None = None

    @property
    def name(self) -> str:
        return "gemini"

    def _ensure_client(self) -> None:
        """Lazily initialize the google-genai client."""
        if self._client is not None:
            return
        from google import genai

        self._client = genai.Client(api_key=self._api_key)
        logger.info("Initialized Gemini client (model=%s)", self._model)

    async def open(self, listener: SessionListener) -> None:
        if not self._api_key:
            raise SessionError("No Gemini API key configured", backend=self.name)
        self._ensure_client()
        stack = contextlib.AsyncExitStack()
        try:
            self._session = await stack.enter_async_context(
                self._client.aio.live.connect(
                    model=self._model,
                    config=build_live_config(self._system_instruction),
                )
            )
        except Exception as e:
            await stack.aclose()
            raise SessionError(f"Live handshake failed: {e}", backend=self.name) from e
        self._stack = stack
        self._receive_task = asyncio.create_task(
            self._receive_loop(self._session, listener), name="gemini-receive"
        )
        logger.info("Gemini live session open (model=%s)", self._model)

    async def _receive_loop(self, session, listener: SessionListener) -> None:
        from websockets.exceptions import ConnectionClosed, ConnectionClosedOK

        try:
            while True:
                received = False
                # receive() ends after each model turn; keep listening.
                async for message in session.receive():
                    received = True
                    invocations = invocations_from_message(message)
                    if invocations:
                        await listener.on_invocations(invocations)
                if not received:
                    logger.info("Gemini live stream ended")
                    listener.on_close()
                    return
        except asyncio.CancelledError:
            raise
        except ConnectionClosedOK:
            logger.info("Gemini live session closed by server")
            listener.on_close()
        except ConnectionClosed as e:
            logger.error("Gemini live connection dropped: %s", e)
            listener.on_error(SessionError(f"Connection dropped: {e}", backend=self.name))
        except Exception as e:
            logger.error("Gemini live receive failed: %s", e)
            listener.on_error(SessionError(f"Receive failed: {e}", backend=self.name))

    async def send_frame(self, frame: EncodedFrame) -> None:
        from google.genai import types

        if self._session is None:
            raise SessionError("Session is not open", backend=self.name)
        try:
            await self._session.send_realtime_input(
                video=types.Blob(data=base64.b64decode(frame.data), mime_type=frame.mime_type)
            )
        except Exception as e:
            raise SessionError(f"Frame send failed: {e}", backend=self.name) from e

    async def acknowledge(self, ack: ToolAcknowledgement) -> None:
        from google.genai import types

        if self._session is None:
            raise SessionError("Session is not open", backend=self.name)
        try:
            await self._session.send_tool_response(
                function_responses=[
                    types.FunctionResponse(id=ack.id, name=ack.name, response=ack.response)
                ]
            )
        except Exception as e:
            raise SessionError(f"Tool response failed: {e}", backend=self.name) from e

    async def close(self) -> None:
        task, self._receive_task = self._receive_task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        stack, self._stack = self._stack, None
        self._session = None
        if stack is not None:
            await stack.aclose()
            logger.info("Gemini live session closed")
