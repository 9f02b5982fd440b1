"""
Mediation engine: one model call per turn, with a deterministic fallback.

Drafting -> Resolved. Whatever goes wrong with the model (network error,
non-2xx, empty output, timeout) the turn resolves with the mode's fallback
text. The one exception is a client disconnect, which abandons the turn.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from align.application.interfaces.llm import ILanguageModelClient, ModelRequest
from align.application.modes.base import ConversationMode
from align.application.services.context_builder import ConversationContext
from align.domain.enums import MessageRole
from align.domain.exceptions import TurnCancelledError, UpstreamModelError
from align.shared.telemetry.logging import get_logger
from align.shared.telemetry.tracing import (
    add_span_attributes,
    add_span_event,
    get_tracer,
    set_span_error,
)

logger = get_logger(__name__)
tracer = get_tracer(__name__)


@dataclass(frozen=True)
class Reply:
    """Resolved reply, tagged with the mode's assistant role"""

    content: str
    role: MessageRole
    fallback: bool = False


class MediationEngine:
    """Invokes the language model for a turn and resolves the reply"""

    def __init__(self, client: ILanguageModelClient, timeout: float | None = None):
        self.client = client
        self.timeout = timeout

    async def resolve(
        self,
        mode: ConversationMode,
        context: ConversationContext,
        cancel: asyncio.Event | None = None,
    ) -> Reply:
        """
        Draft a reply for the assembled context.

        Args:
            mode: Mode providing the assistant role and fallback text
            context: Assembled context holding the model request
            cancel: Set when the client disconnects; aborts the model call

        Returns:
            The model reply, or the mode's fallback with fallback=True

        Raises:
            TurnCancelledError: If cancel was set before the model answered
        """
        with tracer.start_as_current_span("mediation_engine.resolve"):
            add_span_attributes(
                session_kind=mode.kind.value,
                history_source=context.source.value,
                window_messages=len(context.window),
                prompt_chars=context.request.total_chars,
            )
            try:
                text = await self._draft(context.request, cancel, mode.kind.value)
            except UpstreamModelError as e:
                logger.warning(
                    "Model call failed for %s turn, using fallback: %s",
                    mode.kind.value,
                    e.details.get("reason", e.message),
                )
                add_span_event("fallback_used", {"reason": e.details.get("reason", "")})
                add_span_attributes(fallback=True)
                return Reply(content=mode.fallback_text, role=mode.assistant_role, fallback=True)
            except TurnCancelledError as e:
                set_span_error(e)
                raise

            add_span_attributes(fallback=False)
            return Reply(content=text, role=mode.assistant_role)

    async def _draft(
        self, request: ModelRequest, cancel: asyncio.Event | None, kind: str
    ) -> str:
        call = asyncio.ensure_future(self._call(request))
        waiters: set[asyncio.Future] = {call}
        watcher = None
        if cancel is not None:
            watcher = asyncio.ensure_future(cancel.wait())
            waiters.add(watcher)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=self.timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            pending = [task for task in waiters if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        if call in done:
            return call.result()
        if watcher is not None and watcher in done:
            raise TurnCancelledError(kind)
        raise UpstreamModelError(f"timed out after {self.timeout}s")

    async def _call(self, request: ModelRequest) -> str:
        try:
            return await self.client.complete(request)
        except UpstreamModelError:
            raise
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("Unexpected error from language model client")
            raise UpstreamModelError(type(e).__name__) from e
