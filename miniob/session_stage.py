"""The stage that takes client requests in and sends responses back."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Union

from miniob.events import ConnectionContext, SessionEvent, SQLStageEvent

__all__ = ["SessionStage", "frame_response", "is_blank"]

logger = logging.getLogger(__name__)

_NO_DATA = "No data\n"


def is_blank(text: Optional[str]) -> bool:
    """Return True if the text is missing, empty or only whitespace."""
    return text is None or text.strip() == ""


def frame_response(response: Union[str, bytes, None]) -> bytes:
    """Return the bytes sent for a response, ending with one NUL terminator."""
    if isinstance(response, str):
        data = response.encode("utf-8")
    else:
        data = bytes(response or b"")
    if not data:
        return _NO_DATA.encode("utf-8") + b"\0"
    if not data.endswith(b"\0"):
        data += b"\0"
    return data


class SessionStage:
    """Turns a session event into an SQL event and sends the response back.

    ``next_stage`` receives each SQL event and fills in the response of its
    session event; ``send`` writes framed bytes to a client.
    """

    def __init__(
        self,
        next_stage: Optional[Callable[[SQLStageEvent], None]] = None,
        send: Optional[Callable[[ConnectionContext, bytes], None]] = None,
        tag: str = "SessionStage",
    ) -> None:
        self.tag = tag
        self.next_stage = next_stage
        self.send = send

    def handle_event(self, event: SessionEvent) -> Optional[bytes]:
        """Process one request; return the bytes sent, or None when nothing was sent."""
        if not isinstance(event, SessionEvent):
            raise TypeError(f"expected a SessionEvent, got {type(event).__name__}")

        sql = event.request_text()
        if sql is None:
            logger.error("Invalid request buffer.")
            event.done()
            return None
        if is_blank(sql):
            event.done()
            return None

        sql_event = SQLStageEvent(event, sql)
        if self.next_stage is not None:
            self.next_stage(sql_event)
        return self._callback_event(event)

    def _callback_event(self, event: SessionEvent) -> bytes:
        data = frame_response(event.response)
        if self.send is not None:
            self.send(event.client, data)
        event.done()
        return data