"""Events passed between the stages that serve one client request."""

from __future__ import annotations

import socket
import threading
from dataclasses import dataclass, field
from typing import Optional, Union

from miniob.parse_defs import Query
from miniob.session import Session

__all__ = [
    "SOCKET_BUFFER_SIZE",
    "ConnectionContext",
    "SessionEvent",
    "SQLStageEvent",
    "ExecutionPlanEvent",
    "StorageEvent",
]

SOCKET_BUFFER_SIZE = 8192


@dataclass(eq=False)
class ConnectionContext:
    """State kept for one connected client."""

    session: Session = field(default_factory=lambda: Session.default_session().copy())
    sock: Optional[socket.socket] = None
    addr: str = ""
    buf: bytes = b""
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


class SessionEvent:
    """A request received from a client and the response to send back."""

    def __init__(self, client: ConnectionContext) -> None:
        self.client = client
        self.response = ""
        self.completed = False

    def set_response(self, response: Union[str, bytes]) -> None:
        """Store the response; bytes are decoded as UTF-8."""
        if isinstance(response, (bytes, bytearray)):
            response = bytes(response).decode("utf-8", errors="replace")
        self.response = response

    @property
    def response_len(self) -> int:
        return len(self.response.encode("utf-8"))

    def request_text(self) -> Optional[str]:
        """Return the request held in the client buffer, up to its first NUL byte."""
        if self.client.buf is None:
            return None
        raw = bytes(self.client.buf).split(b"\0", 1)[0]
        return raw.decode("utf-8", errors="replace")

    def done(self) -> None:
        """Mark the event as finished."""
        self.completed = True


class SQLStageEvent:
    """The SQL text of a session event on its way through the SQL stages."""

    def __init__(self, session_event: SessionEvent, sql: str) -> None:
        self.session_event = session_event
        self.sql = sql


class ExecutionPlanEvent:
    """A parsed query ready to be executed."""

    def __init__(self, sql_event: SQLStageEvent, sqls: Query) -> None:
        self.sql_event: Optional[SQLStageEvent] = sql_event
        self.sqls: Optional[Query] = sqls

    def close(self) -> None:
        """Release the query held by this event."""
        self.sql_event = None
        if self.sqls is not None:
            self.sqls.reset()
            self.sqls = None

    def __enter__(self) -> "ExecutionPlanEvent":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class StorageEvent:
    """A request handed to the storage layer for an execution plan."""

    def __init__(self, exe_event: ExecutionPlanEvent) -> None:
        self.exe_event = exe_event