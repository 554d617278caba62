"""Network front end: accepts clients and moves NUL-terminated messages."""

from __future__ import annotations

import logging
import os
import select
import selectors
import socket
import struct
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Union

from miniob.events import SOCKET_BUFFER_SIZE, ConnectionContext, SessionEvent

__all__ = [
    "PORT_DEFAULT",
    "MAX_CONNECTION_NUM_DEFAULT",
    "ServerParam",
    "Server",
    "MessageTooLongError",
    "extract_message",
]

logger = logging.getLogger(__name__)

PORT_DEFAULT = 6789
MAX_CONNECTION_NUM_DEFAULT = 8192
INADDR_ANY = 0

_SEND_ATTEMPTS = 3
_POLL_INTERVAL = 0.1


class MessageTooLongError(ValueError):
    """A client sent more bytes than fit in one request buffer."""


def extract_message(data: Union[bytes, bytearray], limit: int) -> Optional[bytes]:
    """Return the message before the first NUL, or None if no NUL has arrived yet.

    The message and its NUL must fit in ``limit`` bytes; otherwise
    MessageTooLongError is raised. Bytes after the NUL are not part of the
    message.
    """
    end = bytes(data).find(b"\0")
    if end < 0:
        if len(data) >= limit:
            raise MessageTooLongError(f"the length of sql exceeds the limitation {limit}")
        return None
    if end + 1 > limit:
        raise MessageTooLongError(f"the length of sql exceeds the limitation {limit}")
    return bytes(data[:end])


@dataclass
class ServerParam:
    """Where and how the server listens."""

    # accepted client address as a host-order IPv4 number; 0 accepts any
    listen_addr: int = INADDR_ANY
    max_connection_num: int = MAX_CONNECTION_NUM_DEFAULT
    port: int = PORT_DEFAULT
    unix_socket_path: str = ""
    use_unix_socket: bool = False

    @property
    def listen_host(self) -> str:
        return socket.inet_ntoa(struct.pack("!I", self.listen_addr & 0xFFFFFFFF))


Handler = Callable[[SessionEvent], object]


class Server:
    """Accepts connections and hands every complete request to ``handler``.

    Each request is read until its NUL terminator; the handler receives a
    SessionEvent whose client buffer holds the request and replies through
    :meth:`send`.
    """

    def __init__(self, param: Optional[ServerParam] = None, handler: Optional[Handler] = None) -> None:
        self.param = param if param is not None else ServerParam()
        self.handler = handler
        self.started = False
        self._selector: Optional[selectors.BaseSelector] = None
        self._listen_sock: Optional[socket.socket] = None
        self._pending: Dict[int, bytearray] = {}
        self._clients: Dict[int, ConnectionContext] = {}
        self._stop = threading.Event()
        self._serving = False
        self._cleanup_lock = threading.Lock()

    @property
    def address(self) -> Union[Tuple[str, int], str]:
        """The address the listening socket is bound to."""
        if self._listen_sock is None:
            raise RuntimeError("server is not started")
        return self._listen_sock.getsockname()

    def start(self) -> None:
        """Create, bind and register the listening socket."""
        if self.started:
            return
        if self.param.use_unix_socket:
            sock = self._open_unix_socket()
        else:
            sock = self._open_tcp_socket()
        self._selector = selectors.DefaultSelector()
        self._selector.register(sock, selectors.EVENT_READ, data=None)
        self._listen_sock = sock
        self._stop.clear()
        self.started = True
        logger.info("Observer start success")

    def _open_tcp_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setblocking(False)
            sock.bind((self.param.listen_host, self.param.port))
            sock.listen(self.param.max_connection_num)
        except OSError:
            sock.close()
            raise
        logger.info("Listen on port %d", sock.getsockname()[1])
        return sock

    def _open_unix_socket(self) -> socket.socket:
        path = self.param.unix_socket_path
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.setblocking(False)
            try:
                os.unlink(path)
            except FileNotFoundError:
                pass
            sock.bind(path)
            sock.listen(self.param.max_connection_num)
        except OSError:
            sock.close()
            raise
        logger.info("Listen on unix socket: %s", path)
        return sock

    def serve(self) -> None:
        """Start if needed and dispatch events until :meth:`shutdown` is called."""
        self.start()
        self._serving = True
        try:
            while not self._stop.is_set():
                selector = self._selector
                if selector is None:
                    break
                for key, _ in selector.select(timeout=_POLL_INTERVAL):
                    if key.data is None:
                        self._accept()
                    else:
                        self._recv(key.data)
        finally:
            self._serving = False
            self._cleanup()

    def shutdown(self) -> None:
        """Stop serving and close the listening socket and every connection."""
        logger.info("Server shutting down")
        self._stop.set()
        if not self._serving:
            self._cleanup()

    def _cleanup(self) -> None:
        with self._cleanup_lock:
            for client in list(self._clients.values()):
                self._close_connection(client)
            if self._selector is not None:
                self._selector.close()
                self._selector = None
            if self._listen_sock is not None:
                self._listen_sock.close()
                self._listen_sock = None
            if self.started:
                logger.info("Server quit")
            self.started = False

    def _accept(self) -> None:
        assert self._listen_sock is not None and self._selector is not None
        try:
            conn, addr = self._listen_sock.accept()
        except BlockingIOError:
            return
        except OSError as exc:
            logger.error("Failed to accept client's connection, %s", exc)
            return

        try:
            conn.setblocking(False)
            if not self.param.use_unix_socket:
                conn.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except OSError as exc:
            logger.error("Failed to set up client socket, %s", exc)
            conn.close()
            return

        if isinstance(addr, tuple):
            addr_str = f"{addr[0]}:{addr[1]}"
        else:
            addr_str = addr or self.param.unix_socket_path
        client = ConnectionContext(sock=conn, addr=addr_str)
        self._selector.register(conn, selectors.EVENT_READ, data=client)
        self._clients[id(client)] = client
        self._pending[id(client)] = bytearray()
        logger.info("Accepted connection from %s", addr_str)

    def _recv(self, client: ConnectionContext) -> None:
        if client.sock is None:
            return
        with client.lock:
            try:
                chunk = client.sock.recv(SOCKET_BUFFER_SIZE)
            except (BlockingIOError, InterruptedError):
                return
            except OSError as exc:
                failure: Optional[str] = f"Failed to read socket of {client.addr}, {exc}"
                chunk = b""
            else:
                failure = None if chunk else f"The peer has been closed {client.addr}"
        if failure is not None:
            logger.info(failure)
            self._close_connection(client)
            return

        buffer = self._pending.setdefault(id(client), bytearray())
        buffer.extend(chunk)
        try:
            message = extract_message(buffer, SOCKET_BUFFER_SIZE)
        except MessageTooLongError:
            logger.warning("The length of sql exceeds the limitation %d", SOCKET_BUFFER_SIZE)
            self._close_connection(client)
            return
        if message is None:
            return

        # only one request at a time: anything after the terminator is dropped
        buffer.clear()
        client.buf = message + b"\0"
        logger.info("receive command(size=%d): %s", len(message) + 1, message)
        if self.handler is None:
            return
        try:
            self.handler(SessionEvent(client))
        except Exception:
            logger.exception("Failed to handle request from %s", client.addr)

    def send(self, client: ConnectionContext, data: Union[bytes, bytearray]) -> int:
        """Write data to a client with a few attempts; return the bytes written.

        On a socket error the connection is closed and ConnectionError raised.
        """
        if not data:
            return 0
        view = memoryview(bytes(data))
        written = 0
        with client.lock:
            sock = client.sock
            if sock is None:
                raise ConnectionError(f"connection of {client.addr} is closed")
            failure: Optional[OSError] = None
            for _ in range(_SEND_ATTEMPTS):
                if written >= len(view):
                    break
                try:
                    written += sock.send(view[written:])
                except (BlockingIOError, InterruptedError):
                    select.select([], [sock], [], 1.0)
                except OSError as exc:
                    failure = exc
                    break
        if failure is not None:
            logger.error("Failed to send data back to client")
            self._close_connection(client)
            raise ConnectionError(f"failed to send data to {client.addr}") from failure
        if written < len(view):
            logger.warning("Not all data has been send back to client")
        return written

    def _close_connection(self, client: ConnectionContext) -> None:
        logger.info("Close connection of %s.", client.addr)
        self._clients.pop(id(client), None)
        self._pending.pop(id(client), None)
        sock = client.sock
        if sock is None:
            return
        if self._selector is not None:
            try:
                self._selector.unregister(sock)
            except (KeyError, ValueError):
                pass
        sock.close()
        client.sock = None