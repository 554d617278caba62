"""Interactive command-line client for the server."""

from __future__ import annotations

import getopt
import socket
import sys
from typing import Optional, Sequence, TextIO

from miniob.session_stage import is_blank

__all__ = ["is_exit_command", "connect", "run_session", "main"]

MAX_MEM_BUFFER_SIZE = 8192
PORT_DEFAULT = 6789
PROMPT = "miniob > "


def is_exit_command(cmd: str) -> bool:
    """Return True if the command starts with "exit" or "bye", in any case."""
    lowered = cmd.lower()
    return lowered.startswith("exit") or lowered.startswith("bye")


def connect(
    host: str = "127.0.0.1",
    port: int = PORT_DEFAULT,
    unix_socket_path: Optional[str] = None,
) -> socket.socket:
    """Open a stream connection, over a unix socket when a path is given.

    Raises OSError when the connection cannot be made.
    """
    if unix_socket_path is not None:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        target = unix_socket_path
    else:
        address = socket.gethostbyname(host)
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        target = (address, port)
    try:
        sock.connect(target)
    except OSError:
        sock.close()
        raise
    return sock


def _read_response(sock: socket.socket) -> "tuple[bytes, bool]":
    """Read one NUL-terminated response; return its bytes and whether the peer closed."""
    received = bytearray()
    while True:
        chunk = sock.recv(MAX_MEM_BUFFER_SIZE)
        if not chunk:
            return bytes(received), True
        end = chunk.find(b"\0")
        if end >= 0:
            # anything after the terminator in this chunk is not used
            received += chunk[:end]
            return bytes(received), False
        received += chunk


def run_session(sock: socket.socket, stdin: TextIO, stdout: TextIO) -> int:
    """Send each input line as a request and print its response.

    Stops at end of input, on an exit command, or when the connection ends.
    Returns the number of requests sent. A failed send raises OSError.
    """
    sent = 0
    stdout.write(PROMPT)
    stdout.flush()
    for line in stdin:
        if is_blank(line):
            stdout.write(PROMPT)
            stdout.flush()
            continue
        if is_exit_command(line):
            break

        sock.sendall(line.encode("utf-8") + b"\0")
        sent += 1

        try:
            response, closed = _read_response(sock)
        except OSError as exc:
            print(f"Connection was broken: {exc}", file=sys.stderr)
            break
        stdout.write(response.decode("utf-8", errors="replace"))
        if closed:
            stdout.write("Connection has been closed\n")
            stdout.flush()
            break
        stdout.write(PROMPT)
        stdout.flush()
    stdout.flush()
    return sent


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Connect to the server and run an interactive session; return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv[1:])
    unix_socket_path: Optional[str] = None
    host = "127.0.0.1"
    port = PORT_DEFAULT

    try:
        options, _ = getopt.getopt(args, "s:h:p:")
    except getopt.GetoptError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    for opt, arg in options:
        if opt == "-s":
            unix_socket_path = arg
        elif opt == "-p":
            try:
                port = int(arg)
            except ValueError:
                port = 0
        elif opt == "-h":
            host = arg

    try:
        sock = connect(host, port, unix_socket_path)
    except OSError as exc:
        where = unix_socket_path if unix_socket_path is not None else f"{host}:{port}"
        print(f"failed to connect to server {where}. error {exc}", file=sys.stderr)
        return 1

    with sock:
        try:
            run_session(sock, sys.stdin, sys.stdout)
        except OSError as exc:
            print(f"send error: {exc}", file=sys.stderr)
            return 1
    return 0