import io
import socket
import threading

import pytest

from miniob.client import connect, is_exit_command, main, run_session


class _FakeServer(threading.Thread):
    """Reads NUL-terminated requests and answers each with the next reply.

    A reply of None closes the connection instead of answering.
    """

    def __init__(self, sock, replies):
        super().__init__(daemon=True)
        self.sock = sock
        self.replies = list(replies)
        self.requests = []

    def run(self):
        buf = b""
        try:
            for reply in self.replies:
                while b"\0" not in buf:
                    chunk = self.sock.recv(4096)
                    if not chunk:
                        return
                    buf += chunk
                request, _, buf = buf.partition(b"\0")
                self.requests.append(request)
                if reply is None:
                    break
                self.sock.sendall(reply)
        finally:
            self.sock.close()


@pytest.mark.parametrize(
    "cmd, expected",
    [
        ("exit", True),
        ("EXIT\n", True),
        ("bye", True),
        ("Byebye", True),
        ("ex", False),
        ("select * from t;", False),
    ],
)
def test_is_exit_command(cmd, expected):
    assert is_exit_command(cmd) is expected


def test_run_session_prints_responses():
    client_sock, server_sock = socket.socketpair()
    server = _FakeServer(server_sock, [b"SUCCESS\n\0"])
    server.start()
    out = io.StringIO()
    with client_sock:
        sent = run_session(client_sock, io.StringIO("select 1;\n\nexit\n"), out)
    server.join(timeout=5)
    assert sent == 1
    assert server.requests == [b"select 1;\n"]
    assert out.getvalue() == "miniob > SUCCESS\nminiob > miniob > "


def test_run_session_stops_at_exit_before_sending():
    client_sock, server_sock = socket.socketpair()
    out = io.StringIO()
    with client_sock, server_sock:
        sent = run_session(client_sock, io.StringIO("bye\nselect 1;\n"), out)
    assert sent == 0
    assert out.getvalue() == "miniob > "


def test_run_session_reports_closed_connection():
    client_sock, server_sock = socket.socketpair()
    server = _FakeServer(server_sock, [None])
    server.start()
    out = io.StringIO()
    with client_sock:
        run_session(client_sock, io.StringIO("show tables;\nshow tables;\n"), out)
    server.join(timeout=5)
    assert server.requests == [b"show tables;\n"]
    assert out.getvalue().endswith("Connection has been closed\n")


def test_connect_tcp():
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    port = listener.getsockname()[1]
    with listener:
        sock = connect("127.0.0.1", port, None)
        conn, _ = listener.accept()
        with sock, conn:
            conn.sendall(b"hello")
            assert sock.recv(16) == b"hello"


def test_connect_missing_unix_socket(tmp_path):
    with pytest.raises(OSError):
        connect(unix_socket_path=str(tmp_path / "missing.sock"))


def test_main_returns_error_when_connect_fails(tmp_path, capsys):
    rc = main(["obclient", "-s", str(tmp_path / "missing.sock")])
    assert rc == 1
    assert "failed to connect" in capsys.readouterr().err