"""Server entry point: command line, configuration, logging and start-up."""

from __future__ import annotations

import configparser
import getopt
import logging
import os
import re
import signal
import sys
import threading
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from miniob.events import SessionEvent
from miniob.server import MAX_CONNECTION_NUM_DEFAULT, PORT_DEFAULT, Server, ServerParam
from miniob.session_stage import SessionStage

__all__ = [
    "ProcessParam",
    "parse_parameters",
    "load_properties",
    "init_server_param",
    "main",
]

logger = logging.getLogger(__name__)

NET_SECTION = "NET"
LOG_SECTION = "LOG"
CLIENT_ADDRESS = "CLIENT_ADDRESS"
MAX_CONNECTION_NUM = "MAX_CONNECTION_NUM"
PORT = "PORT"

Properties = Dict[str, Dict[str, str]]

_USAGE = (
    "Useage \n"
    "-p: server port. if not specified, the item in the config file will be used\n"
    "-f: path of config file.\n"
    "-s: use unix socket and the argument is socket address\n"
)

# numeric levels used in the LOG section, from panic up to trace
_LOG_LEVELS = {
    0: logging.CRITICAL,
    1: logging.ERROR,
    2: logging.WARNING,
    3: logging.INFO,
    4: logging.DEBUG,
    5: logging.DEBUG,
}

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def _str_to_int(text: Optional[str], default: int) -> int:
    """Read a leading integer from text, falling back to default."""
    if text is None:
        return default
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else default


@dataclass
class ProcessParam:
    """Options the server process was started with."""

    process_name: str = ""
    conf: str = ""
    std_out: str = ""
    std_err: str = ""
    unix_socket_path: str = ""
    server_port: int = -1
    demon: bool = False


def _usage() -> None:
    sys.stdout.write(_USAGE)
    sys.stdout.flush()
    raise SystemExit(0)


def parse_parameters(argv: Sequence[str]) -> ProcessParam:
    """Build the process parameters from a full argument vector.

    ``-h`` or an unknown option prints the usage and exits with status 0.
    """
    args = list(argv)
    program = args[0] if args else "observer"
    process_name = os.path.basename(program) or "observer"
    param = ProcessParam(
        process_name=process_name,
        std_out=f"{process_name}.out",
        std_err=f"{process_name}.err",
    )

    try:
        options, _ = getopt.getopt(args[1:], "dp:s:f:o:e:h")
    except getopt.GetoptError:
        _usage()
        return param

    for opt, arg in options:
        if opt == "-s":
            param.unix_socket_path = arg
        elif opt == "-p":
            param.server_port = _str_to_int(arg, 0)
        elif opt == "-f":
            param.conf = arg
        elif opt == "-o":
            param.std_out = arg
        elif opt == "-e":
            param.std_err = arg
        elif opt == "-d":
            param.demon = True
        else:
            _usage()
    return param


def load_properties(path: str) -> Properties:
    """Read an ini file into a mapping of section name to key/value pairs.

    Raises OSError when the file cannot be read and configparser.Error when
    it is malformed.
    """
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    parser.optionxform = str  # keys keep their case
    with open(path, encoding="utf-8") as handle:
        parser.read_file(handle)
    return {name: dict(parser.items(name)) for name in parser.sections()}


def _render_properties(properties: Mapping[str, Mapping[str, str]]) -> str:
    lines: List[str] = []
    for section, items in properties.items():
        lines.append(f"[{section}]")
        lines.extend(f"{key}={value}" for key, value in items.items())
        lines.append("")
    return "\n".join(lines)


def init_server_param(properties: Mapping[str, Mapping[str, str]], process_param: ProcessParam) -> ServerParam:
    """Combine the NET section with the command line into server parameters."""
    net_section = properties.get(NET_SECTION, {})
    param = ServerParam()
    param.listen_addr = _str_to_int(net_section.get(CLIENT_ADDRESS), param.listen_addr)
    param.max_connection_num = _str_to_int(net_section.get(MAX_CONNECTION_NUM), MAX_CONNECTION_NUM_DEFAULT)

    if process_param.server_port > 0:
        param.port = process_param.server_port
        logger.info("Use port config in command line: %d", param.port)
    else:
        param.port = _str_to_int(net_section.get(PORT), PORT_DEFAULT)

    if process_param.unix_socket_path:
        param.use_unix_socket = True
        param.unix_socket_path = process_param.unix_socket_path
    return param


def _log_level(text: Optional[str]) -> int:
    if text is None:
        return logging.INFO
    return _LOG_LEVELS.get(_str_to_int(text, 3), logging.INFO)


def _init_log(process_param: ProcessParam, properties: Properties) -> List[logging.Handler]:
    package_logger = logging.getLogger("miniob")
    if package_logger.handlers:
        return []

    section = properties.get(LOG_SECTION, {})
    file_name = section.get("LOG_FILE_NAME")
    if file_name is None:
        file_name = f"{process_param.process_name}.log"
        print(f"Not set log file name, use default {file_name}")
    file_name = os.path.abspath(file_name)

    file_level = _log_level(section.get("LOG_FILE_LEVEL"))
    console_level = _log_level(section.get("LOG_CONSOLE_LEVEL"))

    formatter = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
    file_handler = logging.FileHandler(file_name, encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)

    handlers: List[logging.Handler] = [file_handler, console_handler]
    for handler in handlers:
        package_logger.addHandler(handler)
    package_logger.setLevel(min(file_level, console_level))
    return handlers


def _cleanup_log(handlers: List[logging.Handler]) -> None:
    package_logger = logging.getLogger("miniob")
    for handler in handlers:
        package_logger.removeHandler(handler)
        handler.close()


def _redirect_output(process_param: ProcessParam) -> None:
    sys.stdout = open(process_param.std_out, "a", buffering=1, encoding="utf-8")
    sys.stderr = open(process_param.std_err, "a", buffering=1, encoding="utf-8")


def _build_server(properties: Properties, process_param: ProcessParam) -> Server:
    server = Server(init_server_param(properties, process_param))
    stage = SessionStage(send=server.send)

    def handle(event: SessionEvent) -> None:
        stage.handle_event(event)

    server.handler = handle
    return server


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the server until it is stopped by a signal; return the exit status."""
    args = list(sys.argv if argv is None else argv)
    process_param = parse_parameters(args)

    try:
        properties = load_properties(process_param.conf) if process_param.conf else {}
    except (OSError, configparser.Error):
        print("Failed to load configuration files", file=sys.stderr)
        print("Shutdown due to failed to init!", file=sys.stderr)
        return 1

    if process_param.demon:
        _redirect_output(process_param)

    try:
        handlers = _init_log(process_param, properties)
    except OSError as exc:
        print(f"Failed to init log for {process_param.process_name}: {exc}", file=sys.stderr)
        print("Shutdown due to failed to init!", file=sys.stderr)
        return 1

    try:
        logger.info("Output configuration \n%s", _render_properties(properties))
        logger.info("Successfully init utility")
        server = _build_server(properties, process_param)

        def quit_handler(signum, frame) -> None:
            logger.info("Receive signal: %d", signum)
            # shut down outside the handler to avoid re-entering held locks
            threading.Thread(target=server.shutdown, daemon=True).start()

        previous = {}
        if threading.current_thread() is threading.main_thread():
            for sig in (signal.SIGINT, signal.SIGTERM):
                previous[sig] = signal.getsignal(sig)
                signal.signal(sig, quit_handler)
        try:
            server.serve()
        except OSError as exc:
            logger.critical("Failed to start network: %s", exc)
            return 1
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)

        logger.info("Server stopped")
        return 0
    finally:
        _cleanup_log(handlers)