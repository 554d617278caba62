"""Result codes, statement structures, tuple sets, sessions, a NUL-framed socket server and a client."""

__version__ = "0.1.0"
__all__ = [
    "rc",
    "parse_defs",
    "value",
    "tuple",
    "session",
    "events",
    "session_stage",
    "server",
    "observer",
    "client",
]