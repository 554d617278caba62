"""Per-connection session state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional

__all__ = ["Session"]


@dataclass(eq=False)
class Session:
    """The current database and transaction mode of one client."""

    current_db: str = ""
    # multi-statement mode; otherwise each statement commits on its own
    trx_multi_operation_mode: bool = False

    _default: ClassVar[Optional["Session"]] = None

    @classmethod
    def default_session(cls) -> "Session":
        """Return the shared session new connections start from."""
        if cls._default is None:
            cls._default = cls()
        return cls._default

    def copy(self) -> "Session":
        """Return a new session on the same database, in single-statement mode."""
        return Session(current_db=self.current_db)