"""Connection interface consumed by the inventory core.

The core never owns a connection; it borrows a :class:`RemoteHandle` for
the duration of one run.  The interface is narrow so it is easy to fake in
tests.
"""

from __future__ import annotations

from typing import Any, Protocol

__all__ = ["RemoteHandle"]


class RemoteHandle(Protocol):
    """Capability to run one SOQL query against the target org."""

    def query(self, soql: str) -> list[dict[str, Any]]:
        """Return every record for ``soql`` or raise on transport/query failure."""
