"""Listener port - How progressive route results leave the pipeline.

The rendering layer implements this protocol; the pipeline never
depends on any drawing concern and can run headless.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.models import RouteUpdate


class RouteListenerPort(Protocol):
    """Port receiving route snapshots while a run progresses."""

    def on_partial(self, update: RouteUpdate) -> None:
        """Receive an intermediate snapshot.

        Fired once for the cached fast path and again after each newly
        resolved place.
        """
        ...

    def on_complete(self, update: RouteUpdate) -> None:
        """Receive the final snapshot of a completed run."""
        ...
