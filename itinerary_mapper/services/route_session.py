"""Route session - At most one live run per session.

The rendering layer calls ``submit`` whenever the itinerary text or the
city changes. The previous run is cancelled and its listener is cut off,
so a slow run for stale input can never overwrite a newer map. Cache
writes the cancelled run already made are kept.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..domain.models import RouteUpdate
from ..ports.listener import RouteListenerPort
from .route_builder import RouteBuilderService


@dataclass
class RouteRun:
    """Handle on one background run.

    Attributes:
        content: Itinerary text of the run
        city: City text of the run
        max_results: Venue budget, None for the per-day default
    """

    content: str
    city: str
    max_results: Optional[int] = None

    _cancel_event: threading.Event = field(default_factory=threading.Event, repr=False)
    _done: threading.Event = field(default_factory=threading.Event, repr=False)
    _result: Optional[RouteUpdate] = field(default=None, repr=False)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.content, self.city)

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    @property
    def result(self) -> Optional[RouteUpdate]:
        """Final snapshot; None while running, if cancelled or if no anchor."""
        return self._result

    def cancel(self) -> None:
        self._cancel_event.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the run finishes.

        Returns:
            True if the run finished within ``timeout``.
        """
        return self._done.wait(timeout)


@dataclass
class _RunListener:
    """Forward snapshots only while the run is live."""

    run: RouteRun
    listener: Optional[RouteListenerPort]

    def on_partial(self, update: RouteUpdate) -> None:
        if self.listener is not None and not self.run.cancelled:
            self.listener.on_partial(update)

    def on_complete(self, update: RouteUpdate) -> None:
        if self.listener is not None and not self.run.cancelled:
            self.listener.on_complete(update)


@dataclass
class RouteSession:
    """Run route builds in the background, cancelling superseded runs.

    Attributes:
        builder: Service executing each run
    """

    builder: RouteBuilderService

    _current: Optional[RouteRun] = field(default=None, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def current(self) -> Optional[RouteRun]:
        return self._current

    def submit(
        self,
        content: str,
        city: str,
        listener: Optional[RouteListenerPort],
        max_results: Optional[int] = None,
    ) -> RouteRun:
        """Start a run for (content, city), cancelling any other one.

        Submitting the pair that is already running returns the running
        handle instead of starting over.
        """
        with self._lock:
            current = self._current
            if (
                current is not None
                and current.key == (content, city)
                and not current.done
                and not current.cancelled
            ):
                return current

            if current is not None and not current.done:
                current.cancel()
                self._logger.info("Superseded run cancelled", extra={"city": current.city})

            run = RouteRun(content=content, city=city, max_results=max_results)
            self._current = run
            worker = threading.Thread(
                target=self._execute,
                args=(run, _RunListener(run, listener)),
                name="route-run",
                daemon=True,
            )
            worker.start()
            return run

    def cancel(self) -> bool:
        """Cancel the live run, if any.

        Returns:
            True if a running run was cancelled.
        """
        with self._lock:
            current = self._current
            if current is None or current.done or current.cancelled:
                return False
            current.cancel()
            return True

    def _execute(self, run: RouteRun, listener: _RunListener) -> None:
        try:
            run._result = self.builder.build(
                run.content,
                run.city,
                max_results=run.max_results,
                listener=listener,
                cancel_event=run._cancel_event,
            )
        except Exception:
            self._logger.exception("Route run failed", extra={"city": run.city})
        finally:
            run._done.set()
