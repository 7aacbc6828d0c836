"""Routing of process signals to the running application."""

from __future__ import annotations

import logging
import signal
from types import FrameType
from typing import Any, Callable, Dict, Optional, Tuple

_log = logging.getLogger(__name__)

_Action = Optional[Callable[[Any], None]]


def _stop_app(app: Any) -> None:
    app.stop()


class SignalManager:
    """Stops the application on SIGINT and SIGTERM, and ignores SIGPIPE.

    ``app`` is any object with a ``stop()`` method.
    """

    def __init__(self, app: Any) -> None:
        self._app = app
        self._handlers: Dict[int, Tuple[str, _Action]] = {
            int(signal.SIGTERM): ("SIGTERM", _stop_app),
            int(signal.SIGINT): ("SIGINT", _stop_app),
        }
        pipe = getattr(signal, "SIGPIPE", None)
        if pipe is not None:
            # Registered so a broken connection does not kill the process.
            self._handlers[int(pipe)] = ("SIGPIPE", None)

    def install(self) -> None:
        """Route every handled signal to ``dispatch``; call from the main thread."""
        for signum in self._handlers:
            signal.signal(signum, self.dispatch)

    def dispatch(self, signum: int, frame: Optional[FrameType]) -> None:
        """Run the handler registered for ``signum``, if any."""
        entry = self._handlers.get(int(signum))
        if entry is None:
            return
        name, action = entry
        if action is None:
            return
        _log.debug("Caught signal %s", name)
        action(self._app)

    def handled_signals(self) -> Tuple[int, ...]:
        """The signal numbers this manager handles, in ascending order."""
        return tuple(sorted(self._handlers))