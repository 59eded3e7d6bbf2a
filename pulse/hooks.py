"""
Process-wide hook capturing unhandled exceptions.

The hook wraps ``sys.excepthook`` and ``threading.excepthook``. It records a
fatal event and then hands the exception to the hook it replaced, so the
interpreter reports and terminates exactly as it would without it.
"""

import logging
import sys
import threading
from types import TracebackType
from typing import Callable, Optional, Type

from pulse.log_codes import HOOK_INSTALLED, HOOK_UNINSTALLED

logger = logging.getLogger(__name__)

PanicCallback = Callable[
    [Type[BaseException], Optional[BaseException], Optional[TracebackType]], None
]


class PanicHook:
    """
    Installable wrapper around the interpreter's exception hooks.

    Args:
        on_panic: Called with (type, value, traceback) for every unhandled
            exception except KeyboardInterrupt.
    """

    def __init__(self, on_panic: PanicCallback):
        self._on_panic = on_panic
        self._previous_excepthook = None
        self._previous_threading_excepthook = None
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> None:
        if self._installed:
            return

        self._previous_excepthook = sys.excepthook
        self._previous_threading_excepthook = threading.excepthook
        sys.excepthook = self._excepthook
        threading.excepthook = self._threading_excepthook
        self._installed = True
        logger.debug(HOOK_INSTALLED)

    def uninstall(self) -> None:
        if not self._installed:
            return

        # Another hook may have been chained on top of ours; leave it alone.
        if sys.excepthook == self._excepthook:
            sys.excepthook = self._previous_excepthook
        if threading.excepthook == self._threading_excepthook:
            threading.excepthook = self._previous_threading_excepthook

        self._installed = False
        logger.debug(HOOK_UNINSTALLED)

    def _capture(self, exc_type, exc_value, exc_tb) -> None:
        if exc_type is not None and issubclass(exc_type, KeyboardInterrupt):
            return
        try:
            self._on_panic(exc_type, exc_value, exc_tb)
        except Exception:
            logger.exception("Unable to capture unhandled exception")

    def _excepthook(self, exc_type, exc_value, exc_tb) -> None:
        self._capture(exc_type, exc_value, exc_tb)
        previous = self._previous_excepthook or sys.__excepthook__
        previous(exc_type, exc_value, exc_tb)

    def _threading_excepthook(self, args) -> None:
        # SystemExit in a thread is silent by default; keep it that way.
        if args.exc_type is not SystemExit:
            self._capture(args.exc_type, args.exc_value, args.exc_traceback)
        previous = self._previous_threading_excepthook or threading.__excepthook__
        previous(args)
