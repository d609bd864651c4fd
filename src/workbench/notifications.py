# -----------------------------------------------------------------------------
# Notification Queue
# Purpose: transient success/error/warning toasts, auto-dismissed.
# Each Toast is a tiny state machine:  visible → removing → gone
#   - the dwell timer and an explicit dismiss() both funnel into _begin_removal
#   - only a 'visible' toast can start removal, so neither path re-fires the
#     timer or removes twice
# Timers run on the current asyncio loop (loop.call_later). Without a running
# loop, toasts stay visible until dismissed and removal completes immediately.
# -----------------------------------------------------------------------------

from __future__ import annotations
import asyncio
import itertools
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from . import config
from .logger import get_logger

logger = get_logger(__name__)


class ToastKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


class ToastState(str, Enum):
    VISIBLE = "visible"
    REMOVING = "removing"
    GONE = "gone"


ICONS = {ToastKind.SUCCESS: "✓", ToastKind.ERROR: "✕", ToastKind.WARNING: "!"}

_LOG_LEVELS = {ToastKind.SUCCESS: logging.INFO, ToastKind.WARNING: logging.WARNING, ToastKind.ERROR: logging.ERROR}

_ids = itertools.count(1)


@dataclass
class Toast:
    kind: ToastKind
    title: str
    message: Optional[str] = None
    created_at: float = field(default_factory=time.time)
    id: int = field(default_factory=lambda: next(_ids))
    state: ToastState = ToastState.VISIBLE
    # pending timer (dwell or exit transition); never more than one
    _handle: Optional[asyncio.TimerHandle] = field(default=None, repr=False, compare=False)

    @property
    def icon(self) -> str:
        return ICONS[self.kind]


Listener = Callable[[Toast], None]


class NotificationQueue:
    def __init__(self, dwell: float | None = None, exit_delay: float | None = None):
        self.dwell = config.TOAST_DWELL_SECONDS if dwell is None else dwell
        self.exit_delay = config.TOAST_EXIT_SECONDS if exit_delay is None else exit_delay
        self._toasts: List[Toast] = []
        self._listeners: List[Listener] = []

    # ---------------- public API ----------------

    def show(self, kind: ToastKind | str, title: str, message: str | None = None) -> Toast:
        toast = Toast(kind=ToastKind(kind), title=title, message=message)
        self._toasts.append(toast)
        logger.log(_LOG_LEVELS[toast.kind], "%s: %s%s", toast.kind.value, title,
                   f" ({message})" if message else "")
        toast._handle = self._schedule(self.dwell, self._begin_removal, toast)
        self._notify(toast)
        return toast

    def success(self, title: str, message: str | None = None) -> Toast:
        return self.show(ToastKind.SUCCESS, title, message)

    def error(self, title: str, message: str | None = None) -> Toast:
        return self.show(ToastKind.ERROR, title, message)

    def warning(self, title: str, message: str | None = None) -> Toast:
        return self.show(ToastKind.WARNING, title, message)

    def dismiss(self, toast: Toast) -> None:
        """Idempotent: a toast already removing or detached is left alone."""
        self._begin_removal(toast)

    def active(self) -> List[Toast]:
        """Toasts still attached (visible or in their exit transition), oldest first."""
        return [t for t in self._toasts if t.state is not ToastState.GONE]

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # ---------------- transitions ----------------

    def _begin_removal(self, toast: Toast) -> None:
        if toast.state is not ToastState.VISIBLE or toast not in self._toasts:
            return
        if toast._handle is not None:
            toast._handle.cancel()
        toast.state = ToastState.REMOVING
        self._notify(toast)
        toast._handle = self._schedule(self.exit_delay, self._detach, toast)
        if toast._handle is None:
            self._detach(toast)

    def _detach(self, toast: Toast) -> None:
        if toast.state is not ToastState.REMOVING:
            return
        toast.state = ToastState.GONE
        toast._handle = None
        self._toasts.remove(toast)
        self._notify(toast)

    # ---------------- helpers ----------------

    @staticmethod
    def _schedule(delay: float, callback, toast: Toast) -> Optional[asyncio.TimerHandle]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return None
        return loop.call_later(delay, callback, toast)

    def _notify(self, toast: Toast) -> None:
        for listener in list(self._listeners):
            listener(toast)
