"""Host sleep/wake notifications for the sampling controller.

On macOS, NSWorkspace posts WillSleep/DidWake notifications on the main
thread's run loop. The observer forwards them to the controller's
handle_suspend() and handle_wake(). Elsewhere install() returns False
and the controller relies on clock-jump detection in its tick.

Usage:
    from app.power import PowerEventObserver

    observer = PowerEventObserver(controller)
    observer.install()
"""

import threading
from typing import Any, Optional

from config import get_logger, log_exception

logger = get_logger(__name__)


# Global observer class - an Objective-C class can only be registered once
_ObserverClass = None
_ObserverClassLock = threading.Lock()


def _get_observer_class():
    """Get or create the NSObject subclass receiving workspace notifications."""
    global _ObserverClass

    if _ObserverClass is not None:
        return _ObserverClass

    with _ObserverClassLock:
        if _ObserverClass is not None:
            return _ObserverClass

        from Foundation import NSObject

        class _PowerNotificationHelper(NSObject):
            """Receives NSWorkspace notifications and forwards them."""

            owner_ref = None

            def workspaceWillSleep_(self, _notification):
                if self.owner_ref is not None:
                    self.owner_ref.on_will_sleep()

            def workspaceDidWake_(self, _notification):
                if self.owner_ref is not None:
                    self.owner_ref.on_did_wake()

        _ObserverClass = _PowerNotificationHelper

    return _ObserverClass


class PowerEventObserver:
    """Bridges host power-state notifications to a MonitorController.

    Attributes:
        controller: Anything with handle_suspend() and handle_wake().
    """

    def __init__(self, controller: Any):
        self.controller = controller
        self._helper = None
        self._center: Optional[Any] = None

    @property
    def is_installed(self) -> bool:
        return self._helper is not None

    def on_will_sleep(self) -> None:
        logger.info("Host is going to sleep")
        try:
            self.controller.handle_suspend()
        except Exception as e:
            # Raising into the Cocoa run loop would take the process down
            log_exception(logger, "Suspend handling failed", e)

    def on_did_wake(self) -> None:
        logger.info("Host woke up")
        try:
            self.controller.handle_wake()
        except Exception as e:
            log_exception(logger, "Wake handling failed", e)

    def install(self) -> bool:
        """Register for NSWorkspace sleep/wake notifications.

        Returns:
            True if registered, False if pyobjc/AppKit is unavailable.
        """
        if self._helper is not None:
            return True
        try:
            from AppKit import (
                NSWorkspace,
                NSWorkspaceDidWakeNotification,
                NSWorkspaceWillSleepNotification,
            )
            helper_class = _get_observer_class()
        except ImportError:
            logger.info("AppKit not available; sleep/wake notifications disabled")
            return False

        helper = helper_class.alloc().init()
        helper.owner_ref = self
        center = NSWorkspace.sharedWorkspace().notificationCenter()
        center.addObserver_selector_name_object_(
            helper, "workspaceWillSleep:", NSWorkspaceWillSleepNotification, None
        )
        center.addObserver_selector_name_object_(
            helper, "workspaceDidWake:", NSWorkspaceDidWakeNotification, None
        )
        self._helper = helper
        self._center = center
        logger.debug("Registered for sleep/wake notifications")
        return True

    def uninstall(self) -> None:
        """Stop receiving notifications."""
        if self._helper is None:
            return
        self._center.removeObserver_(self._helper)
        self._helper.owner_ref = None
        self._helper = None
        self._center = None
        logger.debug("Unregistered sleep/wake notifications")
