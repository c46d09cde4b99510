import logging
import threading

logger = logging.getLogger(__name__)

# Upper bound for a writer waiting on the gate lock, in seconds.
LOCK_TIMEOUT = 0.05


class EnableGate:
    """Shared flag telling whether the provider of one application is disabled.

    Written by the settings listener and read by the application's actor before
    every search. Reads never wait and fail open: if the lock is taken the
    application counts as enabled.
    """

    def __init__(self, application_id: str, disabled: bool = False):
        self.application_id = application_id
        self._disabled = disabled
        self._lock = threading.Lock()

    def set(self, disabled: bool) -> None:
        if not self._lock.acquire(timeout=LOCK_TIMEOUT):
            logger.warning(
                "Lock for app %s cannot be acquired, disable state remains", self.application_id
            )
            return
        try:
            if self._disabled != disabled:
                logger.info(
                    "App %s is now %s", self.application_id, "disabled" if disabled else "enabled"
                )
            self._disabled = disabled
        finally:
            self._lock.release()

    def get(self) -> bool:
        if not self._lock.acquire(blocking=False):
            logger.warning(
                "Cannot acquire disable lock for app %s, app will be searched for projects",
                self.application_id,
            )
            return False
        try:
            return self._disabled
        finally:
            self._lock.release()

    @property
    def disabled(self) -> bool:
        return self.get()
