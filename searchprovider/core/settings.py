import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from searchprovider.core.enable_gate import EnableGate

logger = logging.getLogger(__name__)


class DisabledAppsListener:
    """Pushes snapshots of the disabled apps setting into the enable gates.

    The settings backend calls :meth:`notify` on every change; a dedicated task
    (:meth:`run`) applies them, so no settings callback ever reaches into an
    actor. Only the latest snapshot matters: a burst of changes that arrives
    before the task runs is applied once.
    """

    def __init__(self, gates: Dict[str, EnableGate]):
        self.gates = gates
        self._latest: Optional[List[str]] = None
        self._changed = asyncio.Event()

    def apply(self, disabled_apps: Iterable[str]) -> None:
        disabled = set(disabled_apps)
        for app_id, gate in self.gates.items():
            gate.set(app_id in disabled)

    def notify(self, disabled_apps: Iterable[str]) -> None:
        if self._latest is not None:
            logger.debug("Dropping unapplied disabled apps snapshot %s", self._latest)
        self._latest = list(disabled_apps)
        self._changed.set()

    async def run(self) -> None:
        while True:
            await self._changed.wait()
            self._changed.clear()
            snapshot, self._latest = self._latest, None
            if snapshot is None:
                continue
            logger.info("Disabled apps changed to %s", snapshot)
            self.apply(snapshot)

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> asyncio.Task:
        loop = loop or asyncio.get_event_loop()
        return loop.create_task(self.run(), name="disabled-apps-listener")
