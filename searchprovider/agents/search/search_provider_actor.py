"""
Search provider actor for one application.

The actor exclusively owns the project index of its application and processes
the messages of its mailbox strictly one after another. Only a refresh leaves
the reactor thread: the blocking read runs on the shared IO pool while the
actor waits for it, so later messages observe the refreshed index.
"""
import asyncio
import enum
import logging
from concurrent.futures import Executor
from typing import Callable, Dict, List, Optional, Sequence

from searchprovider.agents.app_launcher.app_launch_service import AppLaunchService
from searchprovider.core.desktop_entry import DesktopEntry
from searchprovider.core.enable_gate import EnableGate
from searchprovider.core.errors import LaunchError, ProjectIndexError, ResultNotFound
from searchprovider.core.mailbox import (
    Activate,
    InitialSearch,
    Mailbox,
    Message,
    Refresh,
    ResultMetadata,
    SubsearchResult,
)
from searchprovider.core.projects import ProjectIndex, ProjectRecord, abbreviate_home

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 50


class ActorState(enum.Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"
    ANSWERING = "answering"


class SearchProviderActor:
    def __init__(
        self,
        app: DesktopEntry,
        reader: Callable[[], List[ProjectRecord]],
        gate: EnableGate,
        launcher: AppLaunchService,
        io_pool: Executor,
        mailbox: Mailbox,
        max_results: int = DEFAULT_MAX_RESULTS,
    ):
        self.app = app
        self.reader = reader
        self.gate = gate
        self.launcher = launcher
        self.io_pool = io_pool
        self.mailbox = mailbox
        self.max_results = max_results
        self.index = ProjectIndex()
        self.state = ActorState.IDLE

    @property
    def app_id(self) -> str:
        return self.app.desktop_id

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> asyncio.Task:
        """Spawn the message loop of this actor on ``loop``."""
        loop = loop or asyncio.get_event_loop()
        logger.debug("Starting search service for %s", self.app_id)
        return loop.create_task(self.run(), name=f"search-provider-{self.app_id}")

    async def run(self) -> None:
        while True:
            message = await self.mailbox.receive()
            try:
                result = await self.handle(message)
            except (LaunchError, ResultNotFound) as e:
                logger.warning("App %s: %s", self.app_id, e)
                message.fail(e)
            except Exception as e:
                logger.exception("App %s failed to process %r", self.app_id, message)
                message.fail(e)
            else:
                message.resolve(result)

    async def handle(self, message: Message):
        if isinstance(message, Refresh):
            return await self.refresh()
        self.state = ActorState.ANSWERING
        try:
            if isinstance(message, InitialSearch):
                return self.initial_search(message.terms)
            if isinstance(message, SubsearchResult):
                return self.subsearch(message.previous, message.terms)
            if isinstance(message, ResultMetadata):
                return self.result_metadata(message.ids)
            if isinstance(message, Activate):
                return self.activate(message.id)
            raise TypeError(f"Unsupported message {message!r}")
        finally:
            self.state = ActorState.IDLE

    async def refresh(self) -> bool:
        """Re-read the project index; keeps the old index if reading fails."""
        self.state = ActorState.REFRESHING
        loop = asyncio.get_running_loop()
        try:
            records = await loop.run_in_executor(self.io_pool, self.reader)
        except ProjectIndexError as e:
            logger.error("Failed to refresh projects of app %s, keeping %d old projects: %s",
                         self.app_id, len(self.index), e)
            return False
        except Exception:
            logger.exception("Failed to refresh projects of app %s, keeping %d old projects",
                             self.app_id, len(self.index))
            return False
        finally:
            self.state = ActorState.IDLE
        self.index = ProjectIndex(records)
        logger.info("Found %d project(s) for app %s", len(self.index), self.app_id)
        return True

    def initial_search(self, terms: Sequence[str]) -> List[str]:
        if self.gate.get():
            logger.debug("App %s is disabled, not searching", self.app_id)
            return []
        ids = self.index.search(terms, self.max_results)
        logger.debug("Found %d matches for %r in app %s", len(ids), list(terms), self.app_id)
        return ids

    def subsearch(self, previous: Sequence[str], terms: Sequence[str]) -> List[str]:
        if self.gate.get():
            logger.debug("App %s is disabled, not searching", self.app_id)
            return []
        return self.index.subsearch(previous, terms, self.max_results)

    def result_metadata(self, ids: Sequence[str]) -> List[Dict[str, str]]:
        metas = []
        for project_id in ids:
            record = self.index.get(project_id)
            if record is None:
                continue
            metas.append({
                "id": record.id,
                "name": record.display_name,
                "description": abbreviate_home(record.path),
                "icon": self.app.icon,
            })
        return metas

    def activate(self, project_id: str) -> int:
        record = self.index.get(project_id)
        if record is None:
            raise ResultNotFound(f"Project {project_id} not found")
        logger.info("Launching app %s with project %s", self.app_id, record.path)
        return self.launcher.launch(self.app, record)
