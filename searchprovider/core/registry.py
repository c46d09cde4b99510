import asyncio
import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Callable, Collection, Dict, Iterable, Iterator, List, Optional, Tuple

from searchprovider.agents.app_launcher.app_launch_service import AppLaunchService
from searchprovider.agents.search.search_provider_actor import DEFAULT_MAX_RESULTS, SearchProviderActor
from searchprovider.core.desktop_entry import DesktopEntry, find_desktop_entry
from searchprovider.core.enable_gate import EnableGate
from searchprovider.core.mailbox import DEFAULT_CAPACITY, Mailbox, Refresh
from searchprovider.core.providers import DEFAULT_NAMESPACE, ProviderDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredProvider:
    """Everything that serves one installed application."""
    provider: ProviderDefinition
    app: DesktopEntry
    object_path: str
    gate: EnableGate
    mailbox: Mailbox
    actor: SearchProviderActor

    @property
    def app_id(self) -> str:
        return self.app.desktop_id


class ServiceRegistry:
    """Installed applications by id; fixed once built."""

    def __init__(self, providers: Iterable[RegisteredProvider]):
        self._providers: Dict[str, RegisteredProvider] = {}
        for registered in providers:
            if registered.app_id in self._providers:
                logger.warning("Ignoring duplicate provider for app %s", registered.app_id)
                continue
            self._providers[registered.app_id] = registered

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self) -> Iterator[RegisteredProvider]:
        return iter(self._providers.values())

    def __getitem__(self, app_id: str) -> RegisteredProvider:
        return self._providers[app_id]

    def listing(self) -> List[Tuple[str, str]]:
        return [(p.app_id, p.object_path) for p in self._providers.values()]

    def gates(self) -> Dict[str, EnableGate]:
        return {p.app_id: p.gate for p in self._providers.values()}

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> List[asyncio.Task]:
        return [p.actor.start(loop) for p in self._providers.values()]

    async def refresh_all(self) -> List[bool]:
        return await asyncio.gather(*(p.mailbox.request(Refresh()) for p in self._providers.values()))


def build_registry(
    providers: Iterable[ProviderDefinition],
    launcher: AppLaunchService,
    io_pool: Executor,
    disabled_apps: Collection[str] = (),
    namespace: str = DEFAULT_NAMESPACE,
    capacity: int = DEFAULT_CAPACITY,
    max_results: int = DEFAULT_MAX_RESULTS,
    find_app: Callable[[str], Optional[DesktopEntry]] = find_desktop_entry,
    reader_for: Optional[Callable[[ProviderDefinition], Callable]] = None,
) -> ServiceRegistry:
    """Create gate, mailbox and actor for every provider whose app is installed."""
    registered = []
    for provider in providers:
        app = find_app(provider.desktop_id)
        if app is None:
            logger.debug("Skipping provider %s, app %s not found", provider.label, provider.desktop_id)
            continue
        logger.info("Found app %s", app.desktop_id)
        gate = EnableGate(app.desktop_id, app.desktop_id in disabled_apps)
        mailbox = Mailbox(app.desktop_id, capacity)
        reader = reader_for(provider) if reader_for else provider.reader()
        actor = SearchProviderActor(app, reader, gate, launcher, io_pool, mailbox, max_results)
        registered.append(
            RegisteredProvider(provider, app, provider.objpath(namespace), gate, mailbox, actor)
        )
    return ServiceRegistry(registered)


def shutdown_tasks(loop: asyncio.AbstractEventLoop, tasks: Iterable[asyncio.Task]) -> None:
    """Cancel ``tasks`` and run ``loop`` until every cancellation is delivered."""
    tasks = list(tasks)
    for task in tasks:
        task.cancel()
    if tasks:
        loop.run_until_complete(asyncio.gather(*tasks, return_exceptions=True))
