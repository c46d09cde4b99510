"""
Start the search provider service on the session bus.

The asyncio loop runs on the GLib main context, which also dispatches D-Bus
messages and settings change notifications; everything except reading recent
projects happens on this one thread.
"""
import asyncio
import logging
import signal
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

import dbus
import dbus.service
from dbus.mainloop.glib import DBusGMainLoop
from gi.events import GLibEventLoopPolicy
from gi.repository import Gio

from searchprovider.agents.app_launcher.app_launch_service import AppLaunchService, ScopeSettings
from searchprovider.bus.log_control import LogControlObject
from searchprovider.bus.search_provider import SearchProvider
from searchprovider.bus.service_interface import ServiceInterface
from searchprovider.bus.systemd import SystemdScopes
from searchprovider.config_manager import ConfigManager
from searchprovider.core.errors import ServiceStartupError
from searchprovider.core.logging_control import LogControl
from searchprovider.core.providers import PROVIDERS
from searchprovider.core.registry import ServiceRegistry, build_registry, shutdown_tasks
from searchprovider.core.settings import DisabledAppsListener

logger = logging.getLogger(__name__)


@dataclass
class Service:
    """The running service; holds on to everything that must stay alive."""
    bus: dbus.Bus
    bus_name: dbus.service.BusName
    registry: ServiceRegistry
    launch_service: AppLaunchService
    io_pool: ThreadPoolExecutor
    settings: Optional[Gio.Settings]
    objects: List[dbus.service.Object] = field(default_factory=list)
    tasks: List[asyncio.Task] = field(default_factory=list)

    def close(self, loop: asyncio.AbstractEventLoop) -> None:
        shutdown_tasks(loop, self.tasks)
        self.io_pool.shutdown(wait=False)


def open_settings(schema_id: str) -> Optional[Gio.Settings]:
    # Gio.Settings aborts the process for unknown schemas, so check first.
    source = Gio.SettingsSchemaSource.get_default()
    if source is None or source.lookup(schema_id, True) is None:
        logger.warning("Settings schema %s not installed, all apps are enabled", schema_id)
        return None
    return Gio.Settings.new(schema_id)


async def start_dbus_service(config: ConfigManager, log_control: LogControl,
                             loop: asyncio.AbstractEventLoop) -> Service:
    """Register a D-Bus object for every provider whose app is installed."""
    launch_service = AppLaunchService(
        ScopeSettings(
            prefix=config.get("launch.scope_prefix"),
            started_by=config.get("launch.started_by"),
            documentation=tuple(config.get("launch.documentation", [])),
        )
    )
    # Two threads shared by all providers keep reading projects off the main loop.
    io_pool = ThreadPoolExecutor(max_workers=int(config.get("search.io_workers", 2)),
                                 thread_name_prefix="recent-projects")

    disabled_key = config.get("settings.disabled_key")
    settings = open_settings(config.get("settings.schema_id"))
    disabled_apps = list(settings.get_strv(disabled_key)) if settings else []
    logger.info("Disabled apps are: %s", disabled_apps)

    registry = build_registry(
        PROVIDERS,
        launch_service,
        io_pool,
        disabled_apps,
        namespace=config.get("service.object_path_namespace"),
        capacity=int(config.get("search.mailbox_capacity", 8)),
        max_results=int(config.get("search.max_results", 50)),
    )
    tasks = registry.start(loop)
    await registry.refresh_all()

    busname = config.get("service.bus_name")
    logger.debug("Connecting to session bus, registering interfaces for %d providers, and acquiring %s",
                 len(registry), busname)
    try:
        bus = dbus.SessionBus()
        objects = []
        for registered in registry:
            logger.debug("Serving search provider for %s at %s", registered.app_id, registered.object_path)
            objects.append(SearchProvider(bus, registered.object_path, registered.app,
                                          registered.mailbox, launch_service, loop))
        objects.append(ServiceInterface(bus, registry))
        objects.append(LogControlObject(bus, log_control))
        bus_name = dbus.service.BusName(busname, bus, do_not_queue=True)
    except (dbus.exceptions.DBusException, KeyError) as e:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        io_pool.shutdown(wait=False)
        raise ServiceStartupError(f"Failed to connect to session bus: {e}") from e

    listener = DisabledAppsListener(registry.gates())
    tasks.append(listener.start(loop))
    if settings is not None:
        logger.debug("Register signal callback when disabled settings change")
        settings.connect(f"changed::{disabled_key}", lambda s, key: listener.notify(s.get_strv(key)))

    launch_service.start(SystemdScopes(bus))
    logger.info("Acquired name %s, serving search providers", busname)
    return Service(bus, bus_name, registry, launch_service, io_pool, settings, objects, tasks)


def run_service(config: ConfigManager, log_control: LogControl) -> int:
    """Serve until terminated; returns the exit status."""
    DBusGMainLoop(set_as_default=True)
    loop = GLibEventLoopPolicy().get_event_loop()
    try:
        service = loop.run_until_complete(start_dbus_service(config, log_control, loop))
    except ServiceStartupError as error:
        logger.error("Failed to start DBus server: %s", error)
        loop.close()
        return 1

    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, loop.stop)
    try:
        loop.run_forever()
    finally:
        logger.info("Stopping search providers")
        service.close(loop)
        loop.close()
    return 0
