"""
D-Bus objects for the search provider of one application.

Every call is forwarded as a single message to the application's actor. The
methods use asynchronous callbacks: the D-Bus reply is sent once the actor has
answered, while the main loop keeps serving other calls in the meantime.
"""
import asyncio
import logging

import dbus
import dbus.service

from searchprovider.agents.app_launcher.app_launch_service import AppLaunchService
from searchprovider.core.desktop_entry import DesktopEntry
from searchprovider.core.errors import LaunchError, ResultNotFound
from searchprovider.core.mailbox import (
    Activate,
    InitialSearch,
    Mailbox,
    Refresh,
    ResultMetadata,
    SubsearchResult,
)

logger = logging.getLogger(__name__)

SEARCH_PROVIDER_IFACE = "org.gnome.Shell.SearchProvider2"
EXTENSIONS_IFACE = "de.swsnr.searchprovider.Extensions"

ASYNC_CALLBACKS = ("reply_handler", "error_handler")


class LaunchFailed(dbus.exceptions.DBusException):
    _dbus_error_name = "de.swsnr.searchprovider.Error.LaunchFailed"


class ResultNotFoundError(dbus.exceptions.DBusException):
    _dbus_error_name = "de.swsnr.searchprovider.Error.ResultNotFound"


class RequestCancelled(dbus.exceptions.DBusException):
    _dbus_error_name = "de.swsnr.searchprovider.Error.Cancelled"


def to_dbus_error(error: BaseException) -> BaseException:
    if isinstance(error, LaunchError):
        return LaunchFailed(str(error))
    if isinstance(error, ResultNotFound):
        return ResultNotFoundError(str(error))
    return error


def result_meta(meta: dict) -> dbus.Dictionary:
    entry = {
        "id": dbus.String(meta["id"]),
        "name": dbus.String(meta["name"]),
        "description": dbus.String(meta["description"]),
    }
    if meta.get("icon"):
        entry["gicon"] = dbus.String(meta["icon"])
    return dbus.Dictionary(entry, signature="sv")


class SearchProvider(dbus.service.Object):
    """GNOME Shell search provider for the recent projects of one app."""

    def __init__(self, conn, object_path: str, app: DesktopEntry, mailbox: Mailbox,
                 launcher: AppLaunchService, loop: asyncio.AbstractEventLoop):
        super().__init__(conn, object_path)
        self.app = app
        self.mailbox = mailbox
        self.launcher = launcher
        self.loop = loop

    def _dispatch(self, message, reply_handler, error_handler, convert=None):
        task = self.loop.create_task(self.mailbox.request(message))

        def done(task: asyncio.Task) -> None:
            if task.cancelled():
                error_handler(RequestCancelled(f"Request to app {self.app.desktop_id} was cancelled"))
                return
            try:
                result = task.result()
            except Exception as e:
                error_handler(to_dbus_error(e))
                return
            if convert is None:
                reply_handler()
            else:
                reply_handler(convert(result))

        task.add_done_callback(done)
        return task

    @dbus.service.method(SEARCH_PROVIDER_IFACE, in_signature="as", out_signature="as",
                         async_callbacks=ASYNC_CALLBACKS)
    def GetInitialResultSet(self, terms, reply_handler, error_handler):
        logger.debug("Searching for %s in app %s", list(terms), self.app.desktop_id)
        return self._dispatch(InitialSearch([str(t) for t in terms]),
                              reply_handler, error_handler, convert=list)

    @dbus.service.method(SEARCH_PROVIDER_IFACE, in_signature="asas", out_signature="as",
                         async_callbacks=ASYNC_CALLBACKS)
    def GetSubsearchResultSet(self, previous_results, terms, reply_handler, error_handler):
        return self._dispatch(
            SubsearchResult([str(r) for r in previous_results], [str(t) for t in terms]),
            reply_handler, error_handler, convert=list,
        )

    @dbus.service.method(SEARCH_PROVIDER_IFACE, in_signature="as", out_signature="aa{sv}",
                         async_callbacks=ASYNC_CALLBACKS)
    def GetResultMetas(self, identifiers, reply_handler, error_handler):
        return self._dispatch(
            ResultMetadata([str(i) for i in identifiers]),
            reply_handler, error_handler,
            convert=lambda metas: dbus.Array([result_meta(m) for m in metas], signature="a{sv}"),
        )

    @dbus.service.method(SEARCH_PROVIDER_IFACE, in_signature="sasu", out_signature="",
                         async_callbacks=ASYNC_CALLBACKS)
    def ActivateResult(self, identifier, terms, timestamp, reply_handler, error_handler):
        logger.debug("Activating %s of app %s", identifier, self.app.desktop_id)
        return self._dispatch(Activate(str(identifier)), reply_handler, error_handler)

    @dbus.service.method(SEARCH_PROVIDER_IFACE, in_signature="asu", out_signature="")
    def LaunchSearch(self, terms, timestamp):
        # JetBrains IDEs cannot search on startup, so the terms are dropped.
        logger.debug("Launching app %s directly", self.app.desktop_id)
        try:
            self.launcher.launch(self.app)
        except LaunchError as e:
            logger.warning("App %s: %s", self.app.desktop_id, e)
            raise LaunchFailed(str(e)) from e

    @dbus.service.method(EXTENSIONS_IFACE, in_signature="", out_signature="",
                         async_callbacks=ASYNC_CALLBACKS)
    def Refresh(self, reply_handler, error_handler):
        logger.debug("Refreshing projects of app %s", self.app.desktop_id)
        return self._dispatch(Refresh(), reply_handler, error_handler)
