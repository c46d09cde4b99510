import logging
from typing import Sequence

import dbus

from searchprovider.agents.app_launcher.app_launch_service import ScopeRegistrationError

logger = logging.getLogger(__name__)

SYSTEMD_BUSNAME = "org.freedesktop.systemd1"
SYSTEMD_PATH = "/org/freedesktop/systemd1"
MANAGER_IFACE = "org.freedesktop.systemd1.Manager"


class SystemdScopes:
    """Moves launched processes into transient scopes of the systemd user manager."""

    def __init__(self, bus):
        self._bus = bus
        self._manager = None

    def manager(self):
        if self._manager is None:
            proxy = self._bus.get_object(SYSTEMD_BUSNAME, SYSTEMD_PATH, introspect=False,
                                         follow_name_owner_changes=True)
            self._manager = dbus.Interface(proxy, MANAGER_IFACE)
        return self._manager

    def start_scope(self, name: str, pid: int, description: str, documentation: Sequence[str]) -> None:
        properties = dbus.Array(
            [
                dbus.Struct(("Description", dbus.String(description)), signature="sv"),
                dbus.Struct(("Documentation", dbus.Array(list(documentation), signature="s")),
                            signature="sv"),
                dbus.Struct(("PIDs", dbus.Array([dbus.UInt32(pid)], signature="u")), signature="sv"),
                # Garbage-collect the scope even if the app failed
                dbus.Struct(("CollectMode", dbus.String("inactive-or-failed")), signature="sv"),
            ],
            signature="(sv)",
        )

        def on_reply(job):
            logger.debug("Started scope %s for PID %s as job %s", name, pid, job)

        def on_error(error):
            logger.warning("Failed to start scope %s for PID %s: %s", name, pid, error)

        try:
            self.manager().StartTransientUnit(
                name, "fail", properties, dbus.Array([], signature="(sa(sv))"),
                signature="ssa(sv)a(sa(sv))",
                reply_handler=on_reply,
                error_handler=on_error,
            )
        except dbus.exceptions.DBusException as e:
            raise ScopeRegistrationError(str(e)) from e
