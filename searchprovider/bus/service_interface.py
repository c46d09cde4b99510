import dbus
import dbus.service

from searchprovider.core.registry import ServiceRegistry

SERVICE_IFACE = "de.swsnr.searchprovider.Service"


class ServiceInterface(dbus.service.Object):
    """Lists all search providers this service exposes."""

    def __init__(self, conn, registry: ServiceRegistry, object_path: str = "/"):
        super().__init__(conn, object_path)
        self.registry = registry

    @dbus.service.method(SERVICE_IFACE, in_signature="", out_signature="a(so)")
    def ListProviders(self):
        return dbus.Array(
            [dbus.Struct((app_id, dbus.ObjectPath(path)), signature="so")
             for app_id, path in self.registry.listing()],
            signature="(so)",
        )
