import dbus
import dbus.service

from searchprovider.core.logging_control import LogControl

LOG_CONTROL_IFACE = "org.freedesktop.LogControl1"
LOG_CONTROL_PATH = "/org/freedesktop/LogControl1"


class InvalidArgs(dbus.exceptions.DBusException):
    _dbus_error_name = "org.freedesktop.DBus.Error.InvalidArgs"


class PropertyReadOnly(dbus.exceptions.DBusException):
    _dbus_error_name = "org.freedesktop.DBus.Error.PropertyReadOnly"


class LogControlObject(dbus.service.Object):
    """org.freedesktop.LogControl1, to change the log level at runtime."""

    def __init__(self, conn, control: LogControl, object_path: str = LOG_CONTROL_PATH):
        super().__init__(conn, object_path)
        self.control = control

    def _properties(self):
        return {
            "LogLevel": dbus.String(self.control.level),
            "LogTarget": dbus.String(self.control.target),
            "SyslogIdentifier": dbus.String(self.control.identifier),
        }

    @dbus.service.method(dbus.PROPERTIES_IFACE, in_signature="ss", out_signature="v")
    def Get(self, interface_name, property_name):
        if interface_name != LOG_CONTROL_IFACE:
            raise InvalidArgs(f"Unknown interface {interface_name}")
        try:
            return self._properties()[property_name]
        except KeyError:
            raise InvalidArgs(f"Unknown property {property_name}") from None

    @dbus.service.method(dbus.PROPERTIES_IFACE, in_signature="s", out_signature="a{sv}")
    def GetAll(self, interface_name):
        if interface_name != LOG_CONTROL_IFACE:
            raise InvalidArgs(f"Unknown interface {interface_name}")
        return dbus.Dictionary(self._properties(), signature="sv")

    @dbus.service.method(dbus.PROPERTIES_IFACE, in_signature="ssv", out_signature="")
    def Set(self, interface_name, property_name, value):
        if interface_name != LOG_CONTROL_IFACE:
            raise InvalidArgs(f"Unknown interface {interface_name}")
        try:
            if property_name == "LogLevel":
                self.control.set_level(str(value))
            elif property_name == "LogTarget":
                self.control.set_target(str(value))
            elif property_name == "SyslogIdentifier":
                raise PropertyReadOnly("SyslogIdentifier is read-only")
            else:
                raise InvalidArgs(f"Unknown property {property_name}")
        except ValueError as e:
            raise InvalidArgs(str(e)) from e
        self.PropertiesChanged(interface_name, {property_name: self._properties()[property_name]}, [])

    @dbus.service.signal(dbus.PROPERTIES_IFACE, signature="sa{sv}as")
    def PropertiesChanged(self, interface_name, changed_properties, invalidated_properties):
        pass
