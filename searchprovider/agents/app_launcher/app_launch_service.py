import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from searchprovider.core.desktop_entry import DesktopEntry
from searchprovider.core.errors import LaunchError, SearchProviderError
from searchprovider.core.projects import ProjectRecord

logger = logging.getLogger(__name__)

# Field codes the desktop entry spec deprecates; they expand to nothing.
DEPRECATED_FIELD_CODES = {"%d", "%D", "%n", "%N", "%v", "%m"}


class ScopeRegistrationError(SearchProviderError):
    """The process supervisor refused to track a launched process."""


@dataclass(frozen=True)
class ScopeSettings:
    """How launched processes are grouped into supervision scopes."""
    prefix: str
    started_by: str
    documentation: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class LaunchTicket:
    """One launch attempt; discarded once the process is registered or failed."""
    application_id: str
    project_id: Optional[str]
    started_by: str
    scope_prefix: str


def systemd_escape(value: str) -> str:
    """Escape ``value`` for use in a systemd unit name, like ``systemd-escape``."""
    escaped = []
    for index, char in enumerate(value):
        if char == "/":
            escaped.append("-")
        elif (char.isascii() and char.isalnum()) or char in ":_" or (char == "." and index > 0):
            escaped.append(char)
        else:
            escaped.extend(f"\\x{byte:02x}" for byte in char.encode("utf-8"))
    return "".join(escaped)


def scope_name(ticket: LaunchTicket, pid: int) -> str:
    """Unit name of the scope for a process launched from ``ticket``."""
    app_id = ticket.application_id
    if app_id.endswith(".desktop"):
        app_id = app_id[: -len(".desktop")]
    return f"{ticket.scope_prefix}-{systemd_escape(app_id)}-{pid}.scope"


def _expand_inline(arg: str, first_file: Optional[str], first_uri: Optional[str]) -> str:
    out = []
    i = 0
    while i < len(arg):
        if arg[i] == "%" and i + 1 < len(arg):
            code = arg[i + 1]
            if code == "%":
                out.append("%")
            elif code == "f":
                out.append(first_file or "")
            elif code == "u":
                out.append(first_uri or "")
            # every other code expands to nothing inside an argument
            i += 2
            continue
        out.append(arg[i])
        i += 1
    return "".join(out)


def expand_exec(app: DesktopEntry, paths: Sequence[str] = ()) -> List[str]:
    """Turn the Exec line of ``app`` into an argument vector for ``paths``."""
    try:
        args = shlex.split(app.exec_cmd)
    except ValueError as e:
        raise LaunchError(f"Malformed Exec line for {app.desktop_id}: {e}") from e

    uris = [Path(p).as_uri() for p in paths]
    argv: List[str] = []
    for arg in args:
        if arg in ("%f", "%u"):
            argv.extend((paths if arg == "%f" else uris)[:1])
        elif arg in ("%F", "%U"):
            argv.extend(paths if arg == "%F" else uris)
        elif arg == "%i":
            if app.icon:
                argv.extend(["--icon", app.icon])
        elif arg == "%c":
            argv.append(app.name)
        elif arg == "%k":
            argv.append(app.filename)
        elif arg in DEPRECATED_FIELD_CODES:
            continue
        else:
            argv.append(_expand_inline(arg, paths[0] if paths else None, uris[0] if uris else None))
    if not argv:
        raise LaunchError(f"Empty Exec line for {app.desktop_id}")
    return argv


class AppLaunchService:
    """Launches applications and hands the new processes to a supervisor.

    The supervisor is any object with a ``start_scope(name, pid, description,
    documentation)`` method; it is attached once the bus connection exists.
    Registration is best effort: a launched process keeps running even if the
    supervisor cannot track it.
    """

    def __init__(self, scope_settings: ScopeSettings, supervisor=None):
        self.scope_settings = scope_settings
        self._supervisor = supervisor

    def start(self, supervisor) -> None:
        self._supervisor = supervisor

    def ticket(self, app: DesktopEntry, project: Optional[ProjectRecord] = None) -> LaunchTicket:
        return LaunchTicket(
            application_id=app.desktop_id,
            project_id=project.id if project else None,
            started_by=self.scope_settings.started_by,
            scope_prefix=self.scope_settings.prefix,
        )

    def resolve_command(self, app: DesktopEntry, project: Optional[ProjectRecord] = None) -> List[str]:
        argv = expand_exec(app, [project.path] if project else [])
        executable = shutil.which(argv[0])
        if executable is None:
            raise LaunchError(f"Executable {argv[0]} of app {app.desktop_id} not found")
        argv[0] = executable
        return argv

    def launch(self, app: DesktopEntry, project: Optional[ProjectRecord] = None) -> int:
        """Spawn ``app``, optionally for ``project``, and return the new PID.

        Raises ``LaunchError`` if the app cannot be resolved or spawned.
        """
        ticket = self.ticket(app, project)
        argv = self.resolve_command(app, project)
        logger.info("Launching app %s with %s", app.desktop_id, argv)
        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                start_new_session=True,
                cwd=os.path.expanduser("~"),
            )
        except OSError as e:
            raise LaunchError(f"Failed to launch app {app.desktop_id}: {e}") from e

        self._register(ticket, app, process.pid)
        return process.pid

    def _register(self, ticket: LaunchTicket, app: DesktopEntry, pid: int) -> None:
        if self._supervisor is None:
            logger.warning("No process supervisor available, not tracking PID %s of app %s",
                           pid, ticket.application_id)
            return
        name = scope_name(ticket, pid)
        description = f"{app.name} started by {ticket.started_by}"
        try:
            self._supervisor.start_scope(name, pid, description, self.scope_settings.documentation)
        except ScopeRegistrationError as e:
            logger.warning("Failed to move PID %s of app %s into scope %s: %s",
                           pid, ticket.application_id, name, e)
        else:
            logger.debug("Requested scope %s for PID %s", name, pid)
