import configparser
import logging
import os
from dataclasses import dataclass
from typing import Iterator, List, Optional

logger = logging.getLogger(__name__)

SECTION = "Desktop Entry"


@dataclass(frozen=True)
class DesktopEntry:
    """An installed application, as described by its desktop file."""
    desktop_id: str     # e.g. "jetbrains-idea.desktop"
    name: str
    exec_cmd: str       # raw Exec line, field codes included
    icon: str
    filename: str

    @property
    def id(self) -> str:
        return self.desktop_id


def application_dirs() -> List[str]:
    """All XDG application directories, most important first."""
    data_home = os.environ.get("XDG_DATA_HOME") or os.path.expanduser("~/.local/share")
    data_dirs = os.environ.get("XDG_DATA_DIRS") or "/usr/local/share:/usr/share"
    dirs = [data_home] + [d for d in data_dirs.split(":") if d]
    return [os.path.join(d, "applications") for d in dirs]


def _find_desktop_files(desktop_id: str, dirs: Optional[List[str]] = None) -> Iterator[str]:
    for path in dirs if dirs is not None else application_dirs():
        candidate = os.path.join(path, desktop_id)
        if os.path.isfile(candidate):
            yield candidate


def parse_desktop_file(filepath: str, desktop_id: Optional[str] = None) -> Optional[DesktopEntry]:
    """Parse a desktop file; returns None for hidden or incomplete entries."""
    config = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        config.read(filepath, encoding="utf-8")
    except (configparser.Error, UnicodeDecodeError) as e:
        logger.warning("Failed to parse desktop file %s: %s", filepath, e)
        return None

    name = config.get(SECTION, "Name", fallback=None)
    exec_cmd = config.get(SECTION, "Exec", fallback=None)
    if not name or not exec_cmd:
        return None
    if config.get(SECTION, "Hidden", fallback="false").strip().lower() == "true":
        return None

    return DesktopEntry(
        desktop_id=desktop_id or os.path.basename(filepath),
        name=name.strip(),
        exec_cmd=exec_cmd.strip(),
        icon=config.get(SECTION, "Icon", fallback="").strip(),
        filename=filepath,
    )


def find_desktop_entry(desktop_id: str, dirs: Optional[List[str]] = None) -> Optional[DesktopEntry]:
    """Look up an installed application by desktop id; the first match wins."""
    for filepath in _find_desktop_files(desktop_id, dirs):
        return parse_desktop_file(filepath, desktop_id)
    return None
