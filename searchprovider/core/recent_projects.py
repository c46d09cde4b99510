"""
Read the recent projects of JetBrains IDEs.

Every IDE keeps its settings under ``$XDG_CONFIG_HOME/<vendor>/<Product><version>``,
for example ``~/.config/JetBrains/IntelliJIdea2023.2``. The recent projects live in
``options/recentProjects.xml`` inside the directory of the newest version.
"""
from __future__ import annotations

import logging
import os
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from searchprovider.core.errors import ProjectIndexError
from searchprovider.core.projects import ProjectRecord

logger = logging.getLogger(__name__)

RECENT_PROJECTS_FILES = ("recentProjects.xml", "recentProjectDirectories.xml")
MANAGER_COMPONENTS = ("RecentProjectsManager", "RecentDirectoryProjectsManager")
TIMESTAMP_OPTIONS = ("activationTimestamp", "projectOpenTimestamp")

_VERSION = re.compile(r"^\d+(?:\.\d+)*$")


@dataclass(frozen=True)
class ConfigLocation:
    """Where an IDE keeps its configuration."""
    vendor_dir: str     # directory below $XDG_CONFIG_HOME, e.g. "JetBrains"
    config_prefix: str  # product prefix of the versioned directory, e.g. "IntelliJIdea"


def config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config"))


def _parse_version(name: str, prefix: str) -> Optional[Tuple[int, ...]]:
    if not name.startswith(prefix):
        return None
    version = name[len(prefix):]
    if not _VERSION.match(version):
        return None
    return tuple(int(part) for part in version.split("."))


def find_latest_config_dir(location: ConfigLocation, base: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration directory of the most recent version of an IDE."""
    vendor_dir = (base or config_home()) / location.vendor_dir
    if not vendor_dir.is_dir():
        return None
    candidates = []
    for child in vendor_dir.iterdir():
        version = _parse_version(child.name, location.config_prefix)
        if version is not None and child.is_dir():
            candidates.append((version, child))
    if not candidates:
        return None
    return max(candidates)[1]


def find_recent_projects_file(config_dir: Path) -> Optional[Path]:
    for name in RECENT_PROJECTS_FILES:
        candidate = config_dir / "options" / name
        if candidate.is_file():
            return candidate
    return None


def read_project_name(project_dir: Path) -> str:
    """The name of a project: the contents of ``.idea/.name`` or the directory name."""
    name_file = project_dir / ".idea" / ".name"
    try:
        name = name_file.read_text(encoding="utf-8").strip()
    except OSError:
        name = ""
    return name or project_dir.name


def _entry_timestamp(entry: ET.Element) -> int:
    meta = entry.find("value/RecentProjectMetaInfo")
    if meta is None:
        return 0
    values = {
        option.get("name"): option.get("value")
        for option in meta.iter("option")
    }
    for key in TIMESTAMP_OPTIONS:
        try:
            return int(values[key])
        except (KeyError, TypeError, ValueError):
            continue
    return 0


def parse_recent_projects(document: str, home: Optional[str] = None) -> List[Tuple[str, int]]:
    """Extract ``(path, last_used)`` pairs from a recent projects document.

    Raises ``ET.ParseError`` for malformed XML.
    """
    home = home or os.path.expanduser("~")
    root = ET.fromstring(document)
    component = None
    for name in MANAGER_COMPONENTS:
        component = root.find(f"component[@name='{name}']")
        if component is not None:
            break
    if component is None:
        return []

    projects = []
    for entry in component.findall("option[@name='additionalInfo']/map/entry"):
        key = entry.get("key")
        if key:
            projects.append((key, _entry_timestamp(entry)))

    if not projects:
        # Older releases only kept an ordered list of paths, most recent first.
        paths = [
            option.get("value")
            for option in component.findall("option[@name='recentPaths']/list/option")
            if option.get("value")
        ]
        projects = [(path, len(paths) - position) for position, path in enumerate(paths)]

    return [(path.replace("$USER_HOME$", home), last_used) for path, last_used in projects]


def read_recent_projects(location: ConfigLocation, base: Optional[Path] = None,
                         home: Optional[str] = None) -> List[ProjectRecord]:
    """Read all existing recent projects of the IDE configured at ``location``.

    Returns an empty list if the IDE was never started. Raises
    ``ProjectIndexError`` if the recent projects file cannot be read or parsed.
    """
    config_dir = find_latest_config_dir(location, base)
    if config_dir is None:
        logger.debug("No configuration directory found for %s", location.config_prefix)
        return []
    projects_file = find_recent_projects_file(config_dir)
    if projects_file is None:
        logger.debug("No recent projects in %s", config_dir)
        return []

    logger.debug("Reading recent projects from %s", projects_file)
    try:
        document = projects_file.read_text(encoding="utf-8")
        entries = parse_recent_projects(document, home)
    except (OSError, UnicodeDecodeError, ET.ParseError) as e:
        raise ProjectIndexError(f"Failed to read recent projects from {projects_file}: {e}") from e

    records = []
    for path, last_used in entries:
        project_dir = Path(path)
        if not project_dir.is_dir():
            logger.debug("Skipping project %s, directory does not exist", path)
            continue
        records.append(
            ProjectRecord(
                id=str(project_dir),
                display_name=read_project_name(project_dir),
                path=str(project_dir),
                last_used=last_used,
            )
        )
    return records
