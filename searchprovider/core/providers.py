import re
from dataclasses import dataclass
from functools import partial
from typing import Callable, List

from searchprovider.core.projects import ProjectRecord
from searchprovider.core.recent_projects import ConfigLocation, read_recent_projects

DEFAULT_NAMESPACE = "/de/swsnr/searchprovider/jetbrains"

_OBJPATH_UNSAFE = re.compile(r"[^A-Za-z0-9_]")


@dataclass(frozen=True)
class ProviderDefinition:
    """A statically known search provider for one IDE."""
    label: str
    desktop_id: str
    config: ConfigLocation

    def objpath(self, namespace: str = DEFAULT_NAMESPACE) -> str:
        return object_path_for(self.desktop_id, namespace)

    def reader(self) -> Callable[[], List[ProjectRecord]]:
        return partial(read_recent_projects, self.config)


def object_path_for(desktop_id: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    """D-Bus object path of the provider for ``desktop_id``."""
    segment = desktop_id[: -len(".desktop")] if desktop_id.endswith(".desktop") else desktop_id
    return f"{namespace.rstrip('/')}/{_OBJPATH_UNSAFE.sub('_', segment)}"


def _jetbrains(prefix: str) -> ConfigLocation:
    return ConfigLocation(vendor_dir="JetBrains", config_prefix=prefix)


PROVIDERS = (
    ProviderDefinition("Android Studio", "jetbrains-studio.desktop",
                       ConfigLocation(vendor_dir="Google", config_prefix="AndroidStudio")),
    ProviderDefinition("Android Studio (flatpak)", "com.google.AndroidStudio.desktop",
                       ConfigLocation(vendor_dir="Google", config_prefix="AndroidStudio")),
    ProviderDefinition("CLion", "jetbrains-clion.desktop", _jetbrains("CLion")),
    ProviderDefinition("CLion (flatpak)", "com.jetbrains.CLion.desktop", _jetbrains("CLion")),
    ProviderDefinition("DataGrip", "jetbrains-datagrip.desktop", _jetbrains("DataGrip")),
    ProviderDefinition("DataGrip (flatpak)", "com.jetbrains.DataGrip.desktop", _jetbrains("DataGrip")),
    ProviderDefinition("GoLand", "jetbrains-goland.desktop", _jetbrains("GoLand")),
    ProviderDefinition("GoLand (flatpak)", "com.jetbrains.GoLand.desktop", _jetbrains("GoLand")),
    ProviderDefinition("IDEA", "jetbrains-idea.desktop", _jetbrains("IntelliJIdea")),
    ProviderDefinition("IDEA (flatpak)", "com.jetbrains.IntelliJ-IDEA-Ultimate.desktop",
                       _jetbrains("IntelliJIdea")),
    ProviderDefinition("IDEA Community Edition", "jetbrains-idea-ce.desktop", _jetbrains("IdeaIC")),
    ProviderDefinition("IDEA Community Edition (flatpak)",
                       "com.jetbrains.IntelliJ-IDEA-Community.desktop", _jetbrains("IdeaIC")),
    ProviderDefinition("PhpStorm", "jetbrains-phpstorm.desktop", _jetbrains("PhpStorm")),
    ProviderDefinition("PhpStorm (flatpak)", "com.jetbrains.PhpStorm.desktop", _jetbrains("PhpStorm")),
    ProviderDefinition("PyCharm", "jetbrains-pycharm.desktop", _jetbrains("PyCharm")),
    ProviderDefinition("PyCharm (flatpak)", "com.jetbrains.PyCharm-Professional.desktop",
                       _jetbrains("PyCharm")),
    ProviderDefinition("PyCharm Community Edition", "jetbrains-pycharm-ce.desktop",
                       _jetbrains("PyCharmCE")),
    ProviderDefinition("PyCharm Community Edition (flatpak)",
                       "com.jetbrains.PyCharm-Community.desktop", _jetbrains("PyCharmCE")),
    ProviderDefinition("Rider", "jetbrains-rider.desktop", _jetbrains("Rider")),
    ProviderDefinition("Rider (flatpak)", "com.jetbrains.Rider.desktop", _jetbrains("Rider")),
    ProviderDefinition("RubyMine", "jetbrains-rubymine.desktop", _jetbrains("RubyMine")),
    ProviderDefinition("RubyMine (flatpak)", "com.jetbrains.RubyMine.desktop", _jetbrains("RubyMine")),
    ProviderDefinition("RustRover", "jetbrains-rustrover.desktop", _jetbrains("RustRover")),
    ProviderDefinition("RustRover (flatpak)", "com.jetbrains.RustRover.desktop", _jetbrains("RustRover")),
    ProviderDefinition("WebStorm", "jetbrains-webstorm.desktop", _jetbrains("WebStorm")),
    ProviderDefinition("WebStorm (flatpak)", "com.jetbrains.WebStorm.desktop", _jetbrains("WebStorm")),
)


def provider_labels() -> List[str]:
    return sorted(provider.label for provider in PROVIDERS)
