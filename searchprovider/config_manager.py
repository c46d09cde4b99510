import logging
import os
import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = os.path.join(
    os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config"),
    "jetbrains-search-provider",
    "config.yaml",
)


class ConfigManager:
    DEFAULT_CONFIG_YAML = """
service:
  bus_name: de.swsnr.searchprovider.Jetbrains
  object_path_namespace: /de/swsnr/searchprovider/jetbrains
search:
  max_results: 50
  mailbox_capacity: 8
  io_workers: 2
settings:
  schema_id: de.swsnr.searchprovider.jetbrains
  disabled_key: disabled
launch:
  scope_prefix: app-jetbrains-search-provider
  started_by: jetbrains-search-provider
  documentation:
    - https://github.com/swsnr/gnome-search-providers-jetbrains
logging:
  level: info
"""

    def __init__(self, config_file: str = DEFAULT_CONFIG_FILE, create: bool = True):
        self.config_file = config_file
        self.config = None
        self.DEFAULT_CONFIG = yaml.safe_load(self.DEFAULT_CONFIG_YAML)  # Parse YAML into a dictionary
        self.load_config(create)

    def load_config(self, create: bool = True):
        """Load the configuration from the file or create a default one."""
        if not os.path.exists(self.config_file):
            self.config = self.DEFAULT_CONFIG
            if not create:
                return
            try:
                os.makedirs(os.path.dirname(self.config_file), exist_ok=True)
                with open(self.config_file, "w") as f:
                    yaml.safe_dump(self.DEFAULT_CONFIG, f)
                logger.info("Default configuration created at %s", self.config_file)
            except OSError as e:
                logger.warning("Cannot write default configuration to %s: %s", self.config_file, e)
        else:
            try:
                with open(self.config_file, "r") as f:
                    self.config = yaml.safe_load(f) or self.DEFAULT_CONFIG
            except (OSError, yaml.YAMLError) as e:
                logger.error("Error loading configuration file %s: %s", self.config_file, e)
                self.config = self.DEFAULT_CONFIG

    def get(self, key: str, default=None):
        """Get a configuration value, falling back to the built-in defaults."""
        value = self._lookup(self.config, key)
        if value is None:
            value = self._lookup(self.DEFAULT_CONFIG, key)
        return default if value is None else value

    @staticmethod
    def _lookup(config, key: str):
        value = config
        for k in key.split("."):
            if not isinstance(value, dict):
                return None
            value = value.get(k)
        return value
