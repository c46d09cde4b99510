import os
import tempfile
import unittest

import yaml

from searchprovider.config_manager import ConfigManager


class TestConfigManager(unittest.TestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.config_file = os.path.join(tmp.name, "jetbrains-search-provider", "config.yaml")

    def test_creates_default_config(self):
        config = ConfigManager(self.config_file)
        self.assertTrue(os.path.exists(self.config_file))
        with open(self.config_file) as f:
            self.assertEqual(yaml.safe_load(f), config.DEFAULT_CONFIG)
        self.assertEqual(config.get("service.bus_name"), "de.swsnr.searchprovider.Jetbrains")
        self.assertEqual(config.get("search.mailbox_capacity"), 8)

    def test_does_not_create_when_asked_not_to(self):
        config = ConfigManager(self.config_file, create=False)
        self.assertFalse(os.path.exists(self.config_file))
        self.assertEqual(config.get("search.max_results"), 50)

    def test_user_values_override_defaults(self):
        os.makedirs(os.path.dirname(self.config_file))
        with open(self.config_file, "w") as f:
            f.write("search:\n  max_results: 10\nlogging:\n  level: debug\n")
        config = ConfigManager(self.config_file)
        self.assertEqual(config.get("search.max_results"), 10)
        self.assertEqual(config.get("logging.level"), "debug")
        # Keys missing from the file fall back to the defaults
        self.assertEqual(config.get("search.io_workers"), 2)
        self.assertEqual(config.get("launch.scope_prefix"), "app-jetbrains-search-provider")
        self.assertEqual(config.get("no.such.key", "fallback"), "fallback")

    def test_invalid_yaml_uses_defaults(self):
        os.makedirs(os.path.dirname(self.config_file))
        with open(self.config_file, "w") as f:
            f.write("search: [unclosed\n")
        with self.assertLogs("searchprovider.config_manager", "ERROR"):
            config = ConfigManager(self.config_file)
        self.assertEqual(config.get("search.max_results"), 50)


if __name__ == "__main__":
    unittest.main()
