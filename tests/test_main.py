import contextlib
import io
import unittest

from searchprovider.core.providers import PROVIDERS
from searchprovider.main import build_parser, main


class TestMain(unittest.TestCase):
    def test_list_providers(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            self.assertEqual(main(["--list-providers"]), 0)
        labels = out.getvalue().splitlines()
        self.assertEqual(labels, sorted(labels))
        self.assertEqual(len(labels), len(PROVIDERS))
        self.assertIn("IDEA", labels)
        self.assertIn("PyCharm Community Edition (flatpak)", labels)

    def test_providers_alias(self):
        self.assertTrue(build_parser().parse_args(["--providers"]).list_providers)

    def test_version(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out), self.assertRaises(SystemExit) as cm:
            main(["--version"])
        self.assertEqual(cm.exception.code, 0)
        self.assertTrue(out.getvalue().startswith("jetbrains-search-provider "))


if __name__ == "__main__":
    unittest.main()
