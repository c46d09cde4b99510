import os
import tempfile
import unittest

from searchprovider.core.desktop_entry import find_desktop_entry, parse_desktop_file

IDEA_DESKTOP = """[Desktop Entry]
Version=1.0
Type=Application
Name=IntelliJ IDEA Ultimate
Icon=intellij-idea
Exec="/opt/idea/bin/idea.sh" %u
Comment=Capable and Ergonomic IDE for JVM
Categories=Development;IDE;
Terminal=false
StartupWMClass=jetbrains-idea
"""


class TestDesktopEntry(unittest.TestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.user_dir = os.path.join(tmp.name, "user", "applications")
        self.system_dir = os.path.join(tmp.name, "system", "applications")
        os.makedirs(self.user_dir)
        os.makedirs(self.system_dir)
        self.dirs = [self.user_dir, self.system_dir]

    def write(self, directory, desktop_id, content):
        path = os.path.join(directory, desktop_id)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def test_parse(self):
        path = self.write(self.system_dir, "jetbrains-idea.desktop", IDEA_DESKTOP)
        entry = parse_desktop_file(path)
        self.assertEqual(entry.desktop_id, "jetbrains-idea.desktop")
        self.assertEqual(entry.id, "jetbrains-idea.desktop")
        self.assertEqual(entry.name, "IntelliJ IDEA Ultimate")
        self.assertEqual(entry.exec_cmd, '"/opt/idea/bin/idea.sh" %u')
        self.assertEqual(entry.icon, "intellij-idea")
        self.assertEqual(entry.filename, path)

    def test_user_entry_shadows_system_entry(self):
        self.write(self.system_dir, "jetbrains-idea.desktop", IDEA_DESKTOP)
        user = self.write(self.user_dir, "jetbrains-idea.desktop",
                          IDEA_DESKTOP.replace("Name=IntelliJ IDEA Ultimate", "Name=My IDEA"))
        entry = find_desktop_entry("jetbrains-idea.desktop", self.dirs)
        self.assertEqual(entry.name, "My IDEA")
        self.assertEqual(entry.filename, user)

    def test_missing_app(self):
        self.assertIsNone(find_desktop_entry("jetbrains-clion.desktop", self.dirs))

    def test_hidden_entry(self):
        self.write(self.user_dir, "jetbrains-idea.desktop", IDEA_DESKTOP + "Hidden=true\n")
        self.assertIsNone(find_desktop_entry("jetbrains-idea.desktop", self.dirs))

    def test_entry_without_exec(self):
        path = self.write(self.user_dir, "broken.desktop", "[Desktop Entry]\nName=Broken\n")
        self.assertIsNone(parse_desktop_file(path))

    def test_malformed_file(self):
        path = self.write(self.user_dir, "garbage.desktop", "this is not a desktop file\n")
        with self.assertLogs("searchprovider.core.desktop_entry", "WARNING"):
            self.assertIsNone(parse_desktop_file(path))


if __name__ == "__main__":
    unittest.main()
