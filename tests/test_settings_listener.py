import asyncio
import unittest

from searchprovider.core.enable_gate import EnableGate
from searchprovider.core.settings import DisabledAppsListener


class TestDisabledAppsListener(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.gates = {
            "jetbrains-idea.desktop": EnableGate("jetbrains-idea.desktop"),
            "jetbrains-clion.desktop": EnableGate("jetbrains-clion.desktop", disabled=True),
        }
        self.listener = DisabledAppsListener(self.gates)

    def test_apply(self):
        self.listener.apply(["jetbrains-idea.desktop", "not-installed.desktop"])
        self.assertTrue(self.gates["jetbrains-idea.desktop"].get())
        self.assertFalse(self.gates["jetbrains-clion.desktop"].get())

    async def test_applies_each_change(self):
        task = self.listener.start()
        self.addCleanup(task.cancel)

        self.listener.notify(["jetbrains-idea.desktop"])
        await asyncio.sleep(0.01)
        self.assertTrue(self.gates["jetbrains-idea.desktop"].get())
        self.assertFalse(self.gates["jetbrains-clion.desktop"].get())

        self.listener.notify(["jetbrains-clion.desktop"])
        await asyncio.sleep(0.01)
        self.assertFalse(self.gates["jetbrains-idea.desktop"].get())
        self.assertTrue(self.gates["jetbrains-clion.desktop"].get())

    async def test_burst_of_changes_applies_latest_snapshot_once(self):
        task = self.listener.start()
        self.addCleanup(task.cancel)

        with self.assertLogs("searchprovider.core.settings", "INFO") as logs:
            self.listener.notify(["jetbrains-idea.desktop"])
            self.listener.notify(["jetbrains-idea.desktop", "jetbrains-clion.desktop"])
            self.listener.notify(["jetbrains-idea.desktop"])
            await asyncio.sleep(0.01)
        applied = [r.getMessage() for r in logs.records if "Disabled apps changed" in r.getMessage()]
        self.assertEqual(applied, ["Disabled apps changed to ['jetbrains-idea.desktop']"])
        self.assertTrue(self.gates["jetbrains-idea.desktop"].get())
        self.assertFalse(self.gates["jetbrains-clion.desktop"].get())


if __name__ == "__main__":
    unittest.main()
