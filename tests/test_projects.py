import unittest

from searchprovider.core.projects import ProjectIndex, ProjectRecord, abbreviate_home


def record(id, name, last_used, path=None):
    return ProjectRecord(id=id, display_name=name, path=path or f"/work/{id}", last_used=last_used)


class TestProjectIndex(unittest.TestCase):
    def setUp(self):
        self.index = ProjectIndex([
            record("p1", "Alpha", 100),
            record("p2", "Beta", 200),
            record("p3", "Gamma", 200, path="/home/user/src/gamma-service"),
        ])

    def test_orders_by_last_used_then_id(self):
        self.assertEqual(self.index.ids, ["p2", "p3", "p1"])

    def test_search_is_case_insensitive_substring(self):
        self.assertEqual(self.index.search(["ALP"]), ["p1"])

    def test_all_terms_must_match(self):
        self.assertEqual(self.index.search(["gamma", "service"]), ["p3"])
        self.assertEqual(self.index.search(["gamma", "alpha"]), [])

    def test_terms_match_path(self):
        self.assertEqual(self.index.search(["/home/user"]), ["p3"])

    def test_empty_terms_match_everything(self):
        self.assertEqual(self.index.search([]), ["p2", "p3", "p1"])

    def test_search_limit(self):
        self.assertEqual(self.index.search([], limit=2), ["p2", "p3"])

    def test_subsearch_keeps_previous_order_and_drops_unknown(self):
        self.assertEqual(self.index.subsearch(["p1", "gone", "p3"], ["a"]), ["p1", "p3"])
        self.assertEqual(self.index.subsearch(["p1", "p2"], ["beta"]), ["p2"])

    def test_subsearch_returns_each_id_once(self):
        self.assertEqual(self.index.subsearch(["p3", "p1", "p3", "p1"], ["a"]), ["p3", "p1"])

    def test_duplicate_ids_keep_most_recent(self):
        index = ProjectIndex([record("p1", "Old", 10), record("p1", "New", 20)])
        self.assertEqual(len(index), 1)
        self.assertEqual(index.get("p1").display_name, "New")


class TestAbbreviateHome(unittest.TestCase):
    def test_replaces_home(self):
        self.assertEqual(abbreviate_home("/home/user/src/foo", "/home/user"), "~/src/foo")
        self.assertEqual(abbreviate_home("/home/user", "/home/user/"), "~")

    def test_keeps_other_paths(self):
        self.assertEqual(abbreviate_home("/home/username/foo", "/home/user"), "/home/username/foo")
        self.assertEqual(abbreviate_home("/srv/foo", "/home/user"), "/srv/foo")


if __name__ == "__main__":
    unittest.main()
