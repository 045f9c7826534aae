"""Directory link operations and the shared sibling order space."""

from __future__ import annotations

import unittest

from favdir.sorting import sort_mixed_children
from favdir.store import find_group
from favdir_fakes import make_store


class DirLinkTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store, self.fs = make_store()
        self.store.add_group("", "Work")
        self.fs.add_dir("/srv/docs")
        self.fs.add_dir("/srv/logs")

    def test_links_share_order_space_with_child_groups(self) -> None:
        self.store.add_group("Work", "Projects")
        self.assertEqual(self.store.add_dir_link("Work", "Docs", "/srv/docs").value, "Work.Docs")
        self.store.add_group("Work", "Archive")
        work, _ = find_group(self.store.get_data(), "Work")
        merged = [(entry.name, entry.order) for entry in sort_mixed_children(work)]
        self.assertEqual(merged, [("Projects", 1), ("Docs", 2), ("Archive", 3)])

    def test_validation_order_and_messages(self) -> None:
        cases = [
            (("Work", "", "/srv/docs"), "Name cannot be empty"),
            (("Work", "a.b", "/srv/docs"), "Name cannot contain '.'"),
            (("", "Docs", "/srv/docs"), "Directory links must be added to a group, not root level"),
            (("Work", "Docs", ""), "Directory path cannot be empty"),
            (("Work", "Docs", "/srv/missing"), "Directory does not exist: /srv/missing"),
            (("Nope", "Docs", "/srv/docs"), "Parent group not found"),
        ]
        for args, message in cases:
            self.assertEqual(self.store.add_dir_link(*args).error, message)

    def test_file_is_not_a_directory(self) -> None:
        self.fs.add_file("/srv/readme.md")
        self.assertEqual(
            self.store.add_dir_link("Work", "Readme", "/srv/readme.md").error,
            "Directory does not exist: /srv/readme.md",
        )

    def test_name_collisions_at_level(self) -> None:
        self.store.add_group("Work", "Projects")
        self.store.add_dir_link("Work", "Docs", "/srv/docs")
        self.assertEqual(
            self.store.add_dir_link("Work", "Docs", "/srv/logs").error,
            "A directory link with this name already exists",
        )
        self.assertEqual(
            self.store.add_dir_link("Work", "Projects", "/srv/logs").error,
            "A group with this name already exists",
        )
        self.assertEqual(self.store.add_group("Work", "Docs").error, "Group already exists")
        self.assertEqual(self.store.rename_group("Work.Projects", "Docs").error, "A group with this name already exists")

    def test_remove_dir_link(self) -> None:
        self.store.add_dir_link("Work", "Docs", "/srv/docs")
        self.assertEqual(self.store.remove_dir_link("", "Docs").error, "Parent path is required")
        self.assertEqual(self.store.remove_dir_link("Nope", "Docs").error, "Parent group not found")
        self.assertEqual(self.store.remove_dir_link("Work", "docs").error, "Directory link not found")
        self.assertTrue(self.store.remove_dir_link("Work", "Docs"))
        work, _ = find_group(self.store.get_data(), "Work")
        self.assertEqual(work.dir_links, [])

    def test_group_list_excludes_links(self) -> None:
        self.store.add_dir_link("Work", "Docs", "/srv/docs")
        self.assertEqual(self.store.get_group_list(), ["Work"])


if __name__ == "__main__":
    unittest.main()
