"""Expansion toggling, persistent sorts, and manual reordering."""

from __future__ import annotations

import unittest

from favdir.sorting import sort_mixed_children
from favdir.store import KIND_GROUP, KIND_ITEM, find_group
from favdir_fakes import make_store


def _root_names(store) -> list[str]:
    return [group.name for group in sorted(store.get_data().groups, key=lambda group: group.order)]


class ExpansionTests(unittest.TestCase):
    def test_toggle_flips_and_persists(self) -> None:
        store, _fs = make_store()
        store.add_group("", "Work")
        self.assertTrue(store.toggle_expanded("Work"))
        self.assertTrue(store.is_expanded(store.load_ui_state(), "Work"))
        self.assertFalse(store.toggle_expanded("Work"))
        self.assertFalse(store.is_expanded(store.load_ui_state(), "Work"))


class PersistentSortTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store, self.fs = make_store()
        for name in ("beta", "Alpha", "gamma"):
            self.store.add_group("", name)

    def test_alpha_sort_freezes_order(self) -> None:
        self.assertTrue(self.store.sort_groups("", "alpha"))
        groups = self.store.get_data().groups
        self.assertEqual([(group.name, group.order) for group in groups], [("Alpha", 1), ("beta", 2), ("gamma", 3)])

    def test_custom_sort_keeps_order_values(self) -> None:
        self.store.sort_groups("", "custom")
        groups = self.store.get_data().groups
        self.assertEqual([(group.name, group.order) for group in groups], [("beta", 1), ("Alpha", 2), ("gamma", 3)])

    def test_sort_groups_missing_parent(self) -> None:
        self.assertEqual(self.store.sort_groups("Nope", "alpha").error, "Parent group not found")

    def test_alpha_sort_of_child_level_keeps_dir_link_slots(self) -> None:
        self.fs.add_dir("/w")
        self.store.add_group("beta", "zed")
        self.store.add_dir_link("beta", "Link", "/w")
        self.store.add_group("beta", "able")
        self.assertTrue(self.store.sort_groups("beta", "alpha"))

        beta, _ = find_group(self.store.get_data(), "beta")
        merged = sort_mixed_children(beta, True)
        self.assertEqual([(entry.name, entry.order) for entry in merged], [("able", 1), ("Link", 2), ("zed", 3)])

    def test_sort_items_renumbers(self) -> None:
        self.fs.add_dir("/w")
        self.fs.add_dir("/w/zdir")
        self.fs.add_file("/w/b.txt")
        self.fs.add_file("/w/a.txt")
        for path in ("/w/b.txt", "/w/zdir", "/w/a.txt"):
            self.store.add_item("beta", path)
        self.assertTrue(self.store.sort_items("beta", "type"))
        group, _ = find_group(self.store.get_data(), "beta")
        self.assertEqual(
            [(item.name, item.order) for item in group.items],
            [("zdir", 1), ("a.txt", 2), ("b.txt", 3)],
        )
        self.assertEqual(self.store.sort_items("Nope", "name").error, "Group not found")

    def test_freeze_applies_left_sort_to_every_level(self) -> None:
        self.fs.add_dir("/d")
        self.store.add_group("beta", "zed")
        self.store.add_dir_link("beta", "mid", "/d")
        self.store.add_group("beta", "Ant")
        state = self.store.load_ui_state()
        state.left_sort_mode = "alpha"
        self.store.save_ui_state(state)

        self.assertTrue(self.store.freeze_groups_order())

        self.assertEqual(_root_names(self.store), ["Alpha", "beta", "gamma"])
        beta, _ = find_group(self.store.get_data(), "beta")
        merged = [(entry.name, entry.order) for entry in sort_mixed_children(beta)]
        self.assertEqual(merged, [("Ant", 1), ("mid", 2), ("zed", 3)])


class ReorderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store, self.fs = make_store()
        for name in ("A", "B", "C"):
            self.store.add_group("", name)

    def test_reorder_root_groups(self) -> None:
        self.assertEqual(self.store.reorder_up(KIND_GROUP, "", 2), 1)
        self.assertEqual(_root_names(self.store), ["B", "A", "C"])
        self.assertEqual(self.store.reorder_down(KIND_GROUP, "", 2), 3)
        self.assertEqual(_root_names(self.store), ["B", "C", "A"])

    def test_reorder_at_edges_is_a_no_op(self) -> None:
        self.assertEqual(self.store.reorder_up(KIND_GROUP, "", 1), 1)
        self.assertEqual(self.store.reorder_down(KIND_GROUP, "", 3), 3)
        self.assertEqual(self.store.reorder_up(KIND_GROUP, "", 9), 9)
        self.assertEqual(_root_names(self.store), ["A", "B", "C"])

    def test_reorder_children_shares_sequence_with_dir_links(self) -> None:
        self.fs.add_dir("/d")
        self.store.add_group("A", "one")
        self.store.add_dir_link("A", "two", "/d")
        self.store.add_group("A", "three")

        self.assertEqual(self.store.reorder_down(KIND_GROUP, "A", 1), 2)

        a, _ = find_group(self.store.get_data(), "A")
        merged = [(entry.name, entry.order) for entry in sort_mixed_children(a)]
        self.assertEqual(merged, [("two", 1), ("one", 2), ("three", 3)])
        self.assertEqual([child.name for child in a.children], ["one", "three"])

    def test_reorder_items(self) -> None:
        for name in ("x", "y", "z"):
            self.fs.add_file(f"/f/{name}")
            self.store.add_item("A", f"/f/{name}")
        self.assertEqual(self.store.reorder_up(KIND_ITEM, "A", 3), 2)
        a, _ = find_group(self.store.get_data(), "A")
        self.assertEqual([(item.name, item.order) for item in a.items], [("x", 1), ("z", 2), ("y", 3)])

    def test_reorder_missing_group_returns_index(self) -> None:
        self.assertEqual(self.store.reorder_up(KIND_ITEM, "Nope", 2), 2)
        self.assertEqual(self.store.reorder_up(KIND_GROUP, "Nope", 2), 2)


if __name__ == "__main__":
    unittest.main()
