"""Document codec tests for the favorites tree and UI state."""

from __future__ import annotations

import unittest

from favdir.model import CursorPosition, Data, Group, Item, PathSet, UIState


class DataDecodeTests(unittest.TestCase):
    def test_nested_document_decodes_and_encodes_back(self) -> None:
        raw = {
            "groups": [
                {
                    "name": "Work",
                    "order": 1,
                    "items": [{"path": "/src/app", "type": "dir", "order": 1}],
                    "children": [{"name": "Projects", "order": 1, "items": [], "children": [], "dir_links": []}],
                    "dir_links": [{"name": "Docs", "path": "/docs", "order": 2}],
                }
            ]
        }
        data = Data.from_dict(raw)
        work = data.groups[0]
        self.assertEqual(work.items[0].name, "app")
        self.assertEqual(work.children[0].name, "Projects")
        self.assertEqual(work.dir_links[0].path, "/docs")
        self.assertEqual(data.to_dict(), raw)

    def test_malformed_entries_are_dropped(self) -> None:
        data = Data.from_dict(
            {
                "groups": [
                    {"name": "", "order": 1},
                    "nope",
                    {
                        "name": "Ok",
                        "order": "x",
                        "items": [{"path": 3}, {"path": "/a", "type": "weird", "order": True}],
                        "dir_links": [{"name": "NoPath"}],
                    },
                ]
            }
        )
        self.assertEqual([group.name for group in data.groups], ["Ok"])
        ok = data.groups[0]
        self.assertEqual(ok.order, 0)
        self.assertEqual(ok.items, [Item(path="/a", type="file", order=0)])
        self.assertEqual(ok.dir_links, [])

    def test_document_without_groups_list_is_rejected(self) -> None:
        for raw in ([], {"groups": {}}, "text", None):
            with self.assertRaises(ValueError):
                Data.from_dict(raw)

    def test_seeded_orders_groups_one_to_n(self) -> None:
        data = Data.seeded(["Work", "Home"])
        self.assertEqual([(group.name, group.order) for group in data.groups], [("Work", 1), ("Home", 2)])


class GroupHelperTests(unittest.TestCase):
    def test_child_names_cover_groups_and_dir_links(self) -> None:
        group = Group.from_dict(
            {
                "name": "Work",
                "children": [{"name": "A"}],
                "dir_links": [{"name": "B", "path": "/b"}],
            }
        )
        self.assertEqual(group.child_names(), {"A", "B"})
        self.assertTrue(group.has_children())

    def test_find_item_reports_zero_based_index(self) -> None:
        group = Group(name="G", items=[Item("/a"), Item("/b")])
        item, idx = group.find_item("/b")
        self.assertEqual((item.path, idx), ("/b", 1))
        self.assertEqual(group.find_item("/c"), (None, -1))


class PathSetTests(unittest.TestCase):
    def test_discard_subtree_respects_segment_boundaries(self) -> None:
        expanded = PathSet(["Work", "Work.A", "Workshop", "Home"])
        expanded.discard_subtree("Work")
        self.assertEqual(expanded, ["Workshop", "Home"])

    def test_rewrite_keeps_insertion_order(self) -> None:
        expanded = PathSet(["Home", "Work", "Work.Projects"])
        expanded.rewrite("Work", "Job")
        self.assertEqual(expanded.to_list(), ["Home", "Job", "Job.Projects"])

    def test_invalid_members_are_skipped(self) -> None:
        self.assertEqual(len(PathSet(["a", "", 3, "a"])), 1)


class UIStateDecodeTests(unittest.TestCase):
    def test_missing_keys_take_defaults(self) -> None:
        state = UIState.from_dict({"expanded_groups": ["Work"], "right_sort_mode": "size"})
        self.assertIn("Work", state.expanded_groups)
        self.assertEqual(state.right_sort_mode, "size")
        self.assertEqual(state.left_sort_mode, "custom")
        self.assertEqual(state.dir_sort_mode, "type")
        self.assertTrue(state.dir_sort_asc)
        self.assertEqual(state.left_cursor, CursorPosition(row=1, col=0))

    def test_invalid_values_fall_back(self) -> None:
        state = UIState.from_dict(
            {
                "left_sort_mode": "size",
                "dir_sort_mode": "custom",
                "focused_panel": "middle",
                "left_sort_asc": "no",
                "right_cursor": {"row": -4, "col": 2},
            }
        )
        self.assertEqual(state.left_sort_mode, "custom")
        self.assertEqual(state.dir_sort_mode, "type")
        self.assertEqual(state.focused_panel, "left")
        self.assertTrue(state.left_sort_asc)
        self.assertEqual(state.right_cursor, CursorPosition(row=1, col=2))

    def test_non_object_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            UIState.from_dict(["Work"])

    def test_rewrite_group_path_updates_selection(self) -> None:
        state = UIState(expanded_groups=PathSet(["Work"]), last_selected_group="Work.Projects")
        state.rewrite_group_path("Work", "Job")
        self.assertEqual(state.expanded_groups, ["Job"])
        self.assertEqual(state.last_selected_group, "Job.Projects")

    def test_encode_contains_every_document_key(self) -> None:
        encoded = UIState().to_dict()
        self.assertEqual(encoded["expanded_groups"], [])
        self.assertIsNone(encoded["last_selected_group"])
        self.assertEqual(encoded["left_cursor"], {"row": 1, "col": 0})
        self.assertEqual(len(encoded), 17)


if __name__ == "__main__":
    unittest.main()
