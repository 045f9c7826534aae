"""Selection, directory browsing, and sort-cycling transitions."""

from __future__ import annotations

import unittest

from favdir.fs import DirectoryListing
from favdir.model import Item, UIState
from favdir.session import (
    FavdirSession,
    browse_into,
    cycle_sort_mode,
    directory_view,
    go_up,
    is_directory_view,
    list_view_directory,
    select_node,
    toggle_sort_direction,
)
from favdir.tree_view import TreeNode
from favdir_fakes import make_store


class SelectionTests(unittest.TestCase):
    def test_selecting_group_then_dir_link(self) -> None:
        state = UIState(is_browsing_directory=True, browse_base_path="/x", browse_current_path="/x/y")
        select_node(state, TreeNode(name="Work", full_path="Work", level=0))
        self.assertEqual(state.last_selected_type, "group")
        self.assertEqual(state.last_selected_group, "Work")
        self.assertFalse(state.is_browsing_directory)
        self.assertIsNone(state.browse_base_path)

        link = TreeNode(name="Docs", full_path="Work.Docs", level=1, is_dir_link=True, dir_path="/srv/docs")
        select_node(state, link)
        self.assertEqual(state.last_selected_type, "dir_link")
        self.assertEqual(state.last_selected_dir_link, "/srv/docs")
        self.assertIsNone(state.last_selected_group)
        self.assertEqual(directory_view(state), ("/srv/docs", "/srv/docs"))


class BrowseTests(unittest.TestCase):
    def test_directory_item_starts_browse_mode(self) -> None:
        state = UIState(last_selected_group="Work")
        self.assertFalse(is_directory_view(state))
        result = browse_into(state, Item("/src", "dir"))
        self.assertTrue(result)
        self.assertTrue(state.is_browsing_directory)
        self.assertEqual(directory_view(state), ("/src", "/src"))

        browse_into(state, DirectoryListing("pkg", "/src/pkg", "dir"))
        self.assertEqual(directory_view(state), ("/src", "/src/pkg"))

    def test_files_cannot_be_browsed(self) -> None:
        state = UIState()
        self.assertEqual(browse_into(state, Item("/a.txt", "file")).error, "Not a directory")
        self.assertFalse(state.is_browsing_directory)

    def test_go_up_stops_at_base_then_exits_browse(self) -> None:
        state = UIState(is_browsing_directory=True, browse_base_path="/src", browse_current_path="/src/pkg/sub")
        self.assertEqual(go_up(state).value, "/src/pkg")
        self.assertEqual(go_up(state).value, "/src")
        result = go_up(state)
        self.assertTrue(result)
        self.assertEqual(result.value, "Exited directory browse")
        self.assertFalse(state.is_browsing_directory)

    def test_dir_link_view_reports_top_level(self) -> None:
        state = UIState(last_selected_type="dir_link", last_selected_dir_link="/srv/docs")
        browse_into(state, DirectoryListing("api", "/srv/docs/api", "dir"))
        self.assertEqual(state.dir_link_current_path, "/srv/docs/api")
        self.assertTrue(go_up(state))
        self.assertEqual(go_up(state).error, "Already at top level")

    def test_go_up_outside_directory_view(self) -> None:
        self.assertFalse(go_up(UIState()))


class SortCycleTests(unittest.TestCase):
    def test_left_panel_cycles_custom_alpha(self) -> None:
        state = UIState()
        self.assertEqual(cycle_sort_mode(state, "left"), "alpha")
        self.assertEqual(cycle_sort_mode(state, "left"), "custom")

    def test_right_panel_cycles_all_item_modes(self) -> None:
        state = UIState()
        seen = [cycle_sort_mode(state, "right") for _ in range(6)]
        self.assertEqual(seen, ["name", "created", "modified", "size", "type", "custom"])

    def test_right_panel_uses_directory_settings_while_browsing(self) -> None:
        state = UIState(last_selected_type="dir_link", last_selected_dir_link="/srv")
        self.assertEqual(cycle_sort_mode(state, "right"), "name")
        self.assertEqual(state.dir_sort_mode, "name")
        self.assertEqual(state.right_sort_mode, "custom")
        self.assertFalse(toggle_sort_direction(state, "right"))
        self.assertFalse(state.dir_sort_asc)
        self.assertTrue(state.right_sort_asc)


class DirectoryListingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store, self.fs = make_store()
        self.fs.add_dir("/srv")
        self.fs.add_dir("/srv/docs")
        self.fs.add_dir("/srv/docs/api")
        self.fs.add_file("/srv/docs/readme.md", size=10)
        self.fs.add_file("/srv/docs/Changelog", size=99)

    def test_link_root_has_no_parent_entry(self) -> None:
        state = UIState(last_selected_type="dir_link", last_selected_dir_link="/srv/docs")
        entries, error = list_view_directory(state, self.fs)
        self.assertIsNone(error)
        self.assertEqual([entry.name for entry in entries], ["api", "Changelog", "readme.md"])

    def test_subfolder_and_browse_mode_show_parent_first(self) -> None:
        state = UIState(is_browsing_directory=True, browse_base_path="/srv/docs")
        state.dir_sort_mode = "size"
        state.dir_sort_asc = False
        entries, _error = list_view_directory(state, self.fs, self.fs.stat_sync)
        self.assertEqual([entry.name for entry in entries], ["..", "api", "readme.md", "Changelog"])
        self.assertEqual(entries[0].path, "/srv")

    def test_missing_and_unreadable_directories(self) -> None:
        state = UIState(last_selected_type="dir_link", last_selected_dir_link="/gone")
        self.assertEqual(list_view_directory(state, self.fs), ([], "Directory not found: /gone"))
        self.fs.unreadable.add("/srv/docs")
        state.last_selected_dir_link = "/srv/docs"
        self.assertEqual(list_view_directory(state, self.fs), ([], "Failed to read directory"))


class FavdirSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store, self.fs = make_store()
        self.session = FavdirSession(self.store)
        for name in ("A", "B", "C"):
            self.store.add_group("", name)

    def test_select_persists(self) -> None:
        self.assertTrue(self.session.select("B"))
        self.assertEqual(self.store.load_ui_state().last_selected_group, "B")
        self.assertEqual(self.session.select("Z").error, "Node not visible")

    def test_items_follow_selection(self) -> None:
        self.assertEqual(self.session.items(), [])
        self.fs.add_file("/f/b")
        self.fs.add_file("/f/a")
        self.store.add_item("A", "/f/b")
        self.store.add_item("A", "/f/a")
        self.session.select("A")
        self.session.cycle_sort_mode("right")
        self.assertEqual([item.path for item in self.session.items()], ["/f/a", "/f/b"])

    def test_cycling_groups_to_alpha_freezes_root_order(self) -> None:
        self.store.reorder_down("group", "", 1)
        self.assertEqual(self.session.cycle_sort_mode("left"), "alpha")
        self.assertEqual([(group.name, group.order) for group in self.store.get_data().groups], [("A", 1), ("B", 2), ("C", 3)])

    def test_move_group_respects_display_direction(self) -> None:
        self.assertEqual(self.session.move_group("C", up=True).value, 2)
        self.assertEqual([node.name for node in self.session.tree()], ["A", "C", "B"])
        self.session.toggle_sort_direction("left")
        self.assertEqual([node.name for node in self.session.tree()], ["B", "C", "A"])
        self.assertTrue(self.session.move_group("A", up=True))
        self.assertEqual([node.name for node in self.session.tree()], ["B", "A", "C"])

    def test_move_group_requires_custom_mode(self) -> None:
        self.session.cycle_sort_mode("left")
        self.assertEqual(self.session.move_group("A", up=False).error, "Reorder only works in custom sort mode")

    def test_move_item_at_edge(self) -> None:
        self.fs.add_file("/f/x")
        self.store.add_item("A", "/f/x")
        self.assertEqual(self.session.move_item("A", "/f/x", up=True).error, "Cannot move further")
        self.assertEqual(self.session.move_item("A", "/f/nope", up=True).error, "Item not found in group")

    def test_browse_and_go_up_persist(self) -> None:
        self.fs.add_dir("/src")
        self.fs.add_dir("/src/pkg")
        self.store.add_item("A", "/src")
        self.session.select("A")
        self.session.browse_into(Item("/src", "dir"))
        entries, _error = self.session.directory_entries()
        self.assertEqual([entry.name for entry in entries], ["..", "pkg"])
        self.assertTrue(self.session.go_up())
        self.assertFalse(self.store.load_ui_state().is_browsing_directory)

    def test_prefetch_directory_fetches_entries(self) -> None:
        self.fs.add_dir("/srv")
        self.fs.add_file("/srv/a", size=1)
        self.fs.add_file("/srv/b", size=2)
        state = self.store.load_ui_state()
        state.last_selected_type = "dir_link"
        state.last_selected_dir_link = "/srv"
        self.store.save_ui_state(state)

        done: list[bool] = []
        self.session.prefetch_directory(lambda: done.append(True))
        self.assertEqual(sorted(self.fs.stat_async_calls), ["/srv/a", "/srv/b"])
        self.fs.resolve_pending()
        self.store.ticks.run_until_idle()
        self.assertEqual(done, [True])

    def test_focus_and_cursor(self) -> None:
        self.session.focus("right")
        self.session.set_cursor("right", 0, 3)
        state = self.store.load_ui_state()
        self.assertEqual(state.focused_panel, "right")
        self.assertEqual((state.right_cursor.row, state.right_cursor.col), (1, 3))
        with self.assertRaises(ValueError):
            self.session.focus("middle")


if __name__ == "__main__":
    unittest.main()
