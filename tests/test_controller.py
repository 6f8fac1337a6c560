import tempfile
import unittest
from pathlib import Path

from controller import AppState, Controller
from repository import TaskRepository
from storage import Storage
from theme import Theme, ThemeRegistry


class ControllerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.storage = Storage(Path(self._tmp.name))
        self.repo = TaskRepository(self.storage)
        self.controller = Controller(self.repo, ThemeRegistry(self.storage))

    def shown(self):
        return [r.text for r in self.controller.view().rows]


class TestTaskActions(ControllerTestCase):
    def test_buy_milk_walk_dog_example(self) -> None:
        self.controller.add_task("buy milk")
        self.controller.add_task("walk dog")
        self.assertEqual(self.shown(), ["walk dog", "buy milk"])
        self.assertEqual(self.controller.toggle_complete(2), "")
        self.assertTrue(self.repo.active[1].completed)
        self.controller.filter_tasks("pending")
        self.assertEqual(self.shown(), ["walk dog"])
        self.controller.filter_tasks("completed")
        self.assertEqual(self.shown(), ["buy milk"])

    def test_positions_follow_filter_and_sort(self) -> None:
        for text in ("a", "b", "c"):
            self.controller.add_task(text)
        # active order: c, b, a
        self.controller.set_order("desc")
        self.assertEqual(self.shown(), ["a", "b", "c"])
        self.controller.toggle_complete(1)
        self.assertTrue(self.repo.find_active(self.repo.active[2].id).completed)
        self.assertEqual([t.completed for t in self.repo.active], [False, False, True])
        self.controller.filter_tasks("pending")
        self.controller.soft_delete(2)
        self.assertEqual([t.text for t in self.repo.deleted], ["c"])

    def test_out_of_range_position(self) -> None:
        self.controller.add_task("a")
        self.assertEqual(self.controller.toggle_complete(5), "No task #5.")
        self.assertEqual(self.controller.soft_delete(0), "No task #0.")

    def test_restore_and_purge_need_deleted_filter(self) -> None:
        self.controller.add_task("a")
        self.controller.soft_delete(1)
        self.assertIn("deleted filter", self.controller.restore(1))
        self.controller.filter_tasks("deleted")
        self.assertEqual(self.controller.soft_delete(1), "No task #1.")
        self.assertEqual(self.controller.restore(1), "")
        self.assertEqual(self.repo.deleted, [])
        self.assertEqual(self.controller.permanently_delete(1), "No task #1.")
        self.assertEqual(len(self.repo.active), 1)

    def test_restore_appends_to_end(self) -> None:
        self.controller.add_task("a")
        self.controller.add_task("b")
        self.controller.soft_delete(1)
        self.controller.add_task("c")
        self.controller.filter_tasks("deleted")
        self.controller.restore(1)
        self.controller.filter_tasks("all")
        self.assertEqual(self.shown(), ["c", "a", "b"])

    def test_delete_all_requires_confirmation(self) -> None:
        self.controller.add_task("a")
        self.controller.add_task("b")
        self.controller.soft_delete(1)
        prompts = []

        def decline(question):
            prompts.append(question)
            return False

        self.assertEqual(self.controller.delete_all(decline), "Nothing deleted.")
        self.assertEqual(len(prompts), 1)
        self.assertEqual(len(self.repo.active) + len(self.repo.deleted), 2)
        self.assertEqual(self.controller.delete_all(lambda q: True), "Deleted 2 tasks.")
        self.assertEqual((self.repo.active, self.repo.deleted), ([], []))

    def test_invalid_filter_and_order(self) -> None:
        self.assertIn("Invalid filter", self.controller.filter_tasks("archived"))
        self.assertIn("Invalid order", self.controller.set_order("sideways"))
        self.assertEqual(self.controller.state.filter, "all")

    def test_reset(self) -> None:
        self.controller.filter_tasks("deleted")
        self.controller.set_order("desc")
        self.controller.reset()
        self.assertEqual(self.controller.state, AppState.initial())


class TestEditStateMachine(ControllerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.controller.add_task("first")
        self.controller.add_task("second")
        # rows: 1=second, 2=first

    def test_second_press_commits_draft(self) -> None:
        self.controller.edit_task(1)
        self.assertTrue(self.controller.editing)
        self.controller.update_draft(text="second edited", time="2026-10-20T09:00")
        self.assertEqual(self.repo.active[0].text, "second")
        self.assertEqual(self.shown()[0], "second edited")
        self.controller.edit_task(1)
        self.assertFalse(self.controller.editing)
        self.assertEqual(self.repo.active[0].text, "second edited")
        self.assertEqual(self.repo.active[0].time, "2026-10-20T09:00")

    def test_switching_rows_discards_draft(self) -> None:
        self.controller.edit_task(1)
        self.controller.update_draft(text="never saved")
        self.controller.edit_task(2)
        self.assertEqual(self.controller.state.edit.task_id, self.repo.active[1].id)
        self.assertEqual(self.repo.active[0].text, "second")
        self.controller.edit_task(2)
        self.assertEqual([t.text for t in self.repo.active], ["second", "first"])

    def test_completed_task_cannot_enter_edit(self) -> None:
        self.controller.toggle_complete(1)
        self.assertIn("cannot be edited", self.controller.edit_task(1))
        self.assertFalse(self.controller.editing)

    def test_draft_requires_edit(self) -> None:
        self.assertIn("Not editing", self.controller.update_draft(text="x"))

    def test_filter_switch_clears_edit(self) -> None:
        self.controller.edit_task(1)
        self.controller.filter_tasks("pending")
        self.assertFalse(self.controller.editing)

    def test_delete_clears_edit(self) -> None:
        self.controller.edit_task(1)
        self.controller.soft_delete(2)
        self.assertFalse(self.controller.editing)

    def test_sort_keeps_edit_on_same_task(self) -> None:
        self.controller.edit_task(1)
        self.controller.set_order("desc")
        row = self.controller.view().row_at(2)
        self.assertTrue(row.editing)
        self.assertEqual(row.text, "second")


class TestThemeSelection(ControllerTestCase):
    def test_select_theme(self) -> None:
        self.assertEqual(self.controller.select_theme("midnight"), "")
        self.assertIs(self.controller.themes.active, Theme.MIDNIGHT)

    def test_unknown_theme_message(self) -> None:
        message = self.controller.select_theme("neon")
        self.assertTrue(message.startswith("Unknown theme: neon"))
        self.assertIs(self.controller.themes.active, Theme.LIGHT)


if __name__ == "__main__":
    unittest.main()
