import copy
import datetime

from menutodo.gui.viewmodel.taskstore import TaskStore
from menutodo.reminders.controller import ReminderController
from menutodo.reminders.errors import BackendWriteFailure, EntityNotFound

from conftest import FakeStore, InlineDispatcher, QueuedDispatcher


def noon(day: datetime.date) -> datetime.datetime:
    return datetime.datetime.combine(day, datetime.time(12, 0))


class TestTaskStore:

    @staticmethod
    def __results():
        results = []
        return results, lambda success, data: results.append((success, data))

    def test_start_refreshes_once_access_granted(self, fake_store, task_store):
        fake_store.add_task('Existing', fake_store.default_list)
        assert task_store.access_granted is True
        task_store.refresh()
        assert [t.title for t in task_store.tasks] == ['Existing']
        assert task_store.lists == fake_store.lists

    def test_access_denied_yields_empty_snapshot(self):
        backend = FakeStore(granted=False)
        backend.add_task('Hidden', backend.default_list)
        store = TaskStore(ReminderController(backend, InlineDispatcher()))
        outcomes = []
        store.access_changed.connect(outcomes.append)
        store.start()
        assert outcomes == [False]
        assert store.tasks == []
        assert store.lists == []

        results, cb = TestTaskStore.__results()
        store.add_task('Buy milk', cb=cb)
        assert results[0][0] is False
        assert 'create_task' not in backend.calls

    def test_refresh_is_idempotent(self, fake_store, task_store):
        other = fake_store.add_list('Work')
        fake_store.add_task('One', fake_store.default_list)
        fake_store.add_task('Two', other)
        task_store.refresh()
        tasks, lists = copy.deepcopy(task_store.tasks), copy.deepcopy(task_store.lists)
        task_store.refresh()
        assert task_store.tasks == tasks
        assert task_store.lists == lists

    def test_refresh_sorts_by_date_descending_and_keeps_ties(self, fake_store, task_store):
        base = datetime.datetime(2024, 4, 18, 9, 0)
        fake_store.add_task('Old', fake_store.default_list, base - datetime.timedelta(days=2))
        fake_store.add_task('Tie A', fake_store.default_list, base)
        fake_store.add_task('New', fake_store.default_list, base + datetime.timedelta(days=1))
        fake_store.add_task('Tie B', fake_store.default_list, base)
        task_store.refresh()
        assert [t.title for t in task_store.tasks] == ['New', 'Tie A', 'Tie B', 'Old']

    def test_refresh_emits_snapshot_changed(self, fake_store, task_store):
        emitted = []
        task_store.snapshot_changed.connect(lambda: emitted.append(len(task_store.tasks)))
        fake_store.add_task('One', fake_store.default_list)
        task_store.refresh()
        assert emitted == [1]

    def test_refresh_failure_keeps_snapshot(self, fake_store, task_store):
        fake_store.add_task('One', fake_store.default_list)
        task_store.refresh()
        before = copy.deepcopy(task_store.tasks)
        fake_store.add_task('Two', fake_store.default_list)
        fake_store.fail_with = BackendWriteFailure('storage unavailable')
        outcomes = []
        task_store.refresh(outcomes.append)
        assert outcomes == [False]
        assert task_store.tasks == before

    def test_grouped_by_list(self, fake_store, task_store):
        work = fake_store.add_list('Work')
        home = fake_store.add_list('Home')
        fake_store.add_task('Report', work, datetime.datetime(2024, 4, 17))
        fake_store.add_task('Slides', work, datetime.datetime(2024, 4, 19))
        fake_store.add_task('Orphan', work)
        fake_store.tasks[-1].list_uuid = 'x-apple-list://gone'
        task_store.refresh()

        groups = task_store.grouped_by_list()
        assert [tl.title for tl, _ in groups] == ['Reminders', 'Work', 'Home']
        assert [t.title for t in groups[1][1]] == ['Slides', 'Report']
        assert groups[0][1] == []
        assert groups[2][1] == []
        grouped = [t.uuid for _, tasks in groups for t in tasks]
        assert sorted(grouped) == sorted(t.uuid for t in task_store.tasks if t.title != 'Orphan')
        assert home.uuid in [tl.uuid for tl, _ in groups]

    def test_today_tasks(self, fake_store, task_store):
        today = datetime.date.today()
        fake_store.add_task('Today open', fake_store.default_list, noon(today))
        fake_store.add_task('Today done', fake_store.default_list, noon(today), completed=True)
        fake_store.add_task('Yesterday', fake_store.default_list, noon(today - datetime.timedelta(days=1)))
        fake_store.add_task('Tomorrow', fake_store.default_list, noon(today + datetime.timedelta(days=1)))
        task_store.refresh()

        assert [t.title for t in task_store.today_tasks()] == ['Today open']
        assert [t.title for t in task_store.today_tasks(today + datetime.timedelta(days=1))] == ['Tomorrow']
        for task in task_store.tasks:
            expected = task.date.date() == today and not task.completed
            assert (task in task_store.today_tasks()) is expected

    def test_add_task_to_default_list(self, fake_store, task_store):
        results, cb = TestTaskStore.__results()
        task_store.add_task('  Buy milk  ', None, cb)
        assert results[0][0] is True
        assert len(task_store.tasks) == 1
        task = task_store.tasks[0]
        assert task.title == 'Buy milk'
        assert task.completed is False
        assert task.list_uuid == fake_store.default_list.uuid

    def test_add_task_to_list(self, fake_store, task_store):
        work = fake_store.add_list('Work')
        task_store.refresh()
        task_store.add_task('Report', task_store.find_list(work.uuid))
        assert task_store.tasks[0].list_uuid == work.uuid

    def test_add_task_rejects_empty_title(self, fake_store, task_store):
        results, cb = TestTaskStore.__results()
        task_store.add_task('   ', cb=cb)
        assert results == [(False, 'title is empty')]
        assert 'create_task' not in fake_store.calls

    def test_toggle_completion_removes_from_today(self, fake_store, task_store):
        fake_store.add_task('Call mum', fake_store.default_list, noon(datetime.date.today()))
        task_store.refresh()
        task = task_store.tasks[0]
        assert task_store.today_tasks() == [task]

        task_store.toggle_completion(task)
        toggled = task_store.find_task(task.uuid)
        assert toggled.completed is True
        assert toggled not in task_store.today_tasks()

        task_store.toggle_completion(toggled)
        assert task_store.find_task(task.uuid).completed is False

    def test_move_task(self, fake_store, task_store):
        list_a = fake_store.add_list('A')
        list_b = fake_store.add_list('B')
        task = fake_store.add_task('T', list_a)
        task_store.refresh()

        task_store.move_task(task.uuid, list_b.uuid)
        groups = dict((tl.uuid, tasks) for tl, tasks in task_store.grouped_by_list())
        assert task.uuid not in [t.uuid for t in groups[list_a.uuid]]
        assert task.uuid in [t.uuid for t in groups[list_b.uuid]]

    def test_move_task_to_unknown_list(self, fake_store, task_store):
        task = fake_store.add_task('T', fake_store.default_list)
        task_store.refresh()
        results, cb = TestTaskStore.__results()
        task_store.move_task(task.uuid, 'x-apple-list://unknown', cb)
        assert results[0][0] is False
        assert 'move_task' not in fake_store.calls

    def test_delete_list_removes_its_tasks(self, fake_store, task_store):
        shopping = fake_store.add_list('Shopping')
        fake_store.add_task('Milk', shopping)
        fake_store.add_task('Eggs', shopping)
        keep = fake_store.add_task('Keep', fake_store.default_list)
        task_store.refresh()
        assert len(task_store.tasks) == 3

        task_store.delete_list(shopping.uuid)
        assert shopping.uuid not in [tl.uuid for tl in task_store.lists]
        assert [t.uuid for t in task_store.tasks] == [keep.uuid]

    def test_delete_task(self, fake_store, task_store):
        task = fake_store.add_task('Gone', fake_store.default_list)
        task_store.refresh()
        task_store.delete_task(task.uuid)
        assert task_store.tasks == []

    def test_add_list(self, fake_store, task_store):
        results, cb = TestTaskStore.__results()
        task_store.add_list('Groceries', '#FF9500', cb)
        assert results[0][0] is True
        assert [(tl.title, tl.color) for tl in task_store.lists][-1] == ('Groceries', '#FF9500')

    def test_update_task_only_changes_given_fields(self, fake_store, task_store):
        task = fake_store.add_task('Draft', fake_store.default_list)
        task_store.refresh()

        task_store.update_task(task.uuid, notes='Some notes')
        updated = task_store.find_task(task.uuid)
        assert updated.title == 'Draft'
        assert updated.notes == 'Some notes'

        due = datetime.datetime(2024, 5, 1, 14, 30, 45)
        task_store.update_task(task.uuid, title=' Final ', due_date=due)
        updated = task_store.find_task(task.uuid)
        assert updated.title == 'Final'
        assert updated.notes == 'Some notes'
        assert updated.due_date == datetime.datetime(2024, 5, 1, 14, 30)

    def test_update_task_rejects_empty_title(self, fake_store, task_store):
        task = fake_store.add_task('Draft', fake_store.default_list)
        task_store.refresh()
        results, cb = TestTaskStore.__results()
        task_store.update_task(task.uuid, title='  ', cb=cb)
        assert results[0][0] is False
        assert 'update_task' not in fake_store.calls

    def test_mutation_failure_keeps_snapshot(self, fake_store, task_store):
        work = fake_store.add_list('Work')
        task = fake_store.add_task('T', fake_store.default_list)
        task_store.refresh()
        tasks, lists = copy.deepcopy(task_store.tasks), copy.deepcopy(task_store.lists)

        fake_store.fail_with = BackendWriteFailure('storage unavailable')
        results, cb = TestTaskStore.__results()
        task_store.add_task('New', None, cb)
        task_store.toggle_completion(task_store.tasks[0], cb)
        task_store.update_task(task.uuid, title='Renamed', cb=cb)
        task_store.move_task(task.uuid, work.uuid, cb)
        task_store.delete_task(task.uuid, cb)
        task_store.add_list('List', None, cb)
        task_store.delete_list(work.uuid, cb)

        assert [success for success, _ in results] == [False] * 7
        assert task_store.tasks == tasks
        assert task_store.lists == lists

    def test_missing_task_reports_failure(self, fake_store, task_store):
        task = fake_store.add_task('T', fake_store.default_list)
        task_store.refresh()
        fake_store.tasks.clear()
        results, cb = TestTaskStore.__results()
        task_store.delete_task(task.uuid, cb)
        assert results[0][0] is False
        assert len(task_store.tasks) == 1

    def test_entity_not_found_does_not_raise(self, fake_store, task_store):
        fake_store.fail_with = EntityNotFound('no longer exists')
        task_store.delete_task('x-apple-reminder://unknown')
        assert task_store.tasks == []

    def test_callback_runs_after_refresh(self):
        backend = FakeStore()
        dispatcher = QueuedDispatcher()
        store = TaskStore(ReminderController(backend, dispatcher))
        store.start()
        dispatcher.run_all()

        seen = []
        store.add_task('Later', cb=lambda success, data: seen.append([t.title for t in store.tasks]))
        assert store.tasks == []
        dispatcher.run()
        assert seen == []
        dispatcher.run()
        assert seen == [['Later']]

    def test_overlapping_refresh_last_completion_wins(self):
        backend = FakeStore()
        dispatcher = QueuedDispatcher()
        store = TaskStore(ReminderController(backend, dispatcher))
        store.start()
        dispatcher.run_all()

        store.refresh()
        backend.add_task('Added in between', backend.default_list)
        store.refresh()
        assert len(dispatcher.pending) == 2

        # The newer fetch completes first, then the older one overwrites it.
        dispatcher.run(1)
        assert [t.title for t in store.tasks] == ['Added in between']
        dispatcher.run(0)
        assert store.tasks == []

    def test_external_change_triggers_refresh(self, fake_store, monitor, task_store):
        monitor.check()
        fake_store.add_task('From Reminders app', fake_store.default_list)
        assert monitor.check() is True
        assert [t.title for t in task_store.tasks] == ['From Reminders app']

    def test_close_unsubscribes(self, fake_store, monitor, task_store):
        monitor.check()
        task_store.close()
        task_store.close()
        assert monitor.subscribers == []
        fake_store.add_task('Unseen', fake_store.default_list)
        monitor.check()
        assert task_store.tasks == []

    def test_unexpected_error_is_reported_not_raised(self, fake_store, task_store):
        fake_store.add_task('T', fake_store.default_list)
        task_store.refresh()
        fake_store.fail_with = ValueError('unexpected output')
        results, cb = TestTaskStore.__results()
        task_store.add_task('Buy milk', cb=cb)
        assert results[0][0] is False
        assert 'unexpected output' in results[0][1]
        assert [t.title for t in task_store.tasks] == ['T']

        refreshed = []
        task_store.refresh(refreshed.append)
        assert refreshed == [False]
        assert [t.title for t in task_store.tasks] == ['T']
