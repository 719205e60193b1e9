import copy
import datetime
import os
from typing import List

import pytest
from PyQt6.QtWidgets import QApplication

from menutodo.gui.viewmodel.taskstore import TaskStore
from menutodo.reminders.controller import ReminderController
from menutodo.reminders.errors import AccessDenied, EntityNotFound
from menutodo.reminders.listener import ChangeMonitor
from menutodo.reminders.model.task import Task
from menutodo.reminders.model.tasklist import TaskList
from menutodo.reminders.store import ReminderStore


class FakeStore(ReminderStore):
    """
    In-memory reminder store. Starts with a single default list called *Reminders*.
    """

    def __init__(self, granted: bool = True):
        self.granted: bool = granted
        self.lists: List[TaskList] = []
        self.tasks: List[Task] = []
        self.now: datetime.datetime = datetime.datetime(2024, 4, 18, 9, 0, 0)
        self.fail_with: Exception | None = None
        self.version: int = 0
        self.calls: List[str] = []
        self._next_id: int = 0
        self.default_list: TaskList = self.add_list('Reminders')

    # Test helpers - these bypass access checks, like edits made in the Reminders app.

    def _new_id(self, kind: str) -> str:
        self._next_id += 1
        return 'x-apple-{}://{}'.format(kind, self._next_id)

    def add_list(self, title: str, color: str | None = None) -> TaskList:
        task_list = TaskList(self._new_id('list'), title, color)
        self.lists.append(task_list)
        self.version += 1
        return task_list

    def add_task(self, title: str, task_list: TaskList, date: datetime.datetime | None = None,
                 completed: bool = False) -> Task:
        task = Task(self._new_id('reminder'), title, date or self.now, task_list.uuid, completed=completed)
        self.tasks.append(task)
        self.version += 1
        return task

    def _check(self, call: str) -> None:
        self.calls.append(call)
        if not self.granted:
            raise AccessDenied('not allowed to control Reminders')
        if self.fail_with is not None:
            raise self.fail_with

    def _task(self, uuid: str) -> Task:
        task = next((t for t in self.tasks if t.uuid == uuid), None)
        if task is None:
            raise EntityNotFound('no longer exists')
        return task

    def _list(self, uuid: str) -> TaskList:
        task_list = next((tl for tl in self.lists if tl.uuid == uuid), None)
        if task_list is None:
            raise EntityNotFound('no longer exists')
        return task_list

    # ReminderStore

    def request_access(self) -> bool:
        self.calls.append('request_access')
        return self.granted

    def fetch_lists(self) -> List[TaskList]:
        self._check('fetch_lists')
        return [copy.copy(tl) for tl in self.lists]

    def fetch_tasks(self, list_filter: TaskList | None = None) -> List[Task]:
        self._check('fetch_tasks')
        return [copy.copy(t) for t in self.tasks if list_filter is None or t.list_uuid == list_filter.uuid]

    def create_task(self, title: str, task_list: TaskList | None = None) -> Task:
        self._check('create_task')
        target = self._list(task_list.uuid) if task_list else self.default_list
        return copy.copy(self.add_task(title, target))

    def set_completed(self, uuid: str, completed: bool) -> None:
        self._check('set_completed')
        self._task(uuid).completed = completed
        self.version += 1

    def update_task(self, uuid, title=None, notes=None, due_date=None) -> None:
        self._check('update_task')
        task = self._task(uuid)
        if title is not None:
            task.title = title
        if notes is not None:
            task.notes = notes
        if due_date is not None:
            task.due_date = due_date
            task.date = due_date
        self.version += 1

    def move_task(self, uuid: str, target_list: TaskList) -> None:
        self._check('move_task')
        self._task(uuid).list_uuid = self._list(target_list.uuid).uuid
        self.version += 1

    def delete_task(self, uuid: str) -> None:
        self._check('delete_task')
        self.tasks.remove(self._task(uuid))
        self.version += 1

    def create_list(self, title: str, color: str | None = None) -> TaskList:
        self._check('create_list')
        return copy.copy(self.add_list(title, color))

    def delete_list(self, uuid: str) -> None:
        self._check('delete_list')
        task_list = self._list(uuid)
        self.lists.remove(task_list)
        self.tasks = [t for t in self.tasks if t.list_uuid != uuid]
        self.version += 1

    def fingerprint(self) -> str:
        self._check('fingerprint')
        return str(self.version)


class InlineDispatcher:
    """
    Runs everything immediately on the calling thread.
    """

    def submit(self, func, cb):
        cb(func())

    def post(self, func):
        func()


class QueuedDispatcher:
    """
    Runs background work immediately, but holds back every delivery until the test releases it.
    """

    def __init__(self):
        self.pending = []

    def submit(self, func, cb):
        result = func()
        self.pending.append(lambda: cb(result))

    def post(self, func):
        self.pending.append(func)

    def run(self, index: int = 0):
        self.pending.pop(index)()

    def run_all(self):
        while len(self.pending) > 0:
            self.run()


@pytest.fixture(scope='session', autouse=True)
def qt_app():
    os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def monitor(fake_store):
    return ChangeMonitor(fake_store, interval=1)


@pytest.fixture
def controller(fake_store, monitor):
    return ReminderController(fake_store, InlineDispatcher(), monitor)


@pytest.fixture
def task_store(controller):
    store = TaskStore(controller)
    store.start()
    yield store
    store.close()
