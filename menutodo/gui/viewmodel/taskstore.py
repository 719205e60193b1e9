"""
Contains the ``TaskStore`` class - the view model holding the tasks and lists shown by MenuTodo.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, Callable, List, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from menutodo.reminders.controller import ReminderController
from menutodo.reminders.model.task import Task
from menutodo.reminders.model.tasklist import TaskList

#: Called with ``(success, data)`` once a mutation has completed and, on success, the snapshot has been refreshed.
MutationCallback = Callable[[bool, Any], None]


# noinspection PyUnresolvedReferences
class TaskStore(QObject):
    """
    Holds a snapshot of every task and list in Reminders.

    The snapshot is only ever replaced as a whole, by :py:meth:`refresh`. Mutations are passed to the
    ``ReminderController`` and, if they succeed, followed by a refresh; nothing is changed locally in anticipation.
    Failures are logged and leave the snapshot untouched.

    All methods, callbacks and signals run on the GUI thread, which is the thread owning the controller's dispatcher.
    Changes made outside MenuTodo are picked up through the controller's change notifications until :py:meth:`close` is
    called.
    """

    #: Emitted whenever a refreshed snapshot has been applied.
    snapshot_changed = pyqtSignal()
    #: Emitted with the outcome of the access request.
    access_changed = pyqtSignal(bool)

    def __init__(self, controller: ReminderController, parent: QObject | None = None):
        """
        Create the view model and subscribe to external changes.

        :param controller: the reminder controller to use.
        """
        super().__init__(parent)
        self.controller: ReminderController = controller
        self.tasks: List[Task] = []
        self.lists: List[TaskList] = []
        self.closed: bool = False
        self.controller.subscribe(self.refresh)

    @property
    def access_granted(self) -> bool:
        return self.controller.access_granted

    def start(self) -> None:
        """
        Request access to Reminders and load the first snapshot once granted.
        """
        def on_access(granted: bool) -> None:
            self.access_changed.emit(granted)
            if granted:
                self.refresh()

        self.controller.request_access(on_access)

    def close(self) -> None:
        """
        Stop listening for external changes.
        """
        if self.closed:
            return
        self.controller.unsubscribe(self.refresh)
        self.closed = True

    # SNAPSHOT ---------------------------------------------------------------------------------------------------------

    def refresh(self, cb: Callable[[bool], None] | None = None) -> None:
        """
        Re-fetch all tasks and lists. Tasks are sorted by date, most recent first; tasks with the same date keep the
        order Reminders returned them in. Both snapshots are replaced together before ``snapshot_changed`` is emitted.

        Overlapping refreshes are not coalesced; whichever completes last wins.

        :param cb: called with True once the new snapshot is applied, or False if the fetch failed.
        """
        def done(success: bool, data: Any) -> None:
            if not success:
                logging.warning('Refresh failed, keeping the current snapshot: {}'.format(data))
                if cb:
                    cb(False)
                return
            tasks, lists = data
            self.tasks = sorted(tasks, key=lambda t: t.date, reverse=True)
            self.lists = list(lists)
            logging.debug('Snapshot refreshed: {} tasks in {} lists'.format(len(self.tasks), len(self.lists)))
            self.snapshot_changed.emit()
            if cb:
                cb(True)

        self.controller.fetch_snapshot(done)

    def _after(self, what: str, cb: MutationCallback | None) -> Callable[[bool, Any], None]:
        """
        Build the controller callback for a mutation: refresh on success, then report to ``cb``.
        """
        def done(success: bool, data: Any) -> None:
            if not success:
                logging.warning('Could not {}: {}'.format(what, data))
                if cb:
                    cb(False, data)
                return
            self.refresh(lambda refreshed: cb(True, data) if cb else None)

        return done

    @staticmethod
    def _reject(what: str, reason: str, cb: MutationCallback | None) -> None:
        logging.warning('Could not {}: {}'.format(what, reason))
        if cb:
            cb(False, reason)

    # MUTATIONS --------------------------------------------------------------------------------------------------------

    def add_task(self, title: str, target_list: TaskList | None = None, cb: MutationCallback | None = None) -> None:
        """
        Add a task to ``target_list``, or to the default Reminders list if None. The title is trimmed; empty titles are
        rejected.
        """
        title = title.strip()
        if title == '':
            TaskStore._reject('add task', 'title is empty', cb)
            return
        self.controller.create_task(self._after('add task {}'.format(title), cb), title, target_list)

    def toggle_completion(self, task: Task, cb: MutationCallback | None = None) -> None:
        self.controller.set_completed(self._after('toggle task {}'.format(task), cb), task.uuid, not task.completed)

    def delete_task(self, uuid: str, cb: MutationCallback | None = None) -> None:
        self.controller.delete_task(self._after('delete task {}'.format(uuid), cb), uuid)

    def move_task(self, uuid: str, target_list_uuid: str, cb: MutationCallback | None = None) -> None:
        """
        Move a task to another list. Fails without contacting Reminders if the target list is not in the snapshot.
        """
        target_list = self.find_list(target_list_uuid)
        if target_list is None:
            TaskStore._reject('move task {}'.format(uuid), 'unknown list {}'.format(target_list_uuid), cb)
            return
        self.controller.move_task(self._after('move task {}'.format(uuid), cb), uuid, target_list)

    def delete_list(self, uuid: str, cb: MutationCallback | None = None) -> None:
        """
        Delete a list. Reminders also deletes every task in it.
        """
        self.controller.delete_list(self._after('delete list {}'.format(uuid), cb), uuid)

    def add_list(self, title: str, color: str | None = None, cb: MutationCallback | None = None) -> None:
        title = title.strip()
        if title == '':
            TaskStore._reject('add list', 'title is empty', cb)
            return
        self.controller.create_list(self._after('add list {}'.format(title), cb), title, color)

    def update_task(self,
                    uuid: str,
                    title: str | None = None,
                    notes: str | None = None,
                    due_date: datetime.datetime | None = None,
                    cb: MutationCallback | None = None) -> None:
        """
        Update a task. Only the fields given are changed. A title which is empty once trimmed is rejected. Due dates are
        kept to the minute.
        """
        if title is not None:
            title = title.strip()
            if title == '':
                TaskStore._reject('update task {}'.format(uuid), 'title is empty', cb)
                return
        if due_date is not None:
            due_date = due_date.replace(second=0, microsecond=0)
        self.controller.update_task(self._after('update task {}'.format(uuid), cb), uuid,
                                    title=title, notes=notes, due_date=due_date)

    # DERIVED VIEWS ----------------------------------------------------------------------------------------------------

    def grouped_by_list(self) -> List[Tuple[TaskList, List[Task]]]:
        """
        Group tasks by list. There is one entry per list, in list order, each holding its tasks in snapshot order. Tasks
        whose list is not in the snapshot appear in no group.
        """
        return [(task_list, [t for t in self.tasks if t.list_uuid == task_list.uuid]) for task_list in self.lists]

    def today_tasks(self, today: datetime.date | None = None) -> List[Task]:
        """
        Incomplete tasks whose date falls on ``today`` (the current day if None).
        """
        today = today or datetime.date.today()
        return [t for t in self.tasks if t.date.date() == today and not t.completed]

    def find_task(self, uuid: str) -> Task | None:
        return next((t for t in self.tasks if t.uuid == uuid), None)

    def find_list(self, uuid: str) -> TaskList | None:
        return next((tl for tl in self.lists if tl.uuid == uuid), None)
