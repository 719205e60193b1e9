"""
This is the reminder controller. It runs ``ReminderStore`` operations off the GUI thread and reports each result back to
the thread which owns the dispatcher, as a ``(success, data)`` pair. Store errors never propagate past this class.
"""
from __future__ import annotations

import datetime
import logging
from typing import Callable, Dict, List, Any

from menutodo.reminders.errors import ReminderError, AccessDenied, EntityNotFound
from menutodo.reminders.listener import ChangeMonitor
from menutodo.reminders.model.task import Task
from menutodo.reminders.model.tasklist import TaskList
from menutodo.reminders.store import ReminderStore

#: Called with ``(success, data)``; ``data`` is the result on success, or an error message on failure.
ResultCallback = Callable[[bool, Any], None]


class ReminderController:
    """
    Asynchronous access to a reminder store.

    The dispatcher must provide ``submit(func, cb)``, which runs ``func`` in the background and then calls ``cb`` with its
    return value on the owner thread, and ``post(func)``, which runs ``func`` on the owner thread later. Every callback
    given to this controller is called on the owner thread.

    All operations apart from :py:meth:`request_access` fail immediately until access has been granted.
    """

    def __init__(self, store: ReminderStore, dispatcher, monitor: ChangeMonitor | None = None):
        """
        Create a reminder controller.

        :param store: the reminder store to use.
        :param dispatcher: runs store calls in the background and delivers results on the owner thread.
        :param monitor: source of external change notifications, if any.
        """
        self.store: ReminderStore = store
        self.dispatcher = dispatcher
        self.monitor: ChangeMonitor | None = monitor
        self.access_granted: bool = False
        self._subscriptions: Dict[Callable, Callable] = {}

    def request_access(self, cb: Callable[[bool], None]) -> None:
        """
        Ask for access to Reminders. Must be called before anything else.

        :param cb: called with True if access was granted.
        """
        def work() -> bool:
            try:
                return self.store.request_access()
            except ReminderError as e:
                logging.critical('Error requesting access to Reminders: {}'.format(e))
                return False
            except Exception as e:
                logging.exception('Unexpected error requesting access to Reminders: {}'.format(e))
                return False

        def done(granted: bool) -> None:
            self.access_granted = granted
            if granted:
                logging.debug('Access to Reminders granted.')
            else:
                logging.critical('Access to Reminders was not granted.')
            cb(granted)

        self.dispatcher.submit(work, done)

    def _call(self, what: str, cb: ResultCallback, func: Callable, *args, **kwargs) -> None:
        """
        Run a store operation in the background.

        :param what: description of the operation, used for logging.
        :param cb: called with the result on the owner thread.
        :param func: the store method to call.
        """
        if not self.access_granted:
            error = 'Cannot {}: access to Reminders has not been granted.'.format(what)
            logging.warning(error)
            self.dispatcher.post(lambda: cb(False, error))
            return

        def work() -> tuple[bool, Any]:
            try:
                return True, func(*args, **kwargs)
            except ReminderError as e:
                return False, e
            except Exception as e:
                # Nothing may escape a worker thread.
                logging.exception('Unexpected error while trying to {}'.format(what))
                return False, e

        def done(result: tuple[bool, Any]) -> None:
            success, data = result
            if success:
                logging.debug('Completed: {}'.format(what))
                cb(True, data)
                return

            error = 'Failed to {}: {}'.format(what, data)
            if isinstance(data, AccessDenied):
                self.access_granted = False
                logging.critical(error)
            elif isinstance(data, EntityNotFound):
                logging.warning(error)
            else:
                logging.critical(error)
            cb(False, error)

        self.dispatcher.submit(work, done)

    def fetch_lists(self) -> List[TaskList]:
        """
        Fetch the reminder lists, blocking the calling thread.

        :return: the reminder lists, or an empty list if access has not been granted or the fetch fails.
        """
        if not self.access_granted:
            return []
        try:
            return self.store.fetch_lists()
        except ReminderError as e:
            logging.critical('Failed to fetch reminder lists: {}'.format(e))
            return []
        except Exception as e:
            logging.exception('Unexpected error fetching reminder lists: {}'.format(e))
            return []

    def fetch_tasks(self, cb: ResultCallback, list_filter: TaskList | None = None) -> None:
        """
        Fetch the tasks in one list, or in all lists if ``list_filter`` is None. Without access, the result is an empty
        list.
        """
        if not self.access_granted:
            self.dispatcher.post(lambda: cb(True, []))
            return
        self._call('fetch reminders', cb, self.store.fetch_tasks, list_filter)

    def fetch_snapshot(self, cb: ResultCallback) -> None:
        """
        Fetch all tasks and all lists in a single background call. On success, ``data`` is a ``(tasks, lists)`` tuple.
        Without access, both are empty.
        """
        if not self.access_granted:
            self.dispatcher.post(lambda: cb(True, ([], [])))
            return

        def fetch() -> tuple[List[Task], List[TaskList]]:
            return self.store.fetch_tasks(None), self.store.fetch_lists()

        self._call('fetch reminders and lists', cb, fetch)

    def create_task(self, cb: ResultCallback, title: str, task_list: TaskList | None = None) -> None:
        self._call('add reminder {}'.format(title), cb, self.store.create_task, title, task_list)

    def set_completed(self, cb: ResultCallback, uuid: str, completed: bool) -> None:
        self._call('set completion of reminder {}'.format(uuid), cb, self.store.set_completed, uuid, completed)

    def update_task(self,
                    cb: ResultCallback,
                    uuid: str,
                    title: str | None = None,
                    notes: str | None = None,
                    due_date: datetime.datetime | None = None) -> None:
        self._call('update reminder {}'.format(uuid), cb, self.store.update_task, uuid,
                   title=title, notes=notes, due_date=due_date)

    def move_task(self, cb: ResultCallback, uuid: str, target_list: TaskList) -> None:
        self._call('move reminder {} to {}'.format(uuid, target_list), cb, self.store.move_task, uuid, target_list)

    def delete_task(self, cb: ResultCallback, uuid: str) -> None:
        self._call('delete reminder {}'.format(uuid), cb, self.store.delete_task, uuid)

    def create_list(self, cb: ResultCallback, title: str, color: str | None = None) -> None:
        self._call('create list {}'.format(title), cb, self.store.create_list, title, color)

    def delete_list(self, cb: ResultCallback, uuid: str) -> None:
        self._call('delete list {}'.format(uuid), cb, self.store.delete_list, uuid)

    def subscribe(self, cb: Callable[[], None]) -> None:
        """
        Be notified on the owner thread whenever Reminders changes outside MenuTodo.

        :param cb: called with no arguments.
        """
        if self.monitor is None or cb in self._subscriptions:
            return

        def notify() -> None:
            self.dispatcher.post(cb)

        self._subscriptions[cb] = notify
        self.monitor.subscribe(notify)

    def unsubscribe(self, cb: Callable[[], None]) -> None:
        notify = self._subscriptions.pop(cb, None)
        if notify is not None and self.monitor is not None:
            self.monitor.unsubscribe(notify)
