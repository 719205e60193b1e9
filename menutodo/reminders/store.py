"""
Contains the ``ReminderStore`` interface, which describes the synchronous operations available on a reminders backend,
and ``AppleScriptStore``, which implements them against the Reminders app.

Store methods block and raise a :py:class:`~menutodo.reminders.errors.ReminderError` on failure. They are run on a
worker thread by the ``ReminderController``, never on the GUI thread.
"""

from __future__ import annotations

import datetime
import hashlib
from typing import Any, Callable, List

from menutodo import helpers
from menutodo.helpers import DateUtil
from menutodo.reminders.errors import AccessDenied, EntityNotFound, BackendWriteFailure
from menutodo.reminders.model import reminderscript
from menutodo.reminders.model.task import Task
from menutodo.reminders.model.tasklist import TaskList

#: AppleScript error raised when the user has not allowed MenuTodo to control Reminders.
NOT_AUTHORISED_ERROR = '-1743'


class ReminderStore:
    """
    The operations MenuTodo needs from a reminders backend.
    """

    def request_access(self) -> bool:
        raise NotImplementedError

    def fetch_lists(self) -> List[TaskList]:
        raise NotImplementedError

    def fetch_tasks(self, list_filter: TaskList | None = None) -> List[Task]:
        raise NotImplementedError

    def create_task(self, title: str, task_list: TaskList | None = None) -> Task:
        raise NotImplementedError

    def set_completed(self, uuid: str, completed: bool) -> None:
        raise NotImplementedError

    def update_task(self,
                    uuid: str,
                    title: str | None = None,
                    notes: str | None = None,
                    due_date: datetime.datetime | None = None) -> None:
        raise NotImplementedError

    def move_task(self, uuid: str, target_list: TaskList) -> None:
        raise NotImplementedError

    def delete_task(self, uuid: str) -> None:
        raise NotImplementedError

    def create_list(self, title: str, color: str | None = None) -> TaskList:
        raise NotImplementedError

    def delete_list(self, uuid: str) -> None:
        raise NotImplementedError

    def fingerprint(self) -> str:
        raise NotImplementedError


class AppleScriptStore(ReminderStore):
    """
    Reminder store backed by the Reminders app, driven through ``osascript``.
    """

    @staticmethod
    def _run(script: str, *args) -> str:
        """
        Run a Reminders script and translate failures into store errors.

        :param script: the script to run.
        :param args: arguments for the script.

        :return: the script's standard output, stripped.
        """
        try:
            return_code, stdout, stderr = helpers.run_applescript(script, *args)
        except OSError as e:
            raise BackendWriteFailure("could not run osascript: {}".format(e))
        if return_code != 0:
            if NOT_AUTHORISED_ERROR in stderr:
                raise AccessDenied("not allowed to control Reminders")
            raise BackendWriteFailure(stderr.strip() or "osascript exited with code {}".format(return_code))
        result = stdout.strip()
        if result == reminderscript.NOT_FOUND:
            raise EntityNotFound("no longer exists")
        return result

    @staticmethod
    def _records(output: str) -> List[List[str]]:
        return [record.split(reminderscript.FIELD_SEPARATOR)
                for record in output.split(reminderscript.RECORD_SEPARATOR)
                if record.strip() != '']

    @staticmethod
    def _parse(create: Callable[..., Any], values: List[str], *args) -> Any:
        try:
            return create(values, *args)
        except (IndexError, ValueError) as e:
            raise BackendWriteFailure("unexpected output from Reminders: {!r} ({})".format(values, e))

    def request_access(self) -> bool:
        try:
            AppleScriptStore._run(reminderscript.request_access_script)
        except (AccessDenied, BackendWriteFailure):
            return False
        return True

    def fetch_lists(self) -> List[TaskList]:
        stdout = AppleScriptStore._run(reminderscript.get_reminder_lists_script)
        return [AppleScriptStore._parse(TaskList.create_from_local, values)
                for values in AppleScriptStore._records(stdout)]

    def fetch_tasks(self, list_filter: TaskList | None = None) -> List[Task]:
        fetched_at = datetime.datetime.now()
        stdout = AppleScriptStore._run(reminderscript.get_reminders_script,
                                       list_filter.uuid if list_filter else '')
        return [AppleScriptStore._parse(Task.create_from_local, values, fetched_at)
                for values in AppleScriptStore._records(stdout)]

    def create_task(self, title: str, task_list: TaskList | None = None) -> Task:
        stdout = AppleScriptStore._run(reminderscript.add_reminder_script,
                                       title,
                                       task_list.uuid if task_list else '')
        values = stdout.split(reminderscript.FIELD_SEPARATOR)
        if len(values) != 2:
            raise BackendWriteFailure("unexpected output from Reminders: {!r}".format(stdout))
        uuid, list_uuid = values
        return Task(uuid=uuid, title=title, date=datetime.datetime.now(), list_uuid=list_uuid)

    def set_completed(self, uuid: str, completed: bool) -> None:
        AppleScriptStore._run(reminderscript.set_completed_script,
                              uuid,
                              'true' if completed else 'false')

    def update_task(self,
                    uuid: str,
                    title: str | None = None,
                    notes: str | None = None,
                    due_date: datetime.datetime | None = None) -> None:
        AppleScriptStore._run(reminderscript.update_reminder_script,
                              uuid,
                              'false' if title is None else 'true', title or '',
                              'false' if notes is None else 'true', notes or '',
                              'false' if due_date is None else 'true', DateUtil.format(due_date))

    def move_task(self, uuid: str, target_list: TaskList) -> None:
        AppleScriptStore._run(reminderscript.move_reminder_script,
                              uuid,
                              target_list.uuid)

    def delete_task(self, uuid: str) -> None:
        AppleScriptStore._run(reminderscript.delete_reminder_script, uuid)

    def create_list(self, title: str, color: str | None = None) -> TaskList:
        stdout = AppleScriptStore._run(reminderscript.create_reminder_list_script,
                                       title,
                                       color or '')
        return TaskList(stdout, title, color)

    def delete_list(self, uuid: str) -> None:
        AppleScriptStore._run(reminderscript.delete_list_script, uuid)

    def fingerprint(self) -> str:
        stdout = AppleScriptStore._run(reminderscript.fingerprint_script)
        return hashlib.sha1(stdout.encode()).hexdigest()
