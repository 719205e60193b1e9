"""
Contains the ``Task`` class, which represents a single reminder.
"""

from __future__ import annotations

import datetime
from typing import List

from menutodo.helpers import DateUtil


class Task:
    """
    Represents a to-do item backed by a reminder in the Reminders app.
    """

    def __init__(self,
                 uuid: str,
                 title: str,
                 date: datetime.datetime,
                 list_uuid: str,
                 completed: bool = False,
                 priority: int = 0,
                 notes: str | None = None,
                 due_date: datetime.datetime | None = None,
                 ):
        """
        Create a new task.

        :param uuid: the identifier Reminders assigned to this reminder.
        :param title: the title of this task.
        :param date: the effective date of this task, used for sorting and for the *Today* section.
        :param list_uuid: the identifier of the list containing this task.
        :param completed: True if this task has been completed.
        :param priority: the priority of this task, as reported by Reminders.
        :param notes: the body of the reminder.
        :param due_date: the explicit due date, if one is set.
        """
        self.uuid: str = uuid
        self.title: str = title
        self.date: datetime.datetime = date
        self.list_uuid: str = list_uuid
        self.completed: bool = completed
        self.priority: int = priority
        self.notes: str | None = notes
        self.due_date: datetime.datetime | None = due_date

    @staticmethod
    def create_from_local(values: List[str], fetched_at: datetime.datetime) -> Task:
        """
        Creates a Task instance from the values returned by ``get_reminders_script``.

        The ``values`` list must be as follows (all strings):

        0. Reminder ID.
        1. Reminder name.
        2. 'true' if the reminder is completed.
        3. Reminder due date, or ``missing value``.
        4. Reminder creation date, or ``missing value``.
        5. Reminder priority.
        6. Body of the reminder, or ``missing value``.
        7. ID of the list containing the reminder.

        The effective date is the due date, falling back to the creation date, falling back to ``fetched_at``.

        :param values: the list of values as described above.
        :param fetched_at: when the reminders were fetched.

        :return: a Task instance representing the content of the values given.
        """
        due_date = DateUtil.parse(values[3])
        created_date = DateUtil.parse(values[4])
        body = values[6].strip()
        try:
            priority = int(values[5].strip())
        except ValueError:
            priority = 0

        return Task(
            uuid=values[0].strip(),
            title=values[1],
            date=due_date or created_date or fetched_at,
            list_uuid=values[7].strip(),
            completed=values[2].strip() == 'true',
            priority=priority,
            notes=None if body in ('', DateUtil.MISSING) else body,
            due_date=due_date
        )

    def __eq__(self, other):
        if not isinstance(other, Task):
            return NotImplemented
        return self.__dict__ == other.__dict__

    def __str__(self):
        return self.title

    def __repr__(self):
        return self.title
