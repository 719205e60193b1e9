"""
Contains the ``TaskList`` class, which represents a list in the Reminders app.
"""

from __future__ import annotations

import re
from typing import List

COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


class TaskList:
    """
    Represents a reminder list.
    """

    def __init__(self, uuid: str, title: str, color: str | None = None):
        """
        Create a new task list.

        :param uuid: the identifier Reminders assigned to this list.
        :param title: the name of the list.
        :param color: the list colour as ``#RRGGBB``, if known.
        """
        self.uuid: str = uuid
        self.title: str = title
        self.color: str | None = color

    @staticmethod
    def create_from_local(values: List[str]) -> TaskList:
        """
        Creates a TaskList from the values returned by ``get_reminder_lists_script``: the list ID, its name and its
        colour. Colours which are missing or not in ``#RRGGBB`` form are dropped.

        :param values: the list of values as described above.

        :return: a TaskList instance.
        """
        color = values[2].strip() if len(values) > 2 else ''
        return TaskList(
            uuid=values[0].strip(),
            title=values[1],
            color=color if COLOR_PATTERN.match(color) else None
        )

    def __eq__(self, other):
        if not isinstance(other, TaskList):
            return NotImplemented
        return self.__dict__ == other.__dict__

    def __str__(self):
        return self.title

    def __repr__(self):
        return self.title
