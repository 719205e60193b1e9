"""
Contains helpers which decide what the task window shows: the ``Section`` class and ``build_sections``, which apply the
*hide completed* preference, ``relative_date`` for task dates, and the ``TaskSelection`` class, which handles keyboard
navigation.
"""

from __future__ import annotations

import datetime
from typing import List

from menutodo.gui.viewmodel.taskstore import TaskStore
from menutodo.reminders.model.task import Task
from menutodo.reminders.model.tasklist import TaskList


class Section:
    """
    A block of tasks in the task window: either *Today*, or a single list.
    """

    def __init__(self, title: str, tasks: List[Task], total: int, task_list: TaskList | None = None):
        """
        :param title: heading of the section.
        :param tasks: the tasks to display.
        :param total: the number of tasks before completed tasks were hidden.
        :param task_list: the list this section shows, or None for *Today*.
        """
        self.title: str = title
        self.tasks: List[Task] = tasks
        self.total: int = total
        self.task_list: TaskList | None = task_list

    @property
    def is_today(self) -> bool:
        return self.task_list is None

    @property
    def all_hidden(self) -> bool:
        """
        True if the list has tasks, but all of them are hidden because they are completed.
        """
        return self.total > 0 and len(self.tasks) == 0


def visible(tasks: List[Task], hide_completed: bool) -> List[Task]:
    return [t for t in tasks if not (hide_completed and t.completed)]


def relative_date(date: datetime.datetime, today: datetime.date | None = None) -> str:
    """
    Format a task date for display, using *Today*, *Yesterday* and *Tomorrow* where possible.
    """
    today = today or datetime.date.today()
    delta = (date.date() - today).days
    if delta == 0:
        return 'Today'
    if delta == -1:
        return 'Yesterday'
    if delta == 1:
        return 'Tomorrow'
    return date.strftime('%d %b %Y')


def build_sections(store: TaskStore, hide_completed: bool, today: datetime.date | None = None) -> List[Section]:
    """
    Build the sections to display. *Today* comes first and is only included if it has tasks to show. Every list gets a
    section if it is empty, or if any of its tasks are visible. A list whose tasks are all hidden is left out.

    :param store: the view model.
    :param hide_completed: if True, completed tasks are left out of every section.
    :param today: the current day, defaults to today.

    :return: the sections in display order.
    """
    sections = []
    today_tasks = visible(store.today_tasks(today), hide_completed)
    if len(today_tasks) > 0:
        sections.append(Section('Today', today_tasks, len(today_tasks)))
    for task_list, tasks in store.grouped_by_list():
        section = Section(task_list.title, visible(tasks, hide_completed), len(tasks), task_list)
        if not section.all_hidden:
            sections.append(section)
    return sections


class TaskSelection:
    """
    Tracks the task selected with the keyboard. Navigation runs over the visible tasks of every list, in display order;
    the *Today* section is not part of it.
    """

    def __init__(self, store: TaskStore):
        self.store: TaskStore = store
        self.selected_uuid: str | None = None

    def navigable(self, hide_completed: bool) -> List[Task]:
        return [t for _, tasks in self.store.grouped_by_list() for t in visible(tasks, hide_completed)]

    def move(self, direction: int, hide_completed: bool) -> str | None:
        """
        Move the selection up (negative ``direction``) or down. Stops at either end. If nothing is selected, or the
        selected task has gone, the first task is selected.

        :return: the ID of the selected task, or None if there are no tasks.
        """
        tasks = self.navigable(hide_completed)
        if len(tasks) == 0:
            self.selected_uuid = None
            return None

        index = next((i for i, t in enumerate(tasks) if t.uuid == self.selected_uuid), None)
        if index is None:
            self.selected_uuid = tasks[0].uuid
        else:
            self.selected_uuid = tasks[max(0, min(len(tasks) - 1, index + direction))].uuid
        return self.selected_uuid

    def select(self, uuid: str | None) -> None:
        self.selected_uuid = uuid

    def clear(self) -> None:
        self.selected_uuid = None

    def toggle_selected(self) -> bool:
        """
        Toggle completion of the selected task.

        :return: True if a task was selected and a toggle was requested.
        """
        if self.selected_uuid is None:
            return False
        task = self.store.find_task(self.selected_uuid)
        if task is None:
            return False
        self.store.toggle_completion(task)
        return True
