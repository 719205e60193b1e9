"""
Contains the ``TaskWindow`` class - the small window opened from the tray icon - and the widgets and dialogs it uses.
"""

from __future__ import annotations

import time
from typing import Callable, List

from PyQt6.QtCore import Qt, QDateTime, QUrl
from PyQt6.QtGui import QBrush, QColor, QDesktopServices, QDropEvent, QFont, QKeyEvent, QKeySequence, QShortcut
from PyQt6.QtWidgets import (QAbstractItemView, QCheckBox, QColorDialog, QComboBox, QDateTimeEdit, QDialog,
                             QDialogButtonBox, QFormLayout, QHBoxLayout, QInputDialog, QLabel, QLineEdit, QMenu,
                             QMessageBox, QPlainTextEdit, QPushButton, QStackedWidget, QToolButton, QTreeWidget,
                             QTreeWidgetItem, QVBoxLayout, QWidget)

from menutodo.gui.viewmodel.selection import Section, TaskSelection, build_sections, relative_date
from menutodo.gui.viewmodel.taskstore import TaskStore
from menutodo.reminders.model.task import Task

#: System Settings pane where the user allows MenuTodo to control Reminders.
AUTOMATION_SETTINGS_URL = "x-apple.systempreferences:com.apple.preference.security?Privacy_Automation"

TASK_ROLE = Qt.ItemDataRole.UserRole
LIST_ROLE = Qt.ItemDataRole.UserRole + 1

#: Seconds during which a repeated toggle request is ignored.
TOGGLE_DEBOUNCE = 0.3


class EditTaskDialog(QDialog):
    """
    Dialog for editing the title, notes and due date of a task.
    """

    def __init__(self, task: Task, parent: QWidget | None = None):
        super().__init__(parent)
        self.task: Task = task
        self.setWindowTitle('Edit Task')

        self.txt_title = QLineEdit(task.title)
        self.txt_notes = QPlainTextEdit(task.notes or '')
        self.cb_due = QCheckBox('Due date')
        self.cb_due.setChecked(task.due_date is not None)
        self.dt_due = QDateTimeEdit(QDateTime(task.due_date or task.date))
        self.dt_due.setCalendarPopup(True)
        self.dt_due.setEnabled(task.due_date is not None)
        self.cb_due.toggled.connect(self.dt_due.setEnabled)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)

        layout = QFormLayout(self)
        layout.addRow('Title', self.txt_title)
        layout.addRow('Notes', self.txt_notes)
        layout.addRow(self.cb_due, self.dt_due)
        layout.addRow(buttons)

    def changes(self) -> dict:
        """
        The fields the user changed, as keyword arguments for ``TaskStore.update_task``.
        """
        changes = {}
        title = self.txt_title.text().strip()
        if title != self.task.title:
            changes['title'] = title
        notes = self.txt_notes.toPlainText()
        if notes != (self.task.notes or ''):
            changes['notes'] = notes
        if self.cb_due.isChecked():
            due_date = self.dt_due.dateTime().toPyDateTime().replace(second=0, microsecond=0)
            if self.task.due_date is None or due_date != self.task.due_date.replace(second=0, microsecond=0):
                changes['due_date'] = due_date
        return changes


class TaskTree(QTreeWidget):
    """
    Tree showing one top-level item per section, with tasks beneath. Tasks can be dragged onto another list.
    """

    def __init__(self, on_move: Callable[[str, str], None], parent: QWidget | None = None):
        """
        :param on_move: called with the task ID and the target list ID when a task is dropped on a list.
        """
        super().__init__(parent)
        self.on_move = on_move
        self.setColumnCount(2)
        self.setHeaderHidden(True)
        self.setRootIsDecorated(False)
        self.setIndentation(8)
        self.setDragEnabled(True)
        self.setAcceptDrops(True)
        self.setDropIndicatorShown(True)
        self.setDragDropMode(QAbstractItemView.DragDropMode.InternalMove)
        self.key_handler: Callable[[QKeyEvent], bool] | None = None

    def dropEvent(self, event: QDropEvent) -> None:
        # The tree is rebuilt from the refreshed snapshot, so Qt must not move the item itself.
        event.ignore()
        source = self.currentItem()
        target = self.itemAt(event.position().toPoint())
        if source is None or target is None:
            return
        task_uuid = source.data(0, TASK_ROLE)
        list_uuid = target.data(0, LIST_ROLE)
        if task_uuid is None or list_uuid is None:
            return
        self.on_move(task_uuid, list_uuid)

    def keyPressEvent(self, event: QKeyEvent) -> None:
        if self.key_handler is not None and self.key_handler(event):
            event.accept()
            return
        super().keyPressEvent(event)


# noinspection PyUnresolvedReferences
class TaskWindow(QWidget):
    """
    The task window. Shows the *Today* section and every list, and lets the user add, edit, complete, move and delete
    tasks and lists.
    """

    def __init__(self, store: TaskStore, hide_completed: bool, on_hide_completed: Callable[[bool], None],
                 on_quit: Callable[[], None]):
        """
        :param store: the view model.
        :param hide_completed: initial value of the *hide completed* preference.
        :param on_hide_completed: called when the user changes the *hide completed* preference.
        :param on_quit: called when the user chooses to quit.
        """
        super().__init__(None, Qt.WindowType.Tool | Qt.WindowType.WindowStaysOnTopHint)
        self.store: TaskStore = store
        self.selection: TaskSelection = TaskSelection(store)
        self.hide_completed: bool = hide_completed
        self.on_hide_completed = on_hide_completed
        self.target_list_uuid: str | None = None
        self._populating: bool = False
        self._last_toggle: float | None = None

        self.setWindowTitle('Tasks')
        self.resize(320, 500)
        self.bootstrap_ui(on_quit)

        self.store.snapshot_changed.connect(self.display_tasks)
        self.store.access_changed.connect(self.display_access)
        self.toggle_shortcut = QShortcut(QKeySequence('Ctrl+Shift+T'), self)
        self.toggle_shortcut.setContext(Qt.ShortcutContext.ApplicationShortcut)
        self.toggle_shortcut.activated.connect(self.toggle)

    def bootstrap_ui(self, on_quit: Callable[[], None]) -> None:
        """
        Build the window's widgets.
        """
        lbl_title = QLabel('Tasks')
        font = QFont()
        font.setPointSize(16)
        font.setBold(True)
        lbl_title.setFont(font)

        btn_new_list = QToolButton()
        btn_new_list.setText('+')
        btn_new_list.setToolTip('Create New List')
        btn_new_list.clicked.connect(self.create_list)

        settings_menu = QMenu(self)
        self.act_show_completed = settings_menu.addAction('Show Completed')
        self.act_show_completed.setCheckable(True)
        self.act_show_completed.setChecked(not self.hide_completed)
        self.act_show_completed.toggled.connect(lambda checked: self.set_hide_completed(not checked))
        settings_menu.addSeparator()
        settings_menu.addAction('Quit').triggered.connect(on_quit)
        btn_settings = QToolButton()
        btn_settings.setText('⚙')
        btn_settings.setToolTip('Settings')
        btn_settings.setMenu(settings_menu)
        btn_settings.setPopupMode(QToolButton.ToolButtonPopupMode.InstantPopup)

        header = QHBoxLayout()
        header.addWidget(lbl_title)
        header.addStretch()
        header.addWidget(btn_new_list)
        header.addWidget(btn_settings)

        # Access denied page
        denied = QWidget()
        denied_layout = QVBoxLayout(denied)
        denied_layout.addStretch()
        lbl_denied = QLabel('Access Denied\n\nPlease allow access to Reminders in System Settings.')
        lbl_denied.setAlignment(Qt.AlignmentFlag.AlignCenter)
        lbl_denied.setWordWrap(True)
        denied_layout.addWidget(lbl_denied)
        btn_settings_app = QPushButton('Open System Settings')
        btn_settings_app.clicked.connect(lambda: QDesktopServices.openUrl(QUrl(AUTOMATION_SETTINGS_URL)))
        denied_layout.addWidget(btn_settings_app)
        denied_layout.addStretch()

        # Task page
        self.tree = TaskTree(self.store.move_task)
        self.tree.key_handler = self.handle_key
        self.tree.itemChanged.connect(self.handle_item_changed)
        self.tree.itemDoubleClicked.connect(self.edit_task)
        self.tree.currentItemChanged.connect(self.handle_current_changed)
        self.tree.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.tree.customContextMenuRequested.connect(self.show_context_menu)
        self.lbl_empty = QLabel('No tasks yet\nAdd a task to get started')
        self.lbl_empty.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self.cmb_target = QComboBox()
        self.cmb_target.currentIndexChanged.connect(self.handle_target_changed)
        self.txt_new_task = QLineEdit()
        self.txt_new_task.setPlaceholderText('Add a task…')
        self.txt_new_task.returnPressed.connect(self.add_task)
        footer = QHBoxLayout()
        footer.addWidget(self.txt_new_task)
        footer.addWidget(self.cmb_target)

        tasks_page = QWidget()
        tasks_layout = QVBoxLayout(tasks_page)
        tasks_layout.setContentsMargins(0, 0, 0, 0)
        tasks_layout.addWidget(self.tree)
        tasks_layout.addWidget(self.lbl_empty)
        tasks_layout.addLayout(footer)

        self.stack = QStackedWidget()
        self.stack.addWidget(denied)
        self.stack.addWidget(tasks_page)

        layout = QVBoxLayout(self)
        layout.addLayout(header)
        layout.addWidget(self.stack)

    # DISPLAY ----------------------------------------------------------------------------------------------------------

    def toggle(self) -> None:
        """
        Show or hide the window. A second request within :py:data:`TOGGLE_DEBOUNCE` seconds is ignored, as the global
        hotkey and the in-app shortcut both fire while MenuTodo is active.
        """
        now = time.monotonic()
        if self._last_toggle is not None and now - self._last_toggle < TOGGLE_DEBOUNCE:
            return
        self._last_toggle = now
        if self.isVisible():
            self.hide()
        else:
            self.show()
            self.raise_()
            self.activateWindow()

    def display_access(self, granted: bool) -> None:
        self.stack.setCurrentIndex(1 if granted else 0)

    def set_hide_completed(self, hide_completed: bool) -> None:
        self.hide_completed = hide_completed
        self.on_hide_completed(hide_completed)
        self.display_tasks()

    def display_tasks(self) -> None:
        """
        Rebuild the tree and the target list picker from the current snapshot.
        """
        self._populating = True
        self.tree.clear()
        sections = build_sections(self.store, self.hide_completed)
        for section in sections:
            self.tree.addTopLevelItem(self._section_item(section))
        self.tree.expandAll()
        self.tree.resizeColumnToContents(1)

        has_tasks = len(self.store.tasks) > 0
        self.tree.setVisible(has_tasks or len(self.store.lists) > 0)
        self.lbl_empty.setVisible(not has_tasks)

        self.cmb_target.blockSignals(True)
        self.cmb_target.clear()
        self.cmb_target.addItem('Default List', None)
        for task_list in self.store.lists:
            self.cmb_target.addItem(task_list.title, task_list.uuid)
        index = self.cmb_target.findData(self.target_list_uuid)
        self.cmb_target.setCurrentIndex(index if index >= 0 else 0)
        self.target_list_uuid = self.cmb_target.currentData()
        self.cmb_target.blockSignals(False)

        self._restore_selection()
        self._populating = False

    def _section_item(self, section: Section) -> QTreeWidgetItem:
        item = QTreeWidgetItem([section.title.upper(), ''])
        font = item.font(0)
        font.setBold(True)
        item.setFont(0, font)
        item.setFlags(Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsDropEnabled)
        if section.task_list is not None:
            item.setData(0, LIST_ROLE, section.task_list.uuid)
            if section.task_list.color:
                item.setForeground(0, QBrush(QColor(section.task_list.color)))
        else:
            item.setForeground(0, QBrush(QColor('#0a84ff')))

        for task in section.tasks:
            item.addChild(self._task_item(task, section))
        if len(section.tasks) == 0:
            placeholder = QTreeWidgetItem(['No tasks', ''])
            placeholder.setFlags(Qt.ItemFlag.ItemIsDropEnabled)
            if section.task_list is not None:
                placeholder.setData(0, LIST_ROLE, section.task_list.uuid)
            item.addChild(placeholder)
        return item

    def _task_item(self, task: Task, section: Section) -> QTreeWidgetItem:
        item = QTreeWidgetItem([task.title, relative_date(task.date)])
        flags = (Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable | Qt.ItemFlag.ItemIsUserCheckable |
                 Qt.ItemFlag.ItemIsDragEnabled)
        if section.task_list is not None:
            flags |= Qt.ItemFlag.ItemIsDropEnabled
            item.setData(0, LIST_ROLE, section.task_list.uuid)
        item.setFlags(flags)
        item.setData(0, TASK_ROLE, task.uuid)
        item.setCheckState(0, Qt.CheckState.Checked if task.completed else Qt.CheckState.Unchecked)
        if task.notes:
            item.setToolTip(0, task.notes)
        if task.completed:
            font = item.font(0)
            font.setStrikeOut(True)
            item.setFont(0, font)
        return item

    def _task_items(self) -> List[QTreeWidgetItem]:
        items = []
        for i in range(self.tree.topLevelItemCount()):
            section = self.tree.topLevelItem(i)
            # Skip Today so the selection lands on the task in its list.
            if section.data(0, LIST_ROLE) is None:
                continue
            for j in range(section.childCount()):
                if section.child(j).data(0, TASK_ROLE) is not None:
                    items.append(section.child(j))
        return items

    def _restore_selection(self) -> None:
        uuid = self.selection.selected_uuid
        item = next((i for i in self._task_items() if i.data(0, TASK_ROLE) == uuid), None)
        if item is not None:
            self.tree.setCurrentItem(item)
            self.tree.scrollToItem(item)
        else:
            self.tree.setCurrentItem(None)

    # HANDLERS ---------------------------------------------------------------------------------------------------------

    def handle_key(self, event: QKeyEvent) -> bool:
        """
        Keyboard navigation: Up/Down move the selection, Space toggles the selected task and Delete removes it.

        :return: True if the key was handled.
        """
        key = event.key()
        if key in (Qt.Key.Key_Up, Qt.Key.Key_Down):
            self.selection.move(-1 if key == Qt.Key.Key_Up else 1, self.hide_completed)
            self._restore_selection()
            return True
        if key == Qt.Key.Key_Space:
            return self.selection.toggle_selected()
        if key in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace) and self.selection.selected_uuid is not None:
            self.store.delete_task(self.selection.selected_uuid)
            self.selection.clear()
            return True
        return False

    def handle_current_changed(self, current: QTreeWidgetItem | None, previous: QTreeWidgetItem | None) -> None:
        if self._populating:
            return
        self.selection.select(current.data(0, TASK_ROLE) if current is not None else None)

    def handle_item_changed(self, item: QTreeWidgetItem, column: int) -> None:
        if self._populating or column != 0:
            return
        task = self.store.find_task(item.data(0, TASK_ROLE))
        if task is None:
            return
        if (item.checkState(0) == Qt.CheckState.Checked) != task.completed:
            self.store.toggle_completion(task)

    def handle_target_changed(self, index: int) -> None:
        self.target_list_uuid = self.cmb_target.itemData(index)

    def add_task(self) -> None:
        title = self.txt_new_task.text().strip()
        if title == '':
            return
        self.store.add_task(title, self.store.find_list(self.target_list_uuid) if self.target_list_uuid else None)
        self.txt_new_task.clear()

    def edit_task(self, item: QTreeWidgetItem, column: int) -> None:
        task = self.store.find_task(item.data(0, TASK_ROLE))
        if task is None:
            return
        dialog = EditTaskDialog(task, self)
        if dialog.exec() == QDialog.DialogCode.Accepted:
            changes = dialog.changes()
            if len(changes) > 0:
                self.store.update_task(task.uuid, **changes)

    def create_list(self) -> None:
        title, ok = QInputDialog.getText(self, 'New List', 'List Name')
        if not ok or title.strip() == '':
            return
        color = QColorDialog.getColor(QColor('#0a84ff'), self, 'List Color')
        self.store.add_list(title, color.name() if color.isValid() else None)

    def show_context_menu(self, pos) -> None:
        item = self.tree.itemAt(pos)
        if item is None:
            return
        menu = QMenu(self)
        task_uuid = item.data(0, TASK_ROLE)
        list_uuid = item.data(0, LIST_ROLE)
        if task_uuid is not None:
            menu.addAction('Edit…').triggered.connect(lambda: self.edit_task(item, 0))
            menu.addAction('Delete Task').triggered.connect(lambda: self.store.delete_task(task_uuid))
        elif list_uuid is not None:
            menu.addAction('Add Task Here').triggered.connect(lambda: self.target_list(list_uuid))
            menu.addAction('Delete List').triggered.connect(lambda: self.delete_list(list_uuid))
        else:
            return
        menu.exec(self.tree.viewport().mapToGlobal(pos))

    def target_list(self, list_uuid: str) -> None:
        index = self.cmb_target.findData(list_uuid)
        if index >= 0:
            self.cmb_target.setCurrentIndex(index)
        self.txt_new_task.setFocus()

    def delete_list(self, list_uuid: str) -> None:
        task_list = self.store.find_list(list_uuid)
        if task_list is None:
            return
        action = QMessageBox.question(
            self, 'Delete List',
            "Are you sure you want to delete '{}'? This will also delete all tasks in it.".format(task_list.title))
        if action == QMessageBox.StandardButton.Yes:
            self.store.delete_list(list_uuid)
