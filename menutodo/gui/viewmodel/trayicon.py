"""
Contains the ``MenuTodoTray`` class which handles the system tray icon.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, QPointF
from PyQt6.QtGui import QAction, QColor, QIcon, QPainter, QPen, QPixmap, QPolygonF
from PyQt6.QtWidgets import QMenu, QSystemTrayIcon


def make_tray_icon(dark: bool) -> QIcon:
    """
    Draw the tray icon: a filled circle with a check mark cut out of it.

    :param dark: True if the menu bar is dark, in which case the icon is drawn in white.

    :return: the icon.
    """
    size = 44
    colour = QColor('white') if dark else QColor('black')
    pixmap = QPixmap(size, size)
    pixmap.fill(Qt.GlobalColor.transparent)

    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(colour)
    painter.drawEllipse(2, 2, size - 4, size - 4)
    painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_Clear)
    pen = QPen(Qt.GlobalColor.transparent, 5, Qt.PenStyle.SolidLine, Qt.PenCapStyle.RoundCap, Qt.PenJoinStyle.RoundJoin)
    painter.setPen(pen)
    painter.drawPolyline(QPolygonF([QPointF(12, 23), QPointF(19, 30), QPointF(32, 15)]))
    painter.end()

    icon = QIcon(pixmap)
    icon.setIsMask(True)
    return icon


# noinspection PyUnresolvedReferences
class MenuTodoTray(QSystemTrayIcon):
    """
    Handles the system tray icon. Clicking the icon shows or hides the task window.
    """

    def __init__(self, icon: QIcon, parent, *args, **kwargs):
        """
        Initialises the system tray icon.

        :param icon: the icon to be displayed.
        :param parent: the application controller.
        """

        super().__init__(*args, **kwargs)
        self.setIcon(icon)
        self.parent = parent
        self.setToolTip('Tasks')
        self.activated.connect(self.handle_activated)

        menu = QMenu()
        self.mnu_show = QAction("Show Tasks")
        self.mnu_show.triggered.connect(self.parent.window.toggle)
        menu.addAction(self.mnu_show)
        self.mnu_show_completed = QAction("Show Completed")
        self.mnu_show_completed.setCheckable(True)
        self.mnu_show_completed.setChecked(not self.parent.window.hide_completed)
        self.mnu_show_completed.toggled.connect(lambda checked: self.parent.window.set_hide_completed(not checked))
        menu.addAction(self.mnu_show_completed)
        menu.addSeparator()
        self.mnu_quit = QAction("Quit")
        self.mnu_quit.triggered.connect(self.parent.quit_gracefully)
        menu.addAction(self.mnu_quit)
        self.menu = menu
        self.setContextMenu(menu)
        self.show()

    def handle_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            self.parent.window.toggle()
