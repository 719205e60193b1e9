"""
Main application entry point. Creates the system tray icon and the task window.
"""
import sys

from PyQt6.QtWidgets import QApplication
import darkdetect

from menutodo.gui.viewmodel import trayicon
from menutodo.gui.viewmodel.menutodoapp import MenuTodoApp


def main() -> int:
    app = QApplication(sys.argv)
    app.setQuitOnLastWindowClosed(False)
    mt = MenuTodoApp()
    icon = trayicon.make_tray_icon(darkdetect.isDark() is True)
    tray_icon = trayicon.MenuTodoTray(icon, mt)
    mt.tray_icon = tray_icon
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
