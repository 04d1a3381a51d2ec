# axisbrowser/app.py

from typing import Optional

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")
gi.require_version("Gdk", "4.0")

from gi.repository import Adw, Gdk, Gio, GLib, Gtk

from .core.scheduler import GLibScheduler
from .history.store import BrowsingHistory
from .notes.store import NotesStore
from .settings.config import APP_ID, APP_TITLE, APP_VERSION, get_config_paths
from .settings.manager import SettingsManager
from .shell import BrowserShell, build_shell
from .utils.exceptions import handle_exception
from .utils.logger import enable_debug_mode, get_logger, log_app_shutdown, log_app_start
from .views.webkit import WebKitViewFactory


class AxisBrowserApp(Adw.Application):
    """Main application class for Axis Browser."""

    def __init__(self, initial_url: Optional[str] = None, debug: bool = False):
        super().__init__(application_id=APP_ID, flags=Gio.ApplicationFlags.NON_UNIQUE)
        GLib.set_prgname(APP_ID)
        self.logger = get_logger("axisbrowser.app")
        self.logger.info(f"Initializing {APP_TITLE} v{APP_VERSION}")

        self.initial_url = initial_url
        self.debug = debug
        self.settings_manager: Optional[SettingsManager] = None
        self.shell: Optional[BrowserShell] = None
        self.scheduler: Optional[GLibScheduler] = None
        self._window: Optional[Adw.ApplicationWindow] = None
        self._view_box: Optional[Gtk.Box] = None

        self.connect("startup", self._on_startup)
        self.connect("activate", self._on_activate)
        self.connect("shutdown", self._on_shutdown)

    def _initialize_subsystems(self) -> bool:
        try:
            self.logger.info("Initializing application subsystems")
            get_config_paths().ensure_directories()
            self.settings_manager = SettingsManager()
            self.settings_manager.apply_log_settings()
            if self.debug:
                enable_debug_mode()
                self.logger.info("Debug mode enabled")

            self._view_box = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, homogeneous=True)
            self.scheduler = GLibScheduler()
            self.shell = build_shell(
                settings=self.settings_manager,
                view_factory=WebKitViewFactory(container=self._view_box),
                scheduler=self.scheduler,
                browsing_history=BrowsingHistory(),
                notes=NotesStore(),
                clipboard=self._copy_to_clipboard,
            )
            return True
        except Exception as e:
            self.logger.critical(f"Subsystem initialization failed: {e}")
            handle_exception(e, "application initialization", "axisbrowser.app")
            return False

    def _on_startup(self, app) -> None:
        self.logger.info("Application startup initiated")
        log_app_start()
        if not self._initialize_subsystems():
            self.logger.critical("Failed to initialize application subsystems")
            self.quit()
            return
        self._setup_actions()
        self.logger.info("Application startup completed successfully")

    def _setup_actions(self) -> None:
        """Register one app action per shell command and bind its accelerators."""
        for action_name, accels in self.shell.accelerators().items():
            action = Gio.SimpleAction.new(action_name, None)
            action.connect("activate", lambda _action, _param, name=action_name: self.shell.handle_shortcut(name))
            self.add_action(action)
            self.set_accels_for_action(f"app.{action_name}", accels)

    def _on_activate(self, app) -> None:
        if self._window is None:
            self._window = Adw.ApplicationWindow(application=self, title=APP_TITLE)
            self._window.set_default_size(1200, 800)
            self._window.set_content(self._view_box)
        if self.initial_url:
            self.shell.new_tab(self.initial_url)
            self.initial_url = None
        elif self.shell.active_tab_id is None:
            self.shell.new_tab(self.settings_manager.get("home_url"))
        self._window.present()

    def _copy_to_clipboard(self, text: str) -> None:
        display = Gdk.Display.get_default()
        if display is not None:
            display.get_clipboard().set(text)

    def _on_shutdown(self, app) -> None:
        self.logger.info("Application shutdown initiated")
        try:
            if self.shell is not None and self.shell.persistence is not None:
                self.shell.persistence.save()
            if self.scheduler is not None:
                self.scheduler.cancel_all()
        finally:
            log_app_shutdown()
