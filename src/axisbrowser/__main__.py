# axisbrowser/__main__.py

import argparse
import signal
import sys

if __package__ is None:
    import pathlib

    parent_dir = pathlib.Path(__file__).parent.parent
    if str(parent_dir) not in sys.path:
        sys.path.insert(0, str(parent_dir))
    __package__ = "axisbrowser"

from .settings.config import APP_VERSION
from .utils.logger import enable_debug_mode, get_logger, set_console_log_level
from .utils.translation_utils import _


def setup_signal_handlers():
    """Quit the running application on SIGINT/SIGTERM."""

    def signal_handler(sig, frame):
        print(_("\nReceived signal {}, shutting down gracefully...").format(sig))
        from gi.repository import Gio

        app = Gio.Application.get_default()
        if app:
            app.quit()
        else:
            sys.exit(0)

    try:
        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)
    except (OSError, ValueError) as e:
        print(_("Warning: Could not set up signal handlers: {}").format(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="axisbrowser",
        description=_("Axis Browser - a sidebar browser with pinned tabs, folders and split view"),
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument("--debug", "-d", action="store_true", help=_("Enable debug mode"))
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help=_("Set logging level"),
    )
    parser.add_argument("url", nargs="?", default=None, help=_("Page to open in a new tab"))
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.debug:
        enable_debug_mode()
    elif args.log_level:
        set_console_log_level(args.log_level)

    logger = get_logger("axisbrowser.main")

    try:
        import setproctitle

        setproctitle.setproctitle("axisbrowser")
    except ImportError as e:
        logger.warning(f"Failed to set process title: {e}")

    setup_signal_handlers()

    from .app import AxisBrowserApp

    try:
        logger.info("Creating application instance")
        app = AxisBrowserApp(initial_url=args.url, debug=args.debug)
        return app.run([sys.argv[0]])
    except KeyboardInterrupt:
        logger.info("Application interrupted by user.")
        return 0
    except Exception as e:
        logger.critical(f"A fatal error occurred: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
