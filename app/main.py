import os
import faulthandler
import sys
import threading
import traceback
from PyQt6.QtWidgets import QApplication
from ui.main_window import MainWindow

_FAULT_LOG_HANDLE = None


def _install_exception_logging() -> None:
    log_path = os.path.join(os.path.dirname(__file__), "exception.log")
    def _hook(exc_type, exc_value, exc_tb):
        try:
            with open(log_path, "a", encoding="utf-8") as handle:
                handle.write("\n=== Unhandled Exception ===\n")
                traceback.print_exception(exc_type, exc_value, exc_tb, file=handle)
        except Exception:
            pass
        traceback.print_exception(exc_type, exc_value, exc_tb, file=sys.stderr)
    sys.excepthook = _hook
    def _thread_hook(args):
        _hook(args.exc_type, args.exc_value, args.exc_traceback)
    threading.excepthook = _thread_hook


def _enable_faulthandler() -> None:
    global _FAULT_LOG_HANDLE
    try:
        log_path = os.path.join(os.path.dirname(__file__), "faulthandler.log")
        # Overwritten each run; the handle stays open because faulthandler writes on crash.
        _FAULT_LOG_HANDLE = open(log_path, "w", encoding="utf-8")
        _FAULT_LOG_HANDLE.write(f"pid={os.getpid()}\n")
        _FAULT_LOG_HANDLE.flush()
        faulthandler.enable(_FAULT_LOG_HANDLE, all_threads=True)
    except Exception:
        faulthandler.enable(all_threads=True)


def main():
    _enable_faulthandler()
    _install_exception_logging()
    app = QApplication(sys.argv)
    app.setApplicationName('Interactive Chart')
    window = MainWindow()
    window.show()
    return app.exec()


if __name__ == '__main__':
    sys.exit(main())
