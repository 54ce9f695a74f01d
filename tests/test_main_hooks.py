import os
import sys
import threading
import unittest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Allow `import chartcore.*` like the app does when running `python app/main.py`.
REPO_ROOT = os.path.dirname(os.path.dirname(__file__))
APP_DIR = os.path.join(REPO_ROOT, "app")
if APP_DIR not in sys.path:
    sys.path.insert(0, APP_DIR)

import main


class ExceptionHookTests(unittest.TestCase):
    def setUp(self) -> None:
        saved = (sys.excepthook, threading.excepthook)

        def _restore():
            sys.excepthook, threading.excepthook = saved

        self.addCleanup(_restore)

    def test_installs_process_and_thread_hooks(self):
        main._install_exception_logging()
        self.assertIsNot(sys.excepthook, sys.__excepthook__)
        self.assertIsNot(threading.excepthook, threading.__excepthook__)


if __name__ == "__main__":
    unittest.main()
