from ui.handlers.export_handler import ExportHandler
from ui.handlers.file_handler import FileHandler


class FakeThread:
    """Stands in for a QThread; records whether the caller waited on it."""

    def __init__(self, running=True):
        self.running = running
        self.waited = False

    def isRunning(self):
        return self.running

    def wait(self):
        self.waited = True
        self.running = False
        return True


def test_export_shutdown_waits_for_running_export():
    handler = ExportHandler(main_window=None)
    thread = FakeThread()
    handler._export_thread = thread
    handler.shutdown()
    assert thread.waited
    assert handler._export_thread is None


def test_export_shutdown_without_export():
    handler = ExportHandler(main_window=None)
    handler.shutdown()
    finished = FakeThread(running=False)
    handler._export_thread = finished
    handler.shutdown()
    assert not finished.waited


def test_file_shutdown_waits_for_reads_in_flight():
    handler = FileHandler(main_window=None)
    reading, done = FakeThread(), FakeThread(running=False)
    handler._threads.update({reading, done})
    handler.shutdown()
    assert reading.waited
    assert not done.waited
    assert not handler._threads
