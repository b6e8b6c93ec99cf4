import atexit
import signal

import pytest

from shortlink.services.binding import JSONDocumentStore, ShutdownHook, WriteError


class RecordingBinding:
    def __init__(self, fail=False):
        self.fail = fail
        self.flushes = 0

    def flush_sync(self):
        self.flushes += 1
        if self.fail:
            raise WriteError("disk full")


def test_flush_reports_outcome():
    assert ShutdownHook(RecordingBinding()).exit_code() == 0
    assert ShutdownHook(RecordingBinding(fail=True)).exit_code() == 1


@pytest.mark.parametrize("fail, expected", [(False, 0), (True, 1)])
def test_signal_flushes_then_exits(fail, expected, monkeypatch):
    unregistered = []
    monkeypatch.setattr(atexit, "unregister", unregistered.append)
    binding = RecordingBinding(fail=fail)
    hook = ShutdownHook(binding)

    with pytest.raises(SystemExit) as exc_info:
        hook._handle_signal(signal.SIGTERM, None)

    assert exc_info.value.code == expected
    assert binding.flushes == 1
    assert unregistered == [hook.flush]


def test_install_and_uninstall_restore_handlers(monkeypatch):
    registered = []
    monkeypatch.setattr(atexit, "register", registered.append)
    monkeypatch.setattr(atexit, "unregister", registered.remove)

    previous = signal.getsignal(signal.SIGTERM)
    hook = ShutdownHook(RecordingBinding())
    assert hook.install() is hook
    assert signal.getsignal(signal.SIGTERM) == hook._handle_signal
    assert registered == [hook.flush]

    hook.uninstall()
    assert signal.getsignal(signal.SIGTERM) == previous
    assert registered == []


@pytest.mark.asyncio
async def test_flush_writes_json_mirror(json_path):
    store = JSONDocumentStore(json_path, watch=False)
    await store.initialize()
    try:
        store.data["a"] = 1
        assert ShutdownHook(store).flush()
        assert json_path.read_text(encoding="utf-8") == '{"a": 1}'
    finally:
        await store.close()


def test_install_limited_to_some_signals(monkeypatch):
    monkeypatch.setattr(atexit, "register", lambda func: None)
    monkeypatch.setattr(atexit, "unregister", lambda func: None)

    previous_term = signal.getsignal(signal.SIGTERM)
    previous_hup = signal.getsignal(signal.SIGHUP)
    hook = ShutdownHook(RecordingBinding()).install(signals=["SIGHUP", "SIGNOTREAL"])
    try:
        assert signal.getsignal(signal.SIGHUP) == hook._handle_signal
        assert signal.getsignal(signal.SIGTERM) == previous_term
    finally:
        hook.uninstall()
    assert signal.getsignal(signal.SIGHUP) == previous_hup
