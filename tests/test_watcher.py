import signal

import pytest
from rich.console import Console

from client import ClientConfig
from worker import watcher


@pytest.fixture()
def log_watcher(monkeypatch):
    monkeypatch.setattr(watcher, "console", Console(record=True, width=120))
    previous = {s: signal.getsignal(s) for s in (signal.SIGINT, signal.SIGTERM)}
    w = watcher.LogWatcher(ClientConfig(base_url="http://testserver"))
    yield w
    w.gateway.close()
    for s, handler in previous.items():
        signal.signal(s, handler)


def test_prints_only_new_log_lines(log_watcher):
    log_watcher._print_logs({"success": True, "logs": ["one", "two"]})
    log_watcher._print_logs({"success": True, "logs": ["one", "two", "three"], "diffReport": ["+ a"]})

    output = watcher.console.export_text()
    assert output.count("one") == 1
    assert output.count("two") == 1
    assert "three" in output
    assert "Diff Report: 1" in output


def test_signal_requests_stop(log_watcher):
    log_watcher._signal_handler(signal.SIGTERM, None)
    assert log_watcher.should_stop
