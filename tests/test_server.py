import signal

import pytest
from fastapi.testclient import TestClient

from webhook_receiver import create_app, server
from webhook_receiver.config import Settings


@pytest.fixture
def restore_signals():
    saved = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}
    yield
    for sig, handler in saved.items():
        signal.signal(sig, handler)


def test_build_server_uses_settings():
    srv = server.build_server(Settings(host="127.0.0.1", port=3999, shutdown_timeout=3))
    assert srv.config.host == "127.0.0.1"
    assert srv.config.port == 3999
    assert srv.config.timeout_graceful_shutdown == 3


def test_lifespan_logs_startup_and_shutdown(caplog):
    with caplog.at_level("INFO", logger="webhook_receiver"):
        with TestClient(create_app(Settings())) as client:
            assert client.get("/health").status_code == 200
    assert "ready" in caplog.text
    assert "Shutting down" in caplog.text


class _SignalledServer:
    def __init__(self, sig):
        self.sig = sig

    def run(self):
        signal.raise_signal(self.sig)


@pytest.mark.parametrize("sig", [signal.SIGTERM, signal.SIGINT])
def test_main_exits_cleanly_on_signal(monkeypatch, restore_signals, caplog, sig):
    for name in ("HOST", "PORT", "MAX_BODY_BYTES", "BODY_READ_TIMEOUT", "SHUTDOWN_TIMEOUT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(server, "build_server", lambda settings: _SignalledServer(sig))
    with caplog.at_level("INFO", logger="webhook_receiver"):
        with pytest.raises(SystemExit) as exc:
            server.main()
    assert exc.value.code == 0
    assert "server closed" in caplog.text
    assert "Webhook receiver running on http://0.0.0.0:3000" in caplog.text


def test_main_rejects_bad_config(monkeypatch, caplog):
    monkeypatch.setenv("PORT", "not-a-port")
    monkeypatch.setattr(server, "build_server", lambda settings: pytest.fail("server built"))
    with pytest.raises(SystemExit) as exc:
        server.main()
    assert exc.value.code == 2
    assert "Invalid configuration" in caplog.text
