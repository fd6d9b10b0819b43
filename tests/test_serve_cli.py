from rss_terminal import serve_cli
from rss_terminal.config import AppConfig


def _patch(monkeypatch, serve):
    monkeypatch.setattr(
        serve_cli, "configure_logging", lambda level, log_file=None, console=True: None
    )
    monkeypatch.setattr(serve_cli, "load_app_config", lambda path: AppConfig())
    monkeypatch.setattr(serve_cli, "serve", serve)


def test_main_applies_overrides(monkeypatch):
    captured = {}

    async def fake_serve(config):
        captured["config"] = config

    _patch(monkeypatch, fake_serve)

    exit_code = serve_cli.main(
        ["--host", "0.0.0.0", "--port", "2222", "--host-key", "/tmp/key"]
    )

    assert exit_code == 0
    server_config = captured["config"].server
    assert (server_config.host, server_config.port) == ("0.0.0.0", 2222)
    assert server_config.host_key == "/tmp/key"


def test_main_uses_config_defaults(monkeypatch):
    captured = {}

    async def fake_serve(config):
        captured["config"] = config

    _patch(monkeypatch, fake_serve)

    assert serve_cli.main([]) == 0
    assert captured["config"].server.port == 23234


def test_main_bind_failure_exits_non_zero(monkeypatch):
    async def failing_serve(config):
        raise OSError("Address already in use")

    _patch(monkeypatch, failing_serve)

    assert serve_cli.main([]) == 1
