import logging

import pytest

import composer.main as cli
from composer.runner import RunState


class FakeRunner:
    instances = []

    def __init__(self, settings=None, **kwargs):
        self.settings = settings
        self.run_kwargs = None
        self.stopped = False
        self.result = RunState.STOPPED
        FakeRunner.instances.append(self)

    def run(self, **kwargs):
        self.run_kwargs = kwargs
        return self.result

    def stop(self):
        self.stopped = True


@pytest.fixture
def fake_runner(monkeypatch):
    FakeRunner.instances = []
    monkeypatch.setattr(cli, "OrderRunner", FakeRunner)
    # Keep the test process' own signal handlers untouched
    monkeypatch.setattr(cli.signal, "signal", lambda *args: None)
    return FakeRunner


def test_missing_env_exits_nonzero_without_runner(fake_runner, caplog):
    with caplog.at_level(logging.ERROR):
        assert cli.main([]) == 1
    assert "Error in main function" in caplog.text
    assert fake_runner.instances == []


def test_cli_overrides_settings(fake_runner, wallet_env):
    code = cli.main(["--orders", "orders.yaml", "--interval", "5", "--api-base-url", "http://api:9100"])

    assert code == 0
    runner = fake_runner.instances[0]
    assert runner.settings.orders_file == "orders.yaml"
    assert runner.settings.verify_interval_seconds == 5.0
    assert runner.settings.api_base_url == "http://api:9100"
    assert runner.run_kwargs == {"block": True, "poll": True}


def test_batch_only_disables_polling(fake_runner, wallet_env):
    assert cli.main(["--batch-only"]) == 0
    assert fake_runner.instances[0].run_kwargs["poll"] is False


def test_failed_run_exits_nonzero(fake_runner, wallet_env, monkeypatch):
    monkeypatch.setattr(FakeRunner, "run", lambda self, **kwargs: RunState.BATCH_FAILED)
    assert cli.main([]) == 1


def test_bad_interval_is_reported(fake_runner, wallet_env):
    assert cli.main(["--interval", "-1"]) == 1
    assert fake_runner.instances == []


def test_unhandled_error_is_logged(fake_runner, wallet_env, monkeypatch, caplog):
    def explode(self, **kwargs):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(FakeRunner, "run", explode)
    with caplog.at_level(logging.ERROR):
        assert cli.main([]) == 1
    assert "Unhandled error" in caplog.text


def test_signal_handler_stops_runner(wallet_env, monkeypatch):
    handlers = {}
    FakeRunner.instances = []
    monkeypatch.setattr(cli, "OrderRunner", FakeRunner)
    monkeypatch.setattr(cli.signal, "signal", lambda signum, handler: handlers.__setitem__(signum, handler))

    assert cli.main([]) == 0

    handlers[cli.signal.SIGTERM](cli.signal.SIGTERM, None)
    assert FakeRunner.instances[0].stopped
