# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import signal

import pytest

from dialprobe.cli import main as cli
from dialprobe.config import HOST_OVERRIDE, TARGET_URL
from dialprobe.errors import InvalidWorkerCount


class FakeSupervisor:
    instances = []

    def __init__(self, settings, worker_count):
        self.settings = settings
        self.worker_count = worker_count
        self.ran = False
        self.stop_requested = False
        FakeSupervisor.instances.append(self)

    def request_stop(self):
        self.stop_requested = True

    def run(self):
        self.ran = True


@pytest.fixture
def fake_runtime(monkeypatch):
    FakeSupervisor.instances = []
    handlers = {}
    monkeypatch.setattr(cli, "Supervisor", FakeSupervisor)
    monkeypatch.setattr(cli, "setup_logging", lambda level=None: None)
    monkeypatch.setattr(cli.signal, "signal", lambda signum, handler: handlers.__setitem__(signum, handler))
    return handlers


@pytest.mark.parametrize("raw,expected", [("1", 1), ("4", 4), ("+12", 12), ("007", 7)])
def test_parse_worker_count_accepts_positive_integers(raw, expected):
    assert cli.parse_worker_count(raw) == expected


@pytest.mark.parametrize("raw", ["0", "-3", "abc", "2.5", "", " 12 ", "1_000", "\u0661"])
def test_parse_worker_count_rejects_invalid(raw):
    with pytest.raises(InvalidWorkerCount) as excinfo:
        cli.parse_worker_count(raw)
    assert excinfo.value.raw == raw


def test_build_parser_defaults():
    args = cli.build_parser().parse_args([])
    assert args.workers is None
    assert args.log_level is None
    assert cli.build_parser().parse_args(["3", "--log-level", "debug"]).workers == "3"


def test_main_prints_banner_and_runs_supervisor(fake_runtime, capsys):
    assert cli.main(["3"]) == 0

    out = capsys.readouterr().out
    assert f"Starting HTTP monitor for {TARGET_URL} using host override {HOST_OVERRIDE} with 3 worker(s)" in out
    assert "Press Ctrl+C to stop..." in out
    supervisor = FakeSupervisor.instances[0]
    assert supervisor.worker_count == 3
    assert supervisor.ran is True


@pytest.mark.parametrize("argv", [[], ["0"], ["-2"], ["lots"]])
def test_invalid_or_missing_count_behaves_like_one(fake_runtime, capsys, argv):
    assert cli.main(argv) == 0

    out = capsys.readouterr().out
    assert FakeSupervisor.instances[0].worker_count == 1
    assert "with 1 worker(s)" in out
    if argv:
        assert f"Invalid number of workers: {argv[0]}. Using default value of 1." in out


def test_signal_handlers_request_stop(fake_runtime):
    cli.main(["1"])
    supervisor = FakeSupervisor.instances[0]

    assert set(fake_runtime) == {signal.SIGINT, signal.SIGTERM}
    fake_runtime[signal.SIGTERM](signal.SIGTERM, None)
    assert supervisor.stop_requested is True


def test_parse_worker_count_defaults_when_missing():
    assert cli.parse_worker_count(None) == 1
    assert cli.parse_worker_count(None, default=5) == 5
