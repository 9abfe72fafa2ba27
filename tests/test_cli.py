import signal
import threading
import pytest
from awssweep import cli
from awssweep.registry import SweeperRegistry
from awssweep.sweep.report import SkipReason, SweepOutcome, SweepReport


def ok_sweeper(region, options):
    report = SweepReport('aws_ok', region)
    report.record(SweepOutcome.succeeded('ok-1'))
    report.record(SweepOutcome.skipped('ok-2', SkipReason.NOT_FOUND))
    return report


def failing_sweeper(region, options):
    report = SweepReport('aws_bad', region)
    report.record(SweepOutcome.failed('bad-1', RuntimeError('delete refused')))
    return report


def broken_sweeper(region, options):
    raise RuntimeError('could not create client')


@pytest.fixture
def registry(monkeypatch):
    registry = SweeperRegistry()
    monkeypatch.setattr(cli, 'build_registry', lambda: registry)
    monkeypatch.setattr(cli, 'setup_logging', lambda *args, **kwargs: None)
    monkeypatch.setattr(cli, 'install_signal_handlers', lambda event: None)
    return registry


def test_cli_success(registry, capsys):
    registry.add('aws_ok', ok_sweeper)

    assert cli.main(['--region', 'us-west-2']) == 0

    out = capsys.readouterr().out
    assert 'aws_ok (us-west-2)' in out
    assert 'ok-2 (not found)' in out
    assert 'Sweep complete.' in out


def test_cli_failure_reports_every_error(registry, capsys):
    registry.add('aws_ok', ok_sweeper)
    registry.add('aws_bad', failing_sweeper)
    registry.add('aws_broken', broken_sweeper)

    assert cli.main(['--region', 'us-west-2,us-east-1']) == 1

    err = capsys.readouterr().err
    assert err.count('delete refused') == 2
    assert 'aws_broken (us-east-1): could not create client' in err
    assert 'aws_ok' not in err


def test_cli_filters_sweepers(registry, capsys):
    registry.add('aws_ok', ok_sweeper)
    registry.add('aws_bad', failing_sweeper)

    assert cli.main(['--region', 'us-west-2', '--sweep', 'aws_ok']) == 0


def test_cli_unknown_sweeper(registry):
    registry.add('aws_ok', ok_sweeper)

    assert cli.main(['--region', 'us-west-2', '--sweep', 'aws_nope']) == 2


def test_cli_requires_region(registry):
    registry.add('aws_ok', ok_sweeper)

    assert cli.main([]) == 2


def test_cli_rejects_bad_workers(registry, capsys):
    assert cli.main(['--region', 'us-west-2', '--workers', '0']) == 2
    assert 'max_workers' in capsys.readouterr().err


def test_cli_list(registry, capsys):
    registry.add('aws_ok', ok_sweeper)

    assert cli.main(['--list']) == 0
    assert capsys.readouterr().out.strip() == 'aws_ok'


def test_cli_passes_options(registry):
    seen = []

    def sweeper(region, options):
        seen.append((region, options.dry_run, options.max_workers))
        return SweepReport('aws_seen', region)

    registry.add('aws_seen', sweeper)

    assert cli.main(['--region', 'eu-west-1', '--dry-run', '--workers', '3']) == 0
    assert seen == [('eu-west-1', True, 3)]


def test_signal_handler_sets_cancel_event(monkeypatch):
    installed = {}
    monkeypatch.setattr(cli.signal, 'signal', lambda sig, handler: installed.__setitem__(sig, handler))
    event = threading.Event()

    cli.install_signal_handlers(event)
    installed[signal.SIGTERM](signal.SIGTERM, None)

    assert event.is_set()
    assert signal.SIGINT in installed


def test_run_after_cancel_skips_remaining(registry):
    registry.add('aws_ok', ok_sweeper)
    options = cli.SweepOptions()
    options.cancel_event.set()

    errors = cli.run(registry, ['us-west-2'], ['all'], options)

    assert errors == ['aws_ok (us-west-2): cancelled before start']


@pytest.mark.parametrize("body", ["regions: [unclosed\n", "kms:\n  deletion_window_in_days: '10'\n"])
def test_cli_rejects_bad_config_file(registry, tmp_path, capsys, body):
    path = tmp_path / 'awssweep.yaml'
    path.write_text(body)

    assert cli.main(['--config', str(path), '--region', 'us-west-2']) == 2
    assert 'Invalid configuration' in capsys.readouterr().err


def test_second_signal_restores_default_handlers(monkeypatch):
    installed = {}
    monkeypatch.setattr(cli.signal, 'signal', lambda sig, handler: installed.__setitem__(sig, handler))
    event = threading.Event()

    cli.install_signal_handlers(event)
    installed[signal.SIGINT](signal.SIGINT, None)

    assert event.is_set()
    assert installed[signal.SIGINT] is signal.default_int_handler
    assert installed[signal.SIGTERM] is signal.SIG_DFL
    with pytest.raises(KeyboardInterrupt):
        installed[signal.SIGINT](signal.SIGINT, None)


def test_cli_abort_exits_130(registry):
    def interrupted(region, options):
        raise KeyboardInterrupt

    registry.add('aws_stuck', interrupted)

    assert cli.main(['--region', 'us-west-2']) == 130
