import os
from datetime import datetime
from unittest.mock import Mock

import pytest

from pg_replication_setup.exceptions import BaseBackupError, PrivilegeError
from pg_replication_setup.runner import CommandResult
from pg_replication_setup.standby import StandbyConfigurator, basebackup_command

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5)


def make_configurator(cfg, returncode=0, euid=0):
    runner = Mock()
    runner.run.side_effect = lambda args, **kw: CommandResult(args=args, returncode=returncode)
    service = Mock()
    chown = Mock()
    configurator = StandbyConfigurator(cfg, runner, service, geteuid=lambda: euid,
                                       chown=chown, clock=lambda: FIXED_NOW)
    return configurator, runner, service, chown


def test_existing_data_dir_is_renamed_with_timestamp(cfg):
    os.makedirs(cfg.data_dir)
    with open(os.path.join(cfg.data_dir, 'PG_VERSION'), 'w') as f:
        f.write('13\n')

    configurator, _, _, _ = make_configurator(cfg)
    configurator.run()

    backup = cfg.data_dir + '_backup_20240102_030405'
    assert os.path.isfile(os.path.join(backup, 'PG_VERSION'))
    assert os.path.isdir(cfg.data_dir)
    assert not os.path.exists(os.path.join(cfg.data_dir, 'PG_VERSION'))


def test_missing_data_dir_is_created_without_backup(cfg):
    configurator, _, _, chown = make_configurator(cfg)
    assert configurator.prepare_data_dir() == ''
    assert os.path.isdir(cfg.data_dir)
    chown.assert_called_once_with(cfg.data_dir, 'postgres', 'postgres')
    assert not any('_backup_' in name for name in os.listdir(os.path.dirname(cfg.data_dir)))


def test_standby_run_order_and_recovery_settings(cfg):
    configurator, runner, service, chown = make_configurator(cfg)
    calls = Mock()
    calls.attach_mock(service.stop, 'stop')
    calls.attach_mock(runner.run, 'run')
    calls.attach_mock(service.start, 'start')

    configurator.run()

    assert [c[0] for c in calls.mock_calls] == ['stop', 'run', 'start']

    with open(cfg.standby_postgresql_conf) as f:
        conf = f.read()
    assert conf == (
        "# Recovery Configuration\n"
        "primary_conninfo = 'host=192.168.168.80 port=5432 user=replicator "
        "password=replicator application_name=standby1'\n"
        "promote_trigger_file = '/tmp/promote_trigger'\n"
        "hot_standby = on\n"
    )
    chown.assert_any_call(cfg.standby_postgresql_conf, 'postgres', 'postgres')


def test_basebackup_runs_as_service_account_with_password(cfg):
    configurator, runner, _, _ = make_configurator(cfg)
    configurator.run()

    args, kwargs = runner.run.call_args
    assert args[0] == basebackup_command(cfg)
    assert kwargs['user'] == 'postgres'
    assert kwargs['env'] == {'PGPASSWORD': 'replicator'}

    cmd = basebackup_command(cfg)
    assert cmd[:7] == ['pg_basebackup', '-h', '192.168.168.80', '-p', '5432', '-U', 'replicator']
    assert cmd[cmd.index('-D') + 1] == cfg.data_dir
    assert cmd[cmd.index('-S') + 1] == 'pgstandby1'
    assert cmd[-2:] == ['-X', 'stream']
    for flag in ('-P', '-v', '-R', '-C'):
        assert flag in cmd


def test_basebackup_failure_stops_before_recovery_settings(cfg):
    configurator, _, service, _ = make_configurator(cfg, returncode=1)
    with pytest.raises(BaseBackupError, match='pg_basebackup failed'):
        configurator.run()

    service.stop.assert_called_once_with()
    service.start.assert_not_called()
    assert not os.path.exists(cfg.standby_postgresql_conf)


def test_standby_requires_root(cfg):
    configurator, runner, service, _ = make_configurator(cfg, euid=1000)
    with pytest.raises(PrivilegeError):
        configurator.run()
    service.stop.assert_not_called()
    runner.run.assert_not_called()
    assert not os.path.exists(cfg.data_dir)
