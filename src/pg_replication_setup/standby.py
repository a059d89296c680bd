import os
import shutil
from datetime import datetime
from typing import Callable, List

from .conffile import append_block
from .exceptions import BaseBackupError
from .logging_ import get_logger
from .utils import require_root, timestamped_path


def primary_conninfo(cfg) -> str:
    return (f"host={cfg.primary_host} port={cfg.pg_port} user={cfg.repl_user} "
            f"password={cfg.repl_password} application_name={cfg.app_name}")


def recovery_settings(cfg) -> List[str]:
    return [
        '# Recovery Configuration',
        f"primary_conninfo = '{primary_conninfo(cfg)}'",
        f"promote_trigger_file = '{cfg.promote_trigger_file}'",
        'hot_standby = on',
    ]


def basebackup_command(cfg) -> List[str]:
    return [
        'pg_basebackup',
        '-h', cfg.primary_host,
        '-p', str(cfg.pg_port),
        '-U', cfg.repl_user,
        '-D', cfg.data_dir,
        '-P', '-v', '-R',
        '-C', '-S', cfg.repl_slot,
        '-X', 'stream',
    ]


class StandbyConfigurator:
    """Rebuild the local data directory as a streaming replica of the primary."""
    def __init__(self, cfg, runner, service, geteuid=os.geteuid, chown: Callable = shutil.chown,
                 clock: Callable[[], datetime] = datetime.now, logger=None):
        self.cfg = cfg
        self.runner = runner
        self.service = service
        self.geteuid = geteuid
        self.chown = chown
        self.clock = clock
        self.logger = logger or get_logger('standby-configurator')

    def run(self) -> None:
        self.logger.info("Configuring standby server", data_dir=self.cfg.data_dir, primary=self.cfg.primary_host)
        require_root(self.geteuid)

        self.service.stop()
        self.prepare_data_dir()
        self.base_backup()

        self.logger.info("Configuring recovery settings", path=self.cfg.standby_postgresql_conf)
        append_block(self.cfg.standby_postgresql_conf, recovery_settings(self.cfg))
        self.chown(self.cfg.standby_postgresql_conf, self.cfg.os_user, self.cfg.os_user)

        self.logger.info("Starting PostgreSQL", service=self.cfg.service_name)
        self.service.start()
        self.logger.info("Standby server configuration completed")

    def prepare_data_dir(self) -> str:
        """Move any existing data directory aside and recreate it empty.

        Returns the backup path, or '' when there was nothing to move.
        """
        data_dir = self.cfg.data_dir
        backup = ''
        if os.path.isdir(data_dir):
            backup = timestamped_path(data_dir, self.clock())
            self.logger.info("Backing up existing data directory", data_dir=data_dir, backup=backup)
            os.rename(data_dir, backup)
        os.makedirs(data_dir, exist_ok=True)
        self.chown(data_dir, self.cfg.os_user, self.cfg.os_user)
        return backup

    def base_backup(self) -> None:
        self.logger.info("Taking base backup from primary",
                         primary=self.cfg.primary_host,
                         repl_user=self.cfg.repl_user,
                         slot=self.cfg.repl_slot)
        result = self.runner.run(
            basebackup_command(self.cfg),
            user=self.cfg.os_user,
            env={'PGPASSWORD': self.cfg.repl_password},
            cwd='/tmp',
            capture=False,
        )
        if not result.ok:
            raise BaseBackupError('Error: pg_basebackup failed')
