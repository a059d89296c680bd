import os
import re

import psycopg

from .conffile import backup_once, ensure_block
from .logging_ import get_logger
from .utils import require_root

# commented-out defaults (e.g. '#wal_level = replica' in the stock file) do not count
REPLICATION_MARKER = r'^\s*wal_level\s*=\s*replica\b'


def replication_settings(cfg):
    return [
        '# Replication Configuration',
        'wal_level = replica',
        f'max_wal_senders = {cfg.max_wal_senders}',
        f'max_replication_slots = {cfg.max_replication_slots}',
        'hot_standby = on',
    ]


def hba_marker(cfg) -> str:
    return rf'^\s*host\w*\s+replication\s+{re.escape(cfg.repl_user)}\s'


def hba_rule(cfg):
    return [
        '# Replication configuration',
        f'host    replication     {cfg.repl_user}      {cfg.standby_host}/32        md5',
    ]


class PrimaryConfigurator:
    """Prepare the primary to accept a streaming standby.

    Every step checks before it changes anything, so the whole sequence can
    be re-run; the final restart is unconditional.
    """
    def __init__(self, cfg, db, service, geteuid=os.geteuid, logger=None):
        self.cfg = cfg
        self.db = db
        self.service = service
        self.geteuid = geteuid
        self.logger = logger or get_logger('primary-configurator')

    def run(self) -> None:
        self.logger.info("Configuring primary server", conf_dir=self.cfg.conf_dir)
        require_root(self.geteuid)

        backup_once(self.cfg.postgresql_conf, self.cfg.postgresql_conf_backup)

        if ensure_block(self.cfg.postgresql_conf, REPLICATION_MARKER, replication_settings(self.cfg)):
            self.logger.info("Added replication settings to postgresql.conf")
        else:
            self.logger.info("Replication settings already exist in postgresql.conf")

        if ensure_block(self.cfg.pg_hba_conf, hba_marker(self.cfg), hba_rule(self.cfg)):
            self.logger.info("Added replication access to pg_hba.conf", standby=self.cfg.standby_host)
        else:
            self.logger.info("Replication access already configured in pg_hba.conf")

        self.ensure_role()

        self.logger.info("Restarting PostgreSQL", service=self.cfg.service_name)
        self.service.restart()
        self.logger.info("Primary server configuration completed")

    def ensure_role(self) -> bool:
        """Create the replication role if missing. Returns True when it was created.

        Database errors are logged and the run carries on to the restart.
        """
        try:
            if self.db.role_exists(self.cfg.repl_user):
                self.logger.info("Replication user already exists", role=self.cfg.repl_user)
                return False
            if self.cfg.uses_default_password:
                self.logger.warning("Creating replication user with the default password; set REPL_PASSWORD",
                                    role=self.cfg.repl_user)
            self.db.create_replication_role(self.cfg.repl_user, self.cfg.repl_password)
        except psycopg.Error as e:
            self.logger.error("Replication user setup failed; continuing",
                              role=self.cfg.repl_user,
                              error=str(e),
                              error_type=type(e).__name__)
            return False
        return True
