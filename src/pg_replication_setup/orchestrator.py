from .config import load_from_env
from .db import PostgresClient
from .logging_ import get_logger
from .primary import PrimaryConfigurator
from .runner import CommandRunner
from .service import ServiceManager
from .standby import StandbyConfigurator
from .status import StatusChecker

MODES = ('primary', 'standby')


class Orchestrator:
    def __init__(self, cfg=None, runner=None, db=None, service=None,
                 primary=None, standby=None, status=None, logger=None):
        self.cfg = cfg or load_from_env()
        self.logger = logger or get_logger('pg-replication-setup')
        # a password that doubles as a role or account name would blank that name too
        names = (self.cfg.repl_user, self.cfg.os_user, self.cfg.admin_user)
        secrets = [s for s in (self.cfg.repl_password, self.cfg.admin_password) if s and s not in names]
        self.runner = runner or CommandRunner(secrets=secrets)
        self.db = db or PostgresClient.from_config(self.cfg)
        self.service = service or ServiceManager(self.runner, self.cfg.service_name)
        self.primary = primary or PrimaryConfigurator(self.cfg, self.db, self.service)
        self.standby = standby or StandbyConfigurator(self.cfg, self.runner, self.service)
        self.status = status or StatusChecker(self.db)

    def run(self, mode: str, check: bool = False) -> None:
        """Configure this host for `mode`, then optionally report replication status."""
        configurators = {'primary': self.primary, 'standby': self.standby}
        if mode not in configurators:
            raise ValueError(f'unknown mode: {mode!r}')

        self.logger.info("Starting replication setup", mode=mode, check=check)
        configurators[mode].run()
        if check:
            self.status.check(mode)
