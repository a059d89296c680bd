from dataclasses import dataclass
import os
from typing import Optional

DEFAULT_REPL_PASSWORD = 'replicator'


@dataclass
class Config:
    pg_version: str
    pg_cluster: str
    conf_dir: str
    data_dir: str
    service_name: str
    os_user: str
    primary_host: str
    standby_host: str
    pg_port: int
    repl_user: str
    repl_password: str
    repl_slot: str
    app_name: str
    promote_trigger_file: str
    max_wal_senders: int
    max_replication_slots: int
    # local admin connection used for role management and status queries
    admin_host: str
    admin_port: int
    admin_user: str
    admin_password: Optional[str]
    admin_database: str
    admin_connect_timeout: int

    @property
    def postgresql_conf(self) -> str:
        return os.path.join(self.conf_dir, 'postgresql.conf')

    @property
    def postgresql_conf_backup(self) -> str:
        return self.postgresql_conf + '.backup'

    @property
    def pg_hba_conf(self) -> str:
        return os.path.join(self.conf_dir, 'pg_hba.conf')

    @property
    def standby_postgresql_conf(self) -> str:
        return os.path.join(self.data_dir, 'postgresql.conf')

    @property
    def uses_default_password(self) -> bool:
        return self.repl_password == DEFAULT_REPL_PASSWORD


def load_from_env() -> Config:
    """Load configuration from environment variables with the stock defaults."""
    version = os.environ.get('PG_VERSION', '13')
    cluster = os.environ.get('PG_CLUSTER', 'main')
    return Config(
        pg_version=version,
        pg_cluster=cluster,
        conf_dir=os.environ.get('PG_CONF_DIR') or f'/etc/postgresql/{version}/{cluster}',
        data_dir=os.environ.get('PG_DATA_DIR') or f'/var/lib/postgresql/{version}/{cluster}',
        service_name=os.environ.get('PG_SERVICE', 'postgresql'),
        os_user=os.environ.get('PG_OS_USER', 'postgres'),
        primary_host=os.environ.get('PRIMARY_HOST', '192.168.168.80'),
        standby_host=os.environ.get('STANDBY_HOST', '192.168.168.14'),
        pg_port=int(os.environ.get('PG_PORT', '5432')),
        repl_user=os.environ.get('REPL_USER', 'replicator'),
        repl_password=os.environ.get('REPL_PASSWORD', DEFAULT_REPL_PASSWORD),
        repl_slot=os.environ.get('REPL_SLOT', 'pgstandby1'),
        app_name=os.environ.get('REPL_APP_NAME', 'standby1'),
        promote_trigger_file=os.environ.get('PROMOTE_TRIGGER_FILE', '/tmp/promote_trigger'),
        max_wal_senders=int(os.environ.get('MAX_WAL_SENDERS', '10')),
        max_replication_slots=int(os.environ.get('MAX_REPLICATION_SLOTS', '10')),
        admin_host=os.environ.get('PGHOST', '/var/run/postgresql'),
        admin_port=int(os.environ.get('PGPORT', '5432')),
        admin_user=os.environ.get('PGUSER', 'postgres'),
        admin_password=os.environ.get('PGPASSWORD') or None,
        admin_database=os.environ.get('PGDATABASE', 'postgres'),
        admin_connect_timeout=int(os.environ.get('PGCONNECT_TIMEOUT', '5')),
    )
