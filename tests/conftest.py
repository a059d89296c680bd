import os
import sys

import pytest

# allow running the suite from a checkout without installing the package
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from pg_replication_setup.config import load_from_env  # noqa: E402

STOCK_POSTGRESQL_CONF = """\
data_directory = '/var/lib/postgresql/13/main'
listen_addresses = '*'
port = 5432
#wal_level = replica
"""

STOCK_PG_HBA_CONF = """\
local   all             postgres                                peer
local   all             all                                     peer
host    all             all             127.0.0.1/32            md5
local   replication     all                                     peer
"""


@pytest.fixture
def cfg(tmp_path, monkeypatch):
    conf_dir = tmp_path / 'etc' / 'postgresql' / '13' / 'main'
    conf_dir.mkdir(parents=True)
    (conf_dir / 'postgresql.conf').write_text(STOCK_POSTGRESQL_CONF)
    (conf_dir / 'pg_hba.conf').write_text(STOCK_PG_HBA_CONF)
    data_dir = tmp_path / 'var' / 'lib' / 'postgresql' / '13' / 'main'
    data_dir.parent.mkdir(parents=True)

    for key in ('REPL_PASSWORD', 'REPL_USER', 'PRIMARY_HOST', 'STANDBY_HOST', 'PGPASSWORD'):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv('PG_CONF_DIR', str(conf_dir))
    monkeypatch.setenv('PG_DATA_DIR', str(data_dir))
    return load_from_env()
