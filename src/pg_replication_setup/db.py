import os
import pwd
from contextlib import contextmanager
from typing import List, Optional, Sequence, Tuple

import psycopg
from psycopg import sql

from .logging_ import get_logger


@contextmanager
def effective_user(name: Optional[str]):
    """Take the uid/gid of `name` for the duration of the block when running as root.

    Peer authentication reads the effective credentials of the socket peer at
    connect time, so opening the admin connection this way behaves like
    `sudo -u postgres psql`.
    """
    if not name or os.geteuid() != 0:
        yield
        return
    pw = pwd.getpwnam(name)
    if pw.pw_uid == 0:
        yield
        return
    os.setegid(pw.pw_gid)
    os.seteuid(pw.pw_uid)
    try:
        yield
    finally:
        os.seteuid(0)
        os.setegid(0)


class PostgresClient:
    """Local admin connection to the database server.

    psycopg_module and switch_user may be injected for tests.
    """
    def __init__(self, host: str, port: int, user: str, password: Optional[str], dbname: str,
                 connect_timeout: int = 5, run_as: Optional[str] = None,
                 psycopg_module=None, switch_user=effective_user):
        self.conn_kwargs = dict(host=host, port=port, user=user, dbname=dbname, connect_timeout=connect_timeout)
        if password:
            self.conn_kwargs['password'] = password
        self.run_as = run_as
        self.psycopg = psycopg_module or psycopg
        self.switch_user = switch_user
        self.logger = get_logger('postgres-client')

    @classmethod
    def from_config(cls, cfg, psycopg_module=None, switch_user=effective_user):
        return cls(host=cfg.admin_host, port=cfg.admin_port, user=cfg.admin_user,
                   password=cfg.admin_password, dbname=cfg.admin_database,
                   connect_timeout=cfg.admin_connect_timeout, run_as=cfg.os_user,
                   psycopg_module=psycopg_module, switch_user=switch_user)

    def _connect(self):
        with self.switch_user(self.run_as):
            return self.psycopg.connect(autocommit=True, **self.conn_kwargs)

    def _execute(self, query, params=None, as_text: bool = False) -> Tuple[List[str], List[Sequence]]:
        conn = self._connect()
        try:
            with conn.cursor() as cur:
                cur.execute(query, params)
                if cur.description is None:
                    return [], []
                columns = [col.name for col in cur.description]
                if not as_text:
                    return columns, cur.fetchall()
                # values exactly as the server rendered them, like psql prints
                res = cur.pgresult
                encoding = conn.info.encoding
                rows = []
                for r in range(res.ntuples):
                    values = (res.get_value(r, c) for c in range(res.nfields))
                    rows.append(tuple(None if v is None else bytes(v).decode(encoding) for v in values))
                return columns, rows
        finally:
            try:
                conn.close()
            except Exception:
                pass

    def query(self, query: str) -> Tuple[List[str], List[Sequence]]:
        """Run a read-only statement and return (column names, text rows)."""
        return self._execute(query, as_text=True)

    def role_exists(self, name: str) -> bool:
        _, rows = self._execute('SELECT 1 FROM pg_roles WHERE rolname = %s', (name,))
        return bool(rows)

    def create_replication_role(self, name: str, password: str) -> None:
        stmt = sql.SQL('CREATE USER {} WITH REPLICATION ENCRYPTED PASSWORD {}').format(
            sql.Identifier(name), sql.Literal(password))
        self._execute(stmt)
        self.logger.info("Created replication role", role=name)
