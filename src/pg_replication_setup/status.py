import sys
from typing import List, Sequence, TextIO

import psycopg

from .logging_ import get_logger

PRIMARY_STATUS_QUERY = 'SELECT * FROM pg_stat_replication;'
STANDBY_STATUS_QUERY = 'SELECT now() - pg_last_xact_replay_timestamp() AS replication_delay;'


def status_query(mode: str) -> str:
    return PRIMARY_STATUS_QUERY if mode == 'primary' else STANDBY_STATUS_QUERY


def _record_header(number: int, name_width: int, value_width: int) -> str:
    # label overlays a rule as wide as the record, '+' over the column divider
    label = f'-[ RECORD {number} ]'
    rule = list(label.ljust(name_width + 3 + value_width, '-'))
    if len(label) <= name_width + 1:
        rule[name_width + 1] = '+'
    return ''.join(rule)


def format_expanded(columns: List[str], rows: List[Sequence]) -> str:
    """Render text rows in psql's expanded (`-x`) layout; NULL prints empty."""
    if not rows:
        return '(0 rows)\n'
    cells = [['' if v is None else str(v) for v in row] for row in rows]
    name_width = max(len(c) for c in columns)
    value_width = max(len(v) for row in cells for v in row)
    out = []
    for i, row in enumerate(cells, start=1):
        out.append(_record_header(i, name_width, value_width))
        for name, value in zip(columns, row):
            out.append(f'{name.ljust(name_width)} | {value}')
    return '\n'.join(out) + '\n'


class StatusChecker:
    def __init__(self, db, out: TextIO = None, logger=None):
        self.db = db
        self.out = out or sys.stdout
        self.logger = logger or get_logger('status-checker')

    def check(self, mode: str) -> bool:
        """Print the mode's replication status. Query failures are logged, not raised."""
        query = status_query(mode)
        self.logger.info("Checking replication status", mode=mode)
        try:
            columns, rows = self.db.query(query)
        except psycopg.Error as e:
            self.logger.error("Replication status query failed",
                              mode=mode,
                              error=str(e),
                              error_type=type(e).__name__)
            return False
        self.out.write(format_expanded(columns, rows))
        self.out.flush()
        return True
