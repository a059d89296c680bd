import os
import re
import shutil
from typing import List

from .logging_ import get_logger

logger = get_logger('conffile')


def backup_once(path: str, backup_path: str) -> bool:
    """Copy `path` to `backup_path` unless a backup already exists.

    Returns True when a copy was made.
    """
    if os.path.exists(backup_path):
        logger.info("Backup already present", path=path, backup=backup_path)
        return False
    shutil.copy2(path, backup_path)
    logger.info("Backed up configuration file", path=path, backup=backup_path)
    return True


def contains(path: str, pattern: str) -> bool:
    """grep -q equivalent: True if any line of `path` matches regex `pattern`."""
    regex = re.compile(pattern)
    with open(path, 'r') as f:
        return any(regex.search(line) for line in f)


def append_block(path: str, lines: List[str]) -> None:
    with open(path, 'a') as f:
        f.write(''.join(line + '\n' for line in lines))


def ensure_block(path: str, marker: str, lines: List[str]) -> bool:
    """Append `lines` to `path` unless a line already matches `marker`.

    Returns True when the block was appended.
    """
    if contains(path, marker):
        logger.info("Settings already present; skipping", path=path, marker=marker)
        return False
    append_block(path, lines)
    logger.info("Appended settings", path=path, line_count=len(lines))
    return True
