import os
import re
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from .exceptions import PrivilegeError


def require_root(geteuid: Callable[[], int] = os.geteuid) -> None:
    """Raise PrivilegeError unless the effective uid is 0."""
    if geteuid() != 0:
        raise PrivilegeError('Please run as root (sudo)')


def timestamped_path(path: str, now: Optional[datetime] = None) -> str:
    """Return the backup path for `path`.

    Example: '/var/lib/postgresql/13/main' -> '/var/lib/postgresql/13/main_backup_20240101_120000'
    """
    now = now or datetime.now()
    return f"{path.rstrip(os.sep)}_backup_{now.strftime('%Y%m%d_%H%M%S')}"


_PASSWORD_VALUE = re.compile(r"(password=)[^\s']+", re.IGNORECASE)


def mask_password_values(text: str) -> str:
    """Blank the value of every `password=...` pair in a conninfo-style string."""
    return _PASSWORD_VALUE.sub(r'\1********', text)


def mask_secrets(args: Iterable[str], secrets: Iterable[Optional[str]]) -> List[str]:
    """Blank `password=` values and any of `secrets` in logged command arguments."""
    masked = []
    secrets = [s for s in secrets if s]
    for arg in args:
        arg = mask_password_values(arg)
        for secret in secrets:
            arg = arg.replace(secret, '********')
        masked.append(arg)
    return masked
