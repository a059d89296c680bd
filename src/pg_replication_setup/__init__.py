from .logging_ import get_logger
from .orchestrator import Orchestrator
from .config import Config, load_from_env
from .exceptions import ReplicationSetupError, PrivilegeError, BaseBackupError


def setup_logging(name: str = __name__):
    """Returns a configured structured logger."""
    return get_logger(name)


__all__ = ['Orchestrator', 'Config', 'load_from_env', 'setup_logging',
           'ReplicationSetupError', 'PrivilegeError', 'BaseBackupError']
