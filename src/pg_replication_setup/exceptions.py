class ReplicationSetupError(Exception):
    """Base class for failures that abort a setup run."""


class PrivilegeError(ReplicationSetupError):
    pass


class BaseBackupError(ReplicationSetupError):
    pass
