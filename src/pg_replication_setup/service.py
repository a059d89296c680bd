from .logging_ import get_logger


class ServiceManager:
    """systemctl wrapper for the database service."""
    def __init__(self, runner, name: str = 'postgresql'):
        self.runner = runner
        self.name = name
        self.logger = get_logger('service-manager')

    def _systemctl(self, action: str) -> bool:
        result = self.runner.run(['systemctl', action, self.name])
        if result.ok:
            self.logger.info("Service action completed", service=self.name, action=action)
        else:
            self.logger.warning("Service action failed; continuing",
                                service=self.name,
                                action=action,
                                returncode=result.returncode)
        return result.ok

    def start(self) -> bool:
        return self._systemctl('start')

    def stop(self) -> bool:
        return self._systemctl('stop')

    def restart(self) -> bool:
        return self._systemctl('restart')
