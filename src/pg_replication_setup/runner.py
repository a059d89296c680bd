import os
import subprocess
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .logging_ import get_logger
from .utils import mask_secrets


@dataclass
class CommandResult:
    args: List[str]
    returncode: int
    stdout: str = ''
    stderr: str = ''

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Run external commands to completion and report their exit status.

    Commands may run as another OS user (the PostgreSQL service account)
    and always get LC_ALL=C so tool output is not localised. Non-zero exit
    codes are logged and returned, never raised: callers decide which
    failures matter.
    """
    def __init__(self, secrets: Optional[Iterable[str]] = None):
        self.secrets = list(secrets or [])
        self.logger = get_logger('command-runner')

    def run(self, args: List[str], user: Optional[str] = None, env: Optional[Dict[str, str]] = None,
            cwd: Optional[str] = None, capture: bool = True) -> CommandResult:
        shown = ' '.join(mask_secrets(args, self.secrets))
        self.logger.info("Executing command", command=shown, run_as=user)

        full_env = dict(os.environ)
        full_env['LC_ALL'] = 'C'
        if env:
            full_env.update(env)

        try:
            proc = subprocess.run(
                args,
                user=user,
                env=full_env,
                cwd=cwd,
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.PIPE if capture else None,
                text=True,
            )
        except OSError as e:
            # command missing or unusable; report it like a shell would
            self.logger.error("Command could not be started", command=shown, error=str(e), error_type=type(e).__name__)
            return CommandResult(args=args, returncode=127, stderr=str(e))

        result = CommandResult(args=args, returncode=proc.returncode,
                               stdout=proc.stdout or '', stderr=proc.stderr or '')
        if result.ok:
            self.logger.debug("Command completed", command=shown)
        else:
            self.logger.error("Command failed",
                              command=shown,
                              returncode=result.returncode,
                              stderr=' '.join(mask_secrets([result.stderr.strip()], self.secrets)))
        return result
