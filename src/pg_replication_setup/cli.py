import sys
import argparse
from .exceptions import ReplicationSetupError
from .logging_ import get_logger
from .orchestrator import MODES, Orchestrator

PROG = 'pg-replication-setup'


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1)


def build_parser():
    # no -h: like any other unknown token it is not a mode
    parser = _ArgumentParser(prog=PROG, usage=f'{PROG} {{primary|standby}} [check]', add_help=False)
    parser.add_argument('mode', help='which side of the replication pair this host is')
    parser.add_argument('action', nargs='?', help="'check' to query replication status afterwards")
    return parser


def main(argv=None, orchestrator_factory=Orchestrator):
    parser = build_parser()
    # trailing tokens beyond [check] are ignored
    args, _ = parser.parse_known_args(sys.argv[1:] if argv is None else argv)
    if args.mode not in MODES:
        parser.error(f'invalid mode: {args.mode}')

    logger = get_logger(PROG)
    orch = orchestrator_factory(logger=logger)
    try:
        orch.run(args.mode, check=args.action == 'check')
    except ReplicationSetupError as e:
        logger.error("Replication setup aborted", mode=args.mode, error=str(e), error_type=type(e).__name__)
        print(str(e), file=sys.stderr)
        sys.exit(1)
    sys.exit(0)


if __name__ == '__main__':
    main()
