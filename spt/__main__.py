"""
spt entry point: `python -m spt [global options] <command> [flags]`.

Prints the resolved Action; faults are rendered on stderr and exit with
status 1. Logging is configured from SPT_VERBOSE and SPT_LOG_JSON.
"""
import os
import sys

from rich.pretty import pprint

from .faults import FaultCode
from .logs import configure_logging
from .router import Router

__prog__ = "spt"

__docs__ = {
    FaultCode.UNKNOWN_COMMAND: "the first word after the global options must name a command or one of its aliases",
    FaultCode.MUTUALLY_EXCLUSIVE: "flags of an at-most-one group select a single behaviour",
    FaultCode.GROUP_CONFLICT: "some flag families cannot be combined, e.g. --next with --volume",
    FaultCode.OUT_OF_BOUNDS: "--limit takes 1 to 50 results and --volume 1 to 100 percent",
    FaultCode.UNRESOLVED_SELECTION: "build() expects flags that already passed the group checks",
}


def _enabled(name):
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def main(argv=None):
    configure_logging(verbose=_enabled("SPT_VERBOSE"), log_json=_enabled("SPT_LOG_JSON"))
    router = Router(shell=True, colorful=sys.stderr.isatty())
    action = router(sys.argv[1:] if argv is None else argv)
    if action is not None:
        pprint(action, expand_all=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
