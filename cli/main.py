"""Entry point of the ``lannas`` command."""

import os
import shlex
import sys
from typing import List, Optional

from common.logging_config import setup_logging
from cli.repl import repl_loop, run_once


def main(argv: Optional[List[str]] = None) -> None:
    """
    Run one command given on the command line (e.g.
    ``lannas upload movie.mkv --to /Videos``), or the interactive REPL
    when there is none. ``--debug`` anywhere enables debug logging.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    debug = '--debug' in args
    if debug:
        args = [a for a in args if a != '--debug']

    # WARNING by default so log lines do not break the progress display
    logger = setup_logging('cli', log_level='DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING'))
    logger.debug(f"CLI starting with args={args}")

    try:
        if args:
            print(run_once(shlex.join(args)))
        else:
            repl_loop()
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
