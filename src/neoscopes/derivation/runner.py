"""Run an external command and capture its standard output as lines.

Derivations consume this capability through the :data:`CommandRunner`
signature so tests and embedding applications can substitute their own
implementation.  The default, :func:`run_lines`, blocks until the command
exits; there is no timeout.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# (args, cwd) -> stdout lines, or None when the command could not produce output.
CommandRunner = Callable[[Sequence[str], Optional[str]], Optional[list[str]]]


def run_lines(args: Sequence[str], cwd: Optional[str] = None) -> Optional[list[str]]:
    """Run *args* in *cwd* and return the non-empty lines of its stdout.

    Returns
    -------
    list[str] or None
        The output lines (possibly empty), or *None* if the executable is
        missing, could not be started, or exited with a non-zero status.
    """
    try:
        result = subprocess.run(
            list(args),
            cwd=cwd,
            capture_output=True,
            text=True,
        )
    except (FileNotFoundError, OSError):
        logger.debug("Could not run %s.", " ".join(args), exc_info=True)
        return None
    if result.returncode != 0:
        logger.debug(
            "%s exited with status %d: %s",
            " ".join(args),
            result.returncode,
            result.stderr.strip(),
        )
        return None
    return [line for line in result.stdout.splitlines() if line.strip()]
