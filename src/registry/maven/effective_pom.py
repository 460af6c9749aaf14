"""Effective pom retrieval through the ``mvn`` command line tool."""
from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from typing import Optional

from constants import Constants
from common.logging_utils import Timer, extra_context, is_debug_enabled

logger = logging.getLogger(__name__)


class EffectivePomError(RuntimeError):
    """Raised when ``mvn help:effective-pom`` fails or times out."""


def build_command(pom_path: str, output_path: str, mvn: str = Constants.MVN_COMMAND) -> list:
    """Argument vector for the effective-pom goal."""
    return [mvn, "-f", pom_path, "help:effective-pom", f"-Doutput={output_path}"]


def get_effective_pom(
    pom_path: str,
    workdir: Optional[str] = None,
    timeout: Optional[int] = None,
) -> str:
    """Store the effective pom of ``pom_path`` in a temporary file.

    Args:
        pom_path: Path to the pom.xml, relative to ``workdir`` or absolute.
        workdir: Directory mvn runs in; defaults to the current directory.
        timeout: Seconds before the mvn process is killed; defaults to
            ``Constants.MVN_TIMEOUT``.

    Returns:
        Path of the generated effective pom. The caller owns the file.

    Raises:
        EffectivePomError: If mvn cannot be started, times out or exits non-zero.
    """
    effective_timeout = timeout if timeout is not None else Constants.MVN_TIMEOUT
    fd, output_path = tempfile.mkstemp(prefix="pom", suffix=".xml")
    os.close(fd)

    command = build_command(pom_path, output_path)
    logger.info("Retrieving effective pom for %s into %s", pom_path, output_path)
    with Timer() as timer:
        try:
            result = subprocess.run(
                command,
                cwd=workdir,
                capture_output=True,
                text=True,
                timeout=effective_timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            os.unlink(output_path)
            raise EffectivePomError(
                f"mvn process did not finish within {effective_timeout} seconds"
            ) from exc
        except OSError as exc:
            os.unlink(output_path)
            raise EffectivePomError(f"Failed to run mvn command: {exc}") from exc

    if is_debug_enabled(logger):
        logger.debug(
            "mvn finished",
            extra=extra_context(
                event="subprocess_exit",
                component="effective_pom",
                target=pom_path,
                status_code=result.returncode,
                duration_ms=timer.duration_ms(),
            ),
        )

    if result.returncode != 0:
        os.unlink(output_path)
        details = (result.stderr or result.stdout or "").strip()
        raise EffectivePomError(f"Failed to run mvn command:\n{details}")

    return output_path
