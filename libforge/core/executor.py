"""Subprocess invocation with captured output and a hard timeout.

Every external process (git, build/test/install steps) goes through
``run_command``. The child runs in its own session so a timeout can kill
the whole process group, including grandchildren spawned by ``sh -c``.
"""

from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
import time
from collections.abc import Mapping, Sequence
from pathlib import Path

from libforge.models.results import CommandResult

logger = logging.getLogger(__name__)


def _kill_group(proc: subprocess.Popen) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def run_command(
    command: str | Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> CommandResult:
    """Run *command* and wait for it, capturing stdout and stderr.

    A string is executed through ``sh -c`` (manifest commands are shell
    snippets); a sequence is executed directly. *env* entries are layered
    over the current process environment.

    Never raises for a failing command: a missing executable is reported
    as return code 127 and a timeout sets ``timed_out``.
    """
    if isinstance(command, str):
        argv = ["sh", "-c", command]
        display = command
    else:
        argv = list(command)
        display = shlex.join(argv)

    full_env = dict(os.environ)
    if env:
        full_env.update(env)

    logger.debug("RUN: %s (cwd=%s)", display, cwd)
    started = time.monotonic()
    timed_out = False
    try:
        proc = subprocess.Popen(
            argv,
            cwd=str(cwd) if cwd else None,
            env=full_env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            start_new_session=True,
        )
    except OSError as exc:
        logger.error("Could not start '%s': %s", display, exc)
        return CommandResult(command=display, returncode=127, stderr=str(exc))

    try:
        out, err = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.error("Command timed out after %ss: %s", timeout, display)
        _kill_group(proc)
        out, err = proc.communicate()
        timed_out = True
    except BaseException:
        # The group must not outlive an interrupted wait.
        _kill_group(proc)
        proc.wait()
        raise

    result = CommandResult(
        command=display,
        returncode=proc.returncode,
        stdout=out or "",
        stderr=err or "",
        timed_out=timed_out,
        duration_seconds=time.monotonic() - started,
    )
    if result.stdout:
        logger.debug("stdout from '%s':\n%s", display, result.stdout.rstrip())
    if result.stderr:
        logger.debug("stderr from '%s':\n%s", display, result.stderr.rstrip())
    return result
