"""Shell command execution for lock file regeneration."""

from __future__ import annotations

import asyncio
import errno
import os
import posixpath
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from lockkeeper.exceptions import ExecError, TemporaryError

log = structlog.get_logger(__name__)

# Spawn failures caused by the host running out of resources, not by the command.
_TRANSIENT_ERRNOS = frozenset({errno.EAGAIN, errno.ENOMEM, errno.ENOSPC, errno.EMFILE})
_TRANSIENT_STDERR = ("No space left on device",)


@dataclass(frozen=True)
class ToolConstraint:
    """Version requirement for a toolchain the command depends on."""

    tool_name: str
    constraint: str | None = None


@dataclass
class ExecOptions:
    extra_env: Mapping[str, str] = field(default_factory=dict)
    cwd_file: str | None = None
    tool_constraints: Sequence[ToolConstraint] = ()
    pre_commands: Sequence[str] = ()
    timeout: float | None = None


@dataclass
class ExecResult:
    stdout: str
    stderr: str


def build_command_line(command: str, pre_commands: Sequence[str]) -> str:
    """Chain pre-commands in front of *command* so any failure stops the run."""
    return " && ".join([*pre_commands, command])


class CommandExecutor:
    """Runs commands through the shell inside a repository checkout.

    Raises :class:`ExecError` on non-zero exit or timeout and
    :class:`TemporaryError` when the host itself is out of resources.
    """

    def __init__(self, local_dir: Path | str, timeout: float = 900) -> None:
        self._local_dir = Path(local_dir)
        self._timeout = timeout

    def _cwd(self, cwd_file: str | None) -> Path:
        if not cwd_file:
            return self._local_dir
        return self._local_dir / posixpath.dirname(cwd_file)

    async def exec(self, command: str, options: ExecOptions | None = None) -> ExecResult:
        options = options or ExecOptions()
        cmd_line = build_command_line(command, options.pre_commands)
        cwd = self._cwd(options.cwd_file)
        env = {**os.environ, **options.extra_env}
        timeout = options.timeout if options.timeout is not None else self._timeout

        for tool in options.tool_constraints:
            log.debug("exec.tool_constraint", tool=tool.tool_name, constraint=tool.constraint)
        # Pre-commands can carry credentials; log only the main command.
        log.debug("exec.start", command=command, cwd=str(cwd))

        try:
            proc = await asyncio.create_subprocess_shell(
                cmd_line,
                cwd=cwd,
                env=env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            if exc.errno in _TRANSIENT_ERRNOS:
                raise TemporaryError(f"cannot spawn command: {exc}") from exc
            raise ExecError(command, None, str(exc)) from exc

        try:
            stdout_b, stderr_b = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise ExecError(command, None, f"command timed out after {timeout}s")

        stdout = stdout_b.decode(errors="replace")
        stderr = stderr_b.decode(errors="replace")

        if proc.returncode != 0:
            if any(marker in stderr for marker in _TRANSIENT_STDERR):
                raise TemporaryError(stderr.strip())
            raise ExecError(command, proc.returncode, stderr)

        log.debug("exec.done", command=command, returncode=proc.returncode)
        return ExecResult(stdout=stdout, stderr=stderr)
