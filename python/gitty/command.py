"""
Command runner for gitty.

Executes one git process per call and reports the outcome as a
CommandResult. Failures are stored on the result rather than raised so
callers can decide how to combine them (see ``Repository.status``).
"""

import asyncio
import os
import subprocess
import time
from typing import Dict, List, Optional

from loguru import logger

from .config import DEFAULT_ENV, GitConfig
from .exceptions import (
    GitLaunchError,
    GitTimeoutError,
    classify_command_error,
    create_git_error_context,
)
from .models import CommandResult, GitCommand


class GitRunner:
    """
    Runs GitCommand objects as subprocesses.

    Every call spawns exactly one process with an argv array (never a
    shell), waits for it to exit and captures stdout and stderr in full.
    There is no retry.
    """

    def __init__(self, config: Optional[GitConfig] = None):
        self.config = config or GitConfig()

    def _argv(self, command: GitCommand) -> List[str]:
        return command.argv(self.config.executable, self.config.global_options)

    def _environment(self) -> Dict[str, str]:
        env = os.environ.copy()
        env.update(DEFAULT_ENV)
        env.update(self.config.env)
        return env

    def _decode(self, data: Optional[bytes]) -> str:
        return data.decode(self.config.encoding, errors="replace") if data else ""

    def run(self, command: GitCommand) -> CommandResult:
        """
        Run a git command and wait for it to finish.

        Args:
            command: The invocation to execute.

        Returns:
            CommandResult: Output of the process; ``error`` is set for a
            launch failure, a timeout or a non-zero exit status.
        """
        argv = self._argv(command)
        logger.debug(f"Running git command: {' '.join(argv)} in {command.working_directory}")
        start_time = time.time()

        try:
            completed = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                cwd=command.working_directory,
                env=self._environment(),
                timeout=self.config.timeout,
            )
        except subprocess.TimeoutExpired as e:
            return self._timeout_result(command, argv, start_time, e)
        except OSError as e:
            return self._launch_failure(command, argv, start_time, e)

        return self._finish(
            command,
            argv,
            completed.returncode,
            self._decode(completed.stdout),
            self._decode(completed.stderr),
            time.time() - start_time,
        )

    async def run_async(self, command: GitCommand) -> CommandResult:
        """
        Run a git command without blocking the event loop.

        On timeout the child process is killed and reaped before the
        result is returned.
        """
        argv = self._argv(command)
        logger.debug(
            f"Running async git command: {' '.join(argv)} in {command.working_directory}"
        )
        start_time = time.time()

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                stdin=asyncio.subprocess.DEVNULL,
                cwd=command.working_directory,
                env=self._environment(),
            )
        except OSError as e:
            return self._launch_failure(command, argv, start_time, e)

        try:
            stdout_data, stderr_data = await asyncio.wait_for(
                process.communicate(), timeout=self.config.timeout
            )
        except asyncio.TimeoutError as e:
            await self._kill(process)
            return self._timeout_result(command, argv, start_time, e)
        except asyncio.CancelledError:
            logger.debug(f"Git command cancelled, killing child process: {command}")
            await self._kill(process)
            raise

        return self._finish(
            command,
            argv,
            process.returncode if process.returncode is not None else -1,
            self._decode(stdout_data),
            self._decode(stderr_data),
            time.time() - start_time,
        )

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        """Kill and reap a child process that may already have exited."""
        try:
            process.kill()
        except ProcessLookupError:
            logger.debug(f"Process {process.pid} exited before it could be killed")
        await process.wait()

    def _finish(
        self,
        command: GitCommand,
        argv: List[str],
        return_code: int,
        stdout: str,
        stderr: str,
        duration: float,
    ) -> CommandResult:
        result = CommandResult(
            command=argv,
            return_code=return_code,
            stdout=stdout,
            stderr=stderr,
            duration=duration,
        )

        if return_code == 0:
            logger.debug(f"Git command successful in {duration:.2f}s: {command}")
            if stderr.strip():
                # git reports progress ("Switched to branch ...") on stderr
                logger.debug(f"stderr: {stderr.strip()}")
            return result

        result.error = classify_command_error(
            argv,
            return_code,
            stdout,
            stderr,
            duration=duration,
            context=create_git_error_context(
                working_dir=command.working_directory,
                repo_path=command.working_directory,
                command=argv,
            ),
        )
        logger.warning(
            f"Git command failed with code {return_code}: {command}: {stderr.strip() or stdout.strip()}"
        )
        return result

    def _launch_failure(
        self, command: GitCommand, argv: List[str], start_time: float, error: OSError
    ) -> CommandResult:
        if isinstance(error, FileNotFoundError) and not command.working_directory.is_dir():
            message = f"Working directory does not exist: {command.working_directory}"
            return_code = 127
        elif isinstance(error, FileNotFoundError):
            message = (
                f"Git executable not found: {self.config.executable}. "
                "Is Git installed and in PATH?"
            )
            return_code = 127
        elif isinstance(error, PermissionError):
            message = f"Permission denied when executing Git command: {' '.join(argv)}"
            return_code = 126
        else:
            message = f"Failed to launch Git command {' '.join(argv)}: {error}"
            return_code = -1

        logger.error(message)
        return CommandResult(
            command=argv,
            return_code=return_code,
            duration=time.time() - start_time,
            error=GitLaunchError(
                message,
                argv,
                original_error=error,
                context=create_git_error_context(
                    working_dir=command.working_directory, command=argv
                ),
            ),
        )

    def _timeout_result(
        self,
        command: GitCommand,
        argv: List[str],
        start_time: float,
        error: Exception,
    ) -> CommandResult:
        timeout = self.config.timeout or 0.0
        logger.error(f"Git command timed out after {timeout}s: {command}")
        stdout = getattr(error, "stdout", None)
        stderr = getattr(error, "stderr", None)
        return CommandResult(
            command=argv,
            return_code=-1,
            stdout=self._decode(stdout) if isinstance(stdout, bytes) else "",
            stderr=self._decode(stderr) if isinstance(stderr, bytes) else "",
            duration=time.time() - start_time,
            error=GitTimeoutError(
                argv,
                timeout,
                original_error=error,
                context=create_git_error_context(
                    working_dir=command.working_directory, command=argv
                ),
            ),
        )


__all__ = ["GitRunner"]
