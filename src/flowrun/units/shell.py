"""shell_unit — run a shell command via asyncio subprocess."""

import asyncio
from collections.abc import Callable
from typing import Any

from flowrun.core.errors import TaskExecutionFailed, is_recoverable
from flowrun.core.node import Unit
from flowrun.core.resolver import Inputs
from flowrun.core.retry import RetryPolicy

DEFAULT_TIMEOUT = 120


def retry_failed_command(error: BaseException) -> bool:
    """Retry on a non-zero exit or a timeout, plus anything paused."""
    return isinstance(error, TaskExecutionFailed) or is_recoverable(error)


def shell_unit(
    name: str,
    command: str,
    *,
    inputs: dict[str, Any] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    cwd: str | None = None,
    check: bool = True,
    retry: RetryPolicy | None = None,
    retry_if: Callable[[BaseException], bool] = retry_failed_command,
) -> Unit:
    """Execute a shell command and capture its output.

    ``{name}`` placeholders in *command* are filled from the unit's inputs.
    Outputs: ``stdout``, ``stderr``, ``returncode``, ``passed``, ``output``
    (stdout + stderr combined). With ``check`` a non-zero exit fails the unit.
    Under a *retry* policy, failures matching *retry_if* are retried.
    """

    async def _run(resolved: Inputs) -> dict[str, Any]:
        rendered = resolved.render(command)
        proc = await asyncio.create_subprocess_shell(
            rendered,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except TimeoutError:
            proc.kill()
            await proc.wait()
            raise TaskExecutionFailed(name, f"Command timed out after {timeout}s")

        stdout_text = stdout.decode()
        stderr_text = stderr.decode()
        returncode = proc.returncode or 0
        passed = returncode == 0

        if check and not passed:
            raise TaskExecutionFailed(name, f"Command exited with code {returncode}: {stderr_text.strip()}")

        return {
            "stdout": stdout_text,
            "stderr": stderr_text,
            "returncode": returncode,
            "passed": passed,
            "output": (stdout_text + "\n" + stderr_text).strip(),
        }

    return Unit(
        name=name,
        run=_run,
        description=f"Run shell command: {command}",
        inputs=inputs or {},
        retry=retry,
        retry_if=retry_if,
    )
