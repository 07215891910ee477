"""Subprocess execution utilities with automatic logging."""

import asyncio
import subprocess
from collections import deque
from collections.abc import Awaitable, Callable
from pathlib import Path

from templatehub.logger import get_logger

logger = get_logger(__name__)


def is_progress_line(line: str) -> bool:
    """
    Check if a line appears to be a progress update (e.g., contains control characters
    like \r, \b, or ANSI escape sequences).
    """
    return "\r" in line or "\b" in line or "\033[" in line


class SubprocessExecutor:
    """Executes subprocess commands with automatic debug logging."""

    @staticmethod
    async def run_with_realtime_output(
        *args: str,
        cwd: Path | str | None = None,
        env: dict[str, str] | None = None,
        line_callback: Callable[[str], Awaitable[None]] | None = None,
        max_buffer_lines: int | None = 200,
    ) -> int:
        """
        Execute a subprocess with stdout and stderr merged and streamed line by line.

        No timeout is applied; the call returns once the process exits.

        Args:
            *args: Command arguments
            cwd: Working directory
            env: Environment variables
            line_callback: Awaited with every output line as it arrives
            max_buffer_lines: Number of trailing lines kept for the error log.
                Progress lines (containing \r, \b, or ANSI escapes) overwrite the
                previous progress line instead of being appended.

        Returns:
            Process exit code

        Raises:
            subprocess.CalledProcessError: If the process exits with a non-zero code
            OSError: If the executable cannot be launched
        """
        cmd_str = " ".join(args)
        logger.debug("Executing subprocess with streaming", command=cmd_str, cwd=str(cwd) if cwd else None)

        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            cwd=str(cwd) if cwd else None,
            env=env,
        )

        output_lines: deque[str] = deque(maxlen=max_buffer_lines)
        assert process.stdout is not None
        async for raw in process.stdout:
            line = raw.decode("utf-8", errors="replace").rstrip("\n\r")
            if is_progress_line(line) and output_lines and is_progress_line(output_lines[-1]):
                output_lines[-1] = line
            else:
                output_lines.append(line)
            logger.debug("Subprocess", line=line)
            if line_callback:
                await line_callback(line)

        returncode = await process.wait()
        if returncode != 0:
            logger.error(
                "Subprocess failed",
                command=cmd_str,
                returncode=returncode,
                output="\n".join(output_lines),
            )
            raise subprocess.CalledProcessError(returncode, args)

        return returncode
