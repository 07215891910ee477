"""Git command runner for template working copies."""

import subprocess
from collections.abc import Awaitable, Callable
from pathlib import Path

from templatehub.exceptions import OperationalError
from templatehub.logger import get_logger
from templatehub.utils.subprocess_executor import SubprocessExecutor

from .tools import GitToolManager

logger = get_logger(__name__)


class GitService:
    """Runs git commands inside a working directory and streams their output."""

    def __init__(self, tool_manager: GitToolManager | None = None, strict: bool = False) -> None:
        """
        Args:
            tool_manager: Resolves the git executable
            strict: Raise OperationalError on a failed command instead of logging it
        """
        self.tool_manager = tool_manager or GitToolManager()
        self.strict = strict

    async def run(
        self,
        *args: str,
        cwd: Path,
        line_callback: Callable[[str], Awaitable[None]] | None = None,
    ) -> bool:
        """
        Run a git command, creating ``cwd`` if it does not exist.

        Args:
            *args: Git arguments, e.g. ``"pull"``
            cwd: Working directory
            line_callback: Awaited with each line of git output

        Returns:
            True if git exited with code 0

        Raises:
            OperationalError: If the command failed and the service is strict
        """
        cwd.mkdir(parents=True, exist_ok=True)
        git_exec = self.tool_manager.get_git_executable()
        command = " ".join(args)

        try:
            await SubprocessExecutor.run_with_realtime_output(git_exec, *args, cwd=cwd, line_callback=line_callback)
        except subprocess.CalledProcessError as e:
            if self.strict:
                raise OperationalError("git.failed", retriable=True, command=command, returncode=e.returncode) from e
            logger.warning("Git command failed, continuing", command=command, returncode=e.returncode, cwd=str(cwd))
            return False
        except OSError as e:
            if self.strict:
                raise OperationalError("git.launch_failed", command=command, error=str(e)) from e
            logger.error("Failed to launch git", command=command, error=str(e), cwd=str(cwd))
            return False

        return True

    async def clone(
        self, repo_url: str, target_dir: Path, line_callback: Callable[[str], Awaitable[None]] | None = None
    ) -> bool:
        """Clone ``repo_url`` into ``target_dir`` itself (``git clone <url> .``)."""
        logger.info("Cloning repository", url=repo_url, target=str(target_dir))
        return await self.run("clone", "--progress", repo_url, ".", cwd=target_dir, line_callback=line_callback)

    async def reset_hard(self, repo_dir: Path) -> bool:
        return await self.run("reset", "--hard", "HEAD", cwd=repo_dir)

    async def pull(self, repo_dir: Path, line_callback: Callable[[str], Awaitable[None]] | None = None) -> bool:
        return await self.run("pull", "--progress", cwd=repo_dir, line_callback=line_callback)

    async def force_checkout(self, repo_dir: Path, branch: str) -> bool:
        return await self.run("checkout", branch, "--force", cwd=repo_dir)
