"""Git executable resolution."""

import os
import shutil
from pathlib import Path

from templatehub.exceptions import ValidationError
from templatehub.logger import get_logger
from templatehub.models.config import ToolSource

logger = get_logger(__name__)


class GitToolManager:
    """Locates and validates the git executable."""

    def __init__(self, source: ToolSource | None = None) -> None:
        """
        Args:
            source: Git tool configuration; read from the app config when omitted
        """
        self._source = source

    @property
    def source(self) -> ToolSource:
        if self._source is not None:
            return self._source
        from templatehub.config import get_config

        return get_config().tools.git

    def get_git_executable(self) -> str:
        """Get Git executable path based on configuration."""
        source = self.source
        if source.type == "custom" and source.custom_path:
            return source.custom_path
        return "git"

    def ensure_git_installed(self) -> str:
        """
        Ensure Git is installed and return the executable path.

        Returns:
            Path to git executable

        Raises:
            ValidationError: If the configured executable is missing or not executable
        """
        git_exec = self.get_git_executable()

        if git_exec == "git":
            if not shutil.which("git"):
                raise ValidationError("git.not_found_in_path")
        elif not Path(git_exec).exists() or not os.access(git_exec, os.X_OK):
            raise ValidationError("git.invalid_path", path=git_exec)

        logger.debug("Using git executable", path=git_exec)
        return git_exec
