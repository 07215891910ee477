"""A single installable template and its local installation lifecycle."""

import asyncio
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from templatehub.exceptions import InvalidOperationError
from templatehub.logger import get_logger
from templatehub.models.config import PathsConfig
from templatehub.models.github import ErrorCode, Repository
from templatehub.models.template import TemplateInfo, TemplateState
from templatehub.services.git import GitService
from templatehub.services.github import GitHubClient
from templatehub.utils.files import copy_filtered, force_remove_tree
from templatehub.utils.result import Err, Ok, Result

from .progress import LoggingProgressSink, ProgressSink

if TYPE_CHECKING:
    from .catalog import TemplateCatalog

logger = get_logger(__name__)

GIT_DIR = ".git"
TIMESTAMP_FILE = "update.txt"
EXCLUDED_FILES = (".gitattributes", ".gitignore", TIMESTAMP_FILE, "README", "README.md")
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def read_timestamp(path: Path) -> datetime | None:
    """
    Read an ISO-8601 timestamp file.

    Naive timestamps are taken as UTC.

    Returns:
        The timestamp, or None if the file is missing or does not parse
    """
    try:
        text = path.read_text(encoding="utf-8").strip()
    except OSError:
        return None

    try:
        value = datetime.fromisoformat(text)
    except ValueError:
        return None

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def write_timestamp(path: Path, value: datetime) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(value.isoformat(), encoding="utf-8")


class Template:
    """
    A template hosted on GitHub.

    A template is either a whole repository (``sub_directory`` is None) or one
    folder of a repository holding several templates. Templates from the same
    repository are siblings: they share one git working copy (the cache
    directory) and each has its own filtered copy (the template directory).
    """

    def __init__(
        self,
        repository: Repository,
        sub_directory: str | None,
        *,
        paths: PathsConfig,
        client: GitHubClient,
        git: GitService,
    ) -> None:
        self.repository = repository
        self.sub_directory = sub_directory
        self.paths = paths
        self.client = client
        self.git = git
        self.catalog: TemplateCatalog | None = None

    def __repr__(self) -> str:
        return f"Template(key={self.key!r}, full_name={self.repository.full_name!r})"

    @property
    def key(self) -> str:
        """Unique name of the template; also the name of its template directory."""
        if self.sub_directory is not None:
            return f"{self.repository.id}_{self.sub_directory}"
        return str(self.repository.id)

    @property
    def template_path(self) -> Path:
        return self.paths.get_template_path(self.key)

    @property
    def cache_path(self) -> Path:
        return self.paths.get_cache_path(self.repository.id)

    @property
    def siblings(self) -> list["Template"]:
        """Other templates from the same repository."""
        if self.catalog is None:
            return []
        return self.catalog.siblings_of(self)

    # State

    def is_installed(self) -> bool:
        """
        Whether any part of the template is on disk.

        True even if the installation is partial or corrupted.
        """
        return self.cache_path.is_dir() or self.template_path.is_dir()

    def is_corrupted(self) -> bool:
        """
        Whether the installation is broken.

        Also true when the template is not installed at all, so callers that
        need to tell the two apart check ``is_installed()`` first.
        """
        if not self.cache_path.is_dir():
            return True
        if not (self.cache_path / GIT_DIR).is_dir():
            return True
        if not self.template_path.is_dir():
            return True

        synced_at = self.get_sync_time()
        return synced_at is None or synced_at <= EPOCH

    def get_sync_time(self) -> datetime | None:
        """Timestamp written to the working copy by the last download or update."""
        return read_timestamp(self.cache_path / TIMESTAMP_FILE)

    def get_last_version_time(self) -> datetime | None:
        """Timestamp of the version currently copied into the template directory."""
        return read_timestamp(self.template_path / TIMESTAMP_FILE)

    def is_up_to_date(self) -> bool:
        """
        Compare the last received repository snapshot with the installed version.

        Use ``is_up_to_date_async`` to compare against fresh data from GitHub.
        """
        if not self.is_installed():
            return False

        last_version = self.get_last_version_time()
        if last_version is None:
            return False
        return self.repository.updated_at <= last_version

    async def is_up_to_date_async(self) -> Result[bool, ErrorCode]:
        """
        Re-fetch the repository and compare it with the installed version.

        The held repository snapshot is replaced on success.

        Returns:
            Whether the template is up to date, or the API error code
        """
        if not self.is_installed():
            return Ok(False)

        result = await self.client.get_repository(self.repository.id)
        if result.is_err():
            return result

        self.repository = result.unwrap()
        return Ok(self.is_up_to_date())

    def state(self) -> TemplateState:
        if not self.is_installed():
            return TemplateState.NOT_INSTALLED
        if self.is_corrupted():
            return TemplateState.INSTALLED_CORRUPTED
        if not self.is_up_to_date():
            return TemplateState.INSTALLED_STALE
        return TemplateState.INSTALLED_CURRENT

    def to_info(self) -> TemplateInfo:
        repo = self.repository
        return TemplateInfo(
            key=self.key,
            repository_id=repo.id,
            name=repo.name,
            full_name=repo.full_name,
            description=repo.description,
            url=repo.html_url,
            default_branch=repo.default_branch,
            updated_at=repo.updated_at,
            sub_directory=self.sub_directory,
            sibling_keys=[sibling.key for sibling in self.siblings],
            state=self.state(),
            last_version_time=self.get_last_version_time(),
            template_path=str(self.template_path),
            cache_path=str(self.cache_path),
        )

    # Operations

    async def download(self, progress: ProgressSink | None = None) -> None:
        """
        Clone the repository and materialize this template and its siblings.

        Failed git commands are logged and the download carries on to the copy
        step unless the git service is strict.
        """
        progress = progress or LoggingProgressSink()
        with progress.start(f"Downloading {self.repository.full_name}") as scope:

            async def on_line(line: str) -> None:
                scope.update(line, 40, 100)

            scope.update("Cloning repository...", 0, 100)
            await self.git.clone(self.repository.clone_url, self.cache_path, line_callback=on_line)

            scope.update("Writing update time...", 80, 100)
            write_timestamp(self.cache_path / TIMESTAMP_FILE, self.repository.updated_at)

            scope.update("Copying files to template directory...", 90, 100)
            await self.copy_to_template_directory()
            for sibling in self.siblings:
                await sibling.copy_to_template_directory()

            scope.update("Done", 100, 100)

    async def update(self, progress: ProgressSink | None = None) -> bool:
        """
        Pull the latest changes and re-materialize this template and its siblings.

        Returns:
            False if the template was already up to date and nothing was touched

        Raises:
            InvalidOperationError: If the repository was never downloaded
        """
        if not self.cache_path.is_dir():
            raise InvalidOperationError("templates.not_downloaded", key=self.key)

        up_to_date = await self.is_up_to_date_async()
        if isinstance(up_to_date, Err):
            logger.warning("Failed to check for update, continuing anyway", key=self.key, error=up_to_date.error.value)
        elif up_to_date.value:
            logger.info("Template already up to date", key=self.key)
            return False

        progress = progress or LoggingProgressSink()
        with progress.start(f"Updating {self.repository.full_name}") as scope:

            async def on_line(line: str) -> None:
                scope.update(line, 45, 100)

            scope.update("Resetting repository...", 0, 100)
            await self.git.reset_hard(self.cache_path)

            scope.update("Pulling changes...", 30, 100)
            await self.git.pull(self.cache_path, line_callback=on_line)

            scope.update(f"Checking out {self.repository.default_branch}...", 60, 100)
            await self.git.force_checkout(self.cache_path, self.repository.default_branch)

            # A full re-sync just happened, so record local time rather than the remote timestamp
            scope.update("Writing update time...", 80, 100)
            write_timestamp(self.cache_path / TIMESTAMP_FILE, datetime.now(timezone.utc))

            scope.update("Copying files to template directory...", 90, 100)
            await self.copy_to_template_directory()
            for sibling in self.siblings:
                await sibling.copy_to_template_directory()

            scope.update("Done", 100, 100)

        return True

    async def copy_to_template_directory(self) -> None:
        """
        Replace the template directory with a filtered copy of the working copy.

        Raises:
            InvalidOperationError: If the repository was never downloaded
        """
        await asyncio.to_thread(self._copy_to_template_directory)

    def _copy_to_template_directory(self) -> None:
        if not self.cache_path.is_dir():
            raise InvalidOperationError("templates.not_downloaded", key=self.key)

        if self.template_path.exists():
            force_remove_tree(self.template_path)
        self.template_path.mkdir(parents=True)

        source = self.cache_path / self.sub_directory if self.sub_directory is not None else self.cache_path
        if not source.is_dir():
            logger.warning("Template source directory is missing", key=self.key, source=str(source))
            return

        copy_filtered(source, self.template_path, excluded_dirs=(GIT_DIR,), excluded_files=EXCLUDED_FILES)

        sync_file = self.cache_path / TIMESTAMP_FILE
        if sync_file.is_file():
            shutil.copyfile(sync_file, self.template_path / TIMESTAMP_FILE)
        logger.info("Copied template files", key=self.key, source=str(source), target=str(self.template_path))

    async def delete(self, progress: ProgressSink | None = None) -> list[str]:
        """
        Remove the template and cache directories of this template and its siblings.

        Errors are logged, never raised.

        Returns:
            Keys of the templates whose directories were removed
        """
        deleted: list[str] = []
        progress = progress or LoggingProgressSink()
        with progress.start(f"Deleting {self.repository.full_name}") as scope:
            try:
                for template in [self, *self.siblings]:
                    scope.update(f"Deleting template {template.key}...", 0, 100)
                    await asyncio.to_thread(force_remove_tree, template.template_path)

                    scope.update("Deleting github cache...", 45, 100)
                    await asyncio.to_thread(force_remove_tree, template.cache_path)
                    deleted.append(template.key)

                scope.update("Done", 100, 100)
            except Exception:
                logger.exception("Failed to delete template", key=self.key)

        return deleted
