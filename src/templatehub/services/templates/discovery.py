"""Template discovery: GitHub search plus tree classification."""

import asyncio
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from templatehub.exceptions import ResourceConflictError, ResourceNotFoundError
from templatehub.logger import get_logger
from templatehub.models.config import AppConfig, PathsConfig
from templatehub.models.github import Repository
from templatehub.services.git import GitService, GitToolManager
from templatehub.services.github import GitHubClient, RateLimitedCache
from templatehub.utils.result import Err

from .catalog import TemplateCatalog
from .classifier import TreeClassifier
from .progress import LoggingProgressSink, ProgressSink
from .template import Template

logger = get_logger(__name__)


@dataclass
class DiscoveryResult:
    """Templates found by a refresh; ``nothing_found`` is distinct from a failure."""

    templates: list[Template]

    @property
    def nothing_found(self) -> bool:
        return not self.templates


class TemplateDiscoveryService:
    """Finds templates on GitHub and keeps the current catalog."""

    def __init__(
        self,
        client: GitHubClient,
        git: GitService,
        paths: PathsConfig,
        search_queries: list[str],
        manifest_filename: str = ".addon",
    ) -> None:
        self.client = client
        self.git = git
        self.paths = paths
        self.search_queries = list(search_queries)
        self.catalog = TemplateCatalog()
        self.classifier = TreeClassifier(client, self.create_template, manifest_filename)
        self._busy: str | None = None

    @classmethod
    def from_config(cls, config: AppConfig, cache: RateLimitedCache | None = None) -> "TemplateDiscoveryService":
        """Build the service and its collaborators from application configuration."""
        cache = cache or RateLimitedCache(
            base_url=config.github.api_url,
            ttl=config.github.cache_ttl,
            rate_limit_backoff=config.github.rate_limit_backoff,
            user_agent=config.github.user_agent,
        )
        git = GitService(GitToolManager(config.tools.git), strict=config.git.strict_failures)
        return cls(
            client=GitHubClient(cache),
            git=git,
            paths=config.paths,
            search_queries=config.github.search_queries,
            manifest_filename=config.github.manifest_filename,
        )

    def create_template(self, repository: Repository, sub_directory: str | None) -> Template:
        return Template(repository, sub_directory, paths=self.paths, client=self.client, git=self.git)

    def list_templates(self) -> list[Template]:
        return list(self.catalog)

    def get(self, key: str) -> Template:
        """
        Look up a template from the last refresh.

        Raises:
            ResourceNotFoundError: If no template has this key
        """
        template = self.catalog.get(key)
        if template is None:
            raise ResourceNotFoundError("templates.not_found", key=key)
        return template

    @property
    def busy(self) -> str | None:
        """Label of the operation currently running, if any."""
        return self._busy

    @contextmanager
    def exclusive(self, label: str) -> Iterator[None]:
        """
        Mark an operation as running for as long as the block executes.

        Advisory only: it rejects callers that ask while another operation runs,
        it does not interrupt anything.

        Raises:
            ResourceConflictError: If another operation is running
        """
        if self._busy is not None:
            raise ResourceConflictError("templates.busy", running=self._busy, requested=label)
        self._busy = label
        try:
            yield
        finally:
            self._busy = None

    async def search_repositories(self) -> list[Repository]:
        """
        Run every search query concurrently and merge the results.

        A failed query is logged and contributes no repositories. Repositories
        returned by several queries are kept once, in first-seen order.
        """
        results = await asyncio.gather(*(self.client.search(query) for query in self.search_queries))

        repositories: dict[int, Repository] = {}
        for query, result in zip(self.search_queries, results):
            if isinstance(result, Err):
                logger.error("Failed to query GitHub search API", query=query, error=result.error.value)
                continue
            for repository in result.unwrap().items:
                repositories.setdefault(repository.id, repository)

        return list(repositories.values())

    async def refresh(self, progress: ProgressSink | None = None) -> DiscoveryResult:
        """
        Replace the catalog with the templates currently found on GitHub.

        Returns:
            Discovered templates; ``nothing_found`` is set when there are none
        """
        progress = progress or LoggingProgressSink()
        with progress.start("Searching For Templates") as scope:
            scope.update("Setting up...", 1, 100)
            self.catalog.clear()

            queries = ", ".join(f'"{query}"' for query in self.search_queries)
            scope.update(f"Searching for repositories matching {queries}...", 10, 100)
            repositories = await self.search_repositories()

            scope.update("Classifying repositories...", 50, 100)
            groups = await asyncio.gather(
                *(self.classifier.classify(repository, self.catalog) for repository in repositories)
            )

            scope.update("Populating list...", 90, 100)
            result = DiscoveryResult(templates=[template for group in groups for template in group])

        if result.nothing_found:
            logger.info("No templates found", repositories=len(repositories))
        else:
            logger.info("Templates discovered", templates=len(result.templates), repositories=len(repositories))
        return result
