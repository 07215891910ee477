"""Decides whether a repository holds one template, several sibling templates, or none."""

import asyncio
from collections.abc import Callable

from templatehub.logger import get_logger
from templatehub.models.github import Repository, TreeEntry
from templatehub.services.github import GitHubClient

from .catalog import TemplateCatalog
from .template import Template

logger = get_logger(__name__)

TemplateFactory = Callable[[Repository, str | None], Template]


class TreeClassifier:
    """
    Walks the default branch tree of a repository to find templates.

    A directory is a template when it directly contains the manifest file.
    Only the repository root and its immediate subdirectories are inspected.
    """

    def __init__(self, client: GitHubClient, factory: TemplateFactory, manifest_filename: str = ".addon") -> None:
        """
        Args:
            client: GitHub client used for branch and tree lookups
            factory: Builds a Template for a repository and optional sub directory
            manifest_filename: File whose presence marks a template directory
        """
        self.client = client
        self.factory = factory
        self.manifest_filename = manifest_filename

    def has_manifest(self, entries: list[TreeEntry]) -> bool:
        return any(entry.path == self.manifest_filename for entry in entries)

    async def classify(self, repository: Repository, catalog: TemplateCatalog) -> list[Template]:
        """
        Find the templates in a repository and register them in the catalog.

        API failures are logged and only affect this repository (or, for a
        subdirectory lookup, only that subdirectory).

        Args:
            repository: Repository to inspect
            catalog: Catalog receiving the templates

        Returns:
            One root template, the nested sibling templates, or an empty list
        """
        full_name = repository.full_name

        sha_result = await self.client.get_default_branch_head_tree_sha(full_name, repository.default_branch)
        if sha_result.is_err():
            logger.warning(
                "Failed to resolve default branch", repository=full_name, branch=repository.default_branch
            )
            return []

        tree_result = await self.client.get_tree(full_name, sha_result.unwrap())
        if tree_result.is_err():
            logger.warning("Failed to fetch repository tree", repository=full_name)
            return []

        entries = tree_result.unwrap().tree
        if self.has_manifest(entries):
            template = self.factory(repository, None)
            catalog.add(template)
            logger.debug("Found root template", repository=full_name)
            return [template]

        candidates = [entry for entry in entries if entry.is_tree]
        if not candidates:
            logger.debug("Repository is not a template", repository=full_name)
            return []

        matches = await asyncio.gather(*(self._is_template_directory(repository, entry) for entry in candidates))

        templates = [self.factory(repository, entry.path) for entry, matched in zip(candidates, matches) if matched]
        for template in templates:
            catalog.add(template)
        catalog.link_siblings(templates)

        logger.debug("Found nested templates", repository=full_name, sub_directories=[t.sub_directory for t in templates])
        return templates

    async def _is_template_directory(self, repository: Repository, entry: TreeEntry) -> bool:
        result = await self.client.get_tree(repository.full_name, entry.sha)
        if result.is_err():
            logger.warning("Failed to fetch subdirectory tree", repository=repository.full_name, path=entry.path)
            return False
        return self.has_manifest(result.unwrap().tree)
