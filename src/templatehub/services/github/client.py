"""Typed access to the GitHub REST endpoints used for template discovery."""

from typing import TypeVar
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from templatehub.logger import get_logger
from templatehub.models.github import (
    BranchResult,
    ErrorCode,
    Repository,
    SearchResult,
    TreeResult,
)
from templatehub.utils.result import Err, Ok, Result

from .cache import RateLimitedCache

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class GitHubClient:
    """Read-only GitHub operations; every request goes through the shared cache."""

    def __init__(self, cache: RateLimitedCache) -> None:
        self.cache = cache

    @property
    def base_url(self) -> str:
        return self.cache.base_url

    def repository_url(self, repository_id: int) -> str:
        return f"{self.base_url}repositories/{repository_id}"

    def search_url(self, query: str) -> str:
        # ':' and '+' carry meaning in GitHub search syntax ("topic:a+b")
        return f"{self.base_url}search/repositories?q={quote(query, safe=':+')}"

    def branch_url(self, full_name: str, branch: str) -> str:
        return f"{self.base_url}repos/{full_name}/branches/{quote(branch, safe='')}"

    def tree_url(self, full_name: str, sha: str) -> str:
        return f"{self.base_url}repos/{full_name}/git/trees/{sha}"

    async def get_repository(self, repository_id: int) -> Result[Repository, ErrorCode]:
        """
        Get information about a repository.

        Args:
            repository_id: Unique id of the repository

        Returns:
            Repository snapshot or error code
        """
        return await self._get(self.repository_url(repository_id), Repository)

    async def search(self, query: str) -> Result[SearchResult, ErrorCode]:
        """
        Search repositories.

        Args:
            query: GitHub search query, e.g. ``topic:sbox-template``

        Returns:
            Search result or error code
        """
        return await self._get(self.search_url(query), SearchResult)

    async def get_default_branch_head_tree_sha(self, full_name: str, branch: str) -> Result[str, ErrorCode]:
        """
        Get the tree SHA of the latest commit on a branch.

        Args:
            full_name: ``owner/name`` of the repository
            branch: Branch name, normally the repository default branch

        Returns:
            Tree SHA or error code
        """
        result = await self._get(self.branch_url(full_name, branch), BranchResult)
        if result.is_err():
            return result
        return Ok(result.unwrap().tree_sha)

    async def get_tree(self, full_name: str, sha: str) -> Result[TreeResult, ErrorCode]:
        """
        List the entries of a tree (non-recursive).

        Args:
            full_name: ``owner/name`` of the repository
            sha: Tree SHA

        Returns:
            Tree listing or error code
        """
        return await self._get(self.tree_url(full_name, sha), TreeResult)

    async def _get(self, url: str, model: type[ModelT]) -> Result[ModelT, ErrorCode]:
        result = await self.cache.fetch(url)
        if result.is_err():
            return result

        try:
            return Ok(model.model_validate_json(result.unwrap()))
        except ValidationError as e:
            logger.error(
                "Malformed GitHub response",
                url=url,
                model=model.__name__,
                error=str(e),
            )
            return Err(ErrorCode.MALFORMED_RESPONSE)
