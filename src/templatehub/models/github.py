"""GitHub REST API payload models.

Only the fields the template engine reads are declared; everything else in the
responses is ignored.
"""

from collections.abc import Mapping
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ErrorCode(str, Enum):
    """Why an API call did not produce a value."""

    RATE_LIMITED = "rate_limited"
    MALFORMED_RESPONSE = "malformed_response"
    HTTP_ERROR = "http_error"
    NETWORK_ERROR = "network_error"


class Repository(BaseModel):
    """Snapshot of a GitHub repository."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    full_name: str  # owner/name
    description: str | None = None
    html_url: str
    clone_url: str
    default_branch: str
    updated_at: datetime


class SearchResult(BaseModel):
    """Result of ``GET /search/repositories``."""

    total_count: int
    items: list[Repository] = Field(default_factory=list)


class CommitTree(BaseModel):
    sha: str


class CommitInformation(BaseModel):
    tree: CommitTree


class Commit(BaseModel):
    commit: CommitInformation


class BranchResult(BaseModel):
    """Result of ``GET /repos/{full_name}/branches/{branch}``."""

    name: str | None = None
    commit: Commit

    @property
    def tree_sha(self) -> str:
        """SHA of the tree the branch head points to."""
        return self.commit.commit.tree.sha


class TreeEntry(BaseModel):
    """One entry of a git tree listing."""

    path: str
    type: str  # "blob", "tree" or "commit" (submodule)
    sha: str = ""

    @property
    def is_tree(self) -> bool:
        return self.type == "tree"


class TreeResult(BaseModel):
    """Result of ``GET /repos/{full_name}/git/trees/{sha}``."""

    sha: str | None = None
    tree: list[TreeEntry] = Field(default_factory=list)
    truncated: bool = False


class RateLimit(BaseModel):
    """Rate limit information sent with every API response."""

    limit: int | None = None
    remaining: int | None = None
    reset: int | None = None  # UTC epoch seconds
    used: int | None = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RateLimit":
        """Parse the ``x-ratelimit-*`` headers; missing or invalid values become None."""

        def _header(name: str) -> int | None:
            value = headers.get(f"x-ratelimit-{name}")
            if value is None:
                return None
            try:
                return int(value)
            except ValueError:
                return None

        return cls(
            limit=_header("limit"),
            remaining=_header("remaining"),
            reset=_header("reset"),
            used=_header("used"),
        )

    @property
    def exhausted(self) -> bool:
        return self.remaining is not None and self.remaining <= 0
