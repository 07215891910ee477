"""GitHub API access."""

from .cache import CacheEntry, RateLimitedCache
from .client import GitHubClient

__all__ = ["CacheEntry", "GitHubClient", "RateLimitedCache"]
