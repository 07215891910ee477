"""Data models for templatehub."""

from templatehub.models.config import AppConfig
from templatehub.models.github import (
    BranchResult,
    ErrorCode,
    RateLimit,
    Repository,
    SearchResult,
    TreeEntry,
    TreeResult,
)
from templatehub.models.template import TemplateInfo, TemplateState

__all__ = [
    "AppConfig",
    "BranchResult",
    "ErrorCode",
    "RateLimit",
    "Repository",
    "SearchResult",
    "TemplateInfo",
    "TemplateState",
    "TreeEntry",
    "TreeResult",
]
