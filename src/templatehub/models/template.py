"""Template related models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class TemplateState(str, Enum):
    """Installation state derived from the filesystem and the last known repository snapshot."""

    NOT_INSTALLED = "not_installed"
    INSTALLED_CURRENT = "installed_current"
    INSTALLED_STALE = "installed_stale"
    INSTALLED_CORRUPTED = "installed_corrupted"


class TemplateInfo(BaseModel):
    """Template information for API responses."""

    key: str
    repository_id: int
    name: str
    full_name: str
    description: str | None = None
    url: str
    default_branch: str
    updated_at: datetime
    sub_directory: str | None = None
    sibling_keys: list[str] = []
    state: TemplateState
    last_version_time: datetime | None = None
    template_path: str
    cache_path: str


class DiscoveryResponse(BaseModel):
    """Result of a template refresh."""

    templates: list[TemplateInfo]
    nothing_found: bool


class UpdateCheckResponse(BaseModel):
    """Result of checking a template against GitHub."""

    key: str
    up_to_date: bool
    state: TemplateState


class DeleteTemplateResponse(BaseModel):
    key: str
    deleted: list[str]
