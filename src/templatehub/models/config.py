"""Configuration data models for templatehub."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ServerConfig(BaseModel):
    """Server configuration."""

    port: int = 8000
    host: str = "127.0.0.1"


class PathsConfig(BaseModel):
    """Paths configuration."""

    data_dir: Path = Field(default_factory=lambda: Path.home() / ".templatehub")
    templates_dir: Path | None = None  # Installed templates, one directory per template key
    cache_dir: Path | None = None  # Git working copies, one directory per repository id
    logs_dir: Path | None = None

    @field_validator("data_dir", mode="before")
    @classmethod
    def expand_data_dir(cls, v: str | Path) -> Path:
        """Expand user path for data_dir."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @field_validator("templates_dir", "cache_dir", "logs_dir", mode="before")
    @classmethod
    def expand_optional_path(cls, v: str | Path | None) -> Path | None:
        """Expand user path for optional paths."""
        if v is None:
            return None
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    def model_post_init(self, __context: object) -> None:
        """Set default subdirectories if not specified."""
        if self.templates_dir is None:
            self.templates_dir = self.data_dir / "templates"
        if self.cache_dir is None:
            self.cache_dir = self.templates_dir / "githubcache"
        if self.logs_dir is None:
            self.logs_dir = self.data_dir / "logs"

    def get_template_path(self, key: str) -> Path:
        """
        Get the installed directory for a template.

        Directory structure:
            templates/{repository_id}/                   - Root template
            templates/{repository_id}_{sub_directory}/   - Template nested in a repository folder

        Args:
            key: Template key (repository id, optionally suffixed with ``_<sub_directory>``)

        Returns:
            Path to the installed template directory
        """
        assert self.templates_dir is not None
        return self.templates_dir / key

    def get_cache_path(self, repository_id: int) -> Path:
        """
        Get the git working copy for a repository.

        Sibling templates share one working copy since they come from the same repository.

        Directory structure:
            templates/githubcache/{repository_id}/.git/       - Git metadata
            templates/githubcache/{repository_id}/update.txt  - Last sync timestamp

        Args:
            repository_id: GitHub repository id

        Returns:
            Path to the repository cache directory
        """
        assert self.cache_dir is not None
        return self.cache_dir / str(repository_id)


class GitHubConfig(BaseModel):
    """GitHub API configuration."""

    api_url: str = "https://api.github.com/"
    user_agent: str = "templatehub"
    cache_ttl: float = 30.0  # Seconds a fetched endpoint is served from memory
    rate_limit_backoff: float = 60.0  # Used when the API does not say when the quota resets
    search_queries: list[str] = Field(default_factory=lambda: ["topic:sbox-template", "topic:sbox+template"])
    manifest_filename: str = ".addon"

    @field_validator("api_url")
    @classmethod
    def ensure_trailing_slash(cls, v: str) -> str:
        """Endpoint paths are appended to the base URL."""
        return v if v.endswith("/") else v + "/"


class ToolSource(BaseModel):
    """Tool source configuration."""

    type: Literal["system", "custom"] = "system"
    custom_path: str = ""


class ToolsConfig(BaseModel):
    """Tools configuration."""

    git: ToolSource = Field(default_factory=ToolSource)


class GitConfig(BaseModel):
    """Git behaviour configuration."""

    # When False, failed git commands are logged and the download/update carries on
    strict_failures: bool = False


class AdvancedConfig(BaseModel):
    """Advanced configuration."""

    log_level: Literal["ERROR", "WARNING", "INFO", "DEBUG", "TRACE"] = "INFO"


class AppConfig(BaseModel):
    """Application configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)
