"""Git services."""

from .service import GitService
from .tools import GitToolManager

__all__ = ["GitService", "GitToolManager"]
