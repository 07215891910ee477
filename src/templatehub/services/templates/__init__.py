"""Template discovery and installation."""

from .catalog import TemplateCatalog
from .classifier import TreeClassifier
from .discovery import DiscoveryResult, TemplateDiscoveryService
from .progress import LoggingProgressSink, ProgressScope, ProgressSink
from .template import Template

__all__ = [
    "DiscoveryResult",
    "LoggingProgressSink",
    "ProgressScope",
    "ProgressSink",
    "Template",
    "TemplateCatalog",
    "TemplateDiscoveryService",
    "TreeClassifier",
]
