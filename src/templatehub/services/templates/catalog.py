"""The shared collection of discovered templates."""

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from templatehub.exceptions import ResourceConflictError

if TYPE_CHECKING:
    from .template import Template


class TemplateCatalog:
    """
    Templates found by one discovery pass, indexed by key.

    Sibling relationships are stored here as keys rather than as references
    between templates, so clearing the catalog drops the whole graph.
    """

    def __init__(self) -> None:
        self._templates: dict[str, "Template"] = {}
        self._siblings: dict[str, list[str]] = {}

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator["Template"]:
        return iter(list(self._templates.values()))

    def __contains__(self, key: object) -> bool:
        return key in self._templates

    def get(self, key: str) -> "Template | None":
        return self._templates.get(key)

    def add(self, template: "Template") -> None:
        """
        Register a template.

        Raises:
            ResourceConflictError: If a template with the same key is already registered
        """
        if template.key in self._templates:
            raise ResourceConflictError("templates.duplicate", key=template.key)
        self._templates[template.key] = template
        template.catalog = self

    def clear(self) -> None:
        for template in self._templates.values():
            template.catalog = None
        self._templates.clear()
        self._siblings.clear()

    def link_siblings(self, templates: Iterable["Template"]) -> None:
        """
        Make every template a sibling of every other one (never of itself).

        Raises:
            ValueError: If the templates do not all come from one repository
        """
        group = list(templates)
        repository_ids = {template.repository.id for template in group}
        if len(repository_ids) > 1:
            raise ValueError(f"Siblings must share one repository, got {sorted(repository_ids)}")

        keys = [template.key for template in group]
        for key in keys:
            self._siblings[key] = [other for other in keys if other != key]

    def sibling_keys(self, key: str) -> list[str]:
        return list(self._siblings.get(key, []))

    def siblings_of(self, template: "Template") -> list["Template"]:
        return [self._templates[key] for key in self._siblings.get(template.key, []) if key in self._templates]
