"""Conversion of component descriptors into catalogue resources."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from ofcatalog.dtos import ComponentDTO, Link, MetricSourceDTO

logger = logging.getLogger(__name__)


class RepoDescriptionSource(Protocol):
    """Anything that can look up a repository's description."""

    def get_repo_description(self, repo: str) -> str: ...


@dataclass(frozen=True)
class LinkResource:
    name: str = ""
    type: str = ""
    url: str = ""
    id: str = ""


@dataclass
class DocumentResource:
    title: str = ""
    type: str = ""
    url: str = ""
    id: str = ""
    documentation_category_id: str = ""


@dataclass
class MetricSourceResource:
    id: str = ""
    name: str = ""
    metric: str = ""
    facts: list[Any] = field(default_factory=list)


@dataclass
class ComponentResource:
    id: str = ""
    name: str = ""
    slug: str = ""
    description: str = ""
    config_version: int = 0
    type_id: str = ""
    owner_id: str = ""
    fields: dict[str, Any] = field(default_factory=dict)
    links: list[LinkResource] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    metric_sources: dict[str, MetricSourceResource] = field(default_factory=dict)


class ComponentConverter:
    """Turns component descriptors into resources, filling in descriptions."""

    def __init__(
        self,
        slug_for: Callable[[str, str], str],
        github: RepoDescriptionSource | None = None,
    ) -> None:
        self._slug_for = slug_for
        self._github = github

    def to_resource(self, component: ComponentDTO) -> ComponentResource:
        spec = component.spec
        return ComponentResource(
            id=spec.id,
            name=spec.name,
            slug=self._slug_for(spec.name, spec.type_id),
            description=self._description(component),
            config_version=spec.config_version,
            type_id=spec.type_id,
            owner_id=spec.owner_id,
            fields=spec.fields,
            links=links_to_resources(spec.links),
            labels=spec.labels,
            metric_sources=metric_sources_to_resources(spec.metric_sources),
        )

    def _description(self, component: ComponentDTO) -> str:
        spec = component.spec
        if spec.description:
            return spec.description
        fallback = f"Component {spec.name}"
        if self._github is None:
            return fallback
        try:
            description = self._github.get_repo_description(component.metadata.name)
        except Exception as exc:
            logger.warning(
                "Could not get repository description for %s: %s",
                component.metadata.name,
                exc,
            )
            return fallback
        logger.info("Using GitHub description for %s: %s", spec.name, description)
        return description


def metric_source_to_resource(metric_source: MetricSourceDTO) -> MetricSourceResource:
    """Convert a metric source including its facts."""
    return MetricSourceResource(
        id=metric_source.id,
        name=metric_source.name,
        metric=metric_source.metric,
        facts=metric_source.facts,
    )


def links_to_resources(links: list[Link]) -> list[LinkResource]:
    """Convert links, keeping the first of each name/type/URL combination."""
    unique: dict[tuple[str, str, str], LinkResource] = {}
    for link in links:
        key = (link.name, link.type, link.url)
        unique.setdefault(key, LinkResource(name=link.name, type=link.type, url=link.url))
    return list(unique.values())


def metric_sources_to_resources(
    metric_sources: dict[str, MetricSourceDTO] | None,
) -> dict[str, MetricSourceResource]:
    """Convert metric sources without their facts."""
    return {
        name: MetricSourceResource(id=source.id, name=source.name, metric=source.metric)
        for name, source in (metric_sources or {}).items()
    }