"""Component descriptors as read from configuration and state files."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

CHAT_CHANNEL = "CHAT_CHANNEL"


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


@dataclass(frozen=True)
class Link:
    """A link attached to a component; hashable so link sets can be compared."""

    id: str = ""
    name: str = ""
    type: str = ""
    url: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Link:
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            type=_str(data, "type"),
            url=_str(data, "url"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "type": self.type, "url": self.url}


@dataclass
class Document:
    """A documentation entry of a component."""

    id: str = ""
    title: str = ""
    type: str = ""
    documentation_category_id: str = ""
    url: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Document:
        return cls(
            id=_str(data, "id"),
            title=_str(data, "title"),
            type=_str(data, "type"),
            documentation_category_id=_str(data, "documentationCategoryId"),
            url=_str(data, "url"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "documentationCategoryId": self.documentation_category_id,
            "url": self.url,
        }


@dataclass
class Metadata:
    """Identifying metadata of a component descriptor."""

    name: str = ""
    component_type: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Metadata:
        return cls(name=_str(data, "name"), component_type=_str(data, "componentType"))

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "componentType": self.component_type}


@dataclass
class MetricSourceDTO:
    """A metric bound to a component, with the fact tasks that compute it."""

    id: str = ""
    name: str = ""
    metric: str = ""
    facts: list[Any] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MetricSourceDTO:
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            metric=_str(data, "metric"),
            facts=list(data.get("facts") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "metric": self.metric,
            "facts": list(self.facts),
        }


@dataclass
class Spec:
    """The specification part of a component descriptor."""

    id: str = ""
    name: str = ""
    slug: str = ""
    description: str = ""
    config_version: int = 0
    type_id: str = ""
    owner_id: str = ""
    depends_on: list[str] = field(default_factory=list)
    fields: dict[str, Any] = field(default_factory=dict)
    links: list[Link] = field(default_factory=list)
    documents: list[Document] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    metric_sources: dict[str, MetricSourceDTO] | None = None
    tribe: str = ""
    squad: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Spec:
        raw_sources = data.get("metricSources")
        metric_sources = (
            None
            if raw_sources is None
            else {
                name: MetricSourceDTO.from_dict(source or {})
                for name, source in raw_sources.items()
            }
        )
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            slug=_str(data, "slug"),
            description=_str(data, "description"),
            config_version=int(data.get("configVersion") or 0),
            type_id=_str(data, "typeId"),
            owner_id=_str(data, "ownerId"),
            depends_on=[str(d) for d in data.get("dependsOn") or []],
            fields=dict(data.get("fields") or {}),
            links=[Link.from_dict(link) for link in data.get("links") or []],
            documents=[Document.from_dict(doc) for doc in data.get("documents") or []],
            labels=[str(label) for label in data.get("labels") or []],
            metric_sources=metric_sources,
            tribe=_str(data, "tribe"),
            squad=_str(data, "squad"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "configVersion": self.config_version,
            "typeId": self.type_id,
            "ownerId": self.owner_id,
            "dependsOn": list(self.depends_on),
            "fields": dict(self.fields),
            "links": [link.to_dict() for link in self.links],
            "documents": [doc.to_dict() for doc in self.documents],
            "labels": list(self.labels),
            "metricSources": {
                name: source.to_dict()
                for name, source in (self.metric_sources or {}).items()
            },
            "tribe": self.tribe,
            "squad": self.squad,
        }


@dataclass
class ComponentDTO:
    """A complete component descriptor."""

    api_version: str = ""
    kind: str = ""
    metadata: Metadata = field(default_factory=Metadata)
    spec: Spec = field(default_factory=Spec)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ComponentDTO:
        """Build a descriptor from a parsed YAML or JSON mapping."""
        return cls(
            api_version=_str(data, "apiVersion"),
            kind=_str(data, "kind"),
            metadata=Metadata.from_dict(data.get("metadata") or {}),
            spec=Spec.from_dict(data.get("spec") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the descriptor as a plain mapping using the file's key names."""
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self.metadata.to_dict(),
            "spec": self.spec.to_dict(),
        }


def get_component_unique_key(component: ComponentDTO) -> str:
    """Key under which a component is indexed."""
    return component.spec.name


def get_metric_source_unique_key(metric_source: MetricSourceDTO) -> str:
    """Key under which a metric source is indexed."""
    return metric_source.name


def from_state_to_config(state: ComponentDTO, conf: ComponentDTO) -> None:
    """Carry the remotely assigned parts of a state component over to its config."""
    conf.spec.id = state.spec.id
    conf.spec.metric_sources = state.spec.metric_sources
    conf.spec.owner_id = state.spec.owner_id


def is_equal_links(l1: list[Link], l2: list[Link]) -> bool:
    """Compare link lists as sets, ignoring chat channels missing from the first."""
    if len(l1) != len(l2):
        return False
    known = set(l1)
    # Chat channels are filled in while applying, so they never count as drift.
    return all(link.type == CHAT_CHANNEL or link in known for link in l2)


def is_equal_labels(l1: list[str], l2: list[str]) -> bool:
    """Compare labels in order."""
    return list(l1) == list(l2)


def is_equal_depends_on(d1: list[str], d2: list[str]) -> bool:
    """Compare dependency names in order."""
    return list(d1) == list(d2)


def is_equal_fields(f1: Mapping[str, Any], f2: Mapping[str, Any]) -> bool:
    """Compare custom field mappings; a missing key reads as None."""
    if len(f1) != len(f2):
        return False
    return all(f2.get(key) == value for key, value in f1.items())


def is_equal_component(c1: ComponentDTO, c2: ComponentDTO) -> bool:
    """Whether two components hold the same user-managed configuration."""
    s1, s2 = c1.spec, c2.spec
    return (
        s1.name == s2.name
        and s1.description == s2.description
        and s1.config_version == s2.config_version
        and s1.type_id == s2.type_id
        and s1.owner_id == s2.owner_id
        and is_equal_links(s1.links, s2.links)
        and is_equal_labels(s1.labels, s2.labels)
        and is_equal_depends_on(s1.depends_on, s2.depends_on)
        and is_equal_fields(s1.fields, s2.fields)
    )


def sort_and_remove_duplicate_documents(documents: list[Document]) -> list[Document]:
    """Drop documents repeating title, URL and type (last wins); sort by title."""
    if not documents:
        return documents
    unique: dict[tuple[str, str, str], Document] = {}
    for doc in documents:
        unique[(doc.title, doc.url, doc.type)] = doc
    return sorted(unique.values(), key=lambda doc: doc.title)