"""Reconciliation of configured components against the catalogue state."""

from __future__ import annotations

import logging
import posixpath
from typing import Any, Mapping, Protocol

from ofcatalog.converter import ComponentConverter, ComponentResource, DocumentResource
from ofcatalog.dtos import CHAT_CHANNEL, ComponentDTO, Document, Link, MetricSourceDTO

logger = logging.getLogger(__name__)

PROJECT = "PROJECT"
DEFAULT_DEPENDENCY = "kubernetes"
DEFAULT_DOCUMENT_TYPE = "OTHER"

API_SPEC_LOCATIONS = ("", "docs", "doc", ".of", "openapi")
API_SPEC_FILE_NAMES = (
    "openapi.yaml",
    "openapi.yml",
    "openapi.json",
    "swagger.yaml",
    "swagger.yml",
    "swagger.json",
)


class APISpecificationNotFoundError(LookupError):
    """No API specification file exists in any of the known locations."""


class GitHubSource(Protocol):
    def get_repo_description(self, repo: str) -> str: ...

    def get_file_content(self, repo: str, path: str) -> str: ...


class Owner(Protocol):
    owner_id: str
    slack_channels: Mapping[str, str]
    projects: Mapping[str, str]


class OwnerSource(Protocol):
    def get_owner_by_tribe_and_squad(self, tribe: str, squad: str) -> Owner: ...


class DocumentSource(Protocol):
    def get_documents(self, component_name: str) -> Mapping[str, str]: ...


class ComponentRepository(Protocol):
    def create(self, component: ComponentResource) -> ComponentResource: ...

    def update(self, component: ComponentResource) -> ComponentResource: ...

    def delete(self, component: ComponentResource) -> None: ...

    def set_dependency(self, dependent: ComponentResource, provider: ComponentResource) -> None: ...

    def unset_dependency(self, dependent: ComponentResource, provider: ComponentResource) -> None: ...

    def add_document(self, component: ComponentResource, document: DocumentResource) -> DocumentResource: ...

    def update_document(self, component: ComponentResource, document: DocumentResource) -> None: ...

    def remove_document(self, component: ComponentResource, document: DocumentResource) -> None: ...

    def set_api_specifications(self, component: ComponentResource, specs: str, specs_file: str) -> None: ...


def _links_from_resource(resource: ComponentResource) -> list[Link]:
    return [
        Link(id=link.id, name=link.name, type=link.type, url=link.url)
        for link in resource.links
    ]


class ApplyHandler:
    """Creates, updates and deletes components so the catalogue matches configuration."""

    def __init__(
        self,
        github: GitHubSource,
        repository: ComponentRepository,
        owner: OwnerSource,
        document: DocumentSource,
        converter: ComponentConverter,
    ) -> None:
        self._github = github
        self._repository = repository
        self._owner = owner
        self._document = document
        self._converter = converter
        # Document types by lower-cased title; titles not listed get the default type.
        self.document_types: dict[str, str] = {}

    def handle_deleted(self, components: Mapping[str, ComponentDTO]) -> None:
        """Delete every given component from the catalogue."""
        for component in components.values():
            self._repository.delete(self._converter.to_resource(component))

    def handle_unchanged(
        self,
        result: list[ComponentDTO],
        components: Mapping[str, ComponentDTO],
        state_components: Mapping[str, ComponentDTO],
    ) -> list[ComponentDTO]:
        """Refresh unchanged components, keeping metric sources and facts from state."""
        for component in components.values():
            component = self.handle_owner(component)
            component = self.handle_description(component)
            component = self.handle_documentation(component, state_components)

            state = state_components.get(component.metadata.name)
            if state is not None and state.spec.metric_sources is not None:
                component.spec.metric_sources = {
                    name: MetricSourceDTO(
                        id=source.id,
                        name=source.name,
                        metric=source.metric,
                        facts=source.facts,
                    )
                    for name, source in state.spec.metric_sources.items()
                }

            result.append(component)
            self.handle_dependencies(component, state_components)
            self.handle_api_specification(component)
        return result

    def handle_created(
        self,
        result: list[ComponentDTO],
        components: Mapping[str, ComponentDTO],
        state_components: Mapping[str, ComponentDTO],
    ) -> list[ComponentDTO]:
        """Create new components and record what the catalogue assigned to them."""
        for component in components.values():
            component = self.handle_owner(component)
            component = self.handle_description(component)

            created = self._repository.create(self._converter.to_resource(component))

            for provider_name in component.spec.depends_on:
                provider = state_components.get(provider_name)
                if provider is None:
                    logger.warning(
                        "Provider %s not found for component %s",
                        provider_name,
                        component.spec.name,
                    )
                    continue
                try:
                    self._repository.set_dependency(
                        created, self._converter.to_resource(provider)
                    )
                except Exception as exc:
                    logger.error("apply dependencies: %s", exc)

            component.spec.id = created.id
            component.spec.slug = created.slug
            component.spec.links = _links_from_resource(created)

            if component.spec.metric_sources is None:
                component.spec.metric_sources = {}
            for name, source in created.metric_sources.items():
                component.spec.metric_sources[name] = MetricSourceDTO(
                    id=source.id, name=source.name, metric=source.metric, facts=[]
                )

            if DEFAULT_DEPENDENCY not in component.spec.depends_on:
                component.spec.depends_on.append(DEFAULT_DEPENDENCY)

            result.append(component)
            self.handle_dependencies(component, state_components)
            self.handle_api_specification(component)
        return result

    def handle_updated(
        self,
        result: list[ComponentDTO],
        components: Mapping[str, ComponentDTO],
        state_components: Mapping[str, ComponentDTO],
    ) -> list[ComponentDTO]:
        """Push changed components, preserving the facts of existing metric sources."""
        for component in components.values():
            component = self.handle_owner(component)
            component = self.handle_description(component)
            component = self.handle_documentation(component, state_components)

            updated = self._repository.update(self._converter.to_resource(component))

            component.spec.id = updated.id
            component.spec.links = _links_from_resource(updated)

            if component.spec.metric_sources is None:
                component.spec.metric_sources = {}
            sources = component.spec.metric_sources

            state = state_components.get(component.metadata.name)
            if state is not None and state.spec.metric_sources is not None:
                for name, source in list(state.spec.metric_sources.items()):
                    sources[name] = MetricSourceDTO(
                        id=source.id,
                        name=source.name,
                        metric=source.metric,
                        facts=source.facts,
                    )
                for name, source in updated.metric_sources.items():
                    existing = sources.get(name)
                    if existing is not None:
                        existing.id = source.id
                        existing.name = source.name
                        existing.metric = source.metric
                    else:
                        sources[name] = MetricSourceDTO(
                            id=source.id, name=source.name, metric=source.metric, facts=[]
                        )
            else:
                for name, source in updated.metric_sources.items():
                    sources[name] = MetricSourceDTO(
                        id=source.id, name=source.name, metric=source.metric, facts=[]
                    )

            self.handle_dependencies(component, state_components)
            result.append(component)
            self.handle_api_specification(component)
        return result

    def handle_owner(self, component: ComponentDTO) -> ComponentDTO:
        """Resolve the owner from tribe and squad and merge the owner's links."""
        spec = component.spec
        if not (spec.tribe and spec.squad):
            logger.warning(
                "Tribe or Squad not set for component %s (tribe: '%s', squad: '%s')",
                spec.name,
                spec.tribe,
                spec.squad,
            )
            return component

        try:
            owner = self._owner.get_owner_by_tribe_and_squad(spec.tribe, spec.squad)
        except Exception as exc:
            logger.warning(
                "Owner lookup failed for tribe '%s', squad '%s': %s",
                spec.tribe,
                spec.squad,
                exc,
            )
            return component

        if spec.owner_id and spec.owner_id != owner.owner_id:
            logger.info(
                "Updating OwnerID for %s from %s to %s (squad: %s)",
                spec.name,
                spec.owner_id,
                owner.owner_id,
                spec.squad,
            )
        elif not spec.owner_id:
            logger.info(
                "Setting OwnerID for %s to %s (squad: %s)",
                spec.name,
                owner.owner_id,
                spec.squad,
            )
        spec.owner_id = owner.owner_id

        links: dict[str, Link] = {link.type + link.name: link for link in spec.links}
        for channel, url in owner.slack_channels.items():
            links[CHAT_CHANNEL + channel] = Link(name=channel, type=CHAT_CHANNEL, url=url)
        for project, url in owner.projects.items():
            links[PROJECT + project] = Link(name=project, type=PROJECT, url=url)
        spec.links = list(links.values())
        return component

    def handle_description(self, component: ComponentDTO) -> ComponentDTO:
        """Fill an empty description from the repository, or a generic one."""
        spec = component.spec
        if spec.description:
            return component
        try:
            description = self._github.get_repo_description(component.metadata.name)
        except Exception as exc:
            logger.warning(
                "Could not get repository description for %s: %s",
                component.metadata.name,
                exc,
            )
            spec.description = f"Component {spec.name}"
        else:
            logger.info(
                "Setting description for %s from repository: %s", spec.name, description
            )
            spec.description = description
        return component

    def handle_documents(
        self,
        component: ComponentDTO,
        state_components: Mapping[str, ComponentDTO],
    ) -> ComponentDTO:
        """Add, update and remove documents so the catalogue matches the component."""
        state = state_components.get(component.metadata.name)
        state_docs = {doc.title: doc for doc in (state.spec.documents if state else [])}
        wanted_docs = {doc.title: doc for doc in component.spec.documents}
        result: dict[str, Document] = {}

        for title, doc in state_docs.items():
            if title not in wanted_docs:
                try:
                    self._repository.remove_document(
                        self._converter.to_resource(component),
                        DocumentResource(title=doc.title, type=doc.type, url=doc.url),
                    )
                except Exception as exc:
                    logger.error("apply documents: %s", exc)
                continue
            result[title] = doc

        for title, doc in wanted_docs.items():
            known = state_docs.get(title)
            if known is None:
                try:
                    added = self._repository.add_document(
                        self._converter.to_resource(component),
                        DocumentResource(title=doc.title, type=doc.type, url=doc.url),
                    )
                except Exception as exc:
                    logger.error("apply documents: %s", exc)
                    doc.id, doc.documentation_category_id = "", ""
                else:
                    doc.id = added.id
                    doc.documentation_category_id = added.documentation_category_id
                result[title] = doc
                continue

            if doc.url != known.url:
                try:
                    self._repository.update_document(
                        self._converter.to_resource(component),
                        DocumentResource(
                            id=known.id, title=doc.title, type=doc.type, url=doc.url
                        ),
                    )
                except Exception as exc:
                    logger.error("apply documents: %s", exc)
                doc.id = known.id
                doc.documentation_category_id = known.documentation_category_id
                result[title] = doc

        component.spec.documents = list(result.values())
        return component

    def handle_dependencies(
        self,
        component: ComponentDTO,
        state_components: Mapping[str, ComponentDTO],
    ) -> None:
        """Set and unset dependencies that differ from the recorded state."""
        state = state_components.get(component.metadata.name)
        if state is None:
            return

        for provider_name in state.spec.depends_on:
            if provider_name in component.spec.depends_on:
                continue
            provider = state_components.get(provider_name)
            if provider is None:
                logger.warning(
                    "Provider %s not found in state for component %s",
                    provider_name,
                    component.spec.name,
                )
                continue
            try:
                self._repository.unset_dependency(
                    self._converter.to_resource(component),
                    self._converter.to_resource(provider),
                )
            except Exception as exc:
                logger.error("apply dependencies: %s", exc)

        for provider_name in component.spec.depends_on:
            if provider_name in state.spec.depends_on:
                continue
            provider = state_components.get(provider_name)
            if provider is None:
                logger.warning(
                    "Provider %s not found for component %s",
                    provider_name,
                    component.spec.name,
                )
                continue
            try:
                self._repository.set_dependency(
                    self._converter.to_resource(component),
                    self._converter.to_resource(provider),
                )
            except Exception as exc:
                logger.error("apply dependencies: %s", exc)

    def handle_documentation(
        self,
        component: ComponentDTO,
        state_components: Mapping[str, ComponentDTO],
    ) -> ComponentDTO:
        """Merge remotely discovered documents into the component and sync them."""
        try:
            documents = self._document.get_documents(component.spec.name)
        except Exception:
            return component

        merged: dict[str, Document] = {doc.title: doc for doc in component.spec.documents}
        for title, url in documents.items():
            merged[title] = Document(
                title=title, type=self.determine_document_type(title, url), url=url
            )
        component.spec.documents = list(merged.values())
        return self.handle_documents(component, state_components)

    def determine_document_type(self, title: str, url: str) -> str:
        """Document type for a discovered document, by title, defaulting to OTHER."""
        key = title.strip().lower()
        return self.document_types.get(key, DEFAULT_DOCUMENT_TYPE)

    def handle_api_specification(self, component: ComponentDTO) -> None:
        """Upload the repository's API specification when one exists."""
        try:
            specs, specs_file = self.remote_api_specification(component.spec.name)
        except APISpecificationNotFoundError:
            return
        try:
            self._repository.set_api_specifications(
                self._converter.to_resource(component), specs, specs_file
            )
        except Exception as exc:
            logger.error("apply api specifications error: %s", exc)

    def remote_api_specification(self, repo: str) -> tuple[str, str]:
        """Return the content and path of the first API specification found."""
        for folder in API_SPEC_LOCATIONS:
            for file_name in API_SPEC_FILE_NAMES:
                location = posixpath.join(folder, file_name)
                try:
                    content: Any = self._github.get_file_content(repo, location)
                except Exception:
                    continue
                return content, location
        raise APISpecificationNotFoundError("no API specification found")