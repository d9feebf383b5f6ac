from ofcatalog.converter import (
    ComponentConverter,
    LinkResource,
    MetricSourceResource,
    links_to_resources,
    metric_source_to_resource,
    metric_sources_to_resources,
)
from ofcatalog.dtos import ComponentDTO, Link, Metadata, MetricSourceDTO, Spec


def fake_slug(name, type_id):
    return f"{type_id}:{name}"


class FakeGitHub:
    def __init__(self, description=None, error=None):
        self.description = description
        self.error = error
        self.calls = []

    def get_repo_description(self, repo):
        self.calls.append(repo)
        if self.error is not None:
            raise self.error
        return self.description


def _component(description="", **spec_kwargs):
    return ComponentDTO(
        metadata=Metadata(name="repo-name", component_type="service"),
        spec=Spec(name="svc", description=description, type_id="SERVICE", **spec_kwargs),
    )


def test_to_resource_copies_spec():
    component = _component(
        description="given",
        id="id-1",
        owner_id="owner-1",
        config_version=2,
        labels=["x"],
        fields={"k": "v"},
    )
    resource = ComponentConverter(fake_slug).to_resource(component)
    assert resource.id == "id-1"
    assert resource.name == "svc"
    assert resource.slug == fake_slug("svc", "SERVICE")
    assert resource.description == "given"
    assert resource.owner_id == "owner-1"
    assert resource.config_version == 2
    assert resource.labels == ["x"]
    assert resource.fields == {"k": "v"}
    assert resource.metric_sources == {}


def test_description_fallback_without_github():
    resource = ComponentConverter(fake_slug).to_resource(_component())
    assert resource.description == "Component svc"


def test_description_from_github():
    github = FakeGitHub(description="from repo")
    resource = ComponentConverter(fake_slug, github).to_resource(_component())
    assert resource.description == "from repo"
    assert github.calls == ["repo-name"]


def test_description_github_error_falls_back():
    github = FakeGitHub(error=RuntimeError("boom"))
    resource = ComponentConverter(fake_slug, github).to_resource(_component())
    assert resource.description == "Component svc"


def test_existing_description_skips_github():
    github = FakeGitHub(description="from repo")
    resource = ComponentConverter(fake_slug, github).to_resource(_component("kept"))
    assert resource.description == "kept"
    assert github.calls == []


def test_links_deduplicated_without_ids():
    links = [
        Link(id="1", name="a", type="PROJECT", url="u"),
        Link(id="2", name="a", type="PROJECT", url="u"),
        Link(id="3", name="b", type="PROJECT", url="u"),
    ]
    result = links_to_resources(links)
    assert result == [
        LinkResource(name="a", type="PROJECT", url="u"),
        LinkResource(name="b", type="PROJECT", url="u"),
    ]


def test_metric_sources_drop_facts():
    sources = {"cov": MetricSourceDTO(id="1", name="svc-cov", metric="m", facts=[{"id": "f"}])}
    result = metric_sources_to_resources(sources)
    assert result == {"cov": MetricSourceResource(id="1", name="svc-cov", metric="m")}
    assert metric_sources_to_resources(None) == {}


def test_metric_source_keeps_facts():
    facts = [{"id": "f"}]
    result = metric_source_to_resource(MetricSourceDTO(id="1", name="n", metric="m", facts=facts))
    assert result.facts == facts
    assert (result.id, result.name, result.metric) == ("1", "n", "m")