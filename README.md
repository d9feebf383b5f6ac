# ofcatalog

`ofcatalog` keeps a catalog of software components in step with their
configuration. You hand it components that have already been sorted into
created, updated, deleted and unchanged. It applies each change through a
repository object that you supply. It can also compute metric values from a
component's metric sources and push them to the catalog.

## Installation

```
pip install ofcatalog
```

To run the test suite:

```
pip install "ofcatalog[test]"
pytest
```

## Modules

- `ofcatalog.dtos` holds the component model: `ComponentDTO`, `Metadata`,
  `Spec`, `Link`, `Document` and `MetricSourceDTO`.
  - `ComponentDTO.from_dict()` and `ComponentDTO.to_dict()` convert to and
    from the plain mapping form with camel-case keys (`apiVersion`,
    `typeId`, `metricSources`, ...).
  - `is_equal_component` compares name, description, config version, type,
    owner, links, labels, dependencies and custom fields.
  - `is_equal_links` compares links as sets. Links in the second list of type
    `CHAT_CHANNEL` are not counted as differences.
  - The other helpers are `is_equal_labels`, `is_equal_depends_on`,
    `is_equal_fields`, `from_state_to_config`,
    `sort_and_remove_duplicate_documents`, `get_component_unique_key` and
    `get_metric_source_unique_key`. `from_state_to_config` copies the id,
    metric sources and owner id from state into configuration.
- `ofcatalog.converter`: `ComponentConverter(slug_for, github=None)` turns a
  `ComponentDTO` into the `ComponentResource` that is sent to the catalog.
  - The slug comes from `slug_for(name, type_id)`.
  - An empty description is taken from `github.get_repo_description()`. If no
    GitHub source was given, or the lookup fails, it becomes
    `"Component <name>"`.
  - Links are deduplicated by name, type and URL.
  - Related functions: `links_to_resources`, `metric_sources_to_resources`
    (drops facts) and `metric_source_to_resource` (keeps facts).
- `ofcatalog.apply`: `ApplyHandler` has `handle_created`, `handle_updated`,
  `handle_unchanged` and `handle_deleted`. Along the way it does the
  following:
  - `handle_owner` resolves the owner from tribe and squad and merges the
    owner's chat-channel and project links.
  - `handle_description` fills in descriptions.
  - `handle_documentation` and `handle_documents` merge discovered documents
    and add, update or remove them.
  - `handle_dependencies` sets and unsets dependencies.
  - `handle_api_specification` uploads the first `openapi`/`swagger` file
    found. It looks in the repository root, then in `docs`, `doc`, `.of` and
    `openapi`.

  Newly created components always depend on `kubernetes`. Discovered
  documents get their type from the handler's `document_types` mapping,
  keyed by lower-cased title, and otherwise the type `OTHER`.
- `ofcatalog.compute`: `ComputeHandler.compute(components, component_name,
  compute_all, metric_name)` runs a metric source's facts through a processor
  and pushes the value with the current UTC time. It returns the values that
  were pushed.
  - With `compute_all=False` any failure is raised.
  - With `compute_all=True` a failing metric is logged and skipped.

## Example

```python
from ofcatalog.dtos import ComponentDTO, is_equal_component
from ofcatalog.converter import ComponentConverter

component = ComponentDTO.from_dict({
    "apiVersion": "v1",
    "kind": "Component",
    "metadata": {"name": "checkout", "componentType": "service"},
    "spec": {
        "name": "checkout",
        "typeId": "SERVICE",
        "description": "Checkout service",
        "links": [{"name": "repo", "type": "REPOSITORY", "url": "https://example.com/checkout"}],
    },
})

converter = ComponentConverter(slug_for=lambda name, type_id: f"svc-{name}")
resource = converter.to_resource(component)
print(resource.slug, resource.description)  # svc-checkout Checkout service

assert is_equal_component(component, ComponentDTO.from_dict(component.to_dict()))
```

The handlers work with collaborators that you pass in: a GitHub source, a
repository, an owner source, a document source and a fact processor. Any
object that has the methods the handlers call will do, so in-memory fakes
work well.

## Errors

- `APISpecificationNotFoundError` is raised by
  `ApplyHandler.remote_api_specification` when no specification file exists.
  `handle_api_specification` catches it and skips the upload.
- `ComponentNotFoundError` and `MetricSourceNotFoundError` are raised by
  `ComputeHandler`. Both are subclasses of `ComputeError`. Failures while
  processing facts or pushing a value are raised as `ComputeError`.
- Errors from the repository on create, update and delete propagate. Errors
  while syncing documents, dependencies and API specifications are logged.

## What it does not do

- There is no command-line tool.
- The package does not read or write configuration or state files.
- It does not decide which components were created, updated, deleted or left
  unchanged. It applies changes that have already been classified.
- It contains no clients for GitHub, the catalog, owner lookup or
  documentation, and it has no fact processor. All of these must be supplied
  by the caller.